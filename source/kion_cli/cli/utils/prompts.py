# ABOUTME: Interactive prompts shared by login, key and setup commands
# ABOUTME: Wraps questionary so a cancelled prompt aborts the command

"""Interactive prompts."""

import questionary

from kion_cli import keyring_store
from kion_cli.errors import Cancelled, NoStoredCredential


def answer(question):
    """Answer of a questionary prompt; cancelling raises Cancelled."""
    result = question.ask()
    if result is None:  # User cancelled (Ctrl+C)
        raise Cancelled()
    return result


def ask_password(message: str) -> str:
    return answer(
        questionary.password(
            message,
            validate=lambda value: True if value else "Password is required",
        )
    )


def password_message(host: str, idms: int, username: str) -> str:
    return f"Password for '{username}' on '{host}' (IDMS {idms}):"


def stored_or_prompted_password(host: str, idms: int, username: str) -> str:
    """Password from the keyring, asking for it when none is stored."""
    try:
        return keyring_store.get_password(host, idms, username)
    except NoStoredCredential:
        return ask_password(password_message(host, idms, username))
