# ABOUTME: Login and logout commands managing the keyring password
# ABOUTME: Login re-prompts until the platform accepts the password

"""Login and logout commands."""

from rich.console import Console

from kion_cli import keyring_store
from kion_cli.cli.commands.base import KionCommand
from kion_cli.cli.utils.prompts import ask_password, password_message
from kion_cli.client import login
from kion_cli.config import Settings
from kion_cli.errors import InvalidCredentials


class LoginCommand(KionCommand):
    name = "login"
    description = "Save credentials to the system keyring"

    def handle_command(self, settings: Settings) -> int:
        console = Console()
        host = settings.require("host")
        idms = settings.require("idms")
        username = settings.require("username")

        while True:
            password = ask_password(password_message(host, idms, username))
            try:
                login(host, idms, username, password)
            except InvalidCredentials:
                console.print("[yellow]Invalid credentials[/yellow]")
                continue
            break

        keyring_store.set_password(host, idms, username, password)
        console.print(f"[green]✓ Credentials for '{username}' saved to the system keyring[/green]")
        return 0


class LogoutCommand(KionCommand):
    name = "logout"
    description = "Remove credentials from the system keyring"

    def handle_command(self, settings: Settings) -> int:
        host = settings.require("host")
        idms = settings.require("idms")
        username = settings.require("username")

        keyring_store.delete_password(host, idms, username)
        Console().print(f"[green]✓ Credentials for '{username}' removed from the system keyring[/green]")
        return 0
