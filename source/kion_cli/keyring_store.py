# ABOUTME: System keyring storage for user passwords
# ABOUTME: One entry per (host, IDMS) service and username

"""Password storage in the system keyring."""

import logging

import keyring
from keyring.errors import PasswordDeleteError

from kion_cli.errors import NoStoredCredential

logger = logging.getLogger(__name__)


def keyring_service(host: str, idms: int) -> str:
    return f"{host}/{idms}"


def get_password(host: str, idms: int, username: str) -> str:
    """Return the stored password, raising NoStoredCredential if there is none."""
    service = keyring_service(host, idms)
    password = keyring.get_password(service, username)
    if password is None:
        raise NoStoredCredential(service, username)

    logger.debug("Read password for %s from keyring service %s", username, service)
    return password


def set_password(host: str, idms: int, username: str, password: str) -> None:
    service = keyring_service(host, idms)
    keyring.set_password(service, username, password)
    logger.debug("Stored password for %s in keyring service %s", username, service)


def delete_password(host: str, idms: int, username: str) -> None:
    service = keyring_service(host, idms)
    try:
        keyring.delete_password(service, username)
    except PasswordDeleteError as e:
        raise NoStoredCredential(service, username) from e

    logger.debug("Deleted password for %s from keyring service %s", username, service)
