# ABOUTME: CLI commands for kion-cli
# ABOUTME: One module per command or command family

"""CLI commands for kion-cli."""

from .access import AccessCommand, AccountsCommand, RolesCommand
from .console import ConsoleCommand
from .credentials import CredentialProcessCommand, CredentialsCommand
from .each import EachCommand
from .key import KeyCreateCommand, KeyRotateCommand
from .login import LoginCommand, LogoutCommand
from .setup import SetupCommand

__all__ = [
    "SetupCommand",
    "LoginCommand",
    "LogoutCommand",
    "KeyCreateCommand",
    "KeyRotateCommand",
    "CredentialsCommand",
    "CredentialProcessCommand",
    "ConsoleCommand",
    "EachCommand",
    "RolesCommand",
    "AccountsCommand",
    "AccessCommand",
]
