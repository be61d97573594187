# ABOUTME: Commands managing the App API Key
# ABOUTME: "key create" provisions it with the user's password, "key rotate" replaces it

"""Key commands - Manage the App API Key."""

from cleo.helpers import option
from rich.console import Console

from kion_cli.cli.commands.base import KionCommand
from kion_cli.cli.utils.prompts import stored_or_prompted_password
from kion_cli.client import Client, login
from kion_cli.config import Settings
from kion_cli.errors import KeyAlreadyExists, MissingConfiguration
from kion_cli.keys import APP_API_KEY_NAME, KeyManager


class KeyCreateCommand(KionCommand):
    name = "key create"
    description = "Create the App API Key"

    options = [
        option("force", "f", description="Overwrite existing key", flag=True),
    ]

    def handle_command(self, settings: Settings) -> int:
        force = self.option("force")
        manager = KeyManager.from_settings(settings)
        host = settings.require("host")
        idms = settings.require("idms")
        username = settings.require("username")
        settings.require("app-api-key-duration")

        # Fail before prompting for a password when a key is already stored
        if not force and manager.load() is not None:
            raise KeyAlreadyExists()

        password = stored_or_prompted_password(host, idms, username)
        client = login(host, idms, username, password)
        key = manager.create(client, APP_API_KEY_NAME, force=force)

        Console().print(f"[green]✓ App API key created; expires {key.expiry:%Y-%m-%d %H:%M %Z}[/green]")
        return 0


class KeyRotateCommand(KionCommand):
    name = "key rotate"
    description = "Rotate the App API Key"

    def handle_command(self, settings: Settings) -> int:
        manager = KeyManager.from_settings(settings)
        host = settings.require("host")

        key = manager.load()
        if key is None:
            raise MissingConfiguration("key", 'no app API key; run "kion key create"')

        key = manager.rotate(Client.with_app_api_key(host, key.key), key)
        Console().print(f"[green]✓ App API key rotated; expires {key.expiry:%Y-%m-%d %H:%M %Z}[/green]")
        return 0
