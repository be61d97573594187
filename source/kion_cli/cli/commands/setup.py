# ABOUTME: Interactive setup wizard for kion-cli
# ABOUTME: Writes config.json and either an App API Key or a keyring password

"""Setup command - Interactive setup wizard."""

import logging
from datetime import timedelta

import questionary
from rich.console import Console
from rich.panel import Panel

from kion_cli import keyring_store
from kion_cli.cli.commands.base import KionCommand
from kion_cli.cli.utils.prompts import answer, ask_password
from kion_cli.cli.utils.validators import validate_duration, validate_host
from kion_cli.client import get_idmss, login
from kion_cli.config import Settings, format_duration, parse_duration
from kion_cli.errors import InvalidCredentials, KionError
from kion_cli.keys import APP_API_KEY_NAME, KeyManager

logger = logging.getLogger(__name__)

DEFAULT_APP_API_KEY_DURATION = timedelta(hours=168)
DEFAULT_SESSION_DURATION = timedelta(minutes=60)


class SetupCommand(KionCommand):
    name = "setup"
    description = "Interactive setup wizard"

    def handle_command(self, settings: Settings) -> int:
        console = Console()

        welcome = Panel.fit(
            "[bold cyan]Welcome to kion-cli setup![/bold cyan]\n\n"
            "This wizard will configure:\n"
            "  • The Kion host and identity management system you sign in with\n"
            "  • How your credentials are stored",
            border_style="cyan",
            padding=(1, 2),
        )
        console.print(welcome)

        if settings.config_file.exists():
            overwrite = answer(
                questionary.confirm(f"Configuration exists at {settings.config_file}. Overwrite it?", default=False)
            )
            if not overwrite:
                console.print("[yellow]Setup cancelled; existing configuration kept.[/yellow]")
                return 0

        console.print("\n[bold blue]Step 1: Kion Host[/bold blue]")
        console.print("─" * 30)
        host = answer(
            questionary.text(
                "Enter your Kion host:",
                validate=lambda x: validate_host(x) or "Invalid host (e.g., kion.example.com)",
                default=settings.host or "",
            )
        )
        host = host.replace("https://", "").replace("http://", "").strip("/")

        idms = self._select_idms(console, host)

        console.print("\n[bold blue]Step 2: Credentials[/bold blue]")
        console.print("─" * 30)
        username = answer(
            questionary.text(
                "Username:",
                validate=lambda x: bool(x.strip()) or "Username is required",
                default=settings.username or "",
            )
        )

        while True:
            password = ask_password("Password:")
            try:
                client = login(host, idms, username, password)
            except InvalidCredentials:
                console.print("[yellow]Invalid credentials[/yellow]")
                continue
            break

        console.print("\nChoose how kion-cli authenticates:")
        console.print("  • [cyan]App API Key[/cyan]: A key created now and stored in the config directory")
        console.print("  • [cyan]Keyring[/cyan]: Your password, kept in OS secure storage\n")
        use_key = answer(
            questionary.select(
                "Select authentication method:",
                choices=[
                    questionary.Choice("App API Key", value=True),
                    questionary.Choice("Keyring (Secure OS storage)", value=False),
                ],
            )
        )

        rotate = False
        key_duration = settings.app_api_key_duration
        if use_key:
            rotate = answer(
                questionary.confirm("Rotate the App API Key automatically before it expires?", default=True)
            )
            key_duration = parse_duration(
                answer(
                    questionary.text(
                        "App API Key lifetime configured on the platform:",
                        validate=validate_duration,
                        default=format_duration(key_duration or DEFAULT_APP_API_KEY_DURATION),
                    )
                )
            )

        session_duration = parse_duration(
            answer(
                questionary.text(
                    "How long to reuse temporary credentials:",
                    validate=validate_duration,
                    default=format_duration(DEFAULT_SESSION_DURATION),
                )
            )
        )

        settings = settings.with_overrides(
            host=host,
            idms=idms,
            username=username,
            app_api_key_duration=key_duration,
            rotate_app_api_keys=rotate,
            session_duration=session_duration,
        )
        settings.save()
        console.print(f"\n[green]✓ Configuration saved to {settings.config_file}[/green]")

        manager = KeyManager.from_settings(settings)
        if use_key:
            key = manager.create(client, APP_API_KEY_NAME, force=True)
            console.print(f"[green]✓ App API key created; expires {key.expiry:%Y-%m-%d %H:%M %Z}[/green]")
        else:
            keyring_store.set_password(host, idms, username, password)
            console.print("[green]✓ Password saved to the system keyring[/green]")
            # A stored key would still take precedence over the keyring password
            if settings.key_file.exists():
                manager.remove()
                console.print(f"[yellow]Removed previous App API key file {settings.key_file}[/yellow]")
        return 0

    def _select_idms(self, console: Console, host: str) -> int:
        idmss = get_idmss(host)
        logger.debug("Found %d identity management systems on %s", len(idmss), host)
        if not idmss:
            raise KionError(f"no identity management systems found on {host}")
        if len(idmss) == 1:
            console.print(f"Using identity management system [cyan]{idmss[0].name}[/cyan]")
            return idmss[0].id
        return answer(
            questionary.select(
                "Select your identity management system:",
                choices=[questionary.Choice(i.name, value=i.id) for i in idmss],
            )
        )
