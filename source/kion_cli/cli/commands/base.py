# ABOUTME: Base class shared by all kion commands
# ABOUTME: Loads settings, configures logging and renders errors with remediation hints

"""Base command for kion-cli."""

import logging
import os
import sys

import requests
from cleo.commands.command import Command
from cleo.helpers import option

from kion_cli.cli.utils.display import explain_error, print_error
from kion_cli.cli.utils.validators import duration_option
from kion_cli.config import Settings
from kion_cli.errors import CommandFailed, KionError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Log to stderr; WARNING unless --debug or KION_DEBUG is set."""
    debug = debug or os.environ.get("KION_DEBUG", "").lower() in ("true", "1", "yes", "y")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def account_role_options():
    """Options naming the account/role pair and the trust window of its credentials."""
    return [
        option("account-id", description="AWS account ID", flag=False),
        option("cloud-access-role", description="Cloud access role", flag=False),
        option(
            "session-duration",
            description="Duration of temporary credentials (default: session-duration setting or 1h)",
            flag=False,
        ),
    ]


class KionCommand(Command):
    """Command run against the settings of this invocation.

    Subclasses implement handle_command(); errors from the core are shown
    as one line on stderr instead of a traceback.
    """

    def handle(self) -> int:
        configure_logging(bool(self.io.input.options.get("debug")))

        try:
            settings = Settings.load()
            return self.handle_command(settings) or 0
        except CommandFailed as e:
            print_error(str(e))
            return e.returncode
        except (KionError, requests.RequestException) as e:
            logger.debug("%s failed", self.name, exc_info=True)
            program = self.application.name if self.application else "kion"
            print_error(explain_error(e, program))
            return 1

    def handle_command(self, settings: Settings) -> int | None:
        raise NotImplementedError

    def account_role_settings(self, settings: Settings) -> Settings:
        """Settings with --account-id, --cloud-access-role and --session-duration applied."""
        return settings.with_overrides(
            account_id=self.option("account-id"),
            cloud_access_role=self.option("cloud-access-role"),
            session_duration=duration_option("session-duration", self.option("session-duration")),
        )
