# ABOUTME: Console command opening the AWS console for an account/role pair
# ABOUTME: Builds a federation sign-in URL from temporary credentials

"""Console command - Open the AWS console."""

import logging
import tempfile
import webbrowser
from pathlib import Path

from cleo.helpers import option

from kion_cli.cli.commands.base import KionCommand, account_role_options
from kion_cli.config import Settings
from kion_cli.federation import get_signin_token, logout_page, signin_url
from kion_cli.session import SessionSelector

logger = logging.getLogger(__name__)


class ConsoleCommand(KionCommand):
    name = "console"
    description = "Open the AWS console"

    options = [
        *account_role_options(),
        option("region", description="AWS region", flag=False),
        option("print", "p", description="Print URL instead of opening a browser", flag=True),
        option("logout", description="Log out of existing AWS console session", flag=True),
    ]

    def handle_command(self, settings: Settings) -> int:
        settings = self.account_role_settings(settings).with_overrides(region=self.option("region"))
        account_id = settings.require("account-id")
        cloud_access_role = settings.require("cloud-access-role")
        host = settings.require("host")
        region = settings.require("region")

        entry = SessionSelector(settings).temporary_credentials(account_id, cloud_access_role)
        url = signin_url(host, region, get_signin_token(entry.credentials))

        if self.option("print"):
            self.line(url)
        elif self.option("logout"):
            with tempfile.NamedTemporaryFile("w", suffix=".html", prefix="kion-console-", delete=False) as f:
                f.write(logout_page(url))
            logger.debug("Opening console logout page %s", f.name)
            webbrowser.open(Path(f.name).as_uri())
        else:
            webbrowser.open(url)
        return 0
