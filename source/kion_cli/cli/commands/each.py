# ABOUTME: Runs a shell command once per account/role pair read from stdin
# ABOUTME: Pairs are handled one after another so the credential cache is never contended

"""Each command - Run a command under many account/role pairs."""

import logging
import os
import subprocess
import sys

from cleo.helpers import argument, option

from kion_cli.cli.commands.base import KionCommand
from kion_cli.cli.utils.display import aws_environment
from kion_cli.cli.utils.validators import parse_account_role
from kion_cli.config import Settings
from kion_cli.errors import CommandFailed, InvalidArgument
from kion_cli.session import SessionSelector

logger = logging.getLogger(__name__)


class EachCommand(KionCommand):
    name = "each"
    description = "Run a command under each of the account-role pairs provided on stdin"

    arguments = [
        argument("args", description="Command to run; put it after -- when it has options", multiple=True),
    ]
    options = [
        option("shell", description="Shell with which to execute command (default: /bin/sh)", flag=False),
    ]

    def handle_command(self, settings: Settings) -> int:
        settings = settings.with_overrides(shell=self.option("shell"))
        shell = settings.require("shell")
        script = " ".join(self.argument("args"))

        # Validate every line before running anything
        pairs = []
        for line in self.io.input.stream or sys.stdin:
            if not line.strip():
                continue
            try:
                pairs.append(parse_account_role(line))
            except ValueError as e:
                raise InvalidArgument(str(e)) from e

        selector = SessionSelector(settings)
        for account_id, cloud_access_role in pairs:
            entry = selector.temporary_credentials(account_id, cloud_access_role)

            env = os.environ.copy()
            env.update(aws_environment(entry.credentials))

            logger.debug("Running command for %s/%s", account_id, cloud_access_role)
            result = subprocess.run([shell, "-c", script], env=env)
            if result.returncode != 0:
                raise CommandFailed(
                    f"command failed for {account_id} {cloud_access_role} (exit status {result.returncode})",
                    result.returncode,
                )
        return 0
