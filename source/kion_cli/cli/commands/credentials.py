# ABOUTME: Commands printing temporary AWS credentials
# ABOUTME: "credentials" for people and scripts, "credential-process" for the AWS CLI

"""Credentials commands - Print temporary credentials."""

import json

from cleo.helpers import option

from kion_cli.cli.commands.base import KionCommand, account_role_options
from kion_cli.cli.utils.display import CREDENTIAL_FORMATS, credential_process_output, format_credentials
from kion_cli.config import Settings
from kion_cli.errors import InvalidArgument
from kion_cli.session import SessionSelector


class CredentialsCommand(KionCommand):
    name = "credentials"
    description = "Print temporary credentials"
    aliases = ["creds"]

    options = [
        *account_role_options(),
        option(
            "format",
            "f",
            description=f"Output format ({', '.join(CREDENTIAL_FORMATS)})",
            flag=False,
            default="aws",
        ),
    ]

    def handle_command(self, settings: Settings) -> int:
        output_format = self.option("format")
        if output_format not in CREDENTIAL_FORMATS:
            raise InvalidArgument(f"invalid value for --format: {output_format}")

        settings = self.account_role_settings(settings)
        account_id = settings.require("account-id")
        cloud_access_role = settings.require("cloud-access-role")

        entry = SessionSelector(settings).temporary_credentials(account_id, cloud_access_role)
        self.line(format_credentials(entry.credentials, output_format))
        return 0


class CredentialProcessCommand(KionCommand):
    name = "credential-process"
    description = "Credential process for the AWS CLI"

    options = account_role_options()

    def handle_command(self, settings: Settings) -> int:
        settings = self.account_role_settings(settings)
        account_id = settings.require("account-id")
        cloud_access_role = settings.require("cloud-access-role")

        entry = SessionSelector(settings).temporary_credentials(account_id, cloud_access_role)
        self.line(json.dumps(credential_process_output(entry)))
        return 0
