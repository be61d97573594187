# ABOUTME: Shared display utilities for consistent output formatting
# ABOUTME: Renders temporary credentials and user-facing error messages

"""Shared display utilities for consistent output formatting across commands."""

import json
from datetime import timezone
from typing import Any

from rich.console import Console
from rich.markup import escape

from kion_cli.cache import CachedCredential
from kion_cli.client import TemporaryCredentials
from kion_cli.errors import (
    ApplicationKeyExpired,
    ApplicationKeyUnauthorized,
    InvalidCredentials,
    NoStoredCredential,
)

CREDENTIAL_FORMATS = ("aws", "export", "json")


def format_credentials(credentials: TemporaryCredentials, output_format: str = "aws") -> str:
    """
    Format temporary credentials for printing.

    Args:
        credentials: The credentials to format
        output_format: "aws" for credentials-file lines, "export" for shell
            export statements, "json" for a JSON object

    Returns:
        The formatted text, without a trailing newline
    """
    if output_format == "aws":
        return "\n".join(
            [
                f"aws_access_key_id = {credentials.access_key_id}",
                f"aws_secret_access_key = {credentials.secret_access_key}",
                f"aws_session_token = {credentials.session_token}",
            ]
        )
    elif output_format == "export":
        return "\n".join(f"export {name}={value}" for name, value in aws_environment(credentials).items())
    elif output_format == "json":
        return json.dumps(
            {
                "access_key": credentials.access_key_id,
                "secret_access_key": credentials.secret_access_key,
                "session_token": credentials.session_token,
            }
        )
    raise ValueError(f"invalid format: {output_format}")


def aws_environment(credentials: TemporaryCredentials) -> dict[str, str]:
    return {
        "AWS_ACCESS_KEY_ID": credentials.access_key_id,
        "AWS_SECRET_ACCESS_KEY": credentials.secret_access_key,
        "AWS_SESSION_TOKEN": credentials.session_token,
    }


def credential_process_output(entry: CachedCredential) -> dict[str, Any]:
    """Output expected by the AWS CLI from a credential_process."""
    return {
        "Version": 1,
        "AccessKeyId": entry.credentials.access_key_id,
        "SecretAccessKey": entry.credentials.secret_access_key,
        "SessionToken": entry.credentials.session_token,
        "Expiration": entry.expiry.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


def explain_error(error: Exception, program: str = "kion") -> str:
    """Turn an error into the message shown to the user, with remediation where known."""
    if isinstance(error, NoStoredCredential):
        return (
            f'no credentials; run "{program} login" to store user credentials in the system keyring '
            f'or "{program} key create" to create an app API key'
        )
    if isinstance(error, InvalidCredentials):
        return f'login failed; run "{program} login" to update credentials'
    if isinstance(error, ApplicationKeyExpired):
        return f'app API key expired; run "{program} key create --force"'
    if isinstance(error, ApplicationKeyUnauthorized):
        return f'app API key rejected by the platform; run "{program} key create --force"'
    return str(error)


def print_error(message: str) -> None:
    console = Console(stderr=True, soft_wrap=True)
    console.print(f"[red]{escape(message)}[/red]")
