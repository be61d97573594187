# ABOUTME: Input validation functions for CLI commands
# ABOUTME: Validates hosts, durations and account/role lines read from stdin

"""Input validators for CLI commands."""

import re
from datetime import timedelta

from kion_cli.config import parse_duration
from kion_cli.errors import InvalidArgument


def validate_host(host: str) -> bool:
    """Validate a Kion host name.

    Valid formats:
    - kion.example.com
    - kion.example.com:8443

    The scheme is implied; the API is always reached over HTTPS.
    """
    if not host:
        return False

    pattern = r"^[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?)*(:\d{1,5})?$"
    return bool(re.match(pattern, host))


def validate_duration(value: str) -> bool | str:
    """Validate a duration answer such as "168h" or "60m".

    Returns:
        True if valid, error message if invalid
    """
    try:
        duration = parse_duration(value)
    except ValueError:
        return "Invalid duration (examples: 168h, 90m, 1h30m)"
    if duration <= timedelta(0):
        return "Duration must be positive"
    return True


def duration_option(name: str, value: str | None) -> timedelta | None:
    """Parse the value of a duration option, None when it was not given."""
    if value is None:
        return None
    result = validate_duration(value)
    if result is not True:
        raise InvalidArgument(f"invalid value for --{name}: {result}")
    return parse_duration(value)


def parse_account_role(line: str) -> tuple[str, str]:
    """Split an "<account id> <cloud access role>" line."""
    fields = line.split()
    if len(fields) != 2:
        raise ValueError(f"invalid (needs two fields, account ID and Cloud Access Role): {line.strip()}")
    return fields[0], fields[1]
