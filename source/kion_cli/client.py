# ABOUTME: HTTP client for the Kion platform API and its response records
# ABOUTME: Handles bearer auth, the status/message/data envelope and error classification

"""Kion platform API client."""

import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import requests

from kion_cli.config import utcnow
from kion_cli.errors import (
    ApplicationKeyExpired,
    ApplicationKeyUnauthorized,
    InvalidCredentials,
    KionError,
    PlatformError,
    ResponseDecodeError,
    Unauthorized,
)

logger = logging.getLogger(__name__)

API_PREFIX = "api"

# The platform reports a failed password login only through this text.
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class FailureClass(enum.Enum):
    INVALID_CREDENTIALS = "invalid-credentials"
    UNAUTHORIZED = "unauthorized"
    OTHER = "other"


def classify_failure(status: int, message: str) -> FailureClass:
    """Classify a non-2xx platform response."""
    if status == 400 and message == INVALID_CREDENTIALS_MESSAGE:
        return FailureClass.INVALID_CREDENTIALS
    if status == 401:
        return FailureClass.UNAUTHORIZED
    return FailureClass.OTHER


def error_for(status: int, message: str) -> KionError:
    failure = classify_failure(status, message)
    if failure is FailureClass.INVALID_CREDENTIALS:
        return InvalidCredentials()
    if failure is FailureClass.UNAUTHORIZED:
        return Unauthorized()
    return PlatformError(status, message)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp from the platform into an aware UTC datetime."""
    if not isinstance(value, str):
        raise ResponseDecodeError(f"invalid timestamp: {value!r}")

    text = value.strip().replace("Z", "+00:00")
    # fromisoformat on older interpreters only accepts 3 or 6 fractional digits
    text = re.sub(r"\.(\d+)", lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ResponseDecodeError(f"invalid timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _field(data: Any, name: str, record: str) -> Any:
    if not isinstance(data, dict) or name not in data:
        raise ResponseDecodeError(f"decoding {record}: missing field '{name}'")
    return data[name]


@dataclass
class AccessToken:
    """Bearer token plus what is known locally about its lifetime."""

    token: str
    expiry: datetime | None = None
    is_app_api_key: bool = False

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry is None:
            return False
        return (now or utcnow()) > self.expiry


@dataclass
class IDMS:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IDMS":
        return cls(id=_field(data, "id", "IDMS"), name=_field(data, "name", "IDMS"))


@dataclass
class AppAPIKey:
    id: int
    key: str

    def __repr__(self) -> str:
        return f"AppAPIKey(id={self.id!r}, key=<redacted>)"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppAPIKey":
        return cls(id=_field(data, "id", "app API key"), key=_field(data, "key", "app API key"))


@dataclass
class AppAPIKeyMetadata:
    id: int
    created: datetime

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppAPIKeyMetadata":
        return cls(
            id=_field(data, "id", "app API key metadata"),
            created=parse_timestamp(_field(data, "created_at", "app API key metadata")),
        )


@dataclass
class CloudAccessRole:
    id: int
    account_id: int
    account_number: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CloudAccessRole":
        return cls(
            id=_field(data, "id", "cloud access role"),
            account_id=_field(data, "account_id", "cloud access role"),
            account_number=_field(data, "account_number", "cloud access role"),
            name=_field(data, "name", "cloud access role"),
        )


@dataclass
class Account:
    id: int
    account_number: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        return cls(
            id=_field(data, "id", "account"),
            account_number=_field(data, "account_number", "account"),
            name=_field(data, "account_name", "account"),
        )


@dataclass
class TemporaryCredentials:
    access_key_id: str
    secret_access_key: str
    session_token: str

    def __repr__(self) -> str:
        return f"TemporaryCredentials(access_key_id={self.access_key_id!r}, ...)"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemporaryCredentials":
        return cls(
            access_key_id=_field(data, "access_key", "temporary credentials"),
            secret_access_key=_field(data, "secret_access_key", "temporary credentials"),
            session_token=_field(data, "session_token", "temporary credentials"),
        )


def do(method: str, host: str, access_token: AccessToken | None, path: str, data: Any = None) -> Any:
    """Send one request to the platform and return the envelope's data."""
    if access_token is not None and access_token.is_app_api_key and access_token.is_expired():
        raise ApplicationKeyExpired()

    url = f"https://{host}/{API_PREFIX}/{path}"
    headers = {"Accept": "application/json"}
    if access_token is not None:
        headers["Authorization"] = f"Bearer {access_token.token}"

    logger.debug("%s %s", method, url)
    response = requests.request(method, url, headers=headers, json=data)

    succeeded = 200 <= response.status_code < 300
    try:
        envelope = response.json()
    except ValueError as e:
        # Gateways in front of the platform answer errors with HTML
        if not succeeded:
            raise PlatformError(response.status_code, response.reason or "") from e
        raise ResponseDecodeError(f"decoding response from {path}: {e}") from e
    if not isinstance(envelope, dict):
        if not succeeded:
            raise PlatformError(response.status_code, response.reason or "")
        raise ResponseDecodeError(f"decoding response from {path}: expected an object")

    if not succeeded:
        status = envelope.get("status") or response.status_code
        message = envelope.get("message") or ""
        logger.debug("%s %s failed: %s (%s)", method, path, message, status)
        raise error_for(status, message)

    return envelope.get("data")


def login(host: str, idms: int, username: str, password: str) -> "Client":
    """Exchange a username and password for a session."""
    data = do(
        "POST",
        host,
        None,
        "v3/token",
        {"idms": idms, "username": username, "password": password},
    )
    access = _field(data, "access", "token response")
    token = _field(access, "token", "token response")

    logger.debug("Logged in as %s on %s (IDMS %s)", username, host, idms)
    return Client(host, AccessToken(token=token))


def get_idmss(host: str) -> list[IDMS]:
    """List the identity management systems of a host; needs no authentication."""
    return [IDMS.from_dict(item) for item in do("GET", host, None, "v2/idms") or []]


class Client:
    """An authenticated session with the platform, held for one invocation."""

    def __init__(self, host: str, access_token: AccessToken):
        self.host = host
        self.access_token = access_token

    @classmethod
    def with_app_api_key(cls, host: str, key: str, expiry: datetime | None = None) -> "Client":
        """Session authenticated by an App API Key.

        No request is made. A known expiry makes later requests fail locally
        with ApplicationKeyExpired once it has passed.
        """
        return cls(host, AccessToken(token=key, expiry=expiry, is_app_api_key=True))

    def _do(self, method: str, path: str, data: Any = None) -> Any:
        try:
            return do(method, self.host, self.access_token, path, data)
        except Unauthorized as e:
            if self.access_token.is_app_api_key and not isinstance(e, ApplicationKeyUnauthorized):
                raise ApplicationKeyUnauthorized() from e
            raise

    def create_app_api_key(self, name: str) -> AppAPIKey:
        return AppAPIKey.from_dict(self._do("POST", "v3/app-api-key", {"name": name}))

    def rotate_app_api_key(self, key: str) -> AppAPIKey:
        return AppAPIKey.from_dict(self._do("POST", "v3/app-api-key/rotate", {"key": key}))

    def get_app_api_key_metadata(self, key_id: int) -> AppAPIKeyMetadata:
        return AppAPIKeyMetadata.from_dict(self._do("GET", f"v3/app-api-key/{key_id}"))

    def get_cloud_access_roles(self) -> list[CloudAccessRole]:
        return [CloudAccessRole.from_dict(item) for item in self._do("GET", "v3/me/cloud-access-role") or []]

    def get_accounts(self) -> list[Account]:
        return [Account.from_dict(item) for item in self._do("GET", "v3/account") or []]

    def get_temporary_credentials_by_iam_role(self, account_id: str, iam_role: str) -> TemporaryCredentials:
        data = self._do(
            "POST",
            "v3/temporary-credentials",
            {"account_number": account_id, "iam_role_name": iam_role},
        )
        return TemporaryCredentials.from_dict(data)

    def get_temporary_credentials_by_cloud_access_role(
        self, account_id: str, cloud_access_role: str
    ) -> TemporaryCredentials:
        data = self._do(
            "POST",
            "v3/temporary-credentials/cloud-access-role",
            {"account_number": account_id, "cloud_access_role_name": cloud_access_role},
        )
        return TemporaryCredentials.from_dict(data)
