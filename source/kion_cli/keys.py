# ABOUTME: App API Key lifecycle: creation, expiry tracking and rotation
# ABOUTME: Sole owner of the on-disk key file

"""App API Key lifecycle management."""

import enum
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from kion_cli.client import Client, parse_timestamp
from kion_cli.config import Settings, utcnow, write_private_json
from kion_cli.errors import (
    ApplicationKeyUnauthorized,
    ConfigurationError,
    KeyAlreadyExists,
    MissingConfiguration,
    ResponseDecodeError,
    Unauthorized,
)

logger = logging.getLogger(__name__)

APP_API_KEY_NAME = "Kion Tool"

# Keys expiring within this window are rotated automatically.
GRACE_PERIOD = timedelta(days=3)


class KeyState(enum.Enum):
    ABSENT = "absent"
    ACTIVE = "active"
    NEAR_EXPIRY = "near-expiry"
    EXPIRED = "expired"
    REVOKED = "revoked"


@dataclass
class ApplicationKey:
    id: int | None
    key: str
    created: datetime
    expiry: datetime
    revoked: bool = False

    def __repr__(self) -> str:
        return (
            f"ApplicationKey(id={self.id!r}, key=<redacted>, created={self.created.isoformat()}, "
            f"expiry={self.expiry.isoformat()}, revoked={self.revoked!r})"
        )

    @classmethod
    def issued(cls, key_id: int | None, key: str, created: datetime, validity: timedelta) -> "ApplicationKey":
        return cls(id=key_id, key=key, created=created, expiry=created + validity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "created": self.created.isoformat(),
            "expiry": self.expiry.isoformat(),
            "revoked": self.revoked,
        }


def should_rotate(key: ApplicationKey, now: datetime, grace_period: timedelta = GRACE_PERIOD) -> bool:
    return now + grace_period >= key.expiry


def key_state(key: ApplicationKey | None, now: datetime, grace_period: timedelta = GRACE_PERIOD) -> KeyState:
    if key is None:
        return KeyState.ABSENT
    if key.revoked:
        return KeyState.REVOKED
    if now > key.expiry:
        return KeyState.EXPIRED
    if should_rotate(key, now, grace_period):
        return KeyState.NEAR_EXPIRY
    return KeyState.ACTIVE


class KeyManager:
    """Creates, loads, persists and rotates the App API Key."""

    def __init__(
        self,
        path: Path,
        validity: timedelta | None,
        auto_rotate: bool = False,
        clock: Callable[[], datetime] = utcnow,
        grace_period: timedelta = GRACE_PERIOD,
    ):
        self.path = path
        self.validity = validity
        self.auto_rotate = auto_rotate
        self.clock = clock
        self.grace_period = grace_period

    @classmethod
    def from_settings(cls, settings: Settings, clock: Callable[[], datetime] = utcnow) -> "KeyManager":
        return cls(
            settings.key_file,
            settings.app_api_key_duration,
            auto_rotate=settings.rotate_app_api_keys,
            clock=clock,
        )

    def _require_validity(self) -> timedelta:
        if not self.validity:
            raise MissingConfiguration("app-api-key-duration")
        return self.validity

    def load(self) -> ApplicationKey | None:
        """Read the stored key, or None when no key has been provisioned."""
        if not self.path.exists():
            return None

        try:
            with open(self.path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"decoding app API key file {self.path}: {e}", path=str(self.path)) from e

        if not isinstance(data, dict) or not data.get("key"):
            return None

        try:
            created = parse_timestamp(data["created"])
        except (KeyError, ResponseDecodeError) as e:
            raise ConfigurationError(
                f"decoding app API key file {self.path}: missing or invalid 'created'", path=str(self.path)
            ) from e

        key = ApplicationKey.issued(data.get("id"), data["key"], created, self._require_validity())
        return replace(key, revoked=bool(data.get("revoked", False)))

    def save(self, key: ApplicationKey) -> None:
        write_private_json(self.path, key.to_dict())
        logger.debug("Saved app API key %s (expires %s) to %s", key.id, key.expiry.isoformat(), self.path)

    def remove(self) -> None:
        """Delete the stored key so sessions fall back to the keyring password."""
        if self.path.exists():
            self.path.unlink()
            logger.info("Removed app API key file %s", self.path)

    def state(self, key: ApplicationKey | None, now: datetime | None = None) -> KeyState:
        return key_state(key, now or self.clock(), self.grace_period)

    def should_rotate(self, key: ApplicationKey, now: datetime | None = None) -> bool:
        return self.auto_rotate and should_rotate(key, now or self.clock(), self.grace_period)

    def revoke(self, key: ApplicationKey) -> ApplicationKey:
        """Mark key as replaced on disk; a revoked key is never offered to the platform again."""
        revoked = replace(key, revoked=True)
        self.save(revoked)
        logger.info("Revoked app API key %s", key.id)
        return revoked

    def create(self, client: Client, name: str = APP_API_KEY_NAME, force: bool = False) -> ApplicationKey:
        """Create a key with a password-authenticated session and store it."""
        validity = self._require_validity()

        existing = self.load()
        if existing is not None:
            if not force:
                raise KeyAlreadyExists()
            self.revoke(existing)

        created = client.create_app_api_key(name)
        metadata = client.get_app_api_key_metadata(created.id)

        key = ApplicationKey.issued(created.id, created.key, metadata.created, validity)
        self.save(key)
        logger.info("Created app API key %s, expires %s", key.id, key.expiry.isoformat())
        return key

    def rotate(self, client: Client, old_key: ApplicationKey) -> ApplicationKey:
        """Swap old_key for a new one and store it in place of the old."""
        validity = self._require_validity()
        if old_key.revoked:
            raise ApplicationKeyUnauthorized("kion: app API key was revoked")

        try:
            rotated = client.rotate_app_api_key(old_key.key)
        except Unauthorized as e:
            raise ApplicationKeyUnauthorized() from e

        # The platform has already replaced old_key; store the new one before anything else can fail.
        self.save(ApplicationKey.issued(rotated.id, rotated.key, self.clock(), validity))

        # The rotate response carries no creation time; ask the platform for it.
        new_client = Client.with_app_api_key(client.host, rotated.key)
        metadata = new_client.get_app_api_key_metadata(rotated.id)

        key = ApplicationKey.issued(rotated.id, rotated.key, metadata.created, validity)
        self.save(key)
        logger.info("Rotated app API key %s -> %s, expires %s", old_key.id, key.id, key.expiry.isoformat())
        return key
