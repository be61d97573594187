# ABOUTME: On-disk cache of temporary AWS credentials with expiry-based invalidation
# ABOUTME: Keyed by host, IDMS, username, account and cloud access role

"""Credential cache for temporary AWS credentials."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from kion_cli.client import TemporaryCredentials, parse_timestamp
from kion_cli.config import utcnow, write_private_json
from kion_cli.errors import CacheDecodeError, ResponseDecodeError

logger = logging.getLogger(__name__)


def cache_key(host: str, idms: int, username: str, account_id: str, cloud_access_role: str) -> str:
    """Render the lookup tuple as one string; distinct tuples never share a key."""
    return json.dumps([host, idms, username, account_id, cloud_access_role], separators=(",", ":"))


@dataclass
class CachedCredential:
    credentials: TemporaryCredentials
    expiry: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expiry

    def to_dict(self) -> dict[str, Any]:
        return {
            "credentials": {
                "accessKeyId": self.credentials.access_key_id,
                "secretAccessKey": self.credentials.secret_access_key,
                "sessionToken": self.credentials.session_token,
            },
            "expiry": self.expiry.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedCredential":
        credentials = data["credentials"]
        return cls(
            credentials=TemporaryCredentials(
                access_key_id=credentials["accessKeyId"],
                secret_access_key=credentials["secretAccessKey"],
                session_token=credentials["sessionToken"],
            ),
            expiry=parse_timestamp(data["expiry"]),
        )


class CredentialCache:
    """Whole-file JSON store of CachedCredential entries.

    Every store rewrites the file. Concurrent processes are not coordinated,
    so the last writer wins; the cache only ever saves a round trip.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = utcnow):
        self.path = path
        self.clock = clock

    def _load(self) -> dict[str, CachedCredential]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path) as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError("expected an object")
            return {key: CachedCredential.from_dict(entry) for key, entry in raw.items()}
        except (ValueError, KeyError, TypeError, ResponseDecodeError) as e:
            raise CacheDecodeError(f"decoding credential process cache {self.path}: {e}", path=str(self.path)) from e

    def lookup(self, key: str) -> CachedCredential | None:
        entry = self._load().get(key)
        if entry is None:
            logger.debug("No cached credentials")
            return None
        if not entry.is_valid(self.clock()):
            logger.debug("Cached credentials expired at %s", entry.expiry.isoformat())
            return None
        return entry

    def store(self, key: str, credential: CachedCredential) -> None:
        entries = self._load()
        entries[key] = credential
        write_private_json(self.path, {k: v.to_dict() for k, v in entries.items()})
        logger.debug("Cached credentials until %s", credential.expiry.isoformat())
