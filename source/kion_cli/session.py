# ABOUTME: Chooses how to authenticate for one invocation and serves temporary credentials
# ABOUTME: Prefers fresh cached credentials, then the App API Key, then the keyring password

"""Session selection and temporary credential exchange."""

import logging
from collections.abc import Callable
from datetime import datetime

from kion_cli import keyring_store
from kion_cli.cache import CachedCredential, CredentialCache, cache_key
from kion_cli.client import Client, login
from kion_cli.config import Settings, utcnow
from kion_cli.errors import ApplicationKeyUnauthorized
from kion_cli.keys import KeyManager

logger = logging.getLogger(__name__)


class SessionSelector:
    """Builds at most one platform session per invocation."""

    def __init__(
        self,
        settings: Settings,
        key_manager: KeyManager | None = None,
        cache: CredentialCache | None = None,
        password_lookup: Callable[[str, int, str], str] = keyring_store.get_password,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings
        self.key_manager = key_manager or KeyManager.from_settings(settings, clock=clock)
        self.cache = cache or CredentialCache(settings.cache_file, clock=clock)
        self.password_lookup = password_lookup
        self.clock = clock
        self._client: Client | None = None

    def client(self) -> Client:
        if self._client is None:
            self._client = self._new_client()
        return self._client

    def _new_client(self) -> Client:
        host = self.settings.require("host")

        key = self.key_manager.load()
        if key is not None:
            if key.revoked:
                raise ApplicationKeyUnauthorized("kion: app API key was revoked")
            if self.key_manager.should_rotate(key, self.clock()):
                logger.info("App API key expires %s; rotating", key.expiry.isoformat())
                key = self.key_manager.rotate(Client.with_app_api_key(host, key.key), key)
            logger.debug("Using app API key %s", key.id)
            return Client.with_app_api_key(host, key.key, key.expiry)

        idms = self.settings.require("idms")
        username = self.settings.require("username")
        password = self.password_lookup(host, idms, username)
        return login(host, idms, username, password)

    def temporary_credentials(self, account_id: str, cloud_access_role: str) -> CachedCredential:
        """Return credentials for the pair, from the cache when still valid."""
        key = cache_key(
            self.settings.require("host"),
            self.settings.require("idms"),
            self.settings.require("username"),
            account_id,
            cloud_access_role,
        )

        cached = self.cache.lookup(key)
        if cached is not None:
            logger.debug("Using cached credentials for %s/%s", account_id, cloud_access_role)
            return cached

        credentials = self.client().get_temporary_credentials_by_cloud_access_role(account_id, cloud_access_role)
        # The platform reports no expiry; trust the credentials for the configured window.
        entry = CachedCredential(credentials, self.clock() + self.settings.session_duration)
        self.cache.store(key, entry)
        return entry
