# ABOUTME: Shared fixtures for kion-cli tests
# ABOUTME: Fake platform responses, an in-memory keyring and settings in a temp directory

from datetime import timedelta
from types import SimpleNamespace

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from kion_cli.config import Settings, utcnow

HOST = "kion.example.com"
IDMS_ID = 1
USERNAME = "alice"
PASSWORD = "hunter2"


class FakePlatform:
    """Stands in for requests.request, answering from canned envelopes."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, data=None, status=200, message=None):
        """Queue a response; the last queued response for a route repeats.

        A callable data is called when the request arrives, so it sees the
        state the code under test has written by then.
        """
        self.routes.setdefault((method, path), []).append((status, data, message))

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]

    def request(self, method, url, headers=None, json=None, **kwargs):
        prefix = f"https://{HOST}/api/"
        assert url.startswith(prefix), f"unexpected url {url}"
        path = url[len(prefix):]
        self.calls.append(SimpleNamespace(method=method, path=path, headers=headers or {}, json=json))

        responses = self.routes.get((method, path))
        if not responses:
            raise AssertionError(f"unexpected request {method} {path}")
        status, data, message = responses.pop(0) if len(responses) > 1 else responses[0]

        body = {"status": status, "data": data() if callable(data) else data}
        if message is not None:
            body["message"] = message
        return FakeResponse(status, body)


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.ok = 200 <= status_code < 300
        self.reason = "OK" if self.ok else "Error"

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class MemoryKeyring(KeyringBackend):
    """Keyring backend keeping passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


@pytest.fixture
def platform(monkeypatch):
    fake = FakePlatform()
    monkeypatch.setattr("kion_cli.client.requests.request", fake.request)
    return fake


@pytest.fixture
def memory_keyring():
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def now():
    # Real time, so the client's own expiry check agrees with injected clocks
    return utcnow().replace(microsecond=0)


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def settings(tmp_path):
    return Settings(
        host=HOST,
        idms=IDMS_ID,
        username=USERNAME,
        app_api_key_duration=timedelta(hours=168),
        session_duration=timedelta(hours=1),
        config_dir=tmp_path / "config",
    )
