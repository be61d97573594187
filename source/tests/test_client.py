# ABOUTME: Tests for the platform API client
# ABOUTME: Covers the response envelope, failure classification and app API key sessions

from datetime import timedelta, timezone

import pytest

from conftest import HOST, FakeResponse
from kion_cli.client import (
    AccessToken,
    Client,
    FailureClass,
    TemporaryCredentials,
    classify_failure,
    get_idmss,
    login,
    parse_timestamp,
)
from kion_cli.errors import (
    ApplicationKeyExpired,
    ApplicationKeyUnauthorized,
    InvalidCredentials,
    PlatformError,
    ResponseDecodeError,
    Unauthorized,
)

CREDENTIALS = {"access_key": "AKIA123", "secret_access_key": "secret", "session_token": "token"}


class TestClassifyFailure:
    def test_invalid_password_message(self):
        assert classify_failure(400, "Invalid username or password.") is FailureClass.INVALID_CREDENTIALS

    def test_other_bad_request_is_not_invalid_credentials(self):
        assert classify_failure(400, "Bad request") is FailureClass.OTHER

    def test_unauthorized(self):
        assert classify_failure(401, "Unauthorized") is FailureClass.UNAUTHORIZED

    def test_server_error(self):
        assert classify_failure(500, "boom") is FailureClass.OTHER


class TestParseTimestamp:
    def test_zulu_suffix(self):
        parsed = parse_timestamp("2024-03-01T12:00:00Z")
        assert parsed.tzinfo is not None
        assert parsed.hour == 12

    def test_nanosecond_fraction(self):
        parsed = parse_timestamp("2024-03-01T12:00:00.123456789Z")
        assert parsed.microsecond == 123456

    def test_offset_converted_to_utc(self):
        parsed = parse_timestamp("2024-03-01T12:00:00+02:00")
        assert parsed.utcoffset() == timedelta(0)
        assert parsed.hour == 10

    def test_naive_taken_as_utc(self):
        assert parse_timestamp("2024-03-01T12:00:00").tzinfo == timezone.utc

    def test_garbage(self):
        with pytest.raises(ResponseDecodeError):
            parse_timestamp("yesterday")


class TestLogin:
    def test_returns_bearer_session(self, platform):
        platform.add("POST", "v3/token", {"access": {"token": "session-token"}})

        client = login(HOST, 1, "alice", "pw")

        assert client.access_token.token == "session-token"
        assert not client.access_token.is_app_api_key
        call = platform.calls[0]
        assert call.json == {"idms": 1, "username": "alice", "password": "pw"}
        assert "Authorization" not in call.headers

    def test_invalid_credentials(self, platform):
        platform.add("POST", "v3/token", status=400, message="Invalid username or password.")

        with pytest.raises(InvalidCredentials):
            login(HOST, 1, "alice", "wrong")

    def test_missing_token_field(self, platform):
        platform.add("POST", "v3/token", {"access": {}})

        with pytest.raises(ResponseDecodeError):
            login(HOST, 1, "alice", "pw")


class TestTransport:
    def test_bearer_header(self, platform):
        platform.add("GET", "v3/me/cloud-access-role", [])

        Client(HOST, login_token("abc")).get_cloud_access_roles()

        assert platform.calls[0].headers["Authorization"] == "Bearer abc"

    def test_platform_error_keeps_status_and_message(self, platform):
        platform.add("GET", "v3/account", status=500, message="database unavailable")

        with pytest.raises(PlatformError) as exc_info:
            Client(HOST, login_token("abc")).get_accounts()

        assert exc_info.value.status == 500
        assert exc_info.value.platform_message == "database unavailable"
        assert str(exc_info.value) == "kion: database unavailable (500)"

    def test_unauthorized_password_session(self, platform):
        platform.add("GET", "v3/account", status=401, message="Unauthorized")

        with pytest.raises(Unauthorized) as exc_info:
            Client(HOST, login_token("abc")).get_accounts()

        assert not isinstance(exc_info.value, ApplicationKeyUnauthorized)

    def test_unauthorized_app_api_key_session(self, platform):
        platform.add("GET", "v3/account", status=401, message="Unauthorized")

        with pytest.raises(ApplicationKeyUnauthorized):
            Client.with_app_api_key(HOST, "app-key").get_accounts()

    def test_expired_app_api_key_sends_nothing(self, platform, now):
        client = Client.with_app_api_key(HOST, "app-key", expiry=now - timedelta(minutes=1))

        with pytest.raises(ApplicationKeyExpired):
            client.get_accounts()

        assert platform.calls == []

    def test_non_json_error_page(self, monkeypatch):
        response = FakeResponse(502, ValueError("not json"))
        response.reason = "Bad Gateway"
        monkeypatch.setattr("kion_cli.client.requests.request", lambda *args, **kwargs: response)

        with pytest.raises(PlatformError) as exc_info:
            get_idmss(HOST)

        assert exc_info.value.status == 502
        assert str(exc_info.value) == "kion: Bad Gateway (502)"

    def test_non_json_success_body(self, monkeypatch):
        monkeypatch.setattr(
            "kion_cli.client.requests.request",
            lambda *args, **kwargs: FakeResponse(200, ValueError("not json")),
        )

        with pytest.raises(ResponseDecodeError):
            get_idmss(HOST)


class TestEndpoints:
    def test_idmss_need_no_token(self, platform):
        platform.add("GET", "v2/idms", [{"id": 1, "name": "Local"}, {"id": 2, "name": "SAML"}])

        idmss = get_idmss(HOST)

        assert [i.name for i in idmss] == ["Local", "SAML"]
        assert "Authorization" not in platform.calls[0].headers

    def test_temporary_credentials_by_cloud_access_role(self, platform):
        platform.add("POST", "v3/temporary-credentials/cloud-access-role", CREDENTIALS)

        creds = Client(HOST, login_token("abc")).get_temporary_credentials_by_cloud_access_role(
            "111122223333", "ReadOnly"
        )

        assert creds.access_key_id == "AKIA123"
        assert platform.calls[0].json == {"account_number": "111122223333", "cloud_access_role_name": "ReadOnly"}

    def test_temporary_credentials_by_iam_role(self, platform):
        platform.add("POST", "v3/temporary-credentials", CREDENTIALS)

        creds = Client(HOST, login_token("abc")).get_temporary_credentials_by_iam_role("111122223333", "admin")

        assert creds.session_token == "token"
        assert platform.calls[0].json == {"account_number": "111122223333", "iam_role_name": "admin"}

    def test_credentials_repr_hides_secrets(self):
        creds = TemporaryCredentials.from_dict(CREDENTIALS)
        assert "secret" not in repr(creds)
        assert "token" not in repr(creds)

    def test_app_api_key_metadata(self, platform):
        platform.add("GET", "v3/app-api-key/7", {"id": 7, "created_at": "2024-03-01T12:00:00Z"})

        metadata = Client(HOST, login_token("abc")).get_app_api_key_metadata(7)

        assert metadata.id == 7
        assert metadata.created == parse_timestamp("2024-03-01T12:00:00Z")


def login_token(token):
    return AccessToken(token=token)
