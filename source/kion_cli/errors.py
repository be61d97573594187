# ABOUTME: Exception hierarchy for platform, key lifecycle and local store failures
# ABOUTME: Every error raised by the core derives from KionError

"""Custom exceptions for kion-cli."""


class KionError(Exception):
    """Base exception for all kion-cli operations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidCredentials(KionError):
    """Raised when the platform rejects a username/password pair."""

    def __init__(self, message: str = "kion: invalid credentials"):
        super().__init__(message)


class Unauthorized(KionError):
    """Raised when the platform rejects a bearer token."""

    def __init__(self, message: str = "kion: unauthorized"):
        super().__init__(message)


class ApplicationKeyUnauthorized(Unauthorized):
    """Raised when the platform no longer accepts the stored App API Key.

    The key has to be recreated from scratch; rotating it will not help.
    """

    def __init__(self, message: str = "kion: app API key rejected by the platform"):
        super().__init__(message)


class ApplicationKeyExpired(KionError):
    """Raised before sending a request with an App API Key known to be expired."""

    def __init__(self, message: str = "kion: app API key expired"):
        super().__init__(message)


class KeyAlreadyExists(KionError):
    """Raised when creating an App API Key while one is already stored."""

    def __init__(self, message: str = "key exists; use --force to overwrite"):
        super().__init__(message)


class MissingConfiguration(KionError):
    """Raised when a required setting is absent."""

    def __init__(self, key: str, message: str = None):
        self.key = key
        super().__init__(message or f"missing config value: {key}")


class ConfigurationError(KionError):
    """Raised when a configuration or key file cannot be decoded."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class NoStoredCredential(KionError):
    """Raised when the system keyring holds no password for the user."""

    def __init__(self, service: str, username: str):
        self.service = service
        self.username = username
        super().__init__(f"no password stored in keyring for '{username}' on '{service}'")


class PlatformError(KionError):
    """Raised for any platform error response not classified more specifically."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.platform_message = message
        super().__init__(f"kion: {message} ({status})")


class ResponseDecodeError(KionError):
    """Raised when a platform response does not have the expected shape."""

    pass


class CacheDecodeError(KionError):
    """Raised when the credential cache file is corrupted."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class FederationError(KionError):
    """Raised when the AWS federation endpoint refuses a sign-in token request."""

    pass


class CommandFailed(KionError):
    """Raised when a command run under temporary credentials exits non-zero."""

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode


class InvalidArgument(KionError):
    """Raised when a command-line value or an input line cannot be parsed."""

    pass


class Cancelled(KionError):
    """Raised when the user cancels an interactive prompt."""

    def __init__(self, message: str = "cancelled"):
        super().__init__(message)
