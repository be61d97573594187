# ABOUTME: kion-cli - Temporary AWS credentials from the Kion cloud-management platform
# ABOUTME: Main package; the credential lifecycle core plus the kion command line

"""kion-cli - Kion credential broker."""

__version__ = "1.0.0"
__all__ = ["cache", "cli", "client", "config", "errors", "federation", "keyring_store", "keys", "session"]
