"""Credential loading helpers."""
from .secrets import MissingSecretError, is_placeholder, require_secret, session_signing_key, storage_credentials

__all__ = [
    "MissingSecretError",
    "is_placeholder",
    "require_secret",
    "session_signing_key",
    "storage_credentials",
]
