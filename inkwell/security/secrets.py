"""The session signing key and object storage credentials, read from the environment."""
from __future__ import annotations

import os

JWT_SECRET_ENV = "JWT_SECRET_KEY"
MIN_SIGNING_KEY_LENGTH = 12

# Values copied from an example .env rather than filled in.
_TEMPLATE_PREFIXES = ("changeme", "change-me", "replace-me", "your-", "<", "xxx")


class MissingSecretError(RuntimeError):
    """A credential is unset or still holds a template value."""


def is_placeholder(value: str | None) -> bool:
    normalized = (value or "").strip().lower()
    if not normalized:
        return True
    return normalized.startswith(_TEMPLATE_PREFIXES)


def require_secret(name: str, *, min_length: int = 1) -> str:
    raw = (os.getenv(name) or "").strip()
    if is_placeholder(raw):
        raise MissingSecretError(f"{name} must be set to a real value")
    if len(raw) < min_length:
        raise MissingSecretError(f"{name} must be at least {min_length} characters long")
    return raw


def session_signing_key() -> str:
    """HS256 key used to sign and verify session tokens."""

    return require_secret(JWT_SECRET_ENV, min_length=MIN_SIGNING_KEY_LENGTH)


def storage_credentials() -> tuple[str, str]:
    """Access key id and secret for the object storage endpoint."""

    return require_secret("STORAGE_ACCESS_KEY"), require_secret("STORAGE_SECRET_KEY")


__all__ = [
    "MissingSecretError",
    "is_placeholder",
    "require_secret",
    "session_signing_key",
    "storage_credentials",
]
