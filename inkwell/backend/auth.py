"""Password auth and session tokens for the managed backend."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Profile, User
from ..security.secrets import MissingSecretError, session_signing_key
from .response import BackendResponse

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
DEFAULT_TOKEN_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "10080"))


@dataclass(frozen=True)
class Identity:
    """The authenticated user as seen by the application."""

    id: UUID
    email: str


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    expires_at: datetime
    user: Identity


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return session_signing_key()
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    try:
        return _pwd_context.verify(password, hashed_password)
    except Exception:  # pragma: no cover - passlib internal errors are rare
        logger.exception("Password verification failed due to an unexpected error")
        return False


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthClient:
    """Sign-up, sign-in and token verification against the ``users`` table."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        token_minutes: int = DEFAULT_TOKEN_MINUTES,
    ) -> None:
        self._session_factory = session_factory
        self._token_minutes = token_minutes

    def _issue_session(self, user: User) -> AuthSession:
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(minutes=self._token_minutes)
        payload = {"sub": str(user.id), "email": user.email, "exp": expires_at, "iat": now}
        token = jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)
        return AuthSession(access_token=token, expires_at=expires_at, user=Identity(id=user.id, email=user.email))

    def sign_up(self, *, email: str, password: str, name: str) -> BackendResponse[AuthSession]:
        """Create the identity and its profile row, then open a session."""

        normalized = _normalize_email(email)
        with self._session_factory() as db:
            if db.scalar(select(User).where(func.lower(User.email) == normalized)) is not None:
                return BackendResponse.failure("User already registered", code="user_already_exists")

            user = User(email=normalized, hashed_password=hash_password(password))
            db.add(user)
            try:
                db.flush()
                # Sign-up hook: every identity gets exactly one profile row.
                db.add(Profile(id=user.id, name=name.strip() or normalized.split("@")[0], email=normalized))
                user.last_sign_in_at = datetime.now(timezone.utc)
                db.commit()
                db.refresh(user)
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to register user")
                return BackendResponse.failure("Unable to register user", code="database_error")

            return BackendResponse.success(self._issue_session(user))

    def sign_in_with_password(self, *, email: str, password: str) -> BackendResponse[AuthSession]:
        normalized = _normalize_email(email)
        with self._session_factory() as db:
            user = db.scalar(select(User).where(func.lower(User.email) == normalized))
            if user is None or not verify_password(password, user.hashed_password):
                return BackendResponse.failure("Invalid login credentials", code="invalid_credentials")

            try:
                user.last_sign_in_at = datetime.now(timezone.utc)
                db.commit()
            except SQLAlchemyError:  # pragma: no cover - bookkeeping only
                db.rollback()
                logger.warning("Failed to update last_sign_in_at for user %s", user.id)

            return BackendResponse.success(self._issue_session(user))

    def _decode(self, access_token: str) -> BackendResponse[tuple[UUID, datetime]]:
        try:
            payload = jwt.decode(access_token, _get_jwt_secret(), algorithms=[ALGORITHM])
        except JWTError:
            return BackendResponse.failure("Invalid or expired token", code="invalid_token")

        subject = payload.get("sub")
        try:
            user_id = UUID(str(subject))
        except ValueError:
            return BackendResponse.failure("Invalid token payload", code="invalid_token")
        expires_at = datetime.fromtimestamp(int(payload.get("exp", 0)), tz=timezone.utc)
        return BackendResponse.success((user_id, expires_at))

    def get_user(self, access_token: str | None) -> BackendResponse[Identity]:
        """Resolve the identity behind ``access_token``; no token yields empty data."""

        if not access_token:
            return BackendResponse.success(None)

        decoded = self._decode(access_token)
        if decoded.error is not None or decoded.data is None:
            return BackendResponse(error=decoded.error)

        user_id, _ = decoded.data
        try:
            with self._session_factory() as db:
                user = db.get(User, user_id)
        except SQLAlchemyError:
            logger.exception("Failed to load user %s", user_id)
            return BackendResponse.failure("Unable to load user", code="database_error")

        if user is None:
            return BackendResponse.failure("User from token no longer exists", code="user_not_found")
        return BackendResponse.success(Identity(id=user.id, email=user.email))

    def get_session(self, access_token: str | None) -> BackendResponse[AuthSession]:
        """Return the current session for ``access_token``, or empty data when signed out."""

        identity = self.get_user(access_token)
        if identity.error is not None or identity.data is None or not access_token:
            return BackendResponse(error=identity.error)

        decoded = self._decode(access_token)
        if decoded.error is not None or decoded.data is None:
            return BackendResponse(error=decoded.error)
        _, expires_at = decoded.data
        return BackendResponse.success(AuthSession(access_token=access_token, expires_at=expires_at, user=identity.data))


__all__ = [
    "AuthClient",
    "AuthSession",
    "Identity",
    "hash_password",
    "verify_password",
]
