"""The configured handle to the managed backend (auth, tables, storage)."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from ..database import Base, SessionLocal, engine
from .auth import AuthClient
from .storage import StorageClient
from .tables import TableClient


@dataclass(frozen=True)
class BackendClient:
    auth: AuthClient
    tables: TableClient
    storage: StorageClient


def create_backend_client() -> BackendClient:
    """Build a client bound to the configured database and object storage."""

    # Register the mapped tables on the shared metadata.
    from .. import models  # noqa: F401

    return BackendClient(
        auth=AuthClient(SessionLocal),
        tables=TableClient(engine, Base.metadata),
        storage=StorageClient(),
    )


@lru_cache(maxsize=1)
def get_backend() -> BackendClient:
    """FastAPI dependency returning the process-wide backend client."""

    return create_backend_client()


__all__ = ["BackendClient", "create_backend_client", "get_backend"]
