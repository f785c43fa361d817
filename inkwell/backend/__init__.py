"""Thin client for the managed backend: auth, table access and object storage."""
from .auth import AuthClient, AuthSession, Identity
from .client import BackendClient, create_backend_client, get_backend
from .response import BackendError, BackendResponse
from .storage import StorageClient, StorageConfigurationError, file_extension
from .tables import Embed, TableClient

__all__ = [
    "AuthClient",
    "AuthSession",
    "BackendClient",
    "BackendError",
    "BackendResponse",
    "Embed",
    "Identity",
    "StorageClient",
    "StorageConfigurationError",
    "TableClient",
    "create_backend_client",
    "file_extension",
    "get_backend",
]
