"""S3-compatible object storage used for post images and profile pictures."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePosixPath
from typing import BinaryIO, Callable, Iterable
from urllib.parse import quote, urlparse

from boto3.session import Session
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from ..security.secrets import MissingSecretError, is_placeholder, storage_credentials
from .response import BackendResponse

load_dotenv()

logger = logging.getLogger(__name__)

_EXTENSION_PATTERN = re.compile(r"[A-Za-z0-9]{1,10}")


@dataclass(frozen=True)
class StorageConfig:
    """Runtime configuration extracted from environment variables."""

    access_key: str
    secret_key: str
    region: str
    endpoint_url: str
    public_url: str


class StorageConfigurationError(RuntimeError):
    """Raised when required object storage settings are missing or invalid."""


def _normalize_url(raw: str, *, name: str) -> str:
    value = raw.strip().rstrip("/")
    parsed = urlparse(value)
    if not parsed.scheme:
        value = f"https://{value.lstrip(':/')}"
        parsed = urlparse(value)
    if not (parsed.netloc or parsed.path):
        raise StorageConfigurationError(f"{name} must include a hostname.")
    return parsed.geturl().rstrip("/")


@lru_cache(maxsize=1)
def load_storage_config() -> StorageConfig:
    """Read and validate object storage configuration from the environment."""

    required: dict[str, str | None] = {
        "STORAGE_ACCESS_KEY": os.getenv("STORAGE_ACCESS_KEY"),
        "STORAGE_SECRET_KEY": os.getenv("STORAGE_SECRET_KEY"),
        "STORAGE_ENDPOINT": os.getenv("STORAGE_ENDPOINT"),
    }
    missing = [name for name, value in required.items() if not value or not value.strip()]
    if missing:
        raise StorageConfigurationError(
            "Missing required object storage configuration: " + ", ".join(sorted(missing))
        )

    try:
        access_key, secret_key = storage_credentials()
    except MissingSecretError as exc:
        raise StorageConfigurationError(str(exc)) from exc

    endpoint_raw = (required["STORAGE_ENDPOINT"] or "").strip()
    if is_placeholder(endpoint_raw):
        raise StorageConfigurationError("STORAGE_ENDPOINT must point to your storage API endpoint")
    endpoint_url = _normalize_url(endpoint_raw, name="STORAGE_ENDPOINT")

    public_raw = (os.getenv("STORAGE_PUBLIC_URL") or "").strip()
    public_url = _normalize_url(public_raw, name="STORAGE_PUBLIC_URL") if public_raw else endpoint_url

    region = (os.getenv("STORAGE_REGION") or "us-east-1").strip() or "us-east-1"

    return StorageConfig(
        access_key=access_key,
        secret_key=secret_key,
        region=region,
        endpoint_url=endpoint_url,
        public_url=public_url,
    )


@lru_cache(maxsize=1)
def get_s3_client() -> BaseClient:
    """Create a singleton boto3 client for storage interactions."""

    config = load_storage_config()
    session = Session()
    return session.client(
        "s3",
        region_name=config.region,
        endpoint_url=config.endpoint_url,
        aws_access_key_id=config.access_key,
        aws_secret_access_key=config.secret_key,
    )


def file_extension(filename: str | None) -> str:
    """Return the lowercase extension of ``filename`` without the dot, or ``""``."""

    suffix = PurePosixPath((filename or "").replace("\\", "/")).suffix.lstrip(".").lower()
    if not _EXTENSION_PATTERN.fullmatch(suffix):
        return ""
    return suffix


def _is_missing_object(exc: ClientError) -> bool:
    code = str(exc.response.get("Error", {}).get("Code", ""))
    return code in {"404", "NoSuchKey", "NotFound"}


class StorageClient:
    """Bucket-scoped upload, public URL and removal operations."""

    def __init__(
        self,
        client_factory: Callable[[], BaseClient] = get_s3_client,
        config_loader: Callable[[], StorageConfig] = load_storage_config,
    ) -> None:
        self._client_factory = client_factory
        self._config_loader = config_loader

    def upload(
        self,
        bucket: str,
        key: str,
        fileobj: BinaryIO,
        *,
        content_type: str | None = None,
        upsert: bool = False,
    ) -> BackendResponse[str]:
        """Store ``fileobj`` under ``key``; returns the key.

        Without ``upsert`` an existing object at ``key`` is an error.
        """

        normalized_key = key.lstrip("/")
        if not normalized_key:
            return BackendResponse.failure("Object key must not be empty", code="invalid_key")

        try:
            client = self._client_factory()
        except StorageConfigurationError as exc:
            logger.error("Object storage is not configured: %s", exc)
            return BackendResponse.failure(str(exc), code="storage_not_configured")

        if not upsert:
            try:
                client.head_object(Bucket=bucket, Key=normalized_key)
            except ClientError as exc:
                if not _is_missing_object(exc):
                    logger.exception("Existence check for %s/%s failed", bucket, normalized_key)
                    return BackendResponse.failure("Unable to reach object storage", code="storage_error")
            except BotoCoreError:
                logger.exception("Existence check for %s/%s failed", bucket, normalized_key)
                return BackendResponse.failure("Unable to reach object storage", code="storage_error")
            else:
                return BackendResponse.failure("The resource already exists", code="duplicate")

        resolved_type = (content_type or "application/octet-stream").strip() or "application/octet-stream"
        try:
            fileobj.seek(0)
            client.upload_fileobj(
                fileobj,
                bucket,
                normalized_key,
                ExtraArgs={"ACL": "public-read", "ContentType": resolved_type},
            )
        except (ClientError, BotoCoreError):
            logger.exception("Upload of %s/%s failed", bucket, normalized_key)
            return BackendResponse.failure("Upload to object storage failed", code="storage_error")

        return BackendResponse.success(normalized_key)

    def get_public_url(self, bucket: str, key: str) -> str:
        """Build the public URL for an object; no request is made."""

        config = self._config_loader()
        normalized_key = quote(key.lstrip("/"), safe="/")
        return f"{config.public_url}/{bucket}/{normalized_key}"

    def remove(self, bucket: str, keys: Iterable[str]) -> BackendResponse[list[str]]:
        """Delete the given objects; returns the keys that were removed."""

        normalized = [key.lstrip("/") for key in keys if key and key.strip("/")]
        if not normalized:
            return BackendResponse.success([])

        try:
            client = self._client_factory()
        except StorageConfigurationError as exc:
            logger.error("Object storage is not configured: %s", exc)
            return BackendResponse.failure(str(exc), code="storage_not_configured")

        removed: list[str] = []
        for key in normalized:
            try:
                client.delete_object(Bucket=bucket, Key=key)
            except (ClientError, BotoCoreError):
                logger.exception("Failed to delete storage object %s/%s", bucket, key)
                return BackendResponse.failure("Unable to delete object from storage", code="storage_error")
            removed.append(key)
        return BackendResponse.success(removed)


__all__ = [
    "StorageClient",
    "StorageConfig",
    "StorageConfigurationError",
    "file_extension",
    "get_s3_client",
    "load_storage_config",
]
