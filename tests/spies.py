"""Recording stand-ins for the backend used by service-level tests."""
from __future__ import annotations

from typing import Any

from inkwell.backend import BackendClient, BackendResponse


class SpyTables:
    """Answers table calls from a queue of canned responses and records every call."""

    def __init__(self, **responses: Any) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self._responses = responses

    def _answer(self, operation: str, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        self.calls.append((operation, args, kwargs))
        response = self._responses.get(operation)
        if callable(response):
            return response(*args, **kwargs)
        return response if response is not None else BackendResponse.success(None)

    def operations(self) -> list[str]:
        return [operation for operation, _, _ in self.calls]

    def select(self, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        return self._answer("select", *args, **kwargs)

    def select_one(self, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        return self._answer("select_one", *args, **kwargs)

    def insert(self, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        return self._answer("insert", *args, **kwargs)

    def update(self, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        return self._answer("update", *args, **kwargs)

    def increment(self, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        return self._answer("increment", *args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> BackendResponse[Any]:
        return self._answer("delete", *args, **kwargs)


class SpyStorage:
    """In-memory object storage that records uploads and removals."""

    def __init__(self, *, fail_upload: bool = False) -> None:
        self.fail_upload = fail_upload
        self.objects: dict[str, bytes] = {}
        self.removed: list[str] = []
        self.uploads: list[dict[str, Any]] = []

    def upload(self, bucket, key, fileobj, *, content_type=None, upsert=False):
        self.uploads.append({"bucket": bucket, "key": key, "content_type": content_type, "upsert": upsert})
        if self.fail_upload:
            return BackendResponse.failure("Upload to object storage failed", code="storage_error")
        if key in self.objects and not upsert:
            return BackendResponse.failure("The resource already exists", code="duplicate")
        self.objects[key] = fileobj.read()
        return BackendResponse.success(key)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"https://cdn.example.test/{bucket}/{key}"

    def remove(self, bucket, keys):
        removed = [key for key in keys if self.objects.pop(key, None) is not None]
        self.removed.extend(keys)
        return BackendResponse.success(removed)


def spy_backend(tables: Any = None, storage: Any = None, auth: Any = None) -> BackendClient:
    return BackendClient(auth=auth, tables=tables or SpyTables(), storage=storage or SpyStorage())
