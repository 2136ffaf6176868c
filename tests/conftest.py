"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolated StorageSettings built without env/.env input
    - S3 Fixtures: an in-memory S3 double standing in for the aiobotocore client
    - Client Fixtures: StorageClient wired to the S3 double

The S3 double implements the subset of the S3 API the client calls
(put_object, delete_object, head_object, list_objects_v2,
generate_presigned_url) and lets tests inject failures and delays per key.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
import itertools
from typing import Any

from botocore.exceptions import ClientError
import pytest

from objstore.core.settings import StorageSettings, clear_all_caches
from objstore.infra.storage.client import StorageClient

_STORAGE_ENV_VARS = (
    "STORAGE_ENDPOINT",
    "STORAGE_ACCESS_KEY",
    "STORAGE_SECRET_KEY",
    "STORAGE_BUCKET",
    "STORAGE_REGION",
    "STORAGE_PRESIGNED_URL_EXPIRY_SECONDS",
    "STORAGE_LIST_ALL_PAGES",
    "STORAGE_PRESIGN_MAX_CONCURRENCY",
)


def make_client_error(
    code: str,
    message: str = "",
    operation: str = "HeadObject",
    status_code: int = 400,
) -> ClientError:
    """Build a botocore ClientError the way the SDK reports service errors."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": message or code},
            "ResponseMetadata": {"RequestId": "req-123", "HTTPStatusCode": status_code},
        },
        operation,
    )


class FakeS3:
    """In-memory S3 double with the aiobotocore call signatures."""

    def __init__(self, endpoint: str = "http://localhost:9000", page_size: int = 1000) -> None:
        self.endpoint = endpoint
        self.page_size = page_size
        self.objects: dict[str, dict[str, Any]] = {}
        self.closed = False

        self.put_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.head_error: Exception | None = None
        self.list_error: Exception | None = None
        self.presign_errors: dict[str, Exception] = {}
        self.presign_delays: dict[str, float] = {}

        self.list_calls: list[dict[str, Any]] = []
        self.presign_calls: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._signatures = itertools.count(1)

    def add_objects(self, *keys: str) -> None:
        for key in keys:
            self.objects[key] = {"Body": b"", "ContentType": "application/octet-stream"}

    async def put_object(self, *, Bucket: str, Key: str, Body: Any, ContentType: str) -> dict[str, Any]:
        if self.put_error is not None:
            raise self.put_error
        data = Body.read() if hasattr(Body, "read") else Body
        self.objects[Key] = {"Body": data, "ContentType": ContentType, "Bucket": Bucket}
        return {"ETag": '"d41d8cd98f00b204e9800998ecf8427e"'}

    async def delete_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        if self.delete_error is not None:
            raise self.delete_error
        self.objects.pop(Key, None)
        return {}

    async def head_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        if self.head_error is not None:
            raise self.head_error
        if Key not in self.objects:
            raise make_client_error("404", "Not Found", "HeadObject", 404)
        obj = self.objects[Key]
        return {"ContentLength": len(obj["Body"]), "ContentType": obj["ContentType"]}

    async def list_objects_v2(
        self,
        *,
        Bucket: str,
        Prefix: str = "",
        ContinuationToken: str | None = None,
    ) -> dict[str, Any]:
        self.list_calls.append(
            {"Bucket": Bucket, "Prefix": Prefix, "ContinuationToken": ContinuationToken}
        )
        if self.list_error is not None:
            raise self.list_error

        keys = sorted(k for k in self.objects if k.startswith(Prefix))
        start = int(ContinuationToken) if ContinuationToken else 0
        page = keys[start : start + self.page_size]
        truncated = start + self.page_size < len(keys)

        response: dict[str, Any] = {"KeyCount": len(page), "IsTruncated": truncated}
        if page:
            response["Contents"] = [{"Key": k, "Size": len(self.objects[k]["Body"])} for k in page]
        if truncated:
            response["NextContinuationToken"] = str(start + self.page_size)
        return response

    async def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: dict[str, Any],
        ExpiresIn: int,
    ) -> str:
        key = Params["Key"]
        self.presign_calls.append({"ClientMethod": ClientMethod, "Key": key, "ExpiresIn": ExpiresIn})

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.presign_delays.get(key)
            if delay is not None:
                await asyncio.sleep(delay)
            if key in self.presign_errors:
                raise self.presign_errors[key]
        finally:
            self.in_flight -= 1

        signature = format(next(self._signatures), "064x")
        return (
            f"{self.endpoint}/{Params['Bucket']}/{key}"
            f"?X-Amz-Algorithm=AWS4-HMAC-SHA256&X-Amz-Expires={ExpiresIn}"
            f"&X-Amz-Signature={signature}"
        )


class FakeClientContext:
    def __init__(self, s3: FakeS3) -> None:
        self.s3 = s3

    async def __aenter__(self) -> FakeS3:
        return self.s3

    async def __aexit__(self, *exc_info: Any) -> None:
        self.s3.closed = True


class FakeSession:
    """Stands in for aioboto3.Session and records how the client was built."""

    def __init__(self, s3: FakeS3) -> None:
        self.s3 = s3
        self.client_calls: list[dict[str, Any]] = []
        self.client_error: Exception | None = None

    def client(self, service_name: str, **kwargs: Any) -> FakeClientContext:
        self.client_calls.append({"service_name": service_name, **kwargs})
        if self.client_error is not None:
            raise self.client_error
        return FakeClientContext(self.s3)


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep host STORAGE_* variables and cached settings out of every test."""
    for name in _STORAGE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def storage_settings() -> StorageSettings:
    """Fully configured settings for a local MinIO-style endpoint."""
    return StorageSettings(
        _env_file=None,
        endpoint="http://localhost:9000",
        access_key="test-access-key",
        secret_key="test-secret-key",
        bucket="test-bucket",
        region="us-east-1",
    )


# ============================================================================
# S3 Fixtures
# ============================================================================


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def fake_session(fake_s3: FakeS3, monkeypatch: pytest.MonkeyPatch) -> FakeSession:
    """Replace aioboto3.Session so clients open the in-memory S3 double."""
    session = FakeSession(fake_s3)
    monkeypatch.setattr("objstore.infra.storage.client.aioboto3.Session", lambda: session)
    return session


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
async def storage_client(
    storage_settings: StorageSettings,
    fake_session: FakeSession,
) -> AsyncGenerator[StorageClient, None]:
    client = StorageClient(storage_settings)
    yield client
    await client.close()


@pytest.fixture
def make_storage_client(fake_session: FakeSession, storage_settings: StorageSettings):
    """Build clients with settings overrides, e.g. ``make_storage_client(list_all_pages=False)``."""

    def _make(**overrides: Any) -> StorageClient:
        settings = storage_settings.model_copy(update=overrides)
        return StorageClient(settings)

    return _make
