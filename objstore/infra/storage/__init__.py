"""Storage infrastructure for S3-compatible object storage.

Quick Start:
    from objstore.core.settings import get_storage_settings
    from objstore.infra.storage import StorageClient

    async with StorageClient(get_storage_settings()) as client:
        url = await client.upload_file("invoice-42", "scan.pdf", data, "application/pdf")
        exists = await client.file_exists("invoice-42/scan.pdf")
        key = await client.find_key_by_presigned_url(url, "invoice-42/")
        urls = await client.list_presigned_urls("invoice-42/")

    # Batch result with explicit outcome instead of value-or-error
    batch = await client.presign_objects("invoice-42/")
    if batch.outcome is BatchOutcome.PARTIAL:
        for failure in batch.failures:
            ...
"""

from __future__ import annotations

from objstore.core.settings.storage import StorageSettings

from .batch import BatchOutcome, PresignedURLBatch, PresignFailure, presign_keys
from .client import StorageClient
from .exceptions import (
    StorageError,
    StorageFileNotFoundError,
    StorageNotConfiguredError,
    StoragePermissionError,
    StoragePresignError,
    StorageTimeoutError,
    StorageUploadError,
    StorageValidationError,
    map_boto_error,
)
from .path import build_object_key, normalize_url, split_object_key

__all__ = [
    "BatchOutcome",
    "PresignFailure",
    "PresignedURLBatch",
    "StorageClient",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageNotConfiguredError",
    "StoragePermissionError",
    "StoragePresignError",
    "StorageSettings",
    "StorageTimeoutError",
    "StorageUploadError",
    "StorageValidationError",
    "build_object_key",
    "map_boto_error",
    "normalize_url",
    "presign_keys",
    "split_object_key",
]
