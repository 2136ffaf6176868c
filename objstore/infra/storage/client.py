"""Async S3-compatible storage client.

Wraps a single aioboto3 S3 client bound to one bucket and exposes the
handful of operations callers actually need: upload (returning a presigned
URL), delete, existence checks, presigned GET URLs, finding the key behind a
presigned URL, and presigning every object under a prefix concurrently.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
import logging
from typing import TYPE_CHECKING, Any, BinaryIO

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .batch import BatchOutcome, PresignedURLBatch, presign_keys
from .exceptions import (
    StorageError,
    StorageFileNotFoundError,
    StorageNotConfiguredError,
    StoragePresignError,
    StorageUploadError,
    StorageValidationError,
    is_not_found_error,
    map_boto_error,
)
from .instrumentation import track_storage_operation
from .metrics import (
    record_batch_operation,
    storage_client_initializations,
    storage_presigned_urls_generated,
)
from .path import build_object_key, normalize_url

if TYPE_CHECKING:
    from types import TracebackType

    from objstore.core.settings.storage import StorageSettings

logger = logging.getLogger(__name__)

# SigV4 presigned URLs cannot outlive 7 days
MAX_PRESIGNED_URL_EXPIRY_SECONDS = 604800


class StorageClient:
    """Async S3-compatible storage client bound to one bucket.

    Supports AWS S3, MinIO and any S3-compatible endpoint. Requests use
    static credentials, SigV4 signing and path-style addressing by default.

    The client is safe to share between tasks. The underlying aioboto3
    client is opened once (on ``startup()``, ``async with`` or first use)
    and is not mutated afterwards.

    Example:
        >>> from objstore.core.settings import get_storage_settings
        >>> async with StorageClient(get_storage_settings()) as client:
        ...     with open("scan.pdf", "rb") as f:
        ...         url = await client.upload_file("invoice-42", "scan.pdf", f, "application/pdf")
        ...     urls = await client.list_presigned_urls("invoice-42/")
    """

    def __init__(self, settings: StorageSettings) -> None:
        """Initialize storage client with settings.

        Args:
            settings: Storage settings containing S3 configuration.

        Raises:
            StorageNotConfiguredError: If either credential is empty or the
                botocore configuration cannot be built.
        """
        if not settings.is_configured:
            raise StorageNotConfiguredError(
                "S3 credentials not configured. Set STORAGE_ACCESS_KEY and STORAGE_SECRET_KEY.",
                metadata={"bucket": settings.bucket, "endpoint": settings.endpoint},
            )

        try:
            self._boto_config = Config(
                signature_version=settings.signature_version,
                s3=settings.get_s3_addressing_config(),
                retries={
                    "max_attempts": settings.max_retries,
                    "mode": settings.retry_mode,
                },
                connect_timeout=settings.timeout,
                read_timeout=settings.timeout,
                max_pool_connections=settings.max_pool_connections,
            )
            self._client_kwargs = settings.get_boto3_config()
            self._session = aioboto3.Session()
        except (BotoCoreError, TypeError, ValueError) as e:
            raise StorageNotConfiguredError(
                f"Failed to load S3 client configuration: {e}",
                metadata={"endpoint": settings.endpoint, "region": settings.region},
            ) from e

        self.settings = settings
        self._client: Any = None
        self._client_context: Any = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> StorageClient:
        """Async context manager entry."""
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.shutdown()

    @property
    def bucket(self) -> str:
        """Bucket every operation targets."""
        return self.settings.bucket

    @property
    def endpoint(self) -> str:
        """Configured endpoint URL (empty for AWS S3)."""
        return self.settings.endpoint

    @property
    def is_ready(self) -> bool:
        """Check if the S3 client has been opened."""
        return self._client is not None

    async def startup(self) -> None:
        """Open the S3 client.

        Raises:
            StorageError: If the client cannot be created.
        """
        await self.ensure_client()

    async def shutdown(self) -> None:
        """Close the S3 client if it is open."""
        if self._client_context is None:
            logger.debug("Storage client not initialized, nothing to shutdown")
            return

        logger.info("Shutting down storage client")
        await self.close()

    async def close(self) -> None:
        """Close the S3 client and clean up resources."""
        if self._client_context is not None:
            try:
                await self._client_context.__aexit__(None, None, None)
            except Exception as e:
                logger.warning("Error closing storage client: %s", e)
            finally:
                self._client = None
                self._client_context = None

    async def ensure_client(self) -> Any:
        """Ensure the S3 client is open and return it.

        Concurrent first callers share a single client.

        Returns:
            The open aiobotocore S3 client.

        Raises:
            StorageError: If client initialization fails.
        """
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is not None:
                return self._client

            try:
                client_context = self._session.client(
                    "s3",
                    **self._client_kwargs,
                    config=self._boto_config,
                )
                client = await client_context.__aenter__()
            except Exception as e:
                storage_client_initializations.labels(status="error").inc()
                logger.exception(
                    "Failed to initialize storage client",
                    extra={"endpoint": self.endpoint, "region": self.settings.region},
                )
                raise StorageError(
                    f"Failed to initialize S3 client: {e}",
                    code="STORAGE_INITIALIZATION_ERROR",
                    status_code=503,
                    metadata={"endpoint": self.endpoint, "error": str(e)},
                ) from e

            self._client_context = client_context
            self._client = client
            storage_client_initializations.labels(status="success").inc()

            logger.info(
                "Storage client initialized",
                extra={
                    "endpoint": self.endpoint,
                    "bucket": self.bucket,
                    "region": self.settings.region,
                    "path_style": self.settings.force_path_style,
                },
            )

        return self._client

    async def upload_file(
        self,
        object_id: str,
        key: str,
        body: BinaryIO | bytes,
        content_type: str,
    ) -> str:
        """Upload an object and return a presigned GET URL for it.

        The object is stored under ``{object_id}/{key}``. If the upload
        succeeds but signing fails, the object stays in the bucket and
        StoragePresignError is raised.

        Args:
            object_id: Logical group the object belongs to.
            key: File name within the group.
            body: Bytes or a readable binary stream.
            content_type: MIME type stored with the object.

        Returns:
            Presigned URL valid for the configured expiry (15 minutes by default).

        Raises:
            StorageError: If the upload fails.
            StoragePresignError: If the URL cannot be generated after upload.
        """
        object_key = build_object_key(object_id, key)
        size_bytes = len(body) if isinstance(body, bytes | bytearray) else None

        async with track_storage_operation(
            "upload",
            key=object_key,
            bucket=self.bucket,
            size_bytes=size_bytes,
            content_type=content_type,
        ):
            try:
                s3 = await self.ensure_client()
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=object_key,
                    Body=body,
                    ContentType=content_type,
                )
            except ClientError as e:
                logger.exception(
                    "Failed to upload file to storage",
                    extra={"key": object_key, "error": str(e)},
                )
                raise map_boto_error(e, operation="upload", key=object_key) from e
            except StorageError:
                raise
            except Exception as e:
                logger.exception(
                    "Unexpected error during file upload",
                    extra={"key": object_key, "error": str(e)},
                )
                raise StorageUploadError(
                    f"Failed to upload file to S3: {e}",
                    metadata={"key": object_key, "bucket": self.bucket, "error": str(e)},
                ) from e

        logger.info(
            "File uploaded to storage",
            extra={
                "key": object_key,
                "bucket": self.bucket,
                "size_bytes": size_bytes,
                "content_type": content_type,
            },
        )

        try:
            return await self.get_presigned_url(object_key)
        except StorageError as e:
            raise StoragePresignError(
                f"Uploaded {object_key} but failed to generate presigned URL: {e.message}",
                metadata={"key": object_key, "bucket": self.bucket, "error": str(e)},
            ) from e

    async def delete_file(self, key: str) -> None:
        """Delete an object by its full key.

        Args:
            key: Full object key (no composite key is built here).

        Raises:
            StorageError: If deletion fails.
        """
        async with track_storage_operation("delete", key=key, bucket=self.bucket):
            try:
                s3 = await self.ensure_client()
                await s3.delete_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                logger.exception(
                    "Failed to delete file from storage",
                    extra={"key": key, "error": str(e)},
                )
                raise map_boto_error(e, operation="delete", key=key) from e
            except StorageError:
                raise
            except Exception as e:
                logger.exception(
                    "Unexpected error during file deletion",
                    extra={"key": key, "error": str(e)},
                )
                raise StorageError(
                    f"Failed to delete file from S3: {e}",
                    code="STORAGE_DELETE_ERROR",
                    metadata={"key": key, "bucket": self.bucket, "error": str(e)},
                ) from e

        logger.info("File deleted from storage", extra={"key": key, "bucket": self.bucket})

    async def get_presigned_url(
        self,
        key: str,
        expires_in: int | timedelta | None = None,
    ) -> str:
        """Generate a presigned GET URL for an object.

        Args:
            key: Full object key.
            expires_in: Expiration as seconds or timedelta. Defaults to
                ``presigned_url_expiry_seconds`` (15 minutes).

        Returns:
            Presigned URL.

        Raises:
            StorageValidationError: If the expiration is out of range.
            StoragePresignError: If URL generation fails.
        """
        expires_seconds = self._resolve_expiry(expires_in)

        async with track_storage_operation("presign", key=key, bucket=self.bucket):
            try:
                s3 = await self.ensure_client()
                url_raw = await s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": key},
                    ExpiresIn=expires_seconds,
                )
            except ClientError as e:
                logger.exception(
                    "Failed to generate presigned URL",
                    extra={"key": key, "error": str(e)},
                )
                raise map_boto_error(e, operation="presigned_url", key=key) from e
            except StorageError:
                raise
            except Exception as e:
                logger.exception(
                    "Unexpected error generating presigned URL",
                    extra={"key": key, "error": str(e)},
                )
                raise StoragePresignError(
                    f"Failed to generate presigned URL for {key}: {e}",
                    metadata={"key": key, "bucket": self.bucket, "error": str(e)},
                ) from e

        storage_presigned_urls_generated.inc()
        logger.debug(
            "Generated presigned download URL for %s (expires in %ss)",
            key,
            expires_seconds,
        )
        return str(url_raw)

    async def file_exists(self, key: str, *, strict: bool = False) -> bool:
        """Check if an object exists.

        By default every failure of the HEAD request is reported as
        ``False``, so a network or credential problem looks the same as a
        missing object. Those failures are logged at warning level. Pass
        ``strict=True`` to only treat a genuine not-found as ``False`` and
        raise everything else.

        Args:
            key: Full object key.
            strict: Raise on errors other than not-found.

        Returns:
            True if the object exists, False otherwise.

        Raises:
            StorageError: Only when ``strict`` is True.
        """
        async with track_storage_operation("exists", key=key, bucket=self.bucket) as ctx:
            try:
                s3 = await self.ensure_client()
                await s3.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if is_not_found_error(e):
                    ctx["exists"] = False
                    return False
                if strict:
                    logger.exception(
                        "Error checking file existence",
                        extra={"key": key, "error": str(e)},
                    )
                    raise map_boto_error(e, operation="file_exists", key=key) from e
                logger.warning(
                    "Existence check failed, reporting %s as absent",
                    key,
                    extra={"key": key, "error": str(e)},
                )
                ctx["exists"] = False
                return False
            except Exception as e:
                if strict:
                    if isinstance(e, StorageError):
                        raise
                    raise StorageError(
                        f"Failed to check existence of {key}: {e}",
                        code="STORAGE_EXISTS_ERROR",
                        metadata={"key": key, "bucket": self.bucket, "error": str(e)},
                    ) from e
                logger.warning(
                    "Existence check failed, reporting %s as absent",
                    key,
                    extra={"key": key, "error": str(e)},
                )
                ctx["exists"] = False
                return False

            ctx["exists"] = True
            return True

    async def list_object_keys(self, prefix: str) -> list[str]:
        """List object keys under a prefix, in the order the service returns them.

        Follows continuation tokens unless ``list_all_pages`` is disabled,
        in which case only the first page (up to 1000 keys) is returned.

        Args:
            prefix: Key prefix to list.

        Returns:
            Object keys.

        Raises:
            StorageError: If listing fails.
        """
        async with track_storage_operation("list", key=prefix, bucket=self.bucket) as ctx:
            try:
                s3 = await self.ensure_client()
                keys: list[str] = []
                params: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
                pages = 0
                while True:
                    response = await s3.list_objects_v2(**params)
                    pages += 1
                    keys.extend(obj["Key"] for obj in response.get("Contents", []))

                    token = response.get("NextContinuationToken")
                    if not (self.settings.list_all_pages and response.get("IsTruncated") and token):
                        break
                    params["ContinuationToken"] = token
            except ClientError as e:
                logger.exception(
                    "Failed to list objects",
                    extra={"prefix": prefix, "error": str(e)},
                )
                raise map_boto_error(e, operation="list", key=prefix) from e
            except StorageError:
                raise
            except Exception as e:
                logger.exception(
                    "Unexpected error listing objects",
                    extra={"prefix": prefix, "error": str(e)},
                )
                raise StorageError(
                    f"Failed to list objects: {e}",
                    code="STORAGE_LIST_ERROR",
                    metadata={"prefix": prefix, "bucket": self.bucket, "error": str(e)},
                ) from e

            ctx["count"] = len(keys)
            ctx["pages"] = pages

        logger.debug(
            "Listed %s objects",
            len(keys),
            extra={"bucket": self.bucket, "prefix": prefix, "pages": pages},
        )
        return keys

    async def find_key_by_presigned_url(self, presigned_url: str, prefix: str) -> str:
        """Find the key of the object a presigned URL points at.

        Re-signs every object under ``prefix`` and compares URLs without
        their query string and fragment. The signature part differs on every
        signing, the path part does not. Costs one signature per listed object.

        Args:
            presigned_url: URL to look up.
            prefix: Key prefix that scopes the search.

        Returns:
            The first matching key in listing order.

        Raises:
            StorageError: If listing fails.
            StorageFileNotFoundError: If no object under the prefix matches.
        """
        keys = await self.list_object_keys(prefix)
        target = normalize_url(presigned_url)

        async with track_storage_operation("find_key", key=prefix, bucket=self.bucket) as ctx:
            for key in keys:
                try:
                    candidate = await self.get_presigned_url(key)
                except StorageError as e:
                    logger.warning(
                        "Skipping %s while searching by presigned URL",
                        key,
                        extra={"key": key, "error": str(e)},
                    )
                    continue

                if normalize_url(candidate) == target:
                    ctx["matched_key"] = key
                    return key

            raise StorageFileNotFoundError(
                "Object not found for the given presigned URL",
                metadata={"prefix": prefix, "bucket": self.bucket, "searched": len(keys)},
            )

    async def presign_objects(self, prefix: str) -> PresignedURLBatch:
        """Presign every object under a prefix concurrently.

        Starts one task per listed object (bounded by
        ``presign_max_concurrency`` when set). URLs keep the listing order
        whatever order the signatures complete in.

        Args:
            prefix: Key prefix to list.

        Returns:
            PresignedURLBatch describing which keys were signed and which failed.

        Raises:
            StorageError: If listing fails.
        """
        keys = await self.list_object_keys(prefix)
        if not keys:
            return PresignedURLBatch(total=0)

        async with track_storage_operation(
            "presign_batch", key=prefix, bucket=self.bucket
        ) as ctx:
            batch = await presign_keys(
                self.get_presigned_url,
                keys,
                max_concurrency=self.settings.presign_max_concurrency,
            )
            ctx["outcome"] = batch.outcome.value
            ctx["failed"] = batch.failed

        record_batch_operation(
            "presign_batch",
            total_count=batch.total,
            success_count=batch.successful,
            failure_count=batch.failed,
        )

        if batch.outcome is BatchOutcome.PARTIAL:
            logger.warning(
                "%s out of %s presigned URLs failed to generate",
                batch.failed,
                batch.total,
                extra={"prefix": prefix, "bucket": self.bucket},
            )
        return batch

    async def list_presigned_urls(self, prefix: str) -> list[str]:
        """Return presigned URLs for every object under a prefix.

        - Empty prefix: returns ``[]``.
        - Some signatures failed: returns only the successful URLs.
        - All signatures failed: raises.

        Args:
            prefix: Key prefix to list.

        Returns:
            URLs in listing order, possibly fewer than the number of objects.

        Raises:
            StorageError: If listing fails.
            StoragePresignError: If every signature failed; chained to the
                first failure that completed.
        """
        batch = await self.presign_objects(prefix)

        if batch.outcome is BatchOutcome.FAILED:
            first_error = batch.first_error
            raise StoragePresignError(
                f"Failed to get presigned URLs: {first_error}",
                metadata={"prefix": prefix, "bucket": self.bucket, "failed": batch.failed},
            ) from first_error

        return batch.urls

    def _resolve_expiry(self, expires_in: int | timedelta | None) -> int:
        """Turn an expiration argument into whole seconds."""
        if expires_in is None:
            return self.settings.presigned_url_expiry_seconds

        seconds = (
            int(expires_in.total_seconds())
            if isinstance(expires_in, timedelta)
            else int(expires_in)
        )
        if not 0 < seconds <= MAX_PRESIGNED_URL_EXPIRY_SECONDS:
            raise StorageValidationError(
                f"Presigned URL expiration must be between 1 and {MAX_PRESIGNED_URL_EXPIRY_SECONDS} seconds",
                metadata={"expires_in": seconds},
            )
        return seconds


__all__ = ["MAX_PRESIGNED_URL_EXPIRY_SECONDS", "StorageClient"]
