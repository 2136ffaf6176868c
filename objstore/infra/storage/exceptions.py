"""Storage-specific exceptions for S3-compatible operations.

Every error the client raises is a ``StorageError``. Failures coming from
botocore are translated with ``map_boto_error`` so callers can tell
missing objects, permission problems and timeouts apart without inspecting
SDK responses.

Example:
    ```python
    from objstore.infra.storage.exceptions import StorageError, map_boto_error

    try:
        await s3.delete_object(Bucket=bucket, Key=key)
    except ClientError as e:
        raise map_boto_error(e, operation="delete", key=key) from e
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from objstore.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError

# head_object reports absence as a bare 404; get/list report NoSuchKey
NOT_FOUND_ERROR_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class StorageError(AppException):
    """Base exception for all storage-related errors.

    Attributes:
        code: Error code identifier for programmatic error handling.
        message: Human-readable error message.
        status_code: HTTP status code equivalent.
        extra: Additional context about the error (metadata).

    Example:
        ```python
        raise StorageError(
            message="Failed to list objects",
            code="STORAGE_LIST_ERROR",
            metadata={"prefix": "reports/"}
        )
        ```
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 500,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            status_code: HTTP status code equivalent (default: 500).
            metadata: Additional error context.
        """
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail=message,
            type=code.lower().replace("_", "-"),
            extra=metadata or {},
        )


class StorageNotConfiguredError(StorageError):
    """Raised when the client cannot be built from the given settings.

    Covers missing credentials and botocore configuration that fails to load.
    """

    def __init__(
        self,
        message: str = "S3 credentials not configured",
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_CONFIGURED",
            status_code=503,
            metadata=metadata,
        )


class StorageFileNotFoundError(StorageError):
    """Raised when a requested object does not exist in storage.

    Example:
        ```python
        raise StorageFileNotFoundError(
            "Object not found for the given presigned URL",
            metadata={"prefix": prefix}
        )
        ```
    """

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_FOUND",
            status_code=404,
            metadata=metadata,
        )


class StorageUploadError(StorageError):
    """Raised when writing an object fails for a reason botocore did not classify."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            metadata=metadata,
        )


class StoragePresignError(StorageError):
    """Raised when a presigned URL cannot be generated.

    Also raised by batch presigning when every object in the listing failed.
    """

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_PRESIGNED_URL_ERROR",
            status_code=500,
            metadata=metadata,
        )


class StoragePermissionError(StorageError):
    """Raised when the credentials are rejected or lack access."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_PERMISSION_DENIED",
            status_code=403,
            metadata=metadata,
        )


class StorageValidationError(StorageError):
    """Raised when a request parameter is rejected before or by the service."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_VALIDATION_ERROR",
            status_code=400,
            metadata=metadata,
        )


class StorageTimeoutError(StorageError):
    """Raised when the service reports a timeout or throttles the request."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_TIMEOUT",
            status_code=504,
            metadata=metadata,
        )


def get_error_code(error: ClientError) -> str:
    """Extract the S3 error code from a botocore ClientError."""
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


def is_not_found_error(error: ClientError) -> bool:
    """Check whether a ClientError means the object (or bucket) is absent."""
    return get_error_code(error) in NOT_FOUND_ERROR_CODES


def map_boto_error(
    error: ClientError,
    operation: str,
    key: str | None = None,
) -> StorageError:
    """Map a botocore ClientError to a domain-specific StorageError.

    Args:
        error: The botocore ClientError to map.
        operation: The storage operation being performed (e.g., "upload", "delete").
        key: Optional object key or prefix being operated on.

    Returns:
        StorageError: Appropriate domain-specific storage exception.

    Error Code Mappings:
        - NoSuchKey, NoSuchBucket, 404, NotFound -> StorageFileNotFoundError (404)
        - AccessDenied, InvalidAccessKeyId, SignatureDoesNotMatch, ... -> StoragePermissionError (403)
        - RequestTimeout, RequestTimeTooSkewed, SlowDown -> StorageTimeoutError (504)
        - InvalidRequest, InvalidArgument, InvalidBucketName, ... -> StorageValidationError (400)
        - Others -> StorageError (500)
    """
    error_code = get_error_code(error) or "Unknown"
    error_message = error.response.get("Error", {}).get("Message") or str(error)

    metadata: dict[str, Any] = {
        "operation": operation,
        "aws_error_code": error_code,
        "aws_error_message": error_message,
        "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
    }
    if key:
        metadata["key"] = key

    if "BucketName" in error.response.get("Error", {}):
        metadata["bucket"] = error.response["Error"]["BucketName"]  # type: ignore[typeddict-item]

    message = f"{operation.capitalize()} failed: {error_message}"

    if error_code in NOT_FOUND_ERROR_CODES or error_code == "NoSuchBucket":
        return StorageFileNotFoundError(message=message, metadata=metadata)

    if error_code in {
        "AccessDenied",
        "403",
        "Forbidden",
        "ExpiredToken",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "InvalidToken",
    }:
        return StoragePermissionError(message=message, metadata=metadata)

    if error_code in {
        "RequestTimeout",
        "RequestTimeTooSkewed",
        "SlowDown",
    }:
        return StorageTimeoutError(
            message=f"{operation.capitalize()} timed out: {error_message}",
            metadata=metadata,
        )

    if error_code in {
        "InvalidRequest",
        "InvalidArgument",
        "MalformedXML",
        "InvalidBucketName",
        "KeyTooLongError",
        "MetadataTooLarge",
    }:
        return StorageValidationError(message=message, metadata=metadata)

    return StorageError(
        message=message,
        code="STORAGE_ERROR",
        status_code=500,
        metadata=metadata,
    )
