"""Storage metrics for Prometheus monitoring.

Tracks every client operation (upload, delete, exists, presign, list,
find_key, presign_batch):
- Operation counters and timing
- Upload size distribution
- Batch presign sizes with success/failure counts
- Errors by exception type
- Presigned URLs generated
- Client lifecycle

All metrics are registered with the shared REGISTRY from
objstore.infra.metrics.prometheus.

Usage:
    from objstore.infra.storage.metrics import record_operation_success

    record_operation_success("upload", duration_seconds=0.4, size_bytes=1048576)
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

from objstore.infra.metrics.prometheus import REGISTRY

# Covers latency from 10ms to 30s for network operations
STORAGE_LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

# 1KB to 100MB
STORAGE_SIZE_BUCKETS = (1024, 10240, 102400, 1048576, 10485760, 52428800, 104857600)

# Objects per batch presign; unbounded fan-out can reach thousands
BATCH_SIZE_BUCKETS = (1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000)

storage_operations_total = Counter(
    "objstore_operations_total",
    "Total storage operations",
    ["operation", "status"],
    registry=REGISTRY,
)

storage_operation_duration_seconds = Histogram(
    "objstore_operation_duration_seconds",
    "Storage operation duration in seconds",
    ["operation"],
    buckets=STORAGE_LATENCY_BUCKETS,
    registry=REGISTRY,
)

storage_file_size_bytes = Histogram(
    "objstore_file_size_bytes",
    "Size of uploaded objects in bytes",
    ["operation"],
    buckets=STORAGE_SIZE_BUCKETS,
    registry=REGISTRY,
)

storage_batch_size = Histogram(
    "objstore_batch_size",
    "Number of objects in batch operations",
    ["operation"],
    buckets=BATCH_SIZE_BUCKETS,
    registry=REGISTRY,
)

storage_batch_success_count = Counter(
    "objstore_batch_success_count",
    "Number of objects successfully processed in batch operations",
    ["operation"],
    registry=REGISTRY,
)

storage_batch_failure_count = Counter(
    "objstore_batch_failure_count",
    "Number of objects that failed in batch operations",
    ["operation"],
    registry=REGISTRY,
)

storage_operations_in_progress = Gauge(
    "objstore_operations_in_progress",
    "Number of storage operations currently in flight",
    registry=REGISTRY,
)

storage_errors_total = Counter(
    "objstore_errors_total",
    "Storage operation errors by type",
    ["operation", "error_type"],
    registry=REGISTRY,
)

storage_presigned_urls_generated = Counter(
    "objstore_presigned_urls_generated",
    "Total presigned GET URLs generated",
    registry=REGISTRY,
)

storage_client_initializations = Counter(
    "objstore_client_initializations",
    "Number of S3 client initializations",
    ["status"],  # success/error
    registry=REGISTRY,
)


def record_operation_success(
    operation: str,
    duration_seconds: float,
    size_bytes: int | None = None,
) -> None:
    """Record a successful storage operation.

    Args:
        operation: The operation type (e.g., 'upload', 'delete', 'presign')
        duration_seconds: Operation duration in seconds
        size_bytes: Optional object size in bytes for uploads
    """
    storage_operations_total.labels(operation=operation, status="success").inc()
    storage_operation_duration_seconds.labels(operation=operation).observe(duration_seconds)
    if size_bytes is not None:
        storage_file_size_bytes.labels(operation=operation).observe(size_bytes)


def record_operation_error(
    operation: str,
    error_type: str,
    duration_seconds: float,
) -> None:
    """Record a failed storage operation.

    Args:
        operation: The operation type (e.g., 'upload', 'delete', 'presign')
        error_type: The error class name (e.g., 'StoragePermissionError')
        duration_seconds: Operation duration in seconds before failure
    """
    storage_operations_total.labels(operation=operation, status="error").inc()
    storage_operation_duration_seconds.labels(operation=operation).observe(duration_seconds)
    storage_errors_total.labels(operation=operation, error_type=error_type).inc()


def record_batch_operation(
    operation: str,
    total_count: int,
    success_count: int,
    failure_count: int,
) -> None:
    """Record batch operation metrics.

    Args:
        operation: The batch operation type (e.g., 'presign_batch')
        total_count: Total number of objects in the batch
        success_count: Number of objects successfully processed
        failure_count: Number of objects that failed

    Example:
        >>> record_batch_operation(
        ...     "presign_batch",
        ...     total_count=100,
        ...     success_count=98,
        ...     failure_count=2,
        ... )
    """
    storage_batch_size.labels(operation=operation).observe(total_count)
    storage_batch_success_count.labels(operation=operation).inc(success_count)
    storage_batch_failure_count.labels(operation=operation).inc(failure_count)
