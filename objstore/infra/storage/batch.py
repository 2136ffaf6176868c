"""Concurrent batch presigning.

One asyncio task is started per object key. Each task reports an
``(index, url, error)`` record; the coordinator consumes the records in
completion order and places every URL at its listing index, so the output
order never depends on which signature finished first.

The outcome is reported explicitly instead of as value-or-error:

- ``EMPTY``: nothing was listed
- ``COMPLETE``: every key was signed
- ``PARTIAL``: some keys failed, the rest were signed
- ``FAILED``: every key failed
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)


class BatchOutcome(StrEnum):
    """Overall result of a batch presign."""

    EMPTY = "empty"
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class PresignFailure:
    """A key that could not be signed."""

    index: int
    key: str
    error: Exception


@dataclass
class PresignedURLBatch:
    """Result of presigning every object under a prefix.

    Attributes:
        total: Number of keys that were listed.
        urls: Successfully generated URLs, in listing order.
        failures: Failed keys, in the order their tasks completed.
        duration_seconds: Wall time spent signing.
    """

    total: int
    urls: list[str] = field(default_factory=list)
    failures: list[PresignFailure] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def successful(self) -> int:
        return len(self.urls)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def outcome(self) -> BatchOutcome:
        if self.total == 0:
            return BatchOutcome.EMPTY
        if self.failed == 0:
            return BatchOutcome.COMPLETE
        if self.failed == self.total:
            return BatchOutcome.FAILED
        return BatchOutcome.PARTIAL

    @property
    def first_error(self) -> Exception | None:
        """The first failure to complete, if any."""
        return self.failures[0].error if self.failures else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CLI/JSON output."""
        return {
            "outcome": self.outcome.value,
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 3),
            "urls": self.urls,
            "failures": [
                {"index": f.index, "key": f.key, "error": str(f.error)}
                for f in self.failures
            ],
        }


async def presign_keys(
    sign: Callable[[str], Awaitable[str]],
    keys: Sequence[str],
    max_concurrency: int | None = None,
) -> PresignedURLBatch:
    """Sign every key concurrently and collect the results by listing index.

    Args:
        sign: Coroutine function returning a presigned URL for a key.
        keys: Keys in listing order.
        max_concurrency: Optional cap on in-flight signatures. None starts
            every task at once.

    Returns:
        PresignedURLBatch with URLs in listing order and failures in
        completion order.
    """
    if not keys:
        return PresignedURLBatch(total=0)

    start_time = time.perf_counter()
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def sign_one(index: int, key: str) -> tuple[int, str | None, Exception | None]:
        try:
            if semaphore is None:
                url = await sign(key)
            else:
                async with semaphore:
                    url = await sign(key)
        except Exception as e:
            return index, None, e
        return index, url, None

    tasks = [asyncio.ensure_future(sign_one(i, key)) for i, key in enumerate(keys)]

    slots: list[str | None] = [None] * len(keys)
    failures: list[PresignFailure] = []
    try:
        for next_result in asyncio.as_completed(tasks):
            index, url, error = await next_result
            if error is not None:
                logger.error(
                    "Failed to get presigned URL for index %s: %s",
                    index,
                    error,
                    extra={"index": index, "key": keys[index]},
                )
                failures.append(PresignFailure(index=index, key=keys[index], error=error))
                continue
            slots[index] = url
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    return PresignedURLBatch(
        total=len(keys),
        urls=[url for url in slots if url is not None],
        failures=failures,
        duration_seconds=time.perf_counter() - start_time,
    )
