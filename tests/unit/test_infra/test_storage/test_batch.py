"""Unit tests for concurrent batch presigning."""

from __future__ import annotations

import asyncio

import pytest

from objstore.infra.storage.batch import (
    BatchOutcome,
    PresignedURLBatch,
    PresignFailure,
    presign_keys,
)


def make_signer(delays: dict[str, float] | None = None, failures: set[str] | None = None):
    """Build a sign function that sleeps per key and fails for selected keys."""
    delays = delays or {}
    failures = failures or set()
    state = {"in_flight": 0, "max_in_flight": 0}

    async def sign(key: str) -> str:
        state["in_flight"] += 1
        state["max_in_flight"] = max(state["max_in_flight"], state["in_flight"])
        try:
            await asyncio.sleep(delays.get(key, 0))
            if key in failures:
                raise RuntimeError(f"cannot sign {key}")
            return f"https://s3.example.com/bucket/{key}?X-Amz-Signature=sig"
        finally:
            state["in_flight"] -= 1

    return sign, state


class TestPresignedURLBatch:
    """Test outcome classification."""

    def test_empty(self):
        assert PresignedURLBatch(total=0).outcome is BatchOutcome.EMPTY

    def test_complete(self):
        batch = PresignedURLBatch(total=2, urls=["u1", "u2"])

        assert batch.outcome is BatchOutcome.COMPLETE
        assert batch.first_error is None

    def test_partial(self):
        error = RuntimeError("boom")
        batch = PresignedURLBatch(
            total=2,
            urls=["u1"],
            failures=[PresignFailure(index=1, key="b", error=error)],
        )

        assert batch.outcome is BatchOutcome.PARTIAL
        assert batch.successful == 1
        assert batch.failed == 1
        assert batch.first_error is error

    def test_failed(self):
        batch = PresignedURLBatch(
            total=1,
            failures=[PresignFailure(index=0, key="a", error=RuntimeError("boom"))],
        )

        assert batch.outcome is BatchOutcome.FAILED

    def test_to_dict(self):
        batch = PresignedURLBatch(
            total=2,
            urls=["u1"],
            failures=[PresignFailure(index=1, key="b", error=RuntimeError("boom"))],
            duration_seconds=0.12345,
        )

        assert batch.to_dict() == {
            "outcome": "partial",
            "total": 2,
            "successful": 1,
            "failed": 1,
            "duration_seconds": 0.123,
            "urls": ["u1"],
            "failures": [{"index": 1, "key": "b", "error": "boom"}],
        }


class TestPresignKeys:
    """Test the fan-out/fan-in coordinator."""

    @pytest.mark.asyncio
    async def test_no_keys(self):
        sign, state = make_signer()

        batch = await presign_keys(sign, [])

        assert batch.outcome is BatchOutcome.EMPTY
        assert state["max_in_flight"] == 0

    @pytest.mark.asyncio
    async def test_results_placed_by_listing_index(self):
        """Test that reversed completion order still yields listing order."""
        keys = ["a", "b", "c", "d"]
        sign, _ = make_signer(delays={"a": 0.04, "b": 0.03, "c": 0.02, "d": 0.01})

        batch = await presign_keys(sign, keys)

        assert [url.split("?")[0].rsplit("/", 1)[1] for url in batch.urls] == keys
        assert batch.outcome is BatchOutcome.COMPLETE

    @pytest.mark.asyncio
    async def test_failures_recorded_in_completion_order(self):
        sign, _ = make_signer(
            delays={"a": 0.03, "b": 0.0, "c": 0.01},
            failures={"a", "b"},
        )

        batch = await presign_keys(sign, ["a", "b", "c"])

        assert [(f.index, f.key) for f in batch.failures] == [(1, "b"), (0, "a")]
        assert str(batch.first_error) == "cannot sign b"
        assert len(batch.urls) == 1
        assert batch.outcome is BatchOutcome.PARTIAL

    @pytest.mark.asyncio
    async def test_all_failed(self):
        sign, _ = make_signer(failures={"a", "b"})

        batch = await presign_keys(sign, ["a", "b"])

        assert batch.outcome is BatchOutcome.FAILED
        assert batch.urls == []

    @pytest.mark.asyncio
    async def test_unbounded_by_default(self):
        keys = [f"k{i}" for i in range(20)]
        sign, state = make_signer(delays=dict.fromkeys(keys, 0.01))

        await presign_keys(sign, keys)

        assert state["max_in_flight"] == 20

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 3])
    async def test_max_concurrency(self, limit):
        keys = [f"k{i}" for i in range(8)]
        sign, state = make_signer(delays=dict.fromkeys(keys, 0.01))

        batch = await presign_keys(sign, keys, max_concurrency=limit)

        assert state["max_in_flight"] == limit
        assert batch.successful == 8

    @pytest.mark.asyncio
    async def test_failures_are_logged(self, caplog):
        sign, _ = make_signer(failures={"b"})

        await presign_keys(sign, ["a", "b"])

        assert "Failed to get presigned URL for index 1: cannot sign b" in caplog.text
