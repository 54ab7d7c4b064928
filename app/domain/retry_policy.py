from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded attempt count with attempt-indexed exponential backoff.

    ``backoff_units(n)`` is the wait after the n-th retryable failure, before
    attempt n + 1. It depends only on ``n``; there is no jitter.
    """

    max_retries: int = 3
    time_unit_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.time_unit_seconds < 0:
            raise ValueError("time_unit_seconds must not be negative")

    def backoff_units(self, retry_count: int) -> int:
        if retry_count < 1:
            raise ValueError("retry_count must be at least 1")
        return 2**retry_count

    def backoff_seconds(self, retry_count: int) -> float:
        return self.backoff_units(retry_count) * self.time_unit_seconds

    def is_exhausted(self, retry_count: int) -> bool:
        return retry_count >= self.max_retries
