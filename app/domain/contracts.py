from __future__ import annotations

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Protocol, runtime_checkable

from app.domain.models import ProcessorResult, Submission, SubmissionDraft, SubmissionPatch


# Suspends the calling coroutine; asyncio.sleep in production.
Sleeper = Callable[[float], Awaitable[None]]


@runtime_checkable
class SubmissionRepository(Protocol):
    """Storage contract for submission records.

    Reads and writes are atomic per record only; there are no cross-record
    transactions. ``create`` must raise ``IdempotencyKeyConflictError`` when the
    idempotency key is already taken so callers can fall back to the winner.
    """

    async def create(self, *, draft: SubmissionDraft) -> Submission: ...

    async def update(self, *, submission_id: str, patch: SubmissionPatch) -> Submission: ...

    async def get(self, *, submission_id: str) -> Submission | None: ...

    async def find_by_idempotency_key(self, *, idempotency_key: str) -> Submission | None: ...

    async def find_by_content(self, *, email: str, amount: Decimal, status: str) -> Submission | None: ...

    async def list_recent(self, *, limit: int) -> list[Submission]: ...


@runtime_checkable
class DownstreamProcessor(Protocol):
    async def invoke(self) -> ProcessorResult: ...


@runtime_checkable
class RandomSource(Protocol):
    """Subset of ``random.Random`` used by the simulator."""

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...
