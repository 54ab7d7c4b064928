from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import importlib
from decimal import Decimal
from typing import Any

from app.domain.errors import DomainError, DomainInvariantError, IdempotencyKeyConflictError, StoreError
from app.domain.ids import new_submission_public_id
from app.domain.lifecycle import ensure_transition
from app.domain.models import Submission, SubmissionDraft, SubmissionPatch, SubmissionStatus
from app.repositories.sql_loader import load_sql

try:
    asyncpg_module = importlib.import_module("asyncpg")
except ModuleNotFoundError:  # pragma: no cover
    asyncpg_module = None  # type: ignore[assignment]


SQL_CREATE_SUBMISSION = load_sql("create_submission.sql")
SQL_GET_SUBMISSION = load_sql("get_submission.sql")
SQL_UPDATE_SUBMISSION = load_sql("update_submission.sql")
SQL_FIND_BY_IDEMPOTENCY_KEY = load_sql("find_by_idempotency_key.sql")
SQL_FIND_BY_CONTENT = load_sql("find_by_content.sql")
SQL_LIST_RECENT = load_sql("list_recent.sql")

IDEMPOTENCY_KEY_INDEX = "submissions_idempotency_key_uq"


def _is_unique_violation(exc: Exception) -> bool:
    return getattr(exc, "sqlstate", None) == "23505"


@contextmanager
def _store_errors() -> Iterator[None]:
    """Maps driver and connection faults to StoreError, keeping domain errors."""
    try:
        yield
    except DomainError:
        raise
    except Exception as exc:
        raise StoreError(f"submission store is unavailable: {exc}") from exc


def _row_to_submission(row: Any) -> Submission:
    return Submission(
        submission_id=row["public_id"],
        email=row["email"],
        amount=Decimal(row["amount"]),
        status=row["status"],
        retry_count=row["retry_count"],
        submitted_at=row["submitted_at"],
        idempotency_key=row["idempotency_key"],
        error_message=row["error_message"],
        processed_at=row["processed_at"],
    )


@dataclass
class AsyncpgPoolManager:
    dsn: str
    pool: Any | None = None

    async def startup(self) -> None:
        if asyncpg_module is None:  # pragma: no cover
            raise RuntimeError("asyncpg is required for postgres repository mode")
        self.pool = await asyncpg_module.create_pool(
            dsn=self.dsn,
            min_size=1,
            max_size=5,
        )

    async def shutdown(self) -> None:
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None


@dataclass
class PostgresSubmissionRepository:
    pool_manager: AsyncpgPoolManager

    def _pool(self) -> Any:
        if self.pool_manager.pool is None:
            raise StoreError("postgres pool is not initialized")
        return self.pool_manager.pool

    async def create(self, *, draft: SubmissionDraft) -> Submission:
        pool = self._pool()
        with _store_errors():
            async with pool.acquire() as conn:
                for _ in range(5):
                    submission_id = new_submission_public_id()
                    try:
                        row = await conn.fetchrow(
                            SQL_CREATE_SUBMISSION,
                            submission_id,
                            draft.email,
                            draft.amount,
                            draft.idempotency_key,
                        )
                    except Exception as exc:
                        if not _is_unique_violation(exc):
                            raise
                        if getattr(exc, "constraint_name", None) == IDEMPOTENCY_KEY_INDEX and draft.idempotency_key:
                            raise IdempotencyKeyConflictError(draft.idempotency_key) from exc
                        continue
                    if row is None:
                        raise DomainInvariantError("failed to create submission")
                    return _row_to_submission(row)
        raise DomainInvariantError("failed to allocate unique submission public id")

    async def update(self, *, submission_id: str, patch: SubmissionPatch) -> Submission:
        if patch.status is not None:
            ensure_transition(from_state=SubmissionStatus.PENDING, to_state=patch.status)
        pool = self._pool()
        with _store_errors():
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    SQL_UPDATE_SUBMISSION,
                    submission_id,
                    SubmissionStatus.PENDING.value,
                    str(patch.status) if patch.status is not None else None,
                    patch.retry_count,
                    patch.error_message,
                    patch.processed_at,
                )
                if row is not None:
                    return _row_to_submission(row)
                current = await conn.fetchrow(SQL_GET_SUBMISSION, submission_id)
        if current is None:
            raise DomainInvariantError(f"submission is not found: {submission_id}")
        raise DomainInvariantError(f"submission {submission_id} is already {current['status']}")

    async def get(self, *, submission_id: str) -> Submission | None:
        pool = self._pool()
        with _store_errors():
            async with pool.acquire() as conn:
                row = await conn.fetchrow(SQL_GET_SUBMISSION, submission_id)
        if row is None:
            return None
        return _row_to_submission(row)

    async def find_by_idempotency_key(self, *, idempotency_key: str) -> Submission | None:
        pool = self._pool()
        with _store_errors():
            async with pool.acquire() as conn:
                row = await conn.fetchrow(SQL_FIND_BY_IDEMPOTENCY_KEY, idempotency_key)
        if row is None:
            return None
        return _row_to_submission(row)

    async def find_by_content(self, *, email: str, amount: Decimal, status: str) -> Submission | None:
        pool = self._pool()
        with _store_errors():
            async with pool.acquire() as conn:
                row = await conn.fetchrow(SQL_FIND_BY_CONTENT, email, amount, str(status))
        if row is None:
            return None
        return _row_to_submission(row)

    async def list_recent(self, *, limit: int) -> list[Submission]:
        pool = self._pool()
        with _store_errors():
            async with pool.acquire() as conn:
                rows = await conn.fetch(SQL_LIST_RECENT, limit)
        return [_row_to_submission(row) for row in rows]
