from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal

from app.domain.errors import DomainInvariantError, IdempotencyKeyConflictError
from app.domain.ids import new_submission_public_id
from app.domain.lifecycle import ensure_transition
from app.domain.models import Submission, SubmissionDraft, SubmissionPatch, SubmissionStatus


@dataclass
class _SubmissionRow:
    id: int
    submission_id: str
    email: str
    amount: Decimal
    idempotency_key: str | None
    status: str = SubmissionStatus.PENDING
    retry_count: int = 0
    error_message: str | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    processed_at: datetime | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


def _snapshot(row: _SubmissionRow) -> Submission:
    return Submission(
        submission_id=row.submission_id,
        email=row.email,
        amount=row.amount,
        status=row.status,
        retry_count=row.retry_count,
        submitted_at=row.submitted_at,
        idempotency_key=row.idempotency_key,
        error_message=row.error_message,
        processed_at=row.processed_at,
    )


@dataclass
class InMemorySubmissionRepository:
    """Non-network repository with deterministic behavior for local mode."""

    submissions: dict[str, _SubmissionRow] = field(default_factory=dict)
    idempotency_index: dict[str, str] = field(default_factory=dict)
    next_submission_id: int = 1

    async def create(self, *, draft: SubmissionDraft) -> Submission:
        if draft.idempotency_key is not None and draft.idempotency_key in self.idempotency_index:
            raise IdempotencyKeyConflictError(draft.idempotency_key)

        submission_id = new_submission_public_id()
        row = _SubmissionRow(
            id=self.next_submission_id,
            submission_id=submission_id,
            email=draft.email,
            amount=draft.amount,
            idempotency_key=draft.idempotency_key,
        )
        self.submissions[submission_id] = row
        self.next_submission_id += 1
        if draft.idempotency_key is not None:
            self.idempotency_index[draft.idempotency_key] = submission_id
        return _snapshot(row)

    async def update(self, *, submission_id: str, patch: SubmissionPatch) -> Submission:
        row = self.submissions.get(submission_id)
        if row is None:
            raise DomainInvariantError(f"submission is not found: {submission_id}")
        if row.status != SubmissionStatus.PENDING:
            raise DomainInvariantError(f"submission {submission_id} is already {row.status}")
        if patch.status is not None:
            ensure_transition(from_state=row.status, to_state=patch.status)

        updated = replace(
            row,
            status=patch.status if patch.status is not None else row.status,
            retry_count=patch.retry_count if patch.retry_count is not None else row.retry_count,
            error_message=patch.error_message if patch.error_message is not None else row.error_message,
            processed_at=patch.processed_at if patch.processed_at is not None else row.processed_at,
            updated_at=datetime.now(tz=UTC),
        )
        self.submissions[submission_id] = updated
        return _snapshot(updated)

    async def get(self, *, submission_id: str) -> Submission | None:
        row = self.submissions.get(submission_id)
        if row is None:
            return None
        return _snapshot(row)

    async def find_by_idempotency_key(self, *, idempotency_key: str) -> Submission | None:
        submission_id = self.idempotency_index.get(idempotency_key)
        if submission_id is None:
            return None
        return _snapshot(self.submissions[submission_id])

    async def find_by_content(self, *, email: str, amount: Decimal, status: str) -> Submission | None:
        matches = [
            row
            for row in self.submissions.values()
            if row.email == email and row.amount == amount and row.status == status
        ]
        if not matches:
            return None
        latest = max(matches, key=lambda row: (row.processed_at or row.submitted_at, row.id))
        return _snapshot(latest)

    async def list_recent(self, *, limit: int) -> list[Submission]:
        rows = sorted(
            self.submissions.values(),
            key=lambda row: (row.submitted_at, row.id),
            reverse=True,
        )
        return [_snapshot(row) for row in rows[: max(limit, 0)]]
