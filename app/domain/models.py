from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum


# Canonical submission lifecycle states.
#
# IMPORTANT:
# - Keep this enum synchronized with app/domain/lifecycle.py (ALLOWED_TRANSITIONS).
# - Keep this enum synchronized with the DB status CHECK constraint in
#   db/migrations/000001_bootstrap.up.sql.
class SubmissionStatus(StrEnum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class ProcessorOutcome(StrEnum):
    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    DELAYED_SUCCESS = "delayed_success"


@dataclass(frozen=True)
class Submission:
    submission_id: str
    email: str
    amount: Decimal
    status: str
    retry_count: int
    submitted_at: datetime
    idempotency_key: str | None = None
    error_message: str | None = None
    processed_at: datetime | None = None


@dataclass(frozen=True)
class SubmissionDraft:
    email: str
    amount: Decimal
    idempotency_key: str | None = None


@dataclass(frozen=True)
class SubmissionPatch:
    status: str | None = None
    retry_count: int | None = None
    error_message: str | None = None
    processed_at: datetime | None = None


@dataclass(frozen=True)
class ValidatedSubmission:
    email: str
    amount: Decimal
    idempotency_key: str | None = None


@dataclass(frozen=True)
class ProcessorResult:
    outcome: ProcessorOutcome
    delay_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.outcome in (ProcessorOutcome.SUCCESS, ProcessorOutcome.DELAYED_SUCCESS)


@dataclass(frozen=True)
class DuplicateCheck:
    is_duplicate: bool
    existing: Submission | None = None


@dataclass(frozen=True)
class SubmitResult:
    submission: Submission
    replayed: bool = False
