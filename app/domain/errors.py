from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.models import Submission


class DomainError(Exception):
    pass


class DomainValidationError(DomainError):
    pass


class DomainInvariantError(DomainError):
    pass


class DomainDependencyError(DomainError):
    pass


class SubmissionValidationError(DomainValidationError):
    pass


class DuplicateSubmissionError(DomainError):
    def __init__(self, message: str, *, existing: Submission) -> None:
        super().__init__(message)
        self.existing = existing


class DownstreamExhaustedError(DomainError):
    def __init__(self, message: str, *, submission: Submission) -> None:
        super().__init__(message)
        self.submission = submission


class StoreError(DomainDependencyError):
    pass


class IdempotencyKeyConflictError(DomainInvariantError):
    def __init__(self, idempotency_key: str) -> None:
        super().__init__(f"idempotency key is already taken: {idempotency_key}")
        self.idempotency_key = idempotency_key
