from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging

from app.domain.contracts import DownstreamProcessor, Sleeper, SubmissionRepository
from app.domain.errors import (
    DomainInvariantError,
    DownstreamExhaustedError,
    DuplicateSubmissionError,
    IdempotencyKeyConflictError,
)
from app.domain.lifecycle import is_terminal
from app.domain.models import (
    ProcessorResult,
    Submission,
    SubmissionDraft,
    SubmissionPatch,
    SubmissionStatus,
    SubmitResult,
)
from app.domain.retry_policy import RetryPolicy
from app.domain.use_cases.duplicates import DuplicateDetector
from app.domain.use_cases.idempotency import IdempotencyResolver
from app.domain.validation import validate_submission

COMPONENT_ID = "domain.submission.submit"
MAX_RETRIES_MESSAGE = "max retries reached"
DUPLICATE_MESSAGE = "Duplicate submission detected"

logger = logging.getLogger("runtime")


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SubmissionPipeline:
    """Validates, de-duplicates and drives one submission to a terminal state.

    Order of checks: validation, idempotency replay, content duplicate, then
    record creation and the bounded retry loop against the downstream
    processor. Retries apply to the processor call only; repository faults
    propagate untouched.
    """

    repository: SubmissionRepository
    processor: DownstreamProcessor
    duplicates: DuplicateDetector
    idempotency: IdempotencyResolver
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Sleeper = asyncio.sleep
    clock: Callable[[], datetime] = _utcnow
    replay_wait_seconds: float = 30.0
    replay_poll_seconds: float = 0.5

    async def submit(
        self,
        *,
        email: str | None,
        amount: object,
        idempotency_key: str | None = None,
    ) -> SubmitResult:
        validated = validate_submission(email=email, amount=amount, idempotency_key=idempotency_key)

        existing = await self.idempotency.resolve(validated.idempotency_key)
        if existing is not None:
            return await self._replay(existing)

        duplicate = await self.duplicates.check(email=validated.email, amount=validated.amount)
        if duplicate.is_duplicate and duplicate.existing is not None:
            logger.info(
                "duplicate submission rejected",
                extra={"submission_id": duplicate.existing.submission_id, "error_code": "duplicate_submission"},
            )
            raise DuplicateSubmissionError(DUPLICATE_MESSAGE, existing=duplicate.existing)

        draft = SubmissionDraft(
            email=validated.email,
            amount=validated.amount,
            idempotency_key=validated.idempotency_key,
        )
        try:
            submission = await self.repository.create(draft=draft)
        except IdempotencyKeyConflictError:
            # Lost the race against a concurrent call with the same key.
            winner = await self.idempotency.resolve(validated.idempotency_key)
            if winner is None:
                raise DomainInvariantError("idempotency conflict without existing submission") from None
            return await self._replay(winner)

        logger.info("submission created", extra={"submission_id": submission.submission_id})
        return await self._process(submission)

    async def _process(self, submission: Submission) -> SubmitResult:
        submission_id = submission.submission_id
        for attempt in range(1, self.retry_policy.max_retries + 1):
            result = await self._invoke(submission_id=submission_id, attempt=attempt)
            retry_count = attempt - 1

            if result is not None and result.succeeded:
                finalized = await self.repository.update(
                    submission_id=submission_id,
                    patch=SubmissionPatch(
                        status=SubmissionStatus.SUCCESS,
                        retry_count=retry_count,
                        processed_at=self.clock(),
                    ),
                )
                logger.info(
                    "submission succeeded",
                    extra={
                        "submission_id": submission_id,
                        "attempt": attempt,
                        "outcome": result.outcome,
                        "retry_count": retry_count,
                    },
                )
                return SubmitResult(submission=finalized)

            retry_count = attempt
            if self.retry_policy.is_exhausted(retry_count):
                failed = await self.repository.update(
                    submission_id=submission_id,
                    patch=SubmissionPatch(
                        status=SubmissionStatus.FAILED,
                        retry_count=retry_count,
                        error_message=MAX_RETRIES_MESSAGE,
                    ),
                )
                logger.warning(
                    "submission failed",
                    extra={
                        "submission_id": submission_id,
                        "attempt": attempt,
                        "retry_count": retry_count,
                        "error_code": "downstream_exhausted",
                    },
                )
                raise DownstreamExhaustedError(MAX_RETRIES_MESSAGE, submission=failed)

            await self.repository.update(
                submission_id=submission_id,
                patch=SubmissionPatch(retry_count=retry_count),
            )
            delay_seconds = self.retry_policy.backoff_seconds(retry_count)
            logger.info(
                "submission backoff",
                extra={
                    "submission_id": submission_id,
                    "attempt": attempt,
                    "retry_count": retry_count,
                    "delay_seconds": delay_seconds,
                },
            )
            await self.sleep(delay_seconds)

        raise DomainInvariantError("retry loop ended without a terminal outcome")

    async def _invoke(self, *, submission_id: str, attempt: int) -> ProcessorResult | None:
        """Calls the processor; a raised fault counts as a retryable failure."""
        try:
            result = await self.processor.invoke()
        except Exception:
            logger.warning(
                "processor call raised",
                exc_info=True,
                extra={"submission_id": submission_id, "attempt": attempt, "error_code": "downstream_unavailable"},
            )
            return None

        if not result.succeeded:
            logger.info(
                "processor returned retryable failure",
                extra={
                    "submission_id": submission_id,
                    "attempt": attempt,
                    "outcome": result.outcome,
                    "error_code": "downstream_unavailable",
                },
            )
        return result

    async def _replay(self, existing: Submission) -> SubmitResult:
        logger.info(
            "idempotent replay",
            extra={"submission_id": existing.submission_id, "outcome": existing.status},
        )
        current = existing
        waited = 0.0
        # A concurrent call may still own the record; wait for its outcome.
        while not is_terminal(current.status) and self.replay_poll_seconds > 0 and waited < self.replay_wait_seconds:
            await self.sleep(self.replay_poll_seconds)
            waited += self.replay_poll_seconds
            refreshed = await self.repository.get(submission_id=current.submission_id)
            if refreshed is None:
                raise DomainInvariantError("replayed submission disappeared")
            current = refreshed
        return SubmitResult(submission=current, replayed=True)
