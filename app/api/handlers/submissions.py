from __future__ import annotations

from fastapi.responses import JSONResponse

from app.api.handlers.deps import ApiDeps
from app.api.schemas import (
    CheckDuplicateResponse,
    DuplicateResponse,
    ErrorResponse,
    SubmissionItem,
    SubmissionListResponse,
    SubmitFailedResponse,
    SubmitResponse,
)
from app.domain.error_taxonomy import error_code_for, http_status_for
from app.domain.errors import DomainError, DownstreamExhaustedError, DuplicateSubmissionError
from app.domain.models import Submission, SubmitResult
from app.domain.validation import validate_submission

COMPONENT_ID = "api.submissions"

SUCCESS_MESSAGE = "Form submitted successfully"
REPLAY_MESSAGE = "Submission already processed"
FAILED_MESSAGE = "Service temporarily unavailable"
DUPLICATE_CHECK_MESSAGE = "Duplicate submission detected"


async def submit_handler(
    *,
    email: str | None,
    amount: object,
    idempotency_key: str | None,
    api_deps: ApiDeps,
) -> SubmitResponse:
    result = await api_deps.pipeline.submit(
        email=email,
        amount=amount,
        idempotency_key=idempotency_key,
    )
    return _submit_response(result)


async def check_duplicate_handler(
    *,
    email: str | None,
    amount: object,
    api_deps: ApiDeps,
) -> CheckDuplicateResponse:
    """Advisory pre-check; the pipeline repeats it strictly on submit."""
    validated = validate_submission(email=email, amount=amount)
    check = await api_deps.duplicates.check(email=validated.email, amount=validated.amount)
    if check.is_duplicate and check.existing is not None:
        return CheckDuplicateResponse(
            is_duplicate=True,
            existing_id=check.existing.submission_id,
            message=DUPLICATE_CHECK_MESSAGE,
        )
    return CheckDuplicateResponse(is_duplicate=False)


async def list_submissions_handler(*, limit: int | None, api_deps: ApiDeps) -> SubmissionListResponse:
    effective = api_deps.list_limit if limit is None else min(limit, api_deps.max_list_limit)
    submissions = await api_deps.repository.list_recent(limit=effective)
    return SubmissionListResponse(
        total=len(submissions),
        submissions=[submission_item(item) for item in submissions],
    )


async def get_submission_handler(*, submission_id: str, api_deps: ApiDeps) -> SubmissionItem | None:
    submission = await api_deps.repository.get(submission_id=submission_id)
    if submission is None:
        return None
    return submission_item(submission)


def submission_item(submission: Submission) -> SubmissionItem:
    return SubmissionItem(
        id=submission.submission_id,
        email=submission.email,
        amount=float(submission.amount),
        status=str(submission.status),
        retry_count=submission.retry_count,
        submitted_at=submission.submitted_at,
        processed_at=submission.processed_at,
        error_message=submission.error_message,
    )


def error_response(exc: DomainError) -> JSONResponse:
    """Renders a domain error in the stable wire shape for its code."""
    code = error_code_for(exc)
    status_code = http_status_for(code)

    body: ErrorResponse | DuplicateResponse | SubmitFailedResponse
    if isinstance(exc, DuplicateSubmissionError):
        body = DuplicateResponse(existing_id=exc.existing.submission_id, message=str(exc))
    elif isinstance(exc, DownstreamExhaustedError):
        body = SubmitFailedResponse(
            id=exc.submission.submission_id,
            status=str(exc.submission.status),
            retry_count=exc.submission.retry_count,
            error=str(exc),
            message=FAILED_MESSAGE,
        )
    elif code == "validation_error":
        body = ErrorResponse(error=str(exc))
    else:
        body = ErrorResponse(error="Error processing submission", message=str(exc))

    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _submit_response(result: SubmitResult) -> SubmitResponse:
    submission = result.submission
    return SubmitResponse(
        id=submission.submission_id,
        status=str(submission.status),
        email=submission.email,
        amount=float(submission.amount),
        retry_count=submission.retry_count,
        submitted_at=submission.submitted_at,
        processed_at=submission.processed_at,
        replayed=result.replayed,
        message=REPLAY_MESSAGE if result.replayed else SUCCESS_MESSAGE,
    )
