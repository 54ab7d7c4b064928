from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from app.domain.errors import (
    DomainValidationError,
    DownstreamExhaustedError,
    DuplicateSubmissionError,
    StoreError,
)

# Canonical error vocabulary for the submission pipeline.
ErrorCode = Literal[
    "validation_error",
    "duplicate_submission",
    "downstream_unavailable",
    "downstream_exhausted",
    "store_unavailable",
    "internal_error",
]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "validation_error",
    "duplicate_submission",
    "downstream_unavailable",
    "downstream_exhausted",
    "store_unavailable",
    "internal_error",
)

HTTP_STATUS_BY_CODE: Mapping[ErrorCode, int] = {
    "validation_error": 400,
    "duplicate_submission": 409,
    "downstream_unavailable": 503,
    "downstream_exhausted": 503,
    "store_unavailable": 500,
    "internal_error": 500,
}


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def error_code_for(exc: BaseException) -> ErrorCode:
    if isinstance(exc, DomainValidationError):
        return "validation_error"
    if isinstance(exc, DuplicateSubmissionError):
        return "duplicate_submission"
    if isinstance(exc, DownstreamExhaustedError):
        return "downstream_exhausted"
    if isinstance(exc, StoreError):
        return "store_unavailable"
    return "internal_error"


def http_status_for(code: str) -> int:
    if not is_canonical_error_code(code):
        return 500
    return HTTP_STATUS_BY_CODE[code]  # type: ignore[index]
