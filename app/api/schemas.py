from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


SUBMISSION_ID_PATTERN = r"^sub_[0-9A-HJKMNP-TV-Z]{26}$"


class ApiModel(BaseModel):
    # Wire names are camelCase; Python attributes stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(ApiModel):
    error: str
    message: str | None = None


class HealthResponse(ApiModel):
    status: str
    timestamp: datetime


class SubmitRequest(ApiModel):
    email: str | None = None
    amount: float | str | None = None
    idempotency_key: str | None = Field(default=None, max_length=256)


class SubmitResponse(ApiModel):
    id: str = Field(pattern=SUBMISSION_ID_PATTERN)
    status: str
    email: str
    amount: float
    retry_count: int = Field(ge=0)
    submitted_at: datetime
    processed_at: datetime | None = None
    replayed: bool = False
    message: str


class SubmitFailedResponse(ApiModel):
    id: str = Field(pattern=SUBMISSION_ID_PATTERN)
    status: str
    retry_count: int = Field(ge=0)
    error: str
    message: str


class DuplicateResponse(ApiModel):
    is_duplicate: bool = True
    existing_id: str | None = None
    message: str


class CheckDuplicateRequest(ApiModel):
    email: str | None = None
    amount: float | str | None = None


class CheckDuplicateResponse(ApiModel):
    is_duplicate: bool
    existing_id: str | None = None
    message: str | None = None


class SubmissionItem(ApiModel):
    id: str
    email: str
    amount: float
    status: str
    retry_count: int
    submitted_at: datetime
    processed_at: datetime | None = None
    error_message: str | None = None


class SubmissionListResponse(ApiModel):
    total: int = Field(ge=0)
    submissions: list[SubmissionItem]
