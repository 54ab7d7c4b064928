from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
import logging

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.handlers.deps import ApiDeps
from app.api.handlers.submissions import (
    check_duplicate_handler,
    error_response,
    get_submission_handler,
    list_submissions_handler,
    submit_handler,
)
from app.api.schemas import (
    CheckDuplicateRequest,
    CheckDuplicateResponse,
    DuplicateResponse,
    ErrorResponse,
    HealthResponse,
    SubmissionItem,
    SubmissionListResponse,
    SubmitFailedResponse,
    SubmitRequest,
    SubmitResponse,
)
from app.domain.errors import DomainError


def build_app(
    run_id: str,
    api_deps: ApiDeps | None = None,
    on_startup: Callable[[], Awaitable[None]] | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    logger = logging.getLogger("runtime")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        del app
        if on_startup is not None:
            await on_startup()

        logger.info("api started", extra={"service": "api", "run_id": run_id})

        yield

        if on_shutdown is not None:
            await on_shutdown()

        logger.info("api stopped", extra={"service": "api", "run_id": run_id})

    app = FastAPI(title="submission-gateway", version="0.1.0", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def on_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        del request
        errors = exc.errors()
        detail = errors[0].get("msg", "invalid request") if errors else "invalid request"
        return JSONResponse(status_code=400, content={"error": f"Invalid request body: {detail}"})

    @app.exception_handler(DomainError)
    async def on_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        del request
        response = error_response(exc)
        if response.status_code >= 500:
            logger.error(
                "request failed",
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"service": "api", "run_id": run_id},
            )
        return response

    @app.exception_handler(Exception)
    async def on_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        del request
        logger.error(
            "request failed",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"service": "api", "run_id": run_id, "error_code": "internal_error"},
        )
        body = ErrorResponse(error="Internal server error", message=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump(mode="json", exclude_none=True))

    def _deps() -> ApiDeps:
        if api_deps is None:
            raise HTTPException(status_code=503, detail="api dependencies are not available")
        return api_deps

    @app.get("/api/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", timestamp=datetime.now(tz=UTC))

    @app.post(
        "/api/submit",
        response_model=SubmitResponse,
        responses={
            400: {"model": ErrorResponse},
            409: {"model": DuplicateResponse},
            500: {"model": ErrorResponse},
            503: {"model": SubmitFailedResponse},
        },
        tags=["Submissions"],
    )
    async def submit(request: SubmitRequest) -> SubmitResponse:
        return await submit_handler(
            email=request.email,
            amount=request.amount,
            idempotency_key=request.idempotency_key,
            api_deps=_deps(),
        )

    @app.post(
        "/api/check-duplicate",
        response_model=CheckDuplicateResponse,
        response_model_exclude_none=True,
        responses={400: {"model": ErrorResponse}},
        tags=["Submissions"],
    )
    async def check_duplicate(request: CheckDuplicateRequest) -> CheckDuplicateResponse:
        return await check_duplicate_handler(
            email=request.email,
            amount=request.amount,
            api_deps=_deps(),
        )

    @app.get("/api/submissions", response_model=SubmissionListResponse, tags=["Submissions"])
    async def list_submissions(limit: int | None = Query(default=None, ge=1)) -> SubmissionListResponse:
        return await list_submissions_handler(limit=limit, api_deps=_deps())

    @app.get(
        "/api/submissions/{submission_id}",
        response_model=SubmissionItem,
        responses={404: {"model": ErrorResponse}},
        tags=["Submissions"],
    )
    async def get_submission(submission_id: str) -> SubmissionItem | JSONResponse:
        item = await get_submission_handler(submission_id=submission_id, api_deps=_deps())
        if item is None:
            return JSONResponse(status_code=404, content={"error": "submission not found"})
        return item

    return app
