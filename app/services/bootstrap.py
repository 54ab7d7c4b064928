from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import random

from app.api.handlers.deps import ApiDeps
from app.clients.simulator import SimulatedProcessor
from app.domain.contracts import DownstreamProcessor, Sleeper, SubmissionRepository
from app.domain.retry_policy import RetryPolicy
from app.domain.use_cases.duplicates import DuplicateDetector
from app.domain.use_cases.idempotency import IdempotencyResolver
from app.domain.use_cases.submissions import SubmissionPipeline
from app.repositories.postgres import AsyncpgPoolManager, PostgresSubmissionRepository
from app.repositories.stub import InMemorySubmissionRepository
from app.settings import RuntimeSettings, runtime_settings_from_env


@dataclass
class RuntimeContainer:
    settings: RuntimeSettings
    repository: SubmissionRepository
    processor: DownstreamProcessor
    pipeline: SubmissionPipeline
    api_deps: ApiDeps
    on_startup: Callable[[], Awaitable[None]] | None
    on_shutdown: Callable[[], Awaitable[None]] | None


def build_runtime_container(
    settings: RuntimeSettings | None = None,
    *,
    repository: SubmissionRepository | None = None,
    processor: DownstreamProcessor | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> RuntimeContainer:
    settings = settings or runtime_settings_from_env()
    on_startup: Callable[[], Awaitable[None]] | None = None
    on_shutdown: Callable[[], Awaitable[None]] | None = None
    if repository is None:
        if settings.database_url:
            pool_manager = AsyncpgPoolManager(dsn=settings.database_url)
            repository = PostgresSubmissionRepository(pool_manager=pool_manager)
            on_startup = pool_manager.startup
            on_shutdown = pool_manager.shutdown
        else:
            repository = InMemorySubmissionRepository()

    if processor is None:
        processor = SimulatedProcessor(
            settings=settings.processor,
            rng=random.Random(settings.processor_seed),
            sleep=sleep,
        )

    duplicates = DuplicateDetector(repository=repository)
    pipeline = SubmissionPipeline(
        repository=repository,
        processor=processor,
        duplicates=duplicates,
        idempotency=IdempotencyResolver(repository=repository),
        retry_policy=RetryPolicy(
            max_retries=settings.pipeline.max_retries,
            time_unit_seconds=settings.pipeline.time_unit_seconds,
        ),
        sleep=sleep,
        replay_wait_seconds=settings.pipeline.replay_wait_seconds,
        replay_poll_seconds=settings.pipeline.replay_poll_seconds,
    )
    api_deps = ApiDeps(
        repository=repository,
        pipeline=pipeline,
        duplicates=duplicates,
        list_limit=settings.list_limit,
    )

    return RuntimeContainer(
        settings=settings,
        repository=repository,
        processor=processor,
        pipeline=pipeline,
        api_deps=api_deps,
        on_startup=on_startup,
        on_shutdown=on_shutdown,
    )
