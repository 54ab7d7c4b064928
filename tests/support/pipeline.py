from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from app.clients.stub import RecordingSleeper, ScriptedProcessor
from app.domain.contracts import SubmissionRepository
from app.domain.models import ProcessorOutcome
from app.domain.retry_policy import RetryPolicy
from app.domain.use_cases.duplicates import DuplicateDetector
from app.domain.use_cases.idempotency import IdempotencyResolver
from app.domain.use_cases.submissions import SubmissionPipeline
from app.repositories.stub import InMemorySubmissionRepository


@dataclass
class PipelineHarness:
    pipeline: SubmissionPipeline
    repository: SubmissionRepository
    processor: ScriptedProcessor
    sleeper: RecordingSleeper


def build_pipeline(
    script: Sequence[ProcessorOutcome | BaseException] = (),
    *,
    repository: SubmissionRepository | None = None,
    max_retries: int = 3,
    replay_wait_seconds: float = 0.0,
    replay_poll_seconds: float = 0.5,
) -> PipelineHarness:
    repo = repository if repository is not None else InMemorySubmissionRepository()
    processor = ScriptedProcessor(script=list(script))
    sleeper = RecordingSleeper()
    pipeline = SubmissionPipeline(
        repository=repo,
        processor=processor,
        duplicates=DuplicateDetector(repository=repo),
        idempotency=IdempotencyResolver(repository=repo),
        retry_policy=RetryPolicy(max_retries=max_retries, time_unit_seconds=1.0),
        sleep=sleeper,
        replay_wait_seconds=replay_wait_seconds,
        replay_poll_seconds=replay_poll_seconds,
    )
    return PipelineHarness(pipeline=pipeline, repository=repo, processor=processor, sleeper=sleeper)
