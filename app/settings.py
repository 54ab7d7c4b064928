from __future__ import annotations

from dataclasses import dataclass, field
import math
import os

from app.clients.simulator import ProcessorSettings


@dataclass(frozen=True)
class PipelineSettings:
    max_retries: int = 3
    time_unit_seconds: float = 1.0
    replay_wait_seconds: float = 30.0
    replay_poll_seconds: float = 0.5


@dataclass(frozen=True)
class RuntimeSettings:
    database_url: str | None = None
    list_limit: int = 50
    processor_seed: int | None = None
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    processor: ProcessorSettings = field(default_factory=ProcessorSettings)


def runtime_settings_from_env() -> RuntimeSettings:
    time_unit_seconds = _env_float("SUBMIT_TIME_UNIT_SECONDS", 1.0)
    return RuntimeSettings(
        database_url=os.getenv("DATABASE_URL") or None,
        list_limit=_env_int("SUBMISSIONS_LIST_LIMIT", 50),
        processor_seed=_env_optional_int("PROCESSOR_SEED"),
        pipeline=PipelineSettings(
            max_retries=_env_int("SUBMIT_MAX_RETRIES", 3),
            time_unit_seconds=time_unit_seconds,
            replay_wait_seconds=_env_float("SUBMIT_REPLAY_WAIT_SECONDS", 30.0, allow_zero=True),
            replay_poll_seconds=_env_float("SUBMIT_REPLAY_POLL_SECONDS", 0.5),
        ),
        processor=_processor_settings_from_env(time_unit_seconds),
    )


def _processor_settings_from_env(time_unit_seconds: float) -> ProcessorSettings:
    try:
        return ProcessorSettings(
            success_weight=_env_float("PROCESSOR_SUCCESS_WEIGHT", 0.30, allow_zero=True),
            failure_weight=_env_float("PROCESSOR_FAILURE_WEIGHT", 0.40, allow_zero=True),
            delayed_weight=_env_float("PROCESSOR_DELAYED_WEIGHT", 0.30, allow_zero=True),
            delay_min_units=_env_float("PROCESSOR_DELAY_MIN_UNITS", 5.0, allow_zero=True),
            delay_max_units=_env_float("PROCESSOR_DELAY_MAX_UNITS", 10.0, allow_zero=True),
            time_unit_seconds=time_unit_seconds,
        )
    except ValueError:
        # Individually valid values can still form an unusable table.
        return ProcessorSettings(time_unit_seconds=time_unit_seconds)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default

    return parsed if parsed > 0 else default


def _env_optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None:
        return None

    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str, default: float, *, allow_zero: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = float(value)
    except ValueError:
        return default

    if not math.isfinite(parsed):
        return default
    if parsed > 0 or (allow_zero and parsed == 0):
        return parsed
    return default
