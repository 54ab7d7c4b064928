from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from app.domain.models import ProcessorOutcome, ProcessorResult


@dataclass
class ScriptedProcessor:
    """Deterministic processor replaying a fixed script.

    Script entries are outcomes or exceptions to raise. Once the script is
    exhausted the last entry repeats; an empty script always succeeds.
    """

    script: Sequence[ProcessorOutcome | BaseException] = ()
    calls: int = 0
    delay_seconds: float = 0.0
    history: list[ProcessorOutcome | str] = field(default_factory=list)

    async def invoke(self) -> ProcessorResult:
        self.calls += 1
        if not self.script:
            entry: ProcessorOutcome | BaseException = ProcessorOutcome.SUCCESS
        else:
            entry = self.script[min(self.calls, len(self.script)) - 1]

        if isinstance(entry, BaseException):
            self.history.append(type(entry).__name__)
            raise entry

        self.history.append(entry)
        if entry == ProcessorOutcome.DELAYED_SUCCESS:
            return ProcessorResult(outcome=entry, delay_seconds=self.delay_seconds)
        return ProcessorResult(outcome=entry)


@dataclass
class RecordingSleeper:
    """Async sleeper that records requested delays and only yields control."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)
