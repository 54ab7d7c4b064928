from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import random

from app.domain.contracts import RandomSource, Sleeper
from app.domain.models import ProcessorOutcome, ProcessorResult


@dataclass(frozen=True)
class ProcessorSettings:
    success_weight: float = 0.30
    failure_weight: float = 0.40
    delayed_weight: float = 0.30
    delay_min_units: float = 5.0
    delay_max_units: float = 10.0
    time_unit_seconds: float = 1.0

    def __post_init__(self) -> None:
        weights = (self.success_weight, self.failure_weight, self.delayed_weight)
        if any(weight < 0 for weight in weights):
            raise ValueError("processor outcome weights must not be negative")
        if sum(weights) <= 0:
            raise ValueError("at least one processor outcome weight must be positive")
        if self.delay_min_units < 0 or self.delay_max_units < self.delay_min_units:
            raise ValueError("processor delay range is invalid")


@dataclass
class SimulatedProcessor:
    """Unreliable downstream stand-in.

    Each call independently picks success, retryable failure or delayed
    success from the configured weights. Delayed success suspends for a
    uniformly drawn number of time units before resolving.
    """

    settings: ProcessorSettings = field(default_factory=ProcessorSettings)
    rng: RandomSource = field(default_factory=random.Random)
    sleep: Sleeper = asyncio.sleep

    def pick_outcome(self) -> ProcessorOutcome:
        total = self.settings.success_weight + self.settings.failure_weight + self.settings.delayed_weight
        roll = self.rng.random() * total
        if roll < self.settings.success_weight:
            return ProcessorOutcome.SUCCESS
        if roll < self.settings.success_weight + self.settings.failure_weight:
            return ProcessorOutcome.RETRYABLE_FAILURE
        return ProcessorOutcome.DELAYED_SUCCESS

    async def invoke(self) -> ProcessorResult:
        outcome = self.pick_outcome()
        if outcome != ProcessorOutcome.DELAYED_SUCCESS:
            return ProcessorResult(outcome=outcome)

        delay_units = self.rng.uniform(self.settings.delay_min_units, self.settings.delay_max_units)
        delay_seconds = delay_units * self.settings.time_unit_seconds
        await self.sleep(delay_seconds)
        return ProcessorResult(outcome=outcome, delay_seconds=delay_seconds)
