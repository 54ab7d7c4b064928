from __future__ import annotations

from dataclasses import dataclass

from app.domain.contracts import SubmissionRepository
from app.domain.models import Submission

COMPONENT_ID = "domain.submission.idempotency"


@dataclass(frozen=True)
class IdempotencyResolver:
    repository: SubmissionRepository

    async def resolve(self, idempotency_key: str | None) -> Submission | None:
        # Idempotency is opt-in.
        if not idempotency_key:
            return None
        return await self.repository.find_by_idempotency_key(idempotency_key=idempotency_key)
