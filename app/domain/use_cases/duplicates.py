from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.domain.contracts import SubmissionRepository
from app.domain.models import DuplicateCheck, SubmissionStatus
from app.domain.validation import normalize_email

COMPONENT_ID = "domain.submission.duplicates"


@dataclass(frozen=True)
class DuplicateDetector:
    """Content-level duplicate lookup over successful submissions only."""

    repository: SubmissionRepository

    async def check(self, *, email: str, amount: Decimal) -> DuplicateCheck:
        existing = await self.repository.find_by_content(
            email=normalize_email(email),
            amount=amount,
            status=SubmissionStatus.SUCCESS,
        )
        if existing is None:
            return DuplicateCheck(is_duplicate=False)
        return DuplicateCheck(is_duplicate=True, existing=existing)
