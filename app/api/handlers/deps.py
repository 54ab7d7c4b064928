from __future__ import annotations

from dataclasses import dataclass

from app.domain.contracts import SubmissionRepository
from app.domain.use_cases.duplicates import DuplicateDetector
from app.domain.use_cases.submissions import SubmissionPipeline


@dataclass(frozen=True)
class ApiDeps:
    repository: SubmissionRepository
    pipeline: SubmissionPipeline
    duplicates: DuplicateDetector
    list_limit: int = 50
    max_list_limit: int = 200
