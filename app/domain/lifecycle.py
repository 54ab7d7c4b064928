from __future__ import annotations

from app.domain.errors import DomainInvariantError
from app.domain.models import SubmissionStatus


TERMINAL_STATUSES: frozenset[SubmissionStatus] = frozenset(
    {SubmissionStatus.SUCCESS, SubmissionStatus.FAILED}
)

# Keep synchronized with the status CHECK constraint in
# db/migrations/000001_bootstrap.up.sql.
ALLOWED_TRANSITIONS: dict[SubmissionStatus, set[SubmissionStatus]] = {
    SubmissionStatus.PENDING: {SubmissionStatus.SUCCESS, SubmissionStatus.FAILED},
    SubmissionStatus.SUCCESS: set(),
    SubmissionStatus.FAILED: set(),
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def ensure_transition(*, from_state: str, to_state: str) -> None:
    try:
        source = SubmissionStatus(from_state)
        target = SubmissionStatus(to_state)
    except ValueError as exc:
        raise DomainInvariantError(f"unknown submission status: {exc}") from exc
    if target not in ALLOWED_TRANSITIONS[source]:
        raise DomainInvariantError(f"transition {source} -> {target} is not allowed")
