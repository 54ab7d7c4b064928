from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import re

from app.domain.errors import SubmissionValidationError
from app.domain.models import ValidatedSubmission


EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")
AMOUNT_QUANTUM = Decimal("0.01")
# Largest value a NUMERIC(14, 2) column holds.
MAX_AMOUNT = Decimal("999999999999.99")
MAX_IDEMPOTENCY_KEY_LENGTH = 256


def normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_amount(value: object) -> Decimal:
    """Parses a client amount into cents-precision Decimal.

    Accepts ints, floats and numeric strings. Booleans, NaN and infinities are
    rejected. The value must still be positive after rounding to cents and
    must not exceed MAX_AMOUNT.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise SubmissionValidationError("Email and amount are required")
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise SubmissionValidationError("Amount must be a positive number")
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise SubmissionValidationError("Amount must be a positive number") from exc
    if not parsed.is_finite():
        raise SubmissionValidationError("Amount must be a positive number")
    if parsed > MAX_AMOUNT:
        raise SubmissionValidationError(f"Amount must not exceed {MAX_AMOUNT}")

    try:
        quantized = parsed.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise SubmissionValidationError("Amount must be a positive number") from exc
    if quantized <= 0:
        raise SubmissionValidationError("Amount must be a positive number")
    return quantized


def normalize_idempotency_key(value: str | None) -> str | None:
    """Blank keys count as absent; any other key is kept exactly as sent."""
    if value is None or not value.strip():
        return None
    if len(value) > MAX_IDEMPOTENCY_KEY_LENGTH:
        raise SubmissionValidationError("Idempotency key is too long")
    return value


def validate_submission(
    *,
    email: str | None,
    amount: object,
    idempotency_key: str | None = None,
) -> ValidatedSubmission:
    if not email or not email.strip() or amount is None:
        raise SubmissionValidationError("Email and amount are required")

    parsed_amount = parse_amount(amount)
    normalized_email = normalize_email(email)
    if EMAIL_PATTERN.match(normalized_email) is None:
        raise SubmissionValidationError("Invalid email format")

    return ValidatedSubmission(
        email=normalized_email,
        amount=parsed_amount,
        idempotency_key=normalize_idempotency_key(idempotency_key),
    )
