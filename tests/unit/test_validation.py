from decimal import Decimal

import pytest

from app.domain.errors import SubmissionValidationError
from app.domain.validation import MAX_AMOUNT, normalize_email, parse_amount, validate_submission


@pytest.mark.unit
def test_email_is_trimmed_and_lowercased() -> None:
    assert normalize_email("  Alice.Smith@Example.COM ") == "alice.smith@example.com"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (10, Decimal("10.00")),
        (10.5, Decimal("10.50")),
        ("19.99", Decimal("19.99")),
        (" 7 ", Decimal("7.00")),
        ("0.005", Decimal("0.01")),
        ("999999999999.99", MAX_AMOUNT),
    ],
)
def test_amount_is_parsed_to_cents(raw: object, expected: Decimal) -> None:
    assert parse_amount(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize("raw", [0, -3, "0.00", "NaN", "Infinity", "ten", True, [1]])
def test_non_positive_or_non_numeric_amount_is_rejected(raw: object) -> None:
    with pytest.raises(SubmissionValidationError):
        parse_amount(raw)


@pytest.mark.unit
def test_validate_submission_normalizes_all_fields() -> None:
    validated = validate_submission(email=" User@Mail.com", amount="42", idempotency_key="key-1")

    assert validated.email == "user@mail.com"
    assert validated.amount == Decimal("42.00")
    assert validated.idempotency_key == "key-1"


@pytest.mark.unit
def test_blank_idempotency_key_is_treated_as_absent() -> None:
    validated = validate_submission(email="a@b.com", amount=1, idempotency_key="   ")
    assert validated.idempotency_key is None


@pytest.mark.unit
def test_missing_fields_report_required_message() -> None:
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(email=None, amount=None)
    assert str(exc_info.value) == "Email and amount are required"


@pytest.mark.unit
def test_bad_email_reports_format_message() -> None:
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(email="user@@mail.com", amount=1)
    assert str(exc_info.value) == "Invalid email format"


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["1e30", 1e12, 10**12, "1000000000000.00", "9" * 40])
def test_amount_above_column_range_is_rejected(raw: object) -> None:
    with pytest.raises(SubmissionValidationError) as exc_info:
        parse_amount(raw)
    assert str(exc_info.value) == "Amount must not exceed 999999999999.99"


@pytest.mark.unit
def test_idempotency_key_is_kept_exactly_as_sent() -> None:
    padded = validate_submission(email="a@b.com", amount=1, idempotency_key=" k1")
    plain = validate_submission(email="a@b.com", amount=1, idempotency_key="k1")

    assert padded.idempotency_key == " k1"
    assert plain.idempotency_key == "k1"
