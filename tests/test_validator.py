"""Tests for the entry, persistence and credential validators."""

import time
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from conftest import FIXED_NOW, YESTERDAY, fixed_clock
from src.validation import (
    CredentialValidator,
    EntryValidator,
    PersistenceValidator,
    ValidationError,
    parse_signed_amount,
    parse_timestamp,
)


class TestParsing:
    """Tests for the amount and timestamp parsers."""

    def test_sign_prefix_sets_direction(self):
        assert parse_signed_amount("+50") == Decimal("50")
        assert parse_signed_amount("-50") == Decimal("-50")
        assert parse_signed_amount(" -0.5 ") == Decimal("-0.5")

    @pytest.mark.parametrize("text", ["50", "", "+abc", "+0", "-0", "+inf", "-NaN"])
    def test_rejects_unusable_amounts(self, text):
        with pytest.raises(ValueError):
            parse_signed_amount(text)

    def test_timestamp_with_zulu_suffix(self):
        parsed = parse_timestamp("2024-06-14T10:00:00Z")
        assert parsed == datetime(2024, 6, 14, 10, 0, tzinfo=timezone.utc)

    def test_naive_timestamp_becomes_aware(self):
        parsed = parse_timestamp("2024-06-14T10:00")
        assert parsed.tzinfo is not None

    def test_garbage_timestamp(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestEntryValidator:
    """Gate 1: raw form input."""

    def setup_method(self):
        self.validator = EntryValidator(clock=fixed_clock)

    def test_valid_input(self):
        assert self.validator.validate("Salary", "+50000", YESTERDAY) == []

    def test_missing_name(self):
        issues = self.validator.validate("   ", "+10", YESTERDAY)
        assert issues == ["Transaction name is required"]

    def test_unsigned_amount(self):
        issues = self.validator.validate("Coffee", "50", YESTERDAY)
        assert issues == ["Amount must start with + or - sign"]

    def test_missing_amount(self):
        assert self.validator.validate("Coffee", "", YESTERDAY) == ["Amount is required"]

    @pytest.mark.parametrize("amount", ["+0", "-0", "+0.00", "+abc"])
    def test_zero_or_non_numeric_amount(self, amount):
        issues = self.validator.validate("Coffee", amount, YESTERDAY)
        assert issues == ["Please enter a valid non-zero number"]

    def test_missing_timestamp(self):
        assert self.validator.validate("Coffee", "-5", "") == ["Date and time are required"]

    def test_unparseable_timestamp(self):
        issues = self.validator.validate("Coffee", "-5", "not a date")
        assert issues == ["Date and time must be a valid timestamp"]

    @pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
    def test_timestamp_off_the_calendar(self, monkeypatch):
        # Last minute of the calendar in a zone behind UTC
        occurred_at = "9999-12-31T23:59"
        monkeypatch.setenv("TZ", "EST5")
        time.tzset()
        try:
            with pytest.raises(ValueError):
                parse_timestamp(occurred_at)
            issues = self.validator.validate("Coffee", "-5", occurred_at)
        finally:
            monkeypatch.undo()
            time.tzset()
        assert issues == ["Date and time must be a valid timestamp"]

    def test_one_second_in_future(self):
        future = (FIXED_NOW + timedelta(seconds=1)).isoformat()
        assert self.validator.validate("Coffee", "-5", future) == ["Date cannot be in the future"]

    def test_one_second_in_past(self):
        past = (FIXED_NOW - timedelta(seconds=1)).isoformat()
        assert self.validator.validate("Coffee", "-5", past) == []

    def test_now_is_allowed(self):
        assert self.validator.validate("Coffee", "-5", FIXED_NOW.isoformat()) == []

    def test_reports_every_violation(self):
        """Validation lists every problem, not just the first."""
        issues = self.validator.validate("", "5", "")
        assert issues == [
            "Transaction name is required",
            "Amount must start with + or - sign",
            "Date and time are required",
        ]


class TestPersistenceValidator:
    """Gate 2: parsed values before the write."""

    def setup_method(self):
        self.validator = PersistenceValidator(
            clock=fixed_clock,
            max_name_length=10,
            max_description_length=20,
        )
        self.when = FIXED_NOW - timedelta(hours=1)

    def test_valid_values(self):
        assert self.validator.validate("Rent", Decimal("-100"), self.when, "June") == []

    def test_name_too_long(self):
        issues = self.validator.validate("x" * 11, Decimal("1"), self.when)
        assert issues == ["Transaction name cannot exceed 10 characters"]

    def test_name_length_counts_trimmed_text(self):
        assert self.validator.validate("  " + "x" * 10 + "  ", Decimal("1"), self.when) == []

    def test_zero_amount(self):
        issues = self.validator.validate("Rent", Decimal("0"), self.when)
        assert issues == ["Amount is required and cannot be zero"]

    @pytest.mark.parametrize("amount", ["0.001", "-12.345", "1E-30"])
    def test_fractions_of_a_cent(self, amount):
        issues = self.validator.validate("Rent", Decimal(amount), self.when)
        assert issues == ["Amount cannot have more than 2 decimal places"]

    def test_whole_cents_and_trailing_zeros(self):
        assert self.validator.validate("Rent", Decimal("-0.01"), self.when) == []
        assert self.validator.validate("Rent", Decimal("12.5000"), self.when) == []
        assert self.validator.validate("Rent", Decimal("1E+3"), self.when) == []

    def test_amount_too_large(self):
        validator = PersistenceValidator(clock=fixed_clock, max_amount=Decimal("1000"))
        assert validator.validate("Rent", Decimal("-1000"), self.when) == []
        issues = validator.validate("Rent", Decimal("1000.01"), self.when)
        assert issues == ["Amount cannot exceed 1000"]
        issues = validator.validate("Rent", Decimal("-1E+29"), self.when)
        assert issues == ["Amount cannot exceed 1000"]

    def test_missing_values(self):
        issues = self.validator.validate(None, None, None)
        assert issues == [
            "Transaction name is required",
            "Amount is required and cannot be zero",
            "Date and time are required",
        ]

    def test_future_date(self):
        issues = self.validator.validate("Rent", Decimal("1"), FIXED_NOW + timedelta(seconds=1))
        assert issues == ["Transaction date cannot be in the future"]

    def test_description_too_long(self):
        issues = self.validator.validate("Rent", Decimal("1"), self.when, "d" * 21)
        assert issues == ["Description cannot exceed 20 characters"]

    def test_caps_default_from_settings(self, monkeypatch):
        monkeypatch.setenv("MAX_NAME_LENGTH", "42")
        validator = PersistenceValidator(clock=fixed_clock)
        assert validator.max_name_length == 42
        assert validator.max_description_length == 255
        assert validator.max_amount == Decimal("999999999999.99")


class TestValidationError:
    def test_message_joins_issues(self):
        error = ValidationError(["Amount is required", "Date and time are required"])
        assert str(error) == "Amount is required. Date and time are required"
        assert error.stage == "entry"


class TestCredentialValidator:
    """Sign-in and sign-up form checks."""

    def setup_method(self):
        self.validator = CredentialValidator()

    def test_login_requires_both_fields(self):
        assert self.validator.validate_login("", "secret") == ["Please fill all required fields."]
        assert self.validator.validate_login("a@b.com", "secret") == []

    def test_signup_password_mismatch(self):
        issues = self.validator.validate_signup("a@b.com", "secret1", "secret2")
        assert issues == ["Passwords do not match."]

    def test_signup_missing_fields_reported_first(self):
        issues = self.validator.validate_signup("", "", "")
        assert issues == ["Please fill all required fields."]

    def test_valid_user_profile(self):
        assert self.validator.validate_user("asha_k", "asha@example.com", "secret1") == []

    def test_invalid_user_profile(self):
        issues = self.validator.validate_user("a!", "not-an-email", "123")
        assert "Username must be at least 3 characters long" in issues
        assert "Username can only contain letters, numbers, and underscores" in issues
        assert "Please enter a valid email address" in issues
        assert "Password must be at least 6 characters long" in issues
