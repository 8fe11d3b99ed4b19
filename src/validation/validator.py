"""
Two-Gate Transaction Validation

DESIGN DECISION: A candidate transaction passes two distinct gates
before it is admitted to the ledger:

GATE 1 - ENTRY VALIDATION (EntryValidator):
- Runs on the raw text the user typed
- Name present
- Amount present, explicitly signed, numeric and non-zero
- Timestamp present, parseable, not in the future

GATE 2 - PERSISTENCE VALIDATION (PersistenceValidator):
- Runs on the parsed values right before the write
- Name present and within the length cap
- Amount present, non-zero, at most two decimal places and within
  the magnitude cap (no sign-prefix rule)
- Timestamp present and not in the future
- Description within the length cap

The gates overlap on purpose and are kept separate: the entry gate is
about what the user typed, the persistence gate is about what the
backend will accept.

IMPORTANT: Validation NEVER silently fixes issues.
Every violated rule is reported, not just the first one.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from src.config import get_settings


Clock = Callable[[], datetime]

SIGN_PREFIXES = ("+", "-")

# Money is stored to the cent
AMOUNT_DECIMAL_PLACES = 2

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


def system_clock() -> datetime:
    """Wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ValidationError(Exception):
    """
    One or more rule violations on a proposed transaction.

    Carries every violation; the message joins them the way the
    form shows them to the user.
    """

    def __init__(self, issues: list[str], stage: str = "entry"):
        self.issues = list(issues)
        self.stage = stage
        super().__init__(". ".join(self.issues))


def parse_signed_amount(text: str) -> Decimal:
    """
    Parse an explicitly signed amount.

    The sign comes from the prefix, never from the parsed number,
    so "-0.5" and "+0.5" always land on the side the user asked for.

    Raises:
        ValueError: If the text is unsigned, not a finite number, or zero
    """
    text = (text or "").strip()
    if not text.startswith(SIGN_PREFIXES):
        raise ValueError(f"Amount must start with + or - sign: {text!r}")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Not a number: {text!r}")
    if not value.is_finite() or value == 0:
        raise ValueError(f"Not a valid non-zero number: {text!r}")
    magnitude = abs(value)
    return magnitude if text.startswith("+") else -magnitude


def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive timestamps (what a datetime-local input produces) are read
    as local time.

    Raises:
        ValueError: If the text is not a timestamp, or falls off the
            calendar once the local offset is applied
    """
    text = (text or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        try:
            parsed = parsed.astimezone()
        except (OverflowError, OSError) as e:
            raise ValueError(f"Timestamp out of range: {text!r}") from e
    return parsed


class EntryValidator:
    """
    Gate 1: checks raw form input.

    Pure function of its input and the clock.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or system_clock

    def _validate_name(self, name: str) -> list[str]:
        if not (name or "").strip():
            return ["Transaction name is required"]
        return []

    def _validate_amount(self, amount: str) -> list[str]:
        amount = (amount or "").strip()
        if not amount:
            return ["Amount is required"]
        if not amount.startswith(SIGN_PREFIXES):
            return ["Amount must start with + or - sign"]
        try:
            parse_signed_amount(amount)
        except ValueError:
            return ["Please enter a valid non-zero number"]
        return []

    def _validate_occurred_at(self, occurred_at: str) -> list[str]:
        if not (occurred_at or "").strip():
            return ["Date and time are required"]
        try:
            moment = parse_timestamp(occurred_at)
        except ValueError:
            return ["Date and time must be a valid timestamp"]
        if moment > self._clock():
            return ["Date cannot be in the future"]
        return []

    def validate(
        self,
        name: str,
        amount: str,
        occurred_at: str,
        description: Optional[str] = None,
    ) -> list[str]:
        """
        Run every entry rule.

        Returns:
            Ordered list of violation messages; empty means accepted
        """
        issues = []
        issues.extend(self._validate_name(name))
        issues.extend(self._validate_amount(amount))
        issues.extend(self._validate_occurred_at(occurred_at))
        return issues


class PersistenceValidator:
    """
    Gate 2: checks parsed values right before they are written.

    Length and amount caps come from AppSettings so they can track the
    backend schema. Amounts are whole cents no larger than max_amount,
    so running totals stay exact in the default decimal context.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        max_name_length: Optional[int] = None,
        max_description_length: Optional[int] = None,
        max_amount: Optional[Decimal] = None,
    ):
        settings = get_settings().app
        self._clock = clock or system_clock
        self.max_name_length = max_name_length or settings.max_name_length
        self.max_description_length = (
            max_description_length
            if max_description_length is not None
            else settings.max_description_length
        )
        self.max_amount = max_amount or settings.max_amount

    def _validate_amount(self, amount: Optional[Decimal]) -> list[str]:
        if amount is None or amount == 0:
            return ["Amount is required and cannot be zero"]
        if abs(amount) > self.max_amount:
            return [f"Amount cannot exceed {self.max_amount}"]
        if -amount.normalize().as_tuple().exponent > AMOUNT_DECIMAL_PLACES:
            return [f"Amount cannot have more than {AMOUNT_DECIMAL_PLACES} decimal places"]
        return []

    def validate(
        self,
        name: Optional[str],
        amount: Optional[Decimal],
        occurred_at: Optional[datetime],
        description: Optional[str] = None,
    ) -> list[str]:
        """
        Run every pre-persistence rule.

        Returns:
            Ordered list of violation messages; empty means accepted
        """
        issues = []

        if not name or not name.strip():
            issues.append("Transaction name is required")
        elif len(name.strip()) > self.max_name_length:
            issues.append(
                f"Transaction name cannot exceed {self.max_name_length} characters"
            )

        issues.extend(self._validate_amount(amount))

        if occurred_at is None:
            issues.append("Date and time are required")
        elif occurred_at > self._clock():
            issues.append("Transaction date cannot be in the future")

        if description and len(description) > self.max_description_length:
            issues.append(
                f"Description cannot exceed {self.max_description_length} characters"
            )

        return issues


class CredentialValidator:
    """Checks sign-up and sign-in form input before it reaches the identity provider."""

    def validate_user(self, username: str, email: str, password: str) -> list[str]:
        """Profile rules applied on sign-up."""
        issues = []

        if not username or len(username.strip()) < 3:
            issues.append("Username must be at least 3 characters long")

        if username and len(username) > 30:
            issues.append("Username cannot exceed 30 characters")

        if username and not USERNAME_PATTERN.match(username):
            issues.append(
                "Username can only contain letters, numbers, and underscores"
            )

        if not email or not EMAIL_PATTERN.match(email):
            issues.append("Please enter a valid email address")

        if not password or len(password) < 6:
            issues.append("Password must be at least 6 characters long")

        return issues

    def validate_login(self, email: str, password: str) -> list[str]:
        if not email or not password:
            return ["Please fill all required fields."]
        return []

    def validate_signup(self, email: str, password: str, confirm: str) -> list[str]:
        issues = self.validate_login(email, password)
        if not issues and password != confirm:
            issues.append("Passwords do not match.")
        return issues
