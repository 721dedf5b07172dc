"""
Tolerance Evaluator.

Decides whether a statement amount/date and a transaction amount/date are
close enough to pair, and scores the pairing from 0 to 100.

Score = 100 - amount_penalty - date_penalty, where
    amount_penalty = min(15, amount_diff / amount_tolerance * 15)
    date_penalty   = min(30, date_diff / date_tolerance * 30)
rounded half-up and floored at 50 for any compatible pair.
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from ..config import get_settings
from ..errors import ValidationError

MAX_AMOUNT_PENALTY = 15
MAX_DATE_PENALTY = 30
MIN_COMPATIBLE_SCORE = 50
PERFECT_SCORE = 100


def to_cents(value) -> int:
    """Convert a currency value (float/str/Decimal) to integer cents."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("amount", f"Invalid amount: {value!r}") from e
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ToleranceConfig:
    """Validated matching tolerances. Amount tolerance is absolute, in cents."""
    amount_tolerance_cents: int
    date_tolerance_days: int

    @property
    def amount_tolerance(self) -> float:
        return self.amount_tolerance_cents / 100.0

    @classmethod
    def from_currency(
        cls,
        amount_tolerance,
        date_tolerance_days,
        max_amount_tolerance: Optional[float] = None,
    ) -> "ToleranceConfig":
        """
        Validate tolerances expressed in currency units and days.

        Raises:
            ValidationError: amount tolerance outside (0, max] or rounding
                to zero cents, or a negative/non-integer date tolerance.
        """
        if max_amount_tolerance is None:
            max_amount_tolerance = get_settings().max_amount_tolerance

        if amount_tolerance is None or isinstance(amount_tolerance, bool):
            raise ValidationError("tolerance", "Tolerance is required")
        try:
            tolerance_value = Decimal(str(amount_tolerance))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError("tolerance", f"Invalid tolerance: {amount_tolerance!r}") from e

        if not tolerance_value.is_finite() or tolerance_value <= 0:
            raise ValidationError("tolerance", "Tolerance must be greater than zero")
        if tolerance_value > Decimal(str(max_amount_tolerance)):
            raise ValidationError(
                "tolerance",
                f"Tolerance cannot exceed {max_amount_tolerance:.2f}",
            )

        if isinstance(date_tolerance_days, bool) or not isinstance(date_tolerance_days, int):
            raise ValidationError("date_tolerance_days", "Date tolerance must be an integer number of days")
        if date_tolerance_days < 0:
            raise ValidationError("date_tolerance_days", "Date tolerance cannot be negative")

        tolerance_cents = to_cents(tolerance_value)
        if tolerance_cents == 0:
            raise ValidationError("tolerance", "Tolerance must be at least 0.01")

        return cls(
            amount_tolerance_cents=tolerance_cents,
            date_tolerance_days=date_tolerance_days,
        )


@dataclass(frozen=True)
class Verdict:
    """Outcome of comparing one statement amount/date against one transaction."""
    compatible: bool
    amount_difference_cents: int
    date_difference_days: int
    confidence_score: Optional[int] = None


def compute_confidence(
    amount_difference_cents: int,
    date_difference_days: int,
    tolerance: ToleranceConfig,
) -> int:
    """Score a compatible pair. Assumes both differences are within tolerance."""
    score = float(PERFECT_SCORE)

    if tolerance.amount_tolerance_cents > 0:
        score -= min(
            MAX_AMOUNT_PENALTY,
            amount_difference_cents * MAX_AMOUNT_PENALTY / tolerance.amount_tolerance_cents,
        )

    if tolerance.date_tolerance_days > 0:
        score -= min(
            MAX_DATE_PENALTY,
            date_difference_days * MAX_DATE_PENALTY / tolerance.date_tolerance_days,
        )

    rounded = int(math.floor(score + 0.5))
    return max(MIN_COMPATIBLE_SCORE, min(PERFECT_SCORE, rounded))


def evaluate(
    statement_amount_cents: int,
    statement_date: date,
    transaction_amount_cents: int,
    transaction_date: date,
    tolerance: ToleranceConfig,
) -> Verdict:
    """
    Compare absolute amounts and dates against the configured tolerances.

    Returns an incompatible verdict (no score) if either difference exceeds
    its tolerance.
    """
    amount_diff = abs(abs(statement_amount_cents) - abs(transaction_amount_cents))
    date_diff = abs((statement_date - transaction_date).days)

    if amount_diff > tolerance.amount_tolerance_cents or date_diff > tolerance.date_tolerance_days:
        return Verdict(
            compatible=False,
            amount_difference_cents=amount_diff,
            date_difference_days=date_diff,
        )

    return Verdict(
        compatible=True,
        amount_difference_cents=amount_diff,
        date_difference_days=date_diff,
        confidence_score=compute_confidence(amount_diff, date_diff, tolerance),
    )
