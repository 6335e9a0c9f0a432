"""Pure goal rules — money checks, status recomputation, display metrics.

No I/O. Only ``validate_money`` raises.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from app.goals.errors import ValidationError

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999999.99")  # Numeric(14, 2)

ARCHIVABLE = frozenset({"active", "completed", "cancelled"})


def validate_money(value: object, field: str = "amount") -> Decimal:
    """Return `value` as a Decimal with 2 dp, or raise ValidationError.

    Accepts Decimal, int, float or numeric strings. Rejects bools, NaN/inf,
    non-positive values and anything with more than 2 decimal places.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount <= 0:
        raise ValidationError(f"{field} must be positive")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} is too large")
    if amount.quantize(CENT) != amount:
        raise ValidationError(f"{field} must have at most 2 decimal places")
    return amount.quantize(CENT)


# ---------------------------------------------------------------------------
# Status rules
# ---------------------------------------------------------------------------

def should_complete(progress: Decimal, target_amount: Decimal) -> bool:
    """True once cumulative progress reaches the target."""
    if target_amount <= 0:
        return False
    return progress >= target_amount


def recompute_status(status: str, progress: Decimal, target_amount: Decimal) -> str:
    """Status after progress or target changed.

    Only an active goal auto-completes. Nothing moves a goal back to active:
    a completed goal whose target is raised stays completed.
    """
    if status == "active" and should_complete(progress, target_amount):
        return "completed"
    return status


def can_archive(status: str) -> bool:
    return status in ARCHIVABLE


def restored_status(archived_from: str | None, progress: Decimal, target_amount: Decimal) -> str:
    """Status a goal returns to when taken out of the archive.

    Goes back to the status held before archiving (``active`` when unknown),
    then re-applies completion, since the target may have been edited while
    the goal sat in the archive.
    """
    previous = archived_from if archived_from in ARCHIVABLE else "active"
    return recompute_status(previous, progress, target_amount)


# ---------------------------------------------------------------------------
# Display metrics
# ---------------------------------------------------------------------------

def progress_percent(progress: Decimal, target_amount: Decimal) -> float:
    """Share of the target reached, 0–100, one decimal.

    Clamps the displayed value only; stored progress may overshoot.
    """
    if target_amount <= 0:
        return 0.0
    pct = float(progress) / float(target_amount) * 100.0
    return round(min(100.0, max(0.0, pct)), 1)


def remaining_amount(progress: Decimal, target_amount: Decimal) -> Decimal:
    return max(Decimal("0"), target_amount - progress)


def days_left(deadline: date, today: date | None = None) -> int:
    """Whole days until the deadline. Negative once it has passed."""
    today = today or date.today()
    return (deadline - today).days
