"""Percentage, pass/fail, certificate validity and module progress arithmetic."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP

MIN_PERCENT = 0
MAX_PERCENT = 100


def round_half_up(value: Decimal | float) -> int:
    """Round to the nearest integer, halves away from zero (12.5 -> 13)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_percentage(score: int, total: int) -> int:
    """Return round_half_up(score / total * 100) clamped to 0..100; 0 when total is 0."""
    if total <= 0:
        return 0
    # exact fraction so 1/8 gives 12.5 and not 12.499999
    pct = round_half_up(Decimal(score) * 100 / Decimal(total))
    return max(MIN_PERCENT, min(MAX_PERCENT, pct))


def is_passing(percentage: int, pass_threshold: int) -> bool:
    """A score equal to the threshold passes."""
    return percentage >= pass_threshold


def certificate_expiry(issued_at: datetime, validity_days: int) -> datetime:
    return issued_at + timedelta(days=validity_days)


def is_certificate_valid(valid_until: datetime, now: datetime | None = None) -> bool:
    """Return True while valid_until is in the future."""
    now = now or datetime.now(timezone.utc)
    if valid_until.tzinfo is None:
        # SQLite drops tzinfo; stored values are UTC
        valid_until = valid_until.replace(tzinfo=timezone.utc)
    return valid_until > now


def section_progress(section_index: int, section_count: int) -> int:
    """Percent of a module read when section_index (0-based) is the current one."""
    if section_count <= 0:
        return 0
    return compute_percentage(section_index + 1, section_count)
