from datetime import date, datetime
from typing import Optional

from schemas.compliance import ExpiryState
from services.compliance.errors import MissingExpirationDate, ValidationError

DEFAULT_WARN_WINDOW_DAYS = 30


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until_expiration(expiration_date: date, as_of: date) -> int:
    """Whole days from as_of to expiration_date; negative once expired."""
    return (_as_date(expiration_date) - _as_date(as_of)).days


def check_expiration(
    effective_date: Optional[date],
    expiration_date: Optional[date],
    as_of: date,
    warn_window_days: int = DEFAULT_WARN_WINDOW_DAYS,
    coverage: Optional[str] = None,
) -> ExpiryState:
    """Classify a policy period relative to as_of.

    Comparison is by date only: a policy expiring on as_of is still current
    that day and expired the day after.
    """
    if warn_window_days is None or warn_window_days < 0:
        raise ValidationError(f"warn_window_days must be zero or positive, got {warn_window_days!r}")
    if expiration_date is None:
        raise MissingExpirationDate(coverage)

    as_of = _as_date(as_of)
    expiration_date = _as_date(expiration_date)
    effective_date = _as_date(effective_date)

    if as_of > expiration_date:
        return ExpiryState.EXPIRED
    if effective_date is not None and as_of < effective_date:
        return ExpiryState.NOT_YET_EFFECTIVE
    if days_until_expiration(expiration_date, as_of) <= warn_window_days:
        return ExpiryState.EXPIRING_SOON
    return ExpiryState.CURRENT
