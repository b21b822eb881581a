"""
Circulation policy: the pure rules behind due dates, overdue state and fines.

Nothing here reads a clock or touches storage. Every function takes the
instant it reasons about as an argument, so the engine, the query service and
the background sweep share one definition of "overdue".
"""

import math
from collections.abc import Mapping
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ..errors import InvalidExtension
from ..models.borrow_record import OPEN_STATUSES, BorrowStatus
from ..models.user import MembershipType

DEFAULT_LOAN_PERIODS: Mapping[MembershipType, int] = {
    MembershipType.REGULAR: 14,
    MembershipType.STUDENT: 21,
    MembershipType.PREMIUM: 30,
}

DEFAULT_FINE_PER_DAY = Decimal("0.50")
MIN_EXTENSION_DAYS = 1
MAX_EXTENSION_DAYS = 30

ONE_DAY = timedelta(days=1)
CENTS = Decimal("0.01")


def loan_period_for(
    membership_type: MembershipType,
    loan_periods: Mapping[MembershipType, int] = DEFAULT_LOAN_PERIODS,
) -> timedelta:
    """Loan period for a membership type."""
    return timedelta(days=loan_periods[MembershipType(membership_type)])


def compute_due_date(
    borrow_date: datetime,
    membership_type: MembershipType,
    loan_periods: Mapping[MembershipType, int] = DEFAULT_LOAN_PERIODS,
) -> datetime:
    return borrow_date + loan_period_for(membership_type, loan_periods)


def is_open(status: BorrowStatus) -> bool:
    return status in OPEN_STATUSES


def is_overdue(status: BorrowStatus, due_date: datetime, now: datetime) -> bool:
    """A record is overdue when it still holds a copy and ``now`` is past its due date.

    The stored OVERDUE status is not consulted beyond counting as open.
    """
    return is_open(status) and now > due_date


def is_due_on(status: BorrowStatus, due_date: datetime, day: date) -> bool:
    """True for open records whose due date falls on ``day``."""
    return is_open(status) and due_date.date() == day


def days_late(due_date: datetime, returned_at: datetime) -> int:
    """Whole days late, rounding any partial day up; 0 when on time."""
    late_by = returned_at - due_date
    if late_by <= timedelta(0):
        return 0
    return math.ceil(late_by / ONE_DAY)


def compute_fine(
    due_date: datetime,
    returned_at: datetime,
    fine_per_day: Decimal = DEFAULT_FINE_PER_DAY,
) -> Decimal:
    """Fine for returning at ``returned_at``, quantized to cents."""
    fine = Decimal(days_late(due_date, returned_at)) * Decimal(fine_per_day)
    return max(Decimal("0"), fine).quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_extension(
    additional_days: int,
    min_days: int = MIN_EXTENSION_DAYS,
    max_days: int = MAX_EXTENSION_DAYS,
) -> None:
    """
    Raises:
        InvalidExtension: If ``additional_days`` is outside ``[min_days, max_days]``
    """
    if isinstance(additional_days, bool) or not isinstance(additional_days, int):
        raise InvalidExtension(additional_days, min_days, max_days)
    if not min_days <= additional_days <= max_days:
        raise InvalidExtension(additional_days, min_days, max_days)
