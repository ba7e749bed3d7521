"""
Period normalization for budgets and savings.

Amounts recorded at one cadence (an expense that repeats weekly, a savings
contribution made every two weeks) are scaled linearly by day count to the
cadence of the budget they are measured against. The functions here are pure
and never raise: an unknown or missing cadence is treated as monthly.
"""
import logging
from enum import Enum
from typing import Any, Optional, Union

from backend.app.models.models import Frequency

logger = logging.getLogger(__name__)

# Calendar-accurate cadence lengths in days
PERIOD_DAYS = {
    Frequency.DAILY.value: 1.0,
    Frequency.WEEKLY.value: 7.0,
    Frequency.BIWEEKLY.value: 14.0,
    Frequency.MONTHLY.value: 30.44,  # 365.25 / 12
    Frequency.YEARLY.value: 365.25,
}

DEFAULT_FREQUENCY = Frequency.MONTHLY.value

def normalize_frequency(value: Union[str, Enum, None]) -> str:
    """Map an enum member, string or None to a key of PERIOD_DAYS"""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str) and value.lower() in PERIOD_DAYS:
        return value.lower()
    logger.debug("Unknown frequency %r, treating as %s", value, DEFAULT_FREQUENCY)
    return DEFAULT_FREQUENCY

def is_one_time(value: Union[str, Enum, None]) -> bool:
    if isinstance(value, Enum):
        value = value.value
    return value == Frequency.NONE.value

def convert_amount(
    amount: float,
    source_frequency: Union[str, Enum, None],
    target_period: Union[str, Enum, None]
) -> float:
    """
    Convert an amount recorded at source_frequency into the equivalent amount
    for one target_period.

    result = amount * (days(target) / days(source))
    """
    source = normalize_frequency(source_frequency)
    target = normalize_frequency(target_period)
    if source == target:
        return float(amount)
    return amount * (PERIOD_DAYS[target] / PERIOD_DAYS[source])

def scale_amount(
    amount: float,
    frequency: Union[str, Enum, None],
    target_period: Union[str, Enum, None]
) -> float:
    """Like convert_amount, except that a one-off (`none`) amount passes through unchanged"""
    if is_one_time(frequency):
        return float(amount)
    return convert_amount(amount, frequency, target_period)

def expense_amount_for_period(expense: Any, target_period: Union[str, Enum, None]) -> float:
    """
    Amount an expense counts for against a budget with the given period.

    One-time expenses count at their full amount whatever the period; a
    single purchase is not spread across time. A recurring expense without a
    usable frequency is treated as monthly.
    """
    if not getattr(expense, "is_recurring", False):
        return float(expense.amount)

    return scale_amount(expense.amount, getattr(expense, "recurring_frequency", None), target_period)

def contribution_amount_for_period(savings: Any, target_period: Union[str, Enum, None]) -> float:
    """Recurring contribution of a savings goal, expressed per target_period"""
    amount: Optional[float] = getattr(savings, "recurring_contribution_amount", None)
    if not amount:
        return 0.0
    frequency = getattr(savings, "recurring_contribution_frequency", None)
    return convert_amount(amount, frequency, target_period)

def daily_amount(amount: float, frequency: Union[str, Enum, None]) -> float:
    return convert_amount(amount, frequency, Frequency.DAILY)
