from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from models.recurring_transaction import FrequencyUnit


def add_months(start: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Shift by whole months, clamping the day to the end of the target month.

    anchor_day keeps a schedule on its original day of month, so
    Jan 31 -> Feb 28 -> Mar 31 rather than drifting to the 28th.
    """
    return start + relativedelta(months=months, day=anchor_day or start.day)


def advance(current: date, frequency_value: int, frequency_unit: FrequencyUnit,
            anchor_day: Optional[int] = None) -> date:
    if frequency_unit == FrequencyUnit.DAY:
        return current + timedelta(days=frequency_value)
    if frequency_unit == FrequencyUnit.WEEK:
        return current + timedelta(weeks=frequency_value)
    if frequency_unit == FrequencyUnit.MONTH:
        return add_months(current, frequency_value, anchor_day)
    if frequency_unit == FrequencyUnit.YEAR:
        return add_months(current, 12 * frequency_value, anchor_day)
    raise ValueError(f"Unknown frequency unit: {frequency_unit}")
