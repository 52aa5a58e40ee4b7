"""Next-run arithmetic for crawl frequencies."""

from datetime import datetime, timedelta
from typing import Optional, Union

from .types import Frequency, SchedulerError

RUN_HOUR = 2


def compute_next_run(
    frequency: Union[Frequency, str], from_: Optional[datetime] = None
) -> datetime:
    """Return the next run time after ``from_`` for the given frequency.

    Hourly runs are one hour later. Daily and weekly runs land at 02:00 on
    the next day or seven days later. Monthly runs land at 02:00 on the first
    day of the following month. Times follow the host clock.
    """
    try:
        frequency = Frequency(frequency)
    except ValueError as e:
        raise SchedulerError(f"Unknown frequency: {frequency}") from e

    base = from_ or datetime.now()

    if frequency == Frequency.HOURLY:
        return base + timedelta(hours=1)

    at_run_hour = dict(hour=RUN_HOUR, minute=0, second=0, microsecond=0)

    if frequency == Frequency.DAILY:
        return (base + timedelta(days=1)).replace(**at_run_hour)

    if frequency == Frequency.WEEKLY:
        return (base + timedelta(days=7)).replace(**at_run_hour)

    if base.month == 12:
        return base.replace(year=base.year + 1, month=1, day=1, **at_run_hour)
    return base.replace(month=base.month + 1, day=1, **at_run_hour)
