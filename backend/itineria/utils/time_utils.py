# backend/itineria/utils/time_utils.py

from datetime import date, datetime
from typing import Union

import pytz

from itineria.core.config_loader import settings


MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def local_tz():
    return pytz.timezone(settings.timezone)


def now() -> datetime:
    """Current wall-clock time in the configured timezone, without tzinfo."""
    return datetime.now(local_tz()).replace(tzinfo=None, microsecond=0)


def format_date(value: Union[date, datetime]) -> str:
    """
    Medium date style used everywhere a trip or planner date is shown.

    Example:
        date(2024, 1, 1) -> "1 Jan 2024"
    """
    # strftime("%b") follows the process locale, so month names are fixed here
    return f"{value.day} {MONTH_ABBR[value.month - 1]} {value.year}"
