"""
Date and timezone helpers.

Sensor timestamps are wall-clock strings in the deployment's local time, so
every calendar computation (bucketing, date filters, duration grouping) goes
through the same timezone resolution: None means the system local zone,
a string is looked up with pytz.
"""

from datetime import date, datetime, time, tzinfo
from typing import Optional, Union

import pytz
from dateutil import parser
from dateutil import tz as dateutil_tz

from weatherlens.utils.log_util import app_logger

logger = app_logger(__name__)

TimezoneLike = Optional[Union[str, tzinfo]]


def resolve_timezone(tz: TimezoneLike = None) -> tzinfo:
    """
    Resolve a timezone argument to a tzinfo object.

    :param tz: None for the system local zone, an IANA name, or a tzinfo.
    :return: tzinfo instance.
    :raises pytz.UnknownTimeZoneError: if the name is not a known zone.
    """
    if tz is None:
        return dateutil_tz.tzlocal()
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def localize(naive: datetime, tz: TimezoneLike = None) -> datetime:
    """Attach a timezone to a naive wall-clock datetime."""
    zone = resolve_timezone(tz)
    if hasattr(zone, "localize"):
        # pytz zones need localize() to pick the right UTC offset
        return zone.localize(naive)
    return naive.replace(tzinfo=zone)


def local_to_epoch_ms(naive: datetime, tz: TimezoneLike = None) -> int:
    """Convert a naive local wall-clock datetime to epoch milliseconds."""
    return int(round(localize(naive, tz).timestamp() * 1000))


def epoch_ms_to_local(timestamp_ms: Union[int, float], tz: TimezoneLike = None) -> datetime:
    """
    Convert epoch milliseconds to a naive local wall-clock datetime.

    :param timestamp_ms: Milliseconds since the epoch.
    :param tz: Timezone the wall clock is read in.
    :return: Naive datetime in local time.
    """
    zone = resolve_timezone(tz)
    return datetime.fromtimestamp(timestamp_ms / 1000, zone).replace(tzinfo=None)


def to_date(value: Union[str, date, datetime]) -> date:
    """
    Convert a date-like value to a date object.

    :param value: date, datetime or a date string parseable by dateutil.
    :return: date - Calendar date.
    :raises: Exception if date string parsing fails.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parser.parse(value).date()
    except Exception as e:
        logger.error(f"Error parsing date string: {e}", exc_info=True)
        raise


def parse_time_of_day(value: str) -> time:
    """Parse an "HH:MM" string into a time object."""
    hours, minutes = (int(part) for part in value.split(":")[:2])
    return time(hours, minutes)


def format_duration(duration_ms: Union[int, float]) -> str:
    """
    Format a duration in milliseconds as hours and minutes.

    :param duration_ms: Duration in milliseconds.
    :return: Formatted string such as "13h 5m" or "45m".
    """
    total_minutes = int(max(duration_ms, 0) // 60000)
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes}m"


def format_timestamp_short(timestamp_ms: int, tz: TimezoneLike = None) -> str:
    """Format epoch milliseconds as "dd/MM HH:mm" local time."""
    return epoch_ms_to_local(timestamp_ms, tz).strftime("%d/%m %H:%M")


def format_timestamp_full(timestamp_ms: int, tz: TimezoneLike = None) -> str:
    """Format epoch milliseconds as "dd/MM/yyyy HH:mm:ss" local time."""
    return epoch_ms_to_local(timestamp_ms, tz).strftime("%d/%m/%Y %H:%M:%S")
