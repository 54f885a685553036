"""
Raw sensor record normalization.

Turns the untyped records delivered by the sensor export into canonical
points: a local-time epoch timestamp, numeric metrics coerced defensively,
status strings with defaults, and the derived rain intensity and
sunrise/sunset fields. Records whose timestamp does not parse are dropped.

Usage:
    from weatherlens.core.normalizer import normalize_records

    points = normalize_records(export_json, tz="Europe/Paris")
"""

import re
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

from weatherlens.config import (
    LUX_DAY_THRESHOLD,
    RAIN_ANALOG_MAX,
    RAW_AQI_FIELDS,
    RAW_TIMESTAMP_FORMAT,
    SUNRISE,
    SUNSET,
    UNKNOWN_STATUS,
)
from weatherlens.utils.date_util import (
    TimezoneLike,
    local_to_epoch_ms,
    parse_time_of_day,
    to_date,
)
from weatherlens.utils.log_util import app_logger
from weatherlens.utils.stats_utils import to_finite_number

logger = app_logger(__name__)

TIMESTAMP_PATTERN = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4}) (\d{2}):(\d{2}):(\d{2})$"
)

# Metrics that always carry a number so downstream arithmetic stays total
ZERO_DEFAULT_FIELDS = ("temperature", "humidity", "lux")


def parse_sensor_timestamp(value: Any, tz: TimezoneLike = None) -> Optional[int]:
    """
    Parse a "dd/MM/yyyy HH:mm:ss" string as local time.

    :param value: Raw timestamp field.
    :param tz: Timezone of the wall clock (None = system local zone).
    :return: Epoch milliseconds, or None if the format or date is invalid.
    """
    if not isinstance(value, str):
        logger.warning(f"Timestamp is not a string: {value!r}")
        return None

    match = TIMESTAMP_PATTERN.match(value.strip())
    if not match:
        logger.warning(
            f"Could not parse timestamp format: {value!r}. "
            f'Expected "{RAW_TIMESTAMP_FORMAT}"'
        )
        return None

    day, month, year, hour, minute, second = (int(part) for part in match.groups())
    try:
        naive = datetime(year, month, day, hour, minute, second)
    except ValueError as e:
        logger.warning(f"Invalid date constructed for timestamp {value!r}: {e}")
        return None

    return local_to_epoch_ms(naive, tz)


def calculate_precipitation_intensity(rain_analog: float) -> float:
    """
    Convert the raw rain sensor reading into a 0-100 intensity percentage.

    The sensor scale is inverted: RAIN_ANALOG_MAX means dry, 0 means soaked.
    """
    intensity = ((RAIN_ANALOG_MAX - rain_analog) / RAIN_ANALOG_MAX) * 100
    return min(100.0, max(0.0, intensity))


def classify_sunrise_sunset(lux: float) -> str:
    """Bright enough to count as daytime above LUX_DAY_THRESHOLD lux."""
    return SUNRISE if lux > LUX_DAY_THRESHOLD else SUNSET


def _status_text(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return UNKNOWN_STATUS


def _raw_aqi(raw: Mapping) -> Optional[float]:
    for field_name in RAW_AQI_FIELDS:
        value = to_finite_number(raw.get(field_name))
        if value is not None:
            return value
    return None


def normalize_record(
    raw: Any, record_id: Optional[str] = None, tz: TimezoneLike = None
) -> Optional[Dict[str, Any]]:
    """
    Normalize one raw sensor record into a canonical point.

    :param raw: Raw record mapping; never mutated.
    :param record_id: Optional key the record was stored under.
    :param tz: Timezone of the raw wall-clock timestamp.
    :return: Canonical point dict, or None if the record is unusable.
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Skipping record that is not a mapping: {type(raw).__name__}")
        return None

    timestamp = parse_sensor_timestamp(raw.get("timestamp"), tz)
    if timestamp is None:
        label = f" {record_id}" if record_id is not None else ""
        logger.warning(f"Skipping record{label} due to unparseable timestamp")
        return None

    point: Dict[str, Any] = {
        "timestamp": timestamp,
        "rawTimestampString": raw["timestamp"],
    }
    if record_id is not None:
        point["id"] = str(record_id)

    for field_name in ZERO_DEFAULT_FIELDS:
        value = to_finite_number(raw.get(field_name))
        point[field_name] = value if value is not None else 0

    aqi = _raw_aqi(raw)
    point["aqiPpm"] = aqi if aqi is not None else 0

    pressure = to_finite_number(raw.get("pressure"))
    if pressure is not None:
        point["pressure"] = pressure

    point["precipitation"] = _status_text(raw.get("rainStatus"))
    point["airQuality"] = _status_text(raw.get("airQuality"))

    rain_analog = to_finite_number(raw.get("rainAnalog"))
    if rain_analog is not None:
        point["rainAnalog"] = rain_analog
        point["precipitationIntensity"] = calculate_precipitation_intensity(
            rain_analog
        )

    point["sunriseSunset"] = classify_sunrise_sunset(point["lux"])
    return point


def normalize_records(
    records: Union[Mapping, Iterable[Any]], tz: TimezoneLike = None
) -> List[Dict[str, Any]]:
    """
    Normalize a batch of raw records and sort them by timestamp.

    :param records: Sequence of raw records, or a mapping of id -> record as
                    found in keyed exports.
    :param tz: Timezone of the raw wall-clock timestamps.
    :return: Canonical points sorted ascending; duplicates are kept in input order.
    """
    if records is None:
        return []

    if isinstance(records, Mapping):
        candidates = [
            normalize_record(raw, record_id=key, tz=tz) for key, raw in records.items()
        ]
    else:
        candidates = [normalize_record(raw, tz=tz) for raw in records]

    points = [point for point in candidates if point is not None]
    dropped = len(candidates) - len(points)
    if dropped:
        logger.info(f"Dropped {dropped} of {len(candidates)} records during normalization")

    points.sort(key=lambda p: p["timestamp"])
    logger.debug(f"Normalized {len(points)} sensor points")
    return points


def filter_by_date_range(
    points: List[Dict[str, Any]],
    date_from: Any,
    date_to: Any,
    start_time: str = "00:00",
    end_time: str = "23:59",
    tz: TimezoneLike = None,
) -> List[Dict[str, Any]]:
    """
    Keep the points between two local calendar days, inclusive.

    The start time applies to the first day and the end time to the last day,
    so the selection is one continuous window.

    :param points: Canonical points.
    :param date_from: First day (date, datetime or date string).
    :param date_to: Last day (date, datetime or date string).
    :param start_time: "HH:MM" on the first day.
    :param end_time: "HH:MM" on the last day, inclusive to the end of that minute.
    :param tz: Timezone the calendar days are read in.
    :return: Points inside the window, input order preserved.
    """
    if date_from is None or date_to is None:
        logger.debug("Date range incomplete; returning no points")
        return []

    start = datetime.combine(to_date(date_from), parse_time_of_day(start_time))
    end = datetime.combine(to_date(date_to), parse_time_of_day(end_time)) + timedelta(
        seconds=59, microseconds=999000
    )
    from_ms = local_to_epoch_ms(start, tz)
    to_ms = local_to_epoch_ms(end, tz)

    filtered = [p for p in points if from_ms <= p["timestamp"] <= to_ms]
    logger.debug(
        f"Date filter {start} to {end}: {len(filtered)} of {len(points)} points"
    )
    return filtered
