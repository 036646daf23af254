"""
Derived values shown next to the readings: trends, averages, formatted values
and chart rows.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from sensor_dashboard.core.models.sensor_reading import SensorReading
from sensor_dashboard.core.models.sensor_type import SensorType

logger = logging.getLogger(__name__)

# Minimum change between two readings to count as a trend
TREND_THRESHOLD = 0.5

TREND_ARROWS = {"up": "↑", "down": "↓", "stable": "→"}


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except Exception:
        logger.warning(f"Unknown timezone {name!r}, using UTC")
        return ZoneInfo("UTC")


def trend(current: Optional[float], previous: Optional[float]) -> str:
    """'up', 'down' or 'stable'. Missing or zero values are always stable."""
    if not current or not previous:
        return "stable"
    diff = current - previous
    if diff > TREND_THRESHOLD:
        return "up"
    if diff < -TREND_THRESHOLD:
        return "down"
    return "stable"


def format_with_unit(value: float, unit: str, decimals: int) -> str:
    # Degree and percent signs stick to the number
    separator = "" if unit.startswith(("°", "%")) else " "
    return f"{value:.{decimals}f}{separator}{unit}"


def trend_value(current: Optional[float], previous: Optional[float], unit: str, decimals: int) -> str:
    return format_with_unit(abs((current or 0.0) - (previous or 0.0)), unit, decimals)


def average(readings: Sequence[SensorReading], sensor_type: SensorType) -> Optional[float]:
    if not readings:
        return None
    return sum(r.value(sensor_type) for r in readings) / len(readings)


def averages(readings: Sequence[SensorReading]) -> Dict[SensorType, Optional[float]]:
    return {sensor_type: average(readings, sensor_type) for sensor_type in SensorType}


def time_label(instant: datetime, zone: ZoneInfo, with_seconds: bool = False) -> str:
    return instant.astimezone(zone).strftime("%H:%M:%S" if with_seconds else "%H:%M")


def chart_rows(readings: Sequence[SensorReading], zone: ZoneInfo, with_seconds: bool = False) -> List[dict]:
    """One row per reading: index, time label and every sensor value."""
    rows = []
    for index, reading in enumerate(readings):
        row = {"index": index, "time": time_label(reading.timestamp, zone, with_seconds)}
        for sensor_type in SensorType:
            row[sensor_type.value] = reading.value(sensor_type)
        rows.append(row)
    return rows
