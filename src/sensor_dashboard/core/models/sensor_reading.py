"""
Sensor reading model.
"""
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from pydantic import field_validator
from pydantic.dataclasses import dataclass

from sensor_dashboard.core.models.sensor_type import SensorType


def number_text(value: float) -> str:
    """
    Plain text of a number as a browser would print it: integral values without a
    decimal part, others in their shortest round-trip digits, with exponent notation
    only below 1e-6 or from 1e21 upwards.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        mantissa = digits[0] + (f".{digits[1:]}" if k > 1 else "")
        text = f"{mantissa}e{'+' if n > 1 else '-'}{abs(n - 1)}"
    return sign + text


def to_iso(instant: datetime) -> str:
    """Format an instant as UTC ISO-8601 with millisecond precision and a Z suffix."""
    utc = instant.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class SensorReading:
    """
    A single environmental reading as stored in the `sensor_data` table.
    Compatible with both dataclass operations and Pydantic validation.
    """
    id: str
    timestamp: datetime
    temperature: float
    humidity: float
    pressure: float
    light: float
    created_at: datetime

    @field_validator("timestamp", "created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Rows from a `timestamp without time zone` column come back naive
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def timestamp_iso(self) -> str:
        return to_iso(self.timestamp)

    @property
    def created_at_iso(self) -> str:
        return to_iso(self.created_at)

    def value(self, sensor_type: SensorType) -> float:
        """Get the value recorded for one sensor channel."""
        return getattr(self, sensor_type.value)

    def to_row(self) -> Dict[str, Any]:
        """Serialize to the table row shape (ISO timestamps)."""
        return {
            "id": self.id,
            "timestamp": self.timestamp_iso,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "pressure": self.pressure,
            "light": self.light,
            "created_at": self.created_at_iso,
        }

    def to_insert(self) -> Dict[str, Any]:
        """Insert payload: the table assigns `id` and `created_at` itself."""
        row = self.to_row()
        row.pop("id")
        row.pop("created_at")
        return row
