"""
Calibration data models.

Calibration is a linear transform `raw * scale + offset` with a valid range.
The settings are edited and persisted but never applied to displayed readings.
"""
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic.dataclasses import dataclass

from sensor_dashboard.core.models.sensor_reading import number_text
from sensor_dashboard.core.models.sensor_type import SensorType

# Raw value used by the worked example on the calibration form
EXAMPLE_RAW_VALUE = 25.0


@dataclass
class CalibrationValue:
    """Editable calibration values for one sensor."""
    offset: float = 0.0
    scale: float = 1.0
    min_value: float = 0.0
    max_value: float = 0.0

    def apply(self, raw: float) -> float:
        return raw * self.scale + self.offset

    def copy(self) -> "CalibrationValue":
        return CalibrationValue(**asdict(self))


@dataclass
class CalibrationSetting:
    """
    Row shape of the `calibration_settings` table, keyed by `sensor_type`.
    """
    sensor_type: SensorType
    offset: float
    scale: float
    min_value: float
    max_value: float
    unit: str = ""
    updated_at: Optional[datetime] = None

    @classmethod
    def from_value(cls, sensor_type: SensorType, value: CalibrationValue, unit: str) -> "CalibrationSetting":
        return cls(
            sensor_type=sensor_type,
            offset=value.offset,
            scale=value.scale,
            min_value=value.min_value,
            max_value=value.max_value,
            unit=unit,
        )

    def to_value(self) -> CalibrationValue:
        return CalibrationValue(
            offset=self.offset,
            scale=self.scale,
            min_value=self.min_value,
            max_value=self.max_value,
        )

    def to_upsert(self) -> Dict[str, Any]:
        """Upsert payload: `updated_at` is left to the table."""
        return {
            "sensor_type": self.sensor_type.value,
            "offset": self.offset,
            "scale": self.scale,
            "min_value": self.min_value,
            "max_value": self.max_value,
            "unit": self.unit,
        }


def formula_text(value: CalibrationValue) -> str:
    return f"calibrated = raw × {number_text(value.scale)} + {number_text(value.offset)}"


def example_text(value: CalibrationValue) -> str:
    return f"{value.apply(EXAMPLE_RAW_VALUE):.2f}"


def range_text(value: CalibrationValue, unit: str) -> str:
    return f"{number_text(value.min_value)} {unit} - {number_text(value.max_value)} {unit}"
