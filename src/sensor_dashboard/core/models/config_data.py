from dataclasses import dataclass, field
from typing import Dict

from sensor_dashboard.core.models.calibration import CalibrationValue
from sensor_dashboard.core.models.sensor_type import SensorType


@dataclass
class sensorChannelConfig:
    id: SensorType
    displayName: str = "Unnamed Sensor"
    description: str = ""
    unit: str = ""
    color: str = "#3b82f6"
    decimals: int = 1
    calibration: CalibrationValue = field(default_factory=CalibrationValue)


@dataclass
class configData:
    sensors: Dict[SensorType, sensorChannelConfig]
    realtime_window: int = 60
    overview_rows: int = 24
    log_rows: int = 500
    log_page_size: int = 10
