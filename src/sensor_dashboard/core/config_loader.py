import json
import logging
from pathlib import Path
from typing import Dict, Optional

from sensor_dashboard.core.models.calibration import CalibrationValue
from sensor_dashboard.core.models.config_data import configData, sensorChannelConfig
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.settings import settings

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and manages sensor channel configuration from JSON file."""

    _instance = None

    def __new__(cls, config_path: Optional[Path] = None):
        if config_path is not None:
            # Explicit path: standalone loader, leaves the singleton alone
            instance = super(ConfigLoader, cls).__new__(cls)
            instance._initialized = False
            return instance
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None):
        if not self._initialized:
            self._config_path = Path(config_path) if config_path is not None else None
            self._config = self._get_default_config()
            self.load_config()
            self._initialized = True

    def get_config_path(self) -> Path:
        """Get the path to the dashboard_config.json file."""
        if self._config_path is not None:
            return self._config_path
        return Path(settings.config_path)

    def load_config(self):
        """Load configuration from JSON file."""
        config_path = self.get_config_path()

        # Start from defaults so every sensor type is always present
        self._config = self._get_default_config()

        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            return

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                json_data = json.load(f)

            for sensor_key, sensor_cfg in json_data.get("sensors", {}).items():
                sensor_type = SensorType(sensor_key)
                default = self._config.sensors[sensor_type]
                calibration_cfg = sensor_cfg.get("calibration", {})
                self._config.sensors[sensor_type] = sensorChannelConfig(
                    sensor_type,
                    displayName=sensor_cfg.get("display_name", default.displayName),
                    description=sensor_cfg.get("description", default.description),
                    unit=sensor_cfg.get("unit", default.unit),
                    color=sensor_cfg.get("color", default.color),
                    decimals=int(sensor_cfg.get("decimals", default.decimals)),
                    calibration=CalibrationValue(
                        offset=calibration_cfg.get("offset", default.calibration.offset),
                        scale=calibration_cfg.get("scale", default.calibration.scale),
                        min_value=calibration_cfg.get("min_value", default.calibration.min_value),
                        max_value=calibration_cfg.get("max_value", default.calibration.max_value),
                    ),
                )

            views = json_data.get("views", {})
            self._config.realtime_window = int(views.get("realtime_window", self._config.realtime_window))
            self._config.overview_rows = int(views.get("overview_rows", self._config.overview_rows))
            self._config.log_rows = int(views.get("log_rows", self._config.log_rows))
            self._config.log_page_size = int(views.get("log_page_size", self._config.log_page_size))
            logger.info(f"Configuration loaded from {config_path}")

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse configuration file: {e}")
            self._config = self._get_default_config()

        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Invalid configuration in {config_path}: {e}")
            self._config = self._get_default_config()

    @staticmethod
    def _get_default_config() -> configData:
        """Return default configuration."""

        return configData(
            sensors={
                SensorType.TEMPERATURE: sensorChannelConfig(
                    SensorType.TEMPERATURE, displayName="Temperature", unit="°C", color="#f97316", decimals=1,
                    description="Ambient temperature sensor",
                    calibration=CalibrationValue(offset=0.0, scale=1.0, min_value=-40.0, max_value=85.0),
                ),
                SensorType.HUMIDITY: sensorChannelConfig(
                    SensorType.HUMIDITY, displayName="Humidity", unit="%", color="#3b82f6", decimals=1,
                    description="Relative humidity sensor",
                    calibration=CalibrationValue(offset=0.0, scale=1.0, min_value=0.0, max_value=100.0),
                ),
                SensorType.PRESSURE: sensorChannelConfig(
                    SensorType.PRESSURE, displayName="Pressure", unit="hPa", color="#a855f7", decimals=1,
                    description="Atmospheric pressure sensor",
                    calibration=CalibrationValue(offset=0.0, scale=1.0, min_value=300.0, max_value=1100.0),
                ),
                SensorType.LIGHT: sensorChannelConfig(
                    SensorType.LIGHT, displayName="Light", unit="lux", color="#06b6d4", decimals=0,
                    description="Light intensity sensor",
                    calibration=CalibrationValue(offset=0.0, scale=1.0, min_value=0.0, max_value=10000.0),
                ),
            }
        )

    def get_sensor_config(self, sensor_type: SensorType) -> sensorChannelConfig:
        """Get configuration for a specific sensor."""
        return self._config.sensors[sensor_type]

    def get_all_sensors(self) -> Dict[SensorType, sensorChannelConfig]:
        """Get all sensor configurations, in enumeration order."""
        return {sensor_type: self._config.sensors[sensor_type] for sensor_type in SensorType}

    def get_unit(self, sensor_type: SensorType) -> str:
        return self.get_sensor_config(sensor_type).unit

    def get_default_calibration(self, sensor_type: SensorType) -> CalibrationValue:
        """Fresh copy of the configured default calibration for a sensor."""
        return self.get_sensor_config(sensor_type).calibration.copy()

    @property
    def realtime_window(self) -> int:
        return self._config.realtime_window

    @property
    def overview_rows(self) -> int:
        return self._config.overview_rows

    @property
    def log_rows(self) -> int:
        return self._config.log_rows

    @property
    def log_page_size(self) -> int:
        return self._config.log_page_size


# Global singleton instance
config_loader = ConfigLoader()
