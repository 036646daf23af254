import json
from pathlib import Path

import pytest

from sensor_dashboard.core.config_loader import ConfigLoader, config_loader
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core import settings as settings_module
from sensor_dashboard.core.settings import DEFAULT_CONFIG_PATH


class TestConfigLoader:
    """Test configuration loading and access."""

    def test_config_loads(self):
        sensors = config_loader.get_all_sensors()
        assert list(sensors) == list(SensorType)

    def test_units(self):
        assert config_loader.get_unit(SensorType.TEMPERATURE) == "°C"
        assert config_loader.get_unit(SensorType.HUMIDITY) == "%"
        assert config_loader.get_unit(SensorType.PRESSURE) == "hPa"
        assert config_loader.get_unit(SensorType.LIGHT) == "lux"

    @pytest.mark.parametrize("sensor_type, low, high", [
        (SensorType.TEMPERATURE, -40, 85),
        (SensorType.HUMIDITY, 0, 100),
        (SensorType.PRESSURE, 300, 1100),
        (SensorType.LIGHT, 0, 10000),
    ])
    def test_default_calibration(self, sensor_type, low, high):
        calibration = config_loader.get_default_calibration(sensor_type)
        assert calibration.offset == 0
        assert calibration.scale == 1
        assert calibration.min_value == low
        assert calibration.max_value == high

    def test_default_calibration_is_a_copy(self):
        calibration = config_loader.get_default_calibration(SensorType.TEMPERATURE)
        calibration.offset = 5.0
        assert config_loader.get_default_calibration(SensorType.TEMPERATURE).offset == 0

    def test_view_sizes(self):
        assert config_loader.realtime_window == 60
        assert config_loader.overview_rows == 24
        assert config_loader.log_rows == 500
        assert config_loader.log_page_size == 10

    def test_singleton(self):
        assert ConfigLoader() is config_loader

    def test_default_file_ships_inside_the_package(self):
        package_dir = Path(settings_module.__file__).resolve().parent.parent
        assert DEFAULT_CONFIG_PATH.is_file()
        assert package_dir in DEFAULT_CONFIG_PATH.resolve().parents


class TestConfigFile:
    """Loading from explicit files."""

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "sensors": {"light": {"display_name": "Lux", "decimals": 2}},
            "views": {"log_page_size": 25},
        }), encoding="utf-8")

        loader = ConfigLoader(path)

        assert loader is not config_loader
        assert loader.get_sensor_config(SensorType.LIGHT).displayName == "Lux"
        assert loader.get_sensor_config(SensorType.LIGHT).decimals == 2
        assert loader.get_unit(SensorType.LIGHT) == "lux"
        assert loader.get_sensor_config(SensorType.TEMPERATURE).displayName == "Temperature"
        assert loader.log_page_size == 25
        assert loader.realtime_window == 60

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        loader = ConfigLoader(tmp_path / "missing.json")
        assert loader.get_unit(SensorType.PRESSURE) == "hPa"

    def test_invalid_json_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        loader = ConfigLoader(path)

        assert loader.get_default_calibration(SensorType.HUMIDITY).max_value == 100

    def test_unknown_sensor_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "unknown.json"
        path.write_text(json.dumps({"sensors": {"co2": {"unit": "ppm"}}}), encoding="utf-8")

        loader = ConfigLoader(path)

        assert set(loader.get_all_sensors()) == set(SensorType)
