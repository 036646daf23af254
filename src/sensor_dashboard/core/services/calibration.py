import logging
import re
import time
from typing import Callable, Dict, List, Optional, Union

from sensor_dashboard.core.backend.client import BackendClient, BackendError, backend_client
from sensor_dashboard.core.config_loader import ConfigLoader, config_loader
from sensor_dashboard.core.event_hub import CALIBRATION_SAVED, EventHub, event_hub
from sensor_dashboard.core.models.calibration import (
    EXAMPLE_RAW_VALUE,
    CalibrationSetting,
    CalibrationValue,
    example_text,
    formula_text,
    range_text,
)
from sensor_dashboard.core.models.sensor_reading import number_text
from sensor_dashboard.core.models.sensor_type import SensorType

logger = logging.getLogger(__name__)

CALIBRATION_FIELDS = ("offset", "scale", "min_value", "max_value")

# How long the "saved" notice stays up after a save
SAVED_NOTICE_SECONDS = 3.0

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_form_number(raw: Union[str, float, int, None]) -> float:
    """
    Parse form input the way a browser number field is read: the leading
    numeric prefix counts ("12.5abc" -> 12.5), anything unparseable is 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _LEADING_NUMBER.match(raw.strip())
        if not match:
            return 0.0
        try:
            value = float(match.group(0))
        except (ValueError, OverflowError):
            return 0.0
    if value != value or value in (float("inf"), float("-inf")):
        return 0.0
    return value


class CalibrationService:
    """
    Calibration form state: one editable value set per sensor, saved to the
    `calibration_settings` table by upsert on `sensor_type`.
    """

    def __init__(
        self,
        client: BackendClient = backend_client,
        loader: ConfigLoader = config_loader,
        hub: EventHub = event_hub,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._loader = loader
        self._hub = hub
        self._clock = clock
        self.values: Dict[SensorType, CalibrationValue] = self._defaults()
        self.active: SensorType = SensorType.TEMPERATURE
        self.saving = False
        self.last_error: Optional[str] = None
        self._saved_at: Optional[float] = None

    @property
    def demo_mode(self) -> bool:
        return not self._client.configured

    @property
    def saved(self) -> bool:
        if self._saved_at is None:
            return False
        return self._clock() - self._saved_at < SAVED_NOTICE_SECONDS

    def _defaults(self) -> Dict[SensorType, CalibrationValue]:
        return {sensor_type: self._loader.get_default_calibration(sensor_type) for sensor_type in SensorType}

    def select(self, sensor_type: SensorType):
        self.active = sensor_type

    def change(self, sensor_type: SensorType, field: str, raw: Union[str, float, int, None]) -> float:
        """Set one field from user input. Returns the parsed value."""
        if field not in CALIBRATION_FIELDS:
            raise ValueError(f"Unknown calibration field: {field}")
        value = parse_form_number(raw)
        setattr(self.values[sensor_type], field, value)
        self._saved_at = None
        return value

    def reset(self, sensor_type: SensorType):
        self.values[sensor_type] = self._loader.get_default_calibration(sensor_type)
        self._saved_at = None

    def reset_all(self):
        self.values = self._defaults()
        self._saved_at = None

    async def load(self) -> bool:
        """Seed the form from stored settings. Demo mode keeps the defaults."""
        if self.demo_mode:
            return False
        try:
            stored = await self._client.fetch_calibration()
        except BackendError as e:
            logger.error(f"Error loading calibration settings: {e}")
            return False
        for setting in stored:
            self.values[setting.sensor_type] = setting.to_value()
        logger.info(f"Loaded {len(stored)} calibration settings")
        return True

    async def save(self) -> bool:
        """Persist every sensor's values. Demo mode writes nothing but still reports success."""
        self.saving = True
        self.last_error = None
        try:
            if not self.demo_mode:
                for sensor_type, value in self.values.items():
                    setting = CalibrationSetting.from_value(sensor_type, value, self._loader.get_unit(sensor_type))
                    await self._client.upsert_calibration(setting)
            self._saved_at = self._clock()
            self._hub.send_all_on_topic(CALIBRATION_SAVED, dict(self.values))
            return True
        except BackendError as e:
            logger.error(f"Error saving calibration: {e}")
            self.last_error = str(e)
            return False
        finally:
            self.saving = False

    def view(self, sensor_type: SensorType) -> dict:
        """Everything the form shows for one sensor."""
        cfg = self._loader.get_sensor_config(sensor_type)
        value = self.values[sensor_type]
        return {
            "sensor": sensor_type.value,
            "name": cfg.displayName,
            "description": cfg.description,
            "unit": cfg.unit,
            "color": cfg.color,
            "offset": value.offset,
            "scale": value.scale,
            "min_value": value.min_value,
            "max_value": value.max_value,
            "formula": formula_text(value),
            "example_raw": f"{EXAMPLE_RAW_VALUE:.1f}",
            "example_process": f"× {number_text(value.scale)} + {number_text(value.offset)}",
            "example_calibrated": example_text(value),
            "range": range_text(value, cfg.unit),
        }

    def views(self) -> List[dict]:
        return [self.view(sensor_type) for sensor_type in SensorType]


calibration_service = CalibrationService()
