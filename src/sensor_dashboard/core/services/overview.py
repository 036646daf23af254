import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sensor_dashboard.core.backend.client import BackendClient, BackendError, backend_client
from sensor_dashboard.core.backend.demo import generate_demo_data
from sensor_dashboard.core.config_loader import ConfigLoader, config_loader
from sensor_dashboard.core.models.sensor_reading import SensorReading
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.processing import statistics
from sensor_dashboard.core.processing.chart_renderer import ChartSeries, render_line_chart
from sensor_dashboard.core.settings import settings

logger = logging.getLogger(__name__)

# Chart name -> (left axis sensor, right axis sensor)
OVERVIEW_CHARTS = {
    "climate": (SensorType.TEMPERATURE, SensorType.HUMIDITY),
    "atmosphere": (SensorType.PRESSURE, SensorType.LIGHT),
}

CHART_TITLES = {
    "climate": "Temperature & Humidity",
    "atmosphere": "Pressure & Light",
}

# Fixed axis bounds per sensor; None keeps the bound automatic
AXIS_BOUNDS = {
    SensorType.TEMPERATURE: (None, None),
    SensorType.HUMIDITY: (0.0, 100.0),
    SensorType.PRESSURE: (None, None),
    SensorType.LIGHT: (0.0, None),
}


class OverviewService:
    """
    Overview dashboard: the most recent readings, refreshed on a fixed interval.
    """

    def __init__(
        self,
        client: BackendClient = backend_client,
        loader: ConfigLoader = config_loader,
        refresh_seconds: Optional[float] = None,
        tz: Optional[str] = None,
    ):
        self._client = client
        self._loader = loader
        self.refresh_seconds = refresh_seconds if refresh_seconds is not None else settings.overview_refresh_seconds
        self.zone = statistics.get_zone(tz or settings.tz)
        self.readings: List[SensorReading] = []
        self.loaded = False
        self.last_update: Optional[datetime] = None
        self.running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def demo_mode(self) -> bool:
        return not self._client.configured

    async def refresh(self) -> List[SensorReading]:
        """Reload the readings. Backend failures fall back to generated data."""
        rows = self._loader.overview_rows
        try:
            if self.demo_mode:
                self.readings = generate_demo_data(hours=rows)
            else:
                # Newest rows first from the store, shown oldest first
                self.readings = list(reversed(await self._client.fetch_readings(rows, ascending=False)))
        except BackendError as e:
            logger.error(f"Error fetching overview data: {e}")
            self.readings = generate_demo_data(hours=rows)
        self.last_update = datetime.now(timezone.utc)
        self.loaded = True
        return self.readings

    async def ensure_loaded(self):
        if not self.loaded:
            await self.refresh()

    def start(self):
        if self.running:
            return
        self.running = True
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._refresh_loop())
        logger.info("OverviewService started")

    def stop(self):
        self.running = False
        if self._task:
            self._task.cancel()
            self._task = None
        logger.info("OverviewService stopped")

    async def _refresh_loop(self):
        while self.running:
            await self.refresh()
            await asyncio.sleep(self.refresh_seconds)

    @property
    def latest(self) -> Optional[SensorReading]:
        return self.readings[-1] if self.readings else None

    @property
    def previous(self) -> Optional[SensorReading]:
        return self.readings[-2] if len(self.readings) > 1 else None

    def stat_cards(self) -> List[dict]:
        """Latest value per sensor with its trend against the previous reading."""
        cards = []
        for sensor_type, cfg in self._loader.get_all_sensors().items():
            current = self.latest.value(sensor_type) if self.latest else None
            previous = self.previous.value(sensor_type) if self.previous else None
            direction = statistics.trend(current, previous)
            cards.append({
                "sensor": sensor_type.value,
                "title": cfg.displayName,
                "value": current or 0.0,
                "display_value": f"{current or 0.0:.1f}",
                "unit": cfg.unit,
                "color": cfg.color,
                "trend": direction,
                "trend_arrow": statistics.TREND_ARROWS[direction],
                "trend_value": statistics.trend_value(current, previous, cfg.unit, cfg.decimals),
            })
        return cards

    def averages(self) -> Dict[str, Optional[float]]:
        return {sensor_type.value: value for sensor_type, value in statistics.averages(self.readings).items()}

    def average_texts(self) -> Dict[str, str]:
        texts = {}
        for sensor_type, value in statistics.averages(self.readings).items():
            cfg = self._loader.get_sensor_config(sensor_type)
            texts[sensor_type.value] = "-" if value is None else statistics.format_with_unit(value, cfg.unit, cfg.decimals)
        return texts

    def chart_rows(self) -> List[dict]:
        return statistics.chart_rows(self.readings, self.zone)

    def render_chart(self, name: str) -> bytes:
        if name not in OVERVIEW_CHARTS:
            raise ValueError(f"Unknown overview chart: {name}")
        labels = [statistics.time_label(r.timestamp, self.zone) for r in self.readings]
        series = []
        for sensor_type in OVERVIEW_CHARTS[name]:
            cfg = self._loader.get_sensor_config(sensor_type)
            low, high = AXIS_BOUNDS[sensor_type]
            series.append(ChartSeries(
                label=f"{cfg.displayName} ({cfg.unit})",
                color=cfg.color,
                values=[r.value(sensor_type) for r in self.readings],
                min_value=low,
                max_value=high,
            ))
        return render_line_chart(CHART_TITLES[name], labels, series)


overview_service = OverviewService()
