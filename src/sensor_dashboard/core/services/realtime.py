import asyncio
import logging
from typing import List, Optional

from sensor_dashboard.core.backend.client import BackendClient, BackendError, backend_client
from sensor_dashboard.core.backend.demo import generate_realtime_reading
from sensor_dashboard.core.backend.subscription import InsertSubscription
from sensor_dashboard.core.config_loader import ConfigLoader, config_loader
from sensor_dashboard.core.event_hub import SENSOR_DATA_INSERT, EventHub, event_hub
from sensor_dashboard.core.models.circular_buffer import CircularBuffer
from sensor_dashboard.core.models.connection_state import ConnectionState, SubscriptionStatus
from sensor_dashboard.core.models.sensor_reading import SensorReading
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.processing import statistics
from sensor_dashboard.core.processing.chart_renderer import ChartSeries, render_line_chart
from sensor_dashboard.core.settings import settings

logger = logging.getLogger(__name__)

# Readings shown when the feed opens
INITIAL_POINTS = 10

STATUS_TEXT = {
    ConnectionState.CONNECTED: "Connected",
    ConnectionState.DISCONNECTED: "Disconnected",
    ConnectionState.CONNECTING: "Connecting...",
}


class RealtimeFeed:
    """
    Live feed over a sliding window of the most recent readings.

    In demo mode a timer appends a generated reading every interval. With a
    configured backend, inserts arrive through an `InsertSubscription`.
    Pausing cancels the timer and releases the subscription.
    """

    def __init__(
        self,
        client: BackendClient = backend_client,
        loader: ConfigLoader = config_loader,
        hub: EventHub = event_hub,
        capacity: Optional[int] = None,
        interval_seconds: Optional[float] = None,
        poll_seconds: Optional[float] = None,
        tz: Optional[str] = None,
    ):
        self._client = client
        self._loader = loader
        self._hub = hub
        self.window: CircularBuffer[SensorReading] = CircularBuffer(capacity or loader.realtime_window)
        self.interval_seconds = interval_seconds if interval_seconds is not None else settings.realtime_interval_seconds
        self.poll_seconds = poll_seconds if poll_seconds is not None else settings.subscription_poll_seconds
        self.zone = statistics.get_zone(tz or settings.tz)

        self.is_live = True
        self.running = False
        self.seeded = False
        self.connection_state = ConnectionState.CONNECTING
        self._timer_task: Optional[asyncio.Task] = None
        self._subscription: Optional[InsertSubscription] = None

        hub.subscribe(SENSOR_DATA_INSERT, self._on_insert)

    @property
    def demo_mode(self) -> bool:
        return not self._client.configured

    @property
    def timer_active(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def subscription_active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def status_text(self) -> str:
        return STATUS_TEXT[self.connection_state]

    async def seed(self):
        """Fill the window with the first readings."""
        if self.demo_mode:
            self.window.extend(generate_realtime_reading() for _ in range(INITIAL_POINTS))
            self.connection_state = ConnectionState.CONNECTED
        else:
            try:
                recent = await self._client.fetch_readings(INITIAL_POINTS, ascending=False)
                self.window.extend(reversed(recent))
            except BackendError as e:
                logger.error(f"Error fetching initial realtime data: {e}")
                self.window.extend(generate_realtime_reading() for _ in range(INITIAL_POINTS))
        self.seeded = True

    async def ensure_seeded(self):
        if not self.seeded:
            await self.seed()

    async def start(self):
        if self.running:
            return
        self.running = True
        await self.ensure_seeded()
        if self.is_live:
            self._start_stream()
        logger.info(f"RealtimeFeed started (Demo: {self.demo_mode})")

    async def stop(self):
        self.running = False
        await self._stop_stream()
        logger.info("RealtimeFeed stopped")

    async def set_live(self, live: bool):
        """Resume or pause the feed."""
        if live == self.is_live:
            return
        self.is_live = live
        if not self.running:
            return
        if live:
            self._start_stream()
        else:
            await self._stop_stream()

    def _start_stream(self):
        loop = asyncio.get_running_loop()
        if self.demo_mode:
            if not self.timer_active:
                self._timer_task = loop.create_task(self._timer_loop())
            self.connection_state = ConnectionState.CONNECTED
        elif not self.subscription_active:
            self.connection_state = ConnectionState.CONNECTING
            self._subscription = InsertSubscription(
                self._client, self.poll_seconds, on_status=self._on_status, hub=self._hub
            )
            self._subscription.start()

    async def _stop_stream(self):
        if self._timer_task:
            self._timer_task.cancel()
            self._timer_task = None
        if self._subscription:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    async def _timer_loop(self):
        while self.running and self.is_live:
            await asyncio.sleep(self.interval_seconds)
            self.tick()

    def tick(self) -> SensorReading:
        """Append one generated reading."""
        reading = generate_realtime_reading()
        self.window.append(reading)
        return reading

    def _on_insert(self, topic: str, reading: SensorReading):
        if self.is_live:
            self.window.append(reading)

    def _on_status(self, status: SubscriptionStatus):
        if status == SubscriptionStatus.SUBSCRIBED:
            self.connection_state = ConnectionState.CONNECTED
        else:
            self.connection_state = ConnectionState.DISCONNECTED
        logger.info(f"Realtime subscription status: {status.value}")

    def readings(self) -> List[SensorReading]:
        return self.window.get_all()

    @property
    def latest(self) -> Optional[SensorReading]:
        return self.window.latest()

    def current_values(self) -> List[dict]:
        latest = self.latest
        values = []
        for sensor_type, cfg in self._loader.get_all_sensors().items():
            value = latest.value(sensor_type) if latest else 0.0
            values.append({
                "sensor": sensor_type.value,
                "title": cfg.displayName,
                "value": value,
                "display_value": f"{value:.1f}",
                "unit": cfg.unit,
                "color": cfg.color,
            })
        return values

    def chart_rows(self) -> List[dict]:
        return statistics.chart_rows(self.readings(), self.zone, with_seconds=True)

    def tooltip_text(self, sensor_type: SensorType, value: float) -> str:
        cfg = self._loader.get_sensor_config(sensor_type)
        decimals = 0 if cfg.decimals == 0 else 2
        return statistics.format_with_unit(value, cfg.unit, decimals)

    def render_chart(self, sensor_type: SensorType) -> bytes:
        readings = self.readings()
        cfg = self._loader.get_sensor_config(sensor_type)
        labels = [statistics.time_label(r.timestamp, self.zone, with_seconds=True) for r in readings]
        series = ChartSeries(
            label=f"{cfg.displayName} ({cfg.unit})",
            color=cfg.color,
            values=[r.value(sensor_type) for r in readings],
        )
        return render_line_chart(cfg.displayName, labels, [series])


realtime_feed = RealtimeFeed()
