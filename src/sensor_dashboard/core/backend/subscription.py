import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sensor_dashboard.core.backend.client import BackendClient, BackendError
from sensor_dashboard.core.event_hub import SENSOR_DATA_INSERT, SUBSCRIPTION_STATUS, EventHub, event_hub
from sensor_dashboard.core.models.connection_state import SubscriptionStatus

logger = logging.getLogger(__name__)

StatusCallback = Callable[[SubscriptionStatus], None]


class InsertSubscription:
    """
    Change stream of inserts on `sensor_data`.

    Polls for rows created after the newest one seen and publishes each new
    row on the event hub. The handle must be released with `close()`.
    """

    def __init__(
        self,
        client: BackendClient,
        poll_seconds: float,
        on_status: Optional[StatusCallback] = None,
        hub: EventHub = event_hub,
        since: Optional[datetime] = None,
        batch_size: int = 100,
    ):
        self._client = client
        self._poll_seconds = poll_seconds
        self._on_status = on_status
        self._hub = hub
        self._batch_size = batch_size
        # Only inserts from the moment of subscribing are delivered
        self.last_created_at: datetime = since or datetime.now(timezone.utc)
        self.status: Optional[SubscriptionStatus] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self._closed:
            raise RuntimeError("Subscription already closed")
        if self.active:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name="sensor_data_insert_subscription")
        logger.info("Insert subscription on sensor_data started")

    async def close(self):
        """Release the subscription. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self._set_status(SubscriptionStatus.CLOSED)
        logger.info("Insert subscription on sensor_data released")

    def _set_status(self, status: SubscriptionStatus):
        if status == self.status:
            return
        self.status = status
        self._hub.send_all_on_topic(SUBSCRIPTION_STATUS, status)
        if self._on_status:
            try:
                self._on_status(status)
            except Exception as e:
                logger.error(f"Subscription status callback failed: {e}")

    async def poll_once(self) -> int:
        """Fetch and publish new rows. Returns how many were delivered."""
        try:
            rows = await self._client.fetch_readings_since(self.last_created_at, limit=self._batch_size)
        except BackendError as e:
            if self.status != SubscriptionStatus.CHANNEL_ERROR:
                logger.warning(f"Insert subscription poll failed: {e}")
            self._set_status(SubscriptionStatus.CHANNEL_ERROR)
            return 0

        self._set_status(SubscriptionStatus.SUBSCRIBED)
        cursor = self.last_created_at
        delivered = 0
        for reading in rows:
            # Rows at or before the cursor were already delivered
            if reading.created_at <= cursor:
                continue
            self.last_created_at = max(self.last_created_at, reading.created_at)
            self._hub.send_all_on_topic(SENSOR_DATA_INSERT, reading)
            delivered += 1
        return delivered

    async def _run(self):
        while not self._closed:
            await self.poll_once()
            await asyncio.sleep(self._poll_seconds)
