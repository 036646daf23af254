import asyncio
import logging

from sensor_dashboard.core.event_hub import init_event_hub
from sensor_dashboard.core.services.calibration import calibration_service
from sensor_dashboard.core.services.datalog import datalog_service
from sensor_dashboard.core.services.overview import overview_service
from sensor_dashboard.core.services.realtime import realtime_feed

logger = logging.getLogger(__name__)


class ServiceManager:

    def __init__(self):
        self.running = False

    async def start_services(self):
        """Start the refresh timers and live streams of every view."""
        if self.running:
            return
        logger.info("Starting background services...")
        init_event_hub(asyncio.get_running_loop())

        await calibration_service.load()
        await datalog_service.ensure_loaded()

        # Overview refreshes itself on its own timer
        overview_service.start()
        await realtime_feed.start()

        self.running = True
        logger.info("Background services started.")

    async def stop_services(self):
        """Cancel every timer and release the subscription."""
        overview_service.stop()
        await realtime_feed.stop()
        self.running = False
        logger.info("Background services stopped.")


service_manager = ServiceManager()
