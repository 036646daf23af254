import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Topics
SENSOR_DATA_INSERT = "sensor_data_insert"
SUBSCRIPTION_STATUS = "subscription_status"
CALIBRATION_SAVED = "calibration_saved"

Handler = Callable[[str, Any], Any]


class EventHub:
    """Topic based publish/subscribe between backend streams and views."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def init(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def subscribe(self, topic: str, handler: Handler):
        handlers = self._subscribers.setdefault(topic, [])
        if handler not in handlers:
            handlers.append(handler)
        logger.debug(f"Subscribed to {topic}")

    def send_all_on_topic(self, topic: str, message: Any):
        for handler in list(self._subscribers.get(topic, [])):
            try:
                self._dispatch(handler, topic, message)
            except Exception as e:
                logger.error(f"Error handling message on topic {topic}: {e}")

    def _dispatch(self, handler: Handler, topic: str, message: Any):
        is_async = inspect.iscoroutinefunction(handler)
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is not None:
            # Publisher runs inside a loop
            if is_async:
                current_loop.create_task(handler(topic, message))
            else:
                handler(topic, message)
        elif self._loop is not None:
            # Publisher runs in another thread
            if is_async:
                asyncio.run_coroutine_threadsafe(handler(topic, message), self._loop)
            else:
                self._loop.call_soon_threadsafe(handler, topic, message)
        elif is_async:
            logger.warning(f"EventHub loop not initialized. Cannot dispatch async handler for {topic}")
        else:
            handler(topic, message)


# Global instance
event_hub = EventHub()


def init_event_hub(loop):
    """Initialize the global event hub with the given loop."""
    event_hub.init(loop)
