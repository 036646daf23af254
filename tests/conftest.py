"""Pytest configuration and fixtures for test suite."""
import os

# Run every test in demo mode unless a test builds its own backend client
for _name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "VITE_SUPABASE_URL", "VITE_SUPABASE_ANON_KEY"):
    os.environ[_name] = ""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from sensor_dashboard.core.backend.client import BackendClient
from sensor_dashboard.core.models.connection_state import ConnectionState
from sensor_dashboard.core.models.sensor_reading import SensorReading
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.services.calibration import calibration_service
from sensor_dashboard.core.services.datalog import datalog_service
from sensor_dashboard.core.services.overview import overview_service
from sensor_dashboard.core.services.realtime import realtime_feed

BASE_TIME = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def make_reading(
    index: int = 0,
    temperature: float = 25.0,
    humidity: float = 50.0,
    pressure: float = 1013.0,
    light: float = 500.0,
    at: datetime = None,
) -> SensorReading:
    at = at or BASE_TIME + timedelta(minutes=index)
    return SensorReading(
        id=f"reading-{index}",
        timestamp=at,
        temperature=temperature,
        humidity=humidity,
        pressure=pressure,
        light=light,
        created_at=at,
    )


def reading_row(index: int = 0, **values) -> dict:
    return make_reading(index, **values).to_row()


def reset_realtime_feed(feed) -> None:
    """Drop all readings so the next access seeds the window again."""
    feed.window.clear()
    feed.seeded = False
    feed.is_live = True
    feed.connection_state = ConnectionState.CONNECTING


@pytest.fixture(autouse=True)
def reset_views():
    """Each test starts from unloaded views with default calibration values."""
    calibration_service.reset_all()
    calibration_service.select(SensorType.TEMPERATURE)
    calibration_service.last_error = None
    reset_realtime_feed(realtime_feed)
    datalog_service.loaded = False
    overview_service.loaded = False

    yield

    reset_realtime_feed(realtime_feed)
    calibration_service.reset_all()


@pytest.fixture
def backend_factory():
    """Build a configured client whose HTTP traffic goes to `handler`."""
    def factory(handler) -> BackendClient:
        return BackendClient("https://example.supabase.co", "anon-key", transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def failing_backend(backend_factory):
    """A configured client whose every request fails with HTTP 500."""
    return backend_factory(lambda request: httpx.Response(500, text="internal error"))
