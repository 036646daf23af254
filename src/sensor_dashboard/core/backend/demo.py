"""
Synthetic readings for demo mode.

Used whenever the backend is not configured, and as placeholder data when a
backend request fails.
"""
import math
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sensor_dashboard.core.models.sensor_reading import SensorReading


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _reading(at: datetime, temperature: float, humidity: float, pressure: float, light: float) -> SensorReading:
    return SensorReading(
        id=str(uuid.uuid4()),
        timestamp=at,
        temperature=temperature,
        humidity=humidity,
        pressure=pressure,
        light=light,
        created_at=at,
    )


def generate_demo_data(now: Optional[datetime] = None, hours: int = 24) -> List[SensorReading]:
    """One reading per hour over the last `hours` hours, oldest first."""
    now = now or _now()
    data = []
    for i in range(hours - 1, -1, -1):
        data.append(_reading(
            now - timedelta(hours=i),
            temperature=22 + random.random() * 8 + math.sin(i / 4) * 3,
            humidity=45 + random.random() * 20 + math.cos(i / 4) * 5,
            pressure=1010 + random.random() * 10 + math.sin(i / 6) * 5,
            light=max(0.0, 500 + math.sin((i - 6) / 4) * 400 + random.random() * 100),
        ))
    return data


def generate_log_data(now: Optional[datetime] = None, count: int = 100) -> List[SensorReading]:
    """A longer history for the data log: every 15 minutes, newest first."""
    now = now or _now()
    data = []
    for i in range(count):
        data.append(_reading(
            now - timedelta(minutes=15 * i),
            temperature=22 + random.random() * 8 + math.sin(i / 10) * 3,
            humidity=45 + random.random() * 20 + math.cos(i / 10) * 5,
            pressure=1010 + random.random() * 10 + math.sin(i / 15) * 5,
            light=max(0.0, 500 + math.sin((i - 20) / 10) * 400 + random.random() * 100),
        ))
    return data


def generate_realtime_reading(now: Optional[datetime] = None) -> SensorReading:
    return _reading(
        now or _now(),
        temperature=22 + random.random() * 8,
        humidity=45 + random.random() * 20,
        pressure=1010 + random.random() * 10,
        light=300 + random.random() * 400,
    )
