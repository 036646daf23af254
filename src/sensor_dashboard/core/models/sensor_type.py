"""Sensor type enumeration for type-safe sensor references."""
from enum import Enum


class SensorType(str, Enum):
    """Enumeration of all sensor channels carried by a reading."""
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    LIGHT = "light"
