"""Tests for the calibration form service."""
import json

import httpx
import pytest

from sensor_dashboard.core.backend.client import BackendClient
from sensor_dashboard.core.event_hub import CALIBRATION_SAVED, EventHub
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.services.calibration import CalibrationService, parse_form_number


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def demo_service(**kwargs) -> CalibrationService:
    return CalibrationService(BackendClient("", ""), hub=EventHub(), **kwargs)


@pytest.mark.parametrize("raw, expected", [
    ("0.5", 0.5),
    ("-3", -3.0),
    (".25", 0.25),
    ("1e3", 1000.0),
    ("12.5abc", 12.5),
    ("  7 ", 7.0),
    ("abc", 0.0),
    ("", 0.0),
    ("Infinity", 0.0),
    ("NaN", 0.0),
    ("1e999", 0.0),
    (None, 0.0),
    (2.5, 2.5),
    (float("nan"), 0.0),
])
def test_parse_form_number(raw, expected):
    assert parse_form_number(raw) == expected


def test_defaults():
    service = demo_service()

    assert service.values[SensorType.TEMPERATURE].min_value == -40
    assert service.values[SensorType.LIGHT].max_value == 10000
    assert all(value.scale == 1 and value.offset == 0 for value in service.values.values())


def test_change_field():
    service = demo_service()

    assert service.change(SensorType.HUMIDITY, "offset", "2.5") == 2.5
    assert service.change(SensorType.HUMIDITY, "scale", "oops") == 0.0

    assert service.values[SensorType.HUMIDITY].offset == 2.5
    assert service.values[SensorType.HUMIDITY].scale == 0.0
    assert service.values[SensorType.TEMPERATURE].offset == 0


def test_change_unknown_field():
    with pytest.raises(ValueError):
        demo_service().change(SensorType.HUMIDITY, "gain", "2")


def test_reset_one_sensor():
    service = demo_service()
    service.change(SensorType.PRESSURE, "offset", "3")
    service.change(SensorType.LIGHT, "offset", "4")

    service.reset(SensorType.PRESSURE)

    assert service.values[SensorType.PRESSURE].offset == 0
    assert service.values[SensorType.LIGHT].offset == 4


def test_reset_all():
    service = demo_service()
    service.change(SensorType.PRESSURE, "offset", "3")
    service.change(SensorType.LIGHT, "max_value", "5")

    service.reset_all()

    assert service.values[SensorType.PRESSURE].offset == 0
    assert service.values[SensorType.LIGHT].max_value == 10000


def test_formula_always_matches_values():
    service = demo_service()
    service.change(SensorType.TEMPERATURE, "scale", "1.02")
    service.change(SensorType.TEMPERATURE, "offset", "-0.5")

    view = service.view(SensorType.TEMPERATURE)

    assert view["formula"] == "calibrated = raw × 1.02 + -0.5"
    assert view["example_raw"] == "25.0"
    assert view["example_process"] == "× 1.02 + -0.5"
    assert view["example_calibrated"] == "25.00"
    assert view["range"] == "-40 °C - 85 °C"


@pytest.mark.asyncio
async def test_demo_save_writes_nothing_and_shows_notice():
    clock = FakeClock()
    hub = EventHub()
    published = []
    hub.subscribe(CALIBRATION_SAVED, lambda topic, values: published.append(values))
    service = CalibrationService(BackendClient("", ""), hub=hub, clock=clock)

    assert await service.save()

    assert service.saved
    assert not service.saving
    assert len(published) == 1
    clock.now += 3.5
    assert not service.saved


@pytest.mark.asyncio
async def test_editing_clears_saved_notice():
    service = demo_service(clock=FakeClock())
    await service.save()

    service.change(SensorType.LIGHT, "offset", "1")

    assert not service.saved


@pytest.mark.asyncio
async def test_save_upserts_every_sensor(backend_factory):
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201)

    service = CalibrationService(backend_factory(handler), hub=EventHub())
    service.change(SensorType.HUMIDITY, "offset", "1.5")

    assert await service.save()

    assert [body["sensor_type"] for body in bodies] == ["temperature", "humidity", "pressure", "light"]
    assert bodies[1]["offset"] == 1.5
    assert bodies[1]["unit"] == "%"


@pytest.mark.asyncio
async def test_save_failure_is_reported(failing_backend):
    service = CalibrationService(failing_backend, hub=EventHub(), clock=FakeClock())

    assert not await service.save()

    assert not service.saved
    assert not service.saving
    assert "HTTP 500" in service.last_error


@pytest.mark.asyncio
async def test_load_stored_settings(backend_factory):
    rows = [{"sensor_type": "pressure", "offset": -1.5, "scale": 1.01, "min_value": 300, "max_value": 1100,
             "unit": "hPa"}]
    service = CalibrationService(backend_factory(lambda request: httpx.Response(200, json=rows)), hub=EventHub())

    assert await service.load()

    assert service.values[SensorType.PRESSURE].offset == -1.5
    assert service.values[SensorType.TEMPERATURE].offset == 0


@pytest.mark.asyncio
async def test_load_in_demo_mode_keeps_defaults():
    service = demo_service()

    assert not await service.load()
    assert service.values[SensorType.PRESSURE].min_value == 300


@pytest.mark.asyncio
async def test_load_failure_keeps_defaults(failing_backend):
    service = CalibrationService(failing_backend, hub=EventHub())

    assert not await service.load()
    assert service.values[SensorType.HUMIDITY].max_value == 100
