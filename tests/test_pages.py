"""Tests for the server-rendered dashboard pages."""
from fastapi.testclient import TestClient

from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.services.calibration import calibration_service
from sensor_dashboard.main import app

client = TestClient(app)


def test_home_page():
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Dashboard" in response.text
    assert "Demo mode" in response.text
    assert "/api/graph/overview/climate" in response.text


def test_navigation_on_every_page():
    for path in ("/", "/realtime", "/calibration", "/datalog", "/about"):
        text = client.get(path).text
        for label in ("Home", "Realtime Data", "Calibration", "Data Log", "About"):
            assert label in text, f"{label} missing on {path}"


def test_realtime_pause_and_resume():
    assert "Pause" in client.get("/realtime").text

    response = client.post("/realtime", data={"action": "pause"})

    assert response.status_code == 200
    assert "Resume" in response.text
    assert "Resume" not in client.post("/realtime", data={"action": "live"}).text


def test_realtime_invalid_action():
    assert client.post("/realtime", data={"action": "stop"}, follow_redirects=False).status_code == 400


def test_calibration_select_sensor():
    response = client.get("/calibration", params={"sensor": "pressure"})

    assert response.status_code == 200
    assert "300 hPa - 1100 hPa" in response.text


def test_calibration_update_and_save():
    response = client.post("/calibration", data={
        "action": "save", "sensor": "humidity", "offset": "2.5", "scale": "1", "min_value": "0", "max_value": "100",
    }, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/calibration?sensor=humidity"
    assert calibration_service.values[SensorType.HUMIDITY].offset == 2.5
    assert "Calibration settings saved." in client.get(response.headers["location"]).text


def test_calibration_reset_all():
    client.post("/calibration", data={"action": "update", "sensor": "light", "offset": "7"})

    client.post("/calibration", data={"action": "reset_all", "sensor": "light"})

    assert calibration_service.values[SensorType.LIGHT].offset == 0


def test_calibration_invalid_action():
    response = client.post("/calibration", data={"action": "explode"}, follow_redirects=False)
    assert response.status_code == 400


def test_datalog_page():
    response = client.get("/datalog")

    assert response.status_code == 200
    assert "Showing 1 - 10 of 100 rows" in response.text
    assert "/datalog/export?" in response.text


def test_datalog_sort_links_toggle_order():
    text = client.get("/datalog", params={"sort": "light", "order": "desc"}).text
    assert "sort=light&amp;order=asc" in text


def test_datalog_invalid_sort():
    assert client.get("/datalog", params={"order": "sideways"}).status_code == 400


def test_datalog_export():
    response = client.get("/datalog/export", params={"sort": "light", "order": "asc"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")


def test_about_page():
    text = client.get("/about").text

    assert "CREATE TABLE sensor_data" in text
    assert "CREATE TABLE calibration_settings" in text
    assert "-40 ~ 85" in text
    assert "0 ~ 10000" in text


def test_static_stylesheet():
    assert client.get("/static/style.css").status_code == 200
