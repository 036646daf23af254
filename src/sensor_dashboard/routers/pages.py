"""
Server-rendered dashboard pages. Each page reads the same view services as
the JSON API; form posts redirect back to their page (303).
"""
from dataclasses import asdict, replace
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from sensor_dashboard.core.config_loader import config_loader
from sensor_dashboard.core.models.sensor_reading import to_iso
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.services.calibration import CALIBRATION_FIELDS, calibration_service
from sensor_dashboard.core.services.datalog import SORT_FIELDS, LogQuery, datalog_service, toggle_sort
from sensor_dashboard.core.services.overview import CHART_TITLES, overview_service
from sensor_dashboard.core.services.realtime import realtime_feed
from sensor_dashboard.core.settings import settings
from sensor_dashboard.routers.datalog import csv_response
from sensor_dashboard.routers.dependencies import parse_log_query, parse_sensor_type

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(include_in_schema=False)

NAV_ITEMS = [
    ("/", "Home"),
    ("/realtime", "Realtime Data"),
    ("/calibration", "Calibration"),
    ("/datalog", "Data Log"),
    ("/about", "About"),
]

FEATURES = [
    ("Realtime monitoring", "Watch sensor readings arrive live, refreshed every couple of seconds."),
    ("Data storage", "Readings and calibration settings are kept in the hosted Supabase backend."),
    ("Demo mode", "Without backend credentials every view runs on generated data."),
    ("Data export", "Download any filtered view of the data log as CSV."),
]

SENSOR_DATA_SQL = """CREATE TABLE sensor_data (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  timestamp TIMESTAMPTZ NOT NULL,
  temperature DOUBLE PRECISION NOT NULL,
  humidity DOUBLE PRECISION NOT NULL,
  pressure DOUBLE PRECISION NOT NULL,
  light DOUBLE PRECISION NOT NULL,
  created_at TIMESTAMPTZ DEFAULT NOW()
);"""

CALIBRATION_SETTINGS_SQL = """CREATE TABLE calibration_settings (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  sensor_type TEXT NOT NULL UNIQUE,
  "offset" DOUBLE PRECISION DEFAULT 0,
  scale DOUBLE PRECISION DEFAULT 1,
  min_value DOUBLE PRECISION,
  max_value DOUBLE PRECISION,
  unit TEXT,
  updated_at TIMESTAMPTZ DEFAULT NOW()
);"""

ENVIRONMENT_EXAMPLE = """SUPABASE_URL=your-supabase-url
SUPABASE_ANON_KEY=your-anon-key"""

CALIBRATION_ACTIONS = ("select", "update", "reset", "reset_all", "save")


def render(request: Request, name: str, context: dict) -> HTMLResponse:
    context = {
        "app_name": settings.app_name,
        "nav_items": NAV_ITEMS,
        "current_path": request.url.path,
        **context,
    }
    return templates.TemplateResponse(request, name, context)


def datalog_url(query: LogQuery, path: str = "/datalog") -> str:
    params = {k: v for k, v in asdict(query).items() if v not in ("", None)}
    params["sort"] = params.pop("sort_field")
    params["order"] = params.pop("sort_order")
    return f"{path}?{urlencode(params)}"


def datalog_columns() -> List[Tuple[str, str]]:
    columns = [("timestamp", "Timestamp")]
    for sensor_type, cfg in config_loader.get_all_sensors().items():
        columns.append((sensor_type.value, f"{cfg.displayName} ({cfg.unit})"))
    return columns


@router.get("/", response_class=HTMLResponse)
async def home_page(request: Request):
    await overview_service.ensure_loaded()
    last_update = overview_service.last_update
    return render(request, "home.html", {
        "demo_mode": overview_service.demo_mode,
        "cards": overview_service.stat_cards(),
        "averages": overview_service.average_texts(),
        "sensors": config_loader.get_all_sensors(),
        "charts": CHART_TITLES,
        "readings": list(reversed(overview_service.readings)),
        "last_update": to_iso(last_update) if last_update else "-",
        "refresh_seconds": overview_service.refresh_seconds,
    })


@router.get("/realtime", response_class=HTMLResponse)
async def realtime_page(request: Request):
    await realtime_feed.ensure_seeded()
    return render(request, "realtime.html", {
        "demo_mode": realtime_feed.demo_mode,
        "live": realtime_feed.is_live,
        "status": realtime_feed.connection_state.value,
        "status_text": realtime_feed.status_text,
        "current": realtime_feed.current_values(),
        "count": realtime_feed.window.size(),
        "capacity": realtime_feed.window.capacity,
        "readings": list(reversed(realtime_feed.readings())),
        "sensors": list(SensorType),
        "refresh_seconds": realtime_feed.interval_seconds,
    })


@router.post("/realtime")
async def realtime_action(action: str = Form(...)):
    if action not in ("live", "pause"):
        raise HTTPException(status_code=400, detail="action must be one of: live, pause")
    await realtime_feed.set_live(action == "live")
    return RedirectResponse("/realtime", status_code=303)


@router.get("/calibration", response_class=HTMLResponse)
async def calibration_page(request: Request, sensor: Optional[str] = None):
    if sensor is not None:
        calibration_service.select(parse_sensor_type(sensor))
    return render(request, "calibration.html", {
        "demo_mode": calibration_service.demo_mode,
        "active": calibration_service.active.value,
        "sensors": calibration_service.views(),
        "current": calibration_service.view(calibration_service.active),
        "saved": calibration_service.saved,
        "error": calibration_service.last_error,
        "fields": CALIBRATION_FIELDS,
    })


@router.post("/calibration")
async def calibration_action(
    action: str = Form(...),
    sensor: str = Form("temperature"),
    offset: Optional[str] = Form(None),
    scale: Optional[str] = Form(None),
    min_value: Optional[str] = Form(None),
    max_value: Optional[str] = Form(None),
):
    if action not in CALIBRATION_ACTIONS:
        raise HTTPException(status_code=400, detail=f"action must be one of: {', '.join(CALIBRATION_ACTIONS)}")
    sensor_type = parse_sensor_type(sensor)
    calibration_service.select(sensor_type)

    submitted = {"offset": offset, "scale": scale, "min_value": min_value, "max_value": max_value}
    if action in ("update", "save"):
        for field, raw in submitted.items():
            if raw is not None:
                calibration_service.change(sensor_type, field, raw)

    if action == "reset":
        calibration_service.reset(sensor_type)
    elif action == "reset_all":
        calibration_service.reset_all()
    elif action == "save":
        await calibration_service.save()

    return RedirectResponse(f"/calibration?sensor={sensor_type.value}", status_code=303)


@router.get("/datalog", response_class=HTMLResponse)
async def datalog_page(request: Request, query: LogQuery = Depends(parse_log_query)):
    await datalog_service.ensure_loaded()
    page = datalog_service.page(query)
    sort_links = {field: datalog_url(replace(toggle_sort(query, field), page=1)) for field in SORT_FIELDS}
    page_links = {n: datalog_url(replace(query, page=n)) for n in page.page_numbers}
    return render(request, "datalog.html", {
        "demo_mode": datalog_service.demo_mode,
        "query": query,
        "page": page,
        "summary": datalog_service.summary(query),
        "sort_links": sort_links,
        "page_links": page_links,
        "prev_link": datalog_url(replace(query, page=page.page - 1)) if page.page > 1 else None,
        "next_link": datalog_url(replace(query, page=page.page + 1)) if page.page < page.total_pages else None,
        "export_link": datalog_url(replace(query, page=1), path="/datalog/export"),
        "columns": datalog_columns(),
    })


@router.post("/datalog/refresh")
async def datalog_refresh():
    await datalog_service.refresh()
    return RedirectResponse("/datalog", status_code=303)


@router.get("/datalog/export")
async def datalog_export(query: LogQuery = Depends(parse_log_query)) -> Response:
    await datalog_service.ensure_loaded()
    return csv_response(datalog_service.export_csv(query))


@router.get("/about", response_class=HTMLResponse)
async def about_page(request: Request):
    sensors = []
    for sensor_type, cfg in config_loader.get_all_sensors().items():
        calibration = cfg.calibration
        sensors.append({
            "name": cfg.displayName,
            "unit": cfg.unit,
            "color": cfg.color,
            "range": f"{calibration.min_value:g} ~ {calibration.max_value:g}",
        })
    return render(request, "about.html", {
        "demo_mode": settings.demo_mode,
        "features": FEATURES,
        "sensors": sensors,
        "sensor_data_sql": SENSOR_DATA_SQL,
        "calibration_settings_sql": CALIBRATION_SETTINGS_SQL,
        "environment_example": ENVIRONMENT_EXAMPLE,
    })
