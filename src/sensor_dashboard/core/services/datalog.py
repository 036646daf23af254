"""
Data log: a few hundred readings held in memory, filtered, sorted and paged
on request, with CSV export of the filtered rows.
"""
import csv
import io
import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional

from sensor_dashboard.core.backend.client import BackendClient, BackendError, backend_client
from sensor_dashboard.core.backend.demo import generate_demo_data, generate_log_data
from sensor_dashboard.core.config_loader import ConfigLoader, config_loader
from sensor_dashboard.core.models.sensor_reading import SensorReading, number_text
from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.processing import statistics
from sensor_dashboard.core.settings import settings

logger = logging.getLogger(__name__)

SORT_FIELDS = ("timestamp", "temperature", "humidity", "pressure", "light")
SORT_ORDERS = ("asc", "desc")

# Page buttons shown at once
PAGE_WINDOW = 5

CSV_HEADER = ["Timestamp", "Temperature (°C)", "Humidity (%)", "Pressure (hPa)", "Light (lux)"]


@dataclass(frozen=True)
class LogQuery:
    search: str = ""
    date: str = ""
    sort_field: str = "timestamp"
    sort_order: str = "desc"
    page: int = 1

    def __post_init__(self):
        if self.sort_field not in SORT_FIELDS:
            raise ValueError(f"Invalid sort field: {self.sort_field}. Valid values are: {', '.join(SORT_FIELDS)}")
        if self.sort_order not in SORT_ORDERS:
            raise ValueError(f"Invalid sort order: {self.sort_order}. Valid values are: asc, desc")


@dataclass
class LogPage:
    rows: List[SensorReading]
    page: int
    page_size: int
    total_pages: int
    page_numbers: List[int]
    filtered_count: int
    total_count: int
    showing_from: int
    showing_to: int

    @property
    def showing_text(self) -> str:
        return f"Showing {self.showing_from} - {self.showing_to} of {self.filtered_count} rows"


def toggle_sort(query: LogQuery, field: str) -> LogQuery:
    """Clicking the current column flips the order; another column sorts it descending."""
    if field == query.sort_field:
        return replace(query, sort_order="asc" if query.sort_order == "desc" else "desc")
    return replace(query, sort_field=field, sort_order="desc")


def matches(reading: SensorReading, query: LogQuery) -> bool:
    matches_search = query.search == "" or any(
        query.search in number_text(reading.value(sensor_type)) for sensor_type in SensorType
    )
    matches_date = query.date == "" or reading.timestamp_iso.startswith(query.date)
    return matches_search and matches_date


def filter_and_sort(readings: List[SensorReading], query: LogQuery) -> List[SensorReading]:
    rows = [r for r in readings if matches(r, query)]
    if query.sort_field == "timestamp":
        key = lambda r: r.timestamp  # noqa: E731
    else:
        sensor_type = SensorType(query.sort_field)
        key = lambda r: r.value(sensor_type)  # noqa: E731
    return sorted(rows, key=key, reverse=query.sort_order == "desc")


def page_numbers(current: int, total_pages: int, window: int = PAGE_WINDOW) -> List[int]:
    """Up to `window` page numbers around the current page."""
    count = min(window, total_pages)
    half = window // 2
    if total_pages <= window or current <= half + 1:
        start = 1
    elif current >= total_pages - half:
        start = total_pages - window + 1
    else:
        start = current - half
    return list(range(start, start + count))


def paginate(rows: List[SensorReading], page: int, page_size: int, total_count: int) -> LogPage:
    filtered_count = len(rows)
    total_pages = math.ceil(filtered_count / page_size)
    page = max(1, page)
    start = (page - 1) * page_size
    page_rows = rows[start:start + page_size]
    return LogPage(
        rows=page_rows,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        page_numbers=page_numbers(page, total_pages),
        filtered_count=filtered_count,
        total_count=total_count,
        showing_from=start + 1 if page_rows else 0,
        showing_to=min(page * page_size, filtered_count) if page_rows else 0,
    )


def to_csv(rows: List[SensorReading]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow([
            row.timestamp_iso,
            f"{row.temperature:.2f}",
            f"{row.humidity:.2f}",
            f"{row.pressure:.2f}",
            f"{row.light:.2f}",
        ])
    # No trailing newline after the last row
    return buf.getvalue().rstrip("\n")


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"sensor_data_{now.astimezone(timezone.utc).date().isoformat()}.csv"


class DataLogService:
    def __init__(
        self,
        client: BackendClient = backend_client,
        loader: ConfigLoader = config_loader,
        tz: Optional[str] = None,
    ):
        self._client = client
        self._loader = loader
        self.zone = statistics.get_zone(tz or settings.tz)
        self.readings: List[SensorReading] = []
        self.loaded = False
        self.last_update: Optional[datetime] = None

    @property
    def demo_mode(self) -> bool:
        return not self._client.configured

    @property
    def page_size(self) -> int:
        return self._loader.log_page_size

    async def refresh(self) -> List[SensorReading]:
        """Reload the log, newest first. Backend failures fall back to generated data."""
        try:
            if self.demo_mode:
                self.readings = generate_log_data()
            else:
                self.readings = await self._client.fetch_readings(self._loader.log_rows, ascending=False)
        except BackendError as e:
            logger.error(f"Error fetching data log: {e}")
            self.readings = generate_demo_data()
        self.last_update = datetime.now(timezone.utc)
        self.loaded = True
        return self.readings

    async def ensure_loaded(self):
        if not self.loaded:
            await self.refresh()

    def filtered(self, query: LogQuery) -> List[SensorReading]:
        return filter_and_sort(self.readings, query)

    def page(self, query: LogQuery) -> LogPage:
        return paginate(self.filtered(query), query.page, self.page_size, len(self.readings))

    def export_csv(self, query: LogQuery) -> str:
        return to_csv(self.filtered(query))

    def summary(self, query: LogQuery, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        today = now.astimezone(self.zone).date()
        today_count = sum(1 for r in self.readings if r.timestamp.astimezone(self.zone).date() == today)
        if self.readings:
            oldest = min(r.timestamp for r in self.readings).astimezone(self.zone)
            newest = max(r.timestamp for r in self.readings).astimezone(self.zone)
            date_range = f"{oldest:%d/%m/%Y} - {newest:%d/%m/%Y}"
        else:
            date_range = "-"
        return {
            "total": len(self.readings),
            "today": today_count,
            "filtered": len(self.filtered(query)),
            "date_range": date_range,
        }


datalog_service = DataLogService()
