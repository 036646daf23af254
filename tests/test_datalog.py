"""Tests for data log filtering, sorting, paging and export."""
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from sensor_dashboard.core.backend.client import BackendClient
from sensor_dashboard.core.services.datalog import (
    CSV_HEADER,
    DataLogService,
    LogQuery,
    export_filename,
    filter_and_sort,
    page_numbers,
    paginate,
    to_csv,
    toggle_sort,
)
from conftest import BASE_TIME, make_reading, reading_row


def two_days():
    day_one = [make_reading(i, temperature=20.0 + i) for i in range(3)]
    day_two = [make_reading(10 + i, at=BASE_TIME + timedelta(days=1, minutes=i)) for i in range(2)]
    return day_one + day_two


class TestFiltering:

    def test_date_prefix(self):
        rows = filter_and_sort(two_days(), LogQuery(date="2024-05-02"))

        assert len(rows) == 2
        assert all(r.timestamp_iso.startswith("2024-05-02") for r in rows)

    def test_search_matches_any_value(self):
        readings = [make_reading(0, pressure=1013.25), make_reading(1, pressure=1009.0)]

        rows = filter_and_sort(readings, LogQuery(search="1013"))

        assert [r.id for r in rows] == ["reading-0"]

    def test_search_and_date_combined(self):
        rows = filter_and_sort(two_days(), LogQuery(search="21", date="2024-05-01"))

        assert [r.id for r in rows] == ["reading-1"]

    def test_default_sort_is_newest_first(self):
        rows = filter_and_sort(two_days(), LogQuery())

        assert rows[0].id == "reading-11"
        assert rows[-1].id == "reading-0"

    def test_sort_by_value_ascending(self):
        rows = filter_and_sort(two_days()[:3], LogQuery(sort_field="temperature", sort_order="asc"))

        assert [r.temperature for r in rows] == [20.0, 21.0, 22.0]

    def test_invalid_query(self):
        with pytest.raises(ValueError):
            LogQuery(sort_field="id")
        with pytest.raises(ValueError):
            LogQuery(sort_order="up")


class TestSortToggle:

    def test_same_column_flips_order(self):
        query = toggle_sort(LogQuery(), "timestamp")
        assert (query.sort_field, query.sort_order) == ("timestamp", "asc")
        query = toggle_sort(query, "timestamp")
        assert query.sort_order == "desc"

    def test_new_column_sorts_descending(self):
        query = toggle_sort(LogQuery(sort_field="timestamp", sort_order="asc"), "light")
        assert (query.sort_field, query.sort_order) == ("light", "desc")


class TestPagination:

    @pytest.mark.parametrize("count, pages", [(0, 0), (1, 1), (10, 1), (11, 2), (23, 3), (100, 10)])
    def test_page_count(self, count, pages):
        rows = [make_reading(i) for i in range(count)]
        assert paginate(rows, 1, 10, count).total_pages == pages

    def test_last_page(self):
        rows = [make_reading(i) for i in range(23)]

        page = paginate(rows, 3, 10, 23)

        assert len(page.rows) == 3
        assert page.showing_text == "Showing 21 - 23 of 23 rows"

    def test_empty(self):
        page = paginate([], 1, 10, 100)

        assert page.rows == []
        assert page.page_numbers == []
        assert page.showing_text == "Showing 0 - 0 of 0 rows"

    @pytest.mark.parametrize("current, total, expected", [
        (1, 10, [1, 2, 3, 4, 5]),
        (3, 10, [1, 2, 3, 4, 5]),
        (5, 10, [3, 4, 5, 6, 7]),
        (9, 10, [6, 7, 8, 9, 10]),
        (10, 10, [6, 7, 8, 9, 10]),
        (2, 3, [1, 2, 3]),
    ])
    def test_page_numbers(self, current, total, expected):
        assert page_numbers(current, total) == expected


class TestExport:

    def test_csv(self):
        content = to_csv([make_reading(0, temperature=25.456, light=512)])

        lines = content.split("\n")
        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1] == "2024-05-01T10:00:00.000Z,25.46,50.00,1013.00,512.00"
        assert not content.endswith("\n")

    def test_csv_without_rows(self):
        assert to_csv([]) == ",".join(CSV_HEADER)

    def test_filename(self):
        assert export_filename(BASE_TIME) == "sensor_data_2024-05-01.csv"


class TestDataLogService:

    @pytest.mark.asyncio
    async def test_demo_log(self):
        service = DataLogService(BackendClient("", ""), tz="UTC")

        readings = await service.refresh()

        assert len(readings) == 100
        assert readings[0].timestamp > readings[1].timestamp
        assert readings[0].timestamp - readings[1].timestamp == timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_connected_log(self, backend_factory):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=[reading_row(1), reading_row(0)])

        service = DataLogService(backend_factory(handler), tz="UTC")
        await service.refresh()

        assert requests[0].url.params["limit"] == "500"
        assert requests[0].url.params["order"] == "timestamp.desc"
        assert service.page(LogQuery()).total_count == 2

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_generated_data(self, failing_backend):
        service = DataLogService(failing_backend, tz="UTC")

        readings = await service.refresh()

        assert len(readings) == 24

    def test_summary(self):
        service = DataLogService(BackendClient("", ""), tz="UTC")
        service.readings = two_days()

        summary = service.summary(LogQuery(date="2024-05-01"), now=datetime(2024, 5, 2, 12, tzinfo=timezone.utc))

        assert summary == {
            "total": 5,
            "today": 2,
            "filtered": 3,
            "date_range": "01/05/2024 - 02/05/2024",
        }

    def test_summary_empty(self):
        service = DataLogService(BackendClient("", ""), tz="UTC")

        assert service.summary(LogQuery())["date_range"] == "-"
