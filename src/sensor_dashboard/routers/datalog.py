from fastapi import APIRouter, Depends
from fastapi.responses import Response

from sensor_dashboard.core.services.datalog import LogQuery, datalog_service, export_filename
from sensor_dashboard.routers.dependencies import parse_log_query
from sensor_dashboard.schemas import DataLogResponse, DataLogSummary, Reading

router = APIRouter(prefix="/datalog", tags=["datalog"])

INVALID_QUERY_RESPONSE = {
    400: {
        "description": "Invalid sort field or order.",
        "content": {
            "application/json": {
                "example": {"detail": "Invalid sort field: id. Valid values are: timestamp, temperature, humidity, pressure, light"}
            }
        }
    }
}


@router.get("", response_model=DataLogResponse, responses=INVALID_QUERY_RESPONSE)
async def get_datalog(query: LogQuery = Depends(parse_log_query)) -> DataLogResponse:
    """
    One page of the data log.

    - **search**: keeps rows where any sensor value contains the text
    - **date**: keeps rows whose ISO timestamp starts with the text (e.g. `2024-05-01`)
    - **sort** / **order**: column and direction (default newest first)
    - **page**: 1-based page number, 10 rows per page
    """
    await datalog_service.ensure_loaded()
    page = datalog_service.page(query)
    return DataLogResponse(
        demo_mode=datalog_service.demo_mode,
        rows=[Reading.from_reading(r) for r in page.rows],
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        page_numbers=page.page_numbers,
        filtered_count=page.filtered_count,
        total_count=page.total_count,
        showing_from=page.showing_from,
        showing_to=page.showing_to,
        showing_text=page.showing_text,
        sort_field=query.sort_field,
        sort_order=query.sort_order,
    )


@router.put("/refresh", status_code=204)
async def refresh_datalog() -> None:
    """Reload the data log."""
    await datalog_service.refresh()


@router.get("/summary", response_model=DataLogSummary, responses=INVALID_QUERY_RESPONSE)
async def get_datalog_summary(query: LogQuery = Depends(parse_log_query)) -> DataLogSummary:
    """Total rows, rows from today, filtered rows and the covered date range."""
    await datalog_service.ensure_loaded()
    return DataLogSummary(**datalog_service.summary(query))


@router.get("/export", response_class=Response, responses=INVALID_QUERY_RESPONSE)
async def export_datalog(query: LogQuery = Depends(parse_log_query)) -> Response:
    """
    Download the filtered, sorted rows (all pages) as CSV.
    """
    await datalog_service.ensure_loaded()
    return csv_response(datalog_service.export_csv(query))


def csv_response(content: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename=\"{export_filename()}\""},
    )
