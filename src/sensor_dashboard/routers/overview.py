from fastapi import APIRouter

from sensor_dashboard.core.models.sensor_reading import to_iso
from sensor_dashboard.core.services.overview import overview_service
from sensor_dashboard.schemas import ChartRow, OverviewResponse, Reading, StatCard

router = APIRouter(prefix="/overview", tags=["overview"])


def build_overview() -> OverviewResponse:
    return OverviewResponse(
        demo_mode=overview_service.demo_mode,
        last_update=to_iso(overview_service.last_update) if overview_service.last_update else None,
        readings=[Reading.from_reading(r) for r in overview_service.readings],
        stats=[StatCard(**card) for card in overview_service.stat_cards()],
        averages=overview_service.averages(),
        chart=[ChartRow(**row) for row in overview_service.chart_rows()],
    )


@router.get("", response_model=OverviewResponse)
async def get_overview() -> OverviewResponse:
    """
    Latest readings with trends, averages and chart rows.
    Loads the readings on first access.
    """
    await overview_service.ensure_loaded()
    return build_overview()


@router.put("/refresh", status_code=204)
async def refresh_overview() -> None:
    """Reload the readings now instead of waiting for the refresh timer."""
    await overview_service.refresh()
