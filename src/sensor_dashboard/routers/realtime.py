from fastapi import APIRouter

from sensor_dashboard.core.services.realtime import realtime_feed
from sensor_dashboard.schemas import ChartRow, CurrentValue, Reading, RealtimeResponse

router = APIRouter(prefix="/realtime", tags=["realtime"])


def build_realtime() -> RealtimeResponse:
    latest = realtime_feed.latest
    return RealtimeResponse(
        demo_mode=realtime_feed.demo_mode,
        live=realtime_feed.is_live,
        connection_status=realtime_feed.connection_state.value,
        status_text=realtime_feed.status_text,
        count=realtime_feed.window.size(),
        capacity=realtime_feed.window.capacity,
        latest=Reading.from_reading(latest) if latest else None,
        current=[CurrentValue(**value) for value in realtime_feed.current_values()],
        readings=[Reading.from_reading(r) for r in realtime_feed.readings()],
        chart=[ChartRow(**row) for row in realtime_feed.chart_rows()],
    )


@router.get("", response_model=RealtimeResponse)
async def get_realtime() -> RealtimeResponse:
    """
    Current window of live readings, oldest first.
    """
    await realtime_feed.ensure_seeded()
    return build_realtime()


@router.put("/live", status_code=204)
async def resume_realtime() -> None:
    """Resume the live feed: restart the timer (demo) or the subscription."""
    await realtime_feed.set_live(True)


@router.put("/pause", status_code=204)
async def pause_realtime() -> None:
    """Pause the live feed: cancel the timer and release the subscription."""
    await realtime_feed.set_live(False)
