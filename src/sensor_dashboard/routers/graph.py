import base64
import io

from fastapi import APIRouter, HTTPException, Path
from fastapi.responses import StreamingResponse

from sensor_dashboard.core.services.overview import OVERVIEW_CHARTS, overview_service
from sensor_dashboard.core.services.realtime import realtime_feed
from sensor_dashboard.routers.dependencies import VALID_SENSOR_VALUES, parse_sensor_type
from sensor_dashboard.schemas import GraphBase64

router = APIRouter(prefix="/graph", tags=["graph"])

VALID_OVERVIEW_CHARTS = ", ".join(OVERVIEW_CHARTS)

OVERVIEW_ERRORS = {
    400: {
        "description": "Invalid chart name provided.",
        "content": {
            "application/json": {
                "example": {"detail": f"chart must be one of: {VALID_OVERVIEW_CHARTS}"}
            }
        }
    }
}

REALTIME_ERRORS = {
    400: {
        "description": "Invalid sensor provided.",
        "content": {
            "application/json": {
                "example": {"detail": f"Invalid sensor: INVALID. Valid values are: {VALID_SENSOR_VALUES}"}
            }
        }
    }
}


async def _overview_png(chart: str) -> bytes:
    if chart not in OVERVIEW_CHARTS:
        raise HTTPException(status_code=400, detail=f"chart must be one of: {VALID_OVERVIEW_CHARTS}")
    await overview_service.ensure_loaded()
    return overview_service.render_chart(chart)


async def _realtime_png(sensor: str) -> bytes:
    sensor_type = parse_sensor_type(sensor)
    await realtime_feed.ensure_seeded()
    return realtime_feed.render_chart(sensor_type)


def _png_response(png_data: bytes, name: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(png_data),
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=graph_{name}.png"}
    )


def _base64(png_data: bytes) -> GraphBase64:
    return GraphBase64(data=f"data:image/png;base64,{base64.b64encode(png_data).decode('utf-8')}")


@router.get("/overview/{chart}", response_class=StreamingResponse, responses=OVERVIEW_ERRORS)
async def get_overview_graph(chart: str = Path(..., description="Chart name: climate or atmosphere")):
    """
    Overview chart as PNG image.

    - **climate**: temperature (left axis) and humidity (right axis)
    - **atmosphere**: pressure (left axis) and light (right axis)
    """
    return _png_response(await _overview_png(chart), chart)


@router.get("/overview/{chart}/base64", response_model=GraphBase64, responses=OVERVIEW_ERRORS)
async def get_overview_graph_base64(chart: str = Path(..., description="Chart name: climate or atmosphere")):
    """
    Overview chart as base64-encoded PNG.
    Returns: {"data": "data:image/png;base64,..."}
    """
    return _base64(await _overview_png(chart))


@router.get("/realtime/{sensor}", response_class=StreamingResponse, responses=REALTIME_ERRORS)
async def get_realtime_graph(sensor: str = Path(..., description="Sensor: temperature, humidity, pressure or light")):
    """
    Live feed chart of one sensor as PNG image.
    """
    return _png_response(await _realtime_png(sensor), f"realtime_{sensor}")


@router.get("/realtime/{sensor}/base64", response_model=GraphBase64, responses=REALTIME_ERRORS)
async def get_realtime_graph_base64(sensor: str = Path(..., description="Sensor: temperature, humidity, pressure or light")):
    """
    Live feed chart of one sensor as base64-encoded PNG.
    Useful for embedding in frontend applications.
    """
    return _base64(await _realtime_png(sensor))
