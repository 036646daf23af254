from fastapi import APIRouter, Body, HTTPException

from sensor_dashboard.core.services.calibration import CALIBRATION_FIELDS, calibration_service
from sensor_dashboard.routers.dependencies import parse_sensor_type
from sensor_dashboard.schemas import (
    CalibrationChange,
    CalibrationResponse,
    CalibrationSaveResponse,
    CalibrationSensorView,
)

router = APIRouter(prefix="/calibration", tags=["calibration"])


def build_calibration() -> CalibrationResponse:
    return CalibrationResponse(
        demo_mode=calibration_service.demo_mode,
        active=calibration_service.active.value,
        saved=calibration_service.saved,
        saving=calibration_service.saving,
        sensors=[CalibrationSensorView(**view) for view in calibration_service.views()],
    )


@router.get("", response_model=CalibrationResponse)
async def get_calibration() -> CalibrationResponse:
    """
    Current form values for every sensor, with formula, worked example and valid range.
    """
    return build_calibration()


@router.put("/reset", status_code=204)
async def reset_all_calibration() -> None:
    """Restore the default values of every sensor."""
    calibration_service.reset_all()


@router.post("/save", response_model=CalibrationSaveResponse)
async def save_calibration() -> CalibrationSaveResponse:
    """
    Upsert the values of every sensor into `calibration_settings`.
    In demo mode nothing is written. A backend failure is logged and reported as `saved: false`.
    """
    saved = await calibration_service.save()
    return CalibrationSaveResponse(saved=saved, demo_mode=calibration_service.demo_mode)


@router.put("/{sensor}", response_model=CalibrationSensorView, responses={
    400: {
        "description": "Invalid sensor or field name.",
        "content": {
            "application/json": {
                "example": {"detail": "Unknown calibration field: gain"}
            }
        }
    }
})
async def change_calibration(sensor: str, change: CalibrationChange = Body(...)) -> CalibrationSensorView:
    """
    Change one or more fields of a sensor's calibration.

    Values are read like form input: `"12.5abc"` gives 12.5, unparseable text gives 0.

    Request body:
    ```json
    {"offset": "0.5", "scale": 1.02}
    ```
    """
    sensor_type = parse_sensor_type(sensor)
    unknown = [field for field in change if field not in CALIBRATION_FIELDS]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown calibration field: {', '.join(unknown)}")
    calibration_service.select(sensor_type)
    for field, raw in change.items():
        calibration_service.change(sensor_type, field, raw)
    return CalibrationSensorView(**calibration_service.view(sensor_type))


@router.put("/{sensor}/reset", response_model=CalibrationSensorView)
async def reset_calibration(sensor: str) -> CalibrationSensorView:
    """Restore the default values of one sensor."""
    sensor_type = parse_sensor_type(sensor)
    calibration_service.reset(sensor_type)
    return CalibrationSensorView(**calibration_service.view(sensor_type))
