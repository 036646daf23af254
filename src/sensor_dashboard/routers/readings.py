import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from sensor_dashboard.core.backend.client import BackendError, backend_client
from sensor_dashboard.core.event_hub import SENSOR_DATA_INSERT, event_hub
from sensor_dashboard.core.models.sensor_reading import SensorReading
from sensor_dashboard.schemas import Reading, ReadingIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/readings", tags=["readings"])


@router.post("", status_code=201, response_model=Reading, responses={
    502: {
        "description": "The hosted backend rejected the insert.",
        "content": {
            "application/json": {
                "example": {"detail": "POST sensor_data failed with HTTP 401: Invalid API key"}
            }
        }
    }
})
async def insert_reading(payload: ReadingIn) -> Reading:
    """
    Record a reading.

    With a configured backend the row is inserted into `sensor_data` and reaches
    the live feed through its subscription. In demo mode the reading is handed
    to the live feed directly.
    """
    now = datetime.now(timezone.utc)
    reading = SensorReading(
        id=str(uuid.uuid4()),
        timestamp=payload.timestamp or now,
        temperature=payload.temperature,
        humidity=payload.humidity,
        pressure=payload.pressure,
        light=payload.light,
        created_at=now,
    )
    if not backend_client.configured:
        event_hub.send_all_on_topic(SENSOR_DATA_INSERT, reading)
        return Reading.from_reading(reading)

    try:
        inserted = await backend_client.insert_reading(reading)
    except BackendError as e:
        logger.error(f"Error inserting reading: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return Reading.from_reading(inserted)
