from fastapi import HTTPException

from sensor_dashboard.core.models.sensor_type import SensorType
from sensor_dashboard.core.services.datalog import LogQuery

VALID_SENSOR_VALUES = ", ".join(s.value for s in SensorType)


def parse_sensor_type(sensor: str) -> SensorType:
    try:
        return SensorType(sensor)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Invalid sensor: {sensor}. Valid values are: {VALID_SENSOR_VALUES}"
        )


def parse_log_query(
    search: str = "",
    date: str = "",
    sort: str = "timestamp",
    order: str = "desc",
    page: int = 1,
) -> LogQuery:
    try:
        return LogQuery(search=search, date=date, sort_field=sort, sort_order=order, page=page)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
