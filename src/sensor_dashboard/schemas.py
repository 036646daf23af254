from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel

from sensor_dashboard.core.models.sensor_reading import SensorReading


class AppHealthOK(BaseModel):
    status: str
    app: str
    demo_mode: bool


class Reading(BaseModel):
    id: str
    timestamp: str
    temperature: float
    humidity: float
    pressure: float
    light: float
    created_at: str

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "Reading":
        return cls(**reading.to_row())


class ReadingIn(BaseModel):
    timestamp: Optional[datetime] = None
    temperature: float
    humidity: float
    pressure: float
    light: float


class ChartRow(BaseModel):
    index: int
    time: str
    temperature: float
    humidity: float
    pressure: float
    light: float


class StatCard(BaseModel):
    sensor: str
    title: str
    value: float
    display_value: str
    unit: str
    color: str
    trend: str
    trend_arrow: str
    trend_value: str


class OverviewResponse(BaseModel):
    demo_mode: bool
    last_update: Optional[str]
    readings: List[Reading]
    stats: List[StatCard]
    averages: Dict[str, Optional[float]]
    chart: List[ChartRow]


class CurrentValue(BaseModel):
    sensor: str
    title: str
    value: float
    display_value: str
    unit: str
    color: str


class RealtimeResponse(BaseModel):
    demo_mode: bool
    live: bool
    connection_status: str
    status_text: str
    count: int
    capacity: int
    latest: Optional[Reading]
    current: List[CurrentValue]
    readings: List[Reading]
    chart: List[ChartRow]


class CalibrationSensorView(BaseModel):
    sensor: str
    name: str
    description: str
    unit: str
    offset: float
    scale: float
    min_value: float
    max_value: float
    formula: str
    example_raw: str
    example_process: str
    example_calibrated: str
    range: str


class CalibrationResponse(BaseModel):
    demo_mode: bool
    active: str
    saved: bool
    saving: bool
    sensors: List[CalibrationSensorView]


class CalibrationSaveResponse(BaseModel):
    saved: bool
    demo_mode: bool


# Field name -> raw text or number, parsed like form input
CalibrationChange = Dict[str, Union[float, str]]


class DataLogResponse(BaseModel):
    demo_mode: bool
    rows: List[Reading]
    page: int
    page_size: int
    total_pages: int
    page_numbers: List[int]
    filtered_count: int
    total_count: int
    showing_from: int
    showing_to: int
    showing_text: str
    sort_field: str
    sort_order: str


class DataLogSummary(BaseModel):
    total: int
    today: int
    filtered: int
    date_range: str


class GraphBase64(BaseModel):
    data: str
