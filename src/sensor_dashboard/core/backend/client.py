"""
Hosted backend client.

Thin wrapper over the PostgREST API of the hosted store. Two tables are used:
`sensor_data` (readings) and `calibration_settings` (one row per sensor type).
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from sensor_dashboard.core.models.calibration import CalibrationSetting
from sensor_dashboard.core.models.sensor_reading import SensorReading
from sensor_dashboard.core.settings import Settings, settings

logger = logging.getLogger(__name__)

SENSOR_TABLE = "sensor_data"
CALIBRATION_TABLE = "calibration_settings"

READING_FIELDS = ("id", "timestamp", "temperature", "humidity", "pressure", "light", "created_at")
CALIBRATION_FIELDS = ("sensor_type", "offset", "scale", "min_value", "max_value", "unit", "updated_at")


def cursor_text(instant: datetime) -> str:
    """UTC instant with microseconds, matching the precision of `timestamptz` columns."""
    return instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class BackendError(Exception):
    """Raised when the hosted backend cannot serve a request."""


class BackendNotConfiguredError(BackendError):
    """Raised when the client is used without a URL and key (demo mode)."""


class BackendClient:
    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = url.rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackendClient":
        return cls(settings.supabase_url, settings.supabase_anon_key, timeout=settings.request_timeout)

    @property
    def configured(self) -> bool:
        return bool(self._base_url and self._anon_key)

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._anon_key}",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        if not self.configured:
            raise BackendNotConfiguredError("Backend URL and anonymous key are not configured")

        try:
            async with httpx.AsyncClient(
                base_url=f"{self._base_url}/rest/v1",
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    method, f"/{table}", params=params, json=payload, headers=self._headers(prefer)
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"{method} {table} failed with HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {table} failed: {e}") from e

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(f"{method} {table} returned invalid JSON") from e

    @staticmethod
    def _parse_rows(rows: Any, model, fields) -> list:
        if not isinstance(rows, list):
            raise BackendError(f"Expected a list of rows, got {type(rows).__name__}")
        parsed = []
        for row in rows:
            if not isinstance(row, dict):
                raise BackendError(f"Expected a row object, got {type(row).__name__}")
            try:
                parsed.append(model(**{k: row[k] for k in fields if k in row}))
            except (ValidationError, TypeError) as e:
                raise BackendError(f"Malformed row: {e}") from e
        return parsed

    async def fetch_readings(self, limit: int, ascending: bool = False) -> List[SensorReading]:
        """Readings ordered by timestamp, `limit` rows from the chosen end."""
        rows = await self._request(
            "GET",
            SENSOR_TABLE,
            params={
                "select": "*",
                "order": f"timestamp.{'asc' if ascending else 'desc'}",
                "limit": str(limit),
            },
        )
        return self._parse_rows(rows, SensorReading, READING_FIELDS)

    async def fetch_readings_since(self, created_after: Optional[datetime], limit: int = 100) -> List[SensorReading]:
        """Readings inserted after `created_after`, oldest first."""
        params = {"select": "*", "order": "created_at.asc", "limit": str(limit)}
        if created_after is not None:
            params["created_at"] = f"gt.{cursor_text(created_after)}"
        rows = await self._request("GET", SENSOR_TABLE, params=params)
        return self._parse_rows(rows, SensorReading, READING_FIELDS)

    async def insert_reading(self, reading: SensorReading) -> SensorReading:
        rows = await self._request(
            "POST", SENSOR_TABLE, payload=reading.to_insert(), prefer="return=representation"
        )
        inserted = self._parse_rows(rows, SensorReading, READING_FIELDS)
        if not inserted:
            raise BackendError("Insert returned no row")
        return inserted[0]

    async def fetch_calibration(self) -> List[CalibrationSetting]:
        rows = await self._request("GET", CALIBRATION_TABLE, params={"select": "*"})
        return self._parse_rows(rows, CalibrationSetting, CALIBRATION_FIELDS)

    async def upsert_calibration(self, setting: CalibrationSetting) -> None:
        """Insert or update the row keyed by `sensor_type`."""
        await self._request(
            "POST",
            CALIBRATION_TABLE,
            params={"on_conflict": "sensor_type"},
            payload=setting.to_upsert(),
            prefer="resolution=merge-duplicates,return=minimal",
        )
        logger.info(f"Calibration for {setting.sensor_type.value} saved")


# Global instance
backend_client = BackendClient.from_settings(settings)
