"""Dive list endpoints."""

from typing import Any

from litestar import Router, get
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from scuba_log_server.interchange.record import DiveRecord
from scuba_log_server.services.repository import SqlDiveRepository


def serialize_record(record: DiveRecord) -> dict[str, Any]:
    """JSON-friendly view of a record (metric units, enum values)."""
    return {
        "id": record.id,
        "title": record.title,
        "location": record.location,
        "dive_type": record.dive_type.value if record.dive_type else None,
        "start_date": record.start_date.isoformat(),
        "end_date": record.end_date.isoformat(),
        "duration_minutes": round(record.duration_seconds / 60, 1),
        "max_depth_m": record.max_depth,
        "visibility_m": record.visibility,
        "rating": record.rating,
        "gas_mixture": record.gas_mixture.value if record.gas_mixture else None,
        "start_pressure_bar": record.start_pressure,
        "end_pressure_bar": record.end_pressure,
        "pressure_used_bar": record.pressure_used,
        "air_temp_c": record.air_temp,
        "bottom_temp_c": record.bottom_temp,
        "latitude": record.latitude,
        "longitude": record.longitude,
        "notes": record.notes,
    }


@get("/dives", status_code=HTTP_200_OK)
async def list_dives(session: AsyncSession) -> list[dict[str, Any]]:
    """List all dives, most recent first."""
    records = await SqlDiveRepository(session).list_all()
    return [serialize_record(r) for r in records]


dives_router = Router(path="/", route_handlers=[list_dives])
