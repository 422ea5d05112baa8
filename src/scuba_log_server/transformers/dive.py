"""Dive record transformer.

Converts interchange ``DiveRecord`` objects to database-ready dictionaries and
``Dive`` rows back to records.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from scuba_log_server.interchange.record import (
    Current,
    DiveRecord,
    DiveType,
    GasMixture,
    Surge,
    SuitType,
    TankMaterial,
    VisibilityRating,
    WaterBody,
    WaterType,
    Waves,
    Weighting,
    parse_category,
)

if TYPE_CHECKING:
    from scuba_log_server.models.dive import Dive


def _value(member: Enum | None) -> str | None:
    return None if member is None else str(member.value)


class DiveTransformer:
    """Transform DiveRecord <-> Database Dive.

    Record Fields -> Database Fields:
    - weight -> weight_kg
    - tank_size -> tank_size_liters
    - start_pressure / end_pressure -> start_pressure_bar / end_pressure_bar
    - air_temp / surface_temp / bottom_temp -> *_temp_c
    - enum members -> their string values
    - photos -> not stored (handled outside the dive table)
    """

    @staticmethod
    def transform(record: DiveRecord) -> dict[str, Any]:
        """Convert a record to a database-ready dict.

        Args:
            record: Record from a codec or a caller

        Returns:
            Dict ready for database insertion with all fields mapped correctly
        """
        return {
            "id": record.id,
            "title": record.title,
            "location": record.location,
            "dive_type": _value(record.dive_type),
            "start_date": record.start_date,
            "end_date": record.end_date,
            "max_depth": record.max_depth,
            "visibility": record.visibility,
            "visibility_rating": _value(record.visibility_rating),
            "weight_kg": record.weight,
            "weighting": _value(record.weighting),
            "tank_size_liters": record.tank_size,
            "tank_material": _value(record.tank_material),
            "gas_mixture": _value(record.gas_mixture),
            "start_pressure_bar": record.start_pressure,
            "end_pressure_bar": record.end_pressure,
            "suit_type": _value(record.suit_type),
            "water_type": _value(record.water_type),
            "water_body": _value(record.water_body),
            "waves": _value(record.waves),
            "current": _value(record.current),
            "surge": _value(record.surge),
            "air_temp_c": record.air_temp,
            "surface_temp_c": record.surface_temp,
            "bottom_temp_c": record.bottom_temp,
            "rating": record.rating,
            "notes": record.notes,
            "latitude": record.latitude,
            "longitude": record.longitude,
        }

    @staticmethod
    def to_record(dive: Dive) -> DiveRecord:
        """Convert a stored dive back to a record."""
        return DiveRecord(
            id=dive.id,
            title=dive.title,
            location=dive.location,
            dive_type=parse_category(DiveType, dive.dive_type or ""),
            start_date=dive.start_date,
            end_date=dive.end_date,
            max_depth=dive.max_depth,
            visibility=dive.visibility,
            visibility_rating=parse_category(VisibilityRating, dive.visibility_rating or ""),
            weight=dive.weight_kg,
            weighting=parse_category(Weighting, dive.weighting or ""),
            tank_size=dive.tank_size_liters,
            tank_material=parse_category(TankMaterial, dive.tank_material or ""),
            gas_mixture=parse_category(GasMixture, dive.gas_mixture or ""),
            start_pressure=dive.start_pressure_bar,
            end_pressure=dive.end_pressure_bar,
            suit_type=parse_category(SuitType, dive.suit_type or ""),
            water_type=parse_category(WaterType, dive.water_type or ""),
            water_body=parse_category(WaterBody, dive.water_body or ""),
            waves=parse_category(Waves, dive.waves or ""),
            current=parse_category(Current, dive.current or ""),
            surge=parse_category(Surge, dive.surge or ""),
            air_temp=dive.air_temp_c,
            surface_temp=dive.surface_temp_c,
            bottom_temp=dive.bottom_temp_c,
            rating=dive.rating,
            notes=dive.notes,
            latitude=dive.latitude,
            longitude=dive.longitude,
        )
