"""Dive log data model."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scuba_log_server.interchange.record import generate_record_id
from scuba_log_server.models.base import Base, InsertedAtMixin


class Dive(Base, InsertedAtMixin):
    """One committed dive.

    Physical quantities are metric. Categorical columns hold the enum values
    of ``interchange.record``; unknown values read back as absent.
    """

    __tablename__ = "dive"
    __table_args__ = ({"comment": "Logged dives, metric units"},)

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_record_id,
    )

    # Title is a display convention, not a key; imports keep it unique by renaming
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    dive_type: Mapped[str | None] = mapped_column(String(32))

    # Timing (naive local wall-clock time)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Depth and visibility (meters)
    max_depth: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    visibility: Mapped[float | None] = mapped_column(Float)
    visibility_rating: Mapped[str | None] = mapped_column(String(32))

    # Equipment
    weight_kg: Mapped[float | None] = mapped_column(Float)
    weighting: Mapped[str | None] = mapped_column(String(32))
    tank_size_liters: Mapped[float | None] = mapped_column(Float)
    tank_material: Mapped[str | None] = mapped_column(String(32))
    gas_mixture: Mapped[str | None] = mapped_column(String(32))
    start_pressure_bar: Mapped[float | None] = mapped_column(Float)
    end_pressure_bar: Mapped[float | None] = mapped_column(Float)
    suit_type: Mapped[str | None] = mapped_column(String(32))

    # Conditions
    water_type: Mapped[str | None] = mapped_column(String(32))
    water_body: Mapped[str | None] = mapped_column(String(32))
    waves: Mapped[str | None] = mapped_column(String(32))
    current: Mapped[str | None] = mapped_column(String(32))
    surge: Mapped[str | None] = mapped_column(String(32))
    air_temp_c: Mapped[float | None] = mapped_column(Float)
    surface_temp_c: Mapped[float | None] = mapped_column(Float)
    bottom_temp_c: Mapped[float | None] = mapped_column(Float)

    # Experience
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Coordinates
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
