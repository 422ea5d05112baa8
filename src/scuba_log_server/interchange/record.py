"""Dive record model shared by the codecs, the merger and persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TypeVar
from uuid import uuid4

E = TypeVar("E", bound=Enum)


class DiveType(str, Enum):
    """Kind of dive."""

    SHORE = "shore"
    BOAT = "boat"
    DRIFT = "drift"
    NIGHT = "night"
    WRECK = "wreck"
    DEEP = "deep"
    TRAINING = "training"


class Weighting(str, Enum):
    """Diver's verdict on the amount of lead carried."""

    UNDERWEIGHT = "underweight"
    GOOD = "good"
    OVERWEIGHT = "overweight"


class TankMaterial(str, Enum):
    ALUMINIUM = "aluminium"
    STEEL = "steel"
    OTHER = "other"


class GasMixture(str, Enum):
    """Breathing gas categories.

    O2/He fractions for each category live in ``interchange.gas``.
    """

    AIR = "air"
    EANX32 = "eanx32"
    EANX36 = "eanx36"
    EANX40 = "eanx40"
    ENRICHED = "enriched"
    TRIMIX = "trimix"
    REBREATHER = "rebreather"


class SuitType(str, Enum):
    """Exposure suit worn on the dive.

    Stored by value, written to CSV by display label (see ``label``).
    """

    NONE = "none"
    SHORTY = "shorty"
    FULL_SUIT_3 = "fullSuit3"
    FULL_SUIT_5 = "fullSuit5"
    FULL_SUIT_7 = "fullSuit7"
    SEMI_DRY = "semiDry"
    DRY_SUIT = "drySuit"

    @property
    def label(self) -> str:
        return SUIT_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> SuitType | None:
        """Look up a suit by its display label, falling back to the raw value."""
        text = label.strip()
        for suit, suit_label in SUIT_LABELS.items():
            if suit_label == text:
                return suit
        return parse_category(cls, text)


SUIT_LABELS: dict[SuitType, str] = {
    SuitType.NONE: "None",
    SuitType.SHORTY: "Shorty",
    SuitType.FULL_SUIT_3: "Full Suit 3mm",
    SuitType.FULL_SUIT_5: "Full Suit 5mm",
    SuitType.FULL_SUIT_7: "Full Suit 7mm",
    SuitType.SEMI_DRY: "Semi Dry",
    SuitType.DRY_SUIT: "Dry Suit",
}


class WaterType(str, Enum):
    SALT = "Salt"
    FRESH = "Fresh"


class WaterBody(str, Enum):
    OCEAN = "ocean"
    LAKE = "lake"
    RIVER = "river"
    QUARRY = "quarry"
    POOL = "pool"


class Waves(str, Enum):
    CALM = "calm"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Current(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MEDIUM = "medium"
    STRONG = "strong"


class Surge(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MEDIUM = "medium"
    STRONG = "strong"


class VisibilityRating(str, Enum):
    """Qualitative visibility, independent of the measured distance."""

    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


def parse_category(enum_cls: type[E], text: str) -> E | None:
    """Map a stored label back to its enum member.

    Exact match first, then case-insensitive. Unknown or empty text is absent.
    """
    value = text.strip()
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        pass
    lowered = value.lower()
    for member in enum_cls:
        if str(member.value).lower() == lowered:
            return member
    return None


def generate_record_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid4())


def end_after(start: datetime, seconds: float) -> datetime:
    """``start`` plus a duration.

    A duration that is not a number or lands outside the calendar is treated
    as absent, so the end stays at ``start``.
    """
    try:
        return start + timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        return start


@dataclass
class DiveRecord:
    """One logged dive, metric-internal.

    Physical quantities are stored in meters, kilograms, liters, bar and
    degrees Celsius regardless of the user's display preference.
    """

    title: str
    start_date: datetime
    end_date: datetime
    max_depth: float = 0.0
    location: str = ""
    dive_type: DiveType | None = None
    visibility: float | None = None
    visibility_rating: VisibilityRating | None = None
    rating: int = 0
    weight: float | None = None
    weighting: Weighting | None = None
    tank_size: float | None = None
    tank_material: TankMaterial | None = None
    gas_mixture: GasMixture | None = None
    start_pressure: float | None = None
    end_pressure: float | None = None
    suit_type: SuitType | None = None
    water_type: WaterType | None = None
    water_body: WaterBody | None = None
    waves: Waves | None = None
    current: Current | None = None
    surge: Surge | None = None
    air_temp: float | None = None
    surface_temp: float | None = None
    bottom_temp: float | None = None
    notes: str = ""
    latitude: float | None = None
    longitude: float | None = None
    photos: list[bytes] = field(default_factory=list)
    id: str = field(default_factory=generate_record_id)

    @property
    def duration_seconds(self) -> float:
        return (self.end_date - self.start_date).total_seconds()

    @property
    def pressure_used(self) -> float | None:
        """Gas consumed in bar, when both pressures are known."""
        if self.start_pressure is None or self.end_pressure is None:
            return None
        return self.start_pressure - self.end_pressure


def check_record(record: DiveRecord) -> list[str]:
    """Return integrity issues for a record without changing it.

    Out-of-range values are reported so a person can fix them; they are never
    swapped, clipped or dropped here.
    """
    issues: list[str] = []
    if (
        record.start_pressure is not None
        and record.end_pressure is not None
        and record.end_pressure > record.start_pressure
    ):
        issues.append(
            f"end pressure {record.end_pressure:g} bar is above "
            f"start pressure {record.start_pressure:g} bar"
        )
    if record.max_depth < 0:
        issues.append(f"max depth {record.max_depth:g} m is negative")
    if record.visibility is not None and not 0 <= record.visibility <= 100:
        issues.append(f"visibility {record.visibility:g} is outside 0-100")
    if not 0 <= record.rating <= 5:
        issues.append(f"rating {record.rating} is outside 0-5")
    if record.end_date < record.start_date:
        issues.append("end date is before start date")
    return issues


@dataclass
class ParsedBatch:
    """Records decoded from one import file, in file order."""

    records: list[DiveRecord]
    warnings: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)
