"""CSV codec for dive records.

Column order is fixed and versioned by column count:

- ``CsvLayout.CURRENT`` (30 columns): date, bottom time and clock times are
  split into separate columns and a visibility rating column is present.
- ``CsvLayout.LEGACY`` (27 columns): combined ``yyyy-MM-dd HH:mm`` start and
  end columns, no visibility rating.

Headers carry unit suffixes, and the importer reads units back from those
suffixes rather than from any user setting, so a file is self-describing.
"""

from __future__ import annotations

import csv
import io
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum

import structlog

from scuba_log_server.interchange import units
from scuba_log_server.interchange.csv_grammar import parse_rows
from scuba_log_server.interchange.errors import (
    DateFormatError,
    EmptyInputError,
    RowShapeError,
    SchemaMismatchError,
)
from scuba_log_server.interchange.record import (
    Current,
    DiveRecord,
    DiveType,
    GasMixture,
    ParsedBatch,
    Surge,
    SuitType,
    TankMaterial,
    VisibilityRating,
    WaterBody,
    WaterType,
    Waves,
    Weighting,
    end_after,
    parse_category,
)
from scuba_log_server.interchange.units import UnitSystem

logger = structlog.get_logger()

DATE_FORMAT = "%Y-%m-%d"
CLOCK_FORMAT = "%H:%M"
LEGACY_DATETIME_FORMAT = "%Y-%m-%d %H:%M"
MIDNIGHT = time(0, 0)
SECONDS_PER_DAY = 86_400
INTEGER_LIMIT = 2**31 - 1


class CsvLayout(int, Enum):
    """Known column layouts, keyed by their column count."""

    CURRENT = 30
    LEGACY = 27


SUPPORTED_COLUMN_COUNTS = tuple(layout.value for layout in CsvLayout)


@dataclass(frozen=True)
class UnitLabels:
    depth: str
    weight: str
    pressure: str
    temperature: str
    tank: str


UNIT_LABELS = {
    UnitSystem.METRIC: UnitLabels(depth="m", weight="kg", pressure="Bar", temperature="°C", tank="L"),
    UnitSystem.IMPERIAL: UnitLabels(
        depth="ft", weight="lb", pressure="PSI", temperature="°F", tank="cu ft"
    ),
}


def headers_for(units_system: UnitSystem, layout: CsvLayout = CsvLayout.CURRENT) -> list[str]:
    """Build the header row for a layout in the given unit system."""
    u = UNIT_LABELS[units_system]
    equipment = [
        f"Weight ({u.weight})",
        "Weighting",
        f"Tank Size ({u.tank})",
        "Tank Material",
        "Gas Mixture",
        f"Start Pressure ({u.pressure})",
        f"End Pressure ({u.pressure})",
        "Suit Type",
        "Water Type",
        "Water Body",
        "Waves",
        "Current",
        "Surge",
        f"Air Temp ({u.temperature})",
        f"Surface Temp ({u.temperature})",
        f"Bottom Temp ({u.temperature})",
        "Notes",
        "Latitude",
        "Longitude",
    ]
    if layout is CsvLayout.LEGACY:
        # Legacy files always wrote visibility in meters.
        return [
            "Title",
            "Location",
            "Dive Type",
            "Start Date",
            "End Date",
            f"Max Depth ({u.depth})",
            "Visibility (m)",
            "Rating",
            *equipment,
        ]
    return [
        "Title",
        "Location",
        "Dive Type",
        "Date",
        "Bottom Time (min)",
        "Start Time",
        "End Time",
        f"Max Depth ({u.depth})",
        f"Visibility ({u.depth})",
        "Visibility Rating",
        "Rating",
        *equipment,
    ]


# Column positions of the unit-bearing and date columns per layout.
_COLUMNS: dict[CsvLayout, dict[str, int]] = {
    CsvLayout.CURRENT: {
        "depth": 7,
        "visibility": 8,
        "weight": 11,
        "tank": 13,
        "start_pressure": 16,
        "end_pressure": 17,
        "air_temp": 24,
        "surface_temp": 25,
        "bottom_temp": 26,
    },
    CsvLayout.LEGACY: {
        "depth": 5,
        "visibility": 6,
        "weight": 8,
        "tank": 10,
        "start_pressure": 13,
        "end_pressure": 14,
        "air_temp": 21,
        "surface_temp": 22,
        "bottom_temp": 23,
    },
}


@dataclass(frozen=True)
class ColumnUnits:
    """Which unit-bearing columns of a file hold imperial values."""

    depth_imperial: bool = False
    visibility_imperial: bool = False
    weight_imperial: bool = False
    tank_imperial: bool = False
    pressure_imperial: bool = False
    temperature_imperial: bool = False

    @classmethod
    def for_system(cls, units_system: UnitSystem) -> ColumnUnits:
        imperial = units_system is UnitSystem.IMPERIAL
        return cls(imperial, imperial, imperial, imperial, imperial, imperial)

    @classmethod
    def from_header(cls, header: list[str], layout: CsvLayout) -> ColumnUnits:
        """Read units from the header text of each unit-bearing column."""
        cols = _COLUMNS[layout]
        return cls(
            depth_imperial="ft" in header[cols["depth"]],
            visibility_imperial="ft" in header[cols["visibility"]],
            weight_imperial="lb" in header[cols["weight"]].lower(),
            tank_imperial="cu ft" in header[cols["tank"]].lower(),
            pressure_imperial="psi" in header[cols["start_pressure"]].lower(),
            temperature_imperial=_is_fahrenheit(header[cols["air_temp"]]),
        )

    # Outbound conversions: metric storage -> file units.

    def depth_out(self, meters: float | None) -> float | None:
        return _convert(meters, units.meters_to_feet, self.depth_imperial)

    def visibility_out(self, meters: float | None) -> float | None:
        return _convert(meters, units.meters_to_feet, self.visibility_imperial)

    def weight_out(self, kg: float | None) -> float | None:
        return _convert(kg, units.kg_to_lb, self.weight_imperial)

    def tank_out(self, liters: float | None) -> float | None:
        return _convert(liters, units.liters_to_cubic_feet, self.tank_imperial)

    def pressure_out(self, bar: float | None) -> float | None:
        return _convert(bar, units.bar_to_psi, self.pressure_imperial)

    def temperature_out(self, celsius: float | None) -> float | None:
        return _convert(celsius, units.celsius_to_fahrenheit, self.temperature_imperial)

    # Inbound conversions: file units -> metric storage.

    def depth_in(self, value: float | None) -> float | None:
        return _convert(value, units.feet_to_meters, self.depth_imperial)

    def visibility_in(self, value: float | None) -> float | None:
        return _convert(value, units.feet_to_meters, self.visibility_imperial)

    def weight_in(self, value: float | None) -> float | None:
        return _convert(value, units.lb_to_kg, self.weight_imperial)

    def tank_in(self, value: float | None) -> float | None:
        return _convert(value, units.cubic_feet_to_liters, self.tank_imperial)

    def pressure_in(self, value: float | None) -> float | None:
        return _convert(value, units.psi_to_bar, self.pressure_imperial)

    def temperature_in(self, value: float | None) -> float | None:
        return _convert(value, units.fahrenheit_to_celsius, self.temperature_imperial)


def _is_fahrenheit(header: str) -> bool:
    return "°F" in header or header.rstrip().endswith("F)")


def _convert(
    value: float | None, conversion: Callable[[float], float], apply: bool
) -> float | None:
    if value is None or not apply:
        return value
    return conversion(value)


# Field rendering


def format_decimal(value: float | None) -> str:
    """One decimal place; absent values are an empty field."""
    if value is None:
        return ""
    return f"{value:.1f}"


def format_coordinate(value: float | None) -> str:
    return "" if value is None else repr(float(value))


def format_clock(moment: datetime) -> str:
    """``HH:MM``, or empty when the time is exactly midnight."""
    if moment.time() == MIDNIGHT:
        return ""
    return moment.strftime(CLOCK_FORMAT)


def bottom_time_minutes(record: DiveRecord) -> int:
    minutes = record.duration_seconds / 60
    return int(math.copysign(math.floor(abs(minutes) + 0.5), minutes))


def _category(value: Enum | None) -> str:
    return "" if value is None else str(value.value)


# Field parsing


def parse_decimal(text: str) -> float | None:
    """Parse an optional number; anything unparseable is absent."""
    value = text.strip()
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_integer(text: str) -> int | None:
    number = parse_decimal(text)
    if number is None or abs(number) > INTEGER_LIMIT:
        return None
    return int(round(number))


def parse_clock(text: str) -> time | None:
    value = text.strip()
    if not value:
        return None
    for fmt in (CLOCK_FORMAT, "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    return None


class CsvCodec:
    """Encode records to CSV text and decode CSV text back into records.

    Args:
        clock: Source of "now" for rows without a date.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(
        self,
        records: Iterable[DiveRecord],
        units_system: UnitSystem = UnitSystem.METRIC,
        layout: CsvLayout = CsvLayout.CURRENT,
    ) -> str:
        """Render records, in the order given, under a unit-suffixed header."""
        column_units = ColumnUnits.for_system(units_system)
        encode = self._encode_current if layout is CsvLayout.CURRENT else self._encode_legacy

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(headers_for(units_system, layout))
        count = 0
        for record in records:
            writer.writerow(encode(record, column_units))
            count += 1

        logger.debug("Exported CSV", records=count, units=units_system.value, columns=layout.value)
        return output.getvalue()

    def _encode_current(self, record: DiveRecord, u: ColumnUnits) -> list[str]:
        return [
            record.title,
            record.location,
            _category(record.dive_type),
            record.start_date.strftime(DATE_FORMAT),
            str(bottom_time_minutes(record)),
            format_clock(record.start_date),
            format_clock(record.end_date),
            format_decimal(u.depth_out(record.max_depth)),
            format_decimal(u.visibility_out(record.visibility)),
            _category(record.visibility_rating),
            str(record.rating),
            *self._encode_equipment(record, u),
        ]

    def _encode_legacy(self, record: DiveRecord, u: ColumnUnits) -> list[str]:
        return [
            record.title,
            record.location,
            _category(record.dive_type),
            record.start_date.strftime(LEGACY_DATETIME_FORMAT),
            record.end_date.strftime(LEGACY_DATETIME_FORMAT),
            format_decimal(u.depth_out(record.max_depth)),
            format_decimal(record.visibility),
            str(record.rating),
            *self._encode_equipment(record, u),
        ]

    @staticmethod
    def _encode_equipment(record: DiveRecord, u: ColumnUnits) -> list[str]:
        """Columns shared verbatim by both layouts, weight through longitude."""
        return [
            format_decimal(u.weight_out(record.weight)),
            _category(record.weighting),
            format_decimal(u.tank_out(record.tank_size)),
            _category(record.tank_material),
            _category(record.gas_mixture),
            format_decimal(u.pressure_out(record.start_pressure)),
            format_decimal(u.pressure_out(record.end_pressure)),
            record.suit_type.label if record.suit_type else "",
            _category(record.water_type),
            _category(record.water_body),
            _category(record.waves),
            _category(record.current),
            _category(record.surge),
            format_decimal(u.temperature_out(record.air_temp)),
            format_decimal(u.temperature_out(record.surface_temp)),
            format_decimal(u.temperature_out(record.bottom_temp)),
            record.notes,
            format_coordinate(record.latitude),
            format_coordinate(record.longitude),
        ]

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def parse(self, text: str) -> ParsedBatch:
        """Decode CSV text into records.

        The whole file is validated before anything is returned: a bad header,
        a row of the wrong width or an unreadable date aborts the import.

        Raises:
            EmptyInputError: No data rows follow the header
            SchemaMismatchError: Header width matches no known layout
            RowShapeError: A data row differs from the header width
            DateFormatError: A non-empty date column cannot be parsed
        """
        rows = parse_rows(text)
        data_rows = [
            (index + 1, fields)
            for index, fields in enumerate(rows[1:], start=1)
            if not _is_blank(fields)
        ]
        if not rows or not data_rows:
            raise EmptyInputError()

        header = rows[0]
        try:
            layout = CsvLayout(len(header))
        except ValueError:
            raise SchemaMismatchError(SUPPORTED_COLUMN_COUNTS, len(header)) from None

        column_units = ColumnUnits.from_header(header, layout)
        decode = self._decode_current if layout is CsvLayout.CURRENT else self._decode_legacy

        records = []
        for row_number, fields in data_rows:
            if len(fields) != layout.value:
                raise RowShapeError(row_number, layout.value, len(fields))
            records.append(decode(fields, row_number, column_units))

        logger.info(
            "Parsed CSV",
            records=len(records),
            columns=layout.value,
            imperial_depth=column_units.depth_imperial,
        )
        return ParsedBatch(records=records)

    def _decode_current(self, fields: list[str], row: int, u: ColumnUnits) -> DiveRecord:
        day = self._parse_date(fields[3], row)
        start_clock = parse_clock(fields[5]) or MIDNIGHT
        start = datetime.combine(day, start_clock)

        end_clock = parse_clock(fields[6])
        bottom_minutes = parse_decimal(fields[4])
        if end_clock is not None:
            end = datetime.combine(day, end_clock)
            if end < start:
                end = max(end_after(end, SECONDS_PER_DAY), start)
        elif bottom_minutes is not None:
            end = end_after(start, bottom_minutes * 60)
        else:
            end = start

        record = DiveRecord(
            title=fields[0],
            location=fields[1],
            dive_type=parse_category(DiveType, fields[2]),
            start_date=start,
            end_date=end,
            max_depth=u.depth_in(parse_decimal(fields[7])) or 0.0,
            visibility=u.visibility_in(parse_decimal(fields[8])),
            visibility_rating=parse_category(VisibilityRating, fields[9]),
            rating=parse_integer(fields[10]) or 0,
        )
        self._decode_equipment(record, fields[11:], u)
        return record

    def _decode_legacy(self, fields: list[str], row: int, u: ColumnUnits) -> DiveRecord:
        start = self._parse_legacy_datetime(fields[3], row) or self._clock()
        end = self._parse_legacy_datetime(fields[4], row) or start

        record = DiveRecord(
            title=fields[0],
            location=fields[1],
            dive_type=parse_category(DiveType, fields[2]),
            start_date=start,
            end_date=end,
            max_depth=u.depth_in(parse_decimal(fields[5])) or 0.0,
            visibility=parse_decimal(fields[6]),
            rating=parse_integer(fields[7]) or 0,
        )
        self._decode_equipment(record, fields[8:], u)
        return record

    @staticmethod
    def _decode_equipment(record: DiveRecord, fields: list[str], u: ColumnUnits) -> None:
        record.weight = u.weight_in(parse_decimal(fields[0]))
        record.weighting = parse_category(Weighting, fields[1])
        record.tank_size = u.tank_in(parse_decimal(fields[2]))
        record.tank_material = parse_category(TankMaterial, fields[3])
        record.gas_mixture = parse_category(GasMixture, fields[4])
        record.start_pressure = u.pressure_in(parse_decimal(fields[5]))
        record.end_pressure = u.pressure_in(parse_decimal(fields[6]))
        record.suit_type = SuitType.from_label(fields[7])
        record.water_type = parse_category(WaterType, fields[8])
        record.water_body = parse_category(WaterBody, fields[9])
        record.waves = parse_category(Waves, fields[10])
        record.current = parse_category(Current, fields[11])
        record.surge = parse_category(Surge, fields[12])
        record.air_temp = u.temperature_in(parse_decimal(fields[13]))
        record.surface_temp = u.temperature_in(parse_decimal(fields[14]))
        record.bottom_temp = u.temperature_in(parse_decimal(fields[15]))
        record.notes = fields[16]
        record.latitude = parse_decimal(fields[17])
        record.longitude = parse_decimal(fields[18])

    def _parse_date(self, text: str, row: int) -> date:
        value = text.strip()
        if not value:
            return self._clock().date()
        try:
            return datetime.strptime(value, DATE_FORMAT).date()
        except ValueError:
            raise DateFormatError(row, text) from None

    @staticmethod
    def _parse_legacy_datetime(text: str, row: int) -> datetime | None:
        value = text.strip()
        if not value:
            return None
        try:
            return datetime.strptime(value, LEGACY_DATETIME_FORMAT)
        except ValueError:
            raise DateFormatError(row, text, "yyyy-MM-dd HH:mm") from None


def _is_blank(fields: list[str]) -> bool:
    return len(fields) == 1 and not fields[0].strip()
