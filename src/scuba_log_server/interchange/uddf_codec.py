"""UDDF (Universal Dive Data Format) codec.

Export writes a UDDF 3.2.0 document with a generator block, a gas mix table,
a dive site table and one ``dive`` element per record. Mixes and sites are
deduplicated and given sequential ids (``mix_N``, ``site_N``) in first-seen
order, so the same records always produce the same document.

Import streams the document with ``lxml.etree.iterparse`` through a small
state machine. The same element name can mean different things depending on
where it sits (a ``link`` under ``informationbeforedive`` points at a site,
under ``tankdata`` at a gas mix), so every element is interpreted against the
state of its enclosing element.
"""

from __future__ import annotations

import io
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from xml.sax.saxutils import escape

import structlog
from lxml import etree

from scuba_log_server import __version__
from scuba_log_server.interchange import units
from scuba_log_server.interchange.errors import XmlStructureError
from scuba_log_server.interchange.gas import MIX_NAMES, classify_mix, fractions_for
from scuba_log_server.interchange.record import DiveRecord, GasMixture, ParsedBatch, end_after

logger = structlog.get_logger()

UDDF_VERSION = "3.2.0"
UDDF_NAMESPACE = "http://www.streit.cc/uddf/3.2/"
GENERATOR_NAME = "Scuba Log"
BARE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def xml_text(value: str) -> str:
    """Escape ``& < > " '`` for element text and attribute values."""
    return escape(value, _ENTITIES)


def _number(value: float, digits: int) -> str:
    return f"{value:.{digits}f}"


@dataclass
class _Site:
    id: str
    name: str
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class _Mix:
    id: str
    mixture: GasMixture


class _XmlWriter:
    """Indented element writer; all text passes through ``xml_text``."""

    def __init__(self) -> None:
        self._out = io.StringIO()
        self._depth = 0

    def _indent(self) -> str:
        return "  " * self._depth

    def raw(self, line: str) -> None:
        self._out.write(f"{self._indent()}{line}\n")

    def open(self, tag: str, **attrs: str) -> None:
        self.raw(f"<{tag}{self._attrs(attrs)}>")
        self._depth += 1

    def close(self, tag: str) -> None:
        self._depth -= 1
        self.raw(f"</{tag}>")

    def element(self, tag: str, text: str, **attrs: str) -> None:
        self.raw(f"<{tag}{self._attrs(attrs)}>{xml_text(text)}</{tag}>")

    def empty(self, tag: str, **attrs: str) -> None:
        self.raw(f"<{tag}{self._attrs(attrs)}/>")

    @staticmethod
    def _attrs(attrs: dict[str, str]) -> str:
        return "".join(f' {name}="{xml_text(value)}"' for name, value in attrs.items())

    def getvalue(self) -> str:
        return self._out.getvalue()


class UddfParseState(Enum):
    """Parser context, one per open element.

    ``OPAQUE`` marks elements the codec does not interpret; their children
    are ignored whatever their names.
    """

    DOCUMENT = "document"
    GAS_DEFINITIONS = "gasdefinitions"
    MIX = "mix"
    DIVE_SITE = "divesite"
    SITE = "site"
    GEOGRAPHY = "geography"
    PROFILE_DATA = "profiledata"
    REPETITION_GROUP = "repetitiongroup"
    DIVE = "dive"
    INFORMATION_BEFORE_DIVE = "informationbeforedive"
    TANK_DATA = "tankdata"
    INFORMATION_AFTER_DIVE = "informationafterdive"
    NOTES = "notes"
    OPAQUE = "opaque"


S = UddfParseState

# (enclosing state, element name) -> state entered by that element.
TRANSITIONS: dict[tuple[UddfParseState, str], UddfParseState] = {
    (S.DOCUMENT, "gasdefinitions"): S.GAS_DEFINITIONS,
    (S.GAS_DEFINITIONS, "mix"): S.MIX,
    (S.DOCUMENT, "divesite"): S.DIVE_SITE,
    (S.DIVE_SITE, "site"): S.SITE,
    (S.SITE, "geography"): S.GEOGRAPHY,
    (S.DOCUMENT, "profiledata"): S.PROFILE_DATA,
    (S.PROFILE_DATA, "repetitiongroup"): S.REPETITION_GROUP,
    (S.REPETITION_GROUP, "dive"): S.DIVE,
    (S.DIVE, "informationbeforedive"): S.INFORMATION_BEFORE_DIVE,
    (S.DIVE, "tankdata"): S.TANK_DATA,
    (S.DIVE, "informationafterdive"): S.INFORMATION_AFTER_DIVE,
    (S.INFORMATION_AFTER_DIVE, "notes"): S.NOTES,
}


def next_state(enclosing: UddfParseState, tag: str) -> UddfParseState:
    """State for an element named ``tag`` opened inside ``enclosing``."""
    return TRANSITIONS.get((enclosing, tag), S.OPAQUE)


@dataclass
class _DiveDraft:
    """Values collected for one ``dive`` element before sites are resolved."""

    position: int
    datetime_text: str | None = None
    dive_number: str | None = None
    site_ref: str | None = None
    mix_ref: str | None = None
    air_temp_k: float | None = None
    tank_volume: float | None = None
    pressure_begin_pa: float | None = None
    pressure_end_pa: float | None = None
    greatest_depth: float | None = None
    duration_seconds: float | None = None
    lowest_temp_k: float | None = None
    visibility: float | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class _ParseContext:
    sites: dict[str, _Site] = field(default_factory=dict)
    mixes: dict[str, tuple[float, float]] = field(default_factory=dict)
    dives: list[_DiveDraft] = field(default_factory=list)
    site: _Site | None = None
    mix_id: str | None = None
    mix_o2: float = 0.0
    mix_he: float = 0.0
    dive: _DiveDraft | None = None


def _float(text: str | None) -> float | None:
    if text is None:
        return None
    try:
        number = float(text.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_uddf_datetime(text: str) -> datetime | None:
    """Parse ISO-8601 (with or without fractional seconds or offset).

    Offsets are normalised to UTC and dropped, since records hold naive
    wall-clock times.
    """
    value = text.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        try:
            parsed = datetime.strptime(value[:19], BARE_DATETIME_FORMAT)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(UTC).replace(tzinfo=None)
        except OverflowError:
            return None
    return parsed


class UddfCodec:
    """Encode records as UDDF and decode UDDF documents into records.

    Args:
        clock: Source of "now", used for the generator timestamp and for
            dives whose datetime cannot be parsed.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, records: Iterable[DiveRecord], generated_at: datetime | None = None) -> str:
        """Render records as a UDDF document.

        Args:
            records: Records in the order they should appear
            generated_at: Generator timestamp (defaults to the clock)

        Returns:
            UDDF document text
        """
        records = list(records)
        mixes, sites = self._collect_references(records)
        stamp = (generated_at or self._clock()).replace(microsecond=0)

        w = _XmlWriter()
        w.raw('<?xml version="1.0" encoding="UTF-8"?>')
        w.open("uddf", version=UDDF_VERSION, xmlns=UDDF_NAMESPACE)

        w.open("generator")
        w.element("name", GENERATOR_NAME)
        w.open("manufacturer", id="scubalog")
        w.element("name", GENERATOR_NAME)
        w.close("manufacturer")
        w.element("version", __version__)
        w.element("datetime", stamp.isoformat())
        w.close("generator")

        if mixes:
            w.open("gasdefinitions")
            for mix in mixes.values():
                fractions = fractions_for(mix.mixture)
                w.open("mix", id=mix.id)
                w.element("name", MIX_NAMES[mix.mixture])
                w.element("o2", _number(fractions.o2, 2))
                w.element("n2", _number(fractions.n2, 2))
                w.element("he", _number(fractions.he, 2))
                w.close("mix")
            w.close("gasdefinitions")

        if sites:
            w.open("divesite")
            for site in sites.values():
                w.open("site", id=site.id)
                w.element("name", site.name)
                if site.latitude is not None and site.longitude is not None:
                    w.open("geography")
                    w.element("latitude", repr(site.latitude))
                    w.element("longitude", repr(site.longitude))
                    w.close("geography")
                w.close("site")
            w.close("divesite")

        w.open("profiledata")
        w.open("repetitiongroup", id="rg_1")
        for position, record in enumerate(records, start=1):
            self._write_dive(w, record, position, mixes, sites)
        w.close("repetitiongroup")
        w.close("profiledata")
        w.close("uddf")

        logger.debug("Exported UDDF", dives=len(records), mixes=len(mixes), sites=len(sites))
        return w.getvalue()

    @staticmethod
    def _collect_references(
        records: list[DiveRecord],
    ) -> tuple[dict[GasMixture, _Mix], dict[str, _Site]]:
        """Assign mix and site ids in first-seen order."""
        mixes: dict[GasMixture, _Mix] = {}
        sites: dict[str, _Site] = {}
        for record in records:
            if record.gas_mixture is not None and record.gas_mixture not in mixes:
                mixes[record.gas_mixture] = _Mix(f"mix_{len(mixes) + 1}", record.gas_mixture)

            name = record.location.strip()
            if not name:
                continue
            site = sites.get(name)
            if site is None:
                site = sites[name] = _Site(f"site_{len(sites) + 1}", name)
            has_coordinates = record.latitude is not None and record.longitude is not None
            if site.latitude is None and has_coordinates:
                site.latitude = record.latitude
                site.longitude = record.longitude
        return mixes, sites

    @staticmethod
    def _write_dive(
        w: _XmlWriter,
        record: DiveRecord,
        position: int,
        mixes: dict[GasMixture, _Mix],
        sites: dict[str, _Site],
    ) -> None:
        w.open("dive", id=f"dive_{position}")

        w.open("informationbeforedive")
        site = sites.get(record.location.strip())
        if site is not None:
            w.empty("link", ref=site.id)
        w.element("divenumber", str(position))
        w.element("datetime", record.start_date.replace(microsecond=0).isoformat())
        if record.air_temp is not None:
            w.element("airtemperature", _number(units.celsius_to_kelvin(record.air_temp), 2))
        w.close("informationbeforedive")

        mix = mixes.get(record.gas_mixture) if record.gas_mixture is not None else None
        if (
            mix is not None
            or record.tank_size is not None
            or record.start_pressure is not None
            or record.end_pressure is not None
        ):
            w.open("tankdata")
            if mix is not None:
                w.empty("link", ref=mix.id)
            if record.tank_size is not None:
                w.element("tankvolume", _number(record.tank_size, 1))
            if record.start_pressure is not None:
                w.element(
                    "tankpressurebegin", _number(units.bar_to_pascal(record.start_pressure), 0)
                )
            if record.end_pressure is not None:
                w.element("tankpressureend", _number(units.bar_to_pascal(record.end_pressure), 0))
            w.close("tankdata")

        w.open("informationafterdive")
        w.element("greatestdepth", _number(record.max_depth, 2))
        w.element("diveduration", _number(record.duration_seconds, 0))
        if record.bottom_temp is not None:
            w.element("lowesttemperature", _number(units.celsius_to_kelvin(record.bottom_temp), 2))
        if record.visibility is not None:
            w.element("visibility", _number(record.visibility, 1))
        if record.notes:
            w.open("notes")
            w.element("para", record.notes)
            w.close("notes")
        w.close("informationafterdive")

        w.close("dive")

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def parse(self, data: bytes | str) -> ParsedBatch:
        """Decode a UDDF document into records in document order.

        Raises:
            XmlStructureError: Document is not well-formed XML or not UDDF
        """
        if isinstance(data, str):
            data = data.encode("utf-8")

        ctx = _ParseContext()
        stack: list[UddfParseState] = []
        try:
            for event, element in etree.iterparse(
                io.BytesIO(data), events=("start", "end"), resolve_entities=False
            ):
                if not isinstance(element.tag, str):
                    continue
                tag = etree.QName(element).localname
                if event == "start":
                    stack.append(self._enter(ctx, stack, tag, element))
                else:
                    state = stack.pop()
                    enclosing = stack[-1] if stack else None
                    self._leave(ctx, state, enclosing, tag, element)
        except etree.XMLSyntaxError as exc:
            raise XmlStructureError(str(exc)) from exc

        return self._build_records(ctx)

    def _enter(
        self,
        ctx: _ParseContext,
        stack: list[UddfParseState],
        tag: str,
        element: etree._Element,
    ) -> UddfParseState:
        if not stack:
            if tag != "uddf":
                raise XmlStructureError(f"root element is <{tag}>, expected <uddf>")
            return S.DOCUMENT

        state = next_state(stack[-1], tag)
        if state is S.MIX:
            ctx.mix_id = element.get("id")
            ctx.mix_o2 = 0.0
            ctx.mix_he = 0.0
        elif state is S.SITE:
            ctx.site = _Site(id=element.get("id") or "", name="")
        elif state is S.DIVE:
            ctx.dive = _DiveDraft(position=len(ctx.dives) + 1)
        return state

    def _leave(
        self,
        ctx: _ParseContext,
        state: UddfParseState,
        enclosing: UddfParseState | None,
        tag: str,
        element: etree._Element,
    ) -> None:
        if state is S.MIX:
            if ctx.mix_id:
                ctx.mixes[ctx.mix_id] = (ctx.mix_o2, ctx.mix_he)
            ctx.mix_id = None
        elif state is S.SITE:
            if ctx.site is not None and ctx.site.id:
                ctx.sites[ctx.site.id] = ctx.site
            ctx.site = None
        elif state is S.DIVE:
            if ctx.dive is not None:
                ctx.dives.append(ctx.dive)
            ctx.dive = None
            element.clear()
        elif state is S.OPAQUE and enclosing is not None:
            self._read_field(ctx, enclosing, tag, element)

    @staticmethod
    def _read_field(
        ctx: _ParseContext, enclosing: UddfParseState, tag: str, element: etree._Element
    ) -> None:
        """Interpret a leaf element according to the state it sits in."""
        text = element.text
        dive = ctx.dive

        if enclosing is S.MIX:
            if tag == "o2":
                ctx.mix_o2 = _float(text) or 0.0
            elif tag == "he":
                ctx.mix_he = _float(text) or 0.0
        elif enclosing is S.SITE and ctx.site is not None:
            if tag == "name":
                ctx.site.name = (text or "").strip()
        elif enclosing is S.GEOGRAPHY and ctx.site is not None:
            if tag == "latitude":
                ctx.site.latitude = _float(text)
            elif tag == "longitude":
                ctx.site.longitude = _float(text)
        elif enclosing is S.INFORMATION_BEFORE_DIVE and dive is not None:
            if tag == "link":
                dive.site_ref = element.get("ref")
            elif tag == "datetime":
                dive.datetime_text = text
            elif tag == "divenumber":
                dive.dive_number = (text or "").strip()
            elif tag == "airtemperature":
                dive.air_temp_k = _float(text)
        elif enclosing is S.TANK_DATA and dive is not None:
            if tag == "link":
                dive.mix_ref = element.get("ref")
            elif tag == "tankvolume":
                dive.tank_volume = _float(text)
            elif tag == "tankpressurebegin":
                dive.pressure_begin_pa = _float(text)
            elif tag == "tankpressureend":
                dive.pressure_end_pa = _float(text)
        elif enclosing is S.INFORMATION_AFTER_DIVE and dive is not None:
            if tag == "greatestdepth":
                dive.greatest_depth = _float(text)
            elif tag == "diveduration":
                dive.duration_seconds = _float(text)
            elif tag == "lowesttemperature":
                dive.lowest_temp_k = _float(text)
            elif tag == "visibility":
                dive.visibility = _float(text)
        elif enclosing is S.NOTES and dive is not None:
            if tag == "para" and text:
                dive.notes.append(text)

    def _build_records(self, ctx: _ParseContext) -> ParsedBatch:
        warnings: list[str] = []
        records = []
        for draft in ctx.dives:
            site = ctx.sites.get(draft.site_ref) if draft.site_ref else None
            title = self.dive_title(draft.position, site.name if site else None, draft.dive_number)

            start = parse_uddf_datetime(draft.datetime_text) if draft.datetime_text else None
            if start is None:
                start = self._clock()
                warnings.append(f'{title}: unreadable or missing start time, using "now"')
                logger.warning(
                    "UDDF dive datetime unreadable",
                    position=draft.position,
                    value=draft.datetime_text,
                )
            end = start
            if draft.duration_seconds is not None:
                end = end_after(start, draft.duration_seconds)

            mixture = None
            if draft.mix_ref and draft.mix_ref in ctx.mixes:
                mixture = classify_mix(*ctx.mixes[draft.mix_ref])

            records.append(
                DiveRecord(
                    title=title,
                    start_date=start,
                    end_date=end,
                    max_depth=draft.greatest_depth or 0.0,
                    location=site.name if site else "",
                    latitude=site.latitude if site else None,
                    longitude=site.longitude if site else None,
                    visibility=draft.visibility,
                    gas_mixture=mixture,
                    tank_size=draft.tank_volume,
                    start_pressure=_pascal_to_bar(draft.pressure_begin_pa),
                    end_pressure=_pascal_to_bar(draft.pressure_end_pa),
                    air_temp=_kelvin_to_celsius(draft.air_temp_k),
                    bottom_temp=_kelvin_to_celsius(draft.lowest_temp_k),
                    notes="\n".join(draft.notes),
                )
            )

        logger.info(
            "Parsed UDDF",
            dives=len(records),
            sites=len(ctx.sites),
            mixes=len(ctx.mixes),
            warnings=len(warnings),
        )
        return ParsedBatch(records=records, warnings=warnings)

    @staticmethod
    def dive_title(position: int, site_name: str | None, dive_number: str | None) -> str:
        """Title for an imported dive.

        Linked site name, else ``Dive {n}`` from the dive number element,
        else ``UDDF Dive {position}`` (1-based).
        """
        if site_name:
            return site_name
        if dive_number:
            return f"Dive {dive_number}"
        return f"UDDF Dive {position}"


def _pascal_to_bar(value: float | None) -> float | None:
    return None if value is None else units.pascal_to_bar(value)


def _kelvin_to_celsius(value: float | None) -> float | None:
    return None if value is None else units.kelvin_to_celsius(value)
