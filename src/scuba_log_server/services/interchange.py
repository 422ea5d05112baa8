"""Import/export orchestration.

Picks a codec for a file, parses it, checks titles against what is already
stored and, only once the caller confirms, commits the renamed batch. Export
reads every stored dive, encodes it and names the resulting buffer.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path, PurePath

import structlog

from scuba_log_server.interchange.csv_codec import CsvCodec
from scuba_log_server.interchange.errors import EmptyInputError
from scuba_log_server.interchange.merger import (
    Rename,
    apply_with_rename,
    find_conflicts,
    plan_renames,
)
from scuba_log_server.interchange.record import DiveRecord, ParsedBatch, check_record
from scuba_log_server.interchange.uddf_codec import UddfCodec
from scuba_log_server.interchange.units import UnitSystem
from scuba_log_server.services.files import decode_text, read_import_file, write_export
from scuba_log_server.services.repository import DiveRepository

logger = structlog.get_logger()

EXPORT_FILENAME_PREFIX = "ScubaLog_Export_"
UDDF_EXTENSIONS = frozenset({".uddf", ".xml"})


class InterchangeFormat(str, Enum):
    """Supported file formats."""

    CSV = "csv"
    UDDF = "uddf"

    @property
    def media_type(self) -> str:
        return "text/csv" if self is InterchangeFormat.CSV else "application/xml"


def detect_format(filename: str, data: bytes = b"") -> InterchangeFormat:
    """Choose a format from the file extension.

    ``.uddf`` and ``.xml`` are UDDF and any other extension is read as CSV.
    Files without an extension are sniffed: XML starts with ``<``.
    """
    suffix = PurePath(filename).suffix.lower()
    if suffix in UDDF_EXTENSIONS:
        return InterchangeFormat.UDDF
    if not suffix and data.lstrip(b"\xef\xbb\xbf \t\r\n").startswith(b"<"):
        return InterchangeFormat.UDDF
    return InterchangeFormat.CSV


def export_filename(fmt: InterchangeFormat, day: date) -> str:
    return f"{EXPORT_FILENAME_PREFIX}{day:%Y-%m-%d}.{fmt.value}"


@dataclass
class ImportPreview:
    """A parsed, not yet committed import.

    Attributes:
        filename: Name the file was picked under
        format: Format used to parse it
        records: Candidate records in file order, titles as in the file
        conflicts: Titles that collide with stored dives or repeat in the file
        renames: Exact renames a commit would apply
        warnings: Integrity problems worth showing before committing
    """

    filename: str
    format: InterchangeFormat
    records: list[DiveRecord]
    conflicts: set[str] = field(default_factory=set)
    renames: list[Rename] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def summary(self, limit: int = 5) -> str:
        """Short conflict message for a confirmation prompt."""
        names = sorted(self.conflicts)
        shown = ", ".join(names[:limit])
        extra = f" and {len(names) - limit} more" if len(names) > limit else ""
        return (
            f"The following entries already exist: {shown}{extra}. "
            "Duplicates will be renamed with a number suffix."
        )


@dataclass
class ImportResult:
    records: list[DiveRecord]
    renames: list[Rename]

    @property
    def imported(self) -> int:
        return len(self.records)


@dataclass
class ExportArtifact:
    filename: str
    format: InterchangeFormat
    content: bytes
    record_count: int

    @property
    def media_type(self) -> str:
        return self.format.media_type


class InterchangeService:
    """Service for importing and exporting dive logs.

    Args:
        repository: Where committed dives are listed from and inserted into
        clock: Source of "now" for codecs and export filenames
    """

    def __init__(
        self,
        repository: DiveRepository,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.csv_codec = CsvCodec(clock=clock)
        self.uddf_codec = UddfCodec(clock=clock)
        self.logger = logger.bind(service="interchange")

    def parse(self, filename: str, data: bytes) -> tuple[InterchangeFormat, ParsedBatch]:
        """Parse file contents with the codec chosen for the filename.

        Raises:
            ContentFormatError: Contents cannot be imported
        """
        fmt = detect_format(filename, data)
        if fmt is InterchangeFormat.UDDF:
            batch = self.uddf_codec.parse(data)
        else:
            batch = self.csv_codec.parse(decode_text(data))
        if not batch.records:
            raise EmptyInputError()
        return fmt, batch

    async def existing_titles(self) -> set[str]:
        return await self.repository.list_titles()

    async def preview_import(self, filename: str, data: bytes) -> ImportPreview:
        """Parse a file and report collisions without touching storage."""
        fmt, batch = self.parse(filename, data)
        existing = await self.existing_titles()

        warnings = list(batch.warnings)
        for position, record in enumerate(batch.records, start=1):
            for issue in check_record(record):
                warnings.append(f"Dive {position} ({record.title}): {issue}")

        preview = ImportPreview(
            filename=filename,
            format=fmt,
            records=batch.records,
            conflicts=find_conflicts(batch.records, existing),
            renames=plan_renames(batch.records, existing),
            warnings=warnings,
        )
        self.logger.info(
            "Import previewed",
            filename=filename,
            format=fmt.value,
            records=len(preview.records),
            conflicts=len(preview.conflicts),
            warnings=len(warnings),
        )
        return preview

    async def commit_import(self, preview: ImportPreview) -> ImportResult:
        """Rename colliding titles and insert every record.

        Titles are checked again against storage, so dives added after the
        preview are also respected.
        """
        merged = apply_with_rename(preview.records, await self.existing_titles())
        for record in merged.committed:
            await self.repository.insert(record)

        self.logger.info(
            "Import committed",
            filename=preview.filename,
            imported=merged.count,
            renamed=len(merged.renames),
        )
        return ImportResult(records=merged.committed, renames=merged.renames)

    async def preview_file(self, path: Path, max_bytes: int | None = None) -> ImportPreview:
        """Read a file from disk and preview it.

        Raises:
            FileAccessError: File cannot be read or is too large
            ContentFormatError: Contents cannot be imported
        """
        return await self.preview_import(path.name, read_import_file(path, max_bytes=max_bytes))

    async def import_file(
        self,
        path: Path,
        confirm: Callable[[ImportPreview], bool],
        max_bytes: int | None = None,
    ) -> ImportResult | None:
        """Import a file, asking ``confirm`` first when titles collide.

        Returns:
            The import result, or None when the caller declined
        """
        preview = await self.preview_file(path, max_bytes=max_bytes)
        if preview.has_conflicts and not confirm(preview):
            self.logger.info(
                "Import cancelled", filename=path.name, conflicts=len(preview.conflicts)
            )
            return None
        return await self.commit_import(preview)

    async def export(
        self,
        fmt: InterchangeFormat,
        units_system: UnitSystem = UnitSystem.METRIC,
    ) -> ExportArtifact:
        """Encode every stored dive, most recent first.

        UDDF is always metric, so ``units_system`` only affects CSV.
        """
        records = await self.repository.list_all()
        now = self.clock()
        if fmt is InterchangeFormat.UDDF:
            text = self.uddf_codec.export(records, generated_at=now)
        else:
            text = self.csv_codec.export(records, units_system)

        artifact = ExportArtifact(
            filename=export_filename(fmt, now.date()),
            format=fmt,
            content=text.encode("utf-8"),
            record_count=len(records),
        )
        self.logger.info(
            "Export built",
            format=fmt.value,
            units=units_system.value,
            records=len(records),
            filename=artifact.filename,
        )
        return artifact

    async def export_to_directory(
        self,
        directory: Path,
        fmt: InterchangeFormat,
        units_system: UnitSystem = UnitSystem.METRIC,
    ) -> Path:
        artifact = await self.export(fmt, units_system)
        return write_export(directory, artifact.filename, artifact.content)
