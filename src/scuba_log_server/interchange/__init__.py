"""Dive log interchange: CSV and UDDF codecs plus import merging."""

from scuba_log_server.interchange.csv_codec import CsvCodec, CsvLayout
from scuba_log_server.interchange.errors import (
    ContentFormatError,
    DateFormatError,
    EmptyInputError,
    FileAccessError,
    InterchangeError,
    RowShapeError,
    SchemaMismatchError,
    TextEncodingError,
    XmlStructureError,
)
from scuba_log_server.interchange.merger import apply_with_rename, find_conflicts, plan_renames
from scuba_log_server.interchange.record import DiveRecord, ParsedBatch, check_record
from scuba_log_server.interchange.uddf_codec import UddfCodec
from scuba_log_server.interchange.units import UnitSystem

__all__ = [
    "ContentFormatError",
    "CsvCodec",
    "CsvLayout",
    "DateFormatError",
    "DiveRecord",
    "EmptyInputError",
    "FileAccessError",
    "InterchangeError",
    "ParsedBatch",
    "RowShapeError",
    "SchemaMismatchError",
    "TextEncodingError",
    "UddfCodec",
    "UnitSystem",
    "XmlStructureError",
    "apply_with_rename",
    "check_record",
    "find_conflicts",
    "plan_renames",
]
