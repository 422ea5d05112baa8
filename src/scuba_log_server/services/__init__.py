"""Application services."""

from scuba_log_server.services.interchange import (
    ImportPreview,
    ImportResult,
    InterchangeFormat,
    InterchangeService,
)
from scuba_log_server.services.repository import DiveRepository, SqlDiveRepository

__all__ = [
    "DiveRepository",
    "ImportPreview",
    "ImportResult",
    "InterchangeFormat",
    "InterchangeService",
    "SqlDiveRepository",
]
