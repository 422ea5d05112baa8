"""Database models."""

from scuba_log_server.models.base import Base
from scuba_log_server.models.dive import Dive

__all__ = [
    "Base",
    "Dive",
]
