"""Declarative base and shared columns."""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base model for dive log tables."""


class InsertedAtMixin:
    """Row insertion time.

    Dives are never edited by an import, so only the insert is stamped. It
    breaks ties between dives that share a start time.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
