"""Dive persistence.

The interchange service only needs to list committed dives, look up the
titles already taken and insert new ones. ``DiveRepository`` captures that
contract and ``SqlDiveRepository`` fulfils it with SQLAlchemy.
"""

from typing import Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scuba_log_server.interchange.record import DiveRecord
from scuba_log_server.models.dive import Dive
from scuba_log_server.transformers import DiveTransformer

logger = structlog.get_logger()


class DiveRepository(Protocol):
    """Persistence collaborator used by the interchange service."""

    async def list_all(self) -> list[DiveRecord]: ...

    async def list_titles(self) -> set[str]: ...

    async def insert(self, record: DiveRecord) -> None: ...


class SqlDiveRepository:
    """SQLAlchemy-backed dive store.

    Inserts are added to the session; committing is left to the session owner
    so a whole import lands in one transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> list[DiveRecord]:
        """All dives, most recent first."""
        stmt = select(Dive).order_by(Dive.start_date.desc(), Dive.created_at.desc())
        result = await self.session.execute(stmt)
        return [DiveTransformer.to_record(dive) for dive in result.scalars().all()]

    async def list_titles(self) -> set[str]:
        """Titles of every stored dive."""
        result = await self.session.execute(select(Dive.title))
        return set(result.scalars().all())

    async def insert(self, record: DiveRecord) -> None:
        self.session.add(Dive(**DiveTransformer.transform(record)))
        logger.debug("Dive staged", dive_id=record.id, title=record.title)
