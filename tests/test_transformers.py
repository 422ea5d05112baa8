"""Tests for DiveRecord <-> Dive row conversion."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scuba_log_server.interchange.record import GasMixture, SuitType, WaterType
from scuba_log_server.models.dive import Dive
from scuba_log_server.services.repository import SqlDiveRepository
from scuba_log_server.transformers import DiveTransformer
from tests.fixtures.dives import make_minimal_record, make_record


class TestDiveTransformer:
    """Test dive record transformation."""

    def test_transform_maps_metric_columns(self) -> None:
        result = DiveTransformer.transform(make_record())

        assert result["title"] == "Blue Hole"
        assert result["weight_kg"] == 6.0
        assert result["tank_size_liters"] == 12.0
        assert result["start_pressure_bar"] == 200.0
        assert result["bottom_temp_c"] == 24.0
        assert result["gas_mixture"] == "eanx32"
        assert result["suit_type"] == "fullSuit5"
        assert result["water_type"] == "Salt"
        assert "photos" not in result

    def test_transform_minimal_record(self) -> None:
        result = DiveTransformer.transform(make_minimal_record())

        assert result["dive_type"] is None
        assert result["visibility"] is None
        assert result["weighting"] is None
        assert result["notes"] == ""

    def test_to_record_reads_enum_values(self) -> None:
        record = make_record()
        dive = Dive(**DiveTransformer.transform(record))

        restored = DiveTransformer.to_record(dive)

        assert restored.id == record.id
        assert restored.gas_mixture is GasMixture.EANX32
        assert restored.suit_type is SuitType.FULL_SUIT_5
        assert restored.water_type is WaterType.SALT
        assert restored.start_date == record.start_date

    def test_unknown_stored_value_reads_as_absent(self) -> None:
        dive = Dive(**DiveTransformer.transform(make_record()))
        dive.gas_mixture = "heliox"

        assert DiveTransformer.to_record(dive).gas_mixture is None


class TestSqlDiveRepository:
    async def test_insert_and_list(
        self, repository: SqlDiveRepository, async_session: AsyncSession
    ) -> None:
        record = make_record()
        await repository.insert(record)
        await async_session.commit()

        stored = (await async_session.execute(select(Dive))).scalars().one()
        assert stored.id == record.id
        assert stored.max_depth == pytest.approx(28.4)

        [listed] = await repository.list_all()
        assert listed.title == record.title
        assert listed.end_date == record.end_date
        assert listed.latitude == pytest.approx(record.latitude)
        assert listed.notes == record.notes

    async def test_list_is_most_recent_first(self, repository: SqlDiveRepository) -> None:
        await repository.insert(make_minimal_record("Early"))
        await repository.insert(make_record("Late"))

        assert [r.title for r in await repository.list_all()] == ["Late", "Early"]

    async def test_list_titles(self, repository: SqlDiveRepository) -> None:
        await repository.insert(make_record("Reef"))
        await repository.insert(make_record("Wreck"))

        assert await repository.list_titles() == {"Reef", "Wreck"}
