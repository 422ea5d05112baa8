"""Tests for the dive record model."""

from datetime import datetime

from scuba_log_server.interchange.record import (
    DiveType,
    GasMixture,
    ParsedBatch,
    SuitType,
    WaterType,
    check_record,
    end_after,
    parse_category,
)
from tests.fixtures.dives import make_minimal_record, make_record


class TestParseCategory:
    def test_exact_value(self) -> None:
        assert parse_category(DiveType, "wreck") is DiveType.WRECK

    def test_case_insensitive(self) -> None:
        assert parse_category(WaterType, "salt") is WaterType.SALT
        assert parse_category(GasMixture, "EANx36") is GasMixture.EANX36

    def test_unknown_and_empty_are_absent(self) -> None:
        assert parse_category(DiveType, "cave") is None
        assert parse_category(DiveType, "   ") is None


class TestSuitType:
    def test_labels(self) -> None:
        assert SuitType.FULL_SUIT_7.label == "Full Suit 7mm"
        assert SuitType.NONE.label == "None"

    def test_from_label(self) -> None:
        assert SuitType.from_label("Semi Dry") is SuitType.SEMI_DRY
        assert SuitType.from_label(" Shorty ") is SuitType.SHORTY

    def test_from_raw_value(self) -> None:
        assert SuitType.from_label("fullSuit3") is SuitType.FULL_SUIT_3

    def test_unknown_label(self) -> None:
        assert SuitType.from_label("Wetsuit") is None
        assert SuitType.from_label("") is None


class TestDiveRecord:
    def test_duration_and_gas_used(self) -> None:
        record = make_record()
        assert record.duration_seconds == 47 * 60
        assert record.pressure_used == 140.0

    def test_gas_used_needs_both_pressures(self) -> None:
        assert make_record(end_pressure=None).pressure_used is None

    def test_ids_are_unique(self) -> None:
        assert make_minimal_record().id != make_minimal_record().id


class TestEndAfter:
    def test_adds_seconds(self) -> None:
        assert end_after(datetime(2025, 1, 1, 10, 0), 2700) == datetime(2025, 1, 1, 10, 45)

    def test_unusable_durations_keep_start(self) -> None:
        start = datetime(2025, 1, 1, 10, 0)
        assert end_after(start, float("nan")) == start
        assert end_after(start, 1e20) == start
        assert end_after(datetime(9999, 12, 31, 23, 0), 7200) == datetime(9999, 12, 31, 23, 0)


class TestCheckRecord:
    def test_clean_record(self) -> None:
        assert check_record(make_record()) == []
        assert check_record(make_minimal_record()) == []

    def test_end_pressure_above_start_is_flagged_not_swapped(self) -> None:
        record = make_record(start_pressure=200.0, end_pressure=210.0)

        issues = check_record(record)

        assert issues == ["end pressure 210 bar is above start pressure 200 bar"]
        assert record.start_pressure == 200.0
        assert record.end_pressure == 210.0

    def test_out_of_range_values(self) -> None:
        record = make_record(max_depth=-3.0, visibility=150.0, rating=7)
        issues = check_record(record)

        assert "max depth -3 m is negative" in issues
        assert "visibility 150 is outside 0-100" in issues
        assert "rating 7 is outside 0-5" in issues

    def test_end_before_start(self) -> None:
        record = make_minimal_record(
            start_date=datetime(2025, 1, 1, 10, 0),
            end_date=datetime(2025, 1, 1, 9, 0),
        )
        assert check_record(record) == ["end date is before start date"]


class TestParsedBatch:
    def test_len(self) -> None:
        batch = ParsedBatch(records=[make_minimal_record(), make_minimal_record()])
        assert len(batch) == 2
        assert batch.warnings == []
