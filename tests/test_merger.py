"""Tests for title-collision handling on import."""

from scuba_log_server.interchange.merger import (
    Rename,
    apply_with_rename,
    find_conflicts,
    plan_renames,
    unique_title,
)
from tests.fixtures.dives import make_minimal_record


class TestUniqueTitle:
    def test_free_title_kept(self) -> None:
        assert unique_title("Reef", {"Wreck"}) == "Reef"

    def test_first_free_suffix(self) -> None:
        assert unique_title("Reef", {"Reef"}) == "Reef 2"
        assert unique_title("Reef", {"Reef", "Reef 2", "Reef 3"}) == "Reef 4"

    def test_gap_in_suffixes_is_filled(self) -> None:
        assert unique_title("Reef", {"Reef", "Reef 3"}) == "Reef 2"


class TestFindConflicts:
    def test_existing_titles(self) -> None:
        candidates = [make_minimal_record("Reef"), make_minimal_record("Wreck Dive")]
        assert find_conflicts(candidates, {"Wreck Dive"}) == {"Wreck Dive"}

    def test_repeats_within_batch(self) -> None:
        candidates = [make_minimal_record("Reef"), make_minimal_record("Reef")]
        assert find_conflicts(candidates, set()) == {"Reef"}

    def test_no_conflicts(self) -> None:
        assert find_conflicts([make_minimal_record("Reef")], ["Wreck"]) == set()

    def test_titles_compare_exactly(self) -> None:
        assert find_conflicts([make_minimal_record("reef")], ["Reef"]) == set()


class TestApplyWithRename:
    def test_batch_duplicates_and_existing(self) -> None:
        existing = {"Wreck Dive", "Wreck Dive 2"}
        candidates = [
            make_minimal_record("Wreck Dive"),
            make_minimal_record("Wreck Dive"),
            make_minimal_record("Night Dive"),
        ]

        result = apply_with_rename(candidates, existing)

        assert [r.title for r in result.committed] == [
            "Wreck Dive 3",
            "Wreck Dive 4",
            "Night Dive",
        ]
        assert result.renames == [
            Rename(position=0, original="Wreck Dive", renamed="Wreck Dive 3"),
            Rename(position=1, original="Wreck Dive", renamed="Wreck Dive 4"),
        ]
        assert result.count == 3

    def test_every_candidate_committed_once(self) -> None:
        candidates = [make_minimal_record("Reef") for _ in range(4)]
        result = apply_with_rename(candidates, ["Reef"])

        titles = [r.title for r in result.committed]
        assert titles == ["Reef 2", "Reef 3", "Reef 4", "Reef 5"]
        assert len(set(titles)) == len(titles)
        assert [r.id for r in result.committed] == [r.id for r in candidates]

    def test_inputs_not_mutated(self) -> None:
        candidates = [make_minimal_record("Reef")]
        existing = ["Reef"]

        apply_with_rename(candidates, existing)

        assert candidates[0].title == "Reef"
        assert existing == ["Reef"]

    def test_renamed_batch_has_no_conflicts(self) -> None:
        existing = {"Reef", "Reef 2"}
        candidates = [make_minimal_record("Reef"), make_minimal_record("Reef 2")]

        committed = apply_with_rename(candidates, existing).committed

        assert find_conflicts(committed, existing) == set()

    def test_empty_batch(self) -> None:
        result = apply_with_rename([], {"Reef"})
        assert result.committed == []
        assert result.renames == []

    def test_plan_matches_apply(self) -> None:
        candidates = [make_minimal_record("Reef"), make_minimal_record("Reef")]
        planned = plan_renames(candidates, {"Reef"})
        assert planned == apply_with_rename(candidates, {"Reef"}).renames

    def test_existing_title_with_two_candidates(self) -> None:
        candidates = [make_minimal_record("Wreck Dive"), make_minimal_record("Wreck Dive")]

        result = apply_with_rename(candidates, {"Wreck Dive"})

        assert [r.title for r in result.committed] == ["Wreck Dive 2", "Wreck Dive 3"]
        assert [r.renamed for r in result.renames] == ["Wreck Dive 2", "Wreck Dive 3"]

    def test_renaming_is_idempotent(self) -> None:
        existing = {"Wreck Dive", "Reef"}
        candidates = [
            make_minimal_record("Wreck Dive"),
            make_minimal_record("Wreck Dive"),
            make_minimal_record("Reef"),
            make_minimal_record("Night Dive"),
        ]

        first = apply_with_rename(candidates, existing)
        second = apply_with_rename(first.committed, existing)

        assert second.renames == []
        assert [r.title for r in second.committed] == [r.title for r in first.committed]
