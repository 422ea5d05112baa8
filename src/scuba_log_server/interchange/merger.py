"""Title-collision handling for imported dives.

Importing is two-phase: ``find_conflicts``/``plan_renames`` let a caller show
exactly which titles will change, and ``apply_with_rename`` produces the
renamed batch once the user confirms. Records are never dropped or
overwritten; colliding titles get a numeric suffix.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from scuba_log_server.interchange.record import DiveRecord


@dataclass(frozen=True)
class Rename:
    position: int
    original: str
    renamed: str


@dataclass
class MergeResult:
    committed: list[DiveRecord]
    renames: list[Rename]

    @property
    def count(self) -> int:
        return len(self.committed)


def unique_title(title: str, taken: set[str]) -> str:
    """First of ``title``, ``title 2``, ``title 3``, ... not in ``taken``."""
    if title not in taken:
        return title
    counter = 2
    while f"{title} {counter}" in taken:
        counter += 1
    return f"{title} {counter}"


def find_conflicts(candidates: Iterable[DiveRecord], existing_titles: Iterable[str]) -> set[str]:
    """Titles that already exist or repeat within the batch."""
    existing = set(existing_titles)
    seen: set[str] = set()
    conflicts: set[str] = set()
    for record in candidates:
        if record.title in existing or record.title in seen:
            conflicts.add(record.title)
        seen.add(record.title)
    return conflicts


def plan_renames(
    candidates: Sequence[DiveRecord], existing_titles: Iterable[str]
) -> list[Rename]:
    """The renames ``apply_with_rename`` would make, without making them."""
    return apply_with_rename(candidates, existing_titles).renames


def apply_with_rename(
    candidates: Sequence[DiveRecord], existing_titles: Iterable[str]
) -> MergeResult:
    """Give every candidate a title unique against existing and earlier ones.

    Candidates are processed left to right and each chosen title is reserved
    before the next candidate, so duplicates inside one batch resolve
    deterministically. Inputs are not mutated.
    """
    taken = set(existing_titles)
    committed: list[DiveRecord] = []
    renames: list[Rename] = []
    for position, record in enumerate(candidates):
        title = unique_title(record.title, taken)
        taken.add(title)
        if title != record.title:
            renames.append(Rename(position=position, original=record.title, renamed=title))
            record = replace(record, title=title)
        committed.append(record)
    return MergeResult(committed=committed, renames=renames)
