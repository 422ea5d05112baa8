"""Interchange error taxonomy.

Two families are kept apart so callers can tell "can't read this file"
(``FileAccessError``) from "this file's contents are wrong"
(``ContentFormatError``). Title collisions are not errors at all; they are
reported on the import preview.
"""

from collections.abc import Sequence


class InterchangeError(Exception):
    """Base class for all import/export failures."""


class ContentFormatError(InterchangeError):
    """The input was readable but its contents cannot be imported."""


class EmptyInputError(ContentFormatError):
    def __init__(self) -> None:
        super().__init__("The selected file contains no dives.")


class SchemaMismatchError(ContentFormatError):
    """Header column count matches no known CSV layout."""

    def __init__(self, expected: Sequence[int], got: int) -> None:
        self.expected = tuple(expected)
        self.got = got
        options = " or ".join(str(count) for count in self.expected)
        super().__init__(
            f"The header has {got} columns but {options} were expected. "
            "Please use a file exported from Scuba Log."
        )


class RowShapeError(ContentFormatError):
    def __init__(self, row: int, expected: int, got: int) -> None:
        self.row = row
        self.expected = expected
        self.got = got
        super().__init__(f"Row {row} has {got} columns but {expected} were expected.")


class DateFormatError(ContentFormatError):
    def __init__(self, row: int, value: str, expected_format: str = "yyyy-MM-dd") -> None:
        self.row = row
        self.value = value
        super().__init__(
            f'Invalid date "{value}" on row {row}. Expected format: {expected_format}.'
        )


class XmlStructureError(ContentFormatError):
    """Malformed or non-UDDF XML, carrying the parser's diagnostic."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"The UDDF document could not be read: {detail}")


class TextEncodingError(ContentFormatError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"The file is not valid UTF-8 text: {detail}")


class FileAccessError(InterchangeError):
    """The file itself could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to access {path}: {reason}")
