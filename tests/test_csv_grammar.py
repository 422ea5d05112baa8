"""Tests for the CSV tokenizer."""

from scuba_log_server.interchange.csv_grammar import parse_rows


class TestParseRows:
    """Lexical CSV rules."""

    def test_simple_rows(self) -> None:
        assert parse_rows("a,b,c\n1,2,3\n") == [["a", "b", "c"], ["1", "2", "3"]]

    def test_quoted_field_with_comma_quote_and_newline(self) -> None:
        text = 'title,notes\nReef,"Calm, ""clear""\nsecond line"\n'
        assert parse_rows(text) == [
            ["title", "notes"],
            ["Reef", 'Calm, "clear"\nsecond line'],
        ]

    def test_crlf_and_bare_cr_end_rows(self) -> None:
        assert parse_rows("a,b\r\nc,d\re,f") == [["a", "b"], ["c", "d"], ["e", "f"]]

    def test_empty_fields_are_kept(self) -> None:
        assert parse_rows(",,\n") == [["", "", ""]]
        assert parse_rows("a,") == [["a", ""]]

    def test_trailing_blank_rows_dropped(self) -> None:
        assert parse_rows("a,b\n\n\n") == [["a", "b"]]

    def test_blank_row_in_the_middle_is_kept(self) -> None:
        assert parse_rows("a\n\nb\n") == [["a"], [""], ["b"]]

    def test_unterminated_last_row_is_flushed(self) -> None:
        assert parse_rows("a,b\nc,d") == [["a", "b"], ["c", "d"]]

    def test_quote_inside_unquoted_field_is_literal(self) -> None:
        assert parse_rows('5" reel,x\n') == [['5" reel', "x"]]

    def test_unterminated_quote_never_raises(self) -> None:
        assert parse_rows('a,"open field\nstill open') == [["a", "open field\nstill open"]]

    def test_empty_input(self) -> None:
        assert parse_rows("") == []
        assert parse_rows("\n") == []
