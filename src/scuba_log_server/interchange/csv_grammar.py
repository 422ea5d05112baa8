"""Quoted-field CSV tokenizer.

Purely lexical: splits text into rows of field strings and never interprets
headers. Total over all inputs, so it never raises.
"""

QUOTE = '"'
DELIMITER = ","


def parse_rows(text: str) -> list[list[str]]:
    """Split CSV text into rows of fields.

    - A field starting with ``"`` is quoted until an unescaped closing quote;
      ``""`` inside quotes is a literal quote.
    - ``,`` ends a field and ``\\n``, ``\\r\\n`` or a bare ``\\r`` ends a row,
      only outside quotes.
    - Trailing rows holding a single empty field are dropped; any other
      unterminated content is flushed as a final row.
    """
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    at_field_start = True
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if in_quotes:
            if char == QUOTE:
                if i + 1 < length and text[i + 1] == QUOTE:
                    field.append(QUOTE)
                    i += 2
                    continue
                in_quotes = False
            else:
                field.append(char)
            i += 1
            continue

        if char == QUOTE and at_field_start:
            in_quotes = True
            at_field_start = False
        elif char == DELIMITER:
            row.append("".join(field))
            field = []
            at_field_start = True
        elif char in "\r\n":
            if char == "\r" and i + 1 < length and text[i + 1] == "\n":
                i += 1
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
            at_field_start = True
        else:
            field.append(char)
            at_field_start = False
        i += 1

    if field or row or not at_field_start:
        row.append("".join(field))
        rows.append(row)

    while rows and rows[-1] == [""]:
        rows.pop()
    return rows
