"""
reporting/csv_parser.py

Line-oriented CSV splitting for conversion exports.

The exports are parsed one physical line at a time: a quoted field never
spans a line break, so the whole text is split on newlines first and each
line is tokenised independently.
"""

from __future__ import annotations

import re

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(csv_text: str) -> list[str]:
    """
    Split *csv_text* into lines, dropping blank and whitespace-only lines.
    """

    return [line for line in _LINE_BREAK.split(csv_text) if line.strip()]


def parse_csv_line(line: str) -> list[str]:
    """
    Split one line into raw field strings.

    Commas inside a double-quoted region are literal, ``""`` inside a
    quoted region becomes a single quote, and an unterminated quote simply
    runs to the end of the line. Fields are not trimmed.
    """

    fields: list[str] = []
    value: list[str] = []
    in_quotes = False
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if char == '"':
            if in_quotes and index + 1 < length and line[index + 1] == '"':
                value.append('"')
                index += 2
                continue
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(value))
            value = []
        else:
            value.append(char)
        index += 1

    fields.append("".join(value))
    return fields


def parse_header(line: str) -> list[str]:
    """Parse the header line with every column name trimmed."""

    return [name.strip() for name in parse_csv_line(line)]
