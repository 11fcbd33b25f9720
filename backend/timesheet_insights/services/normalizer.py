from __future__ import annotations

import re

# a comma splits only when an even number of quotes follows it on the line
_CELL_SEPARATOR = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')


def normalize_cell(value: str | None) -> str:
    if value is None:
        return ""
    text = value.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.strip()


def split_lines(text: str) -> list[str]:
    return [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]


def split_cells(line: str) -> list[str]:
    """Split one CSV line on commas outside quoted spans.

    Quoted spans may start anywhere in a cell, so ``x "y, z",w`` is two cells.
    """
    return [normalize_cell(cell) for cell in _CELL_SEPARATOR.split(line)]


def load_rows(text: str) -> list[list[str]]:
    return [split_cells(line) for line in split_lines(text)]
