from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Mapping

from timesheet_insights.core.errors import ColumnResolutionError


@dataclass(frozen=True)
class FieldSpec:
    index: int | None = None
    keywords: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    required: bool = False


@dataclass(frozen=True)
class ColumnMap:
    kind: str
    indices: Mapping[str, int] = field(default_factory=dict)
    min_cells: int = 0

    def has(self, name: str) -> bool:
        return name in self.indices

    def cell(self, cells: list[str], name: str, default: str = "") -> str:
        index = self.indices.get(name)
        if index is None or index >= len(cells):
            return default
        return cells[index]


def normalize_header(value: object) -> str:
    text = unicodedata.normalize("NFKD", str(value or ""))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return " ".join(text.upper().split())


def _header_words(header: str) -> set[str]:
    return {word for word in re.split(r"[^A-Z0-9]+", header) if word}


def _keyword_matches(keyword: str, words: set[str]) -> bool:
    return all(part in words for part in keyword.split())


def resolve_fixed(kind: str, table: Mapping[str, FieldSpec], min_cells: int) -> ColumnMap:
    indices = {name: spec.index for name, spec in table.items() if spec.index is not None}
    return ColumnMap(kind=kind, indices=indices, min_cells=min_cells)


def resolve_by_header(kind: str, header: list[str], table: Mapping[str, FieldSpec]) -> ColumnMap:
    """Bind each field to the first header matching one of its keywords.

    Keywords are tried in priority order and match whole words of the
    upper-cased, accent-free header. A header containing any of the field's
    excluded substrings is skipped, and a column is bound to one field only.
    """
    normalized = [normalize_header(cell) for cell in header]
    words = [_header_words(cell) for cell in normalized]
    claimed: set[int] = set()
    indices: dict[str, int] = {}

    for name, spec in table.items():
        for keyword in spec.keywords:
            match = next(
                (
                    position
                    for position, text in enumerate(normalized)
                    if position not in claimed
                    and _keyword_matches(keyword, words[position])
                    and not any(excluded in text for excluded in spec.excludes)
                ),
                None,
            )
            if match is not None:
                indices[name] = match
                claimed.add(match)
                break

    missing = [name for name, spec in table.items() if spec.required and name not in indices]
    if missing:
        raise ColumnResolutionError(kind, missing)

    required_positions = [indices[name] for name, spec in table.items() if spec.required]
    min_cells = max(required_positions) + 1 if required_positions else 1
    return ColumnMap(kind=kind, indices=indices, min_cells=min_cells)
