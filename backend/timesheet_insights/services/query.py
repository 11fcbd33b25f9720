from __future__ import annotations

from typing import Any, Iterable, TypeVar

from timesheet_insights.core.config import settings
from timesheet_insights.schemas.reports import ReportQuery

T = TypeVar("T")


def is_all(value: str | None) -> bool:
    return value is None or value == "" or value == settings.all_sentinel


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def matches(item: Any, query: ReportQuery) -> bool:
    if not is_all(query.leader) and _field(item, "leader_id") != query.leader:
        return False
    if not is_all(query.collaborator) and _field(item, "name") != query.collaborator:
        return False
    if not is_all(query.period) and _field(item, "period") != query.period:
        return False
    return True


def filter_items(items: Iterable[T], query: ReportQuery) -> list[T]:
    return [item for item in items if matches(item, query)]


def resolve_sort_value(item: Any, key: str) -> Any:
    """Read ``key`` from a record or aggregate.

    ``values.<period>`` reads one cell of a daily-matrix row, preferring the
    seconds behind it over its formatted text; placeholder cells count as
    missing.
    """
    if "." in key:
        head, tail = key.split(".", 1)
        seconds = _field(item, f"{head}_seconds")
        if isinstance(seconds, dict) and tail in seconds:
            return seconds[tail]
        container = _field(item, head)
        if isinstance(container, dict):
            value = container.get(tail)
            return None if value == settings.matrix_placeholder else value
    return _field(item, key)


def _sort_token(value: Any) -> tuple[int, Any]:
    if isinstance(value, bool):
        return 0, int(value)
    if isinstance(value, (int, float)):
        return 0, float(value)
    if hasattr(value, "value") and isinstance(value.value, str):
        return 1, value.value.casefold()
    return 1, str(value).casefold()


def sort_items(items: Iterable[T], key: str | None, descending: bool = False) -> list[T]:
    """Stable sort by ``key``; items with no value for the key go last."""
    items = list(items)
    if not key:
        return items
    present = [item for item in items if resolve_sort_value(item, key) is not None]
    missing = [item for item in items if resolve_sort_value(item, key) is None]
    present.sort(key=lambda item: _sort_token(resolve_sort_value(item, key)), reverse=descending)
    return present + missing
