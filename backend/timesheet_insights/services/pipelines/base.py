from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping

from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.records import BaseRecord
from timesheet_insights.services.columns import ColumnMap


@dataclass(frozen=True)
class MetricSpec:
    name: str
    label: str
    seconds_field: str


@dataclass(frozen=True)
class OffenderOrder:
    field: str
    descending: bool = True


@dataclass(frozen=True)
class PipelineSpec:
    kind: ReportKind
    record_type: type[BaseRecord]
    resolve_columns: Callable[[list[str]], ColumnMap]
    build_record: Callable[[int, list[str], ColumnMap], BaseRecord]
    rules: Mapping[str, Callable[[BaseRecord], bool]]
    metrics: Mapping[str, MetricSpec]
    default_metric: str
    averages: Mapping[str, str] = field(default_factory=dict)
    offender_order: Mapping[str, OffenderOrder] = field(default_factory=dict)
    excluded: Callable[[BaseRecord], bool] | None = None
    tracks_streaks: bool = False

    def is_excluded(self, record: BaseRecord) -> bool:
        return bool(self.excluded and self.excluded(record))

    def is_offense(self, record: BaseRecord, rule: str | None = None) -> bool:
        if self.is_excluded(record):
            return False
        if rule is not None:
            return self.rules[rule](record)
        return any(check(record) for check in self.rules.values())
