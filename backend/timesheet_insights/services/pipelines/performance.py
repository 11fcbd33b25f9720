from __future__ import annotations

from timesheet_insights.core.config import settings
from timesheet_insights.core.errors import RowRejected
from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.records import PerformanceRecord
from timesheet_insights.services.columns import ColumnMap, FieldSpec, resolve_fixed
from timesheet_insights.services.parsers import parse_brazilian_number, time_to_seconds
from timesheet_insights.services.pipelines.base import MetricSpec, PipelineSpec


MIN_CELLS = 12

COLUMNS: dict[str, FieldSpec] = {
    "period": FieldSpec(index=0),
    "name": FieldSpec(index=1, required=True),
    "leader_id": FieldSpec(index=2),
    "target_qty": FieldSpec(index=3),
    "actual_qty": FieldSpec(index=7),
    "processing_time": FieldSpec(index=11),
    "unit_count": FieldSpec(index=18),
}


def is_indirect(processing_time_seconds: int, unit_count: float) -> bool:
    return processing_time_seconds >= settings.indirect_min_seconds and unit_count == 0


def is_offender(processing_time_seconds: int, actual_qty: float, target_qty: float, unit_count: float) -> bool:
    return (
        processing_time_seconds >= settings.indirect_min_seconds
        and actual_qty < target_qty
        and not is_indirect(processing_time_seconds, unit_count)
    )


def resolve_columns(header: list[str]) -> ColumnMap:
    return resolve_fixed(ReportKind.performance.value, COLUMNS, MIN_CELLS)


def build_record(index: int, cells: list[str], columns: ColumnMap) -> PerformanceRecord:
    if len(cells) < columns.min_cells:
        raise RowRejected(f"row {index} has {len(cells)} cell(s), expected at least {columns.min_cells}")

    processing_time_raw = columns.cell(cells, "processing_time")
    processing_time_seconds = time_to_seconds(processing_time_raw)
    target_qty = parse_brazilian_number(columns.cell(cells, "target_qty"))
    actual_qty = parse_brazilian_number(columns.cell(cells, "actual_qty"))
    # Older exports stop before the units column and carry it last.
    units_raw = columns.cell(cells, "unit_count") or cells[-1]
    unit_count = parse_brazilian_number(units_raw)

    return PerformanceRecord(
        id=index,
        period=columns.cell(cells, "period"),
        name=columns.cell(cells, "name"),
        leader_id=columns.cell(cells, "leader_id"),
        target_qty=target_qty,
        actual_qty=actual_qty,
        processing_time_raw=processing_time_raw,
        processing_time_seconds=processing_time_seconds,
        unit_count=unit_count,
        is_indirect=is_indirect(processing_time_seconds, unit_count),
        is_offender=is_offender(processing_time_seconds, actual_qty, target_qty, unit_count),
    )


PIPELINE = PipelineSpec(
    kind=ReportKind.performance,
    record_type=PerformanceRecord,
    resolve_columns=resolve_columns,
    build_record=build_record,
    rules={"offender": lambda record: record.is_offender},
    metrics={
        "processing_time": MetricSpec(
            name="processing_time",
            label="Processing time",
            seconds_field="processing_time_seconds",
        ),
    },
    default_metric="processing_time",
    averages={"processing_time": "processing_time_seconds"},
    excluded=lambda record: record.is_indirect,
    tracks_streaks=True,
)
