from __future__ import annotations

from datetime import datetime

from timesheet_insights.core.config import settings
from timesheet_insights.core.errors import RowRejected
from timesheet_insights.schemas.common import ExitReason, ReportKind
from timesheet_insights.schemas.records import PunctualityRecord
from timesheet_insights.services.columns import ColumnMap, FieldSpec, resolve_fixed
from timesheet_insights.services.parsers import (
    difference_in_minutes,
    difference_in_seconds,
    parse_date,
    time_to_seconds,
)
from timesheet_insights.services.pipelines.base import MetricSpec, OffenderOrder, PipelineSpec


MIN_CELLS = 12

COLUMNS: dict[str, FieldSpec] = {
    "period": FieldSpec(index=0),
    "employee_id": FieldSpec(index=1),
    "name": FieldSpec(index=2, required=True),
    "leader_id": FieldSpec(index=3),
    "clock_in": FieldSpec(index=6),
    "first_scan": FieldSpec(index=8),
    "first_scan_latency": FieldSpec(index=11),
    "last_scan": FieldSpec(index=17),
    "target_exit": FieldSpec(index=19),
    "clock_out": FieldSpec(index=20),
}


def is_late_start(first_scan_latency_seconds: int) -> bool:
    return first_scan_latency_seconds > settings.late_start_max_seconds


def classify_exit(
    last_scan: datetime | None,
    target_exit: datetime | None,
    clock_out: datetime | None,
) -> tuple[bool, ExitReason | None]:
    """Evaluate the end-of-shift rule.

    Stopping more than the early-stop grace before the target exit wins over
    a slow exit. The rule is skipped when the last scan or the target exit
    is missing.
    """
    early_delta = difference_in_seconds(target_exit, last_scan)
    if early_delta is None:
        return False, None
    if early_delta > settings.early_stop_max_seconds:
        return True, ExitReason.stopped_early
    exit_lag_minutes = difference_in_minutes(clock_out, last_scan)
    if exit_lag_minutes is not None and exit_lag_minutes > settings.slow_exit_max_minutes:
        return True, ExitReason.slow_to_leave
    return False, None


def resolve_columns(header: list[str]) -> ColumnMap:
    return resolve_fixed(ReportKind.punctuality.value, COLUMNS, MIN_CELLS)


def build_record(index: int, cells: list[str], columns: ColumnMap) -> PunctualityRecord:
    if len(cells) < columns.min_cells:
        raise RowRejected(f"row {index} has {len(cells)} cell(s), expected at least {columns.min_cells}")

    latency_raw = columns.cell(cells, "first_scan_latency")
    latency_seconds = time_to_seconds(latency_raw)

    last_scan_raw = columns.cell(cells, "last_scan")
    target_exit_raw = columns.cell(cells, "target_exit")
    clock_out_raw = columns.cell(cells, "clock_out")
    last_scan = parse_date(last_scan_raw)
    target_exit = parse_date(target_exit_raw)
    clock_out = parse_date(clock_out_raw)
    is_exit_offender, exit_reason = classify_exit(last_scan, target_exit, clock_out)

    return PunctualityRecord(
        id=index,
        period=columns.cell(cells, "period"),
        employee_id=columns.cell(cells, "employee_id"),
        name=columns.cell(cells, "name"),
        leader_id=columns.cell(cells, "leader_id"),
        clock_in=columns.cell(cells, "clock_in"),
        first_scan=columns.cell(cells, "first_scan"),
        first_scan_latency_raw=latency_raw,
        first_scan_latency_seconds=latency_seconds,
        is_late_start_offender=is_late_start(latency_seconds),
        last_scan=last_scan_raw,
        target_exit=target_exit_raw,
        clock_out=clock_out_raw,
        exit_delta_seconds=difference_in_seconds(target_exit, last_scan),
        exit_lag_seconds=difference_in_seconds(clock_out, last_scan),
        is_exit_offender=is_exit_offender,
        exit_reason=exit_reason,
    )


PIPELINE = PipelineSpec(
    kind=ReportKind.punctuality,
    record_type=PunctualityRecord,
    resolve_columns=resolve_columns,
    build_record=build_record,
    rules={
        "late_start": lambda record: record.is_late_start_offender,
        "exit": lambda record: record.is_exit_offender,
    },
    metrics={
        "first_scan_latency": MetricSpec(
            name="first_scan_latency",
            label="Time to first scan",
            seconds_field="first_scan_latency_seconds",
        ),
        "exit_delta": MetricSpec(
            name="exit_delta",
            label="Target exit minus last scan",
            seconds_field="exit_delta_seconds",
        ),
        "exit_lag": MetricSpec(
            name="exit_lag",
            label="Clock out minus last scan",
            seconds_field="exit_lag_seconds",
        ),
    },
    default_metric="first_scan_latency",
    averages={
        "first_scan_latency": "first_scan_latency_seconds",
        "exit_delta": "exit_delta_seconds",
        "exit_lag": "exit_lag_seconds",
    },
    offender_order={"late_start": OffenderOrder("first_scan_latency_seconds")},
)
