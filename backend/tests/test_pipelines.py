from datetime import datetime

import pytest
from pydantic import ValidationError

from timesheet_insights.core.errors import RowRejected
from timesheet_insights.schemas.common import ExitReason
from timesheet_insights.services.pipelines import performance, punctuality, turnstile


def _performance_cells(proc: str, target: str = "100", actual: str = "50", units: str = "10") -> list[str]:
    cells = [""] * 19
    cells[0] = "2025-11-22"
    cells[1] = "Ana"
    cells[2] = "L1"
    cells[3] = target
    cells[7] = actual
    cells[11] = proc
    cells[18] = units
    return cells


def _punctuality_cells(latency: str, last_scan: str, target_exit: str, clock_out: str) -> list[str]:
    cells = [""] * 21
    cells[0] = "2025-11-22"
    cells[1] = "123"
    cells[2] = "Bruno"
    cells[3] = "L2"
    cells[6] = "2025-11-22 08:00:00"
    cells[8] = "2025-11-22 08:10:00"
    cells[11] = latency
    cells[17] = last_scan
    cells[19] = target_exit
    cells[20] = clock_out
    return cells


def test_indirect_time_is_not_an_offense() -> None:
    columns = performance.resolve_columns([])
    record = performance.build_record(0, _performance_cells("1:00:00", units="0"), columns)
    assert record.processing_time_seconds == 3600
    assert record.is_indirect is True
    assert record.is_offender is False


def test_performance_offender_below_target() -> None:
    columns = performance.resolve_columns([])
    record = performance.build_record(3, _performance_cells("1:30", target="1.200,5", actual="800"), columns)
    assert record.id == 3
    assert record.target_qty == pytest.approx(1200.5)
    assert record.is_indirect is False
    assert record.is_offender is True


def test_performance_short_processing_time_is_not_an_offense() -> None:
    columns = performance.resolve_columns([])
    record = performance.build_record(0, _performance_cells("0:59:59"), columns)
    assert record.is_offender is False


def test_performance_units_fall_back_to_last_cell() -> None:
    columns = performance.resolve_columns([])
    cells = _performance_cells("2:00")[:13]
    cells[12] = "0"
    record = performance.build_record(0, cells, columns)
    assert record.unit_count == 0
    assert record.is_indirect is True


def test_performance_row_under_gate_is_rejected() -> None:
    columns = performance.resolve_columns([])
    with pytest.raises(RowRejected):
        performance.build_record(0, ["2025-11-22", "Ana", "L1"], columns)


def test_records_are_immutable() -> None:
    record = performance.build_record(0, _performance_cells("1:30"), performance.resolve_columns([]))
    with pytest.raises(ValidationError):
        record.is_offender = False


@pytest.mark.parametrize(("latency", "expected"), [("0:15:01", True), ("0:15:00", False)])
def test_late_start_threshold(latency: str, expected: bool) -> None:
    columns = punctuality.resolve_columns([])
    record = punctuality.build_record(0, _punctuality_cells(latency, "", "", ""), columns)
    assert record.first_scan_latency_seconds in (900, 901)
    assert record.is_late_start_offender is expected


def test_exit_stopped_early() -> None:
    columns = punctuality.resolve_columns([])
    cells = _punctuality_cells("0:05", "2025-11-22 16:50:00", "2025-11-22 17:00:00", "2025-11-22 17:30:00")
    record = punctuality.build_record(0, cells, columns)
    assert record.exit_delta_seconds == 600
    assert record.is_exit_offender is True
    assert record.exit_reason == ExitReason.stopped_early


def test_exit_slow_to_leave() -> None:
    columns = punctuality.resolve_columns([])
    cells = _punctuality_cells("0:05", "2025-11-22 17:00:00", "2025-11-22 17:00:00", "2025-11-22 17:06:00")
    record = punctuality.build_record(0, cells, columns)
    assert record.exit_lag_seconds == 360
    assert record.is_exit_offender is True
    assert record.exit_reason == ExitReason.slow_to_leave


def test_exit_within_grace_periods() -> None:
    columns = punctuality.resolve_columns([])
    cells = _punctuality_cells("0:05", "2025-11-22 16:56:00", "2025-11-22 17:00:00", "2025-11-22 17:01:59")
    record = punctuality.build_record(0, cells, columns)
    assert record.is_exit_offender is False
    assert record.exit_reason is None


def test_exit_rule_suppressed_without_target() -> None:
    columns = punctuality.resolve_columns([])
    cells = _punctuality_cells("0:05", "2025-11-22 12:00:00", "sem meta", "2025-11-22 18:00:00")
    record = punctuality.build_record(0, cells, columns)
    assert record.exit_delta_seconds is None
    assert record.is_exit_offender is False


def test_classify_exit_slow_exit_uses_whole_minutes() -> None:
    last_scan = datetime(2025, 11, 22, 17, 0, 0)
    assert punctuality.classify_exit(last_scan, last_scan, datetime(2025, 11, 22, 17, 5, 59)) == (False, None)
    assert punctuality.classify_exit(last_scan, last_scan, datetime(2025, 11, 22, 17, 6, 0)) == (
        True,
        ExitReason.slow_to_leave,
    )


BREAK_HEADER = [
    "Data",
    "Matrícula",
    "Nome",
    "Líder",
    "Saída Catraca",
    "Retorno Catraca",
    "Tempo Catraca",
    "Saída Operação",
    "Retorno Operação",
]


@pytest.mark.parametrize(("duration", "expected"), [("1:00:31", True), ("1:00:30", False)])
def test_turnstile_threshold(duration: str, expected: bool) -> None:
    columns = turnstile.resolve_columns(BREAK_HEADER)
    cells = ["2025-11-22", "9", "Carla", "L3", "", "", duration, "", ""]
    record = turnstile.build_record(0, cells, columns)
    assert record.is_turnstile_offender is expected
    assert record.return_gap_seconds is None
    assert record.is_return_gap_offender is False
    assert record.is_total_interval_offender is False


def test_break_gap_and_interval_rules() -> None:
    columns = turnstile.resolve_columns(BREAK_HEADER)
    cells = [
        "2025-11-22",
        "9",
        "Carla",
        "L3",
        "2025-11-22 12:00:00",
        "2025-11-22 13:00:00",
        "1:00:00",
        "2025-11-22 11:55:00",
        "2025-11-22 13:11:00",
    ]
    record = turnstile.build_record(0, cells, columns)
    assert record.return_gap_seconds == 660
    assert record.is_return_gap_offender is True
    assert record.total_interval_seconds == 4560
    assert record.is_total_interval_offender is True
    assert record.is_turnstile_offender is False


def test_break_row_under_gate_is_rejected() -> None:
    columns = turnstile.resolve_columns(BREAK_HEADER)
    with pytest.raises(RowRejected):
        turnstile.build_record(0, ["2025-11-22", "9", "Carla"], columns)
