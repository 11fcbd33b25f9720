from __future__ import annotations

from timesheet_insights.core.config import settings
from timesheet_insights.core.errors import RowRejected
from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.records import BreakRecord
from timesheet_insights.services.columns import ColumnMap, FieldSpec, resolve_by_header
from timesheet_insights.services.parsers import difference_in_seconds, parse_date, time_to_seconds
from timesheet_insights.services.pipelines.base import MetricSpec, OffenderOrder, PipelineSpec


# Order matters: operation columns claim their headers before the looser
# turnstile keywords ("SAIDA", "RETORNO") get a chance to.
COLUMNS: dict[str, FieldSpec] = {
    "name": FieldSpec(
        keywords=("NOME", "COLABORADOR", "FUNCIONARIO"),
        excludes=("LIDER", "LEADER", "GESTOR", "SUPERVISOR"),
        required=True,
    ),
    "leader_id": FieldSpec(keywords=("TEAM LEADER", "LIDER", "LEADER", "GESTOR", "SUPERVISOR")),
    "employee_id": FieldSpec(keywords=("MATRICULA", "ID")),
    "operation_exit": FieldSpec(keywords=("SAIDA OPERACAO", "ULTIMO BIP")),
    "operation_return": FieldSpec(keywords=("RETORNO OPERACAO", "PRIMEIRO BIP")),
    "turnstile_duration": FieldSpec(
        keywords=("TEMPO CATRACA", "DURACAO CATRACA", "TEMPO INTERVALO", "TEMPO", "DURACAO"),
        excludes=("OPERACAO", "TOTAL", "RETORNO", "BIP"),
        required=True,
    ),
    "turnstile_exit": FieldSpec(keywords=("SAIDA CATRACA", "SAIDA"), excludes=("OPERACAO", "TEMPO", "BIP")),
    "turnstile_return": FieldSpec(
        keywords=("RETORNO CATRACA", "ENTRADA CATRACA", "RETORNO"),
        excludes=("OPERACAO", "TEMPO", "BIP"),
    ),
    "period": FieldSpec(keywords=("PERIODO", "DATA", "DIA"), excludes=("SAIDA", "RETORNO", "HORA")),
}


def is_turnstile_offender(turnstile_duration_seconds: int) -> bool:
    return turnstile_duration_seconds > settings.turnstile_max_seconds


def is_return_gap_offender(return_gap_seconds: int | None) -> bool:
    return return_gap_seconds is not None and return_gap_seconds > settings.return_gap_max_seconds


def is_total_interval_offender(total_interval_seconds: int | None) -> bool:
    return total_interval_seconds is not None and total_interval_seconds > settings.total_interval_max_seconds


def resolve_columns(header: list[str]) -> ColumnMap:
    return resolve_by_header(ReportKind.breaks.value, header, COLUMNS)


def build_record(index: int, cells: list[str], columns: ColumnMap) -> BreakRecord:
    if len(cells) < columns.min_cells:
        raise RowRejected(f"row {index} has {len(cells)} cell(s), expected at least {columns.min_cells}")

    duration_raw = columns.cell(cells, "turnstile_duration")
    duration_seconds = time_to_seconds(duration_raw)

    turnstile_exit_raw = columns.cell(cells, "turnstile_exit")
    turnstile_return_raw = columns.cell(cells, "turnstile_return")
    operation_exit_raw = columns.cell(cells, "operation_exit")
    operation_return_raw = columns.cell(cells, "operation_return")
    turnstile_return = parse_date(turnstile_return_raw)
    operation_exit = parse_date(operation_exit_raw)
    operation_return = parse_date(operation_return_raw)

    return_gap = difference_in_seconds(operation_return, turnstile_return)
    total_interval = difference_in_seconds(operation_return, operation_exit)

    return BreakRecord(
        id=index,
        period=columns.cell(cells, "period"),
        employee_id=columns.cell(cells, "employee_id"),
        name=columns.cell(cells, "name"),
        leader_id=columns.cell(cells, "leader_id"),
        turnstile_duration_raw=duration_raw,
        turnstile_duration_seconds=duration_seconds,
        turnstile_exit=turnstile_exit_raw,
        turnstile_return=turnstile_return_raw,
        is_turnstile_offender=is_turnstile_offender(duration_seconds),
        operation_exit=operation_exit_raw,
        operation_return=operation_return_raw,
        return_gap_seconds=return_gap,
        is_return_gap_offender=is_return_gap_offender(return_gap),
        total_interval_seconds=total_interval,
        is_total_interval_offender=is_total_interval_offender(total_interval),
    )


PIPELINE = PipelineSpec(
    kind=ReportKind.breaks,
    record_type=BreakRecord,
    resolve_columns=resolve_columns,
    build_record=build_record,
    rules={
        "turnstile": lambda record: record.is_turnstile_offender,
        "return_gap": lambda record: record.is_return_gap_offender,
        "total_interval": lambda record: record.is_total_interval_offender,
    },
    metrics={
        "turnstile_duration": MetricSpec(
            name="turnstile_duration",
            label="Turnstile break duration",
            seconds_field="turnstile_duration_seconds",
        ),
        "return_gap": MetricSpec(
            name="return_gap",
            label="Turnstile return to first scan",
            seconds_field="return_gap_seconds",
        ),
        "total_interval": MetricSpec(
            name="total_interval",
            label="Operation exit to operation return",
            seconds_field="total_interval_seconds",
        ),
    },
    default_metric="turnstile_duration",
    averages={
        "turnstile_duration": "turnstile_duration_seconds",
        "return_gap": "return_gap_seconds",
        "total_interval": "total_interval_seconds",
    },
    offender_order={"turnstile": OffenderOrder("turnstile_duration_seconds")},
)
