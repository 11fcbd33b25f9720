from __future__ import annotations

from timesheet_insights.core.errors import EmptyReportError, InvalidQueryError, ReportError, ReportParseError, RowRejected
from timesheet_insights.core.logging import get_logger
from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.reports import ParsedReport, ReportQuery, ReportResult
from timesheet_insights.services.aggregation import (
    build_daily_matrix,
    collaborator_rollup,
    leader_rollup,
    offender_subsets,
    rank_leaders,
    rank_offenders,
    sorted_periods,
    top_leaders,
)
from timesheet_insights.services.normalizer import load_rows
from timesheet_insights.services.pipelines.registry import get_pipeline
from timesheet_insights.services.query import filter_items, is_all, sort_items

logger = get_logger(__name__)

GENERIC_FAILURE = "Unexpected failure while processing the report."


def parse_report(text: str, kind: ReportKind | str) -> ParsedReport:
    """Parse a decoded export into immutable records.

    Row 0 is the header. Rows failing the pipeline's column gate are counted
    and skipped; an unresolved required column or a parse without a single
    usable row raises a ``ReportParseError``.
    """
    pipeline = get_pipeline(kind)
    rows = load_rows(text)
    if not rows:
        raise EmptyReportError(pipeline.kind.value)

    header, data_rows = rows[0], rows[1:]
    columns = pipeline.resolve_columns(header)

    records = []
    dropped = 0
    for index, cells in enumerate(data_rows):
        try:
            records.append(pipeline.build_record(index, cells, columns))
        except RowRejected as exc:
            dropped += 1
            logger.debug("Skipping %s row: %s", pipeline.kind.value, exc)

    if not records:
        raise EmptyReportError(pipeline.kind.value, dropped)

    logger.info(
        "Parsed %d %s record(s) from %d data row(s); %d dropped.",
        len(records),
        pipeline.kind.value,
        len(data_rows),
        dropped,
    )
    return ParsedReport(kind=pipeline.kind, records=tuple(records), total_rows=len(data_rows), dropped_rows=dropped)


def aggregate_report(parsed: ParsedReport, query: ReportQuery | None = None) -> ReportResult:
    """Recompute every view of ``parsed`` for ``query``; nothing is cached."""
    query = query or ReportQuery()
    pipeline = get_pipeline(parsed.kind)

    metric_name = query.metric or pipeline.default_metric
    if metric_name not in pipeline.metrics:
        raise InvalidQueryError(f"Metric '{metric_name}' is not available for the {pipeline.kind.value} report.")
    if query.offense_rule is not None and query.offense_rule not in pipeline.rules:
        raise InvalidQueryError(f"Rule '{query.offense_rule}' is not available for the {pipeline.kind.value} report.")

    records = filter_items(parsed.records, query)
    collaborators = collaborator_rollup(records, pipeline, query.offense_rule)
    leaders = rank_leaders(leader_rollup(records, pipeline, query.offense_rule))
    worst_leaders = top_leaders(leaders)
    matrix = build_daily_matrix(records, pipeline, pipeline.metrics[metric_name])

    if query.sort_key:
        if query.sort_target == "records":
            records = sort_items(records, query.sort_key, query.descending)
        elif query.sort_target == "collaborators":
            collaborators = sort_items(collaborators, query.sort_key, query.descending)
        elif query.sort_target == "leaders":
            leaders = sort_items(leaders, query.sort_key, query.descending)
        else:
            matrix = matrix.model_copy(update={"rows": sort_items(matrix.rows, query.sort_key, query.descending)})

    leader_scope = [
        record for record in parsed.records if is_all(query.leader) or record.leader_id == query.leader
    ]
    return ReportResult(
        kind=pipeline.kind,
        query=query,
        total_rows=parsed.total_rows,
        dropped_rows=parsed.dropped_rows,
        records=records,
        offenders=offender_subsets(records, pipeline),
        indirects=[record for record in records if pipeline.is_excluded(record)],
        collaborators=collaborators,
        offender_ranking=rank_offenders(collaborators),
        leaders=leaders,
        top_leaders=worst_leaders,
        matrix=matrix,
        available_leaders=sorted({record.leader_id for record in parsed.records if record.leader_id}),
        available_collaborators=sorted({record.name for record in leader_scope if record.name}),
        available_periods=sorted_periods(parsed.records),
    )


def analyze_report(text: str, kind: ReportKind | str, query: ReportQuery | None = None) -> ReportResult:
    """Parse and aggregate in one call, reporting failures on the result."""
    query = query or ReportQuery()
    try:
        return aggregate_report(parse_report(text, kind), query)
    except ReportError as exc:
        logger.warning("Report analysis failed: %s", exc)
        return _failed(kind, query, str(exc), "structural" if isinstance(exc, ReportParseError) else "query")
    except Exception:
        logger.exception("Unexpected error while analyzing a %s report.", kind)
        return _failed(kind, query, GENERIC_FAILURE, "internal")


def _failed(kind: ReportKind | str, query: ReportQuery, message: str, error_type: str) -> ReportResult:
    try:
        report_kind: ReportKind | None = ReportKind(kind)
    except ValueError:
        report_kind = None
    return ReportResult(kind=report_kind, status="error", error=message, error_type=error_type, query=query)
