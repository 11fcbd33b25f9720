from __future__ import annotations

from datetime import datetime
from typing import Sequence

import pandas as pd

from timesheet_insights.core.config import settings
from timesheet_insights.schemas.records import BaseRecord
from timesheet_insights.schemas.reports import CollaboratorStat, DailyMatrix, DailyMatrixRow, LeaderStat
from timesheet_insights.services.parsers import parse_date, seconds_to_time
from timesheet_insights.services.pipelines.base import MetricSpec, PipelineSpec


def _build_frame(
    records: Sequence[BaseRecord],
    pipeline: PipelineSpec,
    fields: Sequence[str],
    offense_rule: str | None = None,
) -> pd.DataFrame:
    rows = []
    for record in records:
        row = {name: getattr(record, name, None) for name in ("name", "leader_id", "period", *fields)}
        row["offense"] = pipeline.is_offense(record, offense_rule)
        rows.append(row)
    frame = pd.DataFrame(rows, columns=["name", "leader_id", "period", *fields, "offense"])
    for name in fields:
        frame[name] = pd.to_numeric(frame[name], errors="coerce")
    frame["offense"] = frame["offense"].astype(bool)
    frame["leader_id"] = frame["leader_id"].fillna("").astype(str).str.strip()
    return frame


def _mean_or_none(series: pd.Series) -> float | None:
    defined = series.dropna()
    if defined.empty:
        return None
    return round(float(defined.mean()), 2)


def _averages(group: pd.DataFrame, pipeline: PipelineSpec) -> dict[str, float | None]:
    return {name: _mean_or_none(group[field]) for name, field in pipeline.averages.items()}


def max_offense_streak(flags: Sequence[bool]) -> int:
    """Longest run of consecutive offending rows, in encounter order."""
    longest = 0
    current = 0
    for flag in flags:
        if flag:
            current += 1
        else:
            longest = max(longest, current)
            current = 0
    return max(longest, current)


def active_records(records: Sequence[BaseRecord], pipeline: PipelineSpec) -> list[BaseRecord]:
    return [record for record in records if not pipeline.is_excluded(record)]


def collaborator_rollup(
    records: Sequence[BaseRecord],
    pipeline: PipelineSpec,
    offense_rule: str | None = None,
) -> list[CollaboratorStat]:
    frame = _build_frame(active_records(records, pipeline), pipeline, list(pipeline.averages.values()), offense_rule)
    stats: list[CollaboratorStat] = []
    for name, group in frame.groupby("name", sort=False):
        occurrences = int(len(group))
        offenses = int(group["offense"].sum())
        stats.append(
            CollaboratorStat(
                name=str(name),
                leader_id=str(group["leader_id"].iloc[0]),
                occurrence_count=occurrences,
                offense_count=offenses,
                offense_rate=round(offenses / occurrences * 100, 2) if occurrences else 0.0,
                max_streak=max_offense_streak(group["offense"].tolist()) if pipeline.tracks_streaks else 0,
                averages=_averages(group, pipeline),
            )
        )
    return stats


def rank_offenders(stats: Sequence[CollaboratorStat]) -> list[CollaboratorStat]:
    offenders = [stat for stat in stats if stat.offense_count > 0]
    return sorted(offenders, key=lambda stat: (-stat.max_streak, -stat.offense_count))


def leader_rollup(
    records: Sequence[BaseRecord],
    pipeline: PipelineSpec,
    offense_rule: str | None = None,
) -> list[LeaderStat]:
    frame = _build_frame(active_records(records, pipeline), pipeline, list(pipeline.averages.values()), offense_rule)
    frame = frame[frame["leader_id"] != ""]
    stats: list[LeaderStat] = []
    for leader_id, group in frame.groupby("leader_id", sort=False):
        people = int(group["name"].nunique())
        offenders = int(group.loc[group["offense"], "name"].nunique())
        stats.append(
            LeaderStat(
                leader_id=str(leader_id),
                total_rows=int(len(group)),
                total_people=people,
                unique_offenders=offenders,
                total_impact=int(group["offense"].sum()),
                offense_percentage=round(offenders / people * 100, 2) if people else 0.0,
                averages=_averages(group, pipeline),
            )
        )
    return stats


def rank_leaders(stats: Sequence[LeaderStat]) -> list[LeaderStat]:
    return sorted(stats, key=lambda stat: -stat.unique_offenders)


def top_leaders(stats: Sequence[LeaderStat], limit: int = 3) -> list[LeaderStat]:
    """Leaders with the most offending rows first; ties keep their input order."""
    impacted = [stat for stat in stats if stat.total_impact > 0]
    return sorted(impacted, key=lambda stat: -stat.total_impact)[:limit]


def offender_subsets(records: Sequence[BaseRecord], pipeline: PipelineSpec) -> dict[str, list[BaseRecord]]:
    subsets: dict[str, list[BaseRecord]] = {}
    for rule in pipeline.rules:
        matched = [record for record in records if pipeline.is_offense(record, rule)]
        order = pipeline.offender_order.get(rule)
        if order is not None:
            matched.sort(key=lambda record: getattr(record, order.field) or 0, reverse=order.descending)
        subsets[rule] = matched
    return subsets


def _period_sort_key(period: str) -> tuple[int, datetime, str]:
    parsed = parse_date(period)
    if parsed is None:
        return 1, datetime.min, period
    return 0, parsed, period


def sorted_periods(records: Sequence[BaseRecord]) -> list[str]:
    periods = {record.period for record in records if record.period}
    return sorted(periods, key=_period_sort_key)


def build_daily_matrix(records: Sequence[BaseRecord], pipeline: PipelineSpec, metric: MetricSpec) -> DailyMatrix:
    """Pivot one metric into collaborator rows and period columns.

    Each cell holds the formatted metric of the last record for that
    (collaborator, period) pair; pairs without a value get the placeholder.
    The row average runs over the periods that have a value.
    """
    seconds_field = metric.seconds_field
    periods = sorted_periods(records)
    frame = _build_frame(records, pipeline, [seconds_field])
    rows: list[DailyMatrixRow] = []
    for name, group in frame.groupby("name", sort=False):
        defined = group[group[seconds_field].notna() & (group["period"] != "")]
        per_period = defined.drop_duplicates(subset="period", keep="last").set_index("period")[seconds_field]
        values = {
            period: seconds_to_time(per_period[period]) if period in per_period.index else settings.matrix_placeholder
            for period in periods
        }
        values_seconds = {str(period): float(seconds) for period, seconds in per_period.items()}
        average = float(per_period.mean()) if not per_period.empty else None
        rows.append(
            DailyMatrixRow(
                name=str(name),
                leader_id=str(group["leader_id"].iloc[0]),
                values=values,
                values_seconds=values_seconds,
                average_seconds=round(average, 2) if average is not None else None,
                average_formatted=seconds_to_time(average) if average is not None else settings.matrix_placeholder,
            )
        )
    return DailyMatrix(metric=metric.name, periods=periods, rows=rows)
