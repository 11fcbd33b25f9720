from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from timesheet_insights.core.config import settings
from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.records import AnyRecord


SortTarget = Literal["records", "collaborators", "leaders", "matrix"]


class CollaboratorStat(BaseModel):
    name: str
    leader_id: str = ""
    occurrence_count: int
    offense_count: int = 0
    offense_rate: float = 0.0
    max_streak: int = 0
    averages: dict[str, float | None] = Field(default_factory=dict)


class LeaderStat(BaseModel):
    leader_id: str
    total_rows: int
    total_people: int
    unique_offenders: int
    total_impact: int
    offense_percentage: float
    averages: dict[str, float | None] = Field(default_factory=dict)


class DailyMatrixRow(BaseModel):
    name: str
    leader_id: str = ""
    values: dict[str, str] = Field(default_factory=dict)
    values_seconds: dict[str, float] = Field(default_factory=dict)
    average_seconds: float | None = None
    average_formatted: str


class DailyMatrix(BaseModel):
    metric: str
    periods: list[str] = Field(default_factory=list)
    rows: list[DailyMatrixRow] = Field(default_factory=list)


class SortState(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str | None = None
    descending: bool = False

    def toggle(self, key: str) -> SortState:
        if key == self.key:
            return SortState(key=key, descending=not self.descending)
        return SortState(key=key, descending=False)


class ReportQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    leader: str | None = Field(default=settings.all_sentinel, description="Leader id, or the 'all' sentinel.")
    collaborator: str | None = Field(default=settings.all_sentinel, description="Collaborator name, or the 'all' sentinel.")
    period: str | None = Field(default=settings.all_sentinel, description="Period value, or the 'all' sentinel.")
    metric: str | None = Field(default=None, description="Daily matrix metric; the pipeline default when unset.")
    offense_rule: str | None = Field(
        default=None,
        description="Restrict offense accounting in rollups to one rule; any rule when unset.",
    )
    sort_target: SortTarget = "collaborators"
    sort_key: str | None = None
    descending: bool = False


class ParsedReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ReportKind
    records: tuple[AnyRecord, ...]
    total_rows: int
    dropped_rows: int = 0


class ReportResult(BaseModel):
    kind: ReportKind | None
    status: Literal["ok", "error"] = "ok"
    error: str | None = None
    error_type: Literal["structural", "query", "internal"] | None = None
    query: ReportQuery = Field(default_factory=ReportQuery)
    total_rows: int = 0
    dropped_rows: int = 0
    records: list[AnyRecord] = Field(default_factory=list)
    offenders: dict[str, list[AnyRecord]] = Field(default_factory=dict)
    indirects: list[AnyRecord] = Field(default_factory=list)
    collaborators: list[CollaboratorStat] = Field(default_factory=list)
    offender_ranking: list[CollaboratorStat] = Field(default_factory=list)
    leaders: list[LeaderStat] = Field(default_factory=list)
    top_leaders: list[LeaderStat] = Field(default_factory=list)
    matrix: DailyMatrix | None = None
    available_leaders: list[str] = Field(default_factory=list)
    available_collaborators: list[str] = Field(default_factory=list)
    available_periods: list[str] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    text: str = Field(..., description="Decoded CSV export, header row first.")
    query: ReportQuery = Field(default_factory=ReportQuery)


class MetricInfo(BaseModel):
    name: str
    label: str


class PipelineInfo(BaseModel):
    kind: ReportKind
    rules: list[str]
    metrics: list[MetricInfo]
    default_metric: str
