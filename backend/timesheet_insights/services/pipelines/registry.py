from __future__ import annotations

from timesheet_insights.core.errors import InvalidQueryError
from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.reports import MetricInfo, PipelineInfo
from timesheet_insights.services.pipelines import performance, punctuality, turnstile
from timesheet_insights.services.pipelines.base import PipelineSpec


PIPELINES: dict[ReportKind, PipelineSpec] = {
    ReportKind.performance: performance.PIPELINE,
    ReportKind.punctuality: punctuality.PIPELINE,
    ReportKind.breaks: turnstile.PIPELINE,
}


def get_pipeline(kind: ReportKind | str) -> PipelineSpec:
    try:
        return PIPELINES[ReportKind(kind)]
    except ValueError as exc:
        raise InvalidQueryError(f"Unknown report kind '{kind}'.") from exc


def describe_pipelines() -> list[PipelineInfo]:
    return [
        PipelineInfo(
            kind=spec.kind,
            rules=list(spec.rules),
            metrics=[MetricInfo(name=metric.name, label=metric.label) for metric in spec.metrics.values()],
            default_metric=spec.default_metric,
        )
        for spec in PIPELINES.values()
    ]
