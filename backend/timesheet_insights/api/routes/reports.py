from fastapi import APIRouter, HTTPException

from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.reports import AnalyzeRequest, PipelineInfo, ReportResult
from timesheet_insights.services.engine import analyze_report
from timesheet_insights.services.pipelines.registry import describe_pipelines

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/kinds", response_model=list[PipelineInfo])
def report_kinds() -> list[PipelineInfo]:
    return describe_pipelines()


@router.post("/{kind}/analyze", response_model=ReportResult)
def analyze_report_endpoint(kind: ReportKind, payload: AnalyzeRequest) -> ReportResult:
    """
    Parse a decoded timesheet export and return its classified, ranked and pivoted views.

    **Kinds:**
    - `performance`: shift productivity; flags offenders and indirect time.
    - `punctuality`: first-scan latency and end-of-shift exits.
    - `break`: turnstile break duration, return gap and total interval.

    **Query:** `leader`, `collaborator` and `period` filter the rows (`Todos` means all),
    `metric` selects the daily matrix metric, `sort_target`/`sort_key`/`descending` order one view.
    """
    result = analyze_report(payload.text, kind, payload.query)
    if result.status == "error":
        status_code = 500 if result.error_type == "internal" else 422
        raise HTTPException(status_code=status_code, detail=result.error)
    return result
