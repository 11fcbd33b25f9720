from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from timesheet_insights.schemas.common import ExitReason


class BaseRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Position of the row among the data rows of the export.")
    period: str = ""
    name: str
    leader_id: str = ""


class PerformanceRecord(BaseRecord):
    kind: Literal["performance"] = "performance"
    target_qty: float = 0.0
    actual_qty: float = 0.0
    processing_time_raw: str = ""
    processing_time_seconds: int = 0
    unit_count: float = 0.0
    is_indirect: bool = False
    is_offender: bool = False


class PunctualityRecord(BaseRecord):
    kind: Literal["punctuality"] = "punctuality"
    employee_id: str = ""
    clock_in: str = ""
    first_scan: str = ""
    first_scan_latency_raw: str = ""
    first_scan_latency_seconds: int = 0
    is_late_start_offender: bool = False
    last_scan: str = ""
    target_exit: str = ""
    clock_out: str = ""
    exit_delta_seconds: int | None = None
    exit_lag_seconds: int | None = None
    is_exit_offender: bool = False
    exit_reason: ExitReason | None = None


class BreakRecord(BaseRecord):
    kind: Literal["break"] = "break"
    employee_id: str = ""
    turnstile_duration_raw: str = ""
    turnstile_duration_seconds: int = 0
    turnstile_exit: str = ""
    turnstile_return: str = ""
    is_turnstile_offender: bool = False
    operation_exit: str = ""
    operation_return: str = ""
    return_gap_seconds: int | None = None
    is_return_gap_offender: bool = False
    total_interval_seconds: int | None = None
    is_total_interval_offender: bool = False


AnyRecord = Annotated[
    Union[PerformanceRecord, PunctualityRecord, BreakRecord],
    Field(discriminator="kind"),
]
