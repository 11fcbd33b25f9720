from enum import Enum


class ReportKind(str, Enum):
    performance = "performance"
    punctuality = "punctuality"
    breaks = "break"


class ExitReason(str, Enum):
    stopped_early = "stopped_early"
    slow_to_leave = "slow_to_leave"
