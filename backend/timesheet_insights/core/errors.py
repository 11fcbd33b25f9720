from __future__ import annotations


class ReportError(ValueError):
    """Base class for failures the engine reports back to its caller."""


class ReportParseError(ReportError):
    """Structural failure that prevents a report from being parsed."""


class ColumnResolutionError(ReportParseError):
    def __init__(self, kind: str, missing: list[str]) -> None:
        self.kind = kind
        self.missing = list(missing)
        super().__init__(
            f"Could not resolve required column(s) for the {kind} report: {', '.join(self.missing)}."
        )


class EmptyReportError(ReportParseError):
    def __init__(self, kind: str, dropped_rows: int = 0) -> None:
        self.kind = kind
        self.dropped_rows = dropped_rows
        super().__init__(
            f"No usable rows found in the {kind} report; check the export layout "
            f"({dropped_rows} row(s) were rejected)."
        )


class InvalidQueryError(ReportError):
    """The query names a metric or rule the pipeline does not provide."""


class RowRejected(ValueError):
    """Raised by a record constructor when a row fails its structural gate."""
