from __future__ import annotations

import argparse
from pathlib import Path

from timesheet_insights.core.config import settings
from timesheet_insights.core.logging import get_logger, setup_logging
from timesheet_insights.schemas.common import ReportKind
from timesheet_insights.schemas.reports import ReportQuery
from timesheet_insights.services.engine import analyze_report


def read_export(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return path.read_text(encoding="latin-1")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timesheet-insights",
        description="Classify and aggregate a timesheet export.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze one CSV export and print the JSON result.")
    analyze.add_argument("kind", choices=[kind.value for kind in ReportKind])
    analyze.add_argument("path", type=Path)
    analyze.add_argument("--leader", default=settings.all_sentinel)
    analyze.add_argument("--collaborator", default=settings.all_sentinel)
    analyze.add_argument("--period", default=settings.all_sentinel)
    analyze.add_argument("--metric", default=None)
    analyze.add_argument("-v", "--verbose", action="store_true", help="Set log level to DEBUG")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)
    log = get_logger(__name__)

    if not args.path.exists():
        log.error("File not found: %s", args.path)
        return 1

    query = ReportQuery(
        leader=args.leader,
        collaborator=args.collaborator,
        period=args.period,
        metric=args.metric,
    )
    result = analyze_report(read_export(args.path), args.kind, query)
    print(result.model_dump_json(indent=2))
    return 0 if result.status == "ok" else 1


if __name__ == "__main__":
    raise SystemExit(main())
