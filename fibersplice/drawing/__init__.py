"""Schedule and report output for splice data."""

from .splice_report import (
    SCHEDULE_COLUMNS,
    STRAND_COLUMNS,
    SUMMARY_COLUMNS,
    ReportConfig,
    SpliceReportGenerator,
    build_splice_schedule,
    build_cable_summary,
    export_splice_schedule,
    generate_splice_report,
)

__all__ = [
    "SCHEDULE_COLUMNS",
    "STRAND_COLUMNS",
    "SUMMARY_COLUMNS",
    "ReportConfig",
    "SpliceReportGenerator",
    "build_splice_schedule",
    "build_cable_summary",
    "export_splice_schedule",
    "generate_splice_report",
]
