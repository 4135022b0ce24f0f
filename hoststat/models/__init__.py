"""
Data models for metric values and reports.
"""

from .report import (
    DuplicateReportError,
    InvalidNameError,
    Report,
    ReportCollection,
    new_report,
    sanitize_name,
    validate_name,
)
from .value import MetricValue, ValueType

__all__ = [
    "MetricValue",
    "ValueType",
    "Report",
    "ReportCollection",
    "new_report",
    "validate_name",
    "sanitize_name",
    "InvalidNameError",
    "DuplicateReportError",
]
