#!/usr/bin/env python3
"""
Validation Module
=================
Event-stream validation engine: record parsing, per-record checks, per-user
sequence analysis, statistics and reporting.
"""

from validation.models import (
    IssueType,
    Severity,
    Statistics,
    TimeRange,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from validation.report import format_batch_summary, format_validation_result
from validation.validator import DirectoryReadError, EventLogValidator

__all__ = [
    "IssueType",
    "Severity",
    "Statistics",
    "TimeRange",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "DirectoryReadError",
    "EventLogValidator",
    "format_validation_result",
    "format_batch_summary",
]
