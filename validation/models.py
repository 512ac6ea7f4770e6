#!/usr/bin/env python3
"""
Validation Result Models
========================
Error/warning taxonomy and the per-file ValidationResult.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class IssueType(str, Enum):
    EVENT_DEPENDENCY = "EVENT_DEPENDENCY"
    TIMESTAMP_ORDER = "TIMESTAMP_ORDER"
    REQUIRED_PROPERTY = "REQUIRED_PROPERTY"
    DATA_TYPE = "DATA_TYPE"
    FUNNEL_SEQUENCE = "FUNNEL_SEQUENCE"
    FUNNEL_INCOMPLETE = "FUNNEL_INCOMPLETE"


class Severity(str, Enum):
    """Only ERROR entries make a file invalid."""
    ERROR = "error"
    WARNING = "warning"


class ValidationError(BaseModel):
    """
    A finding attached to a record or a user timeline.

    Property type mismatches are reported here with WARNING severity so they
    are grouped with the other per-record findings in the report.
    """
    type: IssueType
    severity: Severity
    message: str
    user_id: Optional[str] = None
    event_name: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ValidationWarning(BaseModel):
    """A non-fatal, per-user finding (funnel progress)."""
    type: IssueType
    message: str
    count: Optional[int] = None


class TimeRange(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None


class Statistics(BaseModel):
    total_events: int = 0
    total_users: int = 0
    unique_event_types: int = 0
    event_counts: Dict[str, int] = Field(default_factory=dict)
    user_event_counts: Dict[str, int] = Field(default_factory=dict)
    time_range: TimeRange = Field(default_factory=TimeRange)
    dependency_violations: int = 0
    timestamp_violations: int = 0
    property_violations: int = 0


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationWarning] = Field(default_factory=list)
    statistics: Statistics = Field(default_factory=Statistics)

    @classmethod
    def build(
        cls,
        errors: List[ValidationError],
        warnings: List[ValidationWarning],
        statistics: Statistics,
    ) -> "ValidationResult":
        """Assemble a result; validity depends on error-severity entries only."""
        return cls(
            is_valid=not any(e.severity == Severity.ERROR for e in errors),
            errors=errors,
            warnings=warnings,
            statistics=statistics,
        )

    @property
    def error_count(self) -> int:
        return sum(1 for e in self.errors if e.severity == Severity.ERROR)


__all__ = [
    "IssueType",
    "Severity",
    "ValidationError",
    "ValidationWarning",
    "TimeRange",
    "Statistics",
    "ValidationResult",
]
