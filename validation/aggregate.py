"""
Statistics accumulation for one log file.

The accumulator is created per file and threaded through the run: records are
counted as they are parsed, violations as findings come back from the checks,
and the time range is computed from the finished user timelines.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping

from validation.models import IssueType, Severity, Statistics, TimeRange, ValidationError
from validation.records import RawRecord, format_timestamp
from validation.timeline import UserTimeline


@dataclass
class StatisticsAccumulator:
    total_events: int = 0
    event_counts: Dict[str, int] = field(default_factory=dict)
    user_event_counts: Dict[str, int] = field(default_factory=dict)
    dependency_violations: int = 0
    timestamp_violations: int = 0
    property_violations: int = 0

    def add_record(self, record: RawRecord) -> None:
        self.total_events += 1
        if record.event_name is not None:
            self.event_counts[record.event_name] = self.event_counts.get(record.event_name, 0) + 1
        if record.user_id is not None:
            self.user_event_counts[record.user_id] = self.user_event_counts.get(record.user_id, 0) + 1

    def add_issues(self, issues: Iterable[ValidationError]) -> None:
        for issue in issues:
            if issue.type == IssueType.EVENT_DEPENDENCY:
                self.dependency_violations += 1
            elif issue.type == IssueType.TIMESTAMP_ORDER:
                self.timestamp_violations += 1
            elif issue.type == IssueType.DATA_TYPE and issue.severity == Severity.WARNING:
                self.property_violations += 1

    def finalize(self, timelines: Mapping[str, UserTimeline]) -> Statistics:
        timestamps = [
            entry.timestamp
            for timeline in timelines.values()
            for entry in timeline.entries
            if math.isfinite(entry.timestamp)
        ]
        time_range = TimeRange()
        if timestamps:
            time_range = TimeRange(
                start=format_timestamp(min(timestamps)),
                end=format_timestamp(max(timestamps)),
            )

        return Statistics(
            total_events=self.total_events,
            total_users=len(self.user_event_counts),
            unique_event_types=len(self.event_counts),
            event_counts=dict(self.event_counts),
            user_event_counts=dict(self.user_event_counts),
            time_range=time_range,
            dependency_violations=self.dependency_violations,
            timestamp_violations=self.timestamp_violations,
            property_violations=self.property_violations,
        )
