#!/usr/bin/env python3
"""
Sequence Analysis
=================
Per-user checks over an ordered timeline:

- monotonicity: consecutive timestamps must not decrease
- dependencies: required previous events must already have occurred
- funnels: a started funnel should reach its last step

None of the passes is fatal. Each returns its findings and leaves counting to
the aggregator.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from taxonomy import FunnelDefinition, Schema
from validation.models import IssueType, Severity, ValidationError, ValidationWarning
from validation.records import format_timestamp
from validation.timeline import TimelineEntry, UserTimeline

logger = logging.getLogger("validation.sequence")


def _order_errors(
    user_id: str,
    entries: Sequence[TimelineEntry],
    order: str,
) -> List[ValidationError]:
    errors: List[ValidationError] = []
    for previous, current in zip(entries, entries[1:]):
        # NaN compares false both ways, so unparsable timestamps are flagged too
        if current.timestamp >= previous.timestamp:
            continue
        errors.append(ValidationError(
            type=IssueType.TIMESTAMP_ORDER,
            severity=Severity.ERROR,
            user_id=user_id,
            event_name=current.event_name,
            message=(
                f"Timestamp order violation: {current.event_name} "
                f"({format_timestamp(current.timestamp)}) is earlier than "
                f"{previous.event_name} ({format_timestamp(previous.timestamp)})"
            ),
            details={
                "current_event": current.event_name,
                "previous_event": previous.event_name,
                "current_line": current.record.line_index,
                "previous_line": previous.record.line_index,
                "order": order,
            },
        ))
    return errors


def check_monotonicity(timeline: UserTimeline) -> List[ValidationError]:
    """
    Flag consecutive pairs of the sorted timeline whose timestamps decrease.

    The timeline is already sorted, so this only fires for entries whose
    timestamps cannot be ordered (unparsable times).
    """
    return _order_errors(timeline.user_id, timeline.entries, "sorted")


def check_ingestion_order(timeline: UserTimeline) -> List[ValidationError]:
    """Same comparison as check_monotonicity, over the order records were logged in."""
    return _order_errors(timeline.user_id, timeline.arrival, "logged")


def check_dependencies(timeline: UserTimeline, schema: Schema) -> List[ValidationError]:
    """
    Walk the timeline keeping the set of events seen so far.

    Every required previous event missing from the set produces one error.
    An event is added to the set only after its own check, so it can satisfy
    later repeats but never itself.
    """
    errors: List[ValidationError] = []
    seen: Dict[str, None] = {}  # ordered set

    for entry in timeline.entries:
        definition = schema.get_event(entry.event_name)
        if definition is not None:
            for required in definition.required_previous_events:
                if required in seen:
                    continue
                errors.append(ValidationError(
                    type=IssueType.EVENT_DEPENDENCY,
                    severity=Severity.ERROR,
                    user_id=timeline.user_id,
                    event_name=entry.event_name,
                    message=(
                        f"Missing required previous event: {entry.event_name} "
                        f"must occur after {required}"
                    ),
                    details={
                        "missing_event": required,
                        "occurred_events": list(seen),
                        "line_index": entry.record.line_index,
                    },
                ))

        if entry.event_name is not None:
            seen[entry.event_name] = None

    return errors


def match_funnel(event_names: Sequence[Optional[str]], steps: Sequence[str]) -> int:
    """
    Count funnel steps matched in order by a single forward scan.

    Unrelated events between steps are ignored. Scanning stops once the last
    step is matched, so at most one funnel completion is counted per sequence.
    """
    cursor = 0
    for name in event_names:
        if cursor == len(steps):
            break
        if name == steps[cursor]:
            cursor += 1
    return cursor


def check_funnels(
    timeline: UserTimeline,
    funnels: Sequence[FunnelDefinition],
) -> List[ValidationWarning]:
    """One FUNNEL_INCOMPLETE warning per funnel that was started but not finished."""
    warnings: List[ValidationWarning] = []
    names = timeline.event_names

    for funnel in funnels:
        matched = match_funnel(names, funnel.steps)
        total = len(funnel.steps)
        if 0 < matched < total:
            warnings.append(ValidationWarning(
                type=IssueType.FUNNEL_INCOMPLETE,
                message=(
                    f"User {timeline.user_id}: funnel '{funnel.name}' started "
                    f"but not completed ({matched}/{total} steps)"
                ),
            ))

    return warnings


class SequenceAnalyzer:
    """
    Runs the per-user passes against one taxonomy.

    With check_ingestion_order set, timestamps are also compared in the order
    the records were logged, which catches out-of-order ingestion that the
    sorted timeline hides.
    """

    def __init__(self, schema: Schema, check_ingestion_order: bool = False):
        self.schema = schema
        self.check_ingestion_order = check_ingestion_order

    def analyze(self, timeline: UserTimeline) -> Tuple[List[ValidationError], List[ValidationWarning]]:
        errors = check_monotonicity(timeline)
        if self.check_ingestion_order:
            errors.extend(check_ingestion_order(timeline))
        errors.extend(check_dependencies(timeline, self.schema))

        warnings = check_funnels(timeline, self.schema.funnels)

        if errors or warnings:
            logger.debug(
                f"User {timeline.user_id}: {len(errors)} errors, "
                f"{len(warnings)} warnings over {len(timeline)} events"
            )
        return errors, warnings
