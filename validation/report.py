"""
Text rendering of validation results.
"""

from typing import Dict, List, Mapping, Tuple

from validation.models import Severity, ValidationError, ValidationResult

RULE = "=" * 80


def _top_events(counts: Mapping[str, int], limit: int) -> List[Tuple[str, int]]:
    # ties keep first-seen order
    return sorted(counts.items(), key=lambda kv: -kv[1])[:limit]


def _group_errors(errors: List[ValidationError]) -> Dict[Tuple[str, str], List[ValidationError]]:
    groups: Dict[Tuple[str, str], List[ValidationError]] = {}
    for error in errors:
        key = (error.type.value, error.severity.value)
        groups.setdefault(key, []).append(error)
    return groups


def format_validation_result(
    result: ValidationResult,
    top_events: int = 10,
    max_warnings: int = 10,
) -> str:
    """Render one file's result as a multi-line report."""
    stats = result.statistics
    lines = [RULE, "EVENT LOG VALIDATION REPORT", RULE, ""]

    if result.is_valid:
        lines.append("✓ PASSED: all records are valid")
    else:
        lines.append(f"✗ FAILED: {result.error_count} errors found")
    lines.append("")

    lines.extend([
        "STATISTICS:",
        f"  Total events: {stats.total_events:,}",
        f"  Total users: {stats.total_users:,}",
        f"  Unique event types: {stats.unique_event_types}",
        f"  Time range: {stats.time_range.start or '-'} ~ {stats.time_range.end or '-'}",
        "",
    ])

    lines.append(f"EVENT DISTRIBUTION (top {top_events}):")
    for name, count in _top_events(stats.event_counts, top_events):
        share = count / stats.total_events if stats.total_events else 0.0
        lines.append(f"  {name}: {count:,} ({share:.1%})")
    lines.append("")

    if result.errors:
        lines.append(f"ERRORS ({len(result.errors)}):")
        for (issue_type, severity), group in _group_errors(result.errors).items():
            marker = "✗" if severity == Severity.ERROR.value else "!"
            lines.append(f"  {marker} [{issue_type}/{severity}] {group[0].message}")
            if len(group) > 1:
                lines.append(f"    ({len(group)} occurrences)")
        lines.append("")

    if result.warnings:
        lines.append(f"WARNINGS ({len(result.warnings)}):")
        for warning in result.warnings[:max_warnings]:
            lines.append(f"  {warning.message}")
        hidden = len(result.warnings) - max_warnings
        if hidden > 0:
            lines.append(f"  ... +{hidden} more")
        lines.append("")

    lines.extend([
        RULE,
        (
            f"Violations: dependency {stats.dependency_violations}, "
            f"timestamp {stats.timestamp_violations}, "
            f"property {stats.property_violations}"
        ),
        RULE,
    ])
    return "\n".join(lines)


def format_batch_summary(results: Mapping[str, ValidationResult]) -> str:
    """Closing summary for a directory run."""
    valid = sum(1 for r in results.values() if r.is_valid)
    invalid = len(results) - valid
    lines = [
        RULE,
        "VALIDATION SUMMARY",
        RULE,
        f"  Total files: {len(results)}",
        f"  ✓ Valid: {valid}",
        f"  ✗ Invalid: {invalid}",
    ]
    failed = [name for name, r in results.items() if not r.is_valid]
    if failed:
        lines.append("  Failed files:")
        lines.extend(f"    - {name}" for name in failed)
    lines.append(RULE)
    return "\n".join(lines)
