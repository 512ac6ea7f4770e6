#!/usr/bin/env python3
"""
Per-Record Checks
=================
Structural validation (required header fields) and property type
conformance against the taxonomy.
"""

from typing import Any, List

from taxonomy import Schema
from validation.models import IssueType, Severity, ValidationError
from validation.records import (
    TIME_FIELD,
    TYPE_FIELD,
    USER_FIELD,
    RawRecord,
    lookup_field,
)

REQUIRED_FIELDS = (TYPE_FIELD, TIME_FIELD, USER_FIELD)

# Declared types outside this set (time, list, object, object group) are not checked.
CHECKED_TYPES = ("string", "number", "boolean")


def runtime_kind(value: Any) -> str:
    """Name the JSON kind of a decoded value."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return "object"


def check_structure(record: RawRecord) -> List[ValidationError]:
    """One REQUIRED_PROPERTY error per missing header field."""
    errors: List[ValidationError] = []

    for name in REQUIRED_FIELDS:
        if lookup_field(record.data, name) is None:
            errors.append(ValidationError(
                type=IssueType.REQUIRED_PROPERTY,
                severity=Severity.ERROR,
                user_id=record.user_id,
                event_name=record.event_name,
                message=f"Missing required field: {name}",
                details={"field": name, "line_index": record.line_index},
            ))

    if record.is_track and record.event_name is None:
        errors.append(ValidationError(
            type=IssueType.REQUIRED_PROPERTY,
            severity=Severity.ERROR,
            user_id=record.user_id,
            message="track event is missing #event_name (or event) field",
            details={"field": "#event_name", "line_index": record.line_index},
        ))

    return errors


def check_properties(record: RawRecord, schema: Schema) -> List[ValidationError]:
    """
    Compare logged property values with the declared types of the record's event.

    Only events defined in the taxonomy are checked, and only the properties
    owned by that event. Missing and null values are skipped. Mismatches are
    warnings and never affect validity.
    """
    if schema.get_event(record.event_name) is None:
        return []

    warnings: List[ValidationError] = []
    for prop in schema.properties_for_event(record.event_name):
        value = record.properties.get(prop.property_name)
        if value is None:
            continue

        expected = prop.data_type.strip().lower()
        if expected not in CHECKED_TYPES:
            continue

        actual = runtime_kind(value)
        if actual != expected:
            warnings.append(ValidationError(
                type=IssueType.DATA_TYPE,
                severity=Severity.WARNING,
                user_id=record.user_id,
                event_name=record.event_name,
                message=(
                    f"Property type mismatch: {prop.property_name} "
                    f"(expected: {expected}, got: {actual})"
                ),
                details={
                    "property": prop.property_name,
                    "expected": expected,
                    "actual": actual,
                    "line_index": record.line_index,
                },
            ))

    return warnings
