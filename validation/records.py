#!/usr/bin/env python3
"""
Record Parsing
==============
Turns log lines into RawRecords and resolves fields that may live at the top
level of a record or inside its "properties" mapping.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from dateutil.parser import isoparse

TYPE_FIELD = "#type"
TIME_FIELD = "#time"
USER_FIELD = "#distinct_id"
EVENT_NAME_FIELD = "#event_name"
TRACK_TYPE = "track"

INVALID_TIMESTAMP = float("nan")


@dataclass(frozen=True)
class RawRecord:
    """One decoded log line."""
    line_index: int
    data: Dict[str, Any]
    record_type: Optional[str] = None
    time_value: Any = None
    timestamp: float = INVALID_TIMESTAMP  # epoch ms, NaN when unparsable
    user_id: Optional[str] = None
    event_name: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_track(self) -> bool:
        return self.record_type == TRACK_TYPE

    @property
    def has_valid_timestamp(self) -> bool:
        return not math.isnan(self.timestamp)


@dataclass(frozen=True)
class ParseFailure:
    """A non-blank line that did not decode to a JSON object."""
    line_index: int
    text: str
    reason: str


def has_value(value: Any) -> bool:
    """None, "", False and 0 count as missing, the same way the log producer treats them."""
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def _properties_of(data: Dict[str, Any]) -> Dict[str, Any]:
    props = data.get("properties")
    return props if isinstance(props, dict) else {}


def _first_present(candidates: Iterable[Any]) -> Any:
    for value in candidates:
        if has_value(value):
            return value
    return None


def lookup_field(data: Dict[str, Any], name: str) -> Any:
    """Top-level value first, then the one nested in properties."""
    return _first_present((data.get(name), _properties_of(data).get(name)))


def resolve_event_name(data: Dict[str, Any]) -> Optional[str]:
    """Precedence: "event", "#event_name", properties["#event_name"]."""
    value = _first_present((
        data.get("event"),
        data.get(EVENT_NAME_FIELD),
        _properties_of(data).get(EVENT_NAME_FIELD),
    ))
    return None if value is None else str(value)


def resolve_user_id(data: Dict[str, Any]) -> Optional[str]:
    """Precedence: properties["#distinct_id"], "#distinct_id"."""
    value = _first_present((
        _properties_of(data).get(USER_FIELD),
        data.get(USER_FIELD),
    ))
    return None if value is None else str(value)


def resolve_time_value(data: Dict[str, Any]) -> Any:
    """Precedence: "#time", "time", properties["#time"]."""
    return _first_present((
        data.get(TIME_FIELD),
        data.get("time"),
        _properties_of(data).get(TIME_FIELD),
    ))


def resolve_record_type(data: Dict[str, Any]) -> Optional[str]:
    value = lookup_field(data, TYPE_FIELD)
    return None if value is None else str(value)


def parse_timestamp(value: Any) -> float:
    """
    Convert a logged time value to epoch milliseconds.

    Strings are parsed as ISO-8601 (naive values are taken as UTC), ints and
    floats are already epoch milliseconds. Anything else, including numbers
    that are not finite or do not fit a float, yields NaN.
    """
    if isinstance(value, bool):
        return INVALID_TIMESTAMP
    if isinstance(value, (int, float)):
        try:
            ms = float(value)
        except OverflowError:
            return INVALID_TIMESTAMP
        return ms if math.isfinite(ms) else INVALID_TIMESTAMP
    if not isinstance(value, str):
        return INVALID_TIMESTAMP

    try:
        ts = isoparse(value.strip())
    except (ValueError, OverflowError):
        return INVALID_TIMESTAMP

    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp() * 1000.0


def format_timestamp(ms: float) -> str:
    """Render epoch milliseconds as 2024-01-01T00:00:00.000Z."""
    if math.isnan(ms) or math.isinf(ms):
        return "invalid"
    try:
        dt = datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return "invalid"
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_line(text: str, line_index: int) -> Union[RawRecord, ParseFailure]:
    """Decode one line. Failures are returned, never raised."""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        return ParseFailure(line_index=line_index, text=text, reason=str(e))

    if not isinstance(data, dict):
        return ParseFailure(
            line_index=line_index,
            text=text,
            reason=f"expected a JSON object, got {type(data).__name__}",
        )

    time_value = resolve_time_value(data)
    return RawRecord(
        line_index=line_index,
        data=data,
        record_type=resolve_record_type(data),
        time_value=time_value,
        timestamp=parse_timestamp(time_value),
        user_id=resolve_user_id(data),
        event_name=resolve_event_name(data),
        properties=_properties_of(data),
    )


def iter_records(lines: Iterable[str]) -> Iterator[Union[RawRecord, ParseFailure]]:
    """
    Parse every non-blank line.

    Blank lines are skipped and do not advance line_index.
    """
    index = 0
    for line in lines:
        text = line.strip()
        if not text:
            continue
        yield parse_line(text, index)
        index += 1
