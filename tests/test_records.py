#!/usr/bin/env python3
"""
Tests for log line parsing and field resolution.
"""

import math
import pytest

from validation.records import (
    ParseFailure, RawRecord, format_timestamp, iter_records, parse_line,
    parse_timestamp, resolve_event_name, resolve_time_value, resolve_user_id,
)


class TestParseLine:
    """Tests for decoding a single line."""

    def test_valid_track_record(self):
        record = parse_line(
            '{"#type": "track", "#event_name": "login", "#distinct_id": "u1", '
            '"#time": "2024-01-01T00:00:00.000Z", "properties": {"a": 1}}',
            3,
        )
        assert isinstance(record, RawRecord)
        assert record.line_index == 3
        assert record.is_track
        assert record.event_name == "login"
        assert record.user_id == "u1"
        assert record.timestamp == 1704067200000.0
        assert record.properties == {"a": 1}

    def test_invalid_json_is_failure(self):
        failure = parse_line("{broken", 7)
        assert isinstance(failure, ParseFailure)
        assert failure.line_index == 7
        assert failure.text == "{broken"
        assert failure.reason

    def test_non_object_is_failure(self):
        failure = parse_line("[1, 2]", 0)
        assert isinstance(failure, ParseFailure)
        assert "list" in failure.reason

    def test_missing_properties_defaults_to_empty(self):
        record = parse_line('{"#type": "track", "properties": "oops"}', 0)
        assert record.properties == {}


class TestIterRecords:

    def test_blank_lines_are_skipped_and_not_counted(self):
        lines = ['{"a": 1}', "", "   ", "not json", '{"b": 2}']
        parsed = list(iter_records(lines))

        assert [p.line_index for p in parsed] == [0, 1, 2]
        assert isinstance(parsed[0], RawRecord)
        assert isinstance(parsed[1], ParseFailure)
        assert isinstance(parsed[2], RawRecord)


class TestFieldResolution:
    """Each resolver has a fixed precedence order."""

    def test_event_name_prefers_event_alias(self):
        data = {"event": "alias", "#event_name": "header", "properties": {"#event_name": "nested"}}
        assert resolve_event_name(data) == "alias"

    def test_event_name_falls_back_to_header_then_nested(self):
        assert resolve_event_name({"#event_name": "header"}) == "header"
        assert resolve_event_name({"properties": {"#event_name": "nested"}}) == "nested"
        assert resolve_event_name({"event": ""}) is None

    def test_user_id_prefers_nested(self):
        data = {"#distinct_id": "top", "properties": {"#distinct_id": "nested"}}
        assert resolve_user_id(data) == "nested"
        assert resolve_user_id({"#distinct_id": "top"}) == "top"

    def test_user_id_is_stringified(self):
        assert resolve_user_id({"#distinct_id": 42}) == "42"

    def test_time_precedence(self):
        assert resolve_time_value({"#time": "a", "time": "b"}) == "a"
        assert resolve_time_value({"time": "b", "properties": {"#time": "c"}}) == "b"
        assert resolve_time_value({"properties": {"#time": "c"}}) == "c"
        assert resolve_time_value({}) is None


class TestTimestamps:

    def test_iso_with_zulu(self):
        assert parse_timestamp("2024-01-01T00:00:01.500Z") == 1704067201500.0

    def test_space_separator_naive_is_utc(self):
        assert parse_timestamp("2024-01-01 00:00:00.000") == 1704067200000.0

    def test_offset_is_respected(self):
        assert parse_timestamp("2024-01-01T09:00:00+09:00") == 1704067200000.0

    def test_epoch_millis(self):
        assert parse_timestamp(1704067200000) == 1704067200000.0

    @pytest.mark.parametrize("value", ["yesterday", "", None, True, {"t": 1}])
    def test_unparsable_is_nan(self, value):
        assert math.isnan(parse_timestamp(value))

    def test_format_round_trip(self):
        assert format_timestamp(1704067201500.0) == "2024-01-01T00:00:01.500Z"

    def test_format_nan(self):
        assert format_timestamp(float("nan")) == "invalid"


class TestBoundaryInput:
    """Inputs json.loads accepts or rejects in unusual ways."""

    def test_integer_beyond_float_range_is_nan(self):
        assert math.isnan(parse_timestamp(int("9" * 400)))

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_number_is_nan(self, value):
        assert math.isnan(parse_timestamp(value))

    def test_non_finite_literal_time(self):
        record = parse_line('{"#type": "track", "#time": Infinity}', 0)
        assert isinstance(record, RawRecord)
        assert not record.has_valid_timestamp

    def test_huge_time_literal_is_record_with_nan(self):
        record = parse_line('{"#type": "track", "#time": ' + "9" * 400 + "}", 0)
        assert isinstance(record, RawRecord)
        assert math.isnan(record.timestamp)

    def test_number_over_digit_limit_is_failure(self):
        failure = parse_line('{"n": ' + "9" * 5000 + "}", 2)
        assert isinstance(failure, ParseFailure)
        assert failure.line_index == 2
