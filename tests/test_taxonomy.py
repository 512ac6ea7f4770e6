# tests/test_taxonomy.py
import json
import pytest
from pathlib import Path
from pydantic import ValidationError

from taxonomy import (
    EventDefinition, FunnelDefinition, PropertyDefinition, Schema,
    SchemaError, load_schema,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_schema(deps: dict) -> Schema:
    return Schema(events=[
        EventDefinition(event_name=name, required_previous_events=req)
        for name, req in deps.items()
    ])


def test_event_index_lookup():
    schema = load_schema(FIXTURES_DIR / "taxonomy.json")
    assert schema.get_event("login").required_previous_events == ("app_open",)
    assert schema.get_event("unknown") is None
    assert schema.get_event(None) is None


def test_null_dependencies_become_empty():
    schema = load_schema(FIXTURES_DIR / "taxonomy.json")
    assert schema.get_event("logout").required_previous_events == ()


def test_properties_for_event_excludes_common():
    schema = load_schema(FIXTURES_DIR / "taxonomy.json")
    names = [p.property_name for p in schema.properties_for_event("purchase")]
    assert names == ["amount", "first_purchase", "purchased_at"]
    assert [p.property_name for p in schema.common_properties] == ["platform"]
    assert schema.properties_for_event("app_open") == ()


def test_schema_is_immutable():
    schema = Schema(events=[EventDefinition(event_name="a")])
    with pytest.raises(ValidationError):
        schema.events = ()
    with pytest.raises(ValidationError):
        schema.events[0].event_name = "b"


def test_funnel_requires_steps():
    with pytest.raises(ValidationError):
        FunnelDefinition(name="empty", steps=[])


def test_property_common_flag():
    assert PropertyDefinition(property_name="p", data_type="string").is_common is True
    assert PropertyDefinition(property_name="p", data_type="string", event_name="e").is_common is False


def test_acyclic_graph_has_no_cycles():
    schema = make_schema({"a": [], "b": ["a"], "c": ["a", "b"]})
    assert schema.find_dependency_cycles() == []
    assert schema.dependency_graph() == {"b": ("a",), "c": ("a", "b")}


def test_two_event_cycle_detected():
    schema = make_schema({"a": ["b"], "b": ["a"]})
    assert schema.find_dependency_cycles() == [["a", "b", "a"]]


def test_self_dependency_is_a_cycle():
    schema = make_schema({"a": ["a"]})
    assert schema.find_dependency_cycles() == [["a", "a"]]


def test_unknown_dependencies():
    schema = make_schema({"b": ["a", "x"], "c": ["x"]})
    assert schema.unknown_dependencies() == ["a", "x"]


def test_load_schema_rejects_cycles(tmp_path):
    path = tmp_path / "cyclic.json"
    path.write_text(json.dumps({"events": [
        {"event_name": "a", "required_previous_events": ["b"]},
        {"event_name": "b", "required_previous_events": ["a"]},
    ]}))

    # Loaded as-is by default
    assert len(load_schema(path).events) == 2

    with pytest.raises(SchemaError, match="a -> b -> a"):
        load_schema(path, reject_cycles=True)


def test_load_schema_missing_file(tmp_path):
    with pytest.raises(SchemaError, match="Cannot read"):
        load_schema(tmp_path / "nope.json")


def test_load_schema_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(SchemaError, match="not valid JSON"):
        load_schema(path)


def test_load_schema_invalid_model(tmp_path):
    path = tmp_path / "bad_model.json"
    path.write_text(json.dumps({"funnels": [{"name": "f", "steps": []}]}))
    with pytest.raises(SchemaError, match="Invalid taxonomy"):
        load_schema(path)
