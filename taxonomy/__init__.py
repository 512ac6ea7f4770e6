#!/usr/bin/env python3
"""
Taxonomy Module
===============
Read-only data models for the tracking taxonomy: event definitions,
property definitions and funnels.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from taxonomy.dependencies import build_dependency_graph, find_cycles


class SchemaError(Exception):
    """Exception raised when a taxonomy cannot be loaded."""
    pass


class EventDefinition(BaseModel):
    """A tracked event and the events that must precede it."""
    model_config = ConfigDict(frozen=True)

    event_name: str
    event_name_kr: str = ""
    category: str = ""
    required_previous_events: Tuple[str, ...] = ()

    @field_validator("required_previous_events", mode="before")
    @classmethod
    def _none_means_no_dependencies(cls, value):
        return () if value is None else value


class PropertyDefinition(BaseModel):
    """
    A property attached to one event, or to every event when event_name is None.

    data_type is free text: string, number, boolean, time, list, object or
    object group. Only the first three are type checked.
    """
    model_config = ConfigDict(frozen=True)

    property_name: str
    data_type: str
    event_name: Optional[str] = None
    description: str = ""

    @property
    def is_common(self) -> bool:
        return self.event_name is None


class FunnelDefinition(BaseModel):
    """An ordered multi-step user journey."""
    model_config = ConfigDict(frozen=True)

    name: str
    steps: Tuple[str, ...] = Field(min_length=1)
    description: Optional[str] = None


class Schema(BaseModel):
    """
    Parsed taxonomy. Immutable once built; lookup indexes are computed once
    at construction.
    """
    model_config = ConfigDict(frozen=True)

    events: Tuple[EventDefinition, ...] = ()
    properties: Tuple[PropertyDefinition, ...] = ()
    funnels: Tuple[FunnelDefinition, ...] = ()

    _event_index: Dict[str, EventDefinition] = PrivateAttr(default_factory=dict)
    _property_index: Dict[str, Tuple[PropertyDefinition, ...]] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        self._event_index = {e.event_name: e for e in self.events}

        grouped: Dict[str, List[PropertyDefinition]] = {}
        for prop in self.properties:
            if prop.event_name is not None:
                grouped.setdefault(prop.event_name, []).append(prop)
        self._property_index = {name: tuple(props) for name, props in grouped.items()}

    def get_event(self, event_name: Optional[str]) -> Optional[EventDefinition]:
        if event_name is None:
            return None
        return self._event_index.get(event_name)

    def properties_for_event(self, event_name: str) -> Tuple[PropertyDefinition, ...]:
        """Properties owned by the event. Common properties are not included."""
        return self._property_index.get(event_name, ())

    @property
    def common_properties(self) -> Tuple[PropertyDefinition, ...]:
        return tuple(p for p in self.properties if p.is_common)

    def dependency_graph(self) -> Dict[str, Tuple[str, ...]]:
        return build_dependency_graph(self.events)

    def find_dependency_cycles(self) -> List[List[str]]:
        return find_cycles(self.dependency_graph())

    def unknown_dependencies(self) -> List[str]:
        """Required-previous event names that no event definition declares."""
        unknown = []
        for event in self.events:
            for required in event.required_previous_events:
                if required not in self._event_index and required not in unknown:
                    unknown.append(required)
        return unknown


def load_schema(path: Union[str, Path], reject_cycles: bool = False) -> Schema:
    """
    Load a taxonomy from a JSON file.

    Expected layout: {"events": [...], "properties": [...], "funnels": [...]}.
    Unknown keys are ignored.

    Raises:
        SchemaError: If the file is unreadable or invalid, or when
            reject_cycles is set and the dependency graph has a cycle
    """
    schema_path = Path(path)
    try:
        raw = json.loads(schema_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaError(f"Cannot read taxonomy file {schema_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Taxonomy file {schema_path} is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise SchemaError(f"Taxonomy file {schema_path} must contain a JSON object")

    try:
        schema = Schema(
            events=raw.get("events") or (),
            properties=raw.get("properties") or (),
            funnels=raw.get("funnels") or (),
        )
    except ValidationError as e:
        msg = str(e).split('\n')[0]
        raise SchemaError(f"Invalid taxonomy in {schema_path}: {msg}") from e

    if reject_cycles:
        cycles = schema.find_dependency_cycles()
        if cycles:
            rendered = "; ".join(" -> ".join(c) for c in cycles)
            raise SchemaError(f"Dependency cycle in taxonomy {schema_path}: {rendered}")

    return schema


__all__ = [
    "SchemaError",
    "EventDefinition",
    "PropertyDefinition",
    "FunnelDefinition",
    "Schema",
    "load_schema",
]
