"""
Event dependency graph helpers.

Required-previous-event edges come straight from the taxonomy and are not
guaranteed to be acyclic. An event depending on itself counts as a cycle.
"""

from typing import Dict, Iterable, List, Tuple

_UNVISITED, _ACTIVE, _DONE = 0, 1, 2


def build_dependency_graph(events: Iterable) -> Dict[str, Tuple[str, ...]]:
    """Map event name -> required previous event names, for events that declare any."""
    graph: Dict[str, Tuple[str, ...]] = {}
    for event in events:
        if event.required_previous_events:
            graph[event.event_name] = tuple(event.required_previous_events)
    return graph


def find_cycles(graph: Dict[str, Tuple[str, ...]]) -> List[List[str]]:
    """
    Return every cycle reachable by depth-first search over the graph.

    Each cycle is listed as the path of names with the starting name repeated
    at the end, e.g. ["a", "b", "a"]. Nodes are visited in sorted order so the
    result is stable across runs.
    """
    state: Dict[str, int] = {}
    path: List[str] = []
    cycles: List[List[str]] = []

    def visit(node: str) -> None:
        state[node] = _ACTIVE
        path.append(node)
        for dep in graph.get(node, ()):
            dep_state = state.get(dep, _UNVISITED)
            if dep_state == _ACTIVE:
                start = path.index(dep)
                cycles.append(path[start:] + [dep])
            elif dep_state == _UNVISITED:
                visit(dep)
        path.pop()
        state[node] = _DONE

    for node in sorted(graph):
        if state.get(node, _UNVISITED) == _UNVISITED:
            visit(node)

    return cycles
