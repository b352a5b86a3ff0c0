"""
Factories for new diagrams and for elements the user adds in the editor.

Ids come from an explicit IdSource instead of module globals. One IdSource
never hands out the same id twice, even across threads, because every id
carries a value from its own locked counter.
"""

import itertools
import random
import string
import threading
import time
from typing import Callable, Optional, Tuple

from mermaid_flow.flow_ast import FlowEdge, FlowGraph, FlowNode, Position
from mermaid_flow.shapes import DEFAULT_SHAPE, SHAPE_SYNTAX

_BASE36 = string.digits + string.ascii_lowercase

SHAPE_LABELS = {
    'rectangle': "Process",
    'rounded': "Start/End",
    'diamond': "Decision",
    'circle': "Connector",
}


def to_base36(value: int) -> str:
    if value <= 0:
        return '0'
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return ''.join(reversed(digits))


class IdSource:
    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None):
        self._rng = rng or random.Random()
        self._clock = clock or time.time
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def _next(self) -> Tuple[int, str]:
        with self._lock:
            seq = next(self._counter)
            prefix = ''.join(self._rng.choice(string.ascii_uppercase) for _ in range(2))
        return seq, prefix

    def _stamp(self) -> str:
        return to_base36(int(self._clock() * 1000))

    def node_id(self) -> str:
        """Two letters, four clock digits, then the counter, e.g. ``QKx1f40``."""
        seq, prefix = self._next()
        return f"{prefix}{self._stamp()[-4:]}{to_base36(seq)}"

    def edge_id(self, source: str, target: str) -> str:
        seq, _ = self._next()
        return f"e{source}-{target}-{self._stamp()}{to_base36(seq)}"


def create_node(position: Tuple[float, float] = (0, 0), shape: str = DEFAULT_SHAPE,
                label: str = "New Node", ids: Optional[IdSource] = None) -> FlowNode:
    if not isinstance(shape, str) or shape not in SHAPE_SYNTAX:
        raise ValueError(f"unknown shape: {shape}")
    ids = ids or IdSource()
    x, y = position
    return FlowNode(id=ids.node_id(), label=label, shape=shape, position=Position(x=x, y=y))


def create_edge(source: str, target: str, label: Optional[str] = None,
                ids: Optional[IdSource] = None) -> FlowEdge:
    ids = ids or IdSource()
    return FlowEdge(id=ids.edge_id(source, target), source=source, target=target, label=label or None)


def default_graph() -> FlowGraph:
    """Seed diagram for a new flowchart block: Start -> Process -> End."""
    graph = FlowGraph(direction="TD")
    graph.add_node(FlowNode(id="start", label="Start", shape="rounded", position=Position(150, 50)))
    graph.add_node(FlowNode(id="process", label="Process", shape="rectangle", position=Position(150, 150)))
    graph.add_node(FlowNode(id="end", label="End", shape="rounded", position=Position(150, 250)))
    graph.edges.append(FlowEdge(id="e-start-process", source="start", target="process"))
    graph.edges.append(FlowEdge(id="e-process-end", source="process", target="end"))
    return graph
