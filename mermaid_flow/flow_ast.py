"""
Flow AST: canonical graph representation for the visual flowchart editor.

Shared schema used by the parser, the generator and the graph builders.
Diagram text is parsed into a FlowGraph, the editor mutates it, and the
generator turns it back into diagram text. The graph can also be
serialized to .graph.json for the editor's IPC boundary.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from mermaid_flow.shapes import DEFAULT_SHAPE, SHAPE_SYNTAX

GRAPH_SCHEMA_VERSION = "1.0.0"

DIRECTIONS = ("TD", "TB", "BT", "LR", "RL")
DEFAULT_DIRECTION = "TD"


# ──────────────────────────────────────────────────────────────────
# Dataclasses
# ──────────────────────────────────────────────────────────────────

@dataclass
class Position:
    x: float = 0
    y: float = 0


@dataclass
class FlowNode:
    id: str
    label: str
    shape: str = DEFAULT_SHAPE
    position: Position = field(default_factory=Position)


@dataclass
class FlowEdge:
    id: str
    source: str
    target: str
    label: Optional[str] = None
    animated: bool = False
    emphasized: bool = False


@dataclass
class FlowGraph:
    nodes: Dict[str, FlowNode] = field(default_factory=dict)
    edges: List[FlowEdge] = field(default_factory=list)
    direction: str = DEFAULT_DIRECTION

    def add_node(self, node: FlowNode) -> FlowNode:
        self.nodes[node.id] = node
        return node

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        return self.nodes.get(node_id)

    def orphans(self) -> List[FlowNode]:
        """Nodes with no incident edge, in insertion order."""
        connected = set()
        for edge in self.edges:
            connected.add(edge.source)
            connected.add(edge.target)
        return [n for n in self.nodes.values() if n.id not in connected]


# ──────────────────────────────────────────────────────────────────
# JSON Serialization
# ──────────────────────────────────────────────────────────────────

def node_to_json(node: FlowNode) -> dict:
    return asdict(node)


def edge_to_json(edge: FlowEdge) -> dict:
    return asdict(edge)


def to_json(graph: FlowGraph) -> dict:
    """Serialize a FlowGraph to a JSON-compatible dict."""
    return {
        'schema_version': GRAPH_SCHEMA_VERSION,
        'direction': graph.direction,
        'nodes': [node_to_json(n) for n in graph.nodes.values()],
        'edges': [edge_to_json(e) for e in graph.edges],
    }


def _position_from_json(data: Any) -> Position:
    if not isinstance(data, dict):
        return Position()
    return Position(x=data.get('x', 0) or 0, y=data.get('y', 0) or 0)


def node_from_json(data: dict) -> FlowNode:
    """Build a FlowNode from a JSON dict. Raises ValueError without an id."""
    if not isinstance(data, dict) or not data.get('id'):
        raise ValueError(f"node record has no id: {data!r}")
    node_id = str(data['id'])
    label = data.get('label')
    shape = data.get('shape', DEFAULT_SHAPE)
    return FlowNode(
        id=node_id,
        label=node_id if label is None else str(label),
        shape=shape if isinstance(shape, str) and shape in SHAPE_SYNTAX else DEFAULT_SHAPE,
        position=_position_from_json(data.get('position')),
    )


def edge_from_json(data: dict, index: int = 0) -> FlowEdge:
    """Build a FlowEdge from a JSON dict. Raises ValueError without endpoints."""
    if not isinstance(data, dict) or not data.get('source') or not data.get('target'):
        raise ValueError(f"edge record needs source and target: {data!r}")
    source = str(data['source'])
    target = str(data['target'])
    return FlowEdge(
        id=str(data.get('id') or f"e{source}-{target}-{index}"),
        source=source,
        target=target,
        label=data.get('label') or None,
        animated=bool(data.get('animated', False)),
        emphasized=bool(data.get('emphasized', False)),
    )


def _records(data: dict, key: str) -> list:
    records = data.get(key)
    if records is None:
        return []
    if not isinstance(records, list):
        raise ValueError(f"graph {key} must be a list, got {type(records).__name__}")
    return records


def from_json(data: dict) -> FlowGraph:
    """Deserialize a dict (from JSON) into a FlowGraph."""
    if not isinstance(data, dict):
        raise ValueError("graph payload must be a JSON object")
    direction = str(data.get('direction') or DEFAULT_DIRECTION).upper()
    graph = FlowGraph(direction=direction if direction in DIRECTIONS else DEFAULT_DIRECTION)
    nodes = _records(data, 'nodes')
    edges = _records(data, 'edges')
    for n in nodes:
        graph.add_node(node_from_json(n))
    for i, e in enumerate(edges):
        graph.edges.append(edge_from_json(e, i))
    return graph


def save_graph(graph: FlowGraph, path: str) -> None:
    """Write a FlowGraph to a .graph.json file."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, 'w', encoding='utf-8') as f:
        json.dump(to_json(graph), f, indent=2)


def load_graph(path: str) -> FlowGraph:
    """Read a .graph.json file and return a FlowGraph."""
    with open(path, 'r', encoding='utf-8') as f:
        return from_json(json.load(f))


def summarize(graph: FlowGraph) -> Dict[str, Any]:
    """Element counts for reporting."""
    return {
        'node_count': len(graph.nodes),
        'edge_count': len(graph.edges),
        'orphan_count': len(graph.orphans()),
        'direction': graph.direction,
    }

