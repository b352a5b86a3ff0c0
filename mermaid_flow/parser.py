"""
Flowchart text -> FlowGraph parser.

Reads the flowchart subset the visual editor understands: an optional
``flowchart <DIR>`` / ``graph <DIR>`` header, node declarations in the four
shapes from ``mermaid_flow.shapes``, and edges with plain, dotted or thick
arrows and optional ``|label|`` text. Subgraph boundaries and style/class
directives are recognised and dropped.

The input is live editor text, so parsing never raises: anything that does
not match a known form becomes a rectangle node keyed by its raw text.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from mermaid_flow.flow_ast import DEFAULT_DIRECTION, FlowEdge, FlowGraph, FlowNode, Position
from mermaid_flow.shapes import BARE_ID_PATTERN, DEFAULT_SHAPE, NODE_PATTERNS

GRID_COLUMNS = 3
GRID_ORIGIN = (50, 50)
GRID_SPACING_X = 200
GRID_SPACING_Y = 150

HEADER_PATTERN = re.compile(r'^(?:graph|flowchart)(?:\s+|$)', re.IGNORECASE)
DIRECTION_PATTERN = re.compile(r'^(?:graph|flowchart)\s+(TD|TB|BT|LR|RL)\b', re.IGNORECASE)
SUBGRAPH_PATTERN = re.compile(r'^subgraph(?:\s+|$)', re.IGNORECASE)
SKIPPED_PREFIXES = ('style', 'class')

# Dotted and thick forms first so '-.->' is not read as a '-' prefix.
ARROW = r'-\.+->|-\.+-|={2,}>|={3,}|-{2,}>|-{3,}'
EDGE_PATTERN = re.compile(
    rf'^(?P<source>.+?)\s*(?P<arrow>{ARROW})\s*(?:\|(?P<label>[^|]*)\|)?\s*(?P<target>.+)$'
)


@dataclass
class NodeSpec:
    """A node definition as written at one place in the source."""
    id: str
    label: str
    shape: str = DEFAULT_SHAPE

    @property
    def is_bare(self) -> bool:
        return self.label == self.id


def parse_node_shape(definition: str) -> NodeSpec:
    """Classify a node token, e.g. ``A((Start))`` -> circle 'Start'."""
    for shape, pattern in NODE_PATTERNS:
        m = pattern.match(definition)
        if m:
            return NodeSpec(id=m.group(1), label=m.group(2), shape=shape)

    m = BARE_ID_PATTERN.match(definition)
    if m:
        return NodeSpec(id=m.group(1), label=m.group(1))

    return NodeSpec(id=definition, label=definition)


def merge_node(existing: FlowNode, candidate: NodeSpec) -> FlowNode:
    """Return the node to keep when *candidate* redeclares *existing*.

    A more specific declaration replaces a bare one; everything else keeps
    the first definition. Position is never changed.
    """
    if existing.label == existing.id and not candidate.is_bare:
        return replace(existing, label=candidate.label, shape=candidate.shape)
    return existing


def grid_position(index: int) -> Position:
    col = index % GRID_COLUMNS
    row = index // GRID_COLUMNS
    return Position(
        x=GRID_ORIGIN[0] + col * GRID_SPACING_X,
        y=GRID_ORIGIN[1] + row * GRID_SPACING_Y,
    )


def arrow_flags(arrow: str) -> Dict[str, bool]:
    return {'animated': '.' in arrow, 'emphasized': '=' in arrow}


def _clean_lines(text: str) -> List[str]:
    lines: List[str] = []
    for raw in text.split('\n'):
        line = raw.strip()
        if not line or line.startswith('%%') or line.startswith('```'):
            continue
        line = line.rstrip(';').rstrip()
        if line:
            lines.append(line)
    return lines


def parse_direction(first_line: str) -> str:
    m = DIRECTION_PATTERN.match(first_line)
    return m.group(1).upper() if m else DEFAULT_DIRECTION


def parse_flowchart(text: Optional[str]) -> FlowGraph:
    """Parse flowchart source into a fresh FlowGraph."""
    lines = _clean_lines(text or '')
    graph = FlowGraph(direction=parse_direction(lines[0]) if lines else DEFAULT_DIRECTION)

    def ensure_node(definition: str) -> str:
        spec = parse_node_shape(definition)
        existing = graph.get_node(spec.id)
        if existing is None:
            graph.add_node(FlowNode(
                id=spec.id,
                label=spec.label,
                shape=spec.shape,
                position=grid_position(len(graph.nodes)),
            ))
        else:
            graph.nodes[spec.id] = merge_node(existing, spec)
        return spec.id

    for line in lines:
        if HEADER_PATTERN.match(line):
            continue
        if SUBGRAPH_PATTERN.match(line) or line == 'end':
            continue

        m = EDGE_PATTERN.match(line)
        if m:
            source = ensure_node(m.group('source').strip())
            target = ensure_node(m.group('target').strip())
            label = (m.group('label') or '').strip()
            graph.edges.append(FlowEdge(
                id=f"e{source}-{target}-{len(graph.edges)}",
                source=source,
                target=target,
                label=label or None,
                **arrow_flags(m.group('arrow')),
            ))
            continue

        if line.startswith(SKIPPED_PREFIXES):
            continue
        ensure_node(line)

    return graph
