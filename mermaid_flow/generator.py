"""
FlowGraph -> flowchart text generator.

Emits one line per edge in graph order, declaring each endpoint in full
(``id[label]``) the first time it appears and by bare id afterwards, then
one line per node that no emitted edge defined. Output is deterministic for
a given graph so regenerated text diffs cleanly in the note body.
"""

from typing import List, Set

from mermaid_flow.flow_ast import DEFAULT_DIRECTION, DIRECTIONS, FlowEdge, FlowGraph, FlowNode
from mermaid_flow.parser import HEADER_PATTERN, SUBGRAPH_PATTERN
from mermaid_flow.shapes import BARE_ID_PATTERN, DEFAULT_SHAPE, format_node

INDENT = "  "


def arrow_for(edge: FlowEdge, preserve_styles: bool = True) -> str:
    """Return the connector for an edge, including its ``|label|`` if any."""
    arrow = '-->'
    if preserve_styles:
        if edge.emphasized:
            arrow = '==>'
        elif edge.animated:
            arrow = '-.->'
    if edge.label:
        return f'{arrow}|{edge.label}|'
    return arrow


def _is_raw_text(node: FlowNode) -> bool:
    """True for a node kept verbatim because its text was not a declaration."""
    return (
        not BARE_ID_PATTERN.match(node.id)
        and node.label == node.id
        and node.shape == DEFAULT_SHAPE
    )


def _reads_as_statement(node_id: str) -> bool:
    # A bare ``graph`` or ``subgraph`` at the start of a line is a header.
    line = f"{node_id} "
    return bool(HEADER_PATTERN.match(line) or SUBGRAPH_PATTERN.match(line))


def _node_syntax(node: FlowNode) -> str:
    if _is_raw_text(node):
        return node.id
    return format_node(node.id, node.label, node.shape)


def generate_flowchart(graph: FlowGraph, preserve_styles: bool = True, fenced: bool = False) -> str:
    """Serialize a FlowGraph to flowchart text.

    Edges whose source or target is not in ``graph.nodes`` are skipped.
    With ``preserve_styles=False`` every edge is written with a plain
    ``-->`` arrow, dropping dotted/thick styling.
    """
    direction = graph.direction if graph.direction in DIRECTIONS else DEFAULT_DIRECTION
    lines: List[str] = [f"flowchart {direction}"]
    defined: Set[str] = set()

    def node_part(node: FlowNode, starts_line: bool = False) -> str:
        if node.id in defined:
            if starts_line and _reads_as_statement(node.id):
                return _node_syntax(node)
            return node.id
        defined.add(node.id)
        return _node_syntax(node)

    for edge in graph.edges:
        source = graph.get_node(edge.source)
        target = graph.get_node(edge.target)
        if source is None or target is None:
            continue
        source_part = node_part(source, starts_line=True)
        target_part = node_part(target)
        lines.append(f"{INDENT}{source_part} {arrow_for(edge, preserve_styles)} {target_part}")

    for node in graph.nodes.values():
        if node.id not in defined:
            lines.append(f"{INDENT}{_node_syntax(node)}")

    if fenced:
        lines = ["```mermaid", *lines, "```"]
    return '\n'.join(lines)
