"""Bidirectional converter between flowchart text and the visual editor's graph.

Parses flowchart source into a FlowGraph (nodes keyed by id, ordered edges,
layout direction) and generates source text back from an edited graph.
Pure functions, no I/O; safe to call from any thread.
"""

from mermaid_flow.builders import IdSource, create_edge, create_node, default_graph
from mermaid_flow.flow_ast import FlowEdge, FlowGraph, FlowNode, Position, from_json, to_json
from mermaid_flow.generator import generate_flowchart
from mermaid_flow.parser import parse_flowchart

__all__ = [
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "IdSource",
    "Position",
    "create_edge",
    "create_node",
    "default_graph",
    "from_json",
    "generate_flowchart",
    "parse_flowchart",
    "to_json",
]
