"""Tests for the graph model, shape grammar and JSON interchange."""

import json

import pytest

from mermaid_flow.builders import default_graph
from mermaid_flow.flow_ast import (
    GRAPH_SCHEMA_VERSION,
    FlowEdge,
    FlowGraph,
    FlowNode,
    from_json,
    load_graph,
    save_graph,
    summarize,
    to_json,
)
from mermaid_flow.parser import parse_flowchart
from mermaid_flow.shapes import SHAPE_SYNTAX, delimiters, format_node


class TestShapeGrammar:
    """Delimiter table."""

    def test_table(self):
        assert SHAPE_SYNTAX == {
            "rectangle": ("[", "]"),
            "rounded": ("(", ")"),
            "diamond": ("{", "}"),
            "circle": ("((", "))"),
        }

    def test_unknown_shape_renders_as_rectangle(self):
        assert delimiters("trapezoid") == ("[", "]")

    @pytest.mark.parametrize("shape", sorted(SHAPE_SYNTAX))
    def test_format_then_parse_keeps_shape(self, shape):
        """A declaration written for a shape parses back to that shape."""
        graph = parse_flowchart(format_node("N", "Label", shape))
        assert graph.nodes["N"].shape == shape
        assert graph.nodes["N"].label == "Label"


class TestFlowGraph:
    """Graph helpers."""

    def test_orphans(self):
        """Only nodes with no incident edge are orphans."""
        graph = parse_flowchart("A --> B\nC\nD")
        assert [n.id for n in graph.orphans()] == ["C", "D"]

    def test_summarize(self):
        assert summarize(default_graph()) == {
            "node_count": 3,
            "edge_count": 2,
            "orphan_count": 0,
            "direction": "TD",
        }


class TestJsonInterchange:
    """to_json / from_json for the editor boundary."""

    def test_to_json_shape(self):
        """Nodes carry nested positions; the schema version is stamped."""
        data = to_json(default_graph())
        assert data["schema_version"] == GRAPH_SCHEMA_VERSION
        assert data["direction"] == "TD"
        assert data["nodes"][0] == {
            "id": "start",
            "label": "Start",
            "shape": "rounded",
            "position": {"x": 150, "y": 50},
        }
        assert data["edges"][0]["label"] is None

    def test_restores_parsed_graph(self):
        """A parsed graph survives a JSON trip unchanged."""
        graph = parse_flowchart("flowchart LR\nA((a)) -.->|x| B{b}\nB ==> C")
        assert from_json(json.loads(json.dumps(to_json(graph)))) == graph

    def test_defaults_and_unknown_keys(self):
        """Missing fields are defaulted and unknown ones ignored."""
        graph = from_json({
            "direction": "lr",
            "nodes": [{"id": "a", "type": "flowchartNode"}, {"id": "b", "label": "B", "shape": "blob"}],
            "edges": [{"source": "a", "target": "b", "style": {"strokeWidth": 2}}],
        })
        assert graph.direction == "LR"
        assert graph.nodes["a"].label == "a"
        assert graph.nodes["b"].shape == "rectangle"
        assert graph.edges[0] == FlowEdge(id="ea-b-0", source="a", target="b")

    def test_bad_direction_defaults_to_td(self):
        assert from_json({"direction": "diagonal"}).direction == "TD"

    def test_non_string_shape_defaults_to_rectangle(self):
        """A list or number in the shape field degrades like an unknown name."""
        graph = from_json({"nodes": [{"id": "a", "shape": ["circle"]}, {"id": "b", "shape": 3}]})
        assert [n.shape for n in graph.nodes.values()] == ["rectangle", "rectangle"]

    @pytest.mark.parametrize("payload", [
        {"nodes": [{"label": "no id"}]},
        {"edges": [{"source": "a"}]},
        {"nodes": ["A"]},
        {"nodes": 5},
        {"edges": 5},
        {"nodes": "ab"},
        [],
    ])
    def test_invalid_records_raise(self, payload):
        """Structurally broken payloads are rejected with ValueError."""
        with pytest.raises(ValueError):
            from_json(payload)

    def test_save_and_load(self, tmp_path):
        """Graphs persist to nested paths."""
        graph = FlowGraph(direction="BT")
        graph.add_node(FlowNode(id="x", label="X", shape="circle"))
        path = tmp_path / "nested" / "diagram.graph.json"
        save_graph(graph, str(path))
        assert load_graph(str(path)) == graph
