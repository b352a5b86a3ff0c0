"""Tests for graph builders and id generation."""

import random
import re
import threading

import pytest

from mermaid_flow.builders import (
    SHAPE_LABELS,
    IdSource,
    create_edge,
    create_node,
    default_graph,
    to_base36,
)
from mermaid_flow.shapes import SHAPES

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _fixed_clock():
    return 1_700_000_000.123


class TestIdSource:
    """Ids are legal, unique and reproducible with a seeded source."""

    def test_node_id_is_identifier(self):
        """Generated node ids parse as bare identifiers."""
        ids = IdSource()
        for _ in range(50):
            assert IDENTIFIER.match(ids.node_id())

    def test_unique_with_frozen_clock(self):
        """The counter keeps ids distinct even when the clock does not move."""
        ids = IdSource(rng=random.Random(0), clock=_fixed_clock)
        generated = [ids.node_id() for _ in range(500)]
        assert len(set(generated)) == len(generated)

    def test_seeded_source_is_reproducible(self):
        """Same seed and clock give the same sequence."""
        a = IdSource(rng=random.Random(42), clock=_fixed_clock)
        b = IdSource(rng=random.Random(42), clock=_fixed_clock)
        assert [a.node_id() for _ in range(5)] == [b.node_id() for _ in range(5)]

    def test_unique_across_threads(self):
        """Concurrent callers never receive the same id."""
        ids = IdSource(clock=_fixed_clock)
        results = []
        lock = threading.Lock()

        def worker():
            local = [ids.node_id() for _ in range(200)]
            local += [ids.edge_id("a", "b") for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(results) == 8 * 400
        assert len(set(results)) == len(results)

    def test_edge_id_names_endpoints(self):
        assert IdSource().edge_id("a", "b").startswith("ea-b-")

    @pytest.mark.parametrize("value, expected", [(0, "0"), (35, "z"), (36, "10"), (1295, "zz")])
    def test_base36(self, value, expected):
        assert to_base36(value) == expected


class TestFactories:
    """Node and edge records are filled with defaults."""

    def test_create_node_defaults(self):
        """A new node is a rectangle labelled 'New Node'."""
        node = create_node((10, 20))
        assert node.shape == "rectangle"
        assert node.label == "New Node"
        assert (node.position.x, node.position.y) == (10, 20)

    def test_create_node_rejects_unknown_shape(self):
        with pytest.raises(ValueError):
            create_node((0, 0), shape="hexagon")
        with pytest.raises(ValueError):
            create_node((0, 0), shape=["circle"])

    def test_create_edge(self):
        """Empty labels are stored as no label."""
        ids = IdSource()
        edge = create_edge("a", "b", label="", ids=ids)
        assert (edge.source, edge.target, edge.label) == ("a", "b", None)
        assert create_edge("a", "b", label="yes", ids=ids).label == "yes"
        assert not edge.animated and not edge.emphasized

    def test_shape_labels_cover_all_shapes(self):
        assert set(SHAPE_LABELS) == set(SHAPES)


class TestDefaultGraph:
    """The seed graph for a new diagram."""

    def test_structure(self):
        """Start -> Process -> End, top-down."""
        graph = default_graph()
        assert graph.direction == "TD"
        assert {k: (n.shape, n.label) for k, n in graph.nodes.items()} == {
            "start": ("rounded", "Start"),
            "process": ("rectangle", "Process"),
            "end": ("rounded", "End"),
        }
        assert [(e.id, e.source, e.target) for e in graph.edges] == [
            ("e-start-process", "start", "process"),
            ("e-process-end", "process", "end"),
        ]

    def test_fresh_instance_each_call(self):
        """Editing one seed graph does not affect the next."""
        first = default_graph()
        first.nodes["start"].label = "Changed"
        assert default_graph().nodes["start"].label == "Start"
