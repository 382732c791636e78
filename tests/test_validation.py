"""Tests for strict graph validation."""

import math
from dataclasses import replace

import pytest

from ivm_core import Position3D, add_edge, build_graph, update_node
from ivm_core.validation import (
    GraphValidationError,
    assert_valid_edge,
    assert_valid_graph,
    assert_valid_node,
    build_qa_report,
    validate_graph,
    validate_node,
    validate_node_metadata,
)

from .factories import make_edge, make_node


def codes(issues):
    return {issue.code for issue in issues}


class TestValidateGraph:
    """Whole-graph checks."""

    def test_built_graph_is_valid(self, project_graph):
        result = validate_graph(project_graph)

        assert result.valid
        assert result.errors == []
        assert result.warnings == []
        assert_valid_graph(project_graph)

    def test_dangling_edges_reported(self, project_graph):
        graph = add_edge(project_graph, make_edge("ghost", "phantom"))

        result = validate_graph(graph)

        assert not result.valid
        assert {"INVALID_SOURCE", "INVALID_TARGET"} <= codes(result.errors)
        with pytest.raises(GraphValidationError, match=r"edges\[5\]\.source"):
            assert_valid_graph(graph)

    def test_duplicate_ids(self):
        graph = build_graph(
            {
                "nodes": [make_node("a", "file"), make_node("a", "file")],
                "edges": [make_edge("a", "a"), make_edge("a", "a")],
            }
        )

        result = validate_graph(graph)

        assert {"DUPLICATE_NODE_IDS", "DUPLICATE_EDGE_IDS"} <= codes(result.errors)
        assert "SELF_REFERENCE" in codes(result.warnings)

    def test_missing_parent(self):
        graph = build_graph(
            {
                "nodes": [make_node("a", "file", parent_id="ghost")],
                "edges": [],
                "metadata": {"name": "x", "root_path": "/"},
            }
        )

        result = validate_graph(graph)

        assert codes(result.errors) == {"INVALID_PARENT_REFERENCE"}

    def test_metadata_requirements(self):
        graph = build_graph({"nodes": [], "edges": []})

        result = validate_graph(graph)

        assert codes(result.errors) == {"MISSING_NAME", "MISSING_ROOT_PATH"}

    def test_schema_version_mismatch_is_a_warning(self, project_graph):
        graph = replace(project_graph, metadata=replace(project_graph.metadata, schema_version="0.9"))

        result = validate_graph(graph)

        assert result.valid
        assert codes(result.warnings) == {"VERSION_MISMATCH"}

    def test_unknown_types_and_lod_override(self):
        graph = build_graph(
            {"nodes": [make_node("w", "widget")], "edges": [], "metadata": {"name": "x", "root_path": "/"}}
        )
        graph = update_node(graph, "w", {"lod": 9})

        result = validate_graph(graph)

        assert {"INVALID_NODE_TYPE", "INVALID_LOD"} <= codes(result.errors)

    def test_qa_report(self, project_graph):
        report = build_qa_report(add_edge(project_graph, make_edge("a.py", "ghost")))

        assert report["node_count"] == 6
        assert report["edge_count"] == 6
        assert report["valid"] is False
        assert report["errors"] == ["INVALID_TARGET: edges[5].target"]


class TestValidateNode:
    def test_metadata_warnings(self):
        result = validate_node_metadata(
            {"label": "a", "path": "/a", "loc": 1.5, "complexity": -1}, "node.metadata"
        )

        assert result.valid
        assert codes(result.warnings) == {"INVALID_LOC", "INVALID_COMPLEXITY"}

    def test_missing_label_and_path(self, project_graph):
        node = replace(project_graph.nodes[0], metadata={})

        result = validate_node(node, "nodes[0]")

        assert codes(result.errors) == {"MISSING_LABEL", "MISSING_PATH"}
        with pytest.raises(GraphValidationError):
            assert_valid_node(node)

    def test_non_finite_position(self, project_graph):
        node = replace(project_graph.nodes[0], position=Position3D(math.inf, 0, 0))

        assert codes(validate_node(node).errors) == {"INVALID_POSITION"}


class TestValidateEdge:
    def test_assert_valid_edge(self, project_graph):
        node_ids = {node.id for node in project_graph.nodes}

        assert_valid_edge(project_graph.edges[0], node_ids)
        with pytest.raises(GraphValidationError, match="non-existent node"):
            assert_valid_edge(project_graph.edges[0], set())
