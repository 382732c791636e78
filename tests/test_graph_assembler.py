"""Tests for the graph assembly workflow."""

import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from ivm_core import (
    IVM_SCHEMA_VERSION,
    BoundingBox,
    BuildOptions,
    GraphAssembler,
    Position3D,
    build_graph,
    generate_edge_id,
)

from .factories import make_edge, make_node


class TestEndToEnd:
    """Repository -> file -> class built with the hierarchical layout."""

    def test_lods_and_vertical_order(self, chain_input, hierarchical_options):
        graph = build_graph(chain_input, hierarchical_options)

        repo, file_node, cls = graph.nodes
        assert [node.lod for node in graph.nodes] == [0, 3, 4]
        assert graph.edges[0].lod == 4
        assert cls.position.y < file_node.position.y < repo.position.y
        assert file_node.position.y == repo.position.y - 50

    def test_dependency_counts(self, chain_input):
        graph = build_graph(chain_input)

        by_id = {node.id: node for node in graph.nodes}
        assert by_id["file"].metadata["dependencyCount"] == 1
        assert "dependentCount" not in by_id["file"].metadata
        assert by_id["cls"].metadata["dependentCount"] == 1
        assert "dependencyCount" not in by_id["repo"].metadata

    def test_caller_inputs_are_not_mutated(self, chain_input):
        snapshot = copy.deepcopy(chain_input)

        build_graph(chain_input)

        assert chain_input == snapshot

    def test_metadata_is_stamped(self, chain_input):
        graph = build_graph(chain_input)

        metadata = graph.metadata
        assert metadata.name == "demo"
        assert metadata.root_path == "/repo"
        assert metadata.schema_version == IVM_SCHEMA_VERSION
        assert metadata.languages == ("python",)
        assert metadata.generated_at.endswith("Z")
        assert datetime.fromisoformat(metadata.generated_at.replace("Z", "+00:00")).tzinfo
        assert metadata.stats.total_nodes == len(graph.nodes) == 3
        assert metadata.stats.total_edges == len(graph.edges) == 1
        assert metadata.stats.total_loc == 120
        assert metadata.stats.avg_complexity == 4


class TestMetadataMerge:
    def test_computed_fields_override_caller_fields(self):
        graph = build_graph(
            {
                "nodes": [make_node("a", "file", language="go")],
                "edges": [],
                "metadata": {
                    "name": "svc",
                    "root_path": "/svc",
                    "branch": "main",
                    "languages": ["cobol"],
                    "schema_version": "0.0.1",
                    "generated_at": "yesterday",
                    "properties": {"team": "core"},
                    "owner": "platform",
                },
            }
        )

        metadata = graph.metadata
        assert metadata.languages == ("go",)
        assert metadata.schema_version == IVM_SCHEMA_VERSION
        assert metadata.generated_at != "yesterday"
        assert metadata.branch == "main"
        assert metadata.properties == {"team": "core", "owner": "platform"}


class TestEdges:
    """Edge materialization."""

    def test_generated_and_supplied_ids(self):
        graph = build_graph(
            {
                "nodes": [make_node("a", "file"), make_node("b", "file")],
                "edges": [make_edge("a", "b"), make_edge("b", "a", "calls", id="custom")],
            }
        )

        assert [edge.id for edge in graph.edges] == [generate_edge_id("a", "b", "imports"), "custom"]
        assert graph.edges[0].id == "a--imports-->b"

    def test_empty_supplied_id_is_kept(self):
        graph = build_graph(
            {
                "nodes": [make_node("a", "file"), make_node("b", "file")],
                "edges": [make_edge("a", "b", id="")],
            }
        )

        assert graph.edges[0].id == ""

    def test_identical_triples_share_an_id(self):
        graph = build_graph(
            {
                "nodes": [make_node("a", "file"), make_node("b", "file")],
                "edges": [make_edge("a", "b"), make_edge("a", "b")],
            }
        )

        assert graph.edges[0].id == graph.edges[1].id
        assert graph.metadata.stats.total_edges == 2

    def test_dangling_endpoints_use_default_lod(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ivm_core.graph_assembler"):
            graph = build_graph(
                {
                    "nodes": [make_node("repo", "repository"), make_node("m", "method")],
                    "edges": [make_edge("repo", "ghost"), make_edge("m", "ghost")],
                }
            )

        assert [edge.lod for edge in graph.edges] == [3, 5]
        assert graph.nodes[0].metadata["dependencyCount"] == 1
        assert "unknown nodes" in caplog.text

    def test_edge_metadata_and_style_copied(self):
        style = {"color": "#ff0000"}
        graph = build_graph(
            {
                "nodes": [make_node("a", "file"), make_node("b", "file")],
                "edges": [make_edge("a", "b", metadata={"weight": 2}, style=style)],
            }
        )

        edge = graph.edges[0]
        assert edge.metadata == {"weight": 2}
        assert edge.style == style
        assert edge.style is not style


class TestOptions:
    def test_grid_is_the_default(self, chain_input):
        graph = build_graph(chain_input)

        assert {node.position.y for node in graph.nodes} == {0}
        assert len({node.position for node in graph.nodes}) == 3

    def test_positions_can_be_skipped(self, chain_input):
        graph = build_graph(chain_input, BuildOptions(assign_positions=False))

        assert all(node.position == Position3D() for node in graph.nodes)
        assert graph.bounds == BoundingBox()

    def test_bounds_cover_layout(self, project_input, hierarchical_options):
        graph = build_graph(project_input, hierarchical_options)

        assert graph.bounds.max.y == 0
        assert graph.bounds.min.y == -200


class TestEmptyInput:
    def test_empty_graph(self):
        graph = build_graph({"nodes": [], "edges": []})

        assert graph.nodes == ()
        assert graph.edges == ()
        assert graph.bounds == BoundingBox()
        assert graph.metadata.stats.total_nodes == 0
        assert graph.metadata.languages == ()


class TestAssemblerInstance:
    def test_reusable_across_builds(self, chain_input, project_input):
        assembler = GraphAssembler()

        first = assembler.build(chain_input)
        second = assembler.build(project_input)

        assert len(first.nodes) == 3
        assert len(second.nodes) == 6


class TestToDict:
    def test_camel_case_shape(self, chain_input):
        payload = build_graph(chain_input).to_dict()

        assert set(payload) == {"nodes", "edges", "metadata", "bounds"}
        assert "parentId" not in payload["nodes"][0]
        assert payload["nodes"][1]["parentId"] == "repo"
        assert payload["metadata"]["schemaVersion"] == IVM_SCHEMA_VERSION
        assert payload["metadata"]["rootPath"] == "/repo"
        assert payload["metadata"]["stats"]["totalLoc"] == 120
        assert "repositoryUrl" not in payload["metadata"]
        assert payload["bounds"]["min"].keys() == {"x", "y", "z"}


class TestConcurrency:
    def test_parallel_builds_share_nothing(self, project_input):
        def build(index):
            graph = build_graph(
                {**project_input, "metadata": {"name": f"repo-{index}", "root_path": "/repo"}}
            )
            return graph.metadata.name, len(graph.nodes)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(build, range(8)))

        assert results == [(f"repo-{index}", 6) for index in range(8)]
