"""Tests for the fluent graph builder."""

from ivm_core import BuildOptions, IVMBuilder, create_builder

from .factories import make_edge, make_node


class TestIVMBuilder:
    def test_chainable_accumulation(self):
        builder = create_builder("demo", "/repo")

        result = (
            builder.add_node(make_node("repo", "repository"))
            .add_nodes([make_node("a", "file", parent_id="repo"), make_node("b", "file", parent_id="repo")])
            .add_edge(make_edge("a", "b"))
            .add_edges([make_edge("repo", "a", "contains"), make_edge("repo", "b", "contains")])
        )

        assert result is builder
        assert isinstance(builder, IVMBuilder)
        graph = builder.build()
        assert len(graph.nodes) == 3
        assert len(graph.edges) == 3
        assert graph.metadata.name == "demo"
        assert graph.metadata.root_path == "/repo"

    def test_repository_fields(self):
        graph = (
            create_builder("demo", "/repo")
            .with_repository("https://example.com/demo.git", branch="main")
            .build()
        )

        assert graph.metadata.repository_url == "https://example.com/demo.git"
        assert graph.metadata.branch == "main"
        assert graph.metadata.commit is None

    def test_properties_merge_on_write(self):
        graph = (
            create_builder("demo", "/repo")
            .with_properties({"team": "core", "tier": 1})
            .with_properties({"tier": 2})
            .build()
        )

        assert graph.metadata.properties == {"team": "core", "tier": 2}

    def test_multiple_sources_then_single_build(self):
        builder = create_builder("multi", "/repo")
        for pass_name in ("python", "typescript"):
            builder.add_node(make_node(f"{pass_name}.src", "file", language=pass_name))

        graph = builder.build(BuildOptions(position_strategy="hierarchical"))

        assert graph.metadata.languages == ("python", "typescript")
        assert [node.position.x for node in graph.nodes] == [-100, 100]

    def test_build_does_not_consume_inputs(self):
        builder = create_builder("demo", "/repo").add_node(make_node("a", "file"))

        first = builder.build()
        second = builder.add_node(make_node("b", "file")).build()

        assert len(first.nodes) == 1
        assert len(second.nodes) == 2
