"""Fluent accumulation of node/edge inputs ahead of a single build."""

from typing import Any, Dict, Iterable, List, Mapping

from .config import BuildOptions
from .graph_assembler import build_graph
from .graph_model import EdgeInput, IVMGraph, NodeInput


class IVMBuilder:
    """Collects inputs from one or more sources, then builds once."""

    def __init__(self, name: str, root_path: str) -> None:
        self.nodes: List[NodeInput] = []
        self.edges: List[EdgeInput] = []
        self.graph_metadata: Dict[str, Any] = {
            "name": name,
            "root_path": root_path,
            "languages": [],
        }

    def with_repository(
        self, url: str, branch: str | None = None, commit: str | None = None
    ) -> "IVMBuilder":
        self.graph_metadata["repository_url"] = url
        if branch is not None:
            self.graph_metadata["branch"] = branch
        if commit is not None:
            self.graph_metadata["commit"] = commit
        return self

    def with_properties(self, properties: Mapping[str, Any]) -> "IVMBuilder":
        merged = dict(self.graph_metadata.get("properties") or {})
        merged.update(properties)
        self.graph_metadata["properties"] = merged
        return self

    def add_node(self, node_input: NodeInput) -> "IVMBuilder":
        self.nodes.append(node_input)
        return self

    def add_nodes(self, node_inputs: Iterable[NodeInput]) -> "IVMBuilder":
        self.nodes.extend(node_inputs)
        return self

    def add_edge(self, edge_input: EdgeInput) -> "IVMBuilder":
        self.edges.append(edge_input)
        return self

    def add_edges(self, edge_inputs: Iterable[EdgeInput]) -> "IVMBuilder":
        self.edges.extend(edge_inputs)
        return self

    def build(self, options: BuildOptions | None = None) -> IVMGraph:
        return build_graph(
            {
                "nodes": list(self.nodes),
                "edges": list(self.edges),
                "metadata": dict(self.graph_metadata),
            },
            options,
        )


def create_builder(name: str, root_path: str) -> IVMBuilder:
    return IVMBuilder(name, root_path)
