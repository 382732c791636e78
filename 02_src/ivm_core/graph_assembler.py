"""Graph assembly workflow: raw node/edge inputs to a stamped IVM graph."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Mapping

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from .aggregates import calculate_bounds, calculate_stats, collect_languages
from .config import BuildOptions
from .graph_model import (
    DEFAULT_LOD,
    IVM_SCHEMA_VERSION,
    BoundingBox,
    Edge,
    EdgeInput,
    GraphInput,
    GraphMetadata,
    GraphStats,
    IVMGraph,
    Node,
    NodeInput,
)
from .layout import assign_grid_positions, assign_hierarchical_positions
from .lod import assign_edge_lod, assign_lod

logger = logging.getLogger(__name__)

_CALLER_METADATA_FIELDS = ("name", "root_path", "repository_url", "branch", "commit")
_COMPUTED_METADATA_FIELDS = ("schema_version", "generated_at", "stats", "languages")


class AssemblyState(TypedDict):
    node_inputs: List[NodeInput]
    edge_inputs: List[EdgeInput]
    caller_metadata: Dict[str, Any]
    options: BuildOptions
    nodes: List[Node]
    edges: List[Edge]
    bounds: BoundingBox
    stats: GraphStats
    metadata: GraphMetadata


def generate_edge_id(source: str, target: str, edge_type: str) -> str:
    # Edges sharing (source, target, type) get the same id.
    return f"{source}--{edge_type}-->{target}"


def create_node(node_input: NodeInput) -> Node:
    style = node_input.get("style")
    return Node(
        id=node_input["id"],
        type=node_input["type"],
        lod=assign_lod(node_input["type"]),
        parent_id=node_input.get("parent_id"),
        metadata=dict(node_input.get("metadata") or {}),
        style=dict(style) if style is not None else None,
    )


def create_edge(edge_input: EdgeInput, node_map: Mapping[str, Node]) -> Edge:
    source, target, edge_type = edge_input["source"], edge_input["target"], edge_input["type"]
    source_node = node_map.get(source)
    target_node = node_map.get(target)
    source_lod = source_node.lod if source_node is not None else DEFAULT_LOD
    target_lod = target_node.lod if target_node is not None else DEFAULT_LOD

    edge_id = edge_input.get("id")
    if edge_id is None:
        edge_id = generate_edge_id(source, target, edge_type)

    style = edge_input.get("style")
    return Edge(
        id=edge_id,
        source=source,
        target=target,
        type=edge_type,
        lod=assign_edge_lod(source_lod, target_lod),
        metadata=dict(edge_input.get("metadata") or {}),
        style=dict(style) if style is not None else None,
    )


def _with_dependency_counts(node: Node, dependencies: int, dependents: int) -> Node:
    if not dependencies and not dependents:
        return node
    metadata = dict(node.metadata)
    if dependencies:
        metadata["dependencyCount"] = (metadata.get("dependencyCount") or 0) + dependencies
    if dependents:
        metadata["dependentCount"] = (metadata.get("dependentCount") or 0) + dependents
    return replace(node, metadata=metadata)


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def merge_graph_metadata(
    caller_metadata: Mapping[str, Any],
    stats: GraphStats,
    languages: List[str],
) -> GraphMetadata:
    """Caller fields first, computed fields win on collision.

    Keys that are neither known caller fields nor computed fields end up in
    ``properties``.
    """
    known = {key: caller_metadata[key] for key in _CALLER_METADATA_FIELDS if key in caller_metadata}
    properties = caller_metadata.get("properties")
    extras = {
        key: value
        for key, value in caller_metadata.items()
        if key not in _CALLER_METADATA_FIELDS
        and key not in _COMPUTED_METADATA_FIELDS
        and key != "properties"
    }
    if extras:
        properties = {**(properties or {}), **extras}

    return GraphMetadata(
        **known,
        properties=dict(properties) if properties is not None else None,
        schema_version=IVM_SCHEMA_VERSION,
        generated_at=utc_timestamp(),
        stats=stats,
        languages=tuple(languages),
    )


class GraphAssembler:
    """Runs the ordered assembly steps as a LangGraph workflow."""

    def __init__(self) -> None:
        self._workflow = self._build_workflow()

    def build(self, graph_input: GraphInput, options: BuildOptions | None = None) -> IVMGraph:
        result_state = self._workflow.invoke(
            {
                "node_inputs": list(graph_input.get("nodes", [])),
                "edge_inputs": list(graph_input.get("edges", [])),
                "caller_metadata": dict(graph_input.get("metadata") or {}),
                "options": options or BuildOptions(),
            }
        )
        graph = IVMGraph(
            nodes=tuple(result_state["nodes"]),
            edges=tuple(result_state["edges"]),
            metadata=result_state["metadata"],
            bounds=result_state["bounds"],
        )
        logger.debug(
            "Built IVM graph '%s': %s nodes, %s edges",
            graph.metadata.name,
            len(graph.nodes),
            len(graph.edges),
        )
        return graph

    def _build_workflow(self):
        graph = StateGraph(AssemblyState)
        graph.add_node("materialize_nodes", self._materialize_nodes)
        graph.add_node("count_dependencies", self._count_dependencies)
        graph.add_node("materialize_edges", self._materialize_edges)
        graph.add_node("assign_positions", self._assign_positions)
        graph.add_node("compute_aggregates", self._compute_aggregates)
        graph.add_node("stamp_metadata", self._stamp_metadata)
        graph.add_edge(START, "materialize_nodes")
        graph.add_edge("materialize_nodes", "count_dependencies")
        graph.add_edge("count_dependencies", "materialize_edges")
        graph.add_edge("materialize_edges", "assign_positions")
        graph.add_edge("assign_positions", "compute_aggregates")
        graph.add_edge("compute_aggregates", "stamp_metadata")
        graph.add_edge("stamp_metadata", END)
        return graph.compile()

    @staticmethod
    def _materialize_nodes(state: AssemblyState) -> Dict[str, Any]:
        return {"nodes": [create_node(node_input) for node_input in state["node_inputs"]]}

    @staticmethod
    def _count_dependencies(state: AssemblyState) -> Dict[str, Any]:
        dependencies: Dict[str, int] = {}
        dependents: Dict[str, int] = {}
        for edge_input in state["edge_inputs"]:
            source, target = edge_input["source"], edge_input["target"]
            dependencies[source] = dependencies.get(source, 0) + 1
            dependents[target] = dependents.get(target, 0) + 1
        nodes = [
            _with_dependency_counts(node, dependencies.get(node.id, 0), dependents.get(node.id, 0))
            for node in state["nodes"]
        ]
        return {"nodes": nodes}

    @staticmethod
    def _materialize_edges(state: AssemblyState) -> Dict[str, Any]:
        node_map = {node.id: node for node in state["nodes"]}
        edges = [create_edge(edge_input, node_map) for edge_input in state["edge_inputs"]]
        dangling = sum(
            1 for edge in edges if edge.source not in node_map or edge.target not in node_map
        )
        if dangling:
            logger.warning(
                "%s edge(s) reference unknown nodes; using LOD %s for missing endpoints",
                dangling,
                DEFAULT_LOD,
            )
        return {"edges": edges}

    @staticmethod
    def _assign_positions(state: AssemblyState) -> Dict[str, Any]:
        options = state["options"]
        nodes = state["nodes"]
        if options.assign_positions:
            if options.position_strategy == "hierarchical":
                nodes = assign_hierarchical_positions(nodes, options.spacing, options.spacing / 2)
            else:
                nodes = assign_grid_positions(nodes, options.spacing)
        return {"nodes": nodes}

    @staticmethod
    def _compute_aggregates(state: AssemblyState) -> Dict[str, Any]:
        return {
            "bounds": calculate_bounds(state["nodes"]),
            "stats": calculate_stats(state["nodes"], state["edges"]),
        }

    @staticmethod
    def _stamp_metadata(state: AssemblyState) -> Dict[str, Any]:
        metadata = merge_graph_metadata(
            state["caller_metadata"],
            stats=state["stats"],
            languages=collect_languages(state["nodes"]),
        )
        return {"metadata": metadata}


@lru_cache(maxsize=1)
def _default_assembler() -> GraphAssembler:
    return GraphAssembler()


def build_graph(graph_input: GraphInput, options: BuildOptions | None = None) -> IVMGraph:
    """Assemble a complete :class:`IVMGraph` from node and edge inputs.

    Dangling edge endpoints and empty inputs never raise: missing endpoints
    fall back to ``DEFAULT_LOD`` and an empty input yields an empty graph.
    """
    return _default_assembler().build(graph_input, options)
