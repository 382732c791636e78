"""Functional updates on IVM graph snapshots.

Every operation returns a new :class:`IVMGraph` with bounds and stats
recomputed; the graph passed in is left untouched.
"""

from dataclasses import fields, replace
from typing import Any, Mapping, Sequence

from .aggregates import calculate_bounds, calculate_stats
from .graph_assembler import create_edge, create_node
from .graph_model import Edge, EdgeInput, IVMGraph, Node, NodeInput

_NODE_FIELDS = frozenset(item.name for item in fields(Node))


def _with_elements(graph: IVMGraph, nodes: Sequence[Node], edges: Sequence[Edge]) -> IVMGraph:
    return replace(
        graph,
        nodes=tuple(nodes),
        edges=tuple(edges),
        bounds=calculate_bounds(nodes),
        metadata=replace(graph.metadata, stats=calculate_stats(nodes, edges)),
    )


def add_node(graph: IVMGraph, node_input: NodeInput) -> IVMGraph:
    return _with_elements(graph, [*graph.nodes, create_node(node_input)], graph.edges)


def add_edge(graph: IVMGraph, edge_input: EdgeInput) -> IVMGraph:
    node_map = {node.id: node for node in graph.nodes}
    return _with_elements(graph, graph.nodes, [*graph.edges, create_edge(edge_input, node_map)])


def remove_node(graph: IVMGraph, node_id: str) -> IVMGraph:
    """Drop the node and every edge that starts or ends at it."""
    nodes = [node for node in graph.nodes if node.id != node_id]
    edges = [edge for edge in graph.edges if node_id not in (edge.source, edge.target)]
    return _with_elements(graph, nodes, edges)


def remove_edge(graph: IVMGraph, edge_id: str) -> IVMGraph:
    edges = [edge for edge in graph.edges if edge.id != edge_id]
    return _with_elements(graph, graph.nodes, edges)


def update_node(graph: IVMGraph, node_id: str, updates: Mapping[str, Any]) -> IVMGraph:
    """Shallow-merge ``updates`` into the matching node.

    ``id`` is never changed. ``lod`` is taken as given, without checking it
    against the node type. Unknown field names raise ``TypeError``.
    """
    unknown = set(updates) - _NODE_FIELDS
    if unknown:
        raise TypeError(f"Unknown node field(s): {', '.join(sorted(unknown))}")

    changes = {key: value for key, value in updates.items() if key != "id"}
    nodes = [replace(node, **changes) if node.id == node_id else node for node in graph.nodes]
    return _with_elements(graph, nodes, graph.edges)
