"""Level-of-detail classification and LOD-based visibility filtering.

Lower levels are coarser and always visible; higher levels only show up once
the viewer zooms in:

- 0: repository
- 1: package / namespace
- 2: directory / module
- 3: file
- 4: class / interface / enum / function
- 5: type / method / variable
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Set, Tuple

from .graph_model import DEFAULT_LOD, LOD_LEVELS, Edge, GraphStats, IVMGraph, Node

logger = logging.getLogger(__name__)

NODE_TYPE_LOD: Dict[str, int] = {
    "repository": 0,
    "package": 1,
    "namespace": 1,
    "directory": 2,
    "module": 2,
    "file": 3,
    "class": 4,
    "interface": 4,
    "enum": 4,
    "function": 4,
    "type": 5,
    "method": 5,
    "variable": 5,
}


def assign_lod(node_type: str) -> int:
    return NODE_TYPE_LOD.get(node_type, DEFAULT_LOD)


def assign_edge_lod(source_lod: int, target_lod: int) -> int:
    # Both endpoints must be visible before the edge is.
    return max(source_lod, target_lod)


def is_node_visible_at_lod(node: Node, level: int) -> bool:
    return node.lod <= level


def is_edge_visible_at_lod(edge: Edge, level: int) -> bool:
    return edge.lod <= level


def get_recommended_lod(node_count: int) -> int:
    """Pick a starting detail level that keeps the visible set manageable."""
    if node_count < 50:
        return 5
    if node_count < 200:
        return 4
    if node_count < 500:
        return 3
    if node_count < 1000:
        return 2
    if node_count < 5000:
        return 1
    return 0


@dataclass(frozen=True)
class LODConfig:
    current_level: int = 3
    include_ancestors: bool = True
    collapse_edges: bool = True
    min_nodes_for_lod: int = 100


@dataclass
class LODFilterResult:
    visible_nodes: List[Node]
    visible_edges: List[Edge]
    hidden_node_count: int = 0
    hidden_edge_count: int = 0
    collapsed_edges: Dict[str, str] = field(default_factory=dict)


def build_ancestor_map(nodes: Iterable[Node]) -> Dict[str, List[str]]:
    """Map each node id to its ancestor ids, nearest first.

    Walking stops at a parent id that is not in the node set, and at the first
    repeated id when ``parent_id`` links form a cycle.
    """
    node_map = {node.id: node for node in nodes}
    ancestor_map: Dict[str, List[str]] = {}

    for node in node_map.values():
        ancestors: List[str] = []
        seen = {node.id}
        parent_id = node.parent_id
        while parent_id and parent_id not in seen:
            ancestors.append(parent_id)
            seen.add(parent_id)
            parent = node_map.get(parent_id)
            if parent is None:
                break
            parent_id = parent.parent_id
        ancestor_map[node.id] = ancestors

    return ancestor_map


def find_visible_ancestor(
    node_id: str, ancestor_map: Dict[str, List[str]], visible_ids: Set[str]
) -> str | None:
    for ancestor_id in ancestor_map.get(node_id, []):
        if ancestor_id in visible_ids:
            return ancestor_id
    return None


def filter_nodes_by_lod(
    nodes: Iterable[Node], level: int, include_ancestors: bool = True
) -> List[Node]:
    nodes = list(nodes)
    visible = [node for node in nodes if is_node_visible_at_lod(node, level)]
    if not include_ancestors:
        return visible

    visible_ids = {node.id for node in visible}
    ancestor_map = build_ancestor_map(nodes)
    node_map = {node.id: node for node in nodes}

    extra: List[Node] = []
    for node in visible:
        for ancestor_id in ancestor_map.get(node.id, []):
            ancestor = node_map.get(ancestor_id)
            if ancestor is None or ancestor_id in visible_ids:
                continue
            visible_ids.add(ancestor_id)
            extra.append(ancestor)

    return visible + extra


def filter_edges_by_lod(
    edges: Iterable[Edge],
    level: int,
    visible_ids: Set[str],
    collapse_to_ancestors: bool = True,
    ancestor_map: Dict[str, List[str]] | None = None,
) -> Tuple[List[Edge], Dict[str, str]]:
    """Keep edges visible at ``level``, re-pointing hidden endpoints if asked.

    Returns the visible edges and a map of original edge id to collapsed id.
    """
    result: List[Edge] = []
    collapsed: Dict[str, str] = {}
    seen: Set[Tuple[str, str, str]] = set()

    for edge in edges:
        if not is_edge_visible_at_lod(edge, level):
            continue

        endpoints = []
        for endpoint in (edge.source, edge.target):
            if endpoint in visible_ids:
                endpoints.append(endpoint)
            elif collapse_to_ancestors and ancestor_map is not None:
                endpoints.append(find_visible_ancestor(endpoint, ancestor_map, visible_ids))
            else:
                endpoints.append(None)
        source, target = endpoints
        if source is None or target is None or source == target:
            continue

        key = (source, target, edge.type)
        if key in seen:
            continue
        seen.add(key)

        if (source, target) == (edge.source, edge.target):
            result.append(edge)
            continue

        properties = dict(edge.metadata.get("properties") or {})
        properties.update(
            {"collapsed": True, "originalSource": edge.source, "originalTarget": edge.target}
        )
        collapsed_edge = replace(
            edge,
            id=f"collapsed_{edge.id}",
            source=source,
            target=target,
            metadata={**edge.metadata, "properties": properties},
        )
        result.append(collapsed_edge)
        collapsed[edge.id] = collapsed_edge.id

    return result, collapsed


def filter_graph_by_lod(graph: IVMGraph, config: LODConfig | None = None) -> LODFilterResult:
    config = config or LODConfig()

    if len(graph.nodes) < config.min_nodes_for_lod:
        return LODFilterResult(visible_nodes=list(graph.nodes), visible_edges=list(graph.edges))

    ancestor_map = build_ancestor_map(graph.nodes)
    visible_nodes = filter_nodes_by_lod(
        graph.nodes, config.current_level, config.include_ancestors
    )
    visible_ids = {node.id for node in visible_nodes}
    visible_edges, collapsed = filter_edges_by_lod(
        graph.edges,
        config.current_level,
        visible_ids,
        config.collapse_edges,
        ancestor_map,
    )
    logger.debug(
        "LOD %s: %s/%s nodes, %s/%s edges visible",
        config.current_level,
        len(visible_nodes),
        len(graph.nodes),
        len(visible_edges),
        len(graph.edges),
    )
    return LODFilterResult(
        visible_nodes=visible_nodes,
        visible_edges=visible_edges,
        hidden_node_count=len(graph.nodes) - len(visible_nodes),
        hidden_edge_count=len(graph.edges) - len(visible_edges),
        collapsed_edges=collapsed,
    )


def create_lod_graph(graph: IVMGraph, config: LODConfig | None = None) -> IVMGraph:
    """Project ``graph`` onto the elements visible at the configured level.

    Totals in the stats reflect the visible set; bounds are kept from the full
    graph so the camera framing does not jump between levels.
    """
    config = config or LODConfig()
    filtered = filter_graph_by_lod(graph, config)
    stats: GraphStats = replace(
        graph.metadata.stats,
        total_nodes=len(filtered.visible_nodes),
        total_edges=len(filtered.visible_edges),
    )
    properties = dict(graph.metadata.properties or {})
    properties.update(
        {
            "lodLevel": config.current_level,
            "hiddenNodes": filtered.hidden_node_count,
            "hiddenEdges": filtered.hidden_edge_count,
        }
    )
    return replace(
        graph,
        nodes=tuple(filtered.visible_nodes),
        edges=tuple(filtered.visible_edges),
        metadata=replace(graph.metadata, stats=stats, properties=properties),
    )


def get_newly_visible_nodes(graph: IVMGraph, from_level: int, to_level: int) -> List[Node]:
    if to_level <= from_level:
        return []
    return [node for node in graph.nodes if from_level < node.lod <= to_level]


def get_newly_hidden_nodes(graph: IVMGraph, from_level: int, to_level: int) -> List[Node]:
    if to_level >= from_level:
        return []
    return [node for node in graph.nodes if to_level < node.lod <= from_level]


def get_node_counts_by_lod(graph: IVMGraph) -> Dict[int, int]:
    counts = {level: 0 for level in LOD_LEVELS}
    for node in graph.nodes:
        counts[node.lod] = counts.get(node.lod, 0) + 1
    return counts


def get_cumulative_node_counts(graph: IVMGraph) -> Dict[int, int]:
    counts = get_node_counts_by_lod(graph)
    cumulative: Dict[int, int] = {}
    total = 0
    for level in LOD_LEVELS:
        total += counts[level]
        cumulative[level] = total
    return cumulative
