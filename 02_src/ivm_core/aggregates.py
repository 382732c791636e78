"""Bounding box, statistics and language summaries over node/edge sets."""

from typing import Dict, Iterable, List, Sequence

from .graph_model import BoundingBox, Edge, GraphStats, Node, Position3D


def calculate_bounds(nodes: Sequence[Node]) -> BoundingBox:
    # No nodes yields a zero box, never an infinite one.
    if not nodes:
        return BoundingBox()

    xs = [node.position.x for node in nodes]
    ys = [node.position.y for node in nodes]
    zs = [node.position.z for node in nodes]
    return BoundingBox(
        min=Position3D(x=min(xs), y=min(ys), z=min(zs)),
        max=Position3D(x=max(xs), y=max(ys), z=max(zs)),
    )


def _count_by_type(items: Iterable) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for item in items:
        counts[item.type] = counts.get(item.type, 0) + 1
    return counts


def calculate_stats(nodes: Sequence[Node], edges: Sequence[Edge]) -> GraphStats:
    """Count nodes and edges by type and aggregate ``loc``/``complexity``.

    A metadata key that is missing or ``None`` does not contribute. When no
    node contributes, the matching aggregate stays ``None`` instead of 0.
    """
    loc_values = [node.metadata["loc"] for node in nodes if node.metadata.get("loc") is not None]
    complexity_values = [
        node.metadata["complexity"]
        for node in nodes
        if node.metadata.get("complexity") is not None
    ]

    return GraphStats(
        total_nodes=len(nodes),
        total_edges=len(edges),
        nodes_by_type=_count_by_type(nodes),
        edges_by_type=_count_by_type(edges),
        total_loc=sum(loc_values) if loc_values else None,
        avg_complexity=sum(complexity_values) / len(complexity_values) if complexity_values else None,
    )


def collect_languages(nodes: Iterable[Node]) -> List[str]:
    languages = {node.metadata.get("language") for node in nodes}
    languages.discard(None)
    return sorted(languages)
