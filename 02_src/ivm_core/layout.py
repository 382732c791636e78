"""Initial position assignment for freshly materialized nodes.

Both assigners return new nodes carrying the computed positions, in input
order; the nodes passed in are left as they are.
"""

import logging
import math
from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from .graph_model import Node, Position3D

logger = logging.getLogger(__name__)


def assign_grid_positions(nodes: Sequence[Node], spacing: float = 100.0) -> List[Node]:
    """Lay nodes out row by row on the y=0 plane, centred on the origin."""
    if not nodes:
        return []

    grid_size = math.ceil(math.sqrt(len(nodes)))
    offset = (grid_size * spacing) / 2
    positioned = []
    for index, node in enumerate(nodes):
        row, col = divmod(index, grid_size)
        position = Position3D(x=col * spacing - offset, y=0.0, z=row * spacing - offset)
        positioned.append(replace(node, position=position))

    logger.debug("Grid layout: %s nodes on a %sx%s grid", len(nodes), grid_size, grid_size)
    return positioned


def _index_children(nodes: Sequence[Node]) -> Dict[str, List[Node]]:
    children: Dict[str, List[Node]] = {}
    for node in nodes:
        if node.parent_id:
            children.setdefault(node.parent_id, []).append(node)
    return children


def assign_hierarchical_positions(
    nodes: Sequence[Node],
    horizontal_spacing: float = 100.0,
    vertical_spacing: float = 50.0,
) -> List[Node]:
    """Place ``parent_id`` trees top-down, one ``vertical_spacing`` per depth.

    Roots sit on y=0, ``2 * horizontal_spacing`` apart. Children are spread
    under their parent at the same z. Nodes that no root reaches (dangling
    parent or a ``parent_id`` cycle) keep their current position.
    """
    roots = [node for node in nodes if not node.parent_id]
    children_index = _index_children(nodes)
    positions: Dict[str, Position3D] = {}

    root_step = horizontal_spacing * 2
    root_width = len(roots) * root_step
    stack: List[Tuple[Node, float, float, float]] = [
        (root, -root_width / 2 + index * root_step + horizontal_spacing, 0.0, 0.0)
        for index, root in enumerate(roots)
    ]
    # Pop order only changes visiting order, never coordinates.
    stack.reverse()

    while stack:
        node, x, y, z = stack.pop()
        if node.id in positions:
            continue
        positions[node.id] = Position3D(x=x, y=y, z=z)

        children = children_index.get(node.id, [])
        width = len(children) * horizontal_spacing
        placed = [
            (
                child,
                x - width / 2 + index * horizontal_spacing + horizontal_spacing / 2,
                y - vertical_spacing,
                z,
            )
            for index, child in enumerate(children)
        ]
        stack.extend(reversed(placed))

    unplaced = len({node.id for node in nodes} - positions.keys())
    if unplaced:
        logger.warning(
            "Hierarchical layout left %s node(s) unplaced: missing parent or parent cycle",
            unplaced,
        )
    logger.debug("Hierarchical layout: %s roots, %s nodes placed", len(roots), len(positions))
    return [
        replace(node, position=positions[node.id]) if node.id in positions else node
        for node in nodes
    ]
