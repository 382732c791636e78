"""Opt-in strict validation of IVM graphs.

The build path is lenient: dangling references and odd metadata never stop a
graph from being assembled. Callers that need referential integrity run the
checks here before rendering or export.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Set

from .graph_model import (
    EDGE_TYPES,
    IVM_SCHEMA_VERSION,
    LOD_LEVELS,
    NODE_TYPES,
    BoundingBox,
    Edge,
    GraphMetadata,
    GraphStats,
    IVMGraph,
    Node,
    Position3D,
)


class GraphValidationError(ValueError):
    """Raised by the ``assert_valid_*`` helpers."""


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    path: str
    value: Any = None


@dataclass
class ValidationResult:
    valid: bool = True
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.valid = not self.errors

    def error(self, code: str, message: str, path: str, value: Any = None) -> None:
        self.errors.append(ValidationIssue(code, message, path, value))
        self.valid = False

    def warn(self, code: str, message: str, path: str, value: Any = None) -> None:
        self.warnings.append(ValidationIssue(code, message, path, value))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def is_valid_node_type(value: Any) -> bool:
    return value in NODE_TYPES


def is_valid_edge_type(value: Any) -> bool:
    return value in EDGE_TYPES


def is_valid_lod_level(value: Any) -> bool:
    return _is_number(value) and value in LOD_LEVELS


def is_valid_position(value: Any) -> bool:
    if not isinstance(value, Position3D):
        return False
    coords = (value.x, value.y, value.z)
    return all(_is_number(coord) and math.isfinite(coord) for coord in coords)


def validate_position(position: Any, path: str) -> ValidationResult:
    result = ValidationResult()
    if not is_valid_position(position):
        result.error(
            "INVALID_POSITION", "Position must have finite x, y, z number properties", path, position
        )
    return result


def validate_node_metadata(metadata: Any, path: str) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(metadata, Mapping):
        result.error("INVALID_METADATA", "Metadata must be a mapping", path, metadata)
        return result

    if not _is_non_empty_str(metadata.get("label")):
        result.error(
            "MISSING_LABEL",
            "Node metadata must have a non-empty label",
            f"{path}.label",
            metadata.get("label"),
        )
    if not _is_non_empty_str(metadata.get("path")):
        result.error(
            "MISSING_PATH",
            "Node metadata must have a non-empty path",
            f"{path}.path",
            metadata.get("path"),
        )

    loc = metadata.get("loc")
    if loc is not None and not (_is_number(loc) and loc >= 0 and float(loc).is_integer()):
        result.warn(
            "INVALID_LOC", "Lines of code should be a non-negative integer", f"{path}.loc", loc
        )

    complexity = metadata.get("complexity")
    if complexity is not None and not (_is_number(complexity) and complexity >= 0):
        result.warn(
            "INVALID_COMPLEXITY",
            "Complexity should be a non-negative number",
            f"{path}.complexity",
            complexity,
        )
    return result


def validate_node(node: Node, path: str = "node") -> ValidationResult:
    result = ValidationResult()
    if not isinstance(node, Node):
        result.error("INVALID_NODE", "Node must be a Node instance", path, node)
        return result

    if not _is_non_empty_str(node.id):
        result.error("MISSING_ID", "Node must have a non-empty id", f"{path}.id", node.id)
    if not is_valid_node_type(node.type):
        result.error(
            "INVALID_NODE_TYPE",
            f"Node type must be one of: {', '.join(NODE_TYPES)}",
            f"{path}.type",
            node.type,
        )
    result.extend(validate_position(node.position, f"{path}.position"))
    if not is_valid_lod_level(node.lod):
        result.error(
            "INVALID_LOD",
            f"LOD level must be one of: {', '.join(map(str, LOD_LEVELS))}",
            f"{path}.lod",
            node.lod,
        )
    result.extend(validate_node_metadata(node.metadata, f"{path}.metadata"))
    if node.parent_id is not None and not isinstance(node.parent_id, str):
        result.error(
            "INVALID_PARENT_ID", "Parent ID must be a string", f"{path}.parentId", node.parent_id
        )
    return result


def validate_edge(edge: Edge, path: str, node_ids: Set[str]) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(edge, Edge):
        result.error("INVALID_EDGE", "Edge must be an Edge instance", path, edge)
        return result

    if not _is_non_empty_str(edge.id):
        result.error("MISSING_ID", "Edge must have a non-empty id", f"{path}.id", edge.id)

    for end, value in (("source", edge.source), ("target", edge.target)):
        if not _is_non_empty_str(value):
            result.error(
                f"MISSING_{end.upper()}", f"Edge must have a non-empty {end}", f"{path}.{end}", value
            )
        elif value not in node_ids:
            result.error(
                f"INVALID_{end.upper()}",
                f"Edge {end} references non-existent node: {value}",
                f"{path}.{end}",
                value,
            )

    if not is_valid_edge_type(edge.type):
        result.error(
            "INVALID_EDGE_TYPE",
            f"Edge type must be one of: {', '.join(EDGE_TYPES)}",
            f"{path}.type",
            edge.type,
        )
    if not is_valid_lod_level(edge.lod):
        result.error(
            "INVALID_LOD",
            f"LOD level must be one of: {', '.join(map(str, LOD_LEVELS))}",
            f"{path}.lod",
            edge.lod,
        )
    if edge.source == edge.target:
        result.warn(
            "SELF_REFERENCE", "Edge references the same node as source and target", path
        )
    return result


def validate_graph_metadata(metadata: GraphMetadata, path: str = "metadata") -> ValidationResult:
    result = ValidationResult()
    if not isinstance(metadata, GraphMetadata):
        result.error("INVALID_METADATA", "Graph metadata must be a GraphMetadata", path, metadata)
        return result

    if not _is_non_empty_str(metadata.name):
        result.error(
            "MISSING_NAME", "Graph metadata must have a non-empty name", f"{path}.name", metadata.name
        )
    if not isinstance(metadata.schema_version, str):
        result.error(
            "MISSING_SCHEMA_VERSION",
            "Graph metadata must have a schemaVersion",
            f"{path}.schemaVersion",
            metadata.schema_version,
        )
    elif metadata.schema_version != IVM_SCHEMA_VERSION:
        result.warn(
            "VERSION_MISMATCH",
            f"Schema version {metadata.schema_version} differs from current version "
            f"{IVM_SCHEMA_VERSION}",
            f"{path}.schemaVersion",
            metadata.schema_version,
        )
    if not _is_non_empty_str(metadata.generated_at):
        result.error(
            "MISSING_GENERATED_AT",
            "Graph metadata must have a generatedAt timestamp",
            f"{path}.generatedAt",
            metadata.generated_at,
        )
    if not _is_non_empty_str(metadata.root_path):
        result.error(
            "MISSING_ROOT_PATH",
            "Graph metadata must have a non-empty rootPath",
            f"{path}.rootPath",
            metadata.root_path,
        )
    if not isinstance(metadata.stats, GraphStats):
        result.error(
            "MISSING_STATS", "Graph metadata must have stats", f"{path}.stats", metadata.stats
        )
    return result


def validate_graph(graph: IVMGraph) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(graph, IVMGraph):
        result.error("INVALID_GRAPH", "Graph must be an IVMGraph", "", graph)
        return result

    node_ids: Set[str] = set()
    duplicate_node_ids: List[str] = []
    for index, node in enumerate(graph.nodes):
        result.extend(validate_node(node, f"nodes[{index}]"))
        node_id = getattr(node, "id", None)
        if isinstance(node_id, str):
            if node_id in node_ids and node_id not in duplicate_node_ids:
                duplicate_node_ids.append(node_id)
            node_ids.add(node_id)
    if duplicate_node_ids:
        result.error(
            "DUPLICATE_NODE_IDS",
            f"Duplicate node IDs found: {', '.join(duplicate_node_ids)}",
            "nodes",
            duplicate_node_ids,
        )

    edge_ids: Set[str] = set()
    duplicate_edge_ids: List[str] = []
    for index, edge in enumerate(graph.edges):
        result.extend(validate_edge(edge, f"edges[{index}]", node_ids))
        edge_id = getattr(edge, "id", None)
        if isinstance(edge_id, str):
            if edge_id in edge_ids and edge_id not in duplicate_edge_ids:
                duplicate_edge_ids.append(edge_id)
            edge_ids.add(edge_id)
    if duplicate_edge_ids:
        result.error(
            "DUPLICATE_EDGE_IDS",
            f"Duplicate edge IDs found: {', '.join(duplicate_edge_ids)}",
            "edges",
            duplicate_edge_ids,
        )

    for index, node in enumerate(graph.nodes):
        parent_id = getattr(node, "parent_id", None)
        if parent_id is not None and parent_id not in node_ids:
            result.error(
                "INVALID_PARENT_REFERENCE",
                f"Node references non-existent parent: {parent_id}",
                f"nodes[{index}].parentId",
                parent_id,
            )

    result.extend(validate_graph_metadata(graph.metadata))

    if not isinstance(graph.bounds, BoundingBox):
        result.error("MISSING_BOUNDS", "Graph must have bounds", "bounds", graph.bounds)
    else:
        result.extend(validate_position(graph.bounds.min, "bounds.min"))
        result.extend(validate_position(graph.bounds.max, "bounds.max"))
    return result


def _raise_if_invalid(result: ValidationResult, subject: str) -> None:
    if result.valid:
        return
    lines = "\n".join(f"{issue.path}: {issue.message}" for issue in result.errors)
    raise GraphValidationError(f"Invalid IVM {subject}:\n{lines}")


def assert_valid_graph(graph: IVMGraph) -> None:
    _raise_if_invalid(validate_graph(graph), "graph")


def assert_valid_node(node: Node) -> None:
    _raise_if_invalid(validate_node(node, "node"), "node")


def assert_valid_edge(edge: Edge, node_ids: Set[str]) -> None:
    _raise_if_invalid(validate_edge(edge, "edge", node_ids), "edge")


def build_qa_report(graph: IVMGraph) -> Dict[str, Any]:
    result = validate_graph(graph)
    return {
        "node_count": len(graph.nodes),
        "edge_count": len(graph.edges),
        "valid": result.valid,
        "errors": [f"{issue.code}: {issue.path}" for issue in result.errors],
        "warnings": [f"{issue.code}: {issue.path}" for issue in result.warnings],
    }
