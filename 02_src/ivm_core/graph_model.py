"""IVM data model primitives: positions, nodes, edges and graph snapshots."""

import copy
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Mapping, Tuple

from typing_extensions import NotRequired, TypedDict

IVM_SCHEMA_VERSION = "1.0.0"

# Level used for unknown node types and for edges with a missing endpoint.
DEFAULT_LOD = 3

LOD_LEVELS: Tuple[int, ...] = (0, 1, 2, 3, 4, 5)

LOD_DESCRIPTIONS: Dict[int, str] = {
    0: "Repository level - shows only repositories",
    1: "Package level - shows packages/modules",
    2: "Directory level - shows directories",
    3: "File level - shows files",
    4: "Class/Function level - shows major code elements",
    5: "Full detail - shows all code elements",
}

NODE_TYPES: Tuple[str, ...] = (
    "file",
    "directory",
    "module",
    "class",
    "interface",
    "function",
    "method",
    "variable",
    "type",
    "enum",
    "namespace",
    "package",
    "repository",
)

EDGE_TYPES: Tuple[str, ...] = (
    "imports",
    "exports",
    "extends",
    "implements",
    "calls",
    "uses",
    "contains",
    "depends_on",
    "type_of",
    "returns",
    "parameter_of",
)


class NodeInput(TypedDict):
    id: str
    type: str
    metadata: Dict[str, Any]
    parent_id: NotRequired[str]
    style: NotRequired[Dict[str, Any]]


class EdgeInput(TypedDict):
    source: str
    target: str
    type: str
    id: NotRequired[str]
    metadata: NotRequired[Dict[str, Any]]
    style: NotRequired[Dict[str, Any]]


class GraphInput(TypedDict):
    nodes: List[NodeInput]
    edges: List[EdgeInput]
    metadata: NotRequired[Dict[str, Any]]


@dataclass(frozen=True)
class Position3D:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class BoundingBox:
    min: Position3D = field(default_factory=Position3D)
    max: Position3D = field(default_factory=Position3D)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {"min": self.min.to_dict(), "max": self.max.to_dict()}


class _ReadOnlyMappings:
    """Holds the fields named in ``_mapping_fields`` as read-only views.

    Each view wraps a private copy, so snapshots that share an element can not
    change each other through its mappings.
    """

    _mapping_fields: ClassVar[Tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        for name in self._mapping_fields:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, MappingProxyType(dict(value)))

    def __deepcopy__(self, memo: Dict[int, Any]) -> Any:
        changes = {}
        for name in self._mapping_fields:
            value = getattr(self, name)
            if value is not None:
                changes[name] = copy.deepcopy(dict(value), memo)
        return replace(self, **changes)


@dataclass(frozen=True)
class Node(_ReadOnlyMappings):
    _mapping_fields = ("metadata", "style")

    id: str
    type: str
    position: Position3D = field(default_factory=Position3D)
    lod: int = DEFAULT_LOD
    parent_id: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    style: Mapping[str, Any] | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "position": self.position.to_dict(),
            "lod": self.lod,
            "metadata": dict(self.metadata),
        }
        if self.parent_id is not None:
            payload["parentId"] = self.parent_id
        if self.style is not None:
            payload["style"] = dict(self.style)
        return payload


@dataclass(frozen=True)
class Edge(_ReadOnlyMappings):
    _mapping_fields = ("metadata", "style")

    id: str
    source: str
    target: str
    type: str
    lod: int = DEFAULT_LOD
    metadata: Mapping[str, Any] = field(default_factory=dict)
    style: Mapping[str, Any] | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "lod": self.lod,
            "metadata": dict(self.metadata),
        }
        if self.style is not None:
            payload["style"] = dict(self.style)
        return payload


@dataclass(frozen=True)
class GraphStats(_ReadOnlyMappings):
    """Aggregate counts for a node/edge set.

    ``total_loc`` and ``avg_complexity`` stay ``None`` when no node carries the
    underlying metadata, and are left out of :meth:`to_dict` in that case.
    """

    _mapping_fields = ("nodes_by_type", "edges_by_type")

    total_nodes: int = 0
    total_edges: int = 0
    nodes_by_type: Mapping[str, int] = field(default_factory=dict)
    edges_by_type: Mapping[str, int] = field(default_factory=dict)
    total_loc: float | None = None
    avg_complexity: float | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "totalNodes": self.total_nodes,
            "totalEdges": self.total_edges,
            "nodesByType": dict(self.nodes_by_type),
            "edgesByType": dict(self.edges_by_type),
        }
        if self.total_loc is not None:
            payload["totalLoc"] = self.total_loc
        if self.avg_complexity is not None:
            payload["avgComplexity"] = self.avg_complexity
        return payload


@dataclass(frozen=True)
class GraphMetadata(_ReadOnlyMappings):
    _mapping_fields = ("properties",)

    name: str = ""
    root_path: str = ""
    schema_version: str = IVM_SCHEMA_VERSION
    generated_at: str = ""
    stats: GraphStats = field(default_factory=GraphStats)
    languages: Tuple[str, ...] = ()
    repository_url: str | None = None
    branch: str | None = None
    commit: str | None = None
    properties: Mapping[str, Any] | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "schemaVersion": self.schema_version,
            "generatedAt": self.generated_at,
            "rootPath": self.root_path,
            "stats": self.stats.to_dict(),
            "languages": list(self.languages),
        }
        optional = {
            "repositoryUrl": self.repository_url,
            "branch": self.branch,
            "commit": self.commit,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        if self.properties is not None:
            payload["properties"] = dict(self.properties)
        return payload


@dataclass(frozen=True)
class IVMGraph:
    """Immutable graph snapshot; mutators return new instances."""

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()
    metadata: GraphMetadata = field(default_factory=GraphMetadata)
    bounds: BoundingBox = field(default_factory=BoundingBox)

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "metadata": self.metadata.to_dict(),
            "bounds": self.bounds.to_dict(),
        }
