"""Internal Visualization Model: positioned, LOD-classified code graphs."""

from .aggregates import calculate_bounds, calculate_stats, collect_languages
from .builder import IVMBuilder, create_builder
from .config import BuildOptions, load_build_options
from .graph_assembler import GraphAssembler, build_graph, create_edge, create_node, generate_edge_id
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
    Position3D,
)
from .layout import assign_grid_positions, assign_hierarchical_positions
from .lod import LODConfig, assign_edge_lod, assign_lod, create_lod_graph, filter_graph_by_lod
from .mutations import add_edge, add_node, remove_edge, remove_node, update_node
from .validation import GraphValidationError, assert_valid_graph, validate_graph

__all__ = [
    "IVM_SCHEMA_VERSION",
    "DEFAULT_LOD",
    "Position3D",
    "BoundingBox",
    "Node",
    "Edge",
    "GraphStats",
    "GraphMetadata",
    "IVMGraph",
    "NodeInput",
    "EdgeInput",
    "GraphInput",
    "BuildOptions",
    "load_build_options",
    "assign_lod",
    "assign_edge_lod",
    "assign_grid_positions",
    "assign_hierarchical_positions",
    "calculate_bounds",
    "calculate_stats",
    "collect_languages",
    "GraphAssembler",
    "build_graph",
    "create_node",
    "create_edge",
    "generate_edge_id",
    "add_node",
    "add_edge",
    "remove_node",
    "remove_edge",
    "update_node",
    "IVMBuilder",
    "create_builder",
    "LODConfig",
    "filter_graph_by_lod",
    "create_lod_graph",
    "GraphValidationError",
    "validate_graph",
    "assert_valid_graph",
]
