"""Shared fixtures for IVM tests."""

import pytest

from ivm_core import BuildOptions, build_graph

from .factories import make_edge, make_node


@pytest.fixture
def chain_input():
    """Repository -> file -> class parent chain with one containment edge."""
    return {
        "nodes": [
            make_node("repo", "repository"),
            make_node("file", "file", parent_id="repo", language="python", loc=120),
            make_node("cls", "class", parent_id="file", language="python", complexity=4),
        ],
        "edges": [make_edge("file", "cls", "contains")],
        "metadata": {"name": "demo", "root_path": "/repo"},
    }


@pytest.fixture
def project_input():
    return {
        "nodes": [
            make_node("repo", "repository"),
            make_node("pkg", "package", parent_id="repo"),
            make_node("a.py", "file", parent_id="pkg", language="python", loc=40, complexity=2),
            make_node("b.ts", "file", parent_id="pkg", language="typescript", loc=60, complexity=6),
            make_node("A", "class", parent_id="a.py", language="python"),
            make_node("run", "method", parent_id="A", language="python"),
        ],
        "edges": [
            make_edge("pkg", "a.py", "contains"),
            make_edge("pkg", "b.ts", "contains"),
            make_edge("a.py", "b.ts", "imports"),
            make_edge("A", "run", "contains"),
            make_edge("run", "b.ts", "calls"),
        ],
        "metadata": {"name": "project", "root_path": "/repo"},
    }


@pytest.fixture
def hierarchical_options():
    return BuildOptions(position_strategy="hierarchical", spacing=100)


@pytest.fixture
def project_graph(project_input):
    return build_graph(project_input)
