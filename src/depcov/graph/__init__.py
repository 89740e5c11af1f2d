"""Dependency DAG construction."""

from depcov.graph.builder import GraphBuilder, build_graph, load_manifest
from depcov.graph.dag import DependencyGraph

__all__ = [
    "DependencyGraph",
    "GraphBuilder",
    "build_graph",
    "load_manifest",
]
