"""Structural analysis of merged graphs."""

from .components import (
    UndirectedGraph,
    component_containing,
    connected_components,
    induced_subgraph,
    subgraph_for_seeds,
)
from .query import NodeSummary, find_nodes, node_summary
from .strength import component_masses, strength_by_node

__all__ = [
    "UndirectedGraph",
    "component_containing",
    "connected_components",
    "induced_subgraph",
    "subgraph_for_seeds",
    "NodeSummary",
    "find_nodes",
    "node_summary",
    "component_masses",
    "strength_by_node",
]
