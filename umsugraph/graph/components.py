"""Connected components of a merged graph, treating links as undirected."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..models import Component, LinkRecord, MergedGraph, NodeRecord

logger = logging.getLogger(__name__)


@dataclass
class UndirectedGraph:
    """Adjacency view over node ids. Links to unknown ids are dropped."""

    nodes: list[str] = field(default_factory=list)  # insertion order
    adjacency: dict[str, set[str]] = field(default_factory=dict)

    @classmethod
    def from_records(cls, nodes: Sequence[NodeRecord], links: Iterable[LinkRecord]) -> "UndirectedGraph":
        g = cls()
        for node in nodes:
            g.add_node(node.id)
        for link in links:
            if link.source in g.adjacency and link.target in g.adjacency:
                g.add_edge(link.source, link.target)
        return g

    def add_node(self, node_id: str) -> None:
        if node_id not in self.adjacency:
            self.nodes.append(node_id)
            self.adjacency[node_id] = set()

    def add_edge(self, a: str, b: str) -> None:
        self.add_node(a)
        self.add_node(b)
        self.adjacency[a].add(b)
        self.adjacency[b].add(a)

    def neighbors(self, node_id: str) -> set[str]:
        return self.adjacency.get(node_id, set())

    def reachable(self, start: str) -> set[str]:
        """All node ids reachable from start, including start (BFS)."""
        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for nxt in self.neighbors(current):
                if nxt not in visited:
                    visited.add(nxt)
                    queue.append(nxt)
        return visited


def connected_components(nodes: Sequence[NodeRecord], links: Iterable[LinkRecord]) -> list[Component]:
    """Partition the node ids into connected components.

    Traversal starts from each unvisited node in input order, so the first
    component holds the first node. Nodes without links are singletons.
    """
    g = UndirectedGraph.from_records(nodes, links)
    visited: set[str] = set()
    components: list[Component] = []
    for node_id in g.nodes:
        if node_id in visited:
            continue
        members = g.reachable(node_id)
        visited |= members
        components.append(frozenset(members))
    return components


def component_containing(node_id: str, components: Iterable[Component]) -> Component | None:
    """Component holding node_id, or None if no component has it."""
    for component in components:
        if node_id in component:
            return component
    return None


def induced_subgraph(graph: MergedGraph, node_ids: set[str]) -> MergedGraph:
    """Nodes in node_ids and the links with both endpoints among them."""
    return MergedGraph(
        nodes=[n for n in graph.nodes if n.id in node_ids],
        links=[l for l in graph.links if l.source in node_ids and l.target in node_ids],
    )


def subgraph_for_seeds(
    graph: MergedGraph,
    seed_names: Iterable[str],
    components: Sequence[Component] | None = None,
) -> MergedGraph:
    """Every component containing a node named in seed_names, as an induced subgraph."""
    if components is None:
        components = connected_components(graph.nodes, graph.links)

    seeds = set(seed_names)
    selected: set[str] = set()
    matched: set[str] = set()
    for node in graph.nodes:
        if node.name not in seeds:
            continue
        matched.add(node.name)
        component = component_containing(node.id, components)
        if component is None:
            logger.warning("Node %r is not in any component", node.id)
            continue
        selected |= component

    for missing in sorted(seeds - matched):
        logger.warning("No node named %r; seed ignored", missing)

    return induced_subgraph(graph, selected)
