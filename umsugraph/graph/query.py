"""Node lookup by name."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import MergedGraph, NodeRecord

DESCRIPTION_FIELD = "desc_html"


@dataclass
class NodeSummary:
    node: NodeRecord
    links_by_name: dict[str, list[str]] = field(default_factory=dict)  # relation -> neighbor labels
    description: str | None = None


def find_nodes(graph: MergedGraph, query: str) -> list[NodeRecord]:
    """Nodes whose name contains `query`, case-insensitively, in graph order."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [n for n in graph.nodes if isinstance(n.name, str) and needle in n.name.lower()]


def node_summary(graph: MergedGraph, name: str) -> NodeSummary | None:
    """The first node named `name` with its links grouped by relation name."""
    node = next((n for n in graph.nodes if n.name == name), None)
    if node is None:
        return None

    by_id = {n.id: n for n in graph.nodes}
    links_by_name: dict[str, list[str]] = {}
    for link in graph.links:
        if not link.touches(node.id):
            continue
        other_id = link.target if link.source == node.id else link.source
        other = by_id.get(other_id)
        links_by_name.setdefault("" if link.name is None else str(link.name), []).append(other.label if other else other_id)

    description = node.extra.get(DESCRIPTION_FIELD)
    return NodeSummary(
        node=node,
        links_by_name=links_by_name,
        description=description if isinstance(description, str) else None,
    )
