"""Component mass and per-node positional strength.

Each component's mass is the sum of its nodes' squared radii. Masses are
mapped linearly onto the strength bounds so that heavy clusters are pulled
toward the centre harder than small outlying ones.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..config import StrengthBounds
from ..groups import GroupTable
from ..models import Component, MergedGraph


def component_masses(graph: MergedGraph, components: Sequence[Component], groups: GroupTable) -> list[float]:
    """Mass of each component, in component order."""
    radius_by_id = {node.id: groups.radius(node) for node in graph.nodes}
    default_radius = float(groups.default.radius or 1.0)
    return [sum(radius_by_id.get(node_id, default_radius) ** 2 for node_id in component) for component in components]


def _interpolate(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    out = out_min + (value - in_min) / (in_max - in_min) * (out_max - out_min)
    return min(max(out, out_min), out_max)


def strength_by_node(
    graph: MergedGraph,
    components: Sequence[Component],
    groups: GroupTable,
    bounds: StrengthBounds | None = None,
) -> dict[str, float]:
    """Map every node id in `components` to a strength within the bounds."""
    bounds = bounds or StrengthBounds()
    if not components:
        return {}

    masses = component_masses(graph, components, groups)
    min_mass = min(masses)
    max_mass = max(masses)

    out: dict[str, float] = {}
    for component, mass in zip(components, masses):
        if min_mass == max_mass:
            value = bounds.midpoint
        else:
            value = _interpolate(mass, min_mass, max_mass, bounds.min, bounds.max)
        for node_id in component:
            out[node_id] = value
    return out
