"""Tag-based group lookup for node rendering attributes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Callable

from .models import Group, NodeRecord

DEFAULT_GROUP = Group(tag="default", colour="#b3b3b3", radius=1.0)

DEFAULT_GROUPS: tuple[Group, ...] = (
    Group(tag="club", colour="#e0b152", radius=1.5),
    Group(tag="person", colour="#df5252"),
)

GroupPredicate = Callable[[Sequence[str]], bool]


def _has_tag(tag: str) -> GroupPredicate:
    return lambda tags: tag in tags


@dataclass(frozen=True)
class GroupRule:
    predicate: GroupPredicate
    group: Group


class GroupTable:
    """Ordered (predicate, attributes) pairs with a fixed default.

    The first group whose tag is on the node and which defines the requested
    property wins; otherwise the default group's value is used.
    """

    def __init__(self, groups: Iterable[Group] = DEFAULT_GROUPS, default: Group = DEFAULT_GROUP):
        self.groups: list[Group] = list(groups)
        self.default = default
        self._rules = [GroupRule(predicate=_has_tag(g.tag), group=g) for g in self.groups]

    def resolve(self, tags: Sequence[str] | None, prop: str) -> Any:
        if not tags:
            return self.default.get(prop)
        for rule in self._rules:
            value = rule.group.get(prop)
            if value is not None and rule.predicate(tags):
                return value
        return self.default.get(prop)

    def radius(self, node: NodeRecord) -> float:
        return float(self.resolve(node.tags, "radius"))

    def colour(self, node: NodeRecord) -> str:
        return str(self.resolve(node.tags, "colour"))

    def group_for(self, node: NodeRecord) -> Group | None:
        """First group matching the node's tags, regardless of the properties it defines."""
        for rule in self._rules:
            if rule.predicate(node.tags):
                return rule.group
        return None

    def __len__(self) -> int:
        return len(self.groups)
