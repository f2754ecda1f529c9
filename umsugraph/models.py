"""Data models for graph fragments and merged graphs."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

# Leading character that turns an id, link name or tag into a deletion directive
NEGATION_MARKER = "-"

Component = frozenset[str]


def is_negated(value: Any) -> bool:
    """True if `value` is a string carrying the negation marker."""
    return isinstance(value, str) and value.startswith(NEGATION_MARKER)


def strip_negation(value: str) -> str:
    return value[len(NEGATION_MARKER) :] if is_negated(value) else value


def is_empty(value: Any) -> bool:
    """Values that never override an existing field during a merge.

    None, whitespace-only strings, empty sequences and empty mappings are empty.
    0 and False are not.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


@dataclass
class NodeRecord:
    """A single node of a merged graph."""

    id: str
    name: str | None = None  # display string
    tags: list[str] = field(default_factory=list)  # set semantics, insertion ordered
    extra: dict[str, Any] = field(default_factory=dict)  # any other authored field

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeRecord":
        extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in ("id", "name", "tags")}
        tags = data.get("tags")
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            tags=list(tags) if isinstance(tags, list) else [],
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id}
        if self.name is not None:
            out["name"] = self.name
        out["tags"] = list(self.tags)
        out.update(copy.deepcopy(self.extra))
        return out

    @property
    def label(self) -> str:
        return str(self.name) if not is_empty(self.name) else self.id


@dataclass
class LinkRecord:
    """An undirected, named relation between two nodes."""

    source: str
    target: str
    name: str | None = None  # relation type
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LinkRecord":
        extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in ("source", "target", "name")}
        return cls(source=data["source"], target=data["target"], name=data.get("name"), extra=extra)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"source": self.source, "target": self.target}
        if self.name is not None:
            out["name"] = self.name
        out.update(copy.deepcopy(self.extra))
        return out

    @property
    def key(self) -> tuple[str, str, str]:
        return link_key(self.source, self.target, self.name)

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


def link_key(source: str, target: str, name: Any) -> tuple[str, str, str]:
    """Direction-independent identity of a link: sorted endpoints plus base name.

    A missing name keys as ""; other non-string names key by their text.
    """
    a, b = sorted((source, target))
    if name is None:
        return (a, b, "")
    return (a, b, strip_negation(name) if isinstance(name, str) else str(name))


@dataclass
class DatasetFragment:
    """One unmerged graph document, records kept exactly as authored."""

    nodes: list[dict[str, Any]] = field(default_factory=list)
    links: list[dict[str, Any]] = field(default_factory=list)
    label: str = ""  # file name or caller supplied label, used in warnings


@dataclass(frozen=True)
class Group:
    """Rendering attributes for nodes carrying `tag`."""

    tag: str
    colour: str | None = None
    radius: float | None = None

    def get(self, prop: str) -> Any:
        if prop not in ("colour", "radius"):
            raise ValueError(f"Unknown group property: {prop}")
        return getattr(self, prop)


@dataclass(frozen=True)
class MergeWarning:
    """A non-fatal problem found while merging fragments."""

    fragment: str
    rule: str
    message: str

    def __str__(self) -> str:
        return f"WARNING: [{self.rule}] {self.fragment} - {self.message}"


@dataclass
class MergedGraph:
    """Result of a merge: unique nodes, unique links and any warnings."""

    nodes: list[NodeRecord] = field(default_factory=list)
    links: list[LinkRecord] = field(default_factory=list)
    warnings: list[MergeWarning] = field(default_factory=list)

    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def get(self, node_id: str) -> NodeRecord | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }
