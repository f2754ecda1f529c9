"""Layered merge of graph fragments with override and deletion semantics.

Fragments later in the input sequence take precedence. The merge walks them in
reverse (highest priority first): a field keeps the first non-empty value seen
in that walk, and lower-priority fragments only fill what is still empty.

A leading "-" on a node id, link name or tag is a deletion directive. Deletions
are absolute for the duration of one merge: the positive entity is removed from
what has been accumulated so far and is blocked for every fragment still to be
walked.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..models import (
    DatasetFragment,
    LinkRecord,
    MergedGraph,
    MergeWarning,
    NodeRecord,
    is_empty,
    is_negated,
    link_key,
    strip_negation,
)

logger = logging.getLogger(__name__)

LinkKey = tuple[str, str, str]


def coerce_fragment(item: Any, *, index: int) -> DatasetFragment | None:
    """Return `item` as a fragment, or None if it lacks list `nodes`/`links`."""
    if isinstance(item, DatasetFragment):
        if isinstance(item.nodes, list) and isinstance(item.links, list):
            return item
        return None
    if not isinstance(item, Mapping):
        return None
    nodes = item.get("nodes")
    links = item.get("links")
    if not isinstance(nodes, list) or not isinstance(links, list):
        return None
    return DatasetFragment(nodes=nodes, links=links, label=_label_of(item, index))


class _Accumulator:
    """Working state of a single merge call."""

    def __init__(self) -> None:
        self.nodes: dict[str, dict[str, Any]] = {}
        self.links: dict[LinkKey, dict[str, Any]] = {}
        self.deleted_nodes: set[str] = set()
        self.deleted_links: set[LinkKey] = set()
        self.blocked_tags: dict[str, set[str]] = {}
        self.warnings: list[MergeWarning] = []

    def warn(self, fragment: str, rule: str, message: str) -> None:
        warning = MergeWarning(fragment=fragment, rule=rule, message=message)
        logger.warning("%s", warning)
        self.warnings.append(warning)

    # Nodes

    def delete_node(self, node_id: str) -> None:
        self.deleted_nodes.add(node_id)
        self.nodes.pop(node_id, None)
        for key in [k for k, link in self.links.items() if node_id in (link["source"], link["target"])]:
            del self.links[key]

    def add_node(self, raw: Mapping[str, Any], *, fragment: str) -> None:
        node_id = raw.get("id")
        if not isinstance(node_id, str) or is_empty(node_id):
            self.warn(fragment, "invalid-node", f"node without a string id skipped: {dict(raw)!r}")
            return

        if is_negated(node_id):
            pos_id = strip_negation(node_id)
            if is_empty(pos_id):
                self.warn(fragment, "empty-negation", f"node id {node_id!r} negates nothing")
                return
            self.delete_node(pos_id)
            return

        if node_id in self.deleted_nodes:
            return

        tags = self._tags_of(raw, node_id=node_id, fragment=fragment)
        existing = self.nodes.get(node_id)
        if existing is None:
            entry = {k: copy.deepcopy(v) for k, v in raw.items() if k != "tags"}
            entry["tags"] = tags
            self.nodes[node_id] = entry
            return

        _fill_fields(existing, raw, skip=("id", "tags"))
        blocked = self.blocked_tags.get(node_id, set())
        kept = [t for t in existing["tags"] if t not in blocked]
        kept.extend(t for t in tags if t not in kept)
        existing["tags"] = kept

    def _tags_of(self, raw: Mapping[str, Any], *, node_id: str, fragment: str) -> list[str]:
        """Positive tags of `raw` that survive, recording its negated tags as blocked."""
        raw_tags = raw.get("tags")
        if raw_tags is None:
            raw_tags = []
        elif not isinstance(raw_tags, (list, tuple)):
            self.warn(fragment, "invalid-tags", f"tags of node {node_id!r} are not a list; ignored")
            raw_tags = []

        blocked = self.blocked_tags.setdefault(node_id, set())
        for tag in raw_tags:
            if is_negated(tag):
                pos_tag = strip_negation(tag)
                if is_empty(pos_tag):
                    self.warn(fragment, "empty-negation", f"tag {tag!r} on node {node_id!r} negates nothing")
                    continue
                blocked.add(pos_tag)

        out: list[str] = []
        for tag in raw_tags:
            if not isinstance(tag, str) or is_negated(tag) or tag in blocked or tag in out:
                continue
            out.append(tag)
        return out

    # Links

    def add_link(self, raw: Mapping[str, Any], *, fragment: str) -> None:
        source = raw.get("source")
        target = raw.get("target")
        if not isinstance(source, str) or not isinstance(target, str):
            self.warn(fragment, "invalid-link", f"link without string endpoints skipped: {dict(raw)!r}")
            return

        name = raw.get("name")
        negated = is_negated(name)
        if negated and is_empty(strip_negation(name)):
            self.warn(fragment, "empty-negation", f"link name {name!r} between {source!r} and {target!r} negates nothing")
            return

        key = link_key(source, target, name)
        if negated:
            self.deleted_links.add(key)
            self.links.pop(key, None)
            return

        if key in self.deleted_links or source in self.deleted_nodes or target in self.deleted_nodes:
            return

        existing = self.links.get(key)
        if existing is None:
            self.links[key] = copy.deepcopy(dict(raw))
        else:
            _fill_fields(existing, raw, skip=())

    def result(self) -> MergedGraph:
        return MergedGraph(
            nodes=[NodeRecord.from_dict(n) for n in self.nodes.values()],
            links=[LinkRecord.from_dict(l) for l in self.links.values()],
            warnings=list(self.warnings),
        )


def _label_of(item: Any, index: int) -> str:
    label = item.get("label") if isinstance(item, Mapping) else getattr(item, "label", None)
    return label if isinstance(label, str) and label else f"fragment[{index}]"


def _fill_fields(existing: dict[str, Any], incoming: Mapping[str, Any], *, skip: tuple[str, ...]) -> None:
    """Copy incoming fields that are still unset or empty in `existing`."""
    for key, value in incoming.items():
        if key in skip:
            continue
        if key not in existing or (is_empty(existing[key]) and not is_empty(value)):
            existing[key] = copy.deepcopy(value)


def merge_fragments(fragments: Sequence[Any]) -> MergedGraph:
    """Merge fragments into one graph; later fragments have higher priority.

    Malformed fragments (missing or non-list `nodes`/`links`) are skipped and
    reported in `MergedGraph.warnings`. Nothing in the output aliases the inputs.
    """
    acc = _Accumulator()

    coerced: list[tuple[str, DatasetFragment]] = []
    for index, item in enumerate(fragments):
        fragment = coerce_fragment(item, index=index)
        if fragment is None:
            acc.warn(_label_of(item, index), "malformed-fragment", "fragment has no nodes/links lists; skipped")
            continue
        coerced.append((fragment.label or f"fragment[{index}]", fragment))

    for label, fragment in reversed(coerced):
        logger.debug("merging %s (%d nodes, %d links)", label, len(fragment.nodes), len(fragment.links))

        for raw in fragment.nodes:
            if not isinstance(raw, Mapping):
                acc.warn(label, "invalid-node", f"node entry is not a mapping: {raw!r}")
                continue
            acc.add_node(raw, fragment=label)

        for raw in fragment.links:
            if not isinstance(raw, Mapping):
                acc.warn(label, "invalid-link", f"link entry is not a mapping: {raw!r}")
                continue
            acc.add_link(raw, fragment=label)

    return acc.result()
