"""Merge command - combine fragments and emit the merged graph."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Settings
from ..dataset.loader import load_fragments
from ..dataset.merge import merge_fragments
from ..graph.components import connected_components
from ..graph.strength import strength_by_node
from ..models import MergedGraph, MergeWarning


def load_merged(paths: list[Path], *, console: Console) -> MergedGraph:
    """Load and merge fragment files, echoing load and merge warnings to `console`.

    Files the loader had to skip are reported ahead of the merge warnings.
    """
    skipped: list[MergeWarning] = []
    fragments = load_fragments(paths, skipped=skipped)
    merged = merge_fragments(fragments)
    merged.warnings[:0] = skipped
    for warning in merged.warnings:
        console.print(str(warning), style="yellow", markup=False, highlight=False)
    return merged


def layout_payload(merged: MergedGraph, settings: Settings) -> dict:
    """Force-graph input: nodes annotated with radius, colour and positional strength."""
    groups = settings.group_table()
    components = connected_components(merged.nodes, merged.links)
    strength = strength_by_node(merged, components, groups, settings.strength)

    nodes = []
    for node in merged.nodes:
        data = node.to_dict()
        data["val"] = groups.radius(node)
        data["color"] = groups.colour(node)
        data["strength"] = strength.get(node.id, settings.strength.midpoint)
        nodes.append(data)

    return {
        "nodes": nodes,
        "links": [l.to_dict() for l in merged.links],
        "forces": {
            "link_distance": settings.forces.link_distance,
            "link_strength": settings.forces.link_strength,
            "charge_strength": settings.forces.charge_strength,
        },
        "component_count": len(components),
    }


def run_merge(
    paths: list[Path],
    *,
    settings: Settings,
    fmt: str = "json",
    out: Path | None = None,
    strict: bool = False,
) -> int:
    """Merge fragments (lowest priority first) and write the result.

    Formats:
        json: merged {nodes, links}
        layout: merged graph plus per-node val/color/strength and force constants
        md: summary tables
        rich: summary tables on the terminal

    Returns 1 when `strict` is set and any file or record was skipped, 0 otherwise.
    """
    console = Console(stderr=True)

    if fmt not in ("json", "layout", "md", "rich"):
        raise ValueError("fmt must be one of: json, layout, md, rich")

    merged = load_merged(paths, console=console)
    exit_code = 1 if strict and merged.warnings else 0

    if fmt == "rich":
        target = Console(record=True) if out else Console()
        _print_rich(merged, console=target)
        if out:
            out.write_text(target.export_text(), encoding="utf-8")
            console.print(f"Wrote merge summary to {out}", style="green")
        return exit_code

    text: str
    if fmt == "json":
        text = json.dumps(merged.to_dict(), indent=2, ensure_ascii=False) + "\n"
    elif fmt == "layout":
        text = json.dumps(layout_payload(merged, settings), indent=2, ensure_ascii=False) + "\n"
    else:
        text = _to_markdown(merged)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote merged graph to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return exit_code


def _to_markdown(merged: MergedGraph) -> str:
    lines: list[str] = []
    lines.append("## Merged graph")
    lines.append("")
    lines.append(f"- Nodes: {len(merged.nodes)}")
    lines.append(f"- Links: {len(merged.links)}")
    lines.append(f"- Warnings: {len(merged.warnings)}")
    lines.append("")

    lines.append("### Nodes")
    lines.append("")
    lines.append("| Id | Name | Tags |")
    lines.append("|---|---|---|")
    for node in merged.nodes:
        lines.append(f"| `{node.id}` | {str(node.name or '')} | {', '.join(node.tags)} |")
    lines.append("")

    lines.append("### Links")
    lines.append("")
    lines.append("| Source | Target | Name |")
    lines.append("|---|---|---|")
    for link in merged.links:
        lines.append(f"| `{link.source}` | `{link.target}` | {link.name or ''} |")
    lines.append("")

    if merged.warnings:
        lines.append("### Warnings")
        lines.append("")
        for warning in merged.warnings:
            lines.append(f"- {warning}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _cell(value: object) -> str:
    """Table cell text for a record field, with rich markup escaped."""
    return "" if value is None else escape(str(value))


def _print_rich(merged: MergedGraph, *, console: Console) -> None:
    console.print("[bold]Merged graph[/bold]")
    console.print(f"Nodes: {len(merged.nodes)}  Links: {len(merged.links)}")
    console.print()

    t = Table(title="Nodes", show_header=True, header_style="bold")
    t.add_column("Id", style="cyan", no_wrap=True)
    t.add_column("Name")
    t.add_column("Tags")
    for node in merged.nodes:
        t.add_row(escape(node.id), _cell(node.name), escape(", ".join(node.tags)))
    console.print(t)
    console.print()

    t = Table(title="Links", show_header=True, header_style="bold")
    t.add_column("Source", style="cyan", no_wrap=True)
    t.add_column("Target", style="cyan", no_wrap=True)
    t.add_column("Name")
    for link in merged.links:
        t.add_row(escape(link.source), escape(link.target), _cell(link.name))
    console.print(t)
