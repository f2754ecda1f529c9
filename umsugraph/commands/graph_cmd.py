"""Graph commands - inspect components, strengths, subgraphs and nodes of a merged graph."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Settings
from ..graph.components import connected_components, subgraph_for_seeds
from ..graph.query import find_nodes, node_summary
from ..graph.strength import component_masses, strength_by_node
from ..groups import GroupTable
from ..models import MergedGraph
from .merge_cmd import load_merged


def _emit(text: str, *, out: Path | None, console: Console, what: str) -> None:
    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote {what} to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def components_payload(merged: MergedGraph, settings: Settings) -> dict:
    """Components with their mass and the strength their nodes receive."""
    groups = settings.group_table()
    components = connected_components(merged.nodes, merged.links)
    masses = component_masses(merged, components, groups)
    strength = strength_by_node(merged, components, groups, settings.strength)

    order = {node_id: idx for idx, node_id in enumerate(merged.node_ids())}
    rows: list[dict] = []
    for component, mass in zip(components, masses):
        members = sorted(component, key=lambda n: order.get(n, len(order)))
        rows.append(
            {
                "size": len(component),
                "mass": round(mass, 6),
                "strength": round(strength[members[0]], 6),
                "members": members,
            }
        )
    rows.sort(key=lambda r: (-r["mass"], r["members"][0]))

    return {
        "title": "Connected components",
        "node_count": len(merged.nodes),
        "link_count": len(merged.links),
        "component_count": len(components),
        "strength_bounds": [settings.strength.min, settings.strength.max],
        "components": rows,
    }


def run_components(
    paths: list[Path],
    *,
    settings: Settings,
    fmt: str = "md",
    out: Path | None = None,
) -> int:
    """Report connected components, their mass and positional strength."""
    console = Console(stderr=True)

    if fmt not in ("md", "json", "rich"):
        raise ValueError("fmt must be one of: md, json, rich")

    merged = load_merged(paths, console=console)
    payload = components_payload(merged, settings)

    if fmt == "rich":
        target = Console(record=True) if out else Console()
        _print_components_rich(payload, console=target)
        if out:
            out.write_text(target.export_text(), encoding="utf-8")
            console.print(f"Wrote components report to {out}", style="green")
        return 0

    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    else:
        text = _components_to_markdown(payload)
    _emit(text, out=out, console=console, what="components report")
    return 0


def run_subgraph(
    paths: list[Path],
    *,
    seeds: list[str],
    settings: Settings,
    fmt: str = "json",
    out: Path | None = None,
) -> int:
    """Extract the components touching any of the named seed nodes."""
    console = Console(stderr=True)

    if fmt not in ("json", "dot"):
        raise ValueError("fmt must be one of: json, dot")
    if not seeds:
        raise ValueError("at least one seed name is required")

    merged = load_merged(paths, console=console)
    sub = subgraph_for_seeds(merged, seeds)
    if not sub.nodes:
        console.print("No nodes matched the given seed names", style="yellow")

    if fmt == "dot":
        text = _to_dot(sub, groups=settings.group_table(), title=f"Subgraph: {', '.join(seeds)}")
    else:
        text = json.dumps(sub.to_dict(), indent=2, ensure_ascii=False) + "\n"
    _emit(text, out=out, console=console, what="subgraph")
    return 0


def run_show(
    paths: list[Path],
    *,
    name: str,
    fmt: str = "md",
    out: Path | None = None,
) -> int:
    """Show a node by name with its links grouped by relation. Returns 1 if not found."""
    console = Console(stderr=True)

    if fmt not in ("md", "json"):
        raise ValueError("fmt must be one of: md, json")

    merged = load_merged(paths, console=console)
    summary = node_summary(merged, name)
    if summary is None:
        console.print(f"No matching node found: {escape(name)}", style="red")
        return 1

    if fmt == "json":
        payload = {
            "node": summary.node.to_dict(),
            "links": summary.links_by_name,
            "description": summary.description,
        }
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    else:
        lines = [f"## {summary.node.label}", ""]
        if summary.node.tags:
            lines.append(f"- Tags: {', '.join(summary.node.tags)}")
            lines.append("")
        for relation, others in summary.links_by_name.items():
            lines.append(f"### {relation or '(unnamed)'}")
            lines.append("")
            lines.extend(f"- {other}" for other in others)
            lines.append("")
        if summary.description:
            lines.append("---")
            lines.append("")
            lines.append(summary.description)
            lines.append("")
        text = "\n".join(lines).rstrip() + "\n"

    _emit(text, out=out, console=console, what="node summary")
    return 0


def run_search(paths: list[Path], *, query: str, limit: int = 20) -> int:
    """Print node names containing `query`. Returns 1 when nothing matches."""
    console = Console(stderr=True)
    merged = load_merged(paths, console=console)
    matches = find_nodes(merged, query)
    if not matches:
        console.print("No matching node found.", style="yellow")
        return 1
    for node in matches[: max(0, limit)]:
        print(f"{node.label}\t{node.id}")
    return 0


def _components_to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Links: {payload['link_count']}")
    lines.append(f"- Components: {payload['component_count']}")
    lo, hi = payload["strength_bounds"]
    lines.append(f"- Strength bounds: {lo} to {hi}")
    lines.append("")
    lines.append("| # | Size | Mass | Strength | Members |")
    lines.append("|---:|---:|---:|---:|---|")
    for idx, row in enumerate(payload["components"], start=1):
        members = ", ".join(f"`{m}`" for m in row["members"][:10])
        if len(row["members"]) > 10:
            members += f", ... (+{len(row['members']) - 10})"
        lines.append(f"| {idx} | {row['size']} | {row['mass']} | {row['strength']} | {members} |")
    lines.append("")
    return "\n".join(lines)


def _print_components_rich(payload: dict, *, console: Console) -> None:
    console.print(f"[bold]{payload['title']}[/bold]")
    console.print(
        f"Nodes: {payload['node_count']}  Links: {payload['link_count']}  Components: {payload['component_count']}"
    )
    console.print()

    t = Table(show_header=True, header_style="bold")
    t.add_column("#", justify="right")
    t.add_column("Size", justify="right")
    t.add_column("Mass", justify="right")
    t.add_column("Strength", justify="right")
    t.add_column("Members", style="cyan")
    for idx, row in enumerate(payload["components"], start=1):
        t.add_row(str(idx), str(row["size"]), str(row["mass"]), str(row["strength"]), escape(", ".join(row["members"][:10])))
    console.print(t)


def _to_dot(g: MergedGraph, *, groups: GroupTable, title: str) -> str:
    def esc(s: str) -> str:
        return s.replace("\\", "\\\\").replace('"', '\\"')

    lines = [
        "graph umsugraph {",
        f'  label="{esc(title)}";',
        "  labelloc=t;",
        "  bgcolor=\"#1a1a1a\";",
        "  graph [fontname=\"Inter\"];",
        "  node [fontname=\"Inter\", fontsize=10, shape=circle, style=filled, fontcolor=\"#dadada\", color=\"#3f3f3f\"];",
        "  edge [color=\"#3f3f3f\", fontcolor=\"#dadada\", fontsize=8, penwidth=2];",
    ]

    for node in g.nodes:
        radius = groups.radius(node)
        attrs = {
            "label": node.label,
            "fillcolor": groups.colour(node),
            "width": f"{0.5 * radius:.2f}",
        }
        attr_str = "; ".join(f'{k}="{esc(str(v))}"' for k, v in attrs.items())
        lines.append(f'  "{esc(node.id)}" [{attr_str}];')

    for link in g.links:
        label = f' [label="{esc(str(link.name))}"]' if link.name else ""
        lines.append(f'  "{esc(link.source)}" -- "{esc(link.target)}"{label};')

    lines.append("}")
    return "\n".join(lines) + "\n"
