"""CLI entrypoint for umsugraph."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import find_config, load_settings

DATASETS_ARG = click.argument(
    "datasets",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)

FORMAT_HELP = "Output format"


def _setup_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="umsugraph")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to umsugraph.toml (defaults to the nearest one above the working directory)",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """umsugraph - merge layered graph datasets and derive layout strength.

    DATASETS are fragment files (.json, .yml, .yaml, .b64) or directories of
    them, lowest priority first.
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)

    if config_path is None:
        config_path = find_config(Path.cwd())
    elif not config_path.is_file():
        raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config / -c")

    try:
        ctx.obj["settings"] = load_settings(config_path)
    except ValueError as exc:
        raise click.ClickException(f"Invalid config {config_path}: {exc}") from exc


@cli.command()
@DATASETS_ARG
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "layout", "md", "rich"]),
    default="json",
    show_default=True,
    help=FORMAT_HELP,
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--strict", is_flag=True, help="Exit with error if any fragment or record was skipped")
@click.pass_context
def merge(ctx: click.Context, datasets: tuple[Path, ...], fmt: str, out: Path | None, strict: bool) -> None:
    """Merge dataset fragments into one graph."""
    from .commands.merge_cmd import run_merge

    sys.exit(run_merge(list(datasets), settings=ctx.obj["settings"], fmt=fmt, out=out, strict=strict))


@cli.command()
@DATASETS_ARG
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "rich"]),
    default="md",
    show_default=True,
    help=FORMAT_HELP,
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def components(ctx: click.Context, datasets: tuple[Path, ...], fmt: str, out: Path | None) -> None:
    """Report connected components with their mass and positional strength."""
    from .commands.graph_cmd import run_components

    sys.exit(run_components(list(datasets), settings=ctx.obj["settings"], fmt=fmt, out=out))


@cli.command()
@DATASETS_ARG
@click.option(
    "--seed",
    "seeds",
    multiple=True,
    required=True,
    help="Node name whose component is kept (repeatable)",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "dot"]),
    default="json",
    show_default=True,
    help=FORMAT_HELP,
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def subgraph(ctx: click.Context, datasets: tuple[Path, ...], seeds: tuple[str, ...], fmt: str, out: Path | None) -> None:
    """Extract the clusters touching the named seed nodes."""
    from .commands.graph_cmd import run_subgraph

    sys.exit(run_subgraph(list(datasets), seeds=list(seeds), settings=ctx.obj["settings"], fmt=fmt, out=out))


@cli.command()
@DATASETS_ARG
@click.option("--name", required=True, help="Exact node name")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json"]),
    default="md",
    show_default=True,
    help=FORMAT_HELP,
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
def show(datasets: tuple[Path, ...], name: str, fmt: str, out: Path | None) -> None:
    """Show a node and its links grouped by relation."""
    from .commands.graph_cmd import run_show

    sys.exit(run_show(list(datasets), name=name, fmt=fmt, out=out))


@cli.command()
@DATASETS_ARG
@click.option("--query", "-q", required=True, help="Case-insensitive substring of the node name")
@click.option("--limit", type=int, default=20, show_default=True, help="Maximum matches to print")
def search(datasets: tuple[Path, ...], query: str, limit: int) -> None:
    """List nodes whose name contains QUERY."""
    from .commands.graph_cmd import run_search

    sys.exit(run_search(list(datasets), query=query, limit=limit))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
