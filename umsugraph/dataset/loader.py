"""Fragment loading and decoding."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Iterable
from pathlib import Path

import yaml

from ..models import DatasetFragment, MergeWarning

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIXES = (".json", ".yml", ".yaml", ".b64")


def decode_fragment(text: str, *, label: str = "") -> DatasetFragment | None:
    """Parse a fragment document (JSON, or YAML as a fallback).

    Returns None if the text does not decode to a mapping with `nodes` and
    `links` lists. Decode failures are logged, never raised.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            logger.warning("Failed to decode dataset %s: %s", label or "<text>", exc)
            return None

    if not isinstance(data, dict):
        logger.warning("Dataset %s is not a mapping; skipped", label or "<text>")
        return None

    nodes = data.get("nodes")
    links = data.get("links")
    if not isinstance(nodes, list) or not isinstance(links, list):
        logger.warning("Invalid dataset format in %s (expected nodes and links lists); skipped", label or "<text>")
        return None

    return DatasetFragment(nodes=nodes, links=links, label=label)


def decode_blob(blob: str | bytes, *, label: str = "") -> DatasetFragment | None:
    """Decode a base64 encoded fragment document."""
    if isinstance(blob, str):
        blob = "".join(blob.split())
    try:
        raw = base64.b64decode(blob, validate=True)
        text = raw.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        logger.warning("Failed to decode dataset %s: %s", label or "<blob>", exc)
        return None
    return decode_fragment(text, label=label)


def encode_blob(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def load_fragment(path: Path) -> DatasetFragment | None:
    """Load one fragment file; `.b64` files hold a base64 encoded document.

    Returns None when the file cannot be read or decoded.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read dataset %s: %s", path.name, exc)
        return None
    if path.suffix.lower() == ".b64":
        return decode_blob(text.strip(), label=path.name)
    return decode_fragment(text, label=path.name)


def expand_paths(paths: Iterable[Path]) -> list[Path]:
    """Expand directories to their fragment files, sorted by name.

    Explicit file paths keep their given order, which is also their priority order.
    """
    out: list[Path] = []
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Dataset path not found: {path}")
        if path.is_dir():
            out.extend(
                sorted(
                    (p for p in path.iterdir() if p.is_file() and p.suffix.lower() in FRAGMENT_SUFFIXES),
                    key=lambda p: p.name,
                )
            )
        else:
            out.append(path)
    return out


def load_fragments(
    paths: Iterable[Path],
    *,
    skipped: list[MergeWarning] | None = None,
) -> list[DatasetFragment]:
    """Load fragments in priority order (lowest first), skipping undecodable files.

    When `skipped` is given, an `undecodable-fragment` warning is appended to it
    for every file that was dropped.
    """
    fragments: list[DatasetFragment] = []
    for path in expand_paths(paths):
        fragment = load_fragment(path)
        if fragment is None:
            if skipped is not None:
                skipped.append(
                    MergeWarning(
                        fragment=path.name,
                        rule="undecodable-fragment",
                        message="file could not be read or decoded; skipped",
                    )
                )
            continue
        fragments.append(fragment)
    logger.debug("loaded %d fragment(s)", len(fragments))
    return fragments
