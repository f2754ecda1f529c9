"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from umsugraph.dataset.merge import merge_fragments
from umsugraph.models import MergedGraph


@pytest.fixture
def club_fragments() -> list[dict]:
    """Two clubs with members plus an isolated person, split over two fragments."""
    base = {
        "nodes": [
            {"id": "chess", "name": "Chess Club", "tags": ["club"]},
            {"id": "alice", "name": "Alice", "tags": ["person"]},
            {"id": "bob", "name": "Bob", "tags": ["person"]},
            {"id": "film", "name": "Film Society", "tags": ["club"]},
            {"id": "carol", "name": "Carol", "tags": ["person"]},
            {"id": "dave", "name": "Dave", "tags": ["person"]},
        ],
        "links": [
            {"source": "alice", "target": "chess", "name": "member"},
            {"source": "bob", "target": "chess", "name": "member"},
            {"source": "carol", "target": "film", "name": "member"},
        ],
    }
    update = {
        "nodes": [
            {"id": "alice", "name": "", "tags": ["officer"], "desc_html": "<p>President</p>"},
        ],
        "links": [
            {"source": "chess", "target": "alice", "name": "member", "since": 2021},
        ],
    }
    return [base, update]


@pytest.fixture
def club_graph(club_fragments: list[dict]) -> MergedGraph:
    return merge_fragments(club_fragments)


@pytest.fixture
def dataset_dir(tmp_path: Path, club_fragments: list[dict]) -> Path:
    """A directory holding the club fragments as 01-base.json and 02-update.json."""
    d = tmp_path / "datasets"
    d.mkdir()
    (d / "01-base.json").write_text(json.dumps(club_fragments[0]), encoding="utf-8")
    (d / "02-update.json").write_text(json.dumps(club_fragments[1]), encoding="utf-8")
    return d
