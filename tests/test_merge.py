import copy

from umsugraph.dataset.merge import merge_fragments
from umsugraph.models import DatasetFragment, MergedGraph


def _node(graph: MergedGraph, node_id: str):
    node = graph.get(node_id)
    assert node is not None, f"node {node_id} missing"
    return node


def _link_keys(graph: MergedGraph) -> set[tuple[str, str, str]]:
    return {l.key for l in graph.links}


def test_empty_input_gives_empty_graph() -> None:
    merged = merge_fragments([])
    assert merged.nodes == []
    assert merged.links == []
    assert merged.warnings == []


def test_single_fragment_is_identity() -> None:
    fragment = {
        "nodes": [
            {"id": "a", "name": "Alice", "tags": ["person"], "desc_html": "<p>hi</p>"},
            {"id": "b", "name": "Bob", "tags": []},
        ],
        "links": [{"source": "a", "target": "b", "name": "knows"}],
    }
    merged = merge_fragments([fragment])

    assert merged.to_dict() == fragment
    assert merged.warnings == []


def test_empty_name_does_not_override_and_negated_tag_removes_lower_tag() -> None:
    f1 = {"nodes": [{"id": "a", "name": "Alice", "tags": ["person"]}], "links": []}
    f2 = {"nodes": [{"id": "a", "name": "", "tags": ["-person", "officer"]}], "links": []}

    merged = merge_fragments([f1, f2])

    a = _node(merged, "a")
    assert a.name == "Alice"
    assert a.tags == ["officer"]


def test_higher_priority_non_empty_value_wins() -> None:
    f1 = {"nodes": [{"id": "a", "name": "Old", "desc_html": "old text"}], "links": []}
    f2 = {"nodes": [{"id": "a", "name": "New"}], "links": []}

    merged = merge_fragments([f1, f2])

    a = _node(merged, "a")
    assert a.name == "New"
    assert a.extra["desc_html"] == "old text"


def test_empty_values_never_override() -> None:
    f1 = {
        "nodes": [{"id": "a", "name": "Alice", "desc": "text", "aliases": ["al"], "meta": {"k": 1}, "note": "n"}],
        "links": [],
    }
    f2 = {
        "nodes": [{"id": "a", "name": "   ", "desc": None, "aliases": [], "meta": {}}],
        "links": [],
    }

    a = _node(merge_fragments([f1, f2]), "a")

    assert a.name == "Alice"
    assert a.extra == {"desc": "text", "aliases": ["al"], "meta": {"k": 1}, "note": "n"}


def test_zero_and_false_do_override() -> None:
    f1 = {"nodes": [{"id": "a", "score": 5, "active": True}], "links": []}
    f2 = {"nodes": [{"id": "a", "score": 0, "active": False}], "links": []}

    a = _node(merge_fragments([f1, f2]), "a")

    assert a.extra["score"] == 0
    assert a.extra["active"] is False


def test_tags_union_across_fragments() -> None:
    f1 = {"nodes": [{"id": "a", "tags": ["person", "student"]}], "links": []}
    f2 = {"nodes": [{"id": "a", "tags": ["officer", "person"]}], "links": []}

    a = _node(merge_fragments([f1, f2]), "a")

    assert sorted(a.tags) == ["officer", "person", "student"]


def test_negated_tag_never_appears_in_output() -> None:
    merged = merge_fragments([{"nodes": [{"id": "a", "tags": ["-ghost", "person"]}], "links": []}])
    assert _node(merged, "a").tags == ["person"]


def test_negated_tag_blocks_every_lower_priority_fragment() -> None:
    f1 = {"nodes": [{"id": "a", "tags": ["person"]}], "links": []}
    f2 = {"nodes": [{"id": "a", "tags": ["person"]}], "links": []}
    f3 = {"nodes": [{"id": "a", "tags": ["-person", "officer"]}], "links": []}

    assert _node(merge_fragments([f1, f2, f3]), "a").tags == ["officer"]


def test_negated_tag_in_lower_priority_fragment_removes_higher_tag() -> None:
    f1 = {"nodes": [{"id": "a", "tags": ["-person"]}], "links": []}
    f2 = {"nodes": [{"id": "a", "tags": ["person", "officer"]}], "links": []}

    assert _node(merge_fragments([f1, f2]), "a").tags == ["officer"]


def test_negated_node_removes_node_and_its_links() -> None:
    f1 = {
        "nodes": [{"id": "a", "name": "Alice"}, {"id": "b", "name": "Bob"}],
        "links": [{"source": "a", "target": "b", "name": "knows"}],
    }
    f2 = {"nodes": [{"id": "-a"}], "links": []}

    merged = merge_fragments([f1, f2])

    assert merged.node_ids() == ["b"]
    assert merged.links == []


def test_negated_node_cannot_be_resurrected_by_lower_priority_fragment() -> None:
    f1 = {"nodes": [{"id": "a", "name": "Alice"}], "links": [{"source": "a", "target": "b", "name": "knows"}]}
    f2 = {"nodes": [{"id": "b"}], "links": [{"source": "b", "target": "c", "name": "knows"}]}
    f3 = {"nodes": [{"id": "-a"}], "links": []}

    merged = merge_fragments([f1, f2, f3])

    assert "a" not in merged.node_ids()
    assert all(not l.touches("a") for l in merged.links)
    assert _link_keys(merged) == {("b", "c", "knows")}


def test_negated_node_in_lower_priority_fragment_still_deletes() -> None:
    f1 = {"nodes": [{"id": "-a"}], "links": []}
    f2 = {
        "nodes": [{"id": "a", "name": "Alice"}, {"id": "b"}],
        "links": [{"source": "a", "target": "b", "name": "knows"}],
    }

    merged = merge_fragments([f1, f2])

    assert merged.node_ids() == ["b"]
    assert merged.links == []


def test_links_in_either_direction_are_one_entity() -> None:
    f1 = {"nodes": [], "links": [{"source": "A", "target": "B", "name": "knows", "weight": 1}]}
    f2 = {"nodes": [], "links": [{"source": "B", "target": "A", "name": "knows", "note": "met at uni"}]}

    merged = merge_fragments([f1, f2])

    assert len(merged.links) == 1
    link = merged.links[0]
    assert link.key == ("A", "B", "knows")
    assert link.extra == {"note": "met at uni", "weight": 1}


def test_links_with_different_names_are_distinct() -> None:
    fragment = {
        "nodes": [],
        "links": [
            {"source": "A", "target": "B", "name": "knows"},
            {"source": "A", "target": "B", "name": "works_with"},
        ],
    }
    assert _link_keys(merge_fragments([fragment])) == {("A", "B", "knows"), ("A", "B", "works_with")}


def test_negated_link_name_removes_link_regardless_of_origin() -> None:
    f1 = {"nodes": [], "links": [{"source": "A", "target": "B", "name": "knows"}]}
    f2 = {"nodes": [], "links": [{"source": "A", "target": "B", "name": "works_with"}]}
    f3 = {"nodes": [], "links": [{"source": "B", "target": "A", "name": "-knows"}]}

    merged = merge_fragments([f1, f2, f3])

    assert _link_keys(merged) == {("A", "B", "works_with")}


def test_negated_link_in_lower_priority_fragment_removes_higher_link() -> None:
    f1 = {"nodes": [], "links": [{"source": "A", "target": "B", "name": "-knows"}]}
    f2 = {
        "nodes": [],
        "links": [
            {"source": "A", "target": "B", "name": "knows"},
            {"source": "A", "target": "B", "name": "works_with"},
        ],
    }

    assert _link_keys(merge_fragments([f1, f2])) == {("A", "B", "works_with")}


def test_non_string_link_name_is_distinct_from_unnamed_link() -> None:
    fragment = {
        "nodes": [],
        "links": [
            {"source": "A", "target": "B", "name": 5},
            {"source": "A", "target": "B"},
        ],
    }

    merged = merge_fragments([fragment])

    assert _link_keys(merged) == {("A", "B", "5"), ("A", "B", "")}
    assert merged.links[0].to_dict()["name"] == 5


def test_link_field_override_follows_priority() -> None:
    f1 = {"nodes": [], "links": [{"source": "A", "target": "B", "name": "knows", "since": 2019, "how": "school"}]}
    f2 = {"nodes": [], "links": [{"source": "A", "target": "B", "name": "knows", "since": 2020, "how": ""}]}

    link = merge_fragments([f1, f2]).links[0]

    assert link.extra == {"since": 2020, "how": "school"}


def test_malformed_fragments_are_skipped_with_warning() -> None:
    good = {"nodes": [{"id": "a"}], "links": []}
    merged = merge_fragments([{"nodes": [{"id": "x"}]}, None, {"nodes": "oops", "links": []}, good])

    assert merged.node_ids() == ["a"]
    assert [w.rule for w in merged.warnings] == ["malformed-fragment"] * 3
    assert merged.warnings[0].fragment == "fragment[0]"


def test_invalid_records_are_skipped_with_warning() -> None:
    fragment = {
        "nodes": [{"name": "no id"}, {"id": "-"}, "not a mapping", {"id": "a", "tags": "person"}],
        "links": [{"source": "a"}, {"source": "a", "target": "b", "name": "-"}],
    }

    merged = merge_fragments([fragment])

    assert merged.node_ids() == ["a"]
    assert _node(merged, "a").tags == []
    assert merged.links == []
    rules = sorted(w.rule for w in merged.warnings)
    assert rules == ["empty-negation", "empty-negation", "invalid-link", "invalid-node", "invalid-node", "invalid-tags"]


def test_dataset_fragment_objects_are_accepted() -> None:
    fragment = DatasetFragment(nodes=[{"id": "a"}], links=[], label="base.json")
    broken = DatasetFragment(nodes=None, links=[], label="broken.json")  # type: ignore[arg-type]

    merged = merge_fragments([fragment, broken])

    assert merged.node_ids() == ["a"]
    assert merged.warnings[0].fragment == "broken.json"
    assert "broken.json" in str(merged.warnings[0])


def test_output_does_not_alias_inputs() -> None:
    fragment = {
        "nodes": [{"id": "a", "name": "Alice", "tags": ["person"], "meta": {"k": [1]}}],
        "links": [{"source": "a", "target": "b", "name": "knows", "meta": {"w": 1}}],
    }
    merged = merge_fragments([fragment])

    fragment["nodes"][0]["tags"].append("mutated")
    fragment["nodes"][0]["meta"]["k"].append(2)
    fragment["links"][0]["meta"]["w"] = 99

    a = _node(merged, "a")
    assert a.tags == ["person"]
    assert a.extra["meta"] == {"k": [1]}
    assert merged.links[0].extra["meta"] == {"w": 1}


def test_merge_is_idempotent(club_fragments: list[dict]) -> None:
    before = copy.deepcopy(club_fragments)

    first = merge_fragments(club_fragments)
    second = merge_fragments(club_fragments)

    assert first == second
    assert club_fragments == before


def test_club_fixture_merge(club_graph: MergedGraph) -> None:
    alice = _node(club_graph, "alice")
    assert alice.name == "Alice"
    assert sorted(alice.tags) == ["officer", "person"]
    assert alice.extra["desc_html"] == "<p>President</p>"

    member = [l for l in club_graph.links if l.key == ("alice", "chess", "member")]
    assert len(member) == 1
    assert member[0].extra["since"] == 2021
    assert len(club_graph.links) == 3
