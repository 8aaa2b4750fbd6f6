"""Tests for the full grid layout."""

import random

import pytest

from layout import build_layout_payload, compact_rows, compute_full_layout, find_overlaps
from layout.grid_layout import compute_columns, dense_rank
from tasks.builder import build


def random_project(seed, size=40):
    """Records in outline order with forward-only predecessor links (acyclic)."""
    rng = random.Random(seed)
    ids = [f"t{n:03d}" for n in range(size)]
    rng.shuffle(ids)
    counters = []
    level = 1
    records = []
    for i, tid in enumerate(ids):
        if i > 0:
            level = rng.randint(1, min(level + 1, 4))
        counters = counters[:level]
        if len(counters) < level:
            counters.append(1)
        else:
            counters[-1] += 1
        preds = rng.sample(ids[:i], k=min(i, rng.choice([0, 0, 1, 1, 2])))
        records.append({
            "UID": tid,
            "Name": tid,
            "WBS": ".".join(str(c) for c in counters),
            "OutlineLevel": level,
            "PredecessorUIDs": preds,
        })
    return build(records).graph


def assert_layout_properties(graph, positions):
    rows = sorted({row for _, row in positions.values()})
    assert rows == list(range(len(rows)))
    for pred, succ in graph.edges():
        if pred in positions and succ in positions:
            assert positions[succ][0] > positions[pred][0]
    for tid in positions:
        parent = graph.parent(tid)
        if parent is not None and parent in positions:
            assert positions[tid][0] > positions[parent][0]
            assert positions[tid][1] >= positions[parent][1]


class TestFullLayout:
    def test_wbs_example(self, build_graph):
        graph = build_graph([("1", "1", 1), ("2", "1.1", 2), ("3", "1.2", 2)])
        assert compute_full_layout(graph) == {"1": (0, 0), "2": (1, 0), "3": (1, 1)}

    def test_chain_continuation_stays_on_row(self, build_graph):
        graph = build_graph([
            ("P", "1", 1),
            ("A", "1.1", 2),
            ("B", "1.2", 2, ["A"]),
            ("C", "1.3", 2, ["B"]),
        ])
        assert compute_full_layout(graph) == {"P": (0, 0), "A": (1, 0), "B": (2, 0), "C": (3, 0)}

    def test_dangling_id_does_not_break_chain(self, make_record):
        # only resolved predecessors count: B still has exactly one, its previous sibling
        result = build([
            make_record("P", "1", 1),
            make_record("A", "1.1", 2),
            make_record("B", "1.2", 2, preds=["A", "X99"]),
        ])
        assert compute_full_layout(result.graph) == {"P": (0, 0), "A": (1, 0), "B": (2, 0)}

    def test_join_goes_below_earliest_predecessor(self, build_graph):
        graph = build_graph([
            ("P", "1", 1),
            ("A", "1.1", 2),
            ("B", "1.2", 2),
            ("C", "1.3", 2, ["A", "B"]),
        ])
        positions = compute_full_layout(graph)
        assert positions["A"] == (1, 0)
        assert positions["B"] == (1, 1)
        assert positions["C"] == (2, 1)

    def test_roots_stack_below_previous_subtree(self, build_graph):
        graph = build_graph([
            ("1", "1", 1),
            ("2", "1.1", 2),
            ("3", "1.2", 2),
            ("4", "2", 1),
            ("5", "2.1", 2),
        ])
        assert compute_full_layout(graph) == {
            "1": (0, 0),
            "2": (1, 0),
            "3": (1, 1),
            "4": (0, 2),
            "5": (1, 2),
        }

    def test_dangling_predecessor_falls_back_to_parent(self, make_record):
        result = build([make_record("P", "1", 1), make_record("A", "1.1", 2, preds=["X99"])])
        positions = compute_full_layout(result.graph)
        assert positions["A"][0] == positions["P"][0] + 1

    def test_root_with_predecessor_moves_right(self, build_graph):
        graph = build_graph([("1", "1", 1), ("2", "1.1", 2), ("3", "2", 1, ["2"])])
        columns = compute_columns(graph)
        assert columns == {"1": 0, "2": 1, "3": 2}

    def test_restricted_to_some_roots(self, build_graph):
        graph = build_graph([("1", "1", 1), ("2", "1.1", 2), ("4", "2", 1), ("5", "2.1", 2)])
        positions = compute_full_layout(graph, root_ids=["4", "5"])
        assert set(positions) == {"4", "5"}
        assert positions["4"] == (0, 0)

    def test_empty_graph(self, build_graph):
        graph = build_graph([("1", "1", 1)])
        graph.clear()
        assert compute_full_layout(graph) == {}

    def test_cycle_still_places_every_task(self, build_graph):
        graph = build_graph([("A", "1", 1, ["C"]), ("B", "2", 1, ["A"]), ("C", "3", 1, ["B"])])
        positions = compute_full_layout(graph)
        assert set(positions) == {"A", "B", "C"}

    def test_returns_fresh_dict(self, build_graph):
        graph = build_graph([("1", "1", 1), ("2", "1.1", 2)])
        first = compute_full_layout(graph)
        first["1"] = (9, 9)
        assert compute_full_layout(graph)["1"] == (0, 0)

    @pytest.mark.parametrize("seed", range(6))
    def test_properties_hold_on_random_projects(self, seed):
        graph = random_project(seed)
        positions = compute_full_layout(graph)
        assert set(positions) == set(graph.ids())
        assert_layout_properties(graph, positions)
        assert compute_full_layout(graph) == positions


class TestCompaction:
    def test_dense_rank(self):
        assert dense_rank([5, 0, 2, 5]) == {0: 0, 2: 1, 5: 2}

    def test_compact_rows_keeps_order(self):
        positions = {"a": (0, 3), "b": (1, 7), "c": (2, 3)}
        assert compact_rows(positions) == {"a": (0, 0), "b": (1, 1), "c": (2, 0)}

    def test_find_overlaps(self):
        positions = {"a": (0, 0), "b": (0, 0), "c": (1, 0)}
        assert find_overlaps(positions) == {(0, 0): ["a", "b"]}


class TestLayoutPayload:
    def test_shape(self, build_graph):
        graph = build_graph([("1", "1", 1), ("2", "1.1", 2, ["1"]), ("3", "1.2", 2)])
        positions = compute_full_layout(graph)
        payload = build_layout_payload(graph, positions)
        assert payload["positions"]["1"] == {"column": 0, "row": 0}
        assert payload["edges"] == [{"from": "1", "to": "2"}]
        assert payload["columns"] == 2
        assert payload["rows"] == 2

    def test_edges_to_hidden_tasks_are_dropped(self, build_graph):
        graph = build_graph([("1", "1", 1), ("2", "2", 1, ["1"])])
        payload = build_layout_payload(graph, {"2": (0, 0)})
        assert payload["edges"] == []
