# tests/test_topk.py
import random

import pytest

from rankengine.topk import full_ranking, top_k

RANDOM_SEED = 99


def test_basic_order():
    scores = {"a": 0.1, "b": 0.5, "c": 0.3, "d": 0.1}
    assert top_k(scores, 2) == [("b", 0.5), ("c", 0.3)]


def test_ties_broken_by_node_id():
    scores = {"z": 0.25, "m": 0.25, "a": 0.25, "q": 0.25}
    assert [n for n, _ in top_k(scores, 3)] == ["a", "m", "q"]


def test_ties_across_mixed_id_types():
    scores = {"b": 0.25, 3: 0.25, "a": 0.25, 1: 0.25, "top": 0.5}
    assert [n for n, _ in top_k(scores, 4)] == ["top", 1, 3, "a"]
    assert [n for n, _ in full_ranking(scores)] == ["top", 1, 3, "a", "b"]


def test_fewer_nodes_than_k():
    scores = {"a": 0.7, "b": 0.3}
    assert top_k(scores, 10) == [("a", 0.7), ("b", 0.3)]


def test_empty_vector():
    assert top_k({}, 5) == []


def test_input_not_mutated():
    scores = {"a": 0.2, "b": 0.8}
    before = dict(scores)
    top_k(scores, 1)
    assert scores == before


def test_deterministic_and_prefix_of_full_sort():
    rnd = random.Random(RANDOM_SEED)
    # coarse scores so there are plenty of ties
    scores = {f"u{i:03d}": rnd.choice([0.1, 0.2, 0.3, 0.4]) for i in range(200)}
    first = top_k(scores, 25)
    second = top_k(dict(reversed(list(scores.items()))), 25)
    assert first == second
    assert first == full_ranking(scores)[:25]
    assert [s for _, s in first] == sorted((s for _, s in first), reverse=True)


@pytest.mark.parametrize("k", [0, -3, 2.5, "3", True, None])
def test_invalid_k_rejected(k):
    with pytest.raises(ValueError):
        top_k({"a": 1.0}, k)
