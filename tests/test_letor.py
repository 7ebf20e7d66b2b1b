# tests/test_letor.py
import math
import os

import pytest

from rankengine.letor import (
    attach_scores,
    group_by_query,
    iter_fold,
    load_groups,
    load_predictions,
    parse_line,
)
from rankengine.ndcg import NDCGEvaluator

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")
FOLD_PATH = os.path.join(DATA_DIR, "toy_fold.txt")
PRED_PATH = os.path.join(DATA_DIR, "toy_predictions.txt")


def test_parse_line_with_docid():
    row = parse_line("2 qid:10 1:0.5 3:-1.25 #docid = GX000-12 inc = 1 prob = 0.3\n")
    assert row.qid == "10"
    assert row.doc_id == "GX000-12"
    assert row.relevance == 2
    assert row.features == {1: 0.5, 3: -1.25}


@pytest.mark.parametrize("line", [
    "",
    "garbage",
    "1 10 1:0.5",
    "x qid:1 1:0.5",
    "-1 qid:1 1:0.5",
    "1.5 qid:1 1:0.5",
    "1 qid:1 1-0.5",
    "1 qid: 1:0.5",
    "inf qid:1 1:0.5",
    "nan qid:1 1:0.5",
    "1e400 qid:1 1:0.5",
])
def test_parse_line_malformed(line):
    assert parse_line(line) is None


def test_iter_fold_toy():
    rows = list(iter_fold(FOLD_PATH))
    assert len(rows) == 7
    assert [r.qid for r in rows] == ["1", "1", "1", "2", "2", "3", "3"]
    assert rows[0].doc_id == "D-1-a"
    # no docid comment -> position inside the query
    assert [r.doc_id for r in rows[5:]] == ["3-0", "3-1"]


def test_iter_fold_skips_non_finite_relevance(tmp_path):
    p = tmp_path / "fold.txt"
    p.write_text("inf qid:1 1:0.5\n1e400 qid:1 1:0.5\n2 qid:1 1:0.5\nnan qid:1 1:0.5\n", encoding="utf-8")
    rows = list(iter_fold(str(p)))
    assert [(r.relevance, r.doc_id) for r in rows] == [(2, "1-0")]


def test_load_predictions_formats(tmp_path):
    p = tmp_path / "pred.txt"
    p.write_text("0.25\n\n1\t0\t-0.5\n1\t1\t3e-2\n", encoding="utf-8")
    assert load_predictions(str(p)) == [0.25, -0.5, 0.03]


def test_load_predictions_bad_line(tmp_path):
    p = tmp_path / "pred.txt"
    p.write_text("0.1\nabc\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_predictions(str(p))


def test_attach_scores_length_mismatch():
    rows = list(iter_fold(FOLD_PATH))
    with pytest.raises(ValueError):
        attach_scores(rows, [0.1, 0.2])


def test_group_by_query_keeps_order():
    records = [("b", "x", 0.1, 0), ("a", "y", 0.2, 1), ("b", "z", 0.3, 2)]
    groups = group_by_query(records)
    assert [g.qid for g in groups] == ["b", "a"]
    assert [j.doc_id for j in groups[0].judgements] == ["x", "z"]


def test_toy_fold_end_to_end():
    groups = load_groups(FOLD_PATH, PRED_PATH)
    report = NDCGEvaluator(k=10).evaluate(groups)
    q1 = (1.0 + 3.0 / math.log2(3)) / (3.0 + 1.0 / math.log2(3))
    q3 = 1.0 / math.log2(3)
    assert report.per_query["1"] == pytest.approx(q1)
    assert report.per_query["2"] == 0.0
    assert report.per_query["3"] == pytest.approx(q3)
    assert report.mean == pytest.approx((q1 + q3) / 3)
