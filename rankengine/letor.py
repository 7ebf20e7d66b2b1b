"""
rankengine/letor.py

Readers for learning-to-rank evaluation inputs.

Fold files use the LETOR / MSLR feature-vector format, one query-document
pair per line:

    <relevance> qid:<qid> 1:<v1> 2:<v2> ... [# docid = <docid> ...]

Prediction files come from the external point-wise model, one line per fold
row and in the same order. Two layouts are accepted:

    <score>                          plain (SVMrank / sklearn dumps)
    <qid>\t<row index>\t<score>      RankLib
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Sequence, Tuple

from rankengine.ndcg import Judgement, QueryGroup

_DOCID_RE = re.compile(r"docid\s*=\s*(\S+)")


@dataclass
class FoldRow:
    qid: str
    doc_id: Optional[str]
    relevance: int
    features: Dict[int, float] = field(default_factory=dict)


def parse_line(line: str) -> Optional[FoldRow]:
    """
    Parse one LETOR line.
    Returns:
        FoldRow on success (doc_id is None when the line has no docid comment)
        None if the line is blank or malformed
    """
    body, _, comment = line.rstrip("\n").partition("#")
    parts = body.split()
    if len(parts) < 2 or not parts[1].startswith("qid:"):
        return None
    try:
        rel = float(parts[0])
    except ValueError:
        return None
    if not math.isfinite(rel) or rel < 0 or rel != int(rel):
        return None
    qid = parts[1][4:]
    if not qid:
        return None

    features: Dict[int, float] = {}
    for tok in parts[2:]:
        fid, sep, val = tok.partition(":")
        if not sep:
            return None
        try:
            features[int(fid)] = float(val)
        except ValueError:
            return None

    m = _DOCID_RE.search(comment)
    doc_id = m.group(1) if m else None
    return FoldRow(qid=qid, doc_id=doc_id, relevance=int(rel), features=features)


def iter_fold(path: str, limit: int | None = None) -> Iterator[FoldRow]:
    """
    Stream FoldRows from a LETOR file, skipping malformed lines.
    Rows without a docid comment are named "<qid>-<n>", n counting from 0
    within the query.
    """
    per_query: Dict[str, int] = {}
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for i, line in enumerate(f):
            if limit is not None and i >= limit:
                break
            row = parse_line(line)
            if row is None:
                continue
            pos = per_query.get(row.qid, 0)
            per_query[row.qid] = pos + 1
            if row.doc_id is None:
                row.doc_id = f"{row.qid}-{pos}"
            yield row


def parse_prediction(line: str) -> Optional[float]:
    parts = line.split()
    if not parts:
        return None
    try:
        return float(parts[-1])
    except ValueError:
        return None


def load_predictions(path: str) -> List[float]:
    """
    Read model scores, one per non-blank line.
    Raises ValueError on a line that carries no number, since a silently
    skipped score would misalign every row after it.
    """
    scores: List[float] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            s = parse_prediction(line)
            if s is None:
                raise ValueError(f"{path}:{lineno}: cannot parse score from {line.strip()!r}")
            scores.append(s)
    print(f"Predictions loaded from {path} ({len(scores)} scores)")
    return scores


def attach_scores(rows: Iterable[FoldRow], scores: Sequence[float]) -> List[Tuple[str, str, float, int]]:
    """
    Zip fold rows with model scores, in order.
    Returns:
        list[(qid, doc_id, score, relevance)]
    """
    rows = list(rows)
    if len(rows) != len(scores):
        raise ValueError(f"{len(rows)} fold rows but {len(scores)} predicted scores")
    return [(r.qid, r.doc_id, float(s), r.relevance) for r, s in zip(rows, scores)]


def group_by_query(records: Iterable[Tuple[Hashable, Hashable, float, int]]) -> List[QueryGroup]:
    """
    Group (qid, doc_id, score, relevance) tuples into QueryGroups.
    Queries appear in first-seen order; rows keep their input order, which is
    what the NDCG tie-breaking relies on.
    """
    buckets: Dict[Hashable, List[Judgement]] = {}
    for qid, doc_id, score, rel in records:
        buckets.setdefault(qid, []).append(Judgement(doc_id, float(score), rel))
    return [QueryGroup(qid, tuple(js)) for qid, js in buckets.items()]


def load_groups(fold_path: str, predictions_path: str) -> List[QueryGroup]:
    """Fold file + prediction file -> QueryGroups ready for NDCGEvaluator."""
    rows = list(iter_fold(fold_path))
    print(f"Fold loaded from {fold_path} ({len(rows)} rows)")
    scores = load_predictions(predictions_path)
    return group_by_query(attach_scores(rows, scores))
