# rankengine/ndcg.py
"""
NDCG evaluation for point-wise rankers.

A QueryGroup holds, for one query, the documents in their input order, each
with the model's predicted score and the ground-truth relevance label.

    predicted ranking : sort by score desc     (ties keep input order)
    ideal ranking     : sort by relevance desc (ties keep input order)
    DCG@k             : sum_{i=1..k} (2^rel_i - 1) / log2(i + 1)
    NDCG@k            : DCG@k(predicted) / DCG@k(ideal), 0.0 if the ideal is 0

Aggregation policy: the mean is taken over non-empty groups only. Empty
groups are reported in `skipped` and contribute nothing (neither a term nor
a zero) to the mean. If nothing contributes, the mean is 0.0.
"""

from __future__ import annotations

import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from itertools import repeat
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Judgement:
    doc_id: Hashable
    score: float
    relevance: int


@dataclass(frozen=True)
class QueryGroup:
    qid: Hashable
    judgements: Tuple[Judgement, ...] = ()

    def __post_init__(self):
        js = tuple(self.judgements)
        for j in js:
            if j.relevance < 0:
                raise ValueError(f"query {self.qid}: negative relevance {j.relevance} for doc {j.doc_id}")
            if math.isnan(j.score):
                raise ValueError(f"query {self.qid}: NaN score for doc {j.doc_id}")
        object.__setattr__(self, "judgements", js)

    @classmethod
    def from_lists(cls, qid, doc_ids: Sequence, scores: Sequence[float], relevances: Sequence[int]) -> "QueryGroup":
        if not len(doc_ids) == len(scores) == len(relevances):
            raise ValueError(
                f"query {qid}: length mismatch docs={len(doc_ids)} "
                f"scores={len(scores)} relevances={len(relevances)}"
            )
        return cls(qid, tuple(Judgement(d, float(s), r) for d, s, r in zip(doc_ids, scores, relevances)))

    def __len__(self) -> int:
        return len(self.judgements)


def _check_k(k) -> Optional[int]:
    if k is None:
        return None
    if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
        raise ValueError(f"k must be None or a positive int, got {k!r}")
    return k


def gain(relevance: float) -> float:
    return 2.0 ** relevance - 1.0


def dcg_at_k(relevances: Sequence[float], k: Optional[int] = None) -> float:
    """DCG of relevances listed in rank order (rank 1 first)."""
    k = _check_k(k)
    rels = relevances if k is None else relevances[:k]
    return math.fsum(gain(rel) / math.log2(i + 1) for i, rel in enumerate(rels, start=1))


def predicted_order(group: QueryGroup) -> List[Judgement]:
    # sorted() is stable, so equal scores keep their input order
    return sorted(group.judgements, key=lambda j: -j.score)


def ideal_order(group: QueryGroup) -> List[Judgement]:
    return sorted(group.judgements, key=lambda j: -j.relevance)


def ndcg_at_k(group: QueryGroup, k: Optional[int] = None) -> float:
    """
    NDCG@k for one query. `k=None` uses the whole list; a k larger than the
    list is the same as the whole list.
    """
    k = _check_k(k)
    ideal = dcg_at_k([j.relevance for j in ideal_order(group)], k)
    if ideal == 0.0:
        return 0.0
    got = dcg_at_k([j.relevance for j in predicted_order(group)], k)
    return got / ideal


def _score_group(group: QueryGroup, k: Optional[int]) -> Tuple[Hashable, Optional[float]]:
    if not group.judgements:
        return group.qid, None
    return group.qid, ndcg_at_k(group, k)


@dataclass
class NDCGReport:
    mean: float = 0.0
    per_query: Dict[Hashable, float] = field(default_factory=dict)
    skipped: List[Hashable] = field(default_factory=list)
    k: Optional[int] = None

    def rows(self) -> List[Tuple[Hashable, float]]:
        return list(self.per_query.items())


class NDCGEvaluator:
    """
    Scores many QueryGroups and averages them.

    Args:
        k:       cutoff; None for full-list NDCG
        workers: 1 = in-process; >1 = score groups in a process pool.
                 Each group is independent, results are reduced here in the
                 parent, so there is one aggregation point and no shared state.
    """

    def __init__(self, k: Optional[int] = None, workers: int = 1):
        self.k = _check_k(k)
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ValueError(f"workers must be a positive int, got {workers!r}")
        self.workers = workers

    def _scored(self, groups: List[QueryGroup]) -> Iterable[Tuple[Hashable, Optional[float]]]:
        if self.workers > 1 and len(groups) > 1:
            chunksize = max(1, len(groups) // (self.workers * 4))
            with ProcessPoolExecutor(max_workers=self.workers) as ex:
                return list(ex.map(_score_group, groups, repeat(self.k), chunksize=chunksize))
        return [_score_group(g, self.k) for g in groups]

    def evaluate(self, groups: Iterable[QueryGroup]) -> NDCGReport:
        groups = list(groups)
        seen = set()
        for g in groups:
            if g.qid in seen:
                raise ValueError(f"duplicate query id {g.qid!r}; merge its rows into one QueryGroup")
            seen.add(g.qid)

        report = NDCGReport(k=self.k)
        total = 0.0
        for qid, value in self._scored(groups):
            if value is None:
                report.skipped.append(qid)
                continue
            report.per_query[qid] = value
            total += value

        if report.per_query:
            report.mean = total / len(report.per_query)
        return report


def mean_ndcg(groups: Iterable[QueryGroup], k: Optional[int] = None) -> float:
    return NDCGEvaluator(k=k).evaluate(groups).mean
