# rankengine/topk.py
import heapq
from typing import Dict, Hashable, List, Tuple

from rankengine.graph import node_key


def _check_k(k) -> int:
    if isinstance(k, bool) or not isinstance(k, int):
        raise ValueError(f"k must be a positive int, got {k!r}")
    if k <= 0:
        raise ValueError(f"k must be a positive int, got {k}")
    return k


def top_k(scores: Dict[Hashable, float], k: int) -> List[Tuple[Hashable, float]]:
    """
    The k highest-scoring nodes, best first.

    Ties on score are broken by node id ascending, so two runs over the same
    vector always agree. Fewer than k nodes -> all of them. `scores` is not
    modified.

    Returns:
        list[(node, score)] of length min(k, len(scores))
    """
    k = _check_k(k)
    # nsmallest on (-score, node) keeps a bounded heap of size k
    best = heapq.nsmallest(k, scores.items(), key=lambda item: (-item[1], node_key(item[0])))
    return [(node, score) for node, score in best]


def full_ranking(scores: Dict[Hashable, float]) -> List[Tuple[Hashable, float]]:
    """Every node, in the same order top_k would produce them."""
    return sorted(scores.items(), key=lambda item: (-item[1], node_key(item[0])))
