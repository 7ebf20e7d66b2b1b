# rankengine/pagerank.py
"""
PageRank by power iteration over a retweet Graph.

Update rule for every node v (N = number of nodes, d = damping):

    new(v) = (1-d)/N + d * sum_{u -> v} old(u) / out(u)  [+ dangling term]

Dangling nodes (in-edges, no out-edges) would leak their mass every
iteration. Two conventions are supported, chosen with `dangling=`:

  - "uniform" (default): the total mass sitting on dangling nodes is
    spread evenly over all N nodes, i.e. a dangling node behaves as if it
    linked to everybody. The dangling term is d * dangling_mass / N.
  - "renormalize": dangling nodes only absorb; the leaked mass is dropped
    and the new vector is rescaled back to sum 1.

Either way the vector is L1-normalised after every step, so floating-point
drift never accumulates and the result always sums to 1.

Termination: stop when the distance between two successive vectors
(`norm="l1"` or `"l2"`) falls below `tol`, or after `max_iter` steps.
Hitting the cap is not an error; the result says converged=False.

Parallel mode (`workers > 1`):
  - Node indices are cut into contiguous shards, one task per shard.
  - The in-link lists are shipped once, through the pool initializer.
  - Every iteration sends the previous vector (read-only) to all shards and
    collects the shard outputs into a *new* buffer. Waiting for all futures
    is the barrier; the buffers are swapped only after it.
Processes rather than threads, because the update loop is CPU-bound Python.
"""

from __future__ import annotations

import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Sequence, Tuple

from rankengine import params
from rankengine.graph import Graph
from rankengine.profkit import tick, timeit


@dataclass
class PageRankResult:
    scores: Dict[Hashable, float] = field(default_factory=dict)
    iterations: int = 0
    residual: float = 0.0
    converged: bool = True

    def total(self) -> float:
        return math.fsum(self.scores.values())


# --------------------------
# per-shard update (shared by serial and parallel paths)
# --------------------------

def _shard_update(
    in_idx: Sequence[Sequence[int]],
    inv_out: Sequence[float],
    lo: int,
    hi: int,
    prev: Sequence[float],
    base: float,
    damping: float,
) -> List[float]:
    """New scores for node indices [lo, hi) given the previous full vector."""
    out = []
    for v in range(lo, hi):
        acc = 0.0
        for u in in_idx[v]:
            acc += prev[u] * inv_out[u]
        out.append(base + damping * acc)
    return out


# Worker-process state, set once by the pool initializer.
_W_IN: Sequence[Sequence[int]] = ()
_W_INV: Sequence[float] = ()
_W_DAMPING = 0.0


def _init_worker(in_idx, inv_out, damping):
    global _W_IN, _W_INV, _W_DAMPING
    _W_IN = in_idx
    _W_INV = inv_out
    _W_DAMPING = damping


def _worker_update(lo: int, hi: int, prev: Sequence[float], base: float) -> Tuple[int, List[float]]:
    return lo, _shard_update(_W_IN, _W_INV, lo, hi, prev, base, _W_DAMPING)


def _shards(n: int, parts: int) -> List[Tuple[int, int]]:
    """Split range(n) into at most `parts` contiguous, near-equal ranges."""
    parts = max(1, min(parts, n))
    size, extra = divmod(n, parts)
    out = []
    lo = 0
    for i in range(parts):
        hi = lo + size + (1 if i < extra else 0)
        out.append((lo, hi))
        lo = hi
    return out


def _distance(a: Sequence[float], b: Sequence[float], norm: str) -> float:
    if norm == "l1":
        return math.fsum(abs(x - y) for x, y in zip(a, b))
    return math.sqrt(math.fsum((x - y) * (x - y) for x, y in zip(a, b)))


def _normalize(vec: List[float]) -> List[float]:
    s = math.fsum(vec)
    if s <= 0.0:
        return vec
    return [x / s for x in vec]


class PageRankEngine:
    """
    Power-iteration PageRank.

    Args:
        damping:  probability of following an edge, in [0, 1)
        tol:      stopping threshold on the distance between iterations (> 0)
        max_iter: iteration cap (>= 1)
        norm:     "l1" or "l2" distance for the stopping test
        dangling: "uniform" or "renormalize" (see module docstring)
        workers:  1 = in-process; >1 = shard each iteration over a process pool
    """

    def __init__(
        self,
        damping: float = params.DAMPING,
        tol: float = params.TOLERANCE,
        max_iter: int = params.MAX_ITER,
        norm: str = params.NORM,
        dangling: str = params.DANGLING,
        workers: int = params.WORKERS,
    ):
        if not 0.0 <= damping < 1.0:
            raise ValueError(f"damping must be in [0, 1), got {damping}")
        if not tol > 0.0:
            raise ValueError(f"tol must be > 0, got {tol}")
        if int(max_iter) != max_iter or max_iter < 1:
            raise ValueError(f"max_iter must be a positive integer, got {max_iter}")
        if norm not in params.NORMS:
            raise ValueError(f"norm must be one of {params.NORMS}, got {norm!r}")
        if dangling not in params.DANGLING_CONVENTIONS:
            raise ValueError(f"dangling must be one of {params.DANGLING_CONVENTIONS}, got {dangling!r}")
        if int(workers) != workers or workers < 1:
            raise ValueError(f"workers must be a positive integer, got {workers}")

        self.damping = float(damping)
        self.tol = float(tol)
        self.max_iter = int(max_iter)
        self.norm = norm
        self.dangling = dangling
        self.workers = int(workers)

    def rank(self, graph: Graph) -> Dict[Hashable, float]:
        """Shortcut: just the score map."""
        return self.run(graph).scores

    def run(self, graph: Graph) -> PageRankResult:
        n = len(graph)
        if n == 0:
            return PageRankResult()

        in_idx, out_deg = graph.as_arrays()
        inv_out = [1.0 / k if k else 0.0 for k in out_deg]
        dangling_idx = [i for i, k in enumerate(out_deg) if k == 0]

        if self.workers > 1 and n > 1:
            vec, iterations, residual = self._iterate_parallel(n, in_idx, inv_out, dangling_idx)
        else:
            def step(prev, base):
                return _shard_update(in_idx, inv_out, 0, n, prev, base, self.damping)
            vec, iterations, residual = self._iterate(n, dangling_idx, step)

        scores = {node: vec[i] for i, node in enumerate(graph.nodes)}
        return PageRankResult(
            scores=scores,
            iterations=iterations,
            residual=residual,
            converged=residual < self.tol,
        )

    def _base(self, n: int, prev: Sequence[float], dangling_idx: Sequence[int]) -> float:
        teleport = (1.0 - self.damping) / n
        if self.dangling == "uniform" and dangling_idx:
            dmass = math.fsum(prev[i] for i in dangling_idx)
            return teleport + self.damping * dmass / n
        return teleport

    def _iterate(self, n, dangling_idx, step):
        """
        Drive the power iteration. `step(prev, base)` must return a fresh
        list; `prev` is never written to.
        """
        vec = [1.0 / n] * n
        residual = math.inf
        iterations = 0
        with timeit("pagerank.iterate"):
            for iterations in range(1, self.max_iter + 1):
                base = self._base(n, vec, dangling_idx)
                new = _normalize(step(vec, base))
                residual = _distance(new, vec, self.norm)
                vec = new  # swap buffers
                tick("pagerank.iterations")
                if residual < self.tol:
                    break
        return vec, iterations, residual

    def _iterate_parallel(self, n, in_idx, inv_out, dangling_idx):
        shards = _shards(n, self.workers)
        with ProcessPoolExecutor(
            max_workers=len(shards),
            initializer=_init_worker,
            initargs=(in_idx, inv_out, self.damping),
        ) as ex:
            def step(prev, base):
                futures = [ex.submit(_worker_update, lo, hi, prev, base) for lo, hi in shards]
                new = [0.0] * n
                # barrier: every shard must report before the swap
                for fut in futures:
                    lo, values = fut.result()
                    new[lo:lo + len(values)] = values
                return new

            return self._iterate(n, dangling_idx, step)


def pagerank(graph: Graph, **kwargs) -> Dict[Hashable, float]:
    """Functional wrapper around PageRankEngine(**kwargs).rank(graph)."""
    return PageRankEngine(**kwargs).rank(graph)


if __name__ == "__main__":
    # Smoke test on the toy tweets: python -m rankengine.pagerank
    from rankengine.events import TweetParser
    from rankengine.graph import GraphBuilder
    from rankengine.paths import TOY_TWEETS_PATH

    g = GraphBuilder().build(TweetParser().iter_events(TOY_TWEETS_PATH))
    res = PageRankEngine().run(g)
    print(f"[PageRank] nodes={len(g)} iterations={res.iterations} "
          f"residual={res.residual:.3e} converged={res.converged} sum={res.total():.6f}")
    for node, score in sorted(res.scores.items(), key=lambda x: x[1], reverse=True):
        print(f"  {node}\t{score:.6f}")
