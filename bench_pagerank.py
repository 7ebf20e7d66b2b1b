"""
bench_pagerank.py

Quick-and-dirty benchmark for PageRankEngine.
Builds a random retweet graph (power-law-ish: a few users get most of the
retweets) and times serial vs sharded iteration.

Run examples:
  python bench_pagerank.py
  python bench_pagerank.py --users 50000 --events 400000 --workers 1 2 4
"""

import argparse
import random
import statistics
import time

try:
    from rankengine.events import RetweetEvent
    from rankengine.graph import GraphBuilder
    from rankengine.pagerank import PageRankEngine
except Exception as e:
    print("Import error. Install the project (pip install -e .) or run from the repo root.")
    raise


def synthetic_events(n_users, n_events, seed=1234):
    rnd = random.Random(seed)
    # popularity ~ 1/rank, so retweets concentrate on a few accounts
    weights = [1.0 / (i + 1) for i in range(n_users)]
    users = [str(i) for i in range(n_users)]
    targets = rnd.choices(users, weights=weights, k=n_events)
    for dst in targets:
        yield RetweetEvent(rnd.choice(users), dst)


def bench(graph, workers, repeats):
    times = []
    result = None
    for _ in range(repeats):
        engine = PageRankEngine(workers=workers, tol=1e-8)
        t0 = time.perf_counter()
        result = engine.run(graph)
        times.append(time.perf_counter() - t0)
    return result, {
        "n": repeats,
        "avg_s": statistics.mean(times),
        "min_s": min(times),
        "max_s": max(times),
    }


def main(args):
    builder = GraphBuilder()
    graph = builder.build(synthetic_events(args.users, args.events, seed=args.seed))
    print(builder.summary())
    print(graph)

    baseline = None
    for w in args.workers:
        result, stats = bench(graph, w, args.repeats)
        if baseline is None:
            baseline = result.scores
        same = all(abs(result.scores[n] - baseline[n]) < 1e-12 for n in baseline)
        print(f"workers={w:<3} iters={result.iterations:<4} avg={stats['avg_s']:.3f}s "
              f"min={stats['min_s']:.3f}s max={stats['max_s']:.3f}s "
              f"sum={result.total():.9f} matches_first={same}")


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--users", type=int, default=20000, help="number of distinct users")
    ap.add_argument("--events", type=int, default=100000, help="number of retweet events")
    ap.add_argument("--workers", type=int, nargs="+", default=[1, 2, 4], help="worker counts to compare")
    ap.add_argument("--repeats", type=int, default=3, help="runs per worker count")
    ap.add_argument("--seed", type=int, default=1234)
    args = ap.parse_args()
    main(args)
