# rankengine/run_pagerank.py
"""
Retweet PageRank, end to end.

    tweets.jsonl -> TweetParser -> GraphBuilder -> PageRankEngine -> top_k

Prints the top-K users (id, screen name if known, score) and optionally
pickles the full vector and writes the top-K as TSV.

How to use:
  python -m rankengine.run_pagerank --tweets data/tweets.jsonl --topk 10
  python -m rankengine.run_pagerank --tweets data/tweets.jsonl --damping 0.85 \
      --dangling renormalize --norm l2 --workers 4 --save-scores data/pagerank.pkl
"""

from __future__ import annotations

import argparse
import time

from rankengine import params, profkit
from rankengine.events import TweetParser
from rankengine.graph import GraphBuilder
from rankengine.pagerank import PageRankEngine, PageRankResult
from rankengine.paths import REPORT_PATH, SCORES_PATH, TWEETS_PATH
from rankengine.topk import top_k
from rankengine.utils import write_report_tsv, write_scores


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="PageRank over a retweet graph.")
    ap.add_argument("--tweets", type=str, default=TWEETS_PATH, help="line-delimited tweet JSON")
    ap.add_argument("--limit", type=int, default=None, help="read at most this many lines")
    ap.add_argument("--topk", type=int, default=params.TOPK, help="how many users to report")
    ap.add_argument("--damping", type=float, default=params.DAMPING, help="damping factor d in [0, 1)")
    ap.add_argument("--tol", type=float, default=params.TOLERANCE, help="convergence threshold")
    ap.add_argument("--max-iter", type=int, default=params.MAX_ITER, help="iteration cap")
    ap.add_argument("--norm", choices=params.NORMS, default=params.NORM, help="distance for the stopping test")
    ap.add_argument("--dangling", choices=params.DANGLING_CONVENTIONS, default=params.DANGLING,
                    help="what happens to the mass of users who never retweet anyone")
    ap.add_argument("--workers", type=int, default=params.WORKERS, help="processes per iteration (1 = serial)")
    ap.add_argument("--save-scores", type=str, nargs="?", const=SCORES_PATH, default=None,
                    help=f"pickle the full vector here (bare flag: {SCORES_PATH})")
    ap.add_argument("--report", type=str, nargs="?", const=REPORT_PATH, default=None,
                    help=f"write the top-K as TSV here (bare flag: {REPORT_PATH})")
    return ap


def run(args) -> tuple[PageRankResult, list]:
    # Validate before touching the input file
    engine = PageRankEngine(
        damping=args.damping,
        tol=args.tol,
        max_iter=args.max_iter,
        norm=args.norm,
        dangling=args.dangling,
        workers=args.workers,
    )
    if args.topk <= 0:
        raise ValueError(f"--topk must be positive, got {args.topk}")

    parser = TweetParser()
    builder = GraphBuilder()
    t0 = time.perf_counter()
    with profkit.timeit("graph.build"):
        graph = builder.build(parser.iter_events(args.tweets, limit=args.limit))
    t1 = time.perf_counter()
    print(parser.summary())
    print(builder.summary())
    print(f"[GraphBuilder] {graph} in {t1 - t0:.3f}s")

    result = engine.run(graph)
    t2 = time.perf_counter()
    print(f"[PageRank] d={engine.damping} dangling={engine.dangling} norm={engine.norm} "
          f"iterations={result.iterations} residual={result.residual:.3e} "
          f"sum={result.total():.6f} in {t2 - t1:.3f}s")
    if not result.converged:
        print(f"[PageRank] WARNING: not converged after {result.iterations} iterations "
              f"(residual {result.residual:.3e} >= tol {engine.tol})")

    top = top_k(result.scores, args.topk) if result.scores else []
    rows = [(rank, node, parser.screen_names.get(node, ""), score)
            for rank, (node, score) in enumerate(top, start=1)]

    print(f"\nTop {len(rows)} users:")
    for rank, node, name, score in rows:
        print(f"  {rank:>3}  {node:<20} {name:<20} {score:.6f}")

    if args.save_scores:
        write_scores(result.scores, args.save_scores)
    if args.report:
        write_report_tsv(rows, args.report, header=["rank", "user_id", "screen_name", "score"])
    profkit.report()
    return result, rows


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    main()
