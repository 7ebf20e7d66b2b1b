# rankengine/run_ndcg.py
"""
Evaluate a point-wise ranker with NDCG.

Inputs:
  - a LETOR fold file (relevance labels, qid, features, optional docid)
  - the external model's predictions for that fold, one score per row

How to use:
  python -m rankengine.run_ndcg --fold data/Fold1/test.txt --predictions data/predictions.txt --k 10
  python -m rankengine.run_ndcg --fold ... --predictions ... --k 0 --workers 4 --report data/ndcg.tsv
(--k 0 means full-list NDCG)
"""

from __future__ import annotations

import argparse
import time

from rankengine import params, profkit
from rankengine.letor import load_groups
from rankengine.ndcg import NDCGEvaluator, NDCGReport
from rankengine.paths import FOLD_PATH, NDCG_REPORT_PATH, PREDICTIONS_PATH
from rankengine.utils import write_report_tsv


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="NDCG for point-wise ranking predictions.")
    ap.add_argument("--fold", type=str, default=FOLD_PATH, help="LETOR feature-vector file")
    ap.add_argument("--predictions", type=str, default=PREDICTIONS_PATH, help="one score per fold row")
    ap.add_argument("--k", type=int, default=params.NDCG_K, help="cutoff; 0 = whole list")
    ap.add_argument("--workers", type=int, default=params.WORKERS, help="processes (1 = serial)")
    ap.add_argument("--per-query", action="store_true", help="print every query's NDCG")
    ap.add_argument("--report", type=str, nargs="?", const=NDCG_REPORT_PATH, default=None,
                    help=f"write per-query NDCG as TSV here (bare flag: {NDCG_REPORT_PATH})")
    return ap


def run(args) -> NDCGReport:
    if args.k < 0:
        raise ValueError(f"--k must be >= 0, got {args.k}")
    evaluator = NDCGEvaluator(k=args.k or None, workers=args.workers)

    t0 = time.perf_counter()
    with profkit.timeit("ndcg.load"):
        groups = load_groups(args.fold, args.predictions)
    with profkit.timeit("ndcg.evaluate"):
        report = evaluator.evaluate(groups)
    dt = time.perf_counter() - t0

    label = f"NDCG@{report.k}" if report.k else "NDCG"
    if args.per_query:
        for qid, value in report.rows():
            print(f"  qid={qid:<10} {value:.4f}")
    if report.skipped:
        print(f"[NDCG] skipped {len(report.skipped)} empty queries")
    print(f"[NDCG] queries={len(report.per_query)} mean {label}={report.mean:.4f} in {dt:.3f}s")

    if args.report:
        rows = report.rows() + [("mean", report.mean)]
        write_report_tsv(rows, args.report, header=["qid", label.lower().replace("@", "_at_")])
    profkit.report()
    return report


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    main()
