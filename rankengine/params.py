# rankengine/params.py
# Algorithm defaults. Every value can be overridden from the environment,
# e.g. RANKENGINE_DAMPING=0.85 python -m rankengine.run_pagerank

import os


def _env(name: str, default, cast):
    raw = os.getenv(f"RANKENGINE_{name}")
    if raw is None or raw == "":
        return default
    return cast(raw)


# --- PageRank ---
DAMPING = _env("DAMPING", 0.9, float)          # probability of following an edge
TOLERANCE = _env("TOLERANCE", 1e-10, float)    # stop when successive vectors differ by less
MAX_ITER = _env("MAX_ITER", 500, int)          # hard cap on power iterations
NORM = _env("NORM", "l1", str)                 # "l1" or "l2" distance for the stopping test
DANGLING = _env("DANGLING", "uniform", str)    # "uniform" or "renormalize"

# --- Reporting / evaluation ---
TOPK = _env("TOPK", 10, int)
NDCG_K = _env("NDCG_K", 10, int)

# --- Parallelism (1 = run in-process) ---
WORKERS = _env("WORKERS", 1, int)

NORMS = ("l1", "l2")
DANGLING_CONVENTIONS = ("uniform", "renormalize")
