# rankengine/paths.py

import os

# --- Base data path (override with RANKENGINE_DATA_DIR) ---
DATA_DIR = os.getenv("RANKENGINE_DATA_DIR", "data")

# --- Retweet graph inputs / outputs ---
TWEETS_PATH = os.path.join(DATA_DIR, "tweets.jsonl")      # one tweet object per line
SCORES_PATH = os.path.join(DATA_DIR, "pagerank.pkl")      # pickled PageRank vector
REPORT_PATH = os.path.join(DATA_DIR, "pagerank_top.tsv")  # top-K report

# --- Learning-to-rank evaluation ---
FOLD_PATH = os.path.join(DATA_DIR, "Fold1", "test.txt")   # LETOR feature vectors
PREDICTIONS_PATH = os.path.join(DATA_DIR, "predictions.txt")
NDCG_REPORT_PATH = os.path.join(DATA_DIR, "ndcg.tsv")

# --- Toy inputs used by the tests and smoke runs ---
TOY_TWEETS_PATH = os.path.join(DATA_DIR, "toy_tweets.jsonl")
TOY_FOLD_PATH = os.path.join(DATA_DIR, "toy_fold.txt")
TOY_PREDICTIONS_PATH = os.path.join(DATA_DIR, "toy_predictions.txt")
