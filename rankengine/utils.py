# rankengine/utils.py

import csv
import os
import pickle


def _ensure_parent(path):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_scores(scores, path):
    """
    Save a PageRank vector (node -> score) to disk using pickle.
    Args:
        scores: dict[str, float]
        path: str, file path
    """
    _ensure_parent(path)
    with open(path, 'wb') as f:
        pickle.dump(dict(scores), f)
    print(f"Scores saved to {path}")


def load_scores(path):
    """
    Load a PageRank vector from disk.
    Args:
        path: str, file path
    Returns:
        scores: dict[str, float]
    """
    with open(path, 'rb') as f:
        scores = pickle.load(f)
    print(f"Scores loaded from {path}")
    return scores


def write_report_tsv(rows, path, header=None):
    """
    Write report rows (tuples) as a tab-separated file.
    Args:
        rows: iterable of tuples
        path: str, file path
        header: optional list of column names
    """
    _ensure_parent(path)
    n = 0
    with open(path, 'w', encoding='utf-8', newline='') as f:
        w = csv.writer(f, delimiter='\t', lineterminator='\n')
        if header:
            w.writerow(header)
        for row in rows:
            w.writerow(row)
            n += 1
    print(f"Report saved to {path} ({n} rows)")


def read_report_tsv(path, header=True):
    """Read a report back as (header, rows); every cell comes back as str."""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        rows = list(csv.reader(f, delimiter='\t'))
    if header and rows:
        return rows[0], rows[1:]
    return None, rows
