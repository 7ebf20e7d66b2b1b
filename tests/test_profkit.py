# tests/test_profkit.py
import pytest

from rankengine import profkit
from rankengine.graph import Graph
from rankengine.pagerank import PageRankEngine


def test_disabled_is_noop(monkeypatch):
    monkeypatch.setattr(profkit, "ENABLED", False)
    profkit.reset()
    profkit.tick("x")
    with profkit.timeit("y"):
        pass
    assert dict(profkit.COUNTERS) == {}
    assert dict(profkit.SECTIONS) == {}


def test_counts_pagerank_iterations(monkeypatch, capsys):
    monkeypatch.setattr(profkit, "ENABLED", True)
    profkit.reset()
    res = PageRankEngine(max_iter=3, tol=1e-15).run(Graph([("a", "b"), ("b", "c"), ("c", "a"), ("a", "c")]))
    assert profkit.COUNTERS["pagerank.iterations"] == res.iterations
    section = profkit.SECTIONS["pagerank.iterate"]
    assert section.calls == 1
    assert section.total_ms >= section.max_ms >= 0.0
    profkit.report()
    out = capsys.readouterr().out
    assert "pagerank.iterations" in out
    assert "pagerank.iterate" in out and "calls=1" in out
    profkit.reset()


def test_section_stats_accumulate_through_errors(monkeypatch):
    monkeypatch.setattr(profkit, "ENABLED", True)
    profkit.reset()
    for _ in range(3):
        with profkit.timeit("loop"):
            pass
    with pytest.raises(RuntimeError):
        with profkit.timeit("loop"):
            raise RuntimeError("boom")
    s = profkit.SECTIONS["loop"]
    assert s.calls == 4
    assert s.avg_ms == pytest.approx(s.total_ms / 4)
    profkit.reset()
