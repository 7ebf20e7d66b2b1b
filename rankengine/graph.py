"""
rankengine/graph.py

Builds the directed "who retweeted whom" graph from RetweetEvents.

Edges point from the retweeting user to the retweeted user, so PageRank mass
flows towards the people whose tweets get passed around.

Invariants of the produced Graph:
    - no self-loops (self-retweets are dropped)
    - set semantics on edges (retweeting the same user twice is one edge)
    - every node is the endpoint of at least one edge; isolated users never
      enter the node set, so they never receive PageRank mass
"""

from collections import defaultdict
from typing import Dict, Hashable, Iterable, List, Tuple

from rankengine.events import RetweetEvent


def node_key(node):
    """Sort key that orders ids of mixed types (ints before strs, by type name)."""
    return (type(node).__name__, node)


class Graph:
    """
    Immutable directed graph.

    Nodes are kept in sorted order; a node's position in `nodes` is its index
    for the array-based PageRank code. Ids of different types never compare
    directly; they are grouped by type name first (see node_key).
    """

    def __init__(self, edges: Iterable[Tuple[Hashable, Hashable]] = ()):
        out_links: Dict[Hashable, set] = defaultdict(set)
        in_links: Dict[Hashable, set] = defaultdict(set)
        for src, dst in edges:
            if src == dst:
                continue
            out_links[src].add(dst)
            in_links[dst].add(src)

        self._nodes: Tuple[Hashable, ...] = tuple(sorted(set(out_links) | set(in_links), key=node_key))
        self._index = {n: i for i, n in enumerate(self._nodes)}
        self._out = {n: tuple(sorted(out_links.get(n, ()), key=node_key)) for n in self._nodes}
        self._in = {n: tuple(sorted(in_links.get(n, ()), key=node_key)) for n in self._nodes}
        self._n_edges = sum(len(v) for v in self._out.values())

    @property
    def nodes(self) -> Tuple[Hashable, ...]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node) -> bool:
        return node in self._index

    @property
    def num_edges(self) -> int:
        return self._n_edges

    def edges(self) -> List[Tuple[Hashable, Hashable]]:
        return [(u, v) for u in self._nodes for v in self._out[u]]

    def index_of(self, node) -> int:
        return self._index[node]

    def out_links(self, node) -> Tuple[Hashable, ...]:
        return self._out[node]

    def in_links(self, node) -> Tuple[Hashable, ...]:
        return self._in[node]

    def out_degree(self, node) -> int:
        return len(self._out[node])

    def in_degree(self, node) -> int:
        return len(self._in[node])

    def dangling(self) -> List[Hashable]:
        """Nodes with in-edges but no out-edges."""
        return [n for n in self._nodes if not self._out[n]]

    def as_arrays(self) -> Tuple[List[List[int]], List[int]]:
        """
        Index-based view used by PageRank:
            in_idx[v]  -> list of source indices u with u -> v
            out_deg[u] -> out-degree of node u
        """
        in_idx = [[self._index[u] for u in self._in[n]] for n in self._nodes]
        out_deg = [len(self._out[n]) for n in self._nodes]
        return in_idx, out_deg

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self)}, edges={self.num_edges})"


class GraphBuilder:
    """
    Accumulates RetweetEvents into an edge set, then freezes it into a Graph.

    Never raises on bad events; it counts them instead:
        seen, dropped_missing, dropped_self, duplicates
    """

    def __init__(self):
        self.edges: set = set()
        self.seen = 0
        self.dropped_missing = 0
        self.dropped_self = 0
        self.duplicates = 0

    def add(self, event: RetweetEvent) -> bool:
        """Add one event. Returns True if it produced a new edge."""
        self.seen += 1
        src = getattr(event, "retweeting_user_id", None)
        dst = getattr(event, "retweeted_user_id", None)
        if src is None or dst is None or src == "" or dst == "":
            self.dropped_missing += 1
            return False
        if src == dst:
            self.dropped_self += 1
            return False
        edge = (src, dst)
        if edge in self.edges:
            self.duplicates += 1
            return False
        self.edges.add(edge)
        return True

    def graph(self) -> Graph:
        return Graph(self.edges)

    def build(self, events: Iterable[RetweetEvent]) -> Graph:
        """
        Consume all events and return the resulting Graph.

        Args:
            events: any iterable of RetweetEvent (a generator is fine)

        Returns:
            Graph over the users that appear in at least one surviving edge
        """
        for ev in events:
            self.add(ev)
        return self.graph()

    def summary(self) -> str:
        return (f"[GraphBuilder] events={self.seen} edges={len(self.edges)} "
                f"self={self.dropped_self} missing={self.dropped_missing} "
                f"duplicates={self.duplicates}")


if __name__ == "__main__":
    from rankengine.events import TweetParser
    from rankengine.paths import TOY_TWEETS_PATH

    builder = GraphBuilder()
    g = builder.build(TweetParser().iter_events(TOY_TWEETS_PATH))
    print(builder.summary())
    print(g)
    for u, v in g.edges():
        print(f"  {u} -> {v}")
