# geoquery/domain/entities/graph.py
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from geoquery.app.errors import NotFound
from geoquery.domain.entities.geography import Point, distance

_NOT_LETTER_OR_SPACE = re.compile(r"[^a-zA-Z ]")


def clean_name(s: str) -> str:
    """Lowercase letters and spaces only: 'Peet's Coffee #2' -> 'peets coffee '."""
    return _NOT_LETTER_OR_SPACE.sub("", s).lower()


@dataclass
class Node:
    id: int
    point: Point
    name: str | None = None
    used: bool = False  # True iff the node appears in at least one edge


@dataclass(frozen=True)
class Edge:
    src: int
    dst: int
    weight: float  # straight-line distance, fixed at creation


class Graph:
    """
    In-memory road network snapshot.

    Built once by ingestion (add_node / connect / add_way), pruned, then only
    read. Search state never lives here so concurrent searches stay independent.
    """

    def __init__(self):
        self.nodes: dict[int, Node] = {}
        self.adj: dict[int, list[Edge]] = {}
        self._index: tuple[np.ndarray, np.ndarray] | None = None

    # ------------- ingestion side -------------------

    def add_node(self, node_id: int, point: Point, name: str | None = None) -> Node:
        if not (math.isfinite(point.x) and math.isfinite(point.y)):
            raise ValueError(f"node {node_id} has non-finite coordinates {point}")
        if node_id in self.nodes:
            raise ValueError(f"node {node_id} already exists")
        node = Node(node_id, point, name)
        self.nodes[node_id] = node
        self._index = None
        return node

    def connect(self, a: int, b: int) -> float:
        na, nb = self.node(a), self.node(b)
        w = distance(na.point, nb.point)
        self.adj.setdefault(a, []).append(Edge(a, b, w))
        self.adj.setdefault(b, []).append(Edge(b, a, w))
        na.used = nb.used = True
        return w

    def add_way(self, node_ids: Iterable[int]) -> int:
        """Connect consecutive nodes of a road polyline; returns segments added."""
        ids: list[int] = []
        for nid in node_ids:
            if not ids or ids[-1] != nid:
                ids.append(nid)
        for u, v in zip(ids[:-1], ids[1:]):
            self.connect(u, v)
        return max(0, len(ids) - 1)

    def prune(self) -> int:
        """Drop nodes without edges. Connectivity of the rest is not checked."""
        dead = [nid for nid in self.nodes if not self.adj.get(nid)]
        for nid in dead:
            del self.nodes[nid]
            self.adj.pop(nid, None)
        if dead:
            self._index = None
        return len(dead)

    # ------------- queries -------------------

    def __contains__(self, node_id: int) -> bool:
        return node_id in self.nodes

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adj.values())

    def node(self, node_id: int) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise NotFound(f"unknown node id {node_id}") from None

    def neighbors(self, node_id: int) -> list[Edge]:
        return self.adj.get(node_id, [])

    def point(self, node_id: int) -> Point:
        return self.node(node_id).point

    def nearest(self, p: Point) -> int:
        """Linear scan; ties go to the first node in insertion order."""
        ids, coords = self._coords()
        if ids.size == 0:
            raise NotFound("graph has no nodes")
        d = np.hypot(coords[:, 0] - p.x, coords[:, 1] - p.y)
        return int(ids[int(np.argmin(d))])

    def node_at(self, p: Point) -> int | None:
        for node in self.nodes.values():
            if node.point == p:
                return node.id
        return None

    def named_locations(self) -> dict[str, Point]:
        return {n.name: n.point for n in self.nodes.values() if n.name}

    def locations(self, name: str) -> list[dict]:
        """Every node whose cleaned name equals the cleaned `name`, in insertion order."""
        key = clean_name(name)
        if not key:
            return []
        return [
            {"id": n.id, "lon": n.point.x, "lat": n.point.y, "name": n.name}
            for n in self.nodes.values()
            if n.name and clean_name(n.name) == key
        ]

    def path_length(self, path: Sequence[int]) -> float:
        total = 0.0
        for u, v in zip(path[:-1], path[1:]):
            w = min((e.weight for e in self.neighbors(u) if e.dst == v), default=None)
            if w is None:
                raise NotFound(f"no edge {u} -> {v}")
            total += w
        return total

    def _coords(self) -> tuple[np.ndarray, np.ndarray]:
        # rebuilt lazily after mutation; concurrent rebuilds produce equal arrays
        if self._index is None:
            ids = np.fromiter(self.nodes.keys(), dtype=np.int64, count=len(self.nodes))
            coords = np.array(
                [(n.point.x, n.point.y) for n in self.nodes.values()], dtype=float
            ).reshape(-1, 2)
            self._index = (ids, coords)
        return self._index
