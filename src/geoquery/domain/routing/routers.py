import heapq
import itertools

from geoquery.app.errors import NotFound
from geoquery.app.protocols import Router
from geoquery.domain.entities.geography import Point, distance
from geoquery.domain.entities.graph import Graph


class AStarRouter(Router):
    """
    A* over a Graph with h(n) = straight-line distance to the goal.

    Edge weights are straight-line distances too, so h is admissible and
    consistent and the first time the goal is popped its path is optimal.
    All search state (heap, closed set, g, predecessors) is local to a call.
    """

    def __init__(self, graph: Graph):
        self.G = graph

    def route(self, a: Point, b: Point) -> list[int]:
        return self.shortest_path(self.G.nearest(a), self.G.nearest(b))

    def shortest_path(self, start_id: int, end_id: int) -> list[int]:
        if start_id not in self.G:
            raise NotFound(f"unknown node id {start_id}")
        goal = self.G.point(end_id)
        h = self._heuristic(goal)

        # (f, seq, node); seq only keeps tuples comparable, it is not a tiebreak rule
        seq = itertools.count()
        fringe: list[tuple[float, int, int]] = [(h(start_id), next(seq), start_id)]
        g: dict[int, float] = {start_id: 0.0}
        came_from: dict[int, int] = {}
        closed: set[int] = set()

        while fringe:
            _, _, u = heapq.heappop(fringe)
            if u in closed:
                continue
            if u == end_id:
                return self._reconstruct(came_from, start_id, end_id)
            closed.add(u)
            gu = g[u]
            for edge in self.G.neighbors(u):
                v = edge.dst
                tentative = gu + edge.weight
                if v not in g or tentative < g[v]:
                    g[v] = tentative
                    came_from[v] = u
                    heapq.heappush(fringe, (tentative + h(v), next(seq), v))
        return []

    def _heuristic(self, goal: Point):
        G = self.G

        def h(n: int) -> float:
            return distance(G.nodes[n].point, goal)

        return h

    @staticmethod
    def _reconstruct(came_from: dict[int, int], start_id: int, end_id: int) -> list[int]:
        path = [end_id]
        cur = end_id
        while cur != start_id:
            cur = came_from[cur]
            path.append(cur)
        path.reverse()
        return path


class DijkstraRouter(AStarRouter):
    """Uninformed baseline (h = 0); same answers as A*, more expansions."""

    def _heuristic(self, goal: Point):
        return lambda n: 0.0
