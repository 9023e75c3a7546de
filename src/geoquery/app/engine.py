# geoquery/app/engine.py
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from PIL import Image

from geoquery.app.errors import GeoQueryError
from geoquery.app.protocols import Router
from geoquery.domain.entities.geography import BoundingBox, Point
from geoquery.domain.entities.graph import Graph
from geoquery.domain.tiles.overlay import RouteStyle, draw_route
from geoquery.domain.tiles.quadtree import QuadTree
from geoquery.domain.tiles.rasterer import Rasterer, RasterResult
from geoquery.io.hooks import EngineHooks, NoopHooks


@dataclass
class MapEngine:
    """
    Owns everything a query needs: the pruned road graph, the quadtree with
    its tile cache, the router and the overlay style. Build once, share
    between requests; only the tile cache changes after construction.
    """

    graph: Graph
    tree: QuadTree
    router: Router
    rasterer: Rasterer
    style: RouteStyle = field(default_factory=RouteStyle)
    hooks: EngineHooks = field(default_factory=NoopHooks)

    def resolve_raster(self, box: BoundingBox, width: int, height: int) -> RasterResult:
        t0 = time.perf_counter()
        try:
            res = self.rasterer.resolve(box, width, height)
        except GeoQueryError as e:
            self.hooks.error(op="raster", exc=e, width=width, height=height)
            raise
        self.hooks.raster_done(
            depth=res.depth,
            cols=len(res.grid[0]),
            rows=len(res.grid),
            width=res.width,
            height=res.height,
            ms=(time.perf_counter() - t0) * 1000,
        )
        return res

    def nearest(self, p: Point) -> int:
        return self.graph.nearest(p)

    def shortest_path(self, start: Point, end: Point) -> list[int]:
        """Node ids from the node nearest `start` to the node nearest `end`; [] if unreachable."""
        t0 = time.perf_counter()
        try:
            a, b = self.nearest(start), self.nearest(end)
            path = self.router.shortest_path(a, b)
        except GeoQueryError as e:
            self.hooks.error(op="route", exc=e)
            raise
        self.hooks.route_done(
            start=a, end=b, hops=len(path), found=bool(path), ms=(time.perf_counter() - t0) * 1000
        )
        return path

    def draw_route(self, image: Image.Image, box: BoundingBox, path: Sequence[int]) -> Image.Image:
        points = [self.graph.point(nid) for nid in path]
        return draw_route(image, box, points, self.style)

    def route_raster(
        self, box: BoundingBox, width: int, height: int, start: Point, end: Point
    ) -> tuple[RasterResult, list[int]]:
        """Raster the box and draw the route between start and end on it when one exists."""
        res = self.resolve_raster(box, width, height)
        path = self.shortest_path(start, end)
        if path:
            self.draw_route(res.image, res.box, path)
        return res, path
