# geoquery/domain/tiles/quadtree.py
import time
from dataclasses import dataclass

from PIL import Image

from geoquery.app.errors import InvalidAddress, NotFound
from geoquery.app.protocols import TileStore
from geoquery.domain.entities.geography import BoundingBox, Point
from geoquery.io.hooks import EngineHooks, NoopHooks

MAX_DEPTH = 7
QUADRANTS = "1234"  # upper-left, upper-right, lower-left, lower-right

# Root tile extent of the pre-rendered map (Berkeley, CA)
ROOT_ULLON, ROOT_ULLAT = -122.2998046875, 37.892195547244356
ROOT_LRLON, ROOT_LRLAT = -122.2119140625, 37.82280243352756
ROOT_EXTENT = BoundingBox.from_bounds(ROOT_ULLON, ROOT_ULLAT, ROOT_LRLON, ROOT_LRLAT)


@dataclass(frozen=True)
class QuadNode:
    index: int
    name: str  # path over "1234"; "" is the root
    depth: int
    extent: BoundingBox
    children: tuple[int, ...] = ()  # four arena indices, empty at max depth

    def contains(self, p: Point) -> bool:
        return self.extent.contains(p)


def strip_name(name: str) -> str:
    """'1234.png' -> '1234'; only the last suffix goes, so '1.2.png' stays invalid."""
    return name.rsplit(".", 1)[0]


class QuadTree:
    """
    Fixed-depth 4-ary partition of the root extent, stored as an arena.

    Extents are immutable once built. Decoded tile images live in a separate
    index -> image mapping that fills lazily on first access; two racing
    loads of the same tile just overwrite each other with equal images.
    """

    def __init__(
        self,
        extent: BoundingBox = ROOT_EXTENT,
        *,
        max_depth: int = MAX_DEPTH,
        store: TileStore | None = None,
        hooks: EngineHooks | None = None,
    ):
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.extent, self.max_depth, self.store = extent, max_depth, store
        self._hooks = hooks or NoopHooks()
        self.nodes: list[QuadNode] = []
        self._images: dict[int, Image.Image] = {}
        self._build()

    def _build(self) -> None:
        # breadth-first so every level is contiguous in the arena
        pending: list[tuple[str, BoundingBox]] = [("", self.extent)]
        while pending:
            level: list[tuple[str, BoundingBox]] = []
            base = len(self.nodes) + len(pending)
            for name, box in pending:
                depth = len(name)
                children: tuple[int, ...] = ()
                if depth < self.max_depth:
                    first = base + len(level)
                    children = tuple(range(first, first + 4))
                    level.extend(zip((name + q for q in QUADRANTS), box.quadrants()))
                node = QuadNode(len(self.nodes), name, depth, box, children)
                self.nodes.append(node)
            pending = level

    @property
    def root(self) -> QuadNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    # ------------- addressing -------------------

    def lookup(self, name: str) -> QuadNode:
        name = strip_name(name)
        if len(name) > self.max_depth:
            raise NotFound(f"{name!r} is deeper than max depth {self.max_depth}")
        node = self.root
        for c in name:
            q = QUADRANTS.find(c)
            if q < 0:
                raise InvalidAddress(f"bad quadrant {c!r} in {name!r}")
            node = self.nodes[node.children[q]]
        return node

    def locate(self, p: Point, depth: int) -> str:
        """
        Name of the depth-`depth` node containing p. Comes back short when p
        is not inside some level's extent (outside the root, or on its
        right/bottom edge).
        """
        depth = min(depth, self.max_depth)
        node, name = self.root, ""
        while len(name) < depth:
            for q, child_index in zip(QUADRANTS, node.children):
                child = self.nodes[child_index]
                if child.contains(p):
                    node, name = child, name + q
                    break
            else:
                break
        return name

    def extent_of(self, name: str) -> BoundingBox:
        return self.lookup(name).extent

    def tile_span(self, depth: int) -> tuple[float, float]:
        """(longitude, latitude) size of one tile at depth."""
        k = 2**depth
        return self.extent.width / k, self.extent.height / k

    # ------------- image cache -------------------

    def image(self, name: str) -> Image.Image:
        node = self.lookup(name)
        img = self._images.get(node.index)
        if img is None:
            if self.store is None:
                raise RuntimeError("QuadTree has no tile store attached")
            t0 = time.perf_counter()
            img = self.store.load(node.name)
            self._hooks.tile_loaded(name=node.name, ms=(time.perf_counter() - t0) * 1000)
            self._images[node.index] = img
        return img

    def cached(self, name: str) -> bool:
        return self.lookup(name).index in self._images

    def cache_size(self) -> int:
        return len(self._images)
