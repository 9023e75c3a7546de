# geoquery/domain/tiles/rasterer.py
from dataclasses import dataclass, field

from PIL import Image

from geoquery.app.errors import InvalidRequest, OutOfBounds
from geoquery.domain.entities.geography import BoundingBox, Point
from geoquery.domain.tiles.quadtree import QuadTree

TILE_SIZE = 256
# Nudge added to every per-tile step of the grid walk so float drift never
# lands a sample point just short of a partition boundary.
BOUNDARY_EPSILON = 1e-10


@dataclass
class RasterResult:
    image: Image.Image
    ul: Point
    lr: Point
    width: int  # pixels
    height: int
    depth: int
    grid: list[list[str | None]] = field(default_factory=list)  # None marks a skipped cell

    @property
    def box(self) -> BoundingBox:
        return BoundingBox(self.ul, self.lr)

    def as_params(self) -> dict[str, float | int | bool]:
        return {
            "raster_ul_lon": self.ul.x,
            "raster_ul_lat": self.ul.y,
            "raster_lr_lon": self.lr.x,
            "raster_lr_lat": self.lr.y,
            "raster_width": self.width,
            "raster_height": self.height,
            "depth": self.depth,
            "query_success": True,
        }


class Rasterer:
    """
    Picks the quadtree depth for a query and stitches the covering tiles.

    The composite is whole tiles, so it usually overshoots the query box;
    RasterResult reports the box that was actually covered.
    """

    def __init__(
        self, tree: QuadTree, *, tile_size: int = TILE_SIZE, epsilon: float = BOUNDARY_EPSILON
    ):
        self.tree, self.tile_size, self.epsilon = tree, tile_size, epsilon

    def select_depth(self, query_ldpp: float) -> int:
        """Shallowest depth whose lon-degrees-per-pixel is <= query_ldpp, capped at max depth."""
        depth = 0
        ldpp = self.tree.extent.width / self.tile_size
        while ldpp > query_ldpp and depth < self.tree.max_depth:
            ldpp /= 2
            depth += 1
        return depth

    def resolve(self, box: BoundingBox, width: int, height: int) -> RasterResult:
        if width <= 0 or height <= 0:
            raise InvalidRequest(f"pixel size must be positive, got {width}x{height}")
        if box.width <= 0 or box.height <= 0:
            raise InvalidRequest(f"degenerate query box {box}")
        root = self.tree.extent
        if not root.intersects(box):
            raise OutOfBounds(f"query box {box} does not overlap the map extent {root}")

        depth = self.select_depth(box.width / width)
        grid = self.tile_grid(box, depth)
        image = self.composite(grid)

        dlon, dlat = self.tree.tile_span(depth)
        start = self.tree.extent_of(grid[0][0])
        ul = start.ul
        if grid[-1][-1] is not None:
            lr = self.tree.extent_of(grid[-1][-1]).lr
        else:
            lr = Point(ul.x + len(grid[0]) * dlon, ul.y - len(grid) * dlat)
        return RasterResult(image, ul, lr, image.width, image.height, depth, grid)

    def tile_grid(self, box: BoundingBox, depth: int) -> list[list[str | None]]:
        root, eps = self.tree.extent, self.epsilon
        # the part of the box hanging off the map has no tiles
        corner = Point(max(box.ullon, root.ullon), min(box.ullat, root.ullat))
        top_left = self.tree.locate(corner, depth)
        if len(top_left) != depth:
            raise OutOfBounds(f"cannot resolve a depth-{depth} tile at {corner}")

        start = self.tree.extent_of(top_left)
        dlon, dlat = self.tree.tile_span(depth)

        cols, lon = 0, start.ullon
        while lon < box.lrlon - eps and lon + dlon <= root.lrlon + eps:
            cols += 1
            lon += dlon
        rows, lat = 0, start.ullat
        while lat > box.lrlat + eps and lat - dlat >= root.lrlat - eps:
            rows += 1
            lat -= dlat
        cols, rows = max(cols, 1), max(rows, 1)

        grid: list[list[str | None]] = []
        lat = start.ullat
        for _ in range(rows):
            row, lon = [], start.ullon
            for _ in range(cols):
                name = self.tree.locate(Point(lon, lat), depth)
                row.append(name if len(name) == depth else None)
                lon += dlon + eps
            grid.append(row)
            lat -= dlat + eps
        return grid

    def composite(self, grid: list[list[str | None]]) -> Image.Image:
        """Paste every named cell; a missing tile aborts the whole composite."""
        ts = self.tile_size
        out = Image.new("RGB", (len(grid[0]) * ts, len(grid) * ts))
        for i, row in enumerate(grid):
            for j, name in enumerate(row):
                if name is None:
                    continue
                tile = self.tree.image(name)
                if tile.mode != "RGB":
                    tile = tile.convert("RGB")
                out.paste(tile, (j * ts, i * ts))
        return out
