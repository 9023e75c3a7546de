from typing import Protocol, runtime_checkable

from PIL import Image

from geoquery.domain.entities.geography import Point


# ------------- Routing --------------------
@runtime_checkable
class Router(Protocol):
    """
    Responsibilities:
      • Find the cheapest node path between two graph nodes.
      • Snap free points to graph nodes before searching.
    An empty path means the endpoints are disconnected; that is not an error.
    """

    def shortest_path(self, start_id: int, end_id: int) -> list[int]: ...
    def route(self, a: Point, b: Point) -> list[int]: ...


# ------------- Tiles --------------------
@runtime_checkable
class TileStore(Protocol):
    """
    Source of pre-rendered tile images addressed by quadtree name ("" = root).
    Must raise TileUnavailable when the resource is missing or unreadable.
    """

    def load(self, name: str) -> Image.Image: ...
