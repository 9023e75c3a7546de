# geoquery/runtime/resources.py
import pickle
from functools import lru_cache
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from geoquery.app.errors import TileUnavailable
from geoquery.app.protocols import TileStore
from geoquery.domain.entities.graph import Graph


@lru_cache(maxsize=8)
def load_graph_from_path(file: str, fmt: str) -> Graph:
    if fmt == "pickle":
        with open(file, "rb") as f:
            g = pickle.load(f)
        if not isinstance(g, Graph):
            raise TypeError(f"{file} holds a {type(g).__name__}, not a Graph")
        return g
    raise ValueError(f"Unsupported graph fmt {fmt!r}")


def dump_graph(graph: Graph, file: str | Path) -> None:
    """Snapshot writer for the ingestion side."""
    with open(file, "wb") as f:
        pickle.dump(graph, f, protocol=pickle.HIGHEST_PROTOCOL)


class DirectoryTileStore(TileStore):
    """Tiles stored as <root>/<name><suffix>; the root tile is <root_name><suffix>."""

    def __init__(self, root: str | Path, *, suffix: str = ".png", root_name: str = "root"):
        self.root, self.suffix, self.root_name = Path(root), suffix, root_name

    def path_for(self, name: str) -> Path:
        return self.root / f"{name or self.root_name}{self.suffix}"

    def load(self, name: str) -> Image.Image:
        path = self.path_for(name)
        try:
            with Image.open(path) as im:
                return im.convert("RGB")
        except FileNotFoundError as e:
            raise TileUnavailable(name, f"no file {path}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise TileUnavailable(name, f"cannot decode {path}: {e}") from e
