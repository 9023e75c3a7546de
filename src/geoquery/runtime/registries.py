# runtime/registries.py
from collections.abc import Callable
from typing import Any

from geoquery.app.protocols import Router, TileStore
from geoquery.config.models import (
    GraphByName,
    GraphByPath,
    GraphRef,
    RouterAStarModel,
    RouterDijkstraModel,
    RouterUnion,
    TileStoreDirectoryModel,
    TileStoreUnion,
)
from geoquery.domain.entities.graph import Graph
from geoquery.domain.routing.routers import AStarRouter, DijkstraRouter
from geoquery.runtime.resources import DirectoryTileStore, load_graph_from_path

RouterFactory = Callable[[RouterUnion, dict], Router]
TileStoreFactory = Callable[[TileStoreUnion, dict], TileStore]

_router_registry: dict[str, RouterFactory] = {}
_tile_store_registry: dict[str, TileStoreFactory] = {}


# ----- Graphs --------------------------


def resolve_graph(ref: GraphRef | None, *, deps: dict[str, Any]) -> Graph:
    """
    deps can include:
      - 'graphs': dict[str, Graph]  # prebuilt graphs by name
      - 'graph': Graph              # a direct fallback/default
    """
    if ref is None:
        if deps.get("graph") is not None:
            return deps["graph"]
        raise ValueError("No graph provided")
    if isinstance(ref, GraphByName):
        return deps["graphs"][ref.name]  # raises KeyError if missing
    if isinstance(ref, GraphByPath):
        try:
            return load_graph_from_path(ref.file, ref.fmt)
        except FileNotFoundError:
            if ref.must_exist:
                raise
            return Graph()
    raise TypeError(ref)


# ----- Routers --------------------------


def register_router(kind: str):
    def deco(fn):
        _router_registry[kind] = fn
        return fn

    return deco


def make_router(cfg: RouterUnion, *, deps: dict) -> Router:
    return _router_registry[cfg.kind](cfg, deps)


@register_router("astar")
def _make_astar(cfg: RouterAStarModel, deps):
    return AStarRouter(deps["graph"])


@register_router("dijkstra")
def _make_dijkstra(cfg: RouterDijkstraModel, deps):
    return DijkstraRouter(deps["graph"])


# ----- Tile stores --------------------------


def register_tile_store(kind: str):
    def deco(fn):
        _tile_store_registry[kind] = fn
        return fn

    return deco


def make_tile_store(cfg: TileStoreUnion, *, deps: dict) -> TileStore:
    return _tile_store_registry[cfg.kind](cfg, deps)


@register_tile_store("directory")
def _make_directory(cfg: TileStoreDirectoryModel, deps):
    return DirectoryTileStore(cfg.path, suffix=cfg.suffix, root_name=cfg.root_name)
