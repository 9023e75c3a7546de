# geoquery/app/build.py
from collections.abc import Mapping

from geoquery.app.engine import MapEngine
from geoquery.app.protocols import TileStore
from geoquery.config.models import EngineModel
from geoquery.domain.entities.geography import BoundingBox
from geoquery.domain.entities.graph import Graph
from geoquery.domain.tiles.overlay import RouteStyle
from geoquery.domain.tiles.quadtree import QuadTree
from geoquery.domain.tiles.rasterer import Rasterer
from geoquery.io.engine_logging import EngineLogging
from geoquery.io.hooks import NoopHooks
from geoquery.runtime.registries import make_router, make_tile_store, resolve_graph


def build(
    cfg: EngineModel | Mapping,
    *,
    graph: Graph | None = None,
    graphs: Mapping[str, Graph] | None = None,
    tile_store: TileStore | None = None,
    use_logging: bool = True,
) -> MapEngine:
    # 0) Validate config
    model = cfg if isinstance(cfg, EngineModel) else EngineModel.model_validate(cfg)

    # 1) Hooks
    hooks = (
        EngineLogging(
            name=model.name,
            level="DEBUG" if model.log.debug else model.log.level,
            debug=model.log.debug,
        )
        if use_logging
        else NoopHooks()
    )

    # 2) Road graph: injected snapshot wins over the configured one
    deps = {"graph": graph, "graphs": dict(graphs or {})}
    g = graph if graph is not None else resolve_graph(model.graph, deps=deps)
    g.prune()

    # 3) Quadtree over the tile pyramid
    ext = model.quadtree.extent
    store = tile_store or make_tile_store(model.tiles, deps={})
    tree = QuadTree(
        BoundingBox.from_bounds(ext.ullon, ext.ullat, ext.lrlon, ext.lrlat),
        max_depth=model.quadtree.max_depth,
        store=store,
        hooks=hooks,
    )
    rasterer = Rasterer(tree, tile_size=model.quadtree.tile_size, epsilon=model.quadtree.epsilon)

    # 4) Routing & overlay
    router = make_router(model.router, deps={"graph": g})
    style = RouteStyle(width_px=model.route_style.width_px, color=model.route_style.color)

    return MapEngine(graph=g, tree=tree, router=router, rasterer=rasterer, style=style, hooks=hooks)
