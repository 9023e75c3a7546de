# tests/config/test_models.py
import json

import pytest
from pydantic import ValidationError

from geoquery.config.models import (
    EngineModel,
    ExtentModel,
    GraphByName,
    GraphByPath,
    RouterDijkstraModel,
    RouteStyleModel,
    TileStoreDirectoryModel,
)
from geoquery.domain.tiles.quadtree import ROOT_EXTENT
from geoquery.io.config import load_engine_config


def test_defaults_describe_the_berkeley_map():
    m = EngineModel()
    ext = m.quadtree.extent
    assert (ext.ullon, ext.ullat, ext.lrlon, ext.lrlat) == (
        ROOT_EXTENT.ullon,
        ROOT_EXTENT.ullat,
        ROOT_EXTENT.lrlon,
        ROOT_EXTENT.lrlat,
    )
    assert m.quadtree.max_depth == 7
    assert m.quadtree.tile_size == 256
    assert m.router.kind == "astar"
    assert m.tiles.kind == "directory"
    assert m.graph is None
    assert m.route_style.color == (108, 181, 230, 200)


@pytest.mark.parametrize(
    "bounds",
    [
        {"ullon": 1.0, "lrlon": 0.0, "ullat": 1.0, "lrlat": 0.0},  # west of itself
        {"ullon": 0.0, "lrlon": 1.0, "ullat": 0.0, "lrlat": 1.0},  # upside down
        {"ullon": 0.0, "lrlon": 0.0, "ullat": 1.0, "lrlat": 0.0},  # zero width
    ],
)
def test_extent_must_be_oriented(bounds):
    with pytest.raises(ValidationError):
        ExtentModel(**bounds)


def test_color_channels_are_bytes():
    with pytest.raises(ValidationError):
        RouteStyleModel(color=(0, 0, 300, 0))
    with pytest.raises(ValidationError):
        RouteStyleModel(color=(0, -1, 0, 0))
    with pytest.raises(ValidationError):
        RouteStyleModel(width_px=0.0)


def test_quadtree_limits():
    with pytest.raises(ValidationError):
        EngineModel.model_validate({"quadtree": {"max_depth": 13}})
    with pytest.raises(ValidationError):
        EngineModel.model_validate({"quadtree": {"tile_size": 0}})
    with pytest.raises(ValidationError):
        EngineModel.model_validate({"quadtree": {"epsilon": -1e-9}})


def test_unknown_keys_are_rejected():
    with pytest.raises(ValidationError):
        EngineModel.model_validate({"bogus": 1})
    with pytest.raises(ValidationError):
        EngineModel.model_validate({"tiles": {"kind": "directory", "colour": "red"}})


def test_unions_pick_by_discriminator():
    m = EngineModel.model_validate(
        {"router": {"kind": "dijkstra"}, "graph": {"by": "name", "name": "berkeley"}}
    )
    assert isinstance(m.router, RouterDijkstraModel)
    assert isinstance(m.graph, GraphByName)
    with pytest.raises(ValidationError):
        EngineModel.model_validate({"router": {"kind": "bfs"}})


def test_paths_expand_env_and_home(monkeypatch, tmp_path):
    monkeypatch.setenv("GEOQUERY_DATA", str(tmp_path))
    monkeypatch.setenv("HOME", str(tmp_path))
    assert TileStoreDirectoryModel(path="$GEOQUERY_DATA/img").path == f"{tmp_path}/img"
    assert GraphByPath(file="~/berkeley.pkl").file == f"{tmp_path}/berkeley.pkl"


def test_load_engine_config_from_json(tmp_path):
    cfg = {
        "name": "bk",
        "log": {"level": "DEBUG"},
        "tiles": {"kind": "directory", "path": str(tmp_path / "img"), "suffix": ".jpg"},
        "graph": {"by": "path", "file": str(tmp_path / "g.pkl"), "must_exist": False},
        "route_style": {"width_px": 7.5},
    }
    path = tmp_path / "engine.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")

    m = load_engine_config(path)
    assert m.name == "bk"
    assert m.log.level == "DEBUG"
    assert m.tiles.suffix == ".jpg"
    assert isinstance(m.graph, GraphByPath) and m.graph.must_exist is False
    assert m.route_style.width_px == 7.5


def test_tags_default_when_left_out():
    m = EngineModel.model_validate(
        {"tiles": {"path": "tiles"}, "graph": {"file": "g.pkl"}, "router": {}}
    )
    assert isinstance(m.tiles, TileStoreDirectoryModel) and m.tiles.path == "tiles"
    assert isinstance(m.graph, GraphByPath) and m.graph.file == "g.pkl"
    assert m.router.kind == "astar"
    # an explicit tag still selects the other member
    named = EngineModel.model_validate({"graph": {"by": "name", "name": "bk"}})
    assert isinstance(named.graph, GraphByName)
