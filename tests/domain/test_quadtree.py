import random

import pytest
from PIL import Image

from geoquery.app.errors import InvalidAddress, NotFound, TileUnavailable
from geoquery.domain.entities.geography import Point
from geoquery.domain.tiles.quadtree import ROOT_EXTENT, QuadTree


class _CountingStore:
    def __init__(self, missing=()):
        self.loads: list[str] = []
        self.missing = set(missing)

    def load(self, name: str) -> Image.Image:
        self.loads.append(name)
        if name in self.missing:
            raise TileUnavailable(name)
        return Image.new("RGB", (256, 256), (len(name) * 30, 0, 0))


@pytest.fixture(scope="module")
def tree() -> QuadTree:
    return QuadTree()


def test_arena_holds_full_pyramid(tree: QuadTree):
    assert len(tree) == (4**8 - 1) // 3
    assert tree.root.name == "" and tree.root.extent == ROOT_EXTENT
    leaves = [n for n in tree.nodes if not n.children]
    assert len(leaves) == 128 * 128
    assert all(n.depth == 7 for n in leaves)


def test_children_partition_parent_extent(tree: QuadTree):
    for name in ("", "1", "42", "3141"):
        node = tree.lookup(name)
        kids = [tree.nodes[i] for i in node.children]
        assert [k.name for k in kids] == [name + q for q in "1234"]
        assert kids[0].extent.ul == node.extent.ul
        assert kids[3].extent.lr == node.extent.lr
        assert kids[0].extent.lr == kids[3].extent.ul


def test_lookup_strips_extension(tree: QuadTree):
    assert tree.lookup("1234.png").name == "1234"
    assert tree.lookup("").depth == 0
    assert tree.lookup("2").extent == ROOT_EXTENT.quadrants()[1]


def test_lookup_rejects_bad_names(tree: QuadTree):
    with pytest.raises(InvalidAddress):
        tree.lookup("125")
    with pytest.raises(InvalidAddress):
        tree.lookup("1a")
    with pytest.raises(NotFound):
        tree.lookup("12341234")
    with pytest.raises(InvalidAddress):
        tree.lookup("1.2.png")  # only the extension is stripped
    assert issubclass(InvalidAddress, NotFound)


def test_locate_round_trips_for_interior_points(tree: QuadTree):
    rng = random.Random(7)
    ext = ROOT_EXTENT
    for _ in range(200):
        p = Point(rng.uniform(ext.ullon, ext.lrlon), rng.uniform(ext.lrlat, ext.ullat))
        if not ext.contains(p):
            continue
        for d in range(8):
            name = tree.locate(p, d)
            assert len(name) == d
            assert tree.lookup(name).contains(p)


def test_locate_boundaries(tree: QuadTree):
    ext = ROOT_EXTENT
    mid = ext.quadrants()[0].lr
    # vertical split line belongs to the right-hand quadrant
    assert tree.locate(Point(mid.x, ext.ullat), 1) == "2"
    # horizontal split line belongs to the lower quadrant
    assert tree.locate(Point(ext.ullon, mid.y), 1) == "3"
    assert tree.locate(ext.ul, 7) == "1111111"
    # the root's right and bottom edges are outside every tile
    assert tree.locate(Point(ext.lrlon, mid.y), 3) == ""
    assert tree.locate(Point(mid.x, ext.lrlat), 3) == ""
    assert tree.locate(Point(ext.ullon - 1.0, mid.y), 2) == ""


def test_locate_depth_is_capped(tree: QuadTree):
    assert len(tree.locate(Point(-122.25, 37.86), 12)) == 7


def test_images_are_decoded_once():
    store = _CountingStore()
    t = QuadTree(max_depth=2, store=store)
    a = t.image("13")
    b = t.image("13.png")
    assert a is b
    assert store.loads == ["13"]
    assert t.cached("13") and not t.cached("14")
    t.image("")
    assert t.cache_size() == 2


def test_missing_tile_is_not_cached():
    store = _CountingStore(missing={"4"})
    t = QuadTree(max_depth=1, store=store)
    with pytest.raises(TileUnavailable):
        t.image("4")
    assert not t.cached("4")


def test_image_without_store():
    with pytest.raises(RuntimeError):
        QuadTree(max_depth=1).image("1")
