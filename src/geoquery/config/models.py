import os
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationInfo,
    field_validator,
    model_validator,
)

from geoquery.domain.tiles.quadtree import MAX_DEPTH, ROOT_LRLAT, ROOT_LRLON, ROOT_ULLAT, ROOT_ULLON


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False


def _tag_or(field: str, default: str):
    """Discriminator that falls back to `default` when the tag is left out."""

    def get(v: Any) -> str:
        if isinstance(v, dict):
            return v.get(field, default)
        return getattr(v, field, default)

    return get


# ----------------- TILES ---------------------


class ExtentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    ullon: float = ROOT_ULLON
    ullat: float = ROOT_ULLAT
    lrlon: float = ROOT_LRLON
    lrlat: float = ROOT_LRLAT

    @model_validator(mode="after")
    def _check_orientation(self):
        if self.lrlon <= self.ullon:
            raise ValueError(f"lrlon ({self.lrlon}) must be east of ullon ({self.ullon})")
        if self.ullat <= self.lrlat:
            raise ValueError(f"ullat ({self.ullat}) must be north of lrlat ({self.lrlat})")
        return self


class QuadTreeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    extent: ExtentModel = Field(default_factory=ExtentModel)
    max_depth: int = Field(default=MAX_DEPTH, ge=0, le=12)
    tile_size: int = Field(default=256, gt=0)
    epsilon: float = Field(default=1e-10, ge=0.0)  # grid-walk boundary nudge


class TileStoreDirectoryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["directory"] = "directory"
    path: str = "img"
    suffix: str = ".png"
    root_name: str = "root"

    @field_validator("path")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


# single kind for now; grows into a tagged union like RouterUnion
TileStoreUnion = TileStoreDirectoryModel


# ----------------- GRAPH ---------------------


class GraphByPath(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["path"] = "path"
    file: str
    fmt: Literal["pickle"] = "pickle"
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


class GraphByName(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["name"] = "name"
    name: str


GraphRef = Annotated[
    Union[Annotated[GraphByPath, Tag("path")], Annotated[GraphByName, Tag("name")]],
    Discriminator(_tag_or("by", "path")),
]


# ----------------- ROUTERS ---------------------


class RouterAStarModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["astar"] = "astar"


class RouterDijkstraModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["dijkstra"] = "dijkstra"


RouterUnion = Annotated[
    Union[Annotated[RouterAStarModel, Tag("astar")], Annotated[RouterDijkstraModel, Tag("dijkstra")]],
    Discriminator(_tag_or("kind", "astar")),
]


# ----------------- OVERLAY ---------------------


class RouteStyleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    width_px: float = Field(default=5.0, gt=0.0)
    color: tuple[int, int, int, int] = (108, 181, 230, 200)

    @field_validator("color")
    @classmethod
    def _channels(cls, v: tuple[int, int, int, int], info: ValidationInfo):
        if any(c < 0 or c > 255 for c in v):
            raise ValueError(f"{info.field_name} channels must be in 0..255, got {v}")
        return v


# ------------------------------------------------------------------


class EngineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "geoquery"
    log: LogModel = LogModel()
    quadtree: QuadTreeModel = Field(default_factory=QuadTreeModel)
    tiles: TileStoreUnion = Field(default_factory=TileStoreDirectoryModel)
    graph: GraphRef | None = None
    router: RouterUnion = Field(default_factory=RouterAStarModel)
    route_style: RouteStyleModel = Field(default_factory=RouteStyleModel)
