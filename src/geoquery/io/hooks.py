# io/hooks.py
from typing import Protocol


class EngineHooks(Protocol):
    def raster_done(self, *, depth, cols, rows, width, height, ms): ...
    def route_done(self, *, start, end, hops, found, ms): ...
    def tile_loaded(self, *, name, ms): ...
    def error(self, *, op: str, exc: BaseException, **kw): ...


class NoopHooks:
    def raster_done(self, **_):
        pass

    def route_done(self, **_):
        pass

    def tile_loaded(self, **_):
        pass

    def error(self, **_):
        pass
