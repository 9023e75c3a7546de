# geoquery/app/errors.py


class GeoQueryError(Exception):
    """Base class for every failure raised by the query engine."""


class NotFound(GeoQueryError, LookupError):
    pass


class InvalidAddress(NotFound):
    """Quadtree name containing characters outside 1-4."""


class OutOfBounds(GeoQueryError, ValueError):
    pass


class InvalidRequest(GeoQueryError, ValueError):
    pass


class TileUnavailable(GeoQueryError):
    def __init__(self, name: str, reason: str = "missing"):
        super().__init__(f"tile {name or 'root'!r} unavailable: {reason}")
        self.name = name
        self.reason = reason
