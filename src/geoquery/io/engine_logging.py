# io/engine_logging.py
import json
import logging
import sys

from geoquery.io.hooks import NoopHooks


def _default_json_logger(name="geoquery", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)

        class _JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                payload = {
                    "level": record.levelname,
                    "msg": record.getMessage(),
                    "logger": record.name,
                }
                extra = getattr(record, "extra", None)
                if isinstance(extra, dict):
                    payload.update(extra)
                return json.dumps(payload, default=str)

        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


class EngineLogging(NoopHooks):
    """
    Structured JSON logs for raster and route queries.
    Tile loads are only reported in debug mode; they happen once per tile.
    """

    def __init__(
        self,
        name: str = "local",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.name, self.debug = name, debug
        self.log = logger or _default_json_logger(level=level)

    def _emit(self, level: str, msg: str, **extra):
        self.log.log(getattr(logging, level), msg, extra={"extra": {"engine": self.name, **extra}})

    def raster_done(self, *, depth, cols, rows, width, height, ms):
        self._emit(
            "INFO", "raster_done", depth=depth, cols=cols, rows=rows, width=width, height=height, ms=ms
        )

    def route_done(self, *, start, end, hops, found, ms):
        self._emit("INFO", "route_done", start=start, end=end, hops=hops, found=found, ms=ms)

    def tile_loaded(self, *, name, ms):
        if self.debug:
            self._emit("DEBUG", "tile_loaded", tile=name or "root", ms=ms)

    def error(self, *, op: str, exc: BaseException, **extra):
        self._emit("ERROR", "query_error", op=op, error=str(exc), kind=type(exc).__name__, **extra)
