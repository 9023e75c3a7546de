# geoquery/domain/tiles/overlay.py
from collections.abc import Sequence
from dataclasses import dataclass

from PIL import Image, ImageDraw

from geoquery.domain.entities.geography import BoundingBox, Point


@dataclass(frozen=True)
class RouteStyle:
    width_px: float = 5.0  # roads are rarely wider than 5px
    color: tuple[int, int, int, int] = (108, 181, 230, 200)  # translucent cyan


def project(p: Point, box: BoundingBox, width: int, height: int) -> tuple[int, int]:
    """Map (lon, lat) to pixel (x, y) inside a raster covering `box`; y grows downward."""
    x = (p.x - box.ullon) / box.width * width
    y = (box.ullat - p.y) / box.height * height
    return int(x), int(y)


def draw_route(
    image: Image.Image,
    box: BoundingBox,
    points: Sequence[Point],
    style: RouteStyle = RouteStyle(),
) -> Image.Image:
    """
    Draw the polyline through `points` onto `image` (in place) and return it.

    Round joins and round end caps keep consecutive segments looking like one
    continuous stroke. The stroke goes on its own transparent layer first so
    overlapping pieces of it are not blended twice.
    """
    if len(points) < 2:
        return image

    xy = [project(p, box, image.width, image.height) for p in points]
    w = max(1, round(style.width_px))
    r = style.width_px / 2

    layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    draw.line(xy, fill=style.color, width=w, joint="curve")
    for x, y in (xy[0], xy[-1]):
        draw.ellipse((x - r, y - r, x + r, y + r), fill=style.color)

    merged = Image.alpha_composite(image.convert("RGBA"), layer)
    image.paste(merged.convert(image.mode))
    return image
