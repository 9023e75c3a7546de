# geoquery/domain/entities/geography.py
import math
from dataclasses import dataclass


# Core geometry types shared by routing and tiling
@dataclass(frozen=True)
class Point:
    x: float  # longitude
    y: float  # latitude


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


@dataclass(frozen=True)
class BoundingBox:
    ul: Point
    lr: Point

    @classmethod
    def from_bounds(cls, ullon: float, ullat: float, lrlon: float, lrlat: float) -> "BoundingBox":
        return cls(Point(ullon, ullat), Point(lrlon, lrlat))

    @property
    def ullon(self) -> float:
        return self.ul.x

    @property
    def ullat(self) -> float:
        return self.ul.y

    @property
    def lrlon(self) -> float:
        return self.lr.x

    @property
    def lrlat(self) -> float:
        return self.lr.y

    @property
    def width(self) -> float:
        return self.lr.x - self.ul.x

    @property
    def height(self) -> float:
        return self.ul.y - self.lr.y

    def contains(self, p: Point) -> bool:
        """Closed on the left/top edges, open on the right/bottom edges."""
        return self.ul.x <= p.x < self.lr.x and self.lr.y < p.y <= self.ul.y

    def intersects(self, other: "BoundingBox") -> bool:
        return (
            other.ul.x < self.lr.x
            and other.lr.x > self.ul.x
            and other.ul.y > self.lr.y
            and other.lr.y < self.ul.y
        )

    def quadrants(self) -> tuple["BoundingBox", "BoundingBox", "BoundingBox", "BoundingBox"]:
        """Children I..IV: upper-left, upper-right, lower-left, lower-right."""
        mx = self.ul.x + self.width / 2
        my = self.ul.y - self.height / 2
        return (
            BoundingBox(self.ul, Point(mx, my)),
            BoundingBox(Point(mx, self.ul.y), Point(self.lr.x, my)),
            BoundingBox(Point(self.ul.x, my), Point(mx, self.lr.y)),
            BoundingBox(Point(mx, my), self.lr),
        )
