"""Point model - an immutable 2-D coordinate."""
from __future__ import annotations

import math
from typing import Iterable

from core.exceptions import InvalidArgumentError


class Point:
    """A 2-D point. Equality is exact value equality on (x, y)."""

    __slots__ = ('_x', '_y')

    def __init__(self, x: float, y: float) -> None:
        object.__setattr__(self, '_x', float(x))
        object.__setattr__(self, '_y', float(y))

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    def __setattr__(self, name, value):
        raise AttributeError(f"Point is immutable (cannot set '{name}')")

    def __delattr__(self, name):
        raise AttributeError(f"Point is immutable (cannot delete '{name}')")

    def __reduce__(self):
        # copy and pickle rebuild through __init__ instead of setattr
        return (Point, (self._x, self._y))

    @classmethod
    def mean(cls, points: Iterable[Point]) -> Point:
        """Arithmetic mean of a non-empty collection of points."""
        sum_x = 0.0
        sum_y = 0.0
        count = 0
        for point in points:
            sum_x += point.x
            sum_y += point.y
            count += 1
        if count == 0:
            raise InvalidArgumentError("Cannot compute the mean of no points")
        return cls(sum_x / count, sum_y / count)

    def distance_to(self, other: Point) -> float:
        return euclidean_distance(self, other)

    def as_tuple(self) -> tuple[float, float]:
        return (self._x, self._y)

    def __iter__(self):
        yield self._x
        yield self._y

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self._x == other._x and self._y == other._y

    def __hash__(self) -> int:
        return hash((self._x, self._y))

    def __repr__(self) -> str:
        return f"Point(x={self._x!r}, y={self._y!r})"


def squared_distance(p: Point, q: Point) -> float:
    dx = p.x - q.x
    dy = p.y - q.y
    return dx * dx + dy * dy


def euclidean_distance(p: Point, q: Point) -> float:
    """Euclidean distance sqrt((x1-x2)^2 + (y1-y2)^2)."""
    return math.sqrt(squared_distance(p, q))
