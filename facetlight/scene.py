"""
Scene container: an ordered, read-only sequence of triangles.
"""

from __future__ import annotations
from typing import Iterable, Iterator, Optional, Tuple

from .vec3 import Point3
from .ray import Ray
from .shapes import Triangle, nearest_hit


class Scene:
    """A flat list of triangles.

    The order of triangles does not affect results. Scenes are not modified
    after construction, so one instance can be traced from many threads.
    """

    __slots__ = ('_triangles',)

    def __init__(self, triangles: Optional[Iterable[Triangle]] = None):
        self._triangles: Tuple[Triangle, ...] = tuple(triangles) if triangles is not None else ()

    @property
    def triangles(self) -> Tuple[Triangle, ...]:
        return self._triangles

    def nearest_hit(self, ray: Ray, exclude: Optional[Triangle] = None) -> Optional[Tuple[Point3, Triangle]]:
        """Find the closest triangle hit by the ray, skipping `exclude`."""
        return nearest_hit(self._triangles, ray, exclude)

    def __len__(self) -> int:
        return len(self._triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self._triangles)

    def __repr__(self) -> str:
        return f"Scene({len(self._triangles)} triangles)"
