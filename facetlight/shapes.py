"""
Triangle geometry and ray intersection.

Scenes are flat lists of triangles searched linearly; there is no
acceleration structure.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, TYPE_CHECKING

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Surface


class DegenerateGeometryError(ValueError):
    """Raised for triangles with zero area or non-finite vertices."""
    pass


@dataclass(frozen=True)
class Plane:
    """An infinite plane: all points p with normal.dot(p) == offset.

    Attributes:
        normal: Unit face normal
        offset: Distance term, normal.dot(any point on the plane)
    """
    normal: Vec3
    offset: float

    @classmethod
    def from_points(cls, p0: Point3, p1: Point3, p2: Point3) -> Plane:
        """Derive the plane through three points.

        The normal is (p1 - p0) x (p2 - p0), so the winding of the points
        decides which side the normal faces.

        Raises:
            DegenerateGeometryError: If the points are collinear or not finite
        """
        for p in (p0, p1, p2):
            if not p.is_finite():
                raise DegenerateGeometryError(f"Non-finite vertex: {p}")

        cross = (p1 - p0).cross(p2 - p0)
        length = cross.length()
        if length == 0:
            raise DegenerateGeometryError(
                f"Collinear vertices: {p0}, {p1}, {p2}"
            )

        normal = cross / length
        if not normal.is_finite():
            raise DegenerateGeometryError(
                f"Cannot compute normal for vertices: {p0}, {p1}, {p2}"
            )

        return cls(normal=normal, offset=normal.dot(p0))


@dataclass(frozen=True)
class Hit:
    """Where a ray meets a triangle.

    Attributes:
        point: The intersection point in world space
        distance: The ray parameter at the intersection
    """
    point: Point3
    distance: float


class Triangle:
    """A flat triangle with a precomputed face plane and a surface."""

    __slots__ = ('vertices', 'plane', 'surface')

    def __init__(self, v0: Point3, v1: Point3, v2: Point3, surface: Surface):
        """Create a triangle from three vertices.

        Args:
            v0, v1, v2: The vertices; counter-clockwise order seen from
                the side the normal points to
            surface: Surface describing emission and reflection

        Raises:
            DegenerateGeometryError: If the vertices do not span a triangle
        """
        self.vertices: Tuple[Point3, Point3, Point3] = (v0, v1, v2)
        self.plane = Plane.from_points(v0, v1, v2)
        self.surface = surface

    @property
    def normal(self) -> Vec3:
        return self.plane.normal

    def hit(self, ray: Ray) -> Optional[Hit]:
        """Intersect the ray with the face plane, then test containment.

        A point counts as inside when it lies on the inner side of all
        three edges, measured against the face normal. Points exactly on
        an edge are inside.
        """
        n = self.plane.normal

        denom = n.dot(ray.direction)

        # Ray is parallel to plane
        if denom == 0:
            return None

        t = (self.plane.offset - n.dot(ray.origin)) / denom

        # Plane is behind (or at) the ray origin
        if t <= 0:
            return None

        point = ray.at(t)

        for i in range(3):
            start = self.vertices[i]
            edge = self.vertices[(i + 1) % 3] - start
            if n.dot(edge.cross(point - start)) < 0:
                return None

        return Hit(point=point, distance=t)

    def __repr__(self) -> str:
        v0, v1, v2 = self.vertices
        return f"Triangle({v0}, {v1}, {v2}, surface={self.surface!r})"


def nearest_hit(
    triangles: Iterable[Triangle],
    ray: Ray,
    exclude: Optional[Triangle] = None,
) -> Optional[Tuple[Point3, Triangle]]:
    """Find the closest triangle along the ray.

    Args:
        triangles: Triangles to search, in any order
        ray: The ray to test
        exclude: A triangle to skip, compared by identity. Used so a bounce
            ray does not re-hit the face it starts on.

    Returns:
        (hit point, triangle) for the nearest hit, or None on a miss.
        On equal distances the first triangle seen wins.
    """
    closest: Optional[Tuple[Hit, Triangle]] = None

    for triangle in triangles:
        if triangle is exclude:
            continue
        hit = triangle.hit(ray)
        if hit is not None and (closest is None or hit.distance < closest[0].distance):
            closest = (hit, triangle)

    if closest is None:
        return None
    return closest[0].point, closest[1]


def parallelogram(corner: Point3, side_b: Vec3, side_c: Vec3, surface: Surface) -> list[Triangle]:
    """Build a parallelogram out of two triangles sharing one surface.

    Args:
        corner: One corner of the parallelogram
        side_b: First edge vector from the corner
        side_c: Second edge vector from the corner
        surface: Surface for both triangles

    Returns:
        Two triangles with the same winding (and so the same normal)
    """
    b = corner + side_b
    c = corner + side_c
    d = b + side_c

    return [
        Triangle(corner, b, d, surface),
        Triangle(corner, d, c, surface),
    ]
