"""
Deterministic recursive light gathering.

At every hit the tracer casts the same fixed fan of directions, weights
what comes back by the surface's reflection and the Lambert cosine, and
adds the surface's own emission. There is no randomness: a given scene
always produces the same image.

Cost grows as (rays ** 2) ** max_depth, pruned by directions the surface
rejects, so both parameters must stay small.
"""

from __future__ import annotations
from typing import Optional, Tuple

from .vec3 import Vec3, Color
from .ray import Ray
from .scene import Scene
from .shapes import Triangle
from .environment import Environment

REFERENCE_DIRECTION = Vec3(1.0, 0.0, 0.0)
YAW_AXIS = Vec3(0.0, 1.0, 0.0)
PITCH_AXIS = Vec3(0.0, 0.0, 1.0)


def sample_directions(rays: int) -> Tuple[Vec3, ...]:
    """Generate the fixed gather fan.

    Two Euler angles each step through [0, 360) degrees in `rays` equal
    increments. The reference direction is pitched about z by the second
    angle, then yawed about y by the first, giving rays ** 2 unit vectors
    over the whole sphere. Opposite pairs are not removed.

    Args:
        rays: Number of steps per angle (>= 1)

    Returns:
        Tuple of rays ** 2 unit vectors
    """
    step = 360.0 / rays
    directions = []

    for i in range(rays):
        for j in range(rays):
            d = REFERENCE_DIRECTION.rotate(PITCH_AXIS, j * step).rotate(YAW_AXIS, i * step)
            directions.append(d.normalize())

    return tuple(directions)


class Tracer:
    """Recursive radiance gatherer with a fixed direction fan."""

    def __init__(self, rays: int, max_depth: int, environment: Optional[Environment] = None):
        """Create a tracer.

        Args:
            rays: Angle steps per Euler axis; the fan holds rays ** 2 directions
            max_depth: Deepest bounce that is still traced (0 = primary hit only)
            environment: What escaping rays see (None = black)

        Raises:
            ValueError: If rays < 1 or max_depth < 0
        """
        if rays < 1:
            raise ValueError(f"rays must be at least 1, got {rays}")
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")

        self.rays = rays
        self.max_depth = max_depth
        self.environment = environment
        self.directions = sample_directions(rays)

    def trace(
        self,
        scene: Scene,
        ray: Ray,
        exclude: Optional[Triangle] = None,
        depth: int = 0
    ) -> Color:
        """Compute the light arriving back along a ray.

        Args:
            scene: The triangles to trace against
            ray: The ray to follow
            exclude: Triangle the ray starts on, skipped during the search
            depth: Bounces taken so far

        Returns:
            Accumulated color (unbounded, black when nothing contributes)
        """
        if depth > self.max_depth:
            return Color.black()

        found = scene.nearest_hit(ray, exclude)

        if found is None:
            if self.environment is not None:
                return self.environment.sample(ray.direction)
            return Color.black()

        hit_point, triangle = found
        surface = triangle.surface
        normal = triangle.normal

        accumulated = surface.emitted()

        for direction in self.directions:
            weight = surface.reflected(normal, direction, ray.direction)
            if weight.is_black():
                continue

            lambert = abs(direction.dot(normal))
            bounce = Ray(hit_point, direction)
            gathered = self.trace(scene, bounce, triangle, depth + 1)

            accumulated = accumulated + gathered * weight * lambert

        return accumulated

    def __repr__(self) -> str:
        return f"Tracer(rays={self.rays}, max_depth={self.max_depth})"
