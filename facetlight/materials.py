"""
Surface models: what light does where a ray meets a triangle.

Implements:
- Matte (diffuse reflector, emits nothing)
- Light (pure emitter, reflects nothing)

Surfaces are immutable and hold no per-call state, so a single instance
can be shared by any number of triangles and concurrent traces.
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from .vec3 import Vec3, Color


class Surface(ABC):
    """Abstract base class for surfaces.

    New behaviours (mirror, glass, ...) subclass this and implement both
    methods; the tracer only relies on this interface.
    """

    @abstractmethod
    def emitted(self) -> Color:
        """Return the light this surface gives off on its own."""
        pass

    @abstractmethod
    def reflected(self, normal: Vec3, incoming: Vec3, outgoing: Vec3) -> Color:
        """Return the weight applied to light arriving along `incoming`
        that leaves along `outgoing`.

        Args:
            normal: Face normal of the triangle that was hit
            incoming: Direction of the gathered (bounce) ray
            outgoing: Direction of the ray that struck the surface

        Returns:
            Per-channel weight; black means no contribution
        """
        pass


class Matte(Surface):
    """Diffuse reflector.

    The returned weight is not cosine-attenuated; the tracer applies the
    Lambert factor itself.
    """

    def __init__(self, color: Color):
        self.color = color

    def emitted(self) -> Color:
        return Color.black()

    def reflected(self, normal: Vec3, incoming: Vec3, outgoing: Vec3) -> Color:
        v = incoming.dot(normal)

        # Grazing the surface
        if v == 0:
            return Color.black()

        # Both rays on the same side: not a valid bounce for an opaque face
        if outgoing.dot(normal) / v > 0:
            return Color.black()

        return self.color

    def __repr__(self) -> str:
        return f"Matte(color={self.color})"


class Light(Surface):
    """Emitter. Lights do not reflect anything."""

    def __init__(self, color: Color):
        self.color = color

    def emitted(self) -> Color:
        return self.color

    def reflected(self, normal: Vec3, incoming: Vec3, outgoing: Vec3) -> Color:
        return Color.black()

    def __repr__(self) -> str:
        return f"Light(color={self.color})"
