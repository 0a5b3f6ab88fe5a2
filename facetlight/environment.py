"""
Environment lighting for rays that leave the scene.

The tracer returns black on a miss unless it is given an environment.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional
import math

from .vec3 import Vec3, Color


class Environment(ABC):
    """Abstract base class for environment lighting."""

    @abstractmethod
    def sample(self, direction: Vec3) -> Color:
        """Get the environment color for a given direction.

        Args:
            direction: Direction of the escaping ray

        Returns:
            Color value from the environment
        """
        pass


class Sun(Environment):
    """A directional light source seen as a disc of the sky.

    Rays pointing within `half_angle` of the sun direction see `color`,
    every other escaping ray sees `background`.
    """

    def __init__(
        self,
        direction: Vec3,
        color: Color,
        half_angle: float = 30.0,
        background: Optional[Color] = None
    ):
        """Create a sun.

        Args:
            direction: Direction towards the sun (normalized here)
            color: Color seen when looking into the sun
            half_angle: Angular radius of the sun in degrees
            background: Color of the rest of the sky (default black)
        """
        self.direction = direction.normalize()
        self.color = color
        self.half_angle = half_angle
        self.background = background if background is not None else Color.black()
        self._cos_half_angle = math.cos(math.radians(half_angle))

    def sample(self, direction: Vec3) -> Color:
        if direction.dot(self.direction) > self._cos_half_angle:
            return self.color
        return self.background

    def __repr__(self) -> str:
        return f"Sun(direction={self.direction}, half_angle={self.half_angle})"
