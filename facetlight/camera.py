"""
Camera module for generating primary rays.

A pinhole camera: every pixel is a fixed angular step away from the
viewing direction, so the horizontal field of view is `aperture`
degrees and the vertical one follows from the image aspect.
"""

from __future__ import annotations
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera defined by position, facing direction and up vector."""

    def __init__(
        self,
        origin: Point3,
        direction: Vec3,
        up: Vec3 = Vec3(0, 1, 0),
        aperture: float = 30.0
    ):
        """Create a camera.

        Args:
            origin: Camera position in world space
            direction: Viewing direction (normalized here)
            up: Up vector; should be perpendicular to direction
            aperture: Horizontal viewing angle in degrees

        Raises:
            ValueError: If direction is zero or parallel to up
        """
        self.origin = origin
        self.direction = direction.normalize()
        self.up = up.normalize()
        right = self.direction.cross(self.up)
        if right.length() == 0:
            raise ValueError(f"Camera direction {direction} must not be zero or parallel to up {up}")
        self.right = right.normalize()
        self.aperture = aperture

    def get_ray(self, x: float, y: float, width: int, height: int) -> Ray:
        """Generate the primary ray for a pixel.

        Args:
            x: Column, 0 = left
            y: Row, 0 = top
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            A ray from the camera origin through the pixel
        """
        pixel_angle = self.aperture / width
        yaw = (x - width * 0.5) * pixel_angle
        pitch = (y - height * 0.5) * pixel_angle

        direction = self.direction.rotate(self.right, -pitch).rotate(self.up, -yaw)

        return Ray(self.origin, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, direction={self.direction}, aperture={self.aperture})"
