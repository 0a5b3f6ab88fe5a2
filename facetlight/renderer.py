"""
Renderer module - drives the tracer over an image.

Implements:
- Tile-based rendering, multi-threaded via a thread pool
- Progress reporting
- Gamma mapping to 8-bit output and image saving
- Composite sheets of several views
"""

from __future__ import annotations
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Callable, Sequence, Tuple
import numpy as np

from .camera import Camera
from .scene import Scene
from .environment import Environment
from .tracer import Tracer


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 160
    height: int = 96
    rays: int = 6
    max_depth: int = 2
    tile_size: int = 16
    num_threads: int = 0  # 0 = auto-detect
    gamma: float = 2.2

    def __post_init__(self):
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


class Renderer:
    """Renders a scene through a camera with a deterministic tracer."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def make_tracer(self, environment: Optional[Environment] = None) -> Tracer:
        """Build a tracer from the current settings."""
        return Tracer(self.settings.rays, self.settings.max_depth, environment)

    def render(self, scene: Scene, camera: Camera, tracer: Optional[Tracer] = None) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Args:
            scene: The scene to render
            camera: The camera to render from
            tracer: Tracer to use (built from settings if None)

        Returns:
            HDR image as numpy array of shape (height, width, 3)
        """
        width = self.settings.width
        height = self.settings.height
        if tracer is None:
            tracer = self.make_tracer()

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        completed_tiles = [0]

        def render_tile(tile: Tuple[int, int, int, int]) -> Tuple[Tuple, np.ndarray]:
            """Render a single tile."""
            x0, y0, x1, y1 = tile
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            for j in range(y1 - y0):
                for i in range(x1 - x0):
                    ray = camera.get_ray(x0 + i, y0 + j, width, height)
                    tile_image[j, i] = tracer.trace(scene, ray).to_array()

            completed_tiles[0] += 1
            if self._progress_callback:
                self._progress_callback(completed_tiles[0] / total_tiles)

            return tile, tile_image

        # Scene, camera and tracer are read-only, so tiles share them freely
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, tiles))
        else:
            results = [render_tile(tile) for tile in tiles]

        for tile, tile_image in results:
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image

        return image

    def _generate_tiles(self, width: int, height: int) -> list[Tuple[int, int, int, int]]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def to_ldr(self, hdr_image: np.ndarray) -> np.ndarray:
        """Convert HDR image to 8-bit LDR with gamma correction.

        Args:
            hdr_image: HDR image array (float64)

        Returns:
            LDR image as uint8 array
        """
        gamma = self.settings.gamma
        corrected = np.power(np.clip(hdr_image, 0, None), 1.0 / gamma)

        ldr = np.clip(corrected * 255, 0, 255).astype(np.uint8)
        return ldr

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (HDR or LDR)
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        if image.dtype == np.float64 or image.dtype == np.float32:
            image = self.to_ldr(image)

        pil_image = PILImage.fromarray(image, 'RGB')
        pil_image.save(filename)


def compose_views(images: Sequence[np.ndarray], columns: int = 2, separator: int = 255) -> np.ndarray:
    """Tile equally sized images into a grid with one-pixel separator lines.

    Args:
        images: Images of identical shape (height, width, 3)
        columns: Number of images per row
        separator: Value used for the separator lines

    Returns:
        The composite image, same dtype as the inputs
    """
    if not images:
        raise ValueError("No images to compose")

    height, width = images[0].shape[:2]
    for image in images:
        if image.shape != images[0].shape:
            raise ValueError(f"Image shapes differ: {image.shape} != {images[0].shape}")

    rows = (len(images) + columns - 1) // columns
    sheet = np.full(
        (rows * height + rows - 1, columns * width + columns - 1, 3),
        separator,
        dtype=images[0].dtype
    )
    # Empty grid cells stay black
    for row in range(rows):
        for col in range(columns):
            y = row * (height + 1)
            x = col * (width + 1)
            sheet[y:y + height, x:x + width] = 0

    for index, image in enumerate(images):
        row, col = divmod(index, columns)
        y = row * (height + 1)
        x = col * (width + 1)
        sheet[y:y + height, x:x + width] = image

    return sheet
