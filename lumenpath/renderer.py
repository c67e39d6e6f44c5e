"""
Renderer module - turns a Scene into an image.

Implements:
- Monte Carlo pixel estimates (jittered samples averaged per pixel)
- Multi-threaded tile-based rendering
- Reproducible seeding with one independent generator per tile
- 8-bit output with gamma correction
"""

from __future__ import annotations
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np
from PIL import Image as PILImage

from .vec3 import Color
from .integrator import ray_color
from .scene import Scene
from .sampling import rng_scope, random_double

Tile = Tuple[int, int, int, int]


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 100
    max_depth: int = 50
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect
    gamma: float = 2.0
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must not be negative, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: Optional[RenderSettings] = None):
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

    def estimate_pixel(self, scene: Scene, i: int, j: int) -> Color:
        """Average of independent path samples through one pixel.

        Draws from the generator installed for the current context.

        Args:
            scene: The scene to render
            i: Pixel column (0 = left)
            j: Pixel row (0 = top)

        Returns:
            Mean radiance with NaN components replaced by zero
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel

        total = np.zeros(3, dtype=np.float64)
        for _ in range(samples):
            u = (i + random_double()) / width
            v = (height - 1 - j + random_double()) / height

            ray = scene.camera.get_ray(u, v)
            color = ray_color(ray, scene.world, self.settings.max_depth, scene.background, scene.lights)
            total += color.to_array()

        mean = total / samples
        return Color.from_array(np.where(np.isnan(mean), 0.0, mean))

    def render(self, scene: Scene) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Args:
            scene: The scene to render

        Returns:
            HDR image as numpy array of shape (height, width, 3)
        """
        width = self.settings.width
        height = self.settings.height

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        seeds = np.random.SeedSequence(self.settings.seed).spawn(len(tiles))
        total_tiles = len(tiles)
        completed_tiles = [0]
        progress_lock = threading.Lock()

        def render_tile(tile: Tile, seed: np.random.SeedSequence) -> Tuple[Tile, np.ndarray]:
            x0, y0, x1, y1 = tile
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            with rng_scope(seed):
                for j in range(y0, y1):
                    for i in range(x0, x1):
                        tile_image[j - y0, i - x0] = self.estimate_pixel(scene, i, j).to_array()

            with progress_lock:
                completed_tiles[0] += 1
                if self._progress_callback:
                    self._progress_callback(completed_tiles[0] / total_tiles)

            return tile, tile_image

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, tiles, seeds))
        else:
            results = [render_tile(tile, seed) for tile, seed in zip(tiles, seeds)]

        for tile, tile_image in results:
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image

        return image

    def _generate_tiles(self, width: int, height: int) -> List[Tile]:
        """Split the image into (x0, y0, x1, y1) tiles in row-major order."""
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
        clean = np.nan_to_num(hdr_image, nan=0.0, posinf=1.0, neginf=0.0)
        corrected = np.power(np.clip(clean, 0, 1), 1.0 / gamma)

        return (corrected * 255.999).astype(np.uint8)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (HDR float or 8-bit)
            filename: Output filename (extension determines format)
        """
        if image.dtype == np.float64 or image.dtype == np.float32:
            image = self.to_ldr(image)

        pil_image = PILImage.fromarray(image)
        pil_image.save(filename)
