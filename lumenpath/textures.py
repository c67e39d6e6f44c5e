"""
Texture system for the path tracer.

A texture is a pure function from (u, v, point) to a color. Materials
accept either a plain Color or a Texture wherever they need an albedo or
an emission value.

Implements:
- Solid color textures
- Sine checker textures
- Image textures (from files)
- Wrapped plain callables
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union
import math

import numpy as np
from PIL import Image

from .vec3 import Vec3, Color, Point3


class Texture(ABC):
    """Abstract base class for textures."""

    @abstractmethod
    def value(self, u: float, v: float, point: Point3) -> Color:
        """Get the texture color at the given UV coordinates.

        Args:
            u: Horizontal texture coordinate [0, 1]
            v: Vertical texture coordinate [0, 1]
            point: 3D point in world space (for procedural textures)

        Returns:
            Color at this location
        """


class SolidColor(Texture):
    """A solid color texture."""

    def __init__(self, color: Color):
        self.color = color

    @classmethod
    def from_rgb(cls, r: float, g: float, b: float) -> SolidColor:
        return cls(Color(r, g, b))

    def value(self, u: float, v: float, point: Point3) -> Color:
        return self.color


class CheckerTexture(Texture):
    """3D checker pattern from the sign of a product of sines."""

    def __init__(self, even: Union[Texture, Color], odd: Union[Texture, Color], frequency: float = 10.0):
        self.even = as_texture(even)
        self.odd = as_texture(odd)
        self.frequency = frequency

    def value(self, u: float, v: float, point: Point3) -> Color:
        f = self.frequency
        sines = math.sin(f * point.x) * math.sin(f * point.y) * math.sin(f * point.z)
        if sines < 0:
            return self.odd.value(u, v, point)
        return self.even.value(u, v, point)


class FunctionTexture(Texture):
    """Wraps a plain (u, v, point) -> Color callable."""

    def __init__(self, func: Callable[[float, float, Point3], Color]):
        self.func = func

    def value(self, u: float, v: float, point: Point3) -> Color:
        return self.func(u, v, point)


class ImageTexture(Texture):
    """A texture loaded from an image file."""

    def __init__(self, filename: str, gamma: float = 2.2):
        """Load a texture from an image file.

        Args:
            filename: Path to the image file
            gamma: Gamma value for converting sRGB to linear (2.2 for sRGB images)
        """
        self.filename = filename
        self.gamma = gamma
        self._data: Optional[np.ndarray] = None
        self._width = 0
        self._height = 0
        self._load_image()

    def _load_image(self) -> None:
        """Load and convert the image to linear color space."""
        path = Path(self.filename)
        if not path.exists():
            raise FileNotFoundError(f"Texture file not found: {self.filename}")

        with Image.open(path) as img:
            rgb = img.convert('RGB')
            self._data = np.array(rgb, dtype=np.float64) / 255.0

        if self.gamma != 1.0:
            self._data = np.power(self._data, self.gamma)

        self._height, self._width = self._data.shape[:2]

    def value(self, u: float, v: float, point: Point3) -> Color:
        u = max(0.0, min(1.0, u))
        # Image row 0 is the top
        v = 1.0 - max(0.0, min(1.0, v))

        i = min(int(u * self._width), self._width - 1)
        j = min(int(v * self._height), self._height - 1)

        return Color.from_array(self._data[j, i].copy())


def as_texture(value: Union[Texture, Color, Callable[[float, float, Point3], Color]]) -> Texture:
    """Coerce a Color or a plain callable into a Texture."""
    if isinstance(value, Texture):
        return value
    if isinstance(value, Vec3):
        return SolidColor(value)
    if callable(value):
        return FunctionTexture(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a texture")
