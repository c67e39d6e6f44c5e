"""Scene description consumed by the renderer."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .camera import Camera
from .shapes import Hittable
from .integrator import Background


@dataclass
class Scene:
    """Everything needed to render one image.

    Attributes:
        world: Root of the scene geometry, usually a BVH
        camera: Camera producing primary rays
        lights: Geometry to importance-sample, or None
        background: Radiance for escaping rays
    """
    world: Hittable
    camera: Camera
    lights: Optional[Hittable] = None
    background: Background = field(default_factory=Background)
