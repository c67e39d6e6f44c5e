"""
Recursive path integrator.

`ray_color` estimates the radiance arriving along a ray. Diffuse bounces
are importance-sampled from an equal mixture of the material's own PDF
and a PDF aimed at the light geometry, which keeps the estimator unbiased
while sending far more paths toward small bright emitters.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import math

from .vec3 import Color
from .ray import Ray
from .shapes import Hittable, HittableList
from .pdf import HittablePDF, MixturePDF

# Offset that keeps a scattered ray from re-hitting its own surface
RAY_EPSILON = 0.001


@dataclass
class Background:
    """Vertical gradient returned for rays that escape the scene."""
    top: Color = field(default_factory=lambda: Color(0.5, 0.7, 1.0))
    bottom: Color = field(default_factory=lambda: Color(1.0, 1.0, 1.0))

    def value(self, ray: Ray) -> Color:
        unit_direction = ray.direction.normalize()
        t = 0.5 * (unit_direction.y + 1.0)
        return self.bottom * (1.0 - t) + self.top * t


def _has_lights(lights: Optional[Hittable]) -> bool:
    if lights is None:
        return False
    if isinstance(lights, HittableList):
        return len(lights) > 0
    return True


def ray_color(
    ray: Ray,
    world: Hittable,
    depth: int,
    background: Background,
    lights: Optional[Hittable] = None
) -> Color:
    """Compute the radiance carried back along a ray.

    Args:
        ray: The ray to trace
        world: Scene geometry
        depth: Remaining bounce budget
        background: Radiance for rays that miss everything
        lights: Geometry to importance-sample (None or empty to disable)

    Returns:
        The estimated radiance for this ray
    """
    if depth <= 0:
        return Color(0, 0, 0)

    hit_record = world.hit(ray, RAY_EPSILON, math.inf)
    if hit_record is None:
        return background.value(ray)

    material = hit_record.material
    if material is None:
        # Unshaded geometry shows its normal
        return (hit_record.normal + Color(1, 1, 1)) * 0.5

    emitted = material.emitted(ray, hit_record)

    scatter_result = material.scatter(ray, hit_record)
    if scatter_result is None:
        return emitted

    if scatter_result.is_specular:
        return emitted + scatter_result.attenuation * ray_color(
            scatter_result.specular_ray, world, depth - 1, background, lights
        )

    if _has_lights(lights):
        pdf = MixturePDF(HittablePDF(lights, hit_record.point), scatter_result.pdf)
    else:
        pdf = scatter_result.pdf

    scattered = Ray(hit_record.point, pdf.generate(), ray.time)
    pdf_value = pdf.value(scattered.direction)
    if not pdf_value > 0:
        return emitted

    scattering_pdf = material.scattering_pdf(ray, hit_record, scattered)
    incoming = ray_color(scattered, world, depth - 1, background, lights)

    return emitted + scatter_result.attenuation * incoming * (scattering_pdf / pdf_value)
