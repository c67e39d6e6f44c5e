"""
Materials: how light scatters at a hit point.

Implements:
- Lambertian diffuse (cosine-weighted PDF)
- Metal (fuzzy specular reflection)
- Dielectric (glass, water - Schlick-weighted reflection/refraction)
- Diffuse light (emission only)
- Isotropic (phase function for participating media)
- Normal (debug emitter of the shading normal)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union, TYPE_CHECKING
import math

from .vec3 import Vec3, Color
from .ray import Ray
from .pdf import PDF, CosinePDF
from .textures import Texture, as_texture
from .sampling import random_double

if TYPE_CHECKING:
    from .shapes import HitRecord

ColorSource = Union[Color, Texture]


@dataclass
class ScatterResult:
    """Result of a material scatter operation.

    Specular outcomes carry a single continuation ray; diffuse outcomes
    carry the PDF the continuation direction should be drawn from.
    """
    attenuation: Color
    specular_ray: Optional[Ray] = None
    pdf: Optional[PDF] = None

    @property
    def is_specular(self) -> bool:
        return self.specular_ray is not None

    @classmethod
    def specular(cls, ray: Ray, attenuation: Color) -> ScatterResult:
        return cls(attenuation=attenuation, specular_ray=ray)

    @classmethod
    def diffuse(cls, attenuation: Color, pdf: PDF) -> ScatterResult:
        return cls(attenuation=attenuation, pdf=pdf)


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        """Describe how the incoming ray scatters at the hit.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded

        Returns:
            ScatterResult if the ray scatters, None if it is absorbed
        """

    def emitted(self, ray_in: Ray, hit: HitRecord) -> Color:
        """Return emitted radiance. Default is no emission."""
        return Color(0, 0, 0)

    def scattering_pdf(self, ray_in: Ray, hit: HitRecord, scattered: Ray) -> float:
        """Density the material itself assigns to the scattered direction."""
        return 0.0


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: ColorSource):
        """Create a Lambertian material.

        Args:
            albedo: The base color, either a Color or a Texture
        """
        self.albedo = as_texture(albedo)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        return ScatterResult.diffuse(
            attenuation=self.albedo.value(hit.u, hit.v, hit.point),
            pdf=CosinePDF(hit.normal)
        )

    def scattering_pdf(self, ray_in: Ray, hit: HitRecord, scattered: Ray) -> float:
        cosine = hit.normal.dot(scattered.direction.normalize())
        return 0.0 if cosine < 0 else cosine / math.pi


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: ColorSource, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color, either a Color or a Texture
            fuzz: Reflection blur (0 = mirror, 1 = very rough), clamped to [0, 1]
        """
        self.albedo = as_texture(albedo)
        self.fuzz = max(0.0, min(fuzz, 1.0))

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        reflected = ray_in.direction.normalize().reflect(hit.normal)
        if self.fuzz > 0:
            reflected = reflected + Vec3.random_in_unit_sphere() * self.fuzz

        # Fuzz can push the reflection below the surface
        if reflected.dot(hit.normal) <= 0:
            return None

        return ScatterResult.specular(
            Ray(hit.point, reflected, ray_in.time),
            self.albedo.value(hit.u, hit.v, hit.point)
        )


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.ior = ior

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        attenuation = Color(1, 1, 1)
        refraction_ratio = 1.0 / self.ior if hit.front_face else self.ior

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(hit.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or self._reflectance(cos_theta, refraction_ratio) > random_double():
            direction = unit_direction.reflect(hit.normal)
        else:
            direction = unit_direction.refract(hit.normal, refraction_ratio)

        return ScatterResult.specular(Ray(hit.point, direction, ray_in.time), attenuation)

    @staticmethod
    def _reflectance(cosine: float, ref_idx: float) -> float:
        """Schlick's approximation for reflectance."""
        r0 = (1 - ref_idx) / (1 + ref_idx)
        r0 = r0 * r0
        return r0 + (1 - r0) * pow(1 - cosine, 5)


class DiffuseLight(Material):
    """Light-emitting material, visible from the front face only."""

    def __init__(self, emit: ColorSource):
        """Create an emissive material.

        Args:
            emit: The emitted radiance, either a Color or a Texture
        """
        self.emit = as_texture(emit)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        return None

    def emitted(self, ray_in: Ray, hit: HitRecord) -> Color:
        if not hit.front_face:
            return Color(0, 0, 0)
        return self.emit.value(hit.u, hit.v, hit.point)


class Isotropic(Material):
    """Phase function for constant-density media: scatter uniformly in all directions."""

    def __init__(self, albedo: ColorSource):
        self.albedo = as_texture(albedo)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        return ScatterResult.specular(
            Ray(hit.point, Vec3.random_in_unit_sphere(), ray_in.time),
            self.albedo.value(hit.u, hit.v, hit.point)
        )


class NormalMaterial(Material):
    """Debug material that emits the shading normal as a color."""

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterResult]:
        return None

    def emitted(self, ray_in: Ray, hit: HitRecord) -> Color:
        if not hit.front_face:
            return Color(0, 0, 0)
        return (hit.normal + Color(1, 1, 1)) * 0.5
