"""
LumenPath - A Python Monte Carlo Path Tracer

A physically based renderer with support for:
- Global illumination (recursive path tracing)
- Light importance sampling with mixture PDFs
- Signed distance fields rendered by sphere tracing
- Constant-density participating media
- BVH acceleration
- Multi-threaded, reproducibly seeded tile rendering
"""

__version__ = "0.1.0"
__author__ = "LumenPath Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .aabb import AABB
from .sampling import rng_scope, current_rng, make_rng, random_double, random_int
from .shapes import (
    Hittable, HitRecord, HittableList, Sphere, MovingSphere,
    Rect, XYRect, XZRect, YZRect, Triangle, Box, Pyramid, Cylinder
)
from .transforms import Translate, Rotate, RotateX, RotateY, RotateZ, FlipFace
from .volumes import ConstantMedium
from .sdf import (
    SDF, SDFSphere, SDFBox, SDFPlane, SDFTorus, SDFCylinder,
    SDFMandelbulb, SDFMandelbox, SDFUnion, SDFSubtraction, SDFIntersection,
    SDFRepetition, SDFScale, TracedSDF
)
from .bvh import BVH, BVHNode, build_bvh, UnboundedPrimitiveError
from .textures import Texture, SolidColor, CheckerTexture, ImageTexture, FunctionTexture, as_texture
from .materials import (
    Material, ScatterResult, Lambertian, Metal, Dielectric,
    DiffuseLight, Isotropic, NormalMaterial
)
from .pdf import ONB, PDF, CosinePDF, HittablePDF, MixturePDF
from .integrator import Background, ray_color
from .camera import Camera
from .scene import Scene
from .renderer import Renderer, RenderSettings
