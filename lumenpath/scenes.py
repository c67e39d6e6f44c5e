"""
Demo scenes.

Each builder returns a ready-to-render Scene with its geometry in a BVH.
Light lists hold material-less copies of the emitters for importance sampling.
"""

from __future__ import annotations
from typing import Callable, Dict

from .vec3 import Vec3, Point3, Color
from .shapes import Sphere, MovingSphere, HittableList, XYRect, XZRect, YZRect, Box
from .transforms import Translate, RotateY, FlipFace
from .volumes import ConstantMedium
from .materials import Lambertian, Metal, Dielectric, DiffuseLight
from .textures import CheckerTexture
from .sdf import SDFSphere, SDFBox, SDFTorus, SDFCylinder, SDFMandelbulb, SDFMandelbox, SDFScale, TracedSDF
from .bvh import BVH
from .camera import Camera
from .integrator import Background
from .scene import Scene
from .sampling import rng_scope, random_double

BLACK = Background(Color(0, 0, 0), Color(0, 0, 0))


def _cornell_room(world: HittableList) -> None:
    red = Lambertian(Color(0.65, 0.05, 0.05))
    white = Lambertian(Color(0.73, 0.73, 0.73))
    green = Lambertian(Color(0.12, 0.45, 0.15))

    world.add(YZRect(0, 555, 0, 555, 555, green))
    world.add(YZRect(0, 555, 0, 555, 0, red))
    world.add(XZRect(0, 555, 0, 555, 0, white))
    world.add(XZRect(0, 555, 0, 555, 555, white))
    world.add(XYRect(0, 555, 0, 555, 555, white))


def _cornell_camera(aspect_ratio: float) -> Camera:
    return Camera(
        look_from=Point3(278, 278, -800),
        look_at=Point3(278, 278, 0),
        vfov=40,
        aspect_ratio=aspect_ratio
    )


def cornell_box(aspect_ratio: float = 1.0, glass_sphere: bool = False) -> Scene:
    """The Cornell box with two rotated blocks.

    Args:
        aspect_ratio: Image width / height
        glass_sphere: Replace the short block with a glass sphere
    """
    world = HittableList()
    _cornell_room(world)
    white = Lambertian(Color(0.73, 0.73, 0.73))

    light = DiffuseLight(Color(15, 15, 15))
    world.add(FlipFace(XZRect(213, 343, 227, 332, 554, light)))

    tall = Box(Point3(0, 0, 0), Point3(165, 330, 165), white)
    world.add(Translate(RotateY(tall, 15), Vec3(265, 0, 295)))

    lights = HittableList([XZRect(213, 343, 227, 332, 554)])

    if glass_sphere:
        world.add(Sphere(Point3(190, 90, 190), 90, Dielectric(1.5)))
        lights.add(Sphere(Point3(190, 90, 190), 90))
    else:
        short = Box(Point3(0, 0, 0), Point3(165, 165, 165), white)
        world.add(Translate(RotateY(short, -18), Vec3(130, 0, 65)))

    return Scene(BVH(world.objects), _cornell_camera(aspect_ratio), lights, BLACK)


def cornell_smoke(aspect_ratio: float = 1.0) -> Scene:
    """The Cornell box with its blocks replaced by smoke."""
    world = HittableList()
    _cornell_room(world)
    white = Lambertian(Color(0.73, 0.73, 0.73))

    light = DiffuseLight(Color(7, 7, 7))
    world.add(FlipFace(XZRect(113, 443, 127, 432, 554, light)))

    tall = Translate(RotateY(Box(Point3(0, 0, 0), Point3(165, 330, 165), white), 15), Vec3(265, 0, 295))
    short = Translate(RotateY(Box(Point3(0, 0, 0), Point3(165, 165, 165), white), -18), Vec3(130, 0, 65))

    world.add(ConstantMedium(tall, 0.01, Color(0, 0, 0)))
    world.add(ConstantMedium(short, 0.01, Color(1, 1, 1)))

    lights = HittableList([XZRect(113, 443, 127, 432, 554)])
    return Scene(BVH(world.objects), _cornell_camera(aspect_ratio), lights, BLACK)


def sdf_showcase(aspect_ratio: float = 16.0 / 9.0) -> Scene:
    """Constructive solids built from distance fields on a checkered floor."""
    bounded = HittableList()

    checker = CheckerTexture(Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9))
    bounded.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(checker)))

    # Rounded die: a cube clipped by a sphere
    die = SDFBox.cube(Point3(-2.5, 1, 0), 0.8) & SDFSphere(Point3(-2.5, 1, 0), 1.1)
    bounded.add(TracedSDF(die, Metal(Color(0.8, 0.8, 0.9), 0.05)))

    bounded.add(TracedSDF(SDFTorus(Point3(0, 0.35, 1.5), 0.8, 0.3), Lambertian(Color(0.8, 0.2, 0.1))))

    # Sphere with a hole bored through it
    bored = SDFSphere(Point3(2.5, 1, 0), 1.0) - SDFCylinder(Point3(2.5, 1, 0), 0.45)
    bounded.add(TracedSDF(bored, Dielectric(1.5)))

    box = SDFScale(SDFMandelbox(scale=2.0), 0.1)
    bounded.add(Translate(TracedSDF(box, Lambertian(Color(0.2, 0.4, 0.8))), Vec3(0, 0.6, -2.5)))

    light = Sphere(Point3(0, 7, 0), 1.5, DiffuseLight(Color(4, 4, 4)))
    bounded.add(light)

    camera = Camera(
        look_from=Point3(0, 3, 9),
        look_at=Point3(0, 1, 0),
        vfov=35,
        aspect_ratio=aspect_ratio
    )

    lights = HittableList([Sphere(Point3(0, 7, 0), 1.5)])
    return Scene(BVH(bounded.objects), camera, lights, Background())


def mandelbulb(aspect_ratio: float = 3.0 / 2.0) -> Scene:
    """A power-8 Mandelbulb lit by a ceiling panel."""
    world = HittableList()
    world.add(TracedSDF(SDFMandelbulb(), Lambertian(Color(0.8, 0.1, 0.1))))
    world.add(FlipFace(XZRect(-1, 1, -1, 1, 5, DiffuseLight(Color(7, 7, 7)))))

    camera = Camera(
        look_from=Point3(13, 9, 13) * 0.25,
        look_at=Point3(0, 0, 0),
        vfov=40,
        aspect_ratio=aspect_ratio
    )

    lights = HittableList([XZRect(-1, 1, -1, 1, 5)])
    background = Background(Color(0.02, 0.02, 0.05), Color(0.1, 0.1, 0.2))
    return Scene(BVH(world.objects), camera, lights, background)


def bouncing_spheres(aspect_ratio: float = 16.0 / 9.0, seed: int = 0) -> Scene:
    """Field of small random spheres, diffuse ones bouncing during the shutter.

    Args:
        aspect_ratio: Image width / height
        seed: Seed for the sphere layout
    """
    world = HittableList()

    checker = CheckerTexture(Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9))
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(checker)))

    with rng_scope(seed):
        for a in range(-11, 11):
            for b in range(-11, 11):
                choose_mat = random_double()
                center = Point3(a + 0.9 * random_double(), 0.2, b + 0.9 * random_double())

                if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                    continue

                if choose_mat < 0.8:
                    albedo = Color.random() * Color.random()
                    center2 = center + Vec3(0, random_double(0, 0.5), 0)
                    world.add(MovingSphere(center, center2, 0.0, 1.0, 0.2, Lambertian(albedo)))
                elif choose_mat < 0.95:
                    albedo = Color.random(0.5, 1)
                    fuzz = random_double(0, 0.5)
                    world.add(Sphere(center, 0.2, Metal(albedo, fuzz)))
                else:
                    world.add(Sphere(center, 0.2, Dielectric(1.5)))

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    camera = Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
        time0=0.0,
        time1=1.0
    )

    return Scene(BVH(world.objects, 0.0, 1.0), camera, None, Background())


SCENES: Dict[str, Callable[..., Scene]] = {
    'cornell': cornell_box,
    'smoke': cornell_smoke,
    'sdf': sdf_showcase,
    'mandelbulb': mandelbulb,
    'spheres': bouncing_spheres,
}
