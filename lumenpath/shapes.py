"""
Geometric shapes for the path tracer.

Each shape implements the Hittable contract: a nearest-hit query over an
open parameter interval, a bounding box over a shutter interval, and an
optional solid-angle density used when the shape is sampled as a light.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .aabb import AABB
from .pdf import ONB
from .sampling import random_double, random_int

if TYPE_CHECKING:
    from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: Unit surface normal, always pointing against the ray
        t: The ray parameter at intersection
        front_face: True if the ray hit the geometric outside of the surface
        material: The material at the hit point
        u, v: Texture coordinates at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool = True
    material: Optional[Material] = None
    u: float = 0.0
    v: float = 0.0

    def set_face_normal(self, ray: Ray, outward_normal: Vec3) -> None:
        """Set the normal to always point against the ray direction.

        Args:
            ray: The incoming ray
            outward_normal: The unit geometric normal pointing outward from surface
        """
        self.front_face = ray.direction.dot(outward_normal) < 0
        self.normal = outward_normal if self.front_face else -outward_normal


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Lower bound of the open parameter interval
            t_max: Upper bound of the open parameter interval

        Returns:
            HitRecord for the nearest intersection, None otherwise
        """

    @abstractmethod
    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        """Get a box enclosing this object over the shutter interval.

        Returns:
            AABB if the object is bounded, None otherwise
        """

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Density (per solid angle) of sampling direction from origin toward this object."""
        return 0.0

    def random(self, origin: Point3) -> Vec3:
        """Random direction from origin toward this object."""
        return Vec3(1, 0, 0)


def _hit_sphere(
    ray: Ray,
    center: Point3,
    radius: float,
    t_min: float,
    t_max: float,
    material: Optional[Material]
) -> Optional[HitRecord]:
    """Solve |o + t d - c|^2 = r^2 and keep the nearest root inside (t_min, t_max)."""
    oc = ray.origin - center
    a = ray.direction.length_squared()
    half_b = oc.dot(ray.direction)
    c = oc.length_squared() - radius * radius

    discriminant = half_b * half_b - a * c
    if discriminant <= 0:
        return None

    sqrtd = math.sqrt(discriminant)

    root = (-half_b - sqrtd) / a
    if not t_min < root < t_max:
        root = (-half_b + sqrtd) / a
        if not t_min < root < t_max:
            return None

    point = ray.at(root)
    outward_normal = (point - center) / radius
    u, v = sphere_uv(outward_normal)

    hit_record = HitRecord(point=point, normal=outward_normal, t=root, material=material, u=u, v=v)
    hit_record.set_face_normal(ray, outward_normal)
    return hit_record


def sphere_uv(p: Vec3) -> Tuple[float, float]:
    """Spherical texture coordinates for a point on the unit sphere.

    phi = atan2(z, x) and theta = asin(y), both mapped onto [0, 1].
    """
    phi = math.atan2(p.z, p.x)
    theta = math.asin(max(-1.0, min(1.0, p.y)))

    u = 1.0 - (phi + math.pi) / (2 * math.pi)
    v = (theta + math.pi / 2) / math.pi
    return u, v


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (negative radius flips the normals)
            material: Material for shading
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        return _hit_sphere(ray, self.center, self.radius, t_min, t_max, self.material)

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        r_vec = Vec3.splat(abs(self.radius))
        return AABB(self.center - r_vec, self.center + r_vec)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Uniform density over the cone the sphere subtends from origin."""
        if self.hit(Ray(origin, direction), 0.001, math.inf) is None:
            return 0.0

        distance_squared = (self.center - origin).length_squared()
        radius_squared = self.radius * self.radius
        if distance_squared <= radius_squared:
            return 1.0 / (4 * math.pi)

        cos_theta_max = math.sqrt(1 - radius_squared / distance_squared)
        solid_angle = 2 * math.pi * (1 - cos_theta_max)
        return 1.0 / solid_angle

    def random(self, origin: Point3) -> Vec3:
        direction = self.center - origin
        distance_squared = direction.length_squared()
        if distance_squared <= self.radius * self.radius:
            return Vec3.random_unit_vector()

        uvw = ONB.build_from_w(direction)
        return uvw.local(Vec3.random_to_sphere(self.radius, distance_squared))

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class MovingSphere(Hittable):
    """A sphere that moves linearly between two positions over time.

    Used for motion blur effects.
    """

    def __init__(
        self,
        center0: Point3,
        center1: Point3,
        time0: float,
        time1: float,
        radius: float,
        material: Optional[Material] = None
    ):
        """Create a moving sphere.

        Args:
            center0: Center position at time0
            center1: Center position at time1
            time0: Start time
            time1: End time
            radius: Radius of the sphere
            material: Material for shading
        """
        self.center0 = center0
        self.center1 = center1
        self.time0 = time0
        self.time1 = time1
        self.radius = radius
        self.material = material

    def center(self, time: float) -> Point3:
        """Get the center position at a given time."""
        if self.time1 == self.time0:
            return self.center0
        t = (time - self.time0) / (self.time1 - self.time0)
        return self.center0 + (self.center1 - self.center0) * t

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection at the ray's time."""
        return _hit_sphere(ray, self.center(ray.time), self.radius, t_min, t_max, self.material)

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        """Return AABB that contains the sphere over [time0, time1]."""
        r_vec = Vec3.splat(abs(self.radius))
        c0 = self.center(time0)
        c1 = self.center(time1)
        box0 = AABB(c0 - r_vec, c0 + r_vec)
        box1 = AABB(c1 - r_vec, c1 + r_vec)
        return AABB.surrounding_box(box0, box1)


class HittableList(Hittable):
    """A collection of hittable objects.

    Also used as the light list: sampling picks a member uniformly and the
    density is the average of the members' densities.
    """

    def __init__(self, objects: Optional[List[Hittable]] = None):
        self.objects: List[Hittable] = objects if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Remove all objects."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        """Return the AABB containing all objects, None if any is unbounded."""
        output_box: Optional[AABB] = None

        for obj in self.objects:
            box = obj.bounding_box(time0, time1)
            if box is None:
                return None
            output_box = box if output_box is None else AABB.surrounding_box(output_box, box)

        return output_box

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        if not self.objects:
            return 0.0
        weight = 1.0 / len(self.objects)
        return sum(weight * obj.pdf_value(origin, direction) for obj in self.objects)

    def random(self, origin: Point3) -> Vec3:
        if not self.objects:
            return Vec3(1, 0, 0)
        return self.objects[random_int(0, len(self.objects) - 1)].random(origin)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)


# Free (a, b) axes for each fixed k axis.
_FREE_AXES = {0: (1, 2), 1: (0, 2), 2: (0, 1)}


class Rect(Hittable):
    """An axis-aligned rectangle lying in the plane axis[k] = k.

    The rectangle spans [a0, a1] x [b0, b1] on the two remaining axes,
    in increasing axis order (XY for k_axis=2, XZ for 1, YZ for 0).
    Its outward normal is +k, or -k when `flip` is set.
    """

    def __init__(
        self,
        a0: float,
        a1: float,
        b0: float,
        b1: float,
        k: float,
        material: Optional[Material] = None,
        k_axis: int = 2,
        flip: bool = False
    ):
        if k_axis not in _FREE_AXES:
            raise ValueError(f"Rectangle axis must be 0, 1 or 2, got {k_axis}")

        self.a0, self.a1 = min(a0, a1), max(a0, a1)
        self.b0, self.b1 = min(b0, b1), max(b0, b1)
        self.k = k
        self.material = material
        self.k_axis = k_axis
        self.a_axis, self.b_axis = _FREE_AXES[k_axis]

        normal = [0.0, 0.0, 0.0]
        normal[k_axis] = 1.0
        self.normal = Vec3(*normal)
        self.outward_normal = -self.normal if flip else self.normal

    def _point(self, a: float, b: float) -> Point3:
        coords = [0.0, 0.0, 0.0]
        coords[self.a_axis] = a
        coords[self.b_axis] = b
        coords[self.k_axis] = self.k
        return Point3(*coords)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        d_k = ray.direction[self.k_axis]
        if d_k == 0:
            return None

        t = (self.k - ray.origin[self.k_axis]) / d_k
        if not t_min < t < t_max:
            return None

        a = ray.origin[self.a_axis] + t * ray.direction[self.a_axis]
        b = ray.origin[self.b_axis] + t * ray.direction[self.b_axis]
        if a < self.a0 or a > self.a1 or b < self.b0 or b > self.b1:
            return None

        hit_record = HitRecord(
            point=ray.at(t),
            normal=self.outward_normal,
            t=t,
            material=self.material,
            u=(a - self.a0) / (self.a1 - self.a0),
            v=(b - self.b0) / (self.b1 - self.b0)
        )
        hit_record.set_face_normal(ray, self.outward_normal)
        return hit_record

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        # Pad the flat axis so the box has non-zero width
        low = self._point(self.a0, self.b0) - self.normal * 0.0001
        high = self._point(self.a1, self.b1) + self.normal * 0.0001
        return AABB(low, high)

    def area(self) -> float:
        return (self.a1 - self.a0) * (self.b1 - self.b0)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Area density converted to solid angle: d^2 / (|cos| * area)."""
        hit_record = self.hit(Ray(origin, direction), 0.001, math.inf)
        if hit_record is None:
            return 0.0

        distance_squared = hit_record.t * hit_record.t * direction.length_squared()
        cosine = abs(direction.dot(self.normal)) / direction.length()
        if cosine == 0:
            return 0.0
        return distance_squared / (cosine * self.area())

    def random(self, origin: Point3) -> Vec3:
        target = self._point(random_double(self.a0, self.a1), random_double(self.b0, self.b1))
        return target - origin


class XYRect(Rect):
    """Rectangle in the plane z = k."""

    def __init__(self, x0, x1, y0, y1, k, material: Optional[Material] = None, flip: bool = False):
        super().__init__(x0, x1, y0, y1, k, material, k_axis=2, flip=flip)


class XZRect(Rect):
    """Rectangle in the plane y = k."""

    def __init__(self, x0, x1, z0, z1, k, material: Optional[Material] = None, flip: bool = False):
        super().__init__(x0, x1, z0, z1, k, material, k_axis=1, flip=flip)


class YZRect(Rect):
    """Rectangle in the plane x = k."""

    def __init__(self, y0, y1, z0, z1, k, material: Optional[Material] = None, flip: bool = False):
        super().__init__(y0, y1, z0, z1, k, material, k_axis=0, flip=flip)


class Triangle(Hittable):
    """A triangle defined by three vertices."""

    def __init__(self, v0: Point3, v1: Point3, v2: Point3, material: Optional[Material] = None):
        """Create a triangle from three vertices.

        Args:
            v0, v1, v2: The three vertices in counter-clockwise order
            material: Material for shading
        """
        self.v0 = v0
        self.v1 = v1
        self.v2 = v2
        self.material = material

        # Pre-compute edges and normal
        self.e1 = v1 - v0
        self.e2 = v2 - v0
        self.normal = self.e1.cross(self.e2).normalize()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-triangle intersection using Möller-Trumbore algorithm."""
        h = ray.direction.cross(self.e2)
        a = self.e1.dot(h)

        # Ray is parallel to triangle
        if abs(a) < 1e-8:
            return None

        f = 1.0 / a
        s = ray.origin - self.v0
        u = f * s.dot(h)

        if u < 0.0 or u > 1.0:
            return None

        q = s.cross(self.e1)
        v = f * ray.direction.dot(q)

        if v < 0.0 or u + v > 1.0:
            return None

        t = f * self.e2.dot(q)

        if not t_min < t < t_max:
            return None

        hit_record = HitRecord(point=ray.at(t), normal=self.normal, t=t, material=self.material, u=u, v=v)
        hit_record.set_face_normal(ray, self.normal)
        return hit_record

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        """Return the AABB containing this triangle, padded for flat triangles."""
        pad = Vec3.splat(0.0001)
        low = self.v0.minimum(self.v1).minimum(self.v2)
        high = self.v0.maximum(self.v1).maximum(self.v2)
        return AABB(low - pad, high + pad)


class Box(Hittable):
    """An axis-aligned box built from six rectangles."""

    def __init__(self, p0: Point3, p1: Point3, material: Optional[Material] = None):
        """Create a box from two opposite corners.

        Args:
            p0: One corner of the box
            p1: Opposite corner of the box
            material: Material shared by all six faces
        """
        self.p0 = p0.minimum(p1)
        self.p1 = p0.maximum(p1)
        self.material = material

        lo, hi = self.p0, self.p1
        # Faces on the low corner point toward -axis
        self.sides = HittableList([
            XYRect(lo.x, hi.x, lo.y, hi.y, lo.z, material, flip=True),
            XYRect(lo.x, hi.x, lo.y, hi.y, hi.z, material),
            XZRect(lo.x, hi.x, lo.z, hi.z, lo.y, material, flip=True),
            XZRect(lo.x, hi.x, lo.z, hi.z, hi.y, material),
            YZRect(lo.y, hi.y, lo.z, hi.z, lo.x, material, flip=True),
            YZRect(lo.y, hi.y, lo.z, hi.z, hi.x, material),
        ])

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        return self.sides.hit(ray, t_min, t_max)

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return AABB(self.p0, self.p1)


class Pyramid(Hittable):
    """A four-sided pyramid: a quad base plus four triangular sides."""

    def __init__(
        self,
        top: Point3,
        base0: Point3,
        base1: Point3,
        base2: Point3,
        base3: Point3,
        material: Optional[Material] = None
    ):
        self.top = top
        self.base = [base0, base1, base2, base3]
        self.material = material

        self.sides = HittableList([
            Triangle(base0, base1, base2, material),
            Triangle(base0, base2, base3, material),
            Triangle(top, base0, base1, material),
            Triangle(top, base1, base2, material),
            Triangle(top, base2, base3, material),
            Triangle(top, base3, base0, material),
        ])

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        return self.sides.hit(ray, t_min, t_max)

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return self.sides.bounding_box(time0, time1)


class Cylinder(Hittable):
    """An infinite cylinder around an arbitrary axis through center.

    Infinite in extent, so it has no bounding box and cannot live in a BVH.
    """

    def __init__(
        self,
        center: Point3,
        radius: float,
        material: Optional[Material] = None,
        axis: Optional[Vec3] = None
    ):
        """Create a cylinder.

        Args:
            center: Any point on the cylinder's axis
            radius: Radius of the cylinder
            material: Material for shading
            axis: Axis direction (defaults to +Y)
        """
        self.center = center
        self.radius = radius
        self.material = material
        self.axis = (axis if axis is not None else Vec3(0, 1, 0)).normalize()
        self._frame = ONB.build_from_w(self.axis)

    def _perpendicular(self, v: Vec3) -> Vec3:
        return v - self.axis * v.dot(self.axis)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Quadratic in the plane perpendicular to the axis."""
        d_perp = self._perpendicular(ray.direction)
        oc_perp = self._perpendicular(ray.origin - self.center)

        a = d_perp.length_squared()
        if a < 1e-12:
            # Ray runs parallel to the axis
            return None

        half_b = oc_perp.dot(d_perp)
        c = oc_perp.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)
        root = (-half_b - sqrtd) / a
        if not t_min < root < t_max:
            root = (-half_b + sqrtd) / a
            if not t_min < root < t_max:
                return None

        point = ray.at(root)
        radial = self._perpendicular(point - self.center)
        outward_normal = radial / self.radius

        # Angle around the axis and height along it
        theta = math.atan2(radial.dot(self._frame.v), radial.dot(self._frame.u))
        height = (point - self.center).dot(self.axis)

        hit_record = HitRecord(
            point=point,
            normal=outward_normal,
            t=root,
            material=self.material,
            u=(theta + math.pi) / (2 * math.pi),
            v=height - math.floor(height)
        )
        hit_record.set_face_normal(ray, outward_normal)
        return hit_record

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return None
