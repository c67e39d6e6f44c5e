"""Tests for material system."""

import pytest
import math

from lumenpath.vec3 import Vec3, Point3, Color
from lumenpath.ray import Ray
from lumenpath.shapes import HitRecord, Sphere
from lumenpath.pdf import CosinePDF
from lumenpath.textures import CheckerTexture, SolidColor
from lumenpath.materials import (
    ScatterResult, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic, NormalMaterial
)
from lumenpath.sampling import rng_scope


def make_hit(normal=Vec3(0, 1, 0), front_face=True, point=Point3(0, 0, 0)):
    return HitRecord(point=point, normal=normal, t=1.0, front_face=front_face)


class TestScatterResult:
    """Test ScatterResult helpers."""

    def test_specular(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        result = ScatterResult.specular(ray, Color(1, 0, 0))
        assert result.is_specular
        assert result.specular_ray is ray
        assert result.pdf is None

    def test_diffuse(self):
        pdf = CosinePDF(Vec3(0, 1, 0))
        result = ScatterResult.diffuse(Color(0.5, 0.5, 0.5), pdf)
        assert not result.is_specular
        assert result.pdf is pdf


class TestLambertian:
    """Test Lambertian diffuse material."""

    def test_scatter_is_diffuse_with_cosine_pdf(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))
        result = mat.scatter(ray_in, make_hit())

        assert result is not None
        assert not result.is_specular
        assert isinstance(result.pdf, CosinePDF)
        assert result.pdf.uvw.w == Vec3(0, 1, 0)

    def test_attenuation_matches_albedo(self):
        albedo = Color(0.8, 0.2, 0.3)
        result = Lambertian(albedo).scatter(Ray(Point3(0, 2, 0), Vec3(0, -1, 0)), make_hit())
        assert result.attenuation == albedo

    def test_textured_albedo(self):
        checker = CheckerTexture(Color(1, 1, 1), Color(0, 0, 0), frequency=1.0)
        mat = Lambertian(checker)
        hit = make_hit(point=Point3(1, 1, 1))
        result = mat.scatter(Ray(Point3(1, 3, 1), Vec3(0, -1, 0)), hit)
        assert result.attenuation == Color(1, 1, 1)

    def test_scattering_pdf_is_cosine_over_pi(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        hit = make_hit()
        ray_in = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))

        straight_up = Ray(hit.point, Vec3(0, 3, 0))
        assert abs(mat.scattering_pdf(ray_in, hit, straight_up) - 1 / math.pi) < 1e-12

        tilted = Ray(hit.point, Vec3(1, 1, 0))
        expected = math.cos(math.pi / 4) / math.pi
        assert abs(mat.scattering_pdf(ray_in, hit, tilted) - expected) < 1e-12

    def test_scattering_pdf_zero_below_surface(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        hit = make_hit()
        below = Ray(hit.point, Vec3(0, -1, 0))
        assert mat.scattering_pdf(Ray(Point3(0, 2, 0), Vec3(0, -1, 0)), hit, below) == 0.0

    def test_no_emission(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        assert mat.emitted(Ray(Point3(0, 2, 0), Vec3(0, -1, 0)), make_hit()) == Color(0, 0, 0)

    def test_rejects_non_color(self):
        with pytest.raises(TypeError):
            Lambertian("red")


class TestMetal:
    """Test Metal material."""

    def test_perfect_reflection(self):
        mat = Metal(Color(0.9, 0.9, 0.9), fuzz=0.0)
        ray_in = Ray(Point3(-1, 1, 0), Vec3(1, -1, 0))
        result = mat.scatter(ray_in, make_hit())

        assert result is not None
        assert result.is_specular
        expected = Vec3(1, 1, 0).normalize()
        assert result.specular_ray.direction == expected
        assert result.specular_ray.origin == Point3(0, 0, 0)
        assert result.attenuation == Color(0.9, 0.9, 0.9)

    def test_fuzz_clamped(self):
        assert Metal(Color(0.5, 0.5, 0.5), fuzz=2.0).fuzz == 1.0
        assert Metal(Color(0.5, 0.5, 0.5), fuzz=-1.0).fuzz == 0.0

    def test_fuzzy_reflection_stays_above_surface(self):
        mat = Metal(Color(0.9, 0.9, 0.9), fuzz=1.0)
        ray_in = Ray(Point3(-1, 1, 0), Vec3(1, -1, 0))
        hit = make_hit()
        with rng_scope(71):
            for _ in range(200):
                result = mat.scatter(ray_in, hit)
                if result is not None:
                    assert result.specular_ray.direction.dot(hit.normal) > 0

    def test_grazing_fuzz_can_absorb(self):
        mat = Metal(Color(0.9, 0.9, 0.9), fuzz=1.0)
        ray_in = Ray(Point3(-1, 0.01, 0), Vec3(1, -0.01, 0))
        with rng_scope(72):
            results = [mat.scatter(ray_in, make_hit()) for _ in range(200)]
        assert any(r is None for r in results)


class TestDielectric:
    """Test Dielectric material."""

    def test_attenuation_is_white(self):
        mat = Dielectric(1.5)
        with rng_scope(73):
            result = mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit())
        assert result.is_specular
        assert result.attenuation == Color(1, 1, 1)

    def test_matched_index_passes_straight_through(self):
        mat = Dielectric(1.0)
        direction = Vec3(0, -1, 0)
        with rng_scope(74):
            for _ in range(50):
                result = mat.scatter(Ray(Point3(0, 1, 0), direction), make_hit())
                assert result.specular_ray.direction == direction

    def test_matched_index_round_trip_through_sphere(self):
        sphere = Sphere(Point3(0, 0, -3), 1.0, Dielectric(1.0))
        direction = Vec3(0.1, 0.05, -1).normalize()
        ray = Ray(Point3(0, 0, 0), direction)

        with rng_scope(79):
            entry = sphere.hit(ray, 0.001, math.inf)
            assert entry.front_face is True
            inside = sphere.material.scatter(ray, entry).specular_ray

            exit_hit = sphere.hit(inside, 0.001, math.inf)
            assert exit_hit is not None
            assert exit_hit.front_face is False
            outside = sphere.material.scatter(inside, exit_hit).specular_ray

        assert inside.direction == direction
        assert outside.direction == direction
        assert outside.origin == exit_hit.point

    def test_total_internal_reflection(self):
        mat = Dielectric(1.5)
        # Leaving the glass at 60 degrees from the normal
        direction = Vec3(math.sin(math.pi / 3), -0.5, 0)
        hit = make_hit(front_face=False)
        with rng_scope(75):
            for _ in range(50):
                result = mat.scatter(Ray(Point3(-1, 1, 0), direction), hit)
                assert result.specular_ray.direction == Vec3(math.sin(math.pi / 3), 0.5, 0)

    def test_refraction_bends_toward_normal(self):
        mat = Dielectric(1.5)
        direction = Vec3(1, -1, 0).normalize()
        refracted = 0
        with rng_scope(76):
            for _ in range(200):
                result = mat.scatter(Ray(Point3(-1, 1, 0), direction), make_hit())
                out = result.specular_ray.direction
                if out.y < 0:
                    refracted += 1
                    # Snell: sin(theta_t) = sin(45) / 1.5
                    assert abs(out.x - math.sin(math.pi / 4) / 1.5) < 1e-9
        assert refracted > 150

    def test_schlick_reflectance(self):
        assert abs(Dielectric._reflectance(1.0, 1.5) - 0.04) < 1e-12
        assert abs(Dielectric._reflectance(0.0, 1.5) - 1.0) < 1e-12


class TestDiffuseLight:
    """Test DiffuseLight material."""

    def test_emits_on_front_face(self):
        light = DiffuseLight(Color(4, 4, 4))
        ray = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        assert light.emitted(ray, make_hit()) == Color(4, 4, 4)

    def test_dark_on_back_face(self):
        light = DiffuseLight(Color(4, 4, 4))
        ray = Ray(Point3(0, -1, 0), Vec3(0, 1, 0))
        assert light.emitted(ray, make_hit(front_face=False)) == Color(0, 0, 0)

    def test_never_scatters(self):
        light = DiffuseLight(SolidColor(Color(1, 1, 1)))
        assert light.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit()) is None


class TestIsotropic:
    """Test Isotropic phase function."""

    def test_scatters_from_hit_point(self):
        mat = Isotropic(Color(0.7, 0.7, 0.7))
        hit = make_hit(point=Point3(1, 2, 3))
        with rng_scope(77):
            for _ in range(50):
                result = mat.scatter(Ray(Point3(0, 0, 0), Vec3(1, 0, 0), 0.25), hit)
                assert result.is_specular
                assert result.specular_ray.origin == Point3(1, 2, 3)
                assert result.specular_ray.direction.length() < 1.0
                assert result.specular_ray.time == 0.25
                assert result.attenuation == Color(0.7, 0.7, 0.7)

    def test_directions_cover_sphere(self):
        mat = Isotropic(Color(1, 1, 1))
        with rng_scope(78):
            ys = [mat.scatter(Ray(Point3(0, 0, 0), Vec3(1, 0, 0)), make_hit()).specular_ray.direction.y
                  for _ in range(200)]
        assert min(ys) < 0 < max(ys)


class TestNormalMaterial:
    """Test NormalMaterial."""

    def test_emits_mapped_normal(self):
        mat = NormalMaterial()
        ray = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))
        assert mat.emitted(ray, make_hit()) == Color(0.5, 1.0, 0.5)
        assert mat.scatter(ray, make_hit()) is None

    def test_back_face_is_black(self):
        mat = NormalMaterial()
        ray = Ray(Point3(0, -2, 0), Vec3(0, 1, 0))
        assert mat.emitted(ray, make_hit(front_face=False)) == Color(0, 0, 0)
