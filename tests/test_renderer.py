"""Tests for the tile renderer."""

import os
import pytest
import math

import numpy as np
from PIL import Image

from lumenpath.vec3 import Vec3, Point3, Color
from lumenpath.shapes import Sphere, HittableList
from lumenpath.materials import Lambertian, DiffuseLight
from lumenpath.bvh import BVH
from lumenpath.camera import Camera
from lumenpath.integrator import Background
from lumenpath.scene import Scene
from lumenpath.renderer import Renderer, RenderSettings
from lumenpath.sampling import rng_scope


def small_scene(background=None):
    world = BVH([
        Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.5, 0.5, 0.5))),
        Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.7, 0.3, 0.3))),
    ])
    camera = Camera(Point3(0, 0, 0), Point3(0, 0, -1), vfov=90, aspect_ratio=1.0)
    return Scene(world, camera, background=background or Background())


class TestRenderSettings:
    """Test RenderSettings validation."""

    def test_defaults(self):
        settings = RenderSettings()
        assert settings.width == 800
        assert settings.height == 600
        assert settings.gamma == 2.0
        assert settings.seed is None

    def test_auto_threads(self):
        assert RenderSettings(num_threads=0).num_threads == (os.cpu_count() or 4)
        assert RenderSettings(num_threads=3).num_threads == 3

    @pytest.mark.parametrize("kwargs", [
        {"width": 0},
        {"height": -1},
        {"samples_per_pixel": 0},
        {"max_depth": -1},
        {"tile_size": 0},
        {"gamma": 0.0},
        {"num_threads": -2},
    ])
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            RenderSettings(**kwargs)


class TestEstimatePixel:
    """Test per-pixel estimation."""

    def test_uniform_background(self):
        white = Background(top=Color(1, 1, 1), bottom=Color(1, 1, 1))
        scene = Scene(HittableList(), Camera(Point3(0, 0, 0), Point3(0, 0, -1)), background=white)
        renderer = Renderer(RenderSettings(width=4, height=4, samples_per_pixel=8))
        with rng_scope(111):
            assert renderer.estimate_pixel(scene, 0, 0) == Color(1, 1, 1)

    def test_zero_depth_is_black(self):
        renderer = Renderer(RenderSettings(width=4, height=4, samples_per_pixel=4, max_depth=0))
        with rng_scope(112):
            assert renderer.estimate_pixel(small_scene(), 2, 2) == Color(0, 0, 0)

    def test_row_zero_is_top(self):
        # Sky gradient is bluer toward the top of the image
        scene = Scene(HittableList(), Camera(Point3(0, 0, 0), Point3(0, 0, -1), aspect_ratio=1.0))
        renderer = Renderer(RenderSettings(width=8, height=8, samples_per_pixel=4))
        with rng_scope(113):
            top = renderer.estimate_pixel(scene, 4, 0)
            bottom = renderer.estimate_pixel(scene, 4, 7)
        assert top.x < bottom.x

    def test_nan_samples_are_zeroed(self):
        class NaNLight(DiffuseLight):
            def emitted(self, ray_in, hit):
                return Color(float("nan"), 1.0, 0.5)

        world = HittableList([Sphere(Point3(0, 0, -3), 100.0, NaNLight(Color(1, 1, 1)))])
        scene = Scene(world, Camera(Point3(0, 0, -3), Point3(0, 0, -4)))
        renderer = Renderer(RenderSettings(width=2, height=2, samples_per_pixel=2))
        with rng_scope(114):
            color = renderer.estimate_pixel(scene, 0, 0)
        assert color.x == 0.0
        assert not math.isnan(color.y)


class TestRender:
    """Test full image rendering."""

    def test_image_shape(self):
        renderer = Renderer(RenderSettings(width=6, height=4, samples_per_pixel=1, max_depth=3, tile_size=4,
                                           num_threads=1, seed=1))
        image = renderer.render(small_scene())
        assert image.shape == (4, 6, 3)
        assert image.dtype == np.float64
        assert np.all(image >= 0)

    def test_same_seed_same_image(self):
        settings = dict(width=6, height=6, samples_per_pixel=2, max_depth=4, tile_size=3, seed=7)
        a = Renderer(RenderSettings(num_threads=1, **settings)).render(small_scene())
        b = Renderer(RenderSettings(num_threads=1, **settings)).render(small_scene())
        assert np.array_equal(a, b)

    def test_seed_independent_of_thread_count(self):
        settings = dict(width=6, height=6, samples_per_pixel=2, max_depth=4, tile_size=3, seed=8)
        serial = Renderer(RenderSettings(num_threads=1, **settings)).render(small_scene())
        threaded = Renderer(RenderSettings(num_threads=4, **settings)).render(small_scene())
        assert np.array_equal(serial, threaded)

    def test_different_seeds_differ(self):
        settings = dict(width=6, height=6, samples_per_pixel=2, max_depth=4, tile_size=3, num_threads=1)
        a = Renderer(RenderSettings(seed=1, **settings)).render(small_scene())
        b = Renderer(RenderSettings(seed=2, **settings)).render(small_scene())
        assert not np.array_equal(a, b)

    def test_progress_reaches_one(self):
        renderer = Renderer(RenderSettings(width=5, height=5, samples_per_pixel=1, max_depth=2, tile_size=2,
                                           num_threads=2, seed=3))
        reports = []
        renderer.set_progress_callback(reports.append)
        renderer.render(small_scene())

        assert len(reports) == 9
        assert reports == sorted(reports)
        assert reports[-1] == 1.0

    def test_tiles_cover_image(self):
        renderer = Renderer(RenderSettings(tile_size=4))
        tiles = renderer._generate_tiles(10, 6)
        covered = np.zeros((6, 10), dtype=int)
        for x0, y0, x1, y1 in tiles:
            covered[y0:y1, x0:x1] += 1
        assert np.all(covered == 1)
        assert tiles[0] == (0, 0, 4, 4)


class TestOutput:
    """Test tone mapping and file output."""

    def test_to_ldr(self):
        renderer = Renderer(RenderSettings(gamma=2.0))
        hdr = np.array([[[0.0, 0.25, 1.0], [4.0, -1.0, float("nan")]]])
        ldr = renderer.to_ldr(hdr)

        assert ldr.dtype == np.uint8
        assert list(ldr[0, 0]) == [0, 127, 255]
        assert list(ldr[0, 1]) == [255, 0, 0]

    def test_gamma_one_is_linear(self):
        renderer = Renderer(RenderSettings(gamma=1.0))
        ldr = renderer.to_ldr(np.array([[[0.5, 0.5, 0.5]]]))
        assert list(ldr[0, 0]) == [127, 127, 127]

    def test_save_image(self, tmp_path):
        renderer = Renderer(RenderSettings(gamma=2.0))
        hdr = np.full((3, 5, 3), 0.25)
        path = tmp_path / "out.png"
        renderer.save_image(hdr, str(path))

        with Image.open(path) as img:
            assert img.size == (5, 3)
            assert img.mode == "RGB"
            assert img.getpixel((0, 0)) == (127, 127, 127)
