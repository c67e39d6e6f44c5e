"""Tests for texture system."""

import pytest

import numpy as np
from PIL import Image

from lumenpath.vec3 import Point3, Color
from lumenpath.textures import (
    SolidColor, CheckerTexture, FunctionTexture, ImageTexture, as_texture
)


class TestSolidColor:
    """Test SolidColor texture."""

    def test_returns_constant_color(self):
        tex = SolidColor(Color(0.5, 0.3, 0.1))
        assert tex.value(0, 0, Point3(0, 0, 0)) == Color(0.5, 0.3, 0.1)

    def test_ignores_uv(self):
        tex = SolidColor(Color(1, 0, 0))
        c1 = tex.value(0, 0, Point3(0, 0, 0))
        c2 = tex.value(0.5, 0.5, Point3(1, 1, 1))
        c3 = tex.value(1, 1, Point3(-5, 10, 3))
        assert c1 == c2 == c3

    def test_from_rgb(self):
        assert SolidColor.from_rgb(0.1, 0.2, 0.3).value(0, 0, Point3(0, 0, 0)) == Color(0.1, 0.2, 0.3)


class TestCheckerTexture:
    """Test CheckerTexture."""

    def setup_method(self):
        self.even = Color(1, 1, 1)
        self.odd = Color(0, 0, 0)
        self.checker = CheckerTexture(self.even, self.odd, frequency=1.0)

    def test_positive_product_is_even(self):
        assert self.checker.value(0, 0, Point3(1, 1, 1)) == self.even

    def test_negative_product_is_odd(self):
        assert self.checker.value(0, 0, Point3(-1, 1, 1)) == self.odd

    def test_ignores_uv(self):
        p = Point3(0.5, 0.5, -0.5)
        assert self.checker.value(0, 0, p) == self.checker.value(0.9, 0.3, p)

    def test_nested_textures(self):
        inner = CheckerTexture(Color(1, 0, 0), Color(0, 1, 0), frequency=1.0)
        outer = CheckerTexture(inner, Color(0, 0, 1), frequency=1.0)
        assert outer.value(0, 0, Point3(1, 1, 1)) == Color(1, 0, 0)


class TestFunctionTexture:
    """Test FunctionTexture."""

    def test_calls_function(self):
        tex = FunctionTexture(lambda u, v, p: Color(u, v, p.x))
        assert tex.value(0.25, 0.75, Point3(0.5, 0, 0)) == Color(0.25, 0.75, 0.5)


class TestImageTexture:
    """Test ImageTexture."""

    @pytest.fixture
    def image_path(self, tmp_path):
        pixels = np.array([
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ], dtype=np.uint8)
        path = tmp_path / "quad.png"
        Image.fromarray(pixels).save(path)
        return str(path)

    def test_top_of_image_is_high_v(self, image_path):
        tex = ImageTexture(image_path, gamma=1.0)
        assert tex.value(0.1, 0.9, Point3(0, 0, 0)) == Color(1, 0, 0)
        assert tex.value(0.9, 0.9, Point3(0, 0, 0)) == Color(0, 1, 0)
        assert tex.value(0.1, 0.1, Point3(0, 0, 0)) == Color(0, 0, 1)
        assert tex.value(0.9, 0.1, Point3(0, 0, 0)) == Color(1, 1, 1)

    def test_coordinates_are_clamped(self, image_path):
        tex = ImageTexture(image_path, gamma=1.0)
        assert tex.value(-3.0, 5.0, Point3(0, 0, 0)) == Color(1, 0, 0)
        assert tex.value(1.0, 0.0, Point3(0, 0, 0)) == Color(1, 1, 1)

    def test_gamma_linearizes(self, tmp_path):
        path = tmp_path / "grey.png"
        Image.fromarray(np.full((1, 1, 3), 128, dtype=np.uint8)).save(path)
        tex = ImageTexture(str(path), gamma=2.2)
        expected = (128 / 255.0) ** 2.2
        assert abs(tex.value(0.5, 0.5, Point3(0, 0, 0)).x - expected) < 1e-9

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ImageTexture(str(tmp_path / "nope.png"))


class TestAsTexture:
    """Test texture coercion."""

    def test_texture_passes_through(self):
        tex = SolidColor(Color(1, 0, 0))
        assert as_texture(tex) is tex

    def test_color_becomes_solid(self):
        tex = as_texture(Color(0.2, 0.4, 0.6))
        assert isinstance(tex, SolidColor)
        assert tex.value(0, 0, Point3(0, 0, 0)) == Color(0.2, 0.4, 0.6)

    def test_callable_becomes_function_texture(self):
        tex = as_texture(lambda u, v, p: Color(1, 1, 1))
        assert isinstance(tex, FunctionTexture)

    def test_rejects_other_values(self):
        with pytest.raises(TypeError):
            as_texture(0.5)
