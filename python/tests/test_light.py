"""Tests for the light model."""

import math

import pytest

from cutout_shadow.light import (
    calculate_light_vector,
    get_shadow_length_multiplier,
    get_suggested_shadow_params,
)


class TestLightVector:
    def test_horizontal_light_along_x(self):
        v = calculate_light_vector(0, 0)
        assert v.dx == pytest.approx(1.0)
        assert v.dy == pytest.approx(0.0)
        assert v.dz == pytest.approx(0.0)

    def test_ninety_degrees_points_down_screen(self):
        v = calculate_light_vector(90, 0)
        assert v.dx == pytest.approx(0.0, abs=1e-12)
        assert v.dy == pytest.approx(1.0)

    def test_elevation_scales_horizontal_part(self):
        v = calculate_light_vector(180, 60)
        assert v.dx == pytest.approx(-0.5)
        assert v.dz == pytest.approx(math.sqrt(3) / 2)

    def test_unit_length(self):
        for angle, elevation in [(0, 0), (45, 30), (135, 45), (270, 80), (359, 90)]:
            v = calculate_light_vector(angle, elevation)
            assert math.hypot(v.dx, v.dy, v.dz) == pytest.approx(1.0)


class TestShadowLength:
    def test_overhead_is_one(self):
        assert get_shadow_length_multiplier(90) == pytest.approx(1.0)

    def test_grazing_light_is_clamped(self):
        assert get_shadow_length_multiplier(0) == pytest.approx(10.0)
        assert get_shadow_length_multiplier(2) == pytest.approx(10.0)

    def test_thirty_degrees_doubles(self):
        assert get_shadow_length_multiplier(30) == pytest.approx(2.0)

    def test_lower_sun_longer_shadow(self):
        values = [get_shadow_length_multiplier(e) for e in (10, 20, 45, 70, 90)]
        assert values == sorted(values, reverse=True)


class TestSuggestedParams:
    def test_low_sun(self):
        params = get_suggested_shadow_params(0)
        assert params["contact_opacity"] == pytest.approx(0.9)
        assert params["falloff_rate"] == pytest.approx(3.0)

    def test_high_sun(self):
        params = get_suggested_shadow_params(90)
        assert params["contact_opacity"] == pytest.approx(0.6)
        assert params["falloff_rate"] == pytest.approx(5.0)
