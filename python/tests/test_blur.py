"""Tests for the distance-weighted blur."""

import math

import numpy as np
import pytest

from cutout_shadow.blur import apply_distance_weighted_blur, blur_radius_map, uniform_blur


def reference_blur(buffer, radii):
    """Per-pixel loop over the square neighbourhood, skipping points outside the disc."""
    height, width = buffer.shape[:2]
    out = buffer.copy()
    for cy in range(height):
        for cx in range(width):
            radius = radii[cy, cx]
            if radius < 0.5:
                continue
            reach = math.ceil(radius)
            total = np.zeros(4)
            count = 0
            for dy in range(-reach, reach + 1):
                for dx in range(-reach, reach + 1):
                    x, y = cx + dx, cy + dy
                    if x < 0 or x >= width or y < 0 or y >= height:
                        continue
                    if dx * dx + dy * dy > radius * radius:
                        continue
                    total += buffer[y, x]
                    count += 1
            out[cy, cx] = np.floor(total / count + 0.5)
    return out


class TestRadiusMap:
    def test_lerp_and_clamp(self):
        distances = np.array([[0.0, 50.0, 100.0, 400.0]], dtype=np.float32)
        radii = blur_radius_map(distances, 1.0, 11.0, 100.0)
        assert radii.tolist() == [[1.0, 6.0, 11.0, 11.0]]


class TestDistanceWeightedBlur:
    def test_matches_reference(self):
        rng = np.random.default_rng(5)
        buffer = rng.integers(0, 256, size=(14, 17, 4)).astype(np.uint8)
        distances = (rng.random((14, 17)) * 60).astype(np.float32)

        result = apply_distance_weighted_blur(buffer, distances, 0.2, 4.3, 50.0)
        radii = blur_radius_map(distances, 0.2, 4.3, 50.0)
        assert np.array_equal(result, reference_blur(buffer, radii))

    def test_small_radius_is_identity(self):
        rng = np.random.default_rng(9)
        buffer = rng.integers(0, 256, size=(8, 8, 4)).astype(np.uint8)
        distances = np.zeros((8, 8), dtype=np.float32)
        result = apply_distance_weighted_blur(buffer, distances, 0.4, 0.4, 10.0)
        assert np.array_equal(result, buffer)
        assert result is not buffer

    def test_progress_reaches_one(self):
        buffer = np.zeros((6, 6, 4), dtype=np.uint8)
        distances = np.arange(36, dtype=np.float32).reshape(6, 6)
        seen = []
        apply_distance_weighted_blur(buffer, distances, 1.0, 3.0, 36.0, progress=seen.append)
        assert seen
        assert seen == sorted(seen)
        assert seen[-1] == pytest.approx(1.0)

    def test_input_not_modified(self):
        buffer = np.zeros((5, 5, 4), dtype=np.uint8)
        buffer[2, 2] = 255
        before = buffer.copy()
        apply_distance_weighted_blur(buffer, np.zeros((5, 5), dtype=np.float32), 1.0, 1.0, 10.0)
        assert np.array_equal(buffer, before)


class TestUniformBlur:
    def test_constant_image_unchanged(self):
        buffer = np.full((7, 9, 4), 77, dtype=np.uint8)
        assert np.array_equal(uniform_blur(buffer, 3.0), buffer)

    def test_circular_support(self):
        """Radius 1 covers the centre and its 4 neighbours, not the diagonals."""
        buffer = np.zeros((5, 5, 4), dtype=np.uint8)
        buffer[2, 2, 3] = 255
        alpha = uniform_blur(buffer, 1.0)[:, :, 3]

        assert alpha[2, 2] == 51
        assert alpha[2, 1] == 51
        assert alpha[1, 2] == 51
        assert alpha[1, 1] == 0
        assert alpha[0, 0] == 0

    def test_out_of_bounds_excluded(self):
        buffer = np.zeros((3, 3, 4), dtype=np.uint8)
        buffer[0, 0, 3] = 100
        alpha = uniform_blur(buffer, 1.0)[:, :, 3]
        # (0, 0) averages itself and two in-bounds neighbours
        assert alpha[0, 0] == 33
        assert alpha[0, 1] == 25

    def test_wide_saturated_rows(self):
        buffer = np.full((3, 20000, 4), 255, dtype=np.uint8)
        buffer[1, 10000] = 0
        out = uniform_blur(buffer, 2.0)

        assert out[0, 0].tolist() == [255] * 4
        assert out[2, 19999].tolist() == [255] * 4
        # rows 0-2 only: 3 + 5 + 3 samples, one of them 0, 10 * 255 / 11 = 231.8
        assert out[1, 10000].tolist() == [232] * 4
