"""Tests for per-cell glyph motion."""

import math

import numpy as np
import pytest

from glyphwave.core.motion import CellMotion, CircularMotion, NoiseMotion
from glyphwave.core.perlin import PerlinNoise


class TestCircularMotion:
    def test_offset_on_circle(self):
        motion = CircularMotion(radius=6.0)
        for frame in (0, 7, 33):
            dx, dy = motion.offset(2, 3, frame)
            assert math.hypot(dx, dy) == pytest.approx(6.0)

    def test_origin_cell_starts_on_x_axis(self):
        dx, dy = CircularMotion(radius=5.0).offset(0, 0, 0)
        assert dx == pytest.approx(5.0)
        assert dy == pytest.approx(0.0)

    def test_direction(self):
        cw = CircularMotion(radius=5.0, clockwise=True)
        ccw = CircularMotion(radius=5.0, clockwise=False)
        x1, y1 = cw.offset(0, 0, 10)
        x2, y2 = ccw.offset(0, 0, 10)
        assert x1 == pytest.approx(x2)
        assert y1 == pytest.approx(-y2)

    def test_neighbours_out_of_step(self):
        motion = CircularMotion()
        assert motion.offset(0, 0, 5) != pytest.approx(motion.offset(1, 0, 5))

    def test_negative_radius_clamped(self):
        motion = CircularMotion(radius=-3.0)
        assert motion.radius == 0.0
        assert np.all(motion.offsets(3, 2, 10) == 0)

    def test_grid_shape(self):
        offsets = CircularMotion().offsets(5, 3, 12)
        assert offsets.shape == (3, 5, 2)
        assert offsets.dtype == np.float32

    def test_grid_matches_offset(self):
        motion = CircularMotion(radius=4.0)
        offsets = motion.offsets(5, 3, 12)
        dx, dy = motion.offset(4, 2, 12)
        assert offsets[2, 4, 0] == pytest.approx(dx, rel=1e-5)
        assert offsets[2, 4, 1] == pytest.approx(dy, rel=1e-5)


class TestNoiseMotion:
    def test_within_radius(self):
        motion = NoiseMotion(radius=10.0)
        offsets = motion.offsets(6, 6, 40)
        assert np.all(np.abs(offsets) <= 10.0 + 1e-4)

    def test_deterministic(self):
        a = NoiseMotion(source=PerlinNoise(seed=3, octaves=1))
        b = NoiseMotion(source=PerlinNoise(seed=3, octaves=1))
        np.testing.assert_array_equal(a.offsets(4, 4, 17), b.offsets(4, 4, 17))

    def test_cells_follow_different_paths(self):
        offsets = NoiseMotion().offsets(4, 4, 25)
        flat = offsets.reshape(-1, 2)
        assert not np.allclose(flat, flat[0])

    def test_moves_over_time(self):
        motion = NoiseMotion(noise_scale=0.05)
        assert motion.offset(1, 1, 0) != pytest.approx(motion.offset(1, 1, 10))

    def test_noise_scale_floor(self):
        assert NoiseMotion(noise_scale=0.0).noise_scale == 0.001

    def test_zero_radius_is_still(self):
        motion = NoiseMotion(radius=0.0)
        assert np.all(motion.offsets(3, 3, 50) == 0)


def test_base_class_is_abstract():
    with pytest.raises(TypeError):
        CellMotion()
