"""Tests for HSB conversion and symbol mapping."""

import numpy as np
import pytest

from glyphwave.colorgrade import brightness_to_symbols, hsb_to_rgb


class TestHsbToRgb:
    @pytest.mark.parametrize("hue, expected", [
        (0.0, (255, 0, 0)),
        (120.0, (0, 255, 0)),
        (240.0, (0, 0, 255)),
        (360.0, (255, 0, 0)),
    ])
    def test_primaries(self, hue, expected):
        rgb = hsb_to_rgb(np.array([hue]), np.array([255.0]), np.array([255.0]))
        assert tuple(rgb[0]) == expected

    def test_zero_saturation_is_grey(self):
        rgb = hsb_to_rgb(np.array([50.0]), np.array([0.0]), np.array([128.0]))
        assert tuple(rgb[0]) == (128, 128, 128)

    def test_zero_brightness_is_black(self):
        rgb = hsb_to_rgb(np.full(5, 200.0), np.full(5, 255.0), np.zeros(5))
        assert np.all(rgb == 0)

    def test_output_shape(self):
        grid = np.random.rand(3, 4).astype(np.float32)
        rgb = hsb_to_rgb(grid * 360, grid * 255, grid * 255)
        assert rgb.shape == (3, 4, 3)
        assert rgb.dtype == np.uint8

    def test_broadcasts_scalars(self):
        bri = np.full((2, 5), 255.0)
        rgb = hsb_to_rgb(0.0, 0.0, bri)
        assert rgb.shape == (2, 5, 3)
        assert np.all(rgb == 255)

    def test_out_of_range_clipped(self):
        rgb = hsb_to_rgb(np.array([0.0]), np.array([400.0]), np.array([999.0]))
        assert tuple(rgb[0]) == (255, 0, 0)


class TestBrightnessToSymbols:
    def test_rows_and_columns(self):
        lines = brightness_to_symbols(np.zeros((3, 7)))
        assert len(lines) == 3
        assert all(len(line) == 7 for line in lines)

    def test_extremes(self):
        lines = brightness_to_symbols(np.array([[0.0, 255.0]]))
        assert lines == [" @"]

    def test_custom_ramp(self):
        lines = brightness_to_symbols(np.array([[100.0, 200.0]]), ramp="ab")
        assert lines == ["ab"]

    def test_monotonic(self):
        ramp = " .:-=+*#%@"
        row = brightness_to_symbols(np.linspace(0, 255, 40)[None, :], ramp)[0]
        positions = [ramp.index(c) for c in row]
        assert positions == sorted(positions)
