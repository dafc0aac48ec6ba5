"""Tests for the frame driver."""

import numpy as np
import pytest

from glyphwave.config import TrailConfig, WaveConfig
from glyphwave.core import strategies
from glyphwave.core.engine import WaveFieldEngine
from glyphwave.core.motion import CircularMotion
from glyphwave.pipeline import FieldAnimator, FieldFrame


@pytest.fixture
def small_config() -> WaveConfig:
    """5x3 grid, 6 frames of animation, full hue sweep."""
    cfg = WaveConfig(tiles_x=5, tiles_y=3, animation_fps=2, animation_duration=3)
    return cfg.set_hue_range(0, 360).set_saturation_range(100, 255)


class TestRenderFrame:
    def test_returns_field_frame(self, small_config):
        frame = FieldAnimator(small_config).render_frame(4)
        assert isinstance(frame, FieldFrame)
        assert frame.frame_index == 4
        assert frame.hue.shape == (3, 5)
        assert frame.saturation.shape == (3, 5)
        assert frame.brightness.shape == (3, 5)
        assert frame.offsets is None

    def test_without_trail_matches_engine(self, small_config):
        frame = FieldAnimator(small_config).render_frame(7)
        hue, sat, bri = WaveFieldEngine(small_config).sample_grid(7, 5, 3)
        np.testing.assert_allclose(frame.hue, hue)
        np.testing.assert_allclose(frame.saturation, sat)
        np.testing.assert_allclose(frame.brightness, bri)

    def test_single_slot_trail_matches_plain(self, small_config):
        plain = FieldAnimator(small_config).render_frame(12)
        trailed = FieldAnimator(small_config, TrailConfig(max_length=1, fade_decay=1.0)).render_frame(12)
        np.testing.assert_allclose(trailed.hue, plain.hue, rtol=1e-5)
        np.testing.assert_allclose(trailed.saturation, plain.saturation, rtol=1e-5)
        np.testing.assert_allclose(trailed.brightness, plain.brightness, rtol=1e-5)

    def test_trail_accumulates_brightness(self, small_config):
        plain = FieldAnimator(small_config)
        trailed = FieldAnimator(small_config, TrailConfig(max_length=4, fade_decay=1.0))
        for i in range(4):
            a = plain.render_frame(i)
            b = trailed.render_frame(i)
        assert trailed.trail.filled_frames == 4
        assert np.all(b.brightness >= a.brightness - 1e-3)

    def test_strategy(self, small_config):
        animator = FieldAnimator(small_config, strategy=strategies.square())
        frame = animator.render_frame(3)
        assert np.all(np.isin(frame.brightness, [50.0, 255.0]))

    def test_bare_function_strategy(self, small_config):
        animator = FieldAnimator(small_config, strategy=lambda f, x, y, t, c: 99.0)
        assert np.all(animator.render_frame(0).brightness == 99.0)

    def test_motion_offsets(self, small_config):
        frame = FieldAnimator(small_config, motion=CircularMotion(radius=3.0)).render_frame(5)
        assert frame.offsets.shape == (3, 5, 2)
        assert np.all(np.abs(frame.offsets) <= 3.0 + 1e-4)

    def test_measured_fps_feeds_trail(self, small_config):
        animator = FieldAnimator(small_config, TrailConfig(framerate_target=60.0))
        animator.render_frame(0, measured_fps=30.0)
        assert animator.trail.smoothed_fps == pytest.approx(57.0)

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            FieldAnimator(WaveConfig(tiles_x=0))

    def test_invalid_trail_config(self, small_config):
        with pytest.raises(ValueError, match="Unknown blend mode"):
            FieldAnimator(small_config, TrailConfig(blend_mode="screen"))


class TestFieldFrame:
    def test_to_rgb(self, small_config):
        rgb = FieldAnimator(small_config).render_frame(2).to_rgb()
        assert rgb.shape == (3, 5, 3)
        assert rgb.dtype == np.uint8

    def test_to_symbols(self, small_config):
        lines = FieldAnimator(small_config).render_frame(2).to_symbols()
        assert len(lines) == 3
        assert all(len(line) == 5 for line in lines)


class TestRenderFrames:
    def test_default_length(self, small_config):
        frames = list(FieldAnimator(small_config).render_frames())
        assert len(frames) == small_config.total_frames
        assert [f.frame_index for f in frames] == list(range(6))

    def test_start_offset(self, small_config):
        frames = list(FieldAnimator(small_config).render_frames(3, start=10))
        assert [f.frame_index for f in frames] == [10, 11, 12]

    def test_progress_callback(self, small_config):
        calls = []
        list(FieldAnimator(small_config).render_frames(3, progress_callback=lambda c, t: calls.append((c, t))))
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_restarts_trail(self, small_config):
        animator = FieldAnimator(small_config, TrailConfig(max_length=8))
        list(animator.render_frames(5))
        assert animator.trail.filled_frames == 5
        list(animator.render_frames(2))
        assert animator.trail.filled_frames == 2


class TestRenderManifest:
    def test_frame_indices(self, small_config):
        manifest = {"frames": [{"frame_index": 10}, {"global_energy": 0.2}]}
        frames = list(FieldAnimator(small_config).render_manifest(manifest))
        assert [f.frame_index for f in frames] == [10, 1]

    def test_energy_drives_trail(self, small_config):
        trail_cfg = TrailConfig(max_length=6, audio_min_trail=1, audio_max_trail=6)
        animator = FieldAnimator(small_config, trail_cfg)
        manifest = {"frames": [
            {"frame_index": 0, "global_energy": 0.1},
            {"frame_index": 1, "global_energy": 0.8},
        ]}
        list(animator.render_manifest(manifest))
        assert animator.trail.audio_level == pytest.approx(0.8)
        # round(1 + 5 * 0.8) = 5, capped by the two captured frames
        assert animator.trail.effective_trail_length() == 2

    def test_empty_manifest(self, small_config):
        assert list(FieldAnimator(small_config).render_manifest({})) == []


class TestAudioBlocks:
    def test_feeds_trail(self, small_config):
        animator = FieldAnimator(small_config, TrailConfig(audio_min_trail=1))
        level = animator.feed_audio_block(np.full(256, 0.5, dtype=np.float32))
        assert level > 0
        assert animator.trail.audio_level == pytest.approx(level)

    def test_without_trail(self, small_config):
        animator = FieldAnimator(small_config)
        assert animator.feed_audio_block(np.zeros(128)) == 0.0
