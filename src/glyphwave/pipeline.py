"""
Frame driver.

Runs the once-per-tick sequence for a symbol grid: update the wave field,
sample every cell, optionally push the samples through the trail buffer,
and hand back the composited hue/saturation/brightness grids.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

import numpy as np

from glyphwave.colorgrade import brightness_to_symbols, hsb_to_rgb
from glyphwave.config import TrailConfig, WaveConfig
from glyphwave.core.engine import WaveFieldEngine
from glyphwave.core.envelope import LevelFollower
from glyphwave.core.motion import CellMotion
from glyphwave.core.strategies import WaveFn, WaveStrategy
from glyphwave.core.trail import TrailBuffer

logger = logging.getLogger(__name__)


@dataclass
class FieldFrame:
    """One rendered tick. Channel grids are (rows, cols) float32."""
    frame_index: int
    hue: np.ndarray
    saturation: np.ndarray
    brightness: np.ndarray
    offsets: Optional[np.ndarray] = None  # (rows, cols, 2) glyph offsets in pixels

    def to_rgb(self) -> np.ndarray:
        return hsb_to_rgb(self.hue, self.saturation, self.brightness)

    def to_symbols(self, ramp: str = " .:-=+*#%@") -> list:
        return brightness_to_symbols(self.brightness, ramp)


class FieldAnimator:
    """
    Drives a WaveFieldEngine and an optional TrailBuffer, one tick at a time.

    Not safe for concurrent use; give each worker its own animator.
    """

    def __init__(
        self,
        config: Optional[WaveConfig] = None,
        trail_config: Optional[TrailConfig] = None,
        strategy: Union[WaveStrategy, WaveFn, None] = None,
        motion: Optional[CellMotion] = None,
    ):
        self.cfg = config or WaveConfig()
        self.cfg.validate()
        self.cols = self.cfg.tiles_x
        self.rows = self.cfg.tiles_y

        self.engine = WaveFieldEngine(self.cfg)
        if strategy is not None:
            self.engine.set_custom_wave_function(strategy)

        self.trail = None
        if trail_config is not None:
            trail_config.validate()
            self.trail = TrailBuffer.from_config(self.cols, self.rows, trail_config)

        self.motion = motion
        self.level = LevelFollower()

    def feed_audio_block(self, samples: np.ndarray) -> float:
        """Follow the loudness of a block of samples and feed it to the trail."""
        level = self.level.update_block(samples)
        if self.trail is not None:
            self.trail.feed_audio_level(level)
        return level

    def render_frame(
        self,
        frame_index: int,
        frame_data: Optional[dict[str, Any]] = None,
        measured_fps: Optional[float] = None,
    ) -> FieldFrame:
        """
        Produce one tick.

        Args:
            frame_index: Animation frame number.
            frame_data: Optional audio-feature frame; its ``global_energy``
                drives audio-reactive trail length.
            measured_fps: Optional real frame rate for frame-rate reactive trails.
        """
        self.engine.update(frame_index, self.cfg.wave_speed)

        if self.trail is None:
            hue, sat, bri = self.engine.sample_grid(frame_index, self.cols, self.rows)
        else:
            if measured_fps is not None:
                self.trail.feed_framerate(measured_fps)
            if frame_data is not None:
                self.trail.feed_audio_level(frame_data.get("global_energy", 0.0))

            self.trail.capture_engine(self.engine, frame_index)
            shape = (self.rows, self.cols)
            hue, sat, bri = (c.reshape(shape) for c in self.trail.composite_hsb())

        offsets = None
        if self.motion is not None:
            offsets = self.motion.offsets(self.cols, self.rows, frame_index)

        return FieldFrame(frame_index, hue, sat, bri, offsets)

    def render_frames(
        self,
        n_frames: Optional[int] = None,
        start: int = 0,
        progress_callback: callable = None,
    ) -> Iterator[FieldFrame]:
        """Yield consecutive frames; defaults to the configured animation length."""
        total = self.cfg.total_frames if n_frames is None else n_frames
        logger.info("Rendering %d frames of a %dx%d grid", total, self.cols, self.rows)
        if self.trail is not None:
            self.trail.clear()
        for i in range(total):
            yield self.render_frame(start + i)
            if progress_callback:
                progress_callback(i + 1, total)

    def render_manifest(self, manifest: dict[str, Any], progress_callback: callable = None) -> Iterator[FieldFrame]:
        """Yield one frame per manifest entry, audio-reactive where a trail is set."""
        frames = manifest.get("frames", [])
        total = len(frames)
        if self.trail is not None:
            self.trail.clear()
        for i, frame_data in enumerate(frames):
            yield self.render_frame(frame_data.get("frame_index", i), frame_data)
            if progress_callback:
                progress_callback(i + 1, total)
