"""
Wave field engine.

Computes per-cell hue, saturation and brightness for a symbol grid.
All three channels share one phase construction::

    phase = time term + (x*dx + y*dy) * wave_multiplier

but use different shaping functions and offsets so they never move in
lockstep: brightness is tangent-shaped (sharp transitions), hue and
saturation are sine-shaped (smooth). Phases are in degrees.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from glyphwave.config import WaveConfig
from glyphwave.core.strategies import WaveFn, WaveStrategy, custom, map_range

logger = logging.getLogger(__name__)


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


@dataclass(frozen=True)
class FrameState:
    """Per-frame memo written by ``update`` as a single unit."""
    frame_index: int = -1
    wave_speed: float = -1.0
    wave_multiplier: float = 0.0


class WaveFieldEngine:
    """
    Per-cell colour queries driven by a WaveConfig.

    Call ``update`` once per frame before querying, or leave ``auto_update``
    on and the queries refresh the frame state themselves when the frame
    or configured wave speed changes.
    """

    def __init__(self, config: Optional[WaveConfig] = None):
        self.cfg = config or WaveConfig()
        self.auto_update = True
        self.state = FrameState()
        self._strategy: Optional[WaveStrategy] = None

    @property
    def wave_multiplier(self) -> float:
        return self.state.wave_multiplier

    @property
    def custom_wave_function(self) -> Optional[WaveStrategy]:
        return self._strategy

    def update(self, frame_index: int, wave_speed: float):
        """
        Recompute the wave multiplier for a frame.

        The multiplier depends on the frame index only; ``wave_speed`` is
        stored so repeated queries within one tick can skip the update.
        """
        multiplier = map_range(
            math.sin(math.radians(frame_index)), -1, 1,
            self.cfg.wave_multiplier_min, self.cfg.wave_multiplier_max,
        )
        self.state = FrameState(frame_index, wave_speed, multiplier)

    def _ensure_updated(self, frame_index: int):
        speed = self.cfg.wave_speed
        if self.auto_update and (
            frame_index != self.state.frame_index or speed != self.state.wave_speed
        ):
            self.update(frame_index, speed)

    def _direction(self, offset_deg: float = 0.0) -> Tuple[float, float]:
        angle = math.radians(self.cfg.wave_angle + offset_deg)
        return math.cos(angle), math.sin(angle)

    def calculate_amplitude(self, x: int, y: int) -> float:
        """
        Normalised amplitude for a lattice cell, in [0, 1].

        Depends on the coordinates only, never on the frame.
        """
        lo, hi = self.cfg.wave_amplitude_min, self.cfg.wave_amplitude_max
        if lo == hi:
            return 0.0
        a = map_range(math.tan(math.radians(x + y)), -1, 1, lo, hi)
        return _clamp((a - lo) / (hi - lo), 0.0, 1.0)

    def calculate_color(self, frame_index: int, x: int, y: int, amplitude: float) -> float:
        """
        Brightness for a cell using the built-in tangent wave.

        Tangent is unbounded near its asymptotes, so the mapped value is
        clamped to [brightness_min, brightness_max] rather than rescaled.
        """
        self._ensure_updated(frame_index)
        dx, dy = self._direction()
        spatial = (x * dx + y * dy) * self.state.wave_multiplier
        phase = frame_index * self.cfg.wave_speed + spatial * amplitude
        value = map_range(
            math.tan(math.radians(phase)), -1, 1,
            self.cfg.brightness_min, self.cfg.brightness_max,
        )
        return _clamp(value, self.cfg.brightness_min, self.cfg.brightness_max)

    def calculate_color_custom(self, frame_index: int, x: int, y: int, tiles_x: float, tiles_y: float) -> float:
        """Brightness from the installed strategy, or the default tangent wave."""
        if self._strategy is not None:
            nx = x / tiles_x
            ny = y / tiles_y
            time = frame_index / float(self.cfg.animation_fps * self.cfg.animation_duration)
            return self._strategy(frame_index, nx, ny, time, self.cfg)
        return self.calculate_color(frame_index, x, y, self.calculate_amplitude(x, y))

    def calculate_saturation(self, frame_index: int, x: int, y: int, tiles_x: float = 0, tiles_y: float = 0) -> float:
        """
        Saturation for a cell.

        Uses a 30 degree angle offset and its own time/space scaling so it
        drifts independently of brightness. Returns ``saturation_min`` as-is
        when the range is degenerate.
        """
        lo, hi = self.cfg.saturation_min, self.cfg.saturation_max
        if lo == hi:
            return lo

        self._ensure_updated(frame_index)
        dx, dy = self._direction(30.0)
        phase = (
            frame_index * self.cfg.wave_speed * 0.7
            + (x * dx + y * dy) * self.state.wave_multiplier * 1.3
        )
        return _clamp(map_range(math.sin(math.radians(phase)), -1, 1, lo, hi), lo, hi)

    def calculate_hue(self, frame_index: int, x: int, y: int, tiles_x: float = 0, tiles_y: float = 0) -> float:
        """
        Hue for a cell: a slow sweep across the grid.

        Returns ``hue_min`` as-is when the range is degenerate.
        """
        lo, hi = self.cfg.hue_min, self.cfg.hue_max
        if lo == hi:
            return lo

        self._ensure_updated(frame_index)
        dx, dy = self._direction()
        phase = (
            frame_index * self.cfg.wave_speed * 0.3
            + (x * dx + y * dy) * self.state.wave_multiplier * 0.5
        )
        return _clamp(map_range(math.sin(math.radians(phase)), -1, 1, lo, hi), lo, hi)

    def sample_grid(self, frame_index: int, cols: int, rows: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Evaluate every cell of a grid.

        Returns:
            (hue, saturation, brightness), each a (rows, cols) float32 array.
        """
        hue = np.zeros((rows, cols), dtype=np.float32)
        sat = np.zeros((rows, cols), dtype=np.float32)
        bri = np.zeros((rows, cols), dtype=np.float32)
        for j in range(rows):
            for i in range(cols):
                hue[j, i] = self.calculate_hue(frame_index, i, j, cols, rows)
                sat[j, i] = self.calculate_saturation(frame_index, i, j, cols, rows)
                bri[j, i] = self.calculate_color_custom(frame_index, i, j, cols, rows)
        return hue, sat, bri

    def set_custom_wave_function(self, strategy: Union[WaveStrategy, WaveFn, None]):
        """Install a strategy (or a bare function), or None for the default wave."""
        if strategy is not None and not isinstance(strategy, WaveStrategy):
            strategy = custom(strategy)
        self._strategy = strategy
        logger.debug("Wave strategy set to %s", strategy.name if strategy else "default")

    def reset(self):
        """Return to the built-in tangent wave."""
        self._strategy = None
