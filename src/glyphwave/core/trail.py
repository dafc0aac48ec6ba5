"""
Temporal trail buffer.

Keeps a fixed-size ring of past grid frames (brightness, hue, saturation)
and composites a window of them into one output frame with per-age fade,
optional per-cell temporal displacement and a choice of blend mode. The
window length can react to frame-rate drops or to an audio level.

Slot age ``t`` (0 = most recent) lives at buffer index
``(head - 1 - t) mod max_length``.
"""

import enum
import logging
from typing import Callable, Optional, Tuple, Union

import numpy as np

from glyphwave.config import TrailConfig

logger = logging.getLogger(__name__)

CellFn = Callable[[int, int], float]


class BlendMode(enum.IntEnum):
    ADD = 0
    MAX = 1
    AVERAGE = 2


def _round_half_up(value):
    return np.floor(np.asarray(value) + 0.5).astype(np.int64)


class TrailBuffer:
    """
    Ring buffer of captured frames plus the compositing routines.

    Storage is allocated once for ``(cols, rows, max_length)`` and never
    resized. ``capture`` overwrites the oldest slot once the ring is full.
    """

    def __init__(self, cols: int, rows: int, max_length: int):
        self._cols = cols
        self._rows = rows
        self._max_length = max(1, max_length)

        cells = cols * rows
        self.bri_buffer = np.zeros((self._max_length, cells), dtype=np.float32)
        self.hue_buffer = np.zeros((self._max_length, cells), dtype=np.float32)
        self.sat_buffer = np.zeros((self._max_length, cells), dtype=np.float32)

        self.head = 0
        self.filled = 0

        self.trail_length = self._max_length
        self.fade_decay = 0.7
        self.blend_mode = BlendMode.ADD

        self.temporal_wave = False
        self.temporal_wave_amp = 3.0
        self.temporal_wave_freq = 0.3

        self.framerate_reactive = False
        self.target_fps = 60.0
        self.smoothed_fps = 60.0

        self.audio_reactive = False
        self.audio_level = 0.0
        self.audio_min_trail = 2
        self.audio_max_trail = self._max_length

        # Cell coordinates for temporal offsets, row-major like the slots
        rows_idx, cols_idx = np.divmod(np.arange(cells), max(cols, 1))
        self._diag = (cols_idx + rows_idx).astype(np.float64)

    @classmethod
    def from_config(cls, cols: int, rows: int, config: TrailConfig) -> "TrailBuffer":
        trail = cls(cols, rows, config.max_length)
        if config.trail_length is not None:
            trail.set_trail_length(config.trail_length)
        trail.set_fade_decay(config.fade_decay)
        trail.set_blend_mode(config.blend_mode)
        if config.temporal_wave_amp is not None:
            trail.set_temporal_wave(config.temporal_wave_amp, config.temporal_wave_freq)
        if config.framerate_target is not None:
            trail.set_framerate_reactive(True, config.framerate_target)
        if config.audio_min_trail is not None or config.audio_max_trail is not None:
            trail.set_audio_reactive(
                config.audio_min_trail if config.audio_min_trail is not None else 2,
                config.audio_max_trail if config.audio_max_trail is not None else trail.max_length,
            )
        return trail

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def max_length(self) -> int:
        return self._max_length

    @property
    def filled_frames(self) -> int:
        return self.filled

    # Capture

    def _advance(self):
        self.head = (self.head + 1) % self._max_length
        if self.filled < self._max_length:
            self.filled += 1

    def capture(
        self,
        brightness_of: CellFn,
        hue_of: CellFn,
        saturation_of: CellFn,
        cols: Optional[int] = None,
        rows: Optional[int] = None,
    ):
        """
        Evaluate all three channels for every cell and append the frame.

        Args:
            brightness_of, hue_of, saturation_of: ``(x, y) -> value`` callables.
            cols, rows: Lattice size; must match the buffer when given.
        """
        cols = self._cols if cols is None else cols
        rows = self._rows if rows is None else rows
        if (cols, rows) != (self._cols, self._rows):
            raise ValueError(
                f"Grid {cols}x{rows} does not match buffer {self._cols}x{self._rows}"
            )

        bri = self.bri_buffer[self.head]
        hue = self.hue_buffer[self.head]
        sat = self.sat_buffer[self.head]
        for j in range(rows):
            for i in range(cols):
                idx = j * cols + i
                bri[idx] = brightness_of(i, j)
                hue[idx] = hue_of(i, j)
                sat[idx] = saturation_of(i, j)
        self._advance()

    def capture_engine(self, engine, frame_index: int):
        """Capture the current frame straight from a WaveFieldEngine."""
        cols, rows = self._cols, self._rows
        self.capture(
            lambda x, y: engine.calculate_color_custom(frame_index, x, y, cols, rows),
            lambda x, y: engine.calculate_hue(frame_index, x, y, cols, rows),
            lambda x, y: engine.calculate_saturation(frame_index, x, y, cols, rows),
        )

    def capture_raw(
        self,
        brightness: np.ndarray,
        hue: Optional[np.ndarray] = None,
        saturation: Optional[np.ndarray] = None,
    ):
        """
        Append pre-computed values.

        Each array holds ``cols * rows`` values (flat, or shaped (rows, cols)).
        Missing hue/saturation channels are stored as zero.
        """
        cells = self._cols * self._rows
        channels = (
            (self.bri_buffer, brightness),
            (self.hue_buffer, hue),
            (self.sat_buffer, saturation),
        )
        for buffer, values in channels:
            if values is None:
                buffer[self.head] = 0.0
                continue
            flat = np.asarray(values, dtype=np.float32).reshape(-1)
            if flat.size != cells:
                raise ValueError(f"Expected {cells} values, got {flat.size}")
            buffer[self.head] = flat
        self._advance()

    # Compositing

    def _temporal_offsets(self, t: int) -> np.ndarray:
        wave = np.sin(self._diag * self.temporal_wave_freq + t * 0.2)
        return _round_half_up(wave * self.temporal_wave_amp)

    def _window(self):
        """Yield (weight, source slot index per cell, valid mask) for each age."""
        length = self.effective_trail_length()
        cells = self._cols * self._rows
        for t in range(min(length, self.filled)):
            weight = self.fade_decay ** t
            if self.temporal_wave:
                ages = t + self._temporal_offsets(t)
            else:
                ages = np.full(cells, t, dtype=np.int64)
            valid = (ages >= 0) & (ages < self.filled)
            src = (self.head - 1 - ages) % self._max_length
            yield weight, src, valid

    def composite(self) -> np.ndarray:
        """
        Reduce the trail window to one brightness grid.

        Returns:
            (rows, cols) float32 array clamped to [0, 255]. All zeros when
            the buffer is empty.
        """
        cells = self._cols * self._rows
        accum = np.zeros(cells, dtype=np.float32)
        counts = np.zeros(cells, dtype=np.int64)
        cell_idx = np.arange(cells)

        if self.filled == 0:
            return accum.reshape(self._rows, self._cols)

        for weight, src, valid in self._window():
            values = np.where(valid, self.bri_buffer[src, cell_idx] * weight, 0.0)
            if self.blend_mode == BlendMode.MAX:
                accum = np.where(valid, np.maximum(accum, values), accum)
            else:
                accum += values
                if self.blend_mode == BlendMode.AVERAGE:
                    counts += valid

        if self.blend_mode == BlendMode.AVERAGE:
            accum = np.where(counts > 0, accum / np.maximum(counts, 1), accum)

        return np.clip(accum, 0, 255).astype(np.float32).reshape(self._rows, self._cols)

    def composite_hsb(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Reduce the trail window to hue, saturation and brightness.

        Hue and saturation are weighted averages so they stay inside their
        ranges; brightness is a weighted sum clamped to [0, 255] so trails
        accumulate light.

        Returns:
            (hue, saturation, brightness), flat float32 arrays of cols * rows.
        """
        cells = self._cols * self._rows
        h_acc = np.zeros(cells, dtype=np.float64)
        s_acc = np.zeros(cells, dtype=np.float64)
        b_acc = np.zeros(cells, dtype=np.float64)
        w_sum = np.zeros(cells, dtype=np.float64)
        cell_idx = np.arange(cells)

        for weight, src, valid in self._window():
            w = np.where(valid, weight, 0.0)
            h_acc += self.hue_buffer[src, cell_idx] * w
            s_acc += self.sat_buffer[src, cell_idx] * w
            b_acc += self.bri_buffer[src, cell_idx] * w
            w_sum += w

        w_sum = np.maximum(w_sum, 0.001)
        return (
            (h_acc / w_sum).astype(np.float32),
            (s_acc / w_sum).astype(np.float32),
            np.clip(b_acc, 0, 255).astype(np.float32),
        )

    # Reactive trail length

    def effective_trail_length(self) -> int:
        """
        Trail length for this tick.

        Frame-rate reactive mode stretches the length by up to 3x when the
        smoothed frame rate falls below target. Audio-reactive mode then
        overrides it with a lerp between its min and max. The result never
        exceeds the filled slot count.
        """
        length = self.trail_length

        if self.framerate_reactive:
            ratio = self.target_fps / max(1.0, self.smoothed_fps)
            length = int(_round_half_up(length * min(max(ratio, 1.0), 3.0)))

        if self.audio_reactive:
            span = self.audio_max_trail - self.audio_min_trail
            length = int(_round_half_up(self.audio_min_trail + span * self.audio_level))

        return min(length, self.filled, self._max_length)

    def feed_framerate(self, fps: float):
        self.smoothed_fps = self.smoothed_fps * 0.9 + fps * 0.1

    def feed_audio_level(self, level: float):
        self.audio_level = min(max(level, 0.0), 1.0)

    # Settings

    def set_trail_length(self, n: int):
        self.trail_length = min(max(int(n), 1), self._max_length)

    def set_fade_decay(self, decay: float):
        """Per-age weight multiplier: 0 = instant fade, 1 = no fade."""
        self.fade_decay = min(max(decay, 0.0), 1.0)

    def set_blend_mode(self, mode: Union[BlendMode, int, str]):
        if isinstance(mode, str):
            try:
                mode = BlendMode[mode.upper()]
            except KeyError:
                names = ", ".join(m.name.lower() for m in BlendMode)
                raise ValueError(f"Unknown blend mode '{mode}'. Expected one of: {names}") from None
        self.blend_mode = BlendMode(mode)

    def set_temporal_wave(self, amp: float, freq: float):
        """
        Displace the sampled age per cell by ``round(sin((col+row)*freq + t*0.2) * amp)``.

        Displaced ages outside the filled history are skipped.
        """
        self.temporal_wave = True
        self.temporal_wave_amp = amp
        self.temporal_wave_freq = freq

    def disable_temporal_wave(self):
        self.temporal_wave = False

    def set_framerate_reactive(self, on: bool, target_fps: float = 60.0):
        self.framerate_reactive = on
        self.target_fps = target_fps

    def set_audio_reactive(self, min_trail: int, max_trail: int):
        self.audio_reactive = True
        self.audio_min_trail = max(1, min_trail)
        self.audio_max_trail = min(max_trail, self._max_length)

    def disable_audio_reactive(self):
        self.audio_reactive = False

    def clear(self):
        """Discard history. Storage is kept."""
        self.head = 0
        self.filled = 0
        logger.debug("Trail buffer cleared (%dx%d, %d slots)", self._cols, self._rows, self._max_length)
