"""
Pluggable brightness wave strategies.

A strategy is a plain value carrying a name, a description and an
``evaluate(frame_index, x, y, time, config)`` function. ``x`` and ``y``
are lattice coordinates normalised to [0, 1]; ``time`` is the frame
index normalised over the full animation. Built-in presets and user
functions share the same type.
"""

import enum
import math
from dataclasses import dataclass
from typing import Callable, Optional, Union

from glyphwave.config import WaveConfig
from glyphwave.core.perlin import PerlinNoise

TWO_PI = 2.0 * math.pi

WaveFn = Callable[[int, float, float, float, WaveConfig], float]


@dataclass(frozen=True)
class WaveStrategy:
    """A named brightness function."""
    name: str
    description: str
    evaluate: WaveFn

    def __call__(self, frame_index: int, x: float, y: float, time: float, config: WaveConfig) -> float:
        return self.evaluate(frame_index, x, y, time, config)


class WaveType(enum.Enum):
    SINE = "sine"
    TANGENT = "tangent"
    SQUARE = "square"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"


def map_range(value: float, lo: float, hi: float, out_lo: float, out_hi: float) -> float:
    return out_lo + (out_hi - out_lo) * ((value - lo) / (hi - lo))


def compute_phase(frame_index: int, x: float, y: float, config: WaveConfig) -> float:
    """Time term plus a diagonal sweep, three cycles across the grid."""
    return (
        frame_index * config.wave_speed * 0.05
        + x * TWO_PI * 3
        + y * TWO_PI * 3
    )


def _sine(frame_index, x, y, time, config):
    phase = compute_phase(frame_index, x, y, config)
    return map_range(math.sin(phase), -1, 1, config.brightness_min, config.brightness_max)


def _tangent(frame_index, x, y, time, config):
    phase = compute_phase(frame_index, x, y, config)
    raw = map_range(math.tan(phase), -1, 1, config.brightness_min, config.brightness_max)
    return min(max(raw, config.brightness_min), config.brightness_max)


def _square(frame_index, x, y, time, config):
    phase = compute_phase(frame_index, x, y, config)
    return config.brightness_max if math.sin(phase) >= 0 else config.brightness_min


def _triangle(frame_index, x, y, time, config):
    phase = compute_phase(frame_index, x, y, config)
    t = (phase / TWO_PI) % 1.0
    tri = 4 * t - 1 if t < 0.5 else 3 - 4 * t
    return map_range(tri, -1, 1, config.brightness_min, config.brightness_max)


def _sawtooth(frame_index, x, y, time, config):
    phase = compute_phase(frame_index, x, y, config)
    t = (phase / TWO_PI) % 1.0
    return map_range(t, 0, 1, config.brightness_min, config.brightness_max)


def sine() -> WaveStrategy:
    return WaveStrategy("Sine", "Smooth sinusoidal oscillation", _sine)


def tangent() -> WaveStrategy:
    return WaveStrategy("Tangent", "Sharp, angular tangent oscillation", _tangent)


def square() -> WaveStrategy:
    return WaveStrategy("Square", "Binary on/off square wave", _square)


def triangle() -> WaveStrategy:
    return WaveStrategy("Triangle", "Linear ramp up then down", _triangle)


def sawtooth() -> WaveStrategy:
    return WaveStrategy("Sawtooth", "Linear ramp with sharp drop", _sawtooth)


def noise(scale: float = 3.0, speed: float = 0.8, source: Optional[PerlinNoise] = None) -> WaveStrategy:
    """
    Organic noise-driven brightness.

    Two octaves of coherent noise are blended 0.7/0.3, the second at
    2.5x spatial frequency (offset by 100 units) and 1.5x temporal rate.
    Blended noise rarely reaches its extremes, so the window [0.15, 0.85]
    rather than [0, 1] is stretched over the brightness range. Output is
    not clamped.

    Args:
        scale: Spatial noise scale (higher = more detail).
        speed: Temporal animation speed.
        source: Noise field to sample; a seeded default is created if omitted.
    """
    field = source or PerlinNoise()

    def _evaluate(frame_index, x, y, time, config):
        nx = x * scale
        ny = y * scale
        nt = frame_index * 0.01 * speed
        n1 = field(nx, ny, nt)
        n2 = field(nx * 2.5 + 100, ny * 2.5 + 100, nt * 1.5)
        n = n1 * 0.7 + n2 * 0.3
        return map_range(n, 0.15, 0.85, config.brightness_min, config.brightness_max)

    return WaveStrategy("Noise", "Organic coherent noise patterns", _evaluate)


def custom(fn: WaveFn, name: Optional[str] = None, description: str = "Custom wave function") -> WaveStrategy:
    """Wrap a user function. Its output is not range-checked."""
    return WaveStrategy(name or getattr(fn, "__name__", type(fn).__name__), description, fn)


_PRESETS = {
    WaveType.SINE: sine,
    WaveType.TANGENT: tangent,
    WaveType.SQUARE: square,
    WaveType.TRIANGLE: triangle,
    WaveType.SAWTOOTH: sawtooth,
}


def get(wave_type: Union[WaveType, str]) -> WaveStrategy:
    """
    Return the built-in strategy for a wave type.

    Accepts a WaveType or its lowercase name; "noise" also resolves.

    Raises:
        ValueError: For unknown names.
    """
    if isinstance(wave_type, str):
        key = wave_type.lower()
        if key == "noise":
            return noise()
        try:
            wave_type = WaveType(key)
        except ValueError:
            names = ", ".join([t.value for t in WaveType] + ["noise"])
            raise ValueError(f"Unknown wave type '{wave_type}'. Expected one of: {names}") from None
    return _PRESETS[wave_type]()
