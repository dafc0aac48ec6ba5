"""
Per-cell glyph motion.

A motion computes an (x, y) pixel offset that displaces a glyph from the
centre of its cell. Offsets stay within ``radius`` so the glyph remains
inside its tile.
"""

import abc
import math
from typing import Optional, Tuple

import numpy as np

from glyphwave.core.perlin import PerlinNoise

_X_PLANE = 0.37
_Y_PLANE = 0.71


class CellMotion(abc.ABC):
    """Base class for glyph-in-cell motion."""

    def __init__(self, radius: float = 8.0, speed: float = 1.0):
        self.radius = radius
        self.speed = speed

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float):
        self._radius = max(0.0, value)

    @abc.abstractmethod
    def offset(self, col: int, row: int, frame_index: int) -> Tuple[float, float]:
        """Displacement in pixels from the cell centre."""
        pass

    def offsets(self, cols: int, rows: int, frame_index: int) -> np.ndarray:
        """Offsets for a whole grid as a (rows, cols, 2) float32 array."""
        out = np.zeros((rows, cols, 2), dtype=np.float32)
        for j in range(rows):
            for i in range(cols):
                out[j, i] = self.offset(i, j, frame_index)
        return out


class CircularMotion(CellMotion):
    """
    Glyphs orbit their cell centre.

    A phase derived from column and row keeps neighbours out of step.
    """

    def __init__(self, radius: float = 8.0, speed: float = 1.0, clockwise: bool = True,
                 phase_spread: float = 0.8):
        super().__init__(radius, speed)
        self.clockwise = clockwise
        self.phase_spread = phase_spread

    def offset(self, col: int, row: int, frame_index: int) -> Tuple[float, float]:
        phase = (col * 0.7 + row * 1.3) * self.phase_spread
        direction = 1.0 if self.clockwise else -1.0
        angle = direction * frame_index * self.speed * 0.03 + phase
        return math.cos(angle) * self.radius, math.sin(angle) * self.radius


class NoiseMotion(CellMotion):
    """
    Glyphs wander inside their cell along two noise channels.

    Each cell samples the noise field at its own seed offset so every
    glyph follows a different path.
    """

    def __init__(self, radius: float = 10.0, speed: float = 1.0, noise_scale: float = 0.012,
                 cell_seed_spread: float = 100.0, source: Optional[PerlinNoise] = None):
        super().__init__(radius, speed)
        self.noise_scale = max(0.001, noise_scale)
        self.cell_seed_spread = cell_seed_spread
        self.field = source or PerlinNoise(octaves=1)

    def offset(self, col: int, row: int, frame_index: int) -> Tuple[float, float]:
        t = frame_index * self.noise_scale * self.speed
        spread = self.cell_seed_spread
        seed_x = col * spread + row * spread * 0.37
        seed_y = col * spread * 0.61 + row * spread

        # Seeds land on integer coordinates where Perlin noise is flat, so
        # each channel reads its own off-lattice z plane.
        nx = (self.field(seed_x + t, seed_y, _X_PLANE) - 0.5) * 2.0 * self.radius
        ny = (self.field(seed_x, seed_y + t, _Y_PLANE) - 0.5) * 2.0 * self.radius
        return nx, ny
