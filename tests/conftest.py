"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from glyphwave.config import WaveConfig
from glyphwave.core.engine import WaveFieldEngine
from glyphwave.core.trail import TrailBuffer

# Grid used by most trail tests: 4 columns x 3 rows, 8 slots
TRAIL_COLS = 4
TRAIL_ROWS = 3
TRAIL_SLOTS = 8


@pytest.fixture
def config() -> WaveConfig:
    """Default wave configuration."""
    return WaveConfig()


@pytest.fixture
def engine(config: WaveConfig) -> WaveFieldEngine:
    """Engine bound to the default configuration."""
    return WaveFieldEngine(config)


@pytest.fixture
def trail() -> TrailBuffer:
    """Empty 4x3 trail buffer with 8 slots."""
    return TrailBuffer(TRAIL_COLS, TRAIL_ROWS, TRAIL_SLOTS)


@pytest.fixture
def uniform_frame():
    """
    Factory for flat frames filled with one value.

    Returns:
        Callable value -> (cols * rows,) float32 array.
    """
    def _make(value: float) -> np.ndarray:
        return np.full(TRAIL_COLS * TRAIL_ROWS, value, dtype=np.float32)

    return _make
