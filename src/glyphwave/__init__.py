"""Wave-driven colour fields and motion trails for animated symbol grids."""

from glyphwave.config import TrailConfig, WaveConfig, load_config
from glyphwave.core.engine import WaveFieldEngine
from glyphwave.core.strategies import WaveStrategy, WaveType
from glyphwave.core.trail import BlendMode, TrailBuffer
from glyphwave.pipeline import FieldAnimator, FieldFrame

__version__ = "0.1.0"
__all__ = [
    "WaveConfig",
    "TrailConfig",
    "load_config",
    "WaveFieldEngine",
    "WaveStrategy",
    "WaveType",
    "TrailBuffer",
    "BlendMode",
    "FieldAnimator",
    "FieldFrame",
]
