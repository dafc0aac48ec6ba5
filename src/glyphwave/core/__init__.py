"""Wave field engine, strategies and trail buffer."""

from glyphwave.core.engine import WaveFieldEngine
from glyphwave.core.perlin import PerlinNoise
from glyphwave.core.trail import BlendMode, TrailBuffer

__all__ = ["WaveFieldEngine", "PerlinNoise", "BlendMode", "TrailBuffer"]
