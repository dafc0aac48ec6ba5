"""
Parameter bundles for the wave field and the trail buffer.

The engine reads these values on every query and never mutates them,
so a host may adjust a field between frames and see it on the next tick.
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Names accepted by TrailBuffer.set_blend_mode
BLEND_MODES = ("add", "max", "average")


@dataclass
class WaveConfig:
    """Wave, colour-range and timing parameters for one animation."""
    # Wave
    wave_speed: float = 1.0
    wave_angle: float = 45.0  # degrees, 0 = horizontal, 90 = vertical
    wave_multiplier_min: float = 0.0
    wave_multiplier_max: float = 2.0
    wave_amplitude_min: float = -200.0
    wave_amplitude_max: float = 200.0

    # Colour (HSB)
    hue_min: float = 0.0  # 0-360
    hue_max: float = 0.0
    saturation_min: float = 0.0  # 0-255
    saturation_max: float = 0.0
    brightness_min: float = 50.0  # 0-255
    brightness_max: float = 255.0

    # Timing
    animation_fps: int = 30
    animation_duration: int = 18  # seconds

    # Grid
    tiles_x: int = 16
    tiles_y: int = 16

    def __post_init__(self):
        self.wave_angle = self.wave_angle % 360.0

    @property
    def total_frames(self) -> int:
        return self.animation_fps * self.animation_duration

    def set_hue_range(self, lo: float, hi: float) -> "WaveConfig":
        self.hue_min, self.hue_max = lo, hi
        return self

    def set_saturation_range(self, lo: float, hi: float) -> "WaveConfig":
        self.saturation_min, self.saturation_max = lo, hi
        return self

    def set_brightness_range(self, lo: float, hi: float) -> "WaveConfig":
        self.brightness_min, self.brightness_max = lo, hi
        return self

    def validate(self):
        """
        Check value ranges.

        Raises:
            ValueError: If any field is outside its documented range.
        """
        for name in ("animation_fps", "animation_duration", "tiles_x", "tiles_y"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive. Got: {value}")

        _check_range("hue_min", self.hue_min, 0.0, 360.0)
        _check_range("hue_max", self.hue_max, 0.0, 360.0)
        for name in ("saturation_min", "saturation_max", "brightness_min", "brightness_max"):
            _check_range(name, getattr(self, name), 0.0, 255.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WaveConfig":
        """
        Build a config from a flat or sectioned dictionary.

        Sectioned input follows the preset file layout::

            {"animation": {"fps": 30, "waveSpeed": 1.2, ...},
             "colors": {"hueMin": 0, ...},
             "grid": {"tilesX": 16, "tilesY": 16}}

        Inverted min/max pairs are swapped with a warning.

        Raises:
            ValueError: On unknown keys or out-of-range values.
        """
        values = _flatten_sections(data)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        cfg = cls(**values)
        for prefix in ("wave_multiplier", "saturation", "brightness"):
            lo, hi = getattr(cfg, f"{prefix}_min"), getattr(cfg, f"{prefix}_max")
            if lo > hi:
                logger.warning("%s_min > %s_max, swapping values", prefix, prefix)
                setattr(cfg, f"{prefix}_min", hi)
                setattr(cfg, f"{prefix}_max", lo)

        cfg.validate()
        return cfg


@dataclass
class TrailConfig:
    """Settings applied to a TrailBuffer at construction."""
    max_length: int = 12
    trail_length: Optional[int] = None  # None = max_length
    fade_decay: float = 0.7
    blend_mode: str = "add"  # "add", "max", "average"

    # Per-cell temporal displacement, disabled when amp is None
    temporal_wave_amp: Optional[float] = None
    temporal_wave_freq: float = 0.3

    # Reactive length, each disabled when None
    framerate_target: Optional[float] = None
    audio_min_trail: Optional[int] = None
    audio_max_trail: Optional[int] = None

    def validate(self):
        """
        Check trail settings before a buffer is built from them.

        Raises:
            ValueError: On a non-positive length, a fade decay outside
                [0, 1] or an unknown blend mode.
        """
        if not isinstance(self.max_length, int) or self.max_length < 1:
            raise ValueError(f"max_length must be a positive integer. Got: {self.max_length}")
        if self.trail_length is not None and self.trail_length < 1:
            raise ValueError(f"trail_length must be at least 1. Got: {self.trail_length}")
        if not isinstance(self.fade_decay, (int, float)):
            raise ValueError(f"fade_decay must be a number. Got: {self.fade_decay!r}")
        _check_range("fade_decay", self.fade_decay, 0.0, 1.0)
        if str(self.blend_mode).lower() not in BLEND_MODES:
            raise ValueError(
                f"Unknown blend mode '{self.blend_mode}'. Expected one of: {', '.join(BLEND_MODES)}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrailConfig":
        values = {_snake(k): v for k, v in data.items()}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown trail keys: {', '.join(unknown)}")
        cfg = cls(**values)
        cfg.validate()
        return cfg


def load_config(path: Union[str, Path]) -> Tuple[WaveConfig, Optional[TrailConfig]]:
    """
    Load wave and trail settings from a JSON preset file.

    Args:
        path: JSON file with optional "animation", "colors", "grid"
            and "trail" sections.

    Returns:
        Tuple of (WaveConfig, TrailConfig). The trail config is None when
        the preset has no "trail" section or sets it to null.
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be an object: {path}")

    trail_data = data.pop("trail", None)
    if trail_data is not None and not isinstance(trail_data, dict):
        raise ValueError(f"The 'trail' section must be an object: {path}")

    logger.debug("Loaded configuration from %s", path)
    wave_cfg = WaveConfig.from_dict(data)
    trail_cfg = None if trail_data is None else TrailConfig.from_dict(trail_data)
    return wave_cfg, trail_cfg


# Preset files use camelCase keys and a few legacy names
_ALIASES = {
    "fps": "animation_fps",
    "duration": "animation_duration",
    "initial_tiles_x": "tiles_x",
    "initial_tiles_y": "tiles_y",
}


def _snake(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _flatten_sections(data: Dict[str, Any]) -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if key in ("animation", "colors", "grid") and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                name = _snake(sub_key)
                flat[_ALIASES.get(name, name)] = sub_value
        else:
            name = _snake(key)
            flat[_ALIASES.get(name, name)] = value
    return flat


def _check_range(name: str, value: float, lo: float, hi: float):
    if value < lo or value > hi:
        raise ValueError(f"{name} must be between {lo:g} and {hi:g}. Got: {value}")
