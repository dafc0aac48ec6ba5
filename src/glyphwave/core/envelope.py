"""
Audio level following.

Turns raw loudness readings into a steady [0, 1] level suitable for
``TrailBuffer.feed_audio_level``. A slowly decaying peak tracker keeps
the level calibrated to the material, and an attack/decay envelope
stops the trail length from flickering.
"""

import numpy as np

PEAK_DECAY = 0.995


class LevelFollower:
    """
    Attack/decay smoother with automatic peak calibration.

    Args:
        attack: Fraction of the gap closed per update when rising.
        decay: Fraction of the gap closed per update when falling.
    """

    def __init__(self, attack: float = 0.3, decay: float = 0.1):
        self.attack = attack
        self.decay = decay
        self.peak = 0.001
        self.level = 0.0

    def _smooth(self, current: float, target: float) -> float:
        rate = self.attack if target > current else self.decay
        return current + (target - current) * rate

    def update(self, raw: float) -> float:
        """Feed one raw reading and return the smoothed level."""
        raw = max(0.0, float(raw))
        self.peak = max(self.peak * PEAK_DECAY, raw)
        target = raw / self.peak if self.peak > 0 else 0.0
        self.level = float(np.clip(self._smooth(self.level, target), 0.0, 1.0))
        return self.level

    def update_block(self, samples: np.ndarray) -> float:
        """Feed a block of audio samples; its RMS is used as the reading."""
        samples = np.asarray(samples, dtype=np.float32)
        if samples.size == 0:
            return self.update(0.0)
        rms = float(np.sqrt(np.mean(samples ** 2)))
        return self.update(rms)

    def reset(self):
        self.peak = 0.001
        self.level = 0.0
