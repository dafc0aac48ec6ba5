"""Tests for the audio level follower."""

import numpy as np
import pytest

from glyphwave.core.envelope import PEAK_DECAY, LevelFollower


class TestLevelFollower:
    def test_initial_state(self):
        follower = LevelFollower()
        assert follower.level == 0.0
        assert follower.peak == pytest.approx(0.001)

    def test_attack(self):
        follower = LevelFollower(attack=0.3)
        # peak becomes 1.0, target 1.0, 30% of the gap closed
        assert follower.update(1.0) == pytest.approx(0.3)

    def test_converges_on_steady_input(self):
        follower = LevelFollower()
        levels = [follower.update(0.5) for _ in range(50)]
        assert all(b >= a for a, b in zip(levels, levels[1:]))
        assert levels[-1] == pytest.approx(1.0, abs=1e-3)

    def test_decay(self):
        follower = LevelFollower(attack=1.0, decay=0.1)
        assert follower.update(1.0) == pytest.approx(1.0)
        assert follower.update(0.0) == pytest.approx(0.9)

    def test_peak_decays_slowly(self):
        follower = LevelFollower()
        follower.update(1.0)
        follower.update(0.0)
        assert follower.peak == pytest.approx(PEAK_DECAY)

    def test_negative_reading_is_silence(self):
        follower = LevelFollower()
        assert follower.update(-4.0) == 0.0

    def test_level_bounded(self):
        follower = LevelFollower(attack=1.0, decay=1.0)
        rng = np.random.default_rng(0)
        for raw in rng.random(200) * 10:
            level = follower.update(raw)
            assert 0.0 <= level <= 1.0

    def test_block_uses_rms(self):
        a = LevelFollower()
        b = LevelFollower()
        samples = np.array([0.5, -0.5, 0.5, -0.5], dtype=np.float32)
        assert a.update_block(samples) == pytest.approx(b.update(0.5))

    def test_empty_block(self):
        follower = LevelFollower()
        assert follower.update_block(np.array([])) == 0.0

    def test_reset(self):
        follower = LevelFollower()
        follower.update(1.0)
        follower.reset()
        assert follower.level == 0.0
        assert follower.peak == pytest.approx(0.001)
