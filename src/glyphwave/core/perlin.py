"""Coherent noise used by the noise wave preset and noise motion."""

import noise


class PerlinNoise:
    """
    Repeatable 3-D Perlin noise rescaled to [0, 1].

    Wraps ``noise.pnoise3``. ``seed`` selects the permutation table, so two
    instances with the same settings always return the same field. Octaves
    double in frequency and are weighted by ``persistence`` each step.
    """

    def __init__(self, seed: int = 0, octaves: int = 4, persistence: float = 0.5):
        if octaves < 1:
            raise ValueError(f"octaves must be at least 1. Got: {octaves}")
        self.seed = seed
        self.octaves = octaves
        self.persistence = persistence

    def __call__(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        n = noise.pnoise3(
            x, y, z,
            octaves=self.octaves,
            persistence=self.persistence,
            lacunarity=2.0,
            base=self.seed,
        )
        return min(max((n + 1.0) * 0.5, 0.0), 1.0)
