from __future__ import annotations

import numpy as np

from walkerevo.evolution.bands import PopulationBands


class EliteParentSelector:
    """Picks crossover parents by rank.

    The mother always comes from the elite band; the father is an elite with
    probability ``elite_parent_bias`` and otherwise any walker below it.
    """

    def __init__(self, bands: PopulationBands, elite_parent_bias: float):
        if not 0.0 <= elite_parent_bias <= 1.0:
            raise ValueError(f"elite_parent_bias must be within [0, 1], got {elite_parent_bias}")
        self.bands = bands
        self.elite_parent_bias = elite_parent_bias

    def select_mother(self, rng: np.random.Generator) -> int:
        return self.bands.elite_rank(rng.random())

    def select_father(self, rng: np.random.Generator) -> int:
        if rng.random() < self.elite_parent_bias:
            return self.bands.elite_rank(rng.random())
        return self.bands.non_elite_rank(rng.random())

    def select_parents(self, rng: np.random.Generator) -> tuple[int, int]:
        return self.select_mother(rng), self.select_father(rng)
