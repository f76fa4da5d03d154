"""Index arithmetic of the rank/reap/sow cycle.

All quantities are fractions of the population size ``N`` evaluated as
floats and compared against integer ranks (0 is the best walker). The exact
comparisons below decide band edges for population sizes that are not
divisible by the fractions, so they are kept as plain loops over ranks
rather than rounded counts.
"""

from __future__ import annotations

import math

from walkerevo.config.models import EvolutionConfig


def loop_count(bound: float) -> int:
    """Number of ranks ``i = 0, 1, ...`` satisfying ``i < bound``."""
    return max(0, math.ceil(bound))


class PopulationBands:
    def __init__(self, config: EvolutionConfig):
        self.config = config
        self.size = config.population_size

    @property
    def last(self) -> int:
        return self.size - 1

    @property
    def reap_threshold(self) -> float:
        return self.last * (1.0 - self.config.reap_fraction)

    def reaped_ranks(self) -> list[int]:
        """Ranks marked for replacement, worst first."""
        ranks = []
        i = self.last
        while i >= 0 and i >= self.reap_threshold:
            ranks.append(i)
            i -= 1
        return ranks

    def crossover_count(self) -> int:
        return loop_count(self.size * self.config.crossover_fraction)

    def random_count(self) -> int:
        return loop_count(self.last * (self.config.reap_fraction - self.config.crossover_fraction))

    def elite_rank(self, u: float) -> int:
        return int(self.last * self.config.elite_fraction * u)

    def non_elite_rank(self, u: float) -> int:
        elite = self.config.elite_fraction
        return int(self.last * elite + self.last * (1.0 - elite) * u)

    def mutation_band(self) -> range:
        start = int(self.size * self.config.elite_fraction)
        stop = loop_count(self.size * (self.config.elite_fraction + self.config.mutation_fraction))
        return range(start, max(start, stop))

    def mutation_rate(self, rank: int) -> float:
        """Linear ramp from 0 at the top of the band towards ``mutation_rate``."""
        width = self.size * self.config.mutation_fraction
        if width <= 0:
            return 0.0
        offset = rank - self.size * self.config.elite_fraction
        return max(0.0, self.config.mutation_rate / width * offset)

    def protects_best(self) -> bool:
        """Whether some walkers survive a generation unmutated."""
        return self.reap_threshold != 0


class ReapCursor:
    """Walks the reaped ranks from the worst upwards.

    The cursor stops advancing once it reaches the reap threshold, so
    requests beyond the reaped share keep pointing at the last reaped rank;
    the caller detects exhaustion because that slot is no longer marked.
    """

    def __init__(self, bands: PopulationBands):
        self.bands = bands
        self.offset = 0

    def reset(self) -> None:
        self.offset = 0

    def next_rank(self) -> int | None:
        last = self.bands.last
        if last - self.offset >= self.bands.reap_threshold:
            self.offset += 1
        rank = last - self.offset + 1
        if rank > last:
            return None
        return rank
