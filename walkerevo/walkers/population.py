from __future__ import annotations

from collections.abc import Iterator, Sequence

from loguru import logger
import numpy as np

from walkerevo.config.models import WalkerConfig
from walkerevo.walkers.walker import Walker

__all__ = ["Population"]


class Population(Sequence[Walker]):
    """Fixed-size arena of walkers addressed by slot index.

    Slots are never added, removed or reordered. Replacing a walker means
    releasing the old one and constructing a new one at the same index.
    """

    def __init__(self, size: int, config: WalkerConfig, rng: np.random.Generator):
        if size < 1:
            raise ValueError(f"Population size must be positive, got {size}")
        self.config = config
        self.rng = rng
        self._slots: list[Walker] = [Walker(i, config, rng=rng) for i in range(size)]
        logger.info("[Population] Spawned {} walkers", size)

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> Walker:
        return self._slots[index]

    def __iter__(self) -> Iterator[Walker]:
        return iter(self._slots)

    def respawn(self, index: int, weights: np.ndarray | None = None) -> Walker:
        """Rebuild the walker at ``index``; its weights carry over unless given."""
        old = self._slots[index]
        carried = old.weights if weights is None else weights
        old.release()
        walker = Walker(index, self.config, weights=carried, rng=self.rng)
        self._slots[index] = walker
        return walker

    def weights_snapshot(self) -> np.ndarray:
        return np.stack([walker.weights for walker in self._slots])

    def evaluating(self) -> list[Walker]:
        return [walker for walker in self._slots if walker.is_evaluating]
