from __future__ import annotations

import numpy as np

from walkerevo.walkers.weights import WEIGHT_HIGH, WEIGHT_LOW, random_weights

__all__ = ["crossover", "mutate", "random_weights"]


def crossover(mother: np.ndarray, father: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Uniform crossover: every weight comes from one parent, chosen by coin flip."""
    if mother.shape != father.shape:
        raise ValueError(f"Parent shapes differ: {mother.shape} vs {father.shape}")
    from_mother = rng.random(mother.shape) >= 0.5
    return np.where(from_mother, mother, father)


def mutate(weights: np.ndarray, rate: float, rng: np.random.Generator) -> tuple[np.ndarray, int]:
    """Reseed each weight with probability ``rate``.

    Returns the mutated copy and the number of weights replaced.
    """
    hit = rng.random(weights.shape) < rate
    fresh = rng.uniform(WEIGHT_LOW, WEIGHT_HIGH, size=weights.shape)
    return np.where(hit, fresh, weights), int(hit.sum())
