from __future__ import annotations

import numpy as np

from walkerevo.config.models import MorphologyConfig

WEIGHT_LOW = -1.0
WEIGHT_HIGH = 1.0


def weight_shape(morphology: MorphologyConfig) -> tuple[int, int]:
    """One row per touch sensor (segment), one column per joint."""
    return morphology.segment_count, morphology.joint_count


def random_weights(shape: tuple[int, int], rng: np.random.Generator) -> np.ndarray:
    return rng.uniform(WEIGHT_LOW, WEIGHT_HIGH, size=shape)
