"""Distance functions over embedding vectors."""

from typing import Callable

import numpy as np

DistanceFn = Callable[[np.ndarray, np.ndarray], float]


def cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    """1 - cosine similarity, clamped to be non-negative.

    A zero-norm vector has no direction, so it sits at distance 1 from
    everything.
    """
    norm = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if norm == 0.0:
        return 1.0
    distance = 1.0 - float(np.dot(a, b)) / norm
    if distance < 0.0:
        return 0.0
    return distance


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Straight-line distance."""
    return float(np.linalg.norm(a - b))
