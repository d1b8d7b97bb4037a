"""Approximate nearest-neighbor index."""

from .distance import cosine_distance, euclidean_distance
from .errors import (
    AnnIndexError,
    DimensionMismatchError,
    DuplicateIdError,
    IndexStateError,
    PostrankError,
)
from .hnsw import Neighbor, SmallWorldIndex

__all__ = [
    "AnnIndexError",
    "DimensionMismatchError",
    "DuplicateIdError",
    "IndexStateError",
    "Neighbor",
    "PostrankError",
    "SmallWorldIndex",
    "cosine_distance",
    "euclidean_distance",
]
