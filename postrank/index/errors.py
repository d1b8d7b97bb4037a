"""Exceptions raised by the nearest-neighbor and term-weight indexes."""

from ..errors import PostrankError


class AnnIndexError(PostrankError):
    """Base class for index errors."""


class DimensionMismatchError(AnnIndexError, ValueError):
    """A vector's length differs from the index's established dimension."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected vector of dimension {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class DuplicateIdError(AnnIndexError, ValueError):
    """An item id was inserted twice."""

    def __init__(self, item_id: str):
        super().__init__(f"Item already present in index: {item_id}")
        self.item_id = item_id


class IndexStateError(AnnIndexError, RuntimeError):
    """Operation not allowed in the index's current populating/queryable state."""
