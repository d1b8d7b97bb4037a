"""Root of the postrank exception hierarchy."""


class PostrankError(Exception):
    """Base class for all postrank errors."""
