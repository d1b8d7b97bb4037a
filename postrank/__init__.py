"""Related-post recommendations from embeddings and title term weights."""

__version__ = "0.1.0"
