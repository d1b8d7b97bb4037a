"""Local embedding generation using sentence-transformers."""

import logging
from typing import Iterator

from sentence_transformers import SentenceTransformer

log = logging.getLogger(__name__)

# Options:
# - sentence-transformers/all-MiniLM-L6-v2: fast, 384 dimensions
# - BAAI/bge-base-en-v1.5: better quality, 768 dimensions
DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
MAX_CHARS = 8000


class Embedder:
    """Generate document embeddings using a local sentence-transformers model."""

    def __init__(self, model: str = DEFAULT_MODEL):
        log.info(f"Loading embedding model: {model}")
        self.model = SentenceTransformer(model)
        self.dimensions = self.model.get_sentence_embedding_dimension()
        log.info(f"Model loaded. Dimensions: {self.dimensions}")

    def embed_batch(
        self, texts: list[str], batch_size: int = 32
    ) -> Iterator[list[float]]:
        """Generate embeddings for multiple texts.

        Args:
            texts: List of texts to embed
            batch_size: Number of texts per batch

        Yields:
            Embeddings for each text, in input order
        """
        texts = [t[:MAX_CHARS] for t in texts]

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            embeddings = self.model.encode(
                batch, normalize_embeddings=True, show_progress_bar=False
            )

            for emb in embeddings:
                yield emb.tolist()
