"""Assemble the finalized in-memory corpus the ranking engine consumes."""

import hashlib
import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

from ..ranking.tokenize import TitleTokenizer
from ..ranking.types import Document, TermObservation
from .posts import Post
from .tfidf import compute_term_scores

log = logging.getLogger(__name__)


class DocumentEmbedder(Protocol):
    def embed_batch(self, texts: list[str]) -> Iterable[list[float]]: ...


@dataclass(frozen=True)
class Corpus:
    documents: tuple[Document, ...]
    observations: tuple[TermObservation, ...]
    posts: dict[str, Post]


def document_id(title: str) -> str:
    """Stable 128-bit id derived from the title, as 32 hex chars."""
    return hashlib.blake2b(title.encode("utf-8"), digest_size=16).hexdigest()


def build_corpus(
    posts: Iterable[Post],
    embedder: DocumentEmbedder,
    tokenizer: TitleTokenizer | None = None,
) -> Corpus:
    """Tokenize, score and embed every post.

    Title tokens and content tokens go through the same tokenizer so that
    substituted compound terms line up between titles and term scores.
    """
    posts = list(posts)
    tokenizer = tokenizer or TitleTokenizer()

    by_id: dict[str, Post] = {}
    for post in posts:
        doc_id = document_id(post.title)
        if doc_id in by_id:
            raise ValueError(
                f"Posts {by_id[doc_id].source or by_id[doc_id].post_id} and "
                f"{post.source or post.post_id} share the title {post.title!r}"
            )
        by_id[doc_id] = post

    log.info(f"Scoring terms across {len(by_id)} posts")
    content_tokens = {
        doc_id: tokenizer.tokenize(post.content) for doc_id, post in by_id.items()
    }
    observations = tuple(compute_term_scores(content_tokens))

    log.info(f"Embedding {len(by_id)} posts")
    vectors = list(embedder.embed_batch([post.content for post in by_id.values()]))
    if len(vectors) != len(by_id):
        raise RuntimeError(
            f"Embedder returned {len(vectors)} vectors for {len(by_id)} posts"
        )

    documents = tuple(
        Document(
            doc_id=doc_id,
            title=post.title,
            title_tokens=tokenizer.tokenize(post.title),
            vector=tuple(float(v) for v in vector),
        )
        for (doc_id, post), vector in zip(by_id.items(), vectors)
    )
    return Corpus(documents=documents, observations=observations, posts=by_id)
