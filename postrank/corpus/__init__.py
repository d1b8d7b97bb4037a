"""Post ingestion: fetching, parsing, term scoring and embedding."""

from .builder import Corpus, build_corpus, document_id
from .github import FetchError, GitHubPostSource
from .posts import Post, load_posts
from .tfidf import compute_term_scores

__all__ = [
    "Corpus",
    "FetchError",
    "GitHubPostSource",
    "Post",
    "build_corpus",
    "compute_term_scores",
    "document_id",
    "load_posts",
]
