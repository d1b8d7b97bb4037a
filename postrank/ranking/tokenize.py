"""Deterministic title normalization and tokenization."""

import re
from typing import Iterable

from .config import DEFAULT_TITLE_SUBSTITUTIONS

# letters and digits of any script, plus "#" and "+" (c#, c++)
_TOKEN_RE = re.compile(r"(?:[^\W_]|[#+])+")
_WS_RE = re.compile(r"\s+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse whitespace to single spaces."""
    if text is None:
        return ""
    return _WS_RE.sub(" ", text.replace("\n", " ").replace("\t", " ")).strip()


def tokenize(text: str | None) -> tuple[str, ...]:
    """Tokenize text deterministically (lowercase letter and digit runs, "#" and "+" kept)."""
    normalized = normalize_whitespace(text).lower()
    return tuple(_TOKEN_RE.findall(normalized))


class TitleTokenizer:
    """Applies the substitution table, then tokenizes.

    The same instance must be used for every title in a run so that
    ingestion and scoring agree on token boundaries.
    """

    def __init__(
        self,
        substitutions: Iterable[tuple[str, str]] = DEFAULT_TITLE_SUBSTITUTIONS,
    ):
        self.substitutions = tuple(substitutions)
        self._patterns = [
            (re.compile(re.escape(old), re.IGNORECASE), new)
            for old, new in self.substitutions
            if old
        ]

    def normalize(self, text: str | None) -> str:
        result = normalize_whitespace(text)
        for pattern, replacement in self._patterns:
            result = pattern.sub(lambda _: replacement, result)
        return result

    def tokenize(self, text: str | None) -> tuple[str, ...]:
        return tokenize(self.normalize(text))

    def token_set(self, text: str | None) -> frozenset[str]:
        return frozenset(self.tokenize(text))
