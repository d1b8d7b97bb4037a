"""Configuration for index construction and recommendation ranking."""

import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

# Applied in order, case-insensitively, before titles are tokenized so that
# compound or punctuated names stay single tokens.
DEFAULT_TITLE_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("Bridge.net", "BridgeNET"),
    (".NET", "dotnet"),
    ("Full Text Indexer", "FullTextIndexer"),
)


@dataclass(frozen=True)
class RecommenderConfig:
    """Constants controlling the ANN graph and recommendation re-ranking."""

    m: int = 15
    ef_construction: int = 200
    ef_search: int = 50
    level_lambda: float | None = None
    dimensions: int | None = None

    max_results: int = 3
    workers: int = 1

    title_substitutions: tuple[tuple[str, str], ...] = field(
        default=DEFAULT_TITLE_SUBSTITUTIONS
    )

    def __post_init__(self):
        if self.m < 2:
            raise ValueError(f"m must be at least 2, got {self.m}")
        if self.max_results < 0:
            raise ValueError(f"max_results must be >= 0, got {self.max_results}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    @property
    def effective_level_lambda(self) -> float:
        """Layer multiplier; defaults to 1 / ln(m)."""
        if self.level_lambda is not None:
            return self.level_lambda
        return 1.0 / math.log(self.m)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "RecommenderConfig":
        """Build a config from plain data, rejecting unknown keys.

        ``title_substitutions`` may be a mapping or a list of pairs.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        values = dict(data)
        substitutions = values.get("title_substitutions")
        if substitutions is not None:
            if isinstance(substitutions, dict):
                pairs = substitutions.items()
            else:
                pairs = substitutions
            values["title_substitutions"] = tuple(
                (str(old), str(new)) for old, new in pairs
            )
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "RecommenderConfig":
        """Load a config from a YAML file (empty file gives the defaults)."""
        with open(path, encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_mapping(data)


DEFAULT_RECOMMENDER_CONFIG = RecommenderConfig()
