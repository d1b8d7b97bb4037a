import math

import pytest

from postrank.ranking.config import (
    DEFAULT_RECOMMENDER_CONFIG,
    DEFAULT_TITLE_SUBSTITUTIONS,
    RecommenderConfig,
)


def test_defaults():
    config = DEFAULT_RECOMMENDER_CONFIG

    assert config.m == 15
    assert config.max_results == 3
    assert config.title_substitutions == DEFAULT_TITLE_SUBSTITUTIONS
    assert config.effective_level_lambda == pytest.approx(1 / math.log(15))


def test_explicit_level_lambda():
    assert RecommenderConfig(level_lambda=0.5).effective_level_lambda == 0.5


def test_rejects_invalid_values():
    with pytest.raises(ValueError):
        RecommenderConfig(m=1)
    with pytest.raises(ValueError):
        RecommenderConfig(max_results=-1)
    with pytest.raises(ValueError):
        RecommenderConfig(workers=0)


def test_from_yaml(tmp_path):
    path = tmp_path / "postrank.yaml"
    path.write_text(
        "m: 8\n"
        "max_results: 5\n"
        "title_substitutions:\n"
        "  Node.js: nodejs\n"
        "  .NET: dotnet\n",
        encoding="utf-8",
    )

    config = RecommenderConfig.from_yaml(path)

    assert config.m == 8
    assert config.max_results == 5
    assert config.title_substitutions == (("Node.js", "nodejs"), (".NET", "dotnet"))


def test_from_yaml_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert RecommenderConfig.from_yaml(path) == RecommenderConfig()


def test_from_mapping_rejects_unknown_keys():
    with pytest.raises(ValueError, match="colour"):
        RecommenderConfig.from_mapping({"colour": "blue"})


def test_from_mapping_accepts_pair_lists():
    config = RecommenderConfig.from_mapping(
        {"title_substitutions": [["C#", "csharp"]]}
    )
    assert config.title_substitutions == (("C#", "csharp"),)
