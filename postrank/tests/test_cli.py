"""End-to-end CLI tests with a stub embedder (no model download)."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from postrank import cli as cli_module
from postrank.cli import cli

POSTS = {
    "1,2020,1,1,0,0,0,react.md": "# Intro to React\n\nReact renders components.\n",
    "2,2020,2,1,0,0,0,hooks.md": "# React Hooks Guide\n\nHooks keep React state.\n",
    "3,2020,3,1,0,0,0,pasta.md": "# Cooking Pasta\n\nBoil the water, add salt.\n",
    "4,2020,4,1,0,0,0,patterns.md": "# Advanced React Patterns\n\nCompound React components.\n",
}


class _StubEmbedder:
    def __init__(self, model: str):
        self.model = model

    def embed_batch(self, texts):
        for text in texts:
            if "Pasta" in text:
                yield [0.0, 1.0, 0.0]
            elif "Hooks" in text:
                yield [0.9, 0.1, 0.0]
            elif "Advanced" in text:
                yield [0.8, 0.2, 0.0]
            else:
                yield [1.0, 0.0, 0.0]


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "posts"
    directory.mkdir()
    for name, body in POSTS.items():
        (directory / name).write_text(body, encoding="utf-8")
    return directory


@pytest.fixture(autouse=True)
def stub_embedder(monkeypatch):
    monkeypatch.setattr(cli_module, "Embedder", _StubEmbedder)


def test_recommend_json(posts_dir: Path, tmp_path: Path):
    output = tmp_path / "out" / "recs.json"

    result = CliRunner().invoke(
        cli,
        ["recommend", str(posts_dir), "--format", "json", "--seed", "1", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    by_title = {entry["title"]: entry for entry in payload}
    assert list(by_title) == [
        "Advanced React Patterns",
        "Cooking Pasta",
        "Intro to React",
        "React Hooks Guide",
    ]

    intro = by_title["Intro to React"]
    assert [r["title"] for r in intro["recommendations"]] == [
        "React Hooks Guide",
        "Advanced React Patterns",
        "Cooking Pasta",
    ]
    for entry in payload:
        assert entry["id"] not in {r["id"] for r in entry["recommendations"]}


def test_recommend_text_with_limit(posts_dir: Path):
    result = CliRunner().invoke(
        cli, ["recommend", str(posts_dir), "-n", "1", "--seed", "1"]
    )

    assert result.exit_code == 0, result.output
    assert "Intro to React\n" in result.output
    assert "Cooking Pasta" in result.output


def test_recommend_with_config_file(posts_dir: Path, tmp_path: Path):
    config = tmp_path / "postrank.yaml"
    config.write_text("max_results: 2\nm: 4\n", encoding="utf-8")
    output = tmp_path / "recs.json"

    result = CliRunner().invoke(
        cli,
        ["recommend", str(posts_dir), "--config", str(config), "--format", "json", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert all(len(entry["recommendations"]) == 2 for entry in payload)


def test_invalid_config_exits(posts_dir: Path, tmp_path: Path):
    config = tmp_path / "bad.yaml"
    config.write_text("bogus: 1\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["recommend", str(posts_dir), "--config", str(config)])

    assert result.exit_code == 1
    assert "bogus" in result.output


def test_empty_directory_exits(tmp_path: Path):
    empty = tmp_path / "empty"
    empty.mkdir()

    result = CliRunner().invoke(cli, ["recommend", str(empty)])

    assert result.exit_code == 1
    assert "No posts found" in result.output


def test_visualize(posts_dir: Path, tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    html = tmp_path / "graph.html"
    graph_json = tmp_path / "graph.json"

    result = CliRunner().invoke(
        cli,
        ["visualize", str(posts_dir), "-o", str(html), "--save-json", str(graph_json), "--seed", "2"],
    )

    assert result.exit_code == 0, result.output
    assert html.exists()
    assert graph_json.exists()
    assert "Posts: 4" in result.output


def test_fetch(tmp_path: Path, monkeypatch):
    calls = {}

    class _Source:
        def __init__(self, owner, repo, folder, **kwargs):
            calls.update(owner=owner, repo=repo, folder=folder, **kwargs)

        def __enter__(self):
            return self

        def __exit__(self, *args):
            return None

        def fetch_to_directory(self, dest):
            return [Path(dest) / "1,2020,1,1,0,0,0,a.md"]

    monkeypatch.setattr(cli_module, "GitHubPostSource", _Source)
    monkeypatch.setenv("GITHUB_TOKEN", "secret")

    result = CliRunner().invoke(
        cli, ["fetch", "someone", "blog", "posts", str(tmp_path / "dest"), "--workers", "2"]
    )

    assert result.exit_code == 0, result.output
    assert "Saved 1 posts" in result.output
    assert calls["token"] == "secret"
    assert calls["max_workers"] == 2
