"""CLI for postrank."""

import logging
import random
from dataclasses import replace
from pathlib import Path

import click

from .corpus.builder import build_corpus
from .corpus.embedder import DEFAULT_MODEL, Embedder
from .corpus.github import FetchError, GitHubPostSource
from .corpus.posts import load_posts
from .errors import PostrankError
from .graph.builder import RecommendationGraph
from .graph.visualize import create_web_visualization
from .ranking.config import DEFAULT_RECOMMENDER_CONFIG, RecommenderConfig
from .ranking.engine import RecommendationEngine
from .ranking.renderer import render_json, render_text
from .ranking.tokenize import TitleTokenizer
from .ranking.types import Document, RankedRecommendation


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
def cli(verbose: bool):
    """postrank - related-post recommendations for a blog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None, max_results: int | None) -> RecommenderConfig:
    try:
        config = (
            RecommenderConfig.from_yaml(config_path)
            if config_path
            else DEFAULT_RECOMMENDER_CONFIG
        )
        if max_results is not None:
            config = replace(config, max_results=max_results)
    except ValueError as exc:
        raise SystemExit(f"Invalid config: {exc}") from exc
    return config


def _recommend(
    source: Path,
    config: RecommenderConfig,
    model: str,
    seed: int | None,
    workers: int | None,
) -> tuple[tuple[Document, ...], dict[str, list[RankedRecommendation]]]:
    """Load posts, build both indexes and rank every post."""
    try:
        posts = load_posts(source)
        if not posts:
            raise SystemExit(f"No posts found in {source}")

        click.echo(f"Loaded {len(posts)} posts; embedding with {model}", err=True)
        corpus = build_corpus(
            posts, Embedder(model), TitleTokenizer(config.title_substitutions)
        )

        rng = random.Random(seed) if seed is not None else None
        engine = RecommendationEngine.build(
            corpus.documents, corpus.observations, config, rng=rng
        )
        return corpus.documents, engine.recommend_all(workers=workers)
    except (PostrankError, ValueError, OSError) as exc:
        raise SystemExit(str(exc)) from exc


@cli.command()
@click.argument("owner")
@click.argument("repo")
@click.argument("folder")
@click.argument("dest", type=click.Path(file_okay=False, path_type=Path))
@click.option("--ref", default="master", help="Branch, tag or commit")
@click.option("--workers", type=int, default=4, help="Concurrent downloads")
@click.option("--retries", type=int, default=4, help="Retries per request")
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token")
def fetch(
    owner: str,
    repo: str,
    folder: str,
    dest: Path,
    ref: str,
    workers: int,
    retries: int,
    token: str | None,
):
    """Download post files from a GitHub repository folder into DEST."""
    click.echo(f"Fetching {owner}/{repo}/{folder}@{ref} -> {dest}")
    try:
        with GitHubPostSource(
            owner,
            repo,
            folder,
            ref=ref,
            token=token,
            max_workers=workers,
            max_retries=retries,
        ) as source:
            written = source.fetch_to_directory(dest)
    except (FetchError, ValueError, OSError) as exc:
        raise SystemExit(str(exc)) from exc

    click.echo(f"Saved {len(written)} posts")


@cli.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML config file")
@click.option("--max-results", "-n", type=int, default=None, help="Recommendations per post")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write to file instead of stdout")
@click.option("--model", default=DEFAULT_MODEL, help="sentence-transformers model")
@click.option("--workers", type=int, default=None, help="Parallel ranking threads")
@click.option("--seed", type=int, default=None, help="Seed for reproducible index layout")
def recommend(
    source: Path,
    config_path: Path | None,
    max_results: int | None,
    output_format: str,
    output: Path | None,
    model: str,
    workers: int | None,
    seed: int | None,
):
    """Recommend related posts for every post in SOURCE."""
    config = _load_config(config_path, max_results)
    documents, recommendations = _recommend(source, config, model, seed, workers)

    if output_format == "json":
        rendered = render_json(documents, recommendations)
    else:
        rendered = render_text(documents, recommendations)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
        click.echo(f"Wrote recommendations for {len(documents)} posts to {output}")
    else:
        click.echo(rendered, nl=False)


@cli.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=Path("output/recommendations.html"), help="HTML output file")
@click.option("--save-json", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also save the graph as JSON")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML config file")
@click.option("--max-results", "-n", type=int, default=None, help="Recommendations per post")
@click.option("--max-nodes", type=int, default=None, help="Limit nodes shown")
@click.option("--model", default=DEFAULT_MODEL, help="sentence-transformers model")
@click.option("--seed", type=int, default=None, help="Seed for reproducible index layout")
def visualize(
    source: Path,
    output: Path,
    save_json: Path | None,
    config_path: Path | None,
    max_results: int | None,
    max_nodes: int | None,
    model: str,
    seed: int | None,
):
    """Render the recommendation graph for SOURCE as interactive HTML."""
    config = _load_config(config_path, max_results)
    documents, recommendations = _recommend(source, config, model, seed, None)

    graph = RecommendationGraph.from_results(documents, recommendations)
    click.echo(str(graph.get_stats()))

    if save_json:
        graph.save(save_json)
        click.echo(f"Graph saved to {save_json}")

    path = create_web_visualization(graph, output, max_nodes=max_nodes)
    click.echo(f"Visualization saved to {path}")


def main():
    cli()


if __name__ == "__main__":
    main()
