"""Tests for the recommendation graph and its HTML rendering."""

from pathlib import Path

import pytest

from postrank.graph.builder import RecommendationGraph
from postrank.graph.visualize import create_web_visualization
from postrank.ranking.types import Document, RankedRecommendation


def _doc(doc_id: str, title: str) -> Document:
    return Document(doc_id, title, tuple(title.lower().split()), (1.0, 0.0))


@pytest.fixture
def graph():
    documents = [_doc("a", "Intro to React"), _doc("b", "React Hooks"), _doc("c", "Pasta")]
    recommendations = {
        "a": [
            RankedRecommendation("a", "b", 0.1, 0.9),
            RankedRecommendation("a", "c", 0.8, 0.0),
        ],
        "b": [RankedRecommendation("b", "a", 0.1, 0.9)],
        "c": [],
    }
    return RecommendationGraph.from_results(documents, recommendations)


def test_edges_follow_rank(graph):
    assert graph.get_recommendations("a") == ["b", "c"]
    assert graph.graph.edges["a", "b"]["rank"] == 1
    assert graph.graph.edges["a", "c"]["title_proximity_score"] == 0.0
    assert graph.get_recommended_by("a") == ["b"]


def test_stats(graph):
    stats = graph.get_stats()

    assert stats.nodes == 3
    assert stats.edges == 3
    assert stats.orphans == 0
    assert stats.most_recommended[0] == ("Intro to React", 1)
    assert "Posts: 3" in str(stats)


def test_unknown_target_becomes_placeholder():
    rec_graph = RecommendationGraph()
    rec_graph.add_document(_doc("a", "Alpha"))
    rec_graph.add_recommendations([RankedRecommendation("a", "ghost", 0.2, 0.0)])

    assert rec_graph.graph.nodes["ghost"]["placeholder"] is True
    assert rec_graph.title("ghost") == "ghost"


def test_save_and_load_round_trip(graph, tmp_path: Path):
    path = tmp_path / "out" / "graph.json"
    graph.save(path)

    loaded = RecommendationGraph.load(path)

    assert loaded.get_recommendations("a") == ["b", "c"]
    assert loaded.title("c") == "Pasta"


def test_web_visualization_writes_html(graph, tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    output = create_web_visualization(graph, tmp_path / "html" / "graph.html")

    assert output.exists()
    assert "Intro to React" in output.read_text(encoding="utf-8")
