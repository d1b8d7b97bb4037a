"""NetworkX graph of documents and their recommendations."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import networkx as nx

from ..ranking.types import Document, RankedRecommendation


@dataclass
class GraphStats:
    """Statistics about the recommendation graph."""

    nodes: int
    edges: int
    orphans: int
    most_recommended: list[tuple[str, int]]

    def __str__(self) -> str:
        top = ", ".join(f"{title}: {count}" for title, count in self.most_recommended)
        return (
            f"Graph Stats:\n"
            f"  Posts: {self.nodes}\n"
            f"  Recommendations: {self.edges}\n"
            f"  Never recommended: {self.orphans}\n"
            f"  Most recommended: {top or '(none)'}"
        )


class RecommendationGraph:
    """Directed graph with an edge from each post to each of its picks.

    Edges carry ``rank`` (1 = best), ``vector_distance`` and
    ``title_proximity_score``.
    """

    def __init__(self):
        self.graph = nx.DiGraph()

    @classmethod
    def from_results(
        cls,
        documents: Iterable[Document],
        recommendations: dict[str, list[RankedRecommendation]],
    ) -> "RecommendationGraph":
        rec_graph = cls()
        for document in documents:
            rec_graph.add_document(document)
        for recs in recommendations.values():
            rec_graph.add_recommendations(recs)
        return rec_graph

    def add_document(self, document: Document) -> None:
        self.graph.add_node(document.doc_id, type="Post", title=document.title)

    def add_recommendations(self, recommendations: list[RankedRecommendation]) -> None:
        """Add ranked picks for one source; unknown targets become placeholders."""
        for rank, rec in enumerate(recommendations, 1):
            for node_id in (rec.source_id, rec.target_id):
                if not self.graph.has_node(node_id):
                    self.graph.add_node(
                        node_id, type="Post", title=node_id, placeholder=True
                    )
            self.graph.add_edge(
                rec.source_id,
                rec.target_id,
                type="recommends",
                rank=rank,
                vector_distance=rec.vector_distance,
                title_proximity_score=rec.title_proximity_score,
            )

    def title(self, doc_id: str) -> str:
        return self.graph.nodes[doc_id].get("title", doc_id)

    def get_recommendations(self, doc_id: str) -> list[str]:
        """Targets recommended from ``doc_id``, best first."""
        return sorted(
            self.graph.successors(doc_id),
            key=lambda succ: self.graph.edges[doc_id, succ]["rank"],
        )

    def get_recommended_by(self, doc_id: str) -> list[str]:
        """Posts that recommend ``doc_id``."""
        return sorted(self.graph.predecessors(doc_id))

    def get_stats(self, top: int = 5) -> GraphStats:
        """Get statistics about the graph."""
        in_degrees = sorted(
            ((self.title(node), degree) for node, degree in self.graph.in_degree()),
            key=lambda item: (-item[1], item[0]),
        )
        return GraphStats(
            nodes=self.graph.number_of_nodes(),
            edges=self.graph.number_of_edges(),
            orphans=sum(1 for _, degree in in_degrees if degree == 0),
            most_recommended=[item for item in in_degrees[:top] if item[1] > 0],
        )

    def save(self, path: Path) -> None:
        """Save graph to JSON file."""
        data = nx.node_link_data(self.graph)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: Path) -> "RecommendationGraph":
        """Load graph from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        rec_graph = cls()
        rec_graph.graph = nx.node_link_graph(data)
        return rec_graph
