"""Typed contracts for the recommendation engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Document:
    doc_id: str
    title: str
    title_tokens: tuple[str, ...]
    vector: tuple[float, ...]

    def __post_init__(self):
        if not self.doc_id:
            raise ValueError("Document id may not be empty")
        if not self.title or not self.title.strip():
            raise ValueError(f"Document {self.doc_id} has a blank title")


@dataclass(frozen=True)
class TermObservation:
    doc_id: str
    term: str
    score: float


@dataclass(frozen=True)
class RankedRecommendation:
    source_id: str
    target_id: str
    vector_distance: float
    title_proximity_score: float
