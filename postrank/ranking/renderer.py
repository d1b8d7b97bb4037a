"""Console text and JSON rendering of recommendation lists."""

import json
from typing import Iterable

from .tokenize import normalize_whitespace
from .types import Document, RankedRecommendation

_MAX_TITLE_LEN = 120


def _sanitize_title(value: str | None, *, max_len: int = _MAX_TITLE_LEN) -> str:
    cleaned = normalize_whitespace(value)
    if len(cleaned) <= max_len:
        return cleaned
    return cleaned[: max_len - 3].rstrip() + "..."


def _ordered_documents(documents: Iterable[Document]) -> list[Document]:
    return sorted(documents, key=lambda doc: (doc.title.casefold(), doc.doc_id))


def _format_recommendation(rec: RankedRecommendation, title: str) -> str:
    return f"{rec.title_proximity_score:.3f} {rec.vector_distance:.3f} {title}"


def render_text(
    documents: Iterable[Document],
    recommendations: dict[str, list[RankedRecommendation]],
) -> str:
    """Plain-text report: each title, then its picks ordered by distance.

    Each pick line reads ``<title score> <vector distance> <title>``.
    """
    ordered = _ordered_documents(documents)
    titles = {doc.doc_id: doc.title for doc in ordered}

    blocks: list[str] = []
    for doc in ordered:
        lines = [_sanitize_title(doc.title)]
        recs = sorted(
            recommendations.get(doc.doc_id, []),
            key=lambda rec: (rec.vector_distance, rec.target_id),
        )
        for rec in recs:
            target_title = _sanitize_title(titles.get(rec.target_id, rec.target_id))
            lines.append(_format_recommendation(rec, target_title))
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks) + ("\n" if blocks else "")


def recommendations_payload(
    documents: Iterable[Document],
    recommendations: dict[str, list[RankedRecommendation]],
) -> list[dict]:
    """Structured payload in ranking order, one entry per document."""
    ordered = _ordered_documents(documents)
    titles = {doc.doc_id: doc.title for doc in ordered}

    return [
        {
            "id": doc.doc_id,
            "title": doc.title,
            "recommendations": [
                {
                    "id": rec.target_id,
                    "title": titles.get(rec.target_id, rec.target_id),
                    "vector_distance": rec.vector_distance,
                    "title_proximity_score": rec.title_proximity_score,
                }
                for rec in recommendations.get(doc.doc_id, [])
            ],
        }
        for doc in ordered
    ]


def render_json(
    documents: Iterable[Document],
    recommendations: dict[str, list[RankedRecommendation]],
    *,
    indent: int | None = 2,
) -> str:
    return json.dumps(
        recommendations_payload(documents, recommendations),
        indent=indent,
        ensure_ascii=False,
    )
