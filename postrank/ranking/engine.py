"""Hybrid recommendation ranking.

Candidates come from the ANN index ordered by vector distance, then get
re-ranked by how much salient title vocabulary they share with the source
document. Vector distance only breaks ties between equal title scores.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from ..index.distance import DistanceFn, cosine_distance
from ..index.errors import DuplicateIdError, IndexStateError
from ..index.hnsw import SmallWorldIndex
from .config import DEFAULT_RECOMMENDER_CONFIG, RecommenderConfig
from .tokenize import TitleTokenizer
from .types import Document, RankedRecommendation, TermObservation
from .weights import TermWeightIndex

log = logging.getLogger(__name__)


def title_proximity_score(
    source_tokens: frozenset[str],
    target_tokens: frozenset[str],
    weights: TermWeightIndex,
) -> float:
    """Sum of average weights of shared tokens, ignoring weights <= 0."""
    score = 0.0
    # sorted so the float sum is identical on every run
    for token in sorted(source_tokens & target_tokens):
        weight = weights.average_weight(token)
        if weight > 0:
            score += weight
    return score


def _recommendation_sort_key(rec: RankedRecommendation) -> tuple[float, float, str]:
    return (-rec.title_proximity_score, rec.vector_distance, rec.target_id)


def sort_recommendations(
    recommendations: Iterable[RankedRecommendation],
) -> list[RankedRecommendation]:
    """Title score descending, then vector distance ascending."""
    return sorted(recommendations, key=_recommendation_sort_key)


class RecommendationEngine:
    """Produces a ranked shortlist of related documents for each document.

    Both indexes must already be frozen; use :meth:`build` to populate them
    from a corpus in one step.
    """

    def __init__(
        self,
        documents: Iterable[Document],
        index: SmallWorldIndex,
        weights: TermWeightIndex,
        config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
    ):
        if not index.frozen or not weights.frozen:
            raise IndexStateError("Indexes must be frozen before recommending")

        self.index = index
        self.weights = weights
        self.config = config
        self.tokenizer = TitleTokenizer(config.title_substitutions)

        self._documents: dict[str, Document] = {}
        for document in documents:
            if document.doc_id in self._documents:
                raise DuplicateIdError(document.doc_id)
            self._documents[document.doc_id] = document

        self._title_tokens = {
            doc_id: self.title_token_set(document)
            for doc_id, document in self._documents.items()
        }

    @classmethod
    def build(
        cls,
        documents: Iterable[Document],
        observations: Iterable[TermObservation],
        config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
        *,
        rng: random.Random | None = None,
        distance: DistanceFn = cosine_distance,
    ) -> "RecommendationEngine":
        """Populate and freeze both indexes, then return a ready engine."""
        documents = list(documents)

        weights = TermWeightIndex()
        recorded = weights.record_many(observations)
        weights.finalize()
        log.info(f"Recorded {recorded} term observations")

        index = SmallWorldIndex(
            m=config.m,
            ef_construction=config.ef_construction,
            ef_search=config.ef_search,
            level_lambda=config.effective_level_lambda,
            dimensions=config.dimensions,
            distance=distance,
            rng=rng,
        )
        log.info(f"Indexing {len(documents)} document vectors")
        index.add_items((document.doc_id, document.vector) for document in documents)
        index.freeze()

        return cls(documents, index, weights, config)

    @property
    def documents(self) -> tuple[Document, ...]:
        return tuple(self._documents.values())

    def get(self, doc_id: str) -> Document | None:
        return self._documents.get(doc_id)

    def title_token_set(self, document: Document) -> frozenset[str]:
        """Case-insensitive unique title tokens.

        Falls back to tokenizing the title when the document carries none.
        """
        if document.title_tokens:
            return frozenset(token.casefold() for token in document.title_tokens)
        return self.tokenizer.token_set(document.title)

    def recommend(
        self, document: Document, max_results: int | None = None
    ) -> list[RankedRecommendation]:
        """Ranked recommendations for ``document``, never including itself."""
        limit = self.config.max_results if max_results is None else max_results
        if limit <= 0:
            return []

        # every item is a candidate; the top n is only known after re-ranking
        neighbors = self.index.knn_search(document.vector, len(self.index))
        source_tokens = self.title_token_set(document)

        ranked: list[RankedRecommendation] = []
        for neighbor in neighbors:
            if neighbor.item_id == document.doc_id:
                continue
            target_tokens = self._title_tokens.get(neighbor.item_id)
            if target_tokens is None:
                log.warning(f"Index item {neighbor.item_id} has no document; skipped")
                continue

            ranked.append(
                RankedRecommendation(
                    source_id=document.doc_id,
                    target_id=neighbor.item_id,
                    vector_distance=neighbor.distance,
                    title_proximity_score=title_proximity_score(
                        source_tokens, target_tokens, self.weights
                    ),
                )
            )

        return sort_recommendations(ranked)[:limit]

    def recommend_all(
        self,
        max_results: int | None = None,
        workers: int | None = None,
    ) -> dict[str, list[RankedRecommendation]]:
        """Recommendations for every document, keyed by document id."""
        workers = workers or self.config.workers
        documents = list(self._documents.values())
        log.info(f"Building recommendations for {len(documents)} documents")

        if workers <= 1 or len(documents) <= 1:
            results = [self.recommend(doc, max_results) for doc in documents]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(
                    pool.map(lambda doc: self.recommend(doc, max_results), documents)
                )

        return {doc.doc_id: recs for doc, recs in zip(documents, results)}
