"""Title-aware re-ranking of nearest-neighbor results."""

from .config import DEFAULT_RECOMMENDER_CONFIG, RecommenderConfig
from .engine import RecommendationEngine, title_proximity_score
from .tokenize import TitleTokenizer
from .types import Document, RankedRecommendation, TermObservation
from .weights import TermWeightIndex

__all__ = [
    "DEFAULT_RECOMMENDER_CONFIG",
    "Document",
    "RankedRecommendation",
    "RecommendationEngine",
    "RecommenderConfig",
    "TermObservation",
    "TermWeightIndex",
    "TitleTokenizer",
    "title_proximity_score",
]
