"""Corpus-wide term salience from per-document frequency scores."""

import logging
from collections import defaultdict
from typing import Iterable, Iterator

from ..index.errors import IndexStateError
from .types import TermObservation

log = logging.getLogger(__name__)


class TermWeightIndex:
    """Averages every observed score of a term across the corpus.

    Keys are case-insensitive. Observations are recorded while populating;
    :meth:`finalize` computes the means and makes the index read-only.
    """

    def __init__(self):
        self._observations: dict[str, list[float]] = defaultdict(list)
        self._averages: dict[str, float] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._observations)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and term.casefold() in self._observations

    @property
    def frozen(self) -> bool:
        return self._frozen

    def terms(self) -> Iterator[str]:
        return iter(sorted(self._observations))

    def record(self, term: str, score: float) -> None:
        """Append one observation for ``term``."""
        if self._frozen:
            raise IndexStateError("Term weights are finalized; rebuild to record more")
        self._observations[term.casefold()].append(float(score))

    def record_many(self, observations: Iterable[TermObservation]) -> int:
        count = 0
        for observation in observations:
            self.record(observation.term, observation.score)
            count += 1
        return count

    def finalize(self) -> None:
        """Compute per-term means and switch to read-only."""
        self._averages = {
            term: sum(scores) / len(scores)
            for term, scores in self._observations.items()
        }
        self._frozen = True
        log.info(f"Term weights finalized for {len(self._averages)} terms")

    def average_weight(self, term: str) -> float:
        """Mean recorded score for ``term``; 0.0 when never observed."""
        if not self._frozen:
            raise IndexStateError("Term weights are still populating; call finalize()")
        return self._averages.get(term.casefold(), 0.0)
