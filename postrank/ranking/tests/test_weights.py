import pytest

from postrank.index.errors import IndexStateError
from postrank.ranking.types import TermObservation
from postrank.ranking.weights import TermWeightIndex


def _finalized(observations: list[tuple[str, float]]) -> TermWeightIndex:
    weights = TermWeightIndex()
    for term, score in observations:
        weights.record(term, score)
    weights.finalize()
    return weights


def test_average_of_observations():
    weights = _finalized([("react", 0.2), ("react", 0.4), ("react", 0.6)])
    assert weights.average_weight("react") == pytest.approx(0.4)


def test_keys_are_case_insensitive():
    weights = _finalized([("React", 0.2), ("REACT", 0.4)])

    assert weights.average_weight("react") == pytest.approx(0.3)
    assert "rEaCt" in weights
    assert len(weights) == 1


def test_unseen_term_is_zero():
    weights = _finalized([("react", 0.5)])
    assert weights.average_weight("angular") == 0.0


def test_negative_averages_are_kept():
    weights = _finalized([("the", -0.1), ("the", -0.3)])
    assert weights.average_weight("the") == pytest.approx(-0.2)


def test_record_many():
    weights = TermWeightIndex()
    count = weights.record_many(
        [
            TermObservation("doc-a", "hooks", 0.1),
            TermObservation("doc-b", "hooks", 0.3),
        ]
    )
    weights.finalize()

    assert count == 2
    assert weights.average_weight("hooks") == pytest.approx(0.2)
    assert list(weights.terms()) == ["hooks"]


def test_state_transitions():
    weights = TermWeightIndex()
    weights.record("react", 1.0)

    with pytest.raises(IndexStateError):
        weights.average_weight("react")

    weights.finalize()
    assert weights.frozen

    with pytest.raises(IndexStateError):
        weights.record("react", 2.0)
