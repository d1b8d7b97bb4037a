"""Per-document TF-IDF term scores."""

from typing import Iterator, Mapping, Sequence

from sklearn.feature_extraction.text import TfidfVectorizer

from ..ranking.types import TermObservation


def _pretokenized(tokens: Sequence[str]) -> Sequence[str]:
    return tokens


def compute_term_scores(
    documents: Mapping[str, Sequence[str]],
) -> Iterator[TermObservation]:
    """Yield one TF-IDF observation per (document, distinct term).

    ``documents`` maps doc ids to already tokenized text. ``tf`` is the
    term's share of the document's tokens and ``idf`` is ``ln(N / df)``,
    i.e. scikit-learn's unsmoothed idf without its ``+ 1`` offset, so a term
    found in every document scores 0.
    """
    doc_ids = list(documents)
    token_lists = [list(documents[doc_id]) for doc_id in doc_ids]
    if not any(token_lists):
        return

    vectorizer = TfidfVectorizer(analyzer=_pretokenized, smooth_idf=False, norm=None)
    matrix = vectorizer.fit_transform(token_lists).tocsr()
    matrix.sort_indices()
    terms = vectorizer.get_feature_names_out()
    idf = vectorizer.idf_

    for row, doc_id in enumerate(doc_ids):
        length = len(token_lists[row])
        start, end = matrix.indptr[row], matrix.indptr[row + 1]
        # cells hold count * idf; columns are in alphabetical term order
        for col, value in zip(matrix.indices[start:end], matrix.data[start:end]):
            tf = value / idf[col] / length
            yield TermObservation(
                doc_id=doc_id,
                term=str(terms[col]),
                score=float(tf * (idf[col] - 1.0)),
            )
