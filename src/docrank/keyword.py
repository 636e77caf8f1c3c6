"""Keyword relevance scoring."""

from .document import DocumentRecord

TITLE_WEIGHT = 10.0
PATH_WEIGHT = 5.0
DESCRIPTION_WEIGHT = 3.0
BODY_OCCURRENCE_WEIGHT = 0.5


def tokenize_query(query: str) -> list[str]:
    """Lower-case a query and split it on whitespace."""
    return [term for term in query.lower().split() if term]


def keyword_score(record: DocumentRecord, terms: list[str]) -> float:
    """Score a record against lower-cased query terms.

    Each term contributes independently: a title hit, a path hit, a
    description hit, and half a point per occurrence in the body. The
    contributions are summed, not averaged, so records matching more terms
    or matching a term more often always score higher.
    """
    score = 0.0

    title = record.title.lower()
    path = record.path.lower()
    description = (record.description or "").lower()
    body = record.body.lower()

    for term in terms:
        if term in title:
            score += TITLE_WEIGHT

        if term in path:
            score += PATH_WEIGHT

        if term in description:
            score += DESCRIPTION_WEIGHT

        # str.count matches literally and without overlap
        score += body.count(term) * BODY_OCCURRENCE_WEIGHT

    return score
