"""Snippet extraction for search results."""

from .document import DocumentRecord

ELLIPSIS = "..."


def find_first_match(text: str, terms: list[str]) -> tuple[int, str] | None:
    """Return the earliest (position, term) of any term in ``text``.

    Matching is case-insensitive. When two terms start at the same position
    the longer one wins, so the result does not depend on term order.
    """
    lowered = text.lower()
    best: tuple[int, str] | None = None

    for term in terms:
        term = term.lower()
        if not term:
            continue
        index = lowered.find(term)
        if index == -1:
            continue
        if best is None or index < best[0] or (index == best[0] and len(term) > len(best[1])):
            best = (index, term)

    return best


def extract_snippet(
    record: DocumentRecord,
    terms: list[str],
    radius: int = 75,
    fallback_chars: int = 150,
) -> str:
    """Build a short excerpt of the record's body around the first match.

    Args:
        record: Matched record
        terms: Lower-cased query terms
        radius: Characters kept on each side of the match
        fallback_chars: Characters of body used when nothing matches
            and the record has no description

    Returns:
        Excerpt, with ellipsis markers where the body was cut
    """
    body = record.body
    match = find_first_match(body, terms)

    if match is None:
        return record.description or body[:fallback_chars] + ELLIPSIS

    index, term = match
    start = max(0, index - radius)
    end = min(len(body), index + len(term) + radius)

    snippet = body[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(body):
        snippet = snippet + ELLIPSIS

    return snippet.strip()
