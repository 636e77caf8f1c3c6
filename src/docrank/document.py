"""Document record and search result data structures."""

import posixpath
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

_LEADING_SLASHES = re.compile(r"^/+")


def normalize_path(path: str, strip_extension: bool = True) -> str:
    """Normalize a document path.

    Converts backslashes to forward slashes, drops leading slashes and strips
    the extension of the final segment, e.g. ``/learn/hooks/useState.md`` ->
    ``learn/hooks/useState``.
    """
    normalized = _LEADING_SLASHES.sub("", path.replace("\\", "/"))
    if not strip_extension:
        return normalized
    root, _ext = posixpath.splitext(normalized)
    return root


def section_of(path: str) -> str:
    """Return the first segment of a normalized path."""
    return normalize_path(path).split("/")[0] or "unknown"


class DocumentRecord(BaseModel):
    """An indexed document.

    Attributes:
        path: Normalized unique identifier (no leading slash, no extension)
        title: Human-readable title
        description: Optional short summary
        body: Plain text used for scoring and snippets
        content: Raw markup body, front matter removed
        metadata: Remaining front-matter fields
        embedding: Optional embedding vector, absent until generated
    """

    path: str
    title: str = ""
    description: Optional[str] = None
    body: str = ""
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: Optional[list[float]] = None

    @field_validator("path")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_path(value)

    @computed_field
    @property
    def section(self) -> str:
        """First path segment, used as a coarse category."""
        return section_of(self.path)

    def __repr__(self) -> str:
        return f"DocumentRecord(path={self.path!r}, title={self.title!r})"


class SearchResult(BaseModel):
    """A ranked match for a query.

    Attributes:
        record: The matching document
        score: Relevance score (higher is better)
        snippet: Excerpt showing why the document matched
    """

    record: DocumentRecord
    score: float
    snippet: str = ""

    def __repr__(self) -> str:
        return f"SearchResult(path={self.record.path!r}, score={self.score:.4f})"


class SearchOptions(BaseModel):
    """Per-query options.

    Attributes:
        section: Restrict results to one section
        limit: Maximum number of results (clamped to the configured ceiling)
        min_score: Minimum keyword score in keyword-only mode
        use_semantic_search: Override the configured ranking mode
    """

    section: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    min_score: Optional[float] = None
    use_semantic_search: Optional[bool] = None


class RepoStatus(BaseModel):
    """State of the local clone of the source repository."""

    is_cloned: bool
    current_commit: Optional[str] = None
    last_updated: Optional[datetime] = None
