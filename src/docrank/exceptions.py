"""
docrank exceptions.
"""


class DocRankError(Exception):
    """Base exception for docrank errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class CorpusError(DocRankError):
    """Raised when a document or the source repository cannot be accessed."""

    def __init__(self, message: str, doc_id: str | None = None):
        self.doc_id = doc_id
        if doc_id is not None:
            message = f"Failed to read document at {doc_id}: {message}"
        super().__init__(message)


class ParseError(DocRankError):
    """Raised when raw document content cannot be parsed into a record."""

    def __init__(self, doc_id: str, message: str):
        self.doc_id = doc_id
        super().__init__(f"Failed to parse document {doc_id}: {message}")


class EmbeddingError(DocRankError):
    """Raised when the embedding provider fails to initialize or embed."""


class VectorDimensionError(DocRankError, ValueError):
    """Raised when two vectors that must share a dimension do not."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vectors must have same length (expected {expected}, got {actual})"
        )


class ConfigError(DocRankError):
    """Raised when a configuration file cannot be loaded."""
