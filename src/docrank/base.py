"""Base classes and abstract interfaces for the ranking engine's collaborators."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .document import DocumentRecord


class BaseEmbedding(ABC):
    """Abstract base class for embedding models.

    Embedding models convert text into dense vector representations
    and compare two such vectors.
    """

    async def initialize(self) -> None:
        """Prepare the model for use.

        Called once before the first embedding pass. Providers that load a
        model should cache it so later calls are cheap.
        """

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of documents.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors
        """
        pass

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector
        """
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        pass

    def similarity(self, a: list[float], b: list[float]) -> float:
        """Compare two vectors. Cosine similarity unless overridden."""
        from .similarity import cosine_similarity

        return cosine_similarity(a, b)


class BaseCorpus(ABC):
    """Abstract base class for document sources.

    A corpus lists document identifiers and returns their raw content.
    """

    @abstractmethod
    async def list_documents(self) -> list[str]:
        """Return the identifiers of every document in the corpus."""
        pass

    @abstractmethod
    async def read_document(self, doc_id: str) -> str:
        """Return the raw content of one document.

        Raises:
            CorpusError: If the document cannot be read
        """
        pass


class BaseParser(ABC):
    """Abstract base class for document parsers.

    Parsers turn raw document content into normalized records.
    """

    @abstractmethod
    async def parse(self, raw: str, doc_id: str) -> "DocumentRecord":
        """Parse raw content into a document record.

        Args:
            raw: Raw document content
            doc_id: Identifier the content was read from

        Returns:
            Parsed document record
        """
        pass
