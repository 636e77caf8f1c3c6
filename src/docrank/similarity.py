"""Embedding similarity and per-document embedding generation."""

import logging
import math
from typing import Iterable, Sequence

from .base import BaseEmbedding
from .document import DocumentRecord
from .exceptions import EmbeddingError, VectorDimensionError

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Raises:
        VectorDimensionError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise VectorDimensionError(len(a), len(b))

    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


def embedding_text(record: DocumentRecord, body_chars: int = 1000) -> str:
    """Build the text embedded for a record: title, description, start of body."""
    return f"{record.title}. {record.description or ''}. {record.body[:body_chars]}"


class SimilarityRanker:
    """Embeds text through a provider and compares the resulting vectors.

    Input text is truncated to ``max_chars`` before it reaches the provider
    so encoding cost stays bounded regardless of document length.
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        max_chars: int = 2000,
        body_chars: int = 1000,
        batch_size: int = 32,
    ):
        """Initialize the ranker.

        Args:
            embedding: Embedding provider
            max_chars: Maximum characters submitted per text
            body_chars: Characters of body included in a record's embedding text
            batch_size: Records embedded per provider call
        """
        self.embedding = embedding
        self.max_chars = max_chars
        self.body_chars = body_chars
        self.batch_size = batch_size
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the provider once."""
        if self._initialized:
            return

        try:
            await self.embedding.initialize()
        except EmbeddingError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize embedding model: {e}")
            raise EmbeddingError(f"Embedding initialization failed: {e}") from e

        self._initialized = True

    async def embed(self, text: str) -> list[float]:
        """Embed a single text, truncated to ``max_chars``."""
        await self.initialize()

        try:
            return await self.embedding.embed_query(text[: self.max_chars])
        except EmbeddingError:
            raise
        except Exception as e:
            logger.error(f"Failed to generate embedding: {e}")
            raise EmbeddingError(f"Embedding generation failed: {e}") from e

    def similarity(self, a: list[float], b: list[float]) -> float:
        """Compare two vectors using the provider's similarity."""
        return self.embedding.similarity(a, b)

    def most_similar(
        self,
        query: list[float],
        vectors: Sequence[list[float]],
        k: int,
    ) -> list[tuple[int, float]]:
        """Rank vectors by similarity to the query.

        Args:
            query: Query embedding
            vectors: Candidate embeddings
            k: Maximum number of matches

        Returns:
            (index into ``vectors``, similarity) pairs, most similar first
        """
        scored = [(i, self.similarity(query, vector)) for i, vector in enumerate(vectors)]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[:k]

    async def embed_records(self, records: Iterable[DocumentRecord]) -> int:
        """Attach embeddings to every record that lacks one.

        The pass is all-or-nothing from the caller's point of view: the first
        provider failure aborts it. Records embedded before the failure keep
        their embeddings.

        Args:
            records: Records to embed

        Returns:
            Number of records embedded by this call

        Raises:
            EmbeddingError: If the provider fails
            VectorDimensionError: If the provider returns vectors of mixed length
        """
        records = list(records)
        pending = [r for r in records if r.embedding is None]
        if not pending:
            return 0

        await self.initialize()

        expected = self._expected_dimension(records)
        total = len(records)
        done = total - len(pending)
        count = 0

        for start in range(0, len(pending), self.batch_size):
            batch = pending[start : start + self.batch_size]
            texts = [
                embedding_text(record, self.body_chars)[: self.max_chars]
                for record in batch
            ]

            try:
                vectors = await self.embedding.embed_documents(texts)
            except EmbeddingError:
                raise
            except Exception as e:
                logger.error(f"Failed to generate embeddings: {e}")
                raise EmbeddingError(f"Embedding generation failed: {e}") from e

            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"Embedding generation failed: expected {len(batch)} vectors, "
                    f"got {len(vectors)}"
                )

            for record, vector in zip(batch, vectors):
                vector = [float(v) for v in vector]
                if expected is None:
                    expected = len(vector)
                elif len(vector) != expected:
                    raise VectorDimensionError(expected, len(vector))
                record.embedding = vector
                count += 1

                if (done + count) % 10 == 0:
                    logger.info(f"Generated embeddings for {done + count}/{total} documents...")

        return count

    def _expected_dimension(self, records: list[DocumentRecord]) -> int | None:
        for record in records:
            if record.embedding is not None:
                return len(record.embedding)
        return None
