"""Embedding model implementations."""

import asyncio
import functools
import hashlib
import logging
import math
from typing import Any, Optional

from .base import BaseEmbedding
from .exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class DummyEmbedding(BaseEmbedding):
    """A dummy embedding model for testing.

    Returns zero vectors of a specified dimension.
    Useful for testing without loading actual models.
    """

    def __init__(self, dimension: int = 384):
        """Initialize the dummy embedding.

        Args:
            dimension: Dimension of the embedding vectors
        """
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[0.0] * self._dimension for _ in texts]

    async def embed_query(self, text: str) -> list[float]:
        return [0.0] * self._dimension


class FakeEmbedding(BaseEmbedding):
    """Fake embedding that generates deterministic embeddings from text.

    Each lower-cased word is hashed into one of ``dimension`` buckets and the
    bucket counts are L2-normalized, so texts sharing words have a positive
    cosine similarity. Useful for testing when you want predictable,
    roughly meaningful embeddings without loading a model.
    """

    def __init__(self, dimension: int = 384, seed: int = 42):
        """Initialize the fake embedding.

        Args:
            dimension: Dimension of the embedding vectors
            seed: Seed mixed into the word hashes
        """
        self._dimension = dimension
        self.seed = seed

    @property
    def dimension(self) -> int:
        return self._dimension

    def _bucket(self, word: str) -> int:
        digest = hashlib.sha256(f"{self.seed}:{word}".encode()).digest()
        return int.from_bytes(digest[:8], "big") % self._dimension

    def _hash_text(self, text: str) -> list[float]:
        """Generate a deterministic embedding from the words of ``text``."""
        vector = [0.0] * self._dimension
        for word in text.lower().split():
            word = word.strip(".,;:!?()[]{}\"'`")
            if word:
                vector[self._bucket(word)] += 1.0

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._hash_text(text) for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        return self._hash_text(text)


class OpenAIEmbedding(BaseEmbedding):
    """OpenAI embedding model.

    Uses OpenAI's embedding API (text-embedding-3-small/large).

    Note: Requires the 'openai' extra to be installed.
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        batch_size: int = 100,
    ):
        """Initialize the OpenAI embedding model.

        Args:
            model: Model name (text-embedding-3-small, text-embedding-3-large)
            api_key: OpenAI API key (optional, uses env var if not provided)
            base_url: Optional base URL for API
            batch_size: Batch size for embedding documents
        """
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.batch_size = batch_size
        self._client = None

    @property
    def dimension(self) -> int:
        return self.MODEL_DIMENSIONS.get(self.model, 1536)

    def _get_client(self):
        """Get or create the OpenAI client."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError:
                raise ImportError(
                    "OpenAI embedding requires the 'openai' package. "
                    "Install it with: pip install docrank[openai]"
                )

            kwargs: dict[str, Any] = {}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            if self.base_url:
                kwargs["base_url"] = self.base_url

            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def initialize(self) -> None:
        try:
            self._get_client()
        except Exception as e:
            raise EmbeddingError(f"Embedding initialization failed: {e}") from e

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of documents using OpenAI API."""
        client = self._get_client()
        all_embeddings = []

        # Process in batches
        for i in range(0, len(texts), self.batch_size):
            batch = texts[i : i + self.batch_size]

            response = await client.embeddings.create(
                model=self.model,
                input=batch,
            )

            all_embeddings.extend(item.embedding for item in response.data)

        return all_embeddings

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query using OpenAI API."""
        client = self._get_client()

        response = await client.embeddings.create(
            model=self.model,
            input=text,
        )

        return response.data[0].embedding


@functools.lru_cache(maxsize=None)
def _load_sentence_transformer(model_name: str, device: Optional[str]):
    """Load a sentence-transformers model once per process."""
    try:
        from sentence_transformers import SentenceTransformer
    except ImportError:
        raise ImportError(
            "Local embedding requires 'sentence-transformers'. "
            "Install it with: pip install docrank[local]"
        )

    model = SentenceTransformer(model_name, device=device)
    logger.info(f"Loaded embedding model: {model_name}")
    return model


class LocalEmbedding(BaseEmbedding):
    """Local embedding model using sentence-transformers.

    Uses HuggingFace sentence-transformers models locally.
    No API calls required, runs entirely on the local machine.
    The first initialization downloads the model; loaded models are
    cached for the lifetime of the process.

    Note: Requires the 'local' extra to be installed.
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "all-MiniLM-L6-v2": 384,
        "all-mpnet-base-v2": 768,
        "paraphrase-multilingual-MiniLM-L12-v2": 384,
        "multi-qa-mpnet-base-dot-v1": 768,
    }

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        device: Optional[str] = None,
        normalize: bool = True,
    ):
        """Initialize the local embedding model.

        Args:
            model_name: Name of the sentence-transformers model
            device: Device to run on (cuda, cpu, mps). Auto-detected if None.
            normalize: Whether to normalize embeddings
        """
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self._model = None

    @property
    def dimension(self) -> int:
        return self.MODEL_DIMENSIONS.get(self.model_name, 384)

    async def initialize(self) -> None:
        """Load the model off the event loop."""
        if self._model is not None:
            return

        logger.info("Initializing embedding model (first run may take a moment)...")
        loop = asyncio.get_running_loop()
        try:
            self._model = await loop.run_in_executor(
                None, _load_sentence_transformer, self.model_name, self.device
            )
        except Exception as e:
            logger.error(f"Failed to initialize embedding model: {e}")
            raise EmbeddingError(f"Embedding initialization failed: {e}") from e

    def _get_model(self):
        """Get or load the sentence-transformers model."""
        if self._model is None:
            self._model = _load_sentence_transformer(self.model_name, self.device)
        return self._model

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of documents using local model."""
        model = self._get_model()

        # Run in thread pool to avoid blocking
        loop = asyncio.get_running_loop()
        embeddings = await loop.run_in_executor(
            None,
            lambda: model.encode(
                texts,
                normalize_embeddings=self.normalize,
                convert_to_numpy=True,
            ),
        )

        return embeddings.tolist()

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query using local model."""
        embeddings = await self.embed_documents([text])
        return embeddings[0]


def create_embedding(
    provider: str = "local",
    model: Optional[str] = None,
    device: Optional[str] = None,
    dimension: int = 384,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> BaseEmbedding:
    """Create an embedding provider by name.

    Args:
        provider: One of ``local``, ``openai`` or ``fake``
        model: Model name for the provider (provider default if None)
        device: Device for local models
        dimension: Vector dimension for the fake provider
        api_key: API key for OpenAI
        base_url: Base URL for OpenAI-compatible APIs

    Returns:
        Embedding provider instance
    """
    if provider == "local":
        return LocalEmbedding(model_name=model or "all-MiniLM-L6-v2", device=device)
    if provider == "openai":
        return OpenAIEmbedding(
            model=model or "text-embedding-3-small",
            api_key=api_key,
            base_url=base_url,
        )
    if provider == "fake":
        return FakeEmbedding(dimension=dimension)
    raise ValueError(f"Unknown embedding provider: {provider}")
