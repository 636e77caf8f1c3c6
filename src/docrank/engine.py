"""Search engine combining keyword and embedding similarity ranking."""

import asyncio
from enum import Enum
from pathlib import Path
from typing import Optional

from .base import BaseCorpus, BaseEmbedding, BaseParser
from .config import DocRankConfig, SearchConfig
from .corpus import FileSystemCorpus, GitRepository
from .document import DocumentRecord, SearchOptions, SearchResult
from .embeddings import create_embedding
from .exceptions import CorpusError
from .keyword import keyword_score, tokenize_query
from .markdown import MarkdownParser
from .similarity import SimilarityRanker
from .snippet import extract_snippet
from .store import DocumentStore
from .summarizer import extract_structure, summarize_content
from .utils.logging import get_logger

logger = get_logger(__name__)


class EmbeddingState(str, Enum):
    """Lifecycle of the store's embeddings."""
    NOT_EMBEDDED = "not_embedded"
    EMBEDDING = "embedding"
    EMBEDDED = "embedded"


class SearchEngine:
    """Ranked-relevance search over an in-memory document store.

    Two ranking modes are supported:

    - keyword-only: raw keyword score, filtered by a minimum score
    - hybrid (default): weighted sum of the normalized keyword score and the
      cosine similarity between query and document embeddings, filtered by a
      minimum similarity

    The store is built on first use and embeddings are generated the first
    time a hybrid query runs. Both are single-flight: concurrent callers wait
    for the same in-flight operation.

    Example:
        ```python
        engine = SearchEngine(
            corpus=FileSystemCorpus("docs/src/content"),
            parser=MarkdownParser(),
            embedding=LocalEmbedding(),
        )

        results = await engine.search("manage component state", SearchOptions(section="learn"))
        for result in results:
            print(result.record.path, result.score, result.snippet)
        ```
    """

    def __init__(
        self,
        corpus: BaseCorpus,
        parser: BaseParser,
        embedding: BaseEmbedding,
        config: Optional[SearchConfig] = None,
        repository: Optional[GitRepository] = None,
    ):
        """Initialize the search engine.

        Args:
            corpus: Source of documents
            parser: Converts raw documents into records
            embedding: Embedding provider for hybrid ranking
            config: Scoring settings (defaults if None)
            repository: Repository the corpus is checked out from, if any
        """
        self.config = config or SearchConfig()
        self.repository = repository
        self.store = DocumentStore(corpus, parser)
        self.ranker = SimilarityRanker(
            embedding,
            max_chars=self.config.embedding_max_chars,
            body_chars=self.config.embedding_body_chars,
            batch_size=self.config.embedding_batch_size,
        )

        self.embedding_state = EmbeddingState.NOT_EMBEDDED
        self._embedded_generation = -1
        self._embedding_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(
        cls,
        config: DocRankConfig,
        embedding: Optional[BaseEmbedding] = None,
    ) -> "SearchEngine":
        """Create an engine reading markdown from the configured corpus."""
        corpus_config = config.corpus
        content_path = Path(corpus_config.local_path) / corpus_config.content_path

        if embedding is None:
            embedding = create_embedding(
                provider=config.embedding.provider,
                model=config.embedding.model,
                device=config.embedding.device,
                dimension=config.embedding.dimension,
                api_key=config.embedding.api_key,
                base_url=config.embedding.base_url,
            )

        repository = None
        if corpus_config.repo_url:
            repository = GitRepository(corpus_config.repo_url, corpus_config.local_path)

        return cls(
            corpus=FileSystemCorpus(content_path, corpus_config.extensions),
            parser=MarkdownParser(),
            embedding=embedding,
            config=config.search,
            repository=repository,
        )

    @classmethod
    async def open(
        cls,
        config: DocRankConfig,
        embedding: Optional[BaseEmbedding] = None,
    ) -> "SearchEngine":
        """Create an engine from configuration, syncing the repository if configured to."""
        engine = cls.from_config(config, embedding=embedding)

        if config.corpus.sync_on_start and engine.repository is not None:
            await engine.sync()

        return engine

    async def sync(self, repository: Optional[GitRepository] = None) -> bool:
        """Bring the source repository up to date and rebuild if it changed.

        Args:
            repository: Repository to sync (defaults to the engine's own)

        Returns:
            True if the index was rebuilt
        """
        repository = repository or self.repository
        if repository is None:
            raise CorpusError("No source repository configured")

        if not repository.is_cloned():
            await repository.clone()
            updated = True
        else:
            updated = await repository.pull()

        if updated:
            if isinstance(self.store.corpus, FileSystemCorpus):
                self.store.corpus.invalidate()
            await self.rebuild()
        return updated

    async def rebuild(self) -> int:
        """Rebuild the document store from the corpus.

        Embeddings must be generated again afterwards.

        Returns:
            Number of indexed documents
        """
        count = await self.store.rebuild()
        self.embedding_state = EmbeddingState.NOT_EMBEDDED
        return count

    @property
    def embeddings_ready(self) -> bool:
        return (
            self.embedding_state is EmbeddingState.EMBEDDED
            and self._embedded_generation == self.store.generation
        )

    async def generate_embeddings(self) -> None:
        """Attach embeddings to every stored record.

        Idempotent: a no-op once the current store contents are embedded.
        Concurrent calls share one in-flight pass. A rebuild that lands while
        a pass is running triggers another pass for the new records.

        Raises:
            EmbeddingError: If the provider fails; the store is then treated
                as not embedded until a later pass succeeds
        """
        while not self.embeddings_ready:
            if self._embedding_task is None:
                self._embedding_task = asyncio.ensure_future(self._generate_embeddings())
            task = self._embedding_task

            try:
                await asyncio.shield(task)
            finally:
                if task.done() and self._embedding_task is task:
                    self._embedding_task = None

    async def _generate_embeddings(self) -> None:
        records = await self.store.all()
        generation = self.store.generation

        self.embedding_state = EmbeddingState.EMBEDDING
        logger.info("Generating embeddings for documents (first run may take 1-2 minutes)...")

        try:
            await self.ranker.embed_records(records)
        except Exception as e:
            self.embedding_state = EmbeddingState.NOT_EMBEDDED
            logger.error(f"Failed to generate embeddings: {e}")
            raise

        self._embedded_generation = generation
        self.embedding_state = EmbeddingState.EMBEDDED
        logger.info(f"Embeddings generated for all {len(records)} documents")

    async def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
    ) -> list[SearchResult]:
        """Search the documents.

        Args:
            query: Search query string
            options: Section filter, limit, minimum score and mode override

        Returns:
            Results sorted by descending score
        """
        if not query.strip():
            return []

        options = options or SearchOptions()
        await self.store.ensure_built()

        use_semantic = options.use_semantic_search
        if use_semantic is None:
            use_semantic = self.config.semantic_search_enabled

        if use_semantic:
            return await self._hybrid_search(query, options)

        return await self._keyword_search(query, options)

    def _limit(self, options: SearchOptions) -> int:
        return min(options.limit or self.config.default_limit, self.config.max_limit)

    async def _candidates(self, options: SearchOptions) -> list[DocumentRecord]:
        if options.section:
            return await self.store.by_section(options.section)
        return await self.store.all()

    def _finish(
        self,
        scored: list[tuple[DocumentRecord, float]],
        terms: list[str],
        options: SearchOptions,
    ) -> list[SearchResult]:
        scored.sort(key=lambda item: item[1], reverse=True)

        return [
            SearchResult(
                record=record,
                score=score,
                snippet=extract_snippet(
                    record,
                    terms,
                    radius=self.config.snippet_radius,
                    fallback_chars=self.config.snippet_fallback_chars,
                ),
            )
            for record, score in scored[: self._limit(options)]
        ]

    async def _keyword_search(
        self,
        query: str,
        options: SearchOptions,
    ) -> list[SearchResult]:
        min_score = options.min_score
        if min_score is None:
            min_score = self.config.min_score

        terms = tokenize_query(query)
        scored = []

        for record in await self._candidates(options):
            score = keyword_score(record, terms)
            if score >= min_score:
                scored.append((record, score))

        return self._finish(scored, terms, options)

    async def _hybrid_search(
        self,
        query: str,
        options: SearchOptions,
    ) -> list[SearchResult]:
        await self.generate_embeddings()

        query_embedding = await self.ranker.embed(query)
        terms = tokenize_query(query)

        candidates = await self._candidates(options)
        # a rebuild may have replaced the records since the pass finished
        while any(record.embedding is None for record in candidates):
            await self.generate_embeddings()
            candidates = await self._candidates(options)

        scored = []
        for record in candidates:
            keyword_component = keyword_score(record, terms) / self.config.keyword_normalizer
            semantic_component = self.ranker.similarity(query_embedding, record.embedding)

            if semantic_component < self.config.semantic_min_similarity:
                continue

            score = (
                self.config.hybrid_keyword_weight * keyword_component
                + self.config.hybrid_semantic_weight * semantic_component
            )
            scored.append((record, score))

        return self._finish(scored, terms, options)

    async def lookup(self, path: str) -> Optional[DocumentRecord]:
        """Get a document by path; ``.md`` and other extensions are ignored."""
        return await self.store.lookup(path)

    async def list_sections(self) -> list[str]:
        """List the configured sections, or those present in the corpus."""
        if self.config.sections is not None:
            return list(self.config.sections)
        return await self.store.sections()

    async def by_section(self, section: str) -> list[DocumentRecord]:
        """Get all documents in a section."""
        return await self.store.by_section(section)

    async def summarize(self, path: str, max_length: int = 1500) -> Optional[str]:
        """Summarize a document's markdown content, or None if it is unknown."""
        record = await self.lookup(path)
        if record is None:
            return None
        return summarize_content(record.content, max_length=max_length)

    async def outline(self, path: str) -> Optional[str]:
        """Outline a document's headings, or None if it is unknown."""
        record = await self.lookup(path)
        if record is None:
            return None
        return extract_structure(record.content)

    def dispose(self) -> None:
        """Release the indexed documents and their embeddings."""
        if self._embedding_task is not None and not self._embedding_task.done():
            self._embedding_task.cancel()
        self._embedding_task = None
        self.store.dispose()
        self.embedding_state = EmbeddingState.NOT_EMBEDDED
        self._embedded_generation = -1
