"""In-memory document store."""

import asyncio
from enum import Enum
from typing import Optional

from .base import BaseCorpus, BaseParser
from .document import DocumentRecord, normalize_path
from .utils.logging import get_logger

logger = get_logger(__name__)


class IndexState(str, Enum):
    """Lifecycle of a document store."""
    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"


class DocumentStore:
    """Holds the indexed corpus keyed by normalized path.

    The store is empty at construction and is populated wholesale by
    :meth:`rebuild`. Every read operation builds the store first if it has
    never been built, and waits for a rebuild that is already running.

    Example:
        ```python
        store = DocumentStore(FileSystemCorpus("docs"), MarkdownParser())
        record = await store.lookup("learn/hooks/useState.md")
        ```
    """

    def __init__(self, corpus: BaseCorpus, parser: BaseParser):
        """Initialize the store.

        Args:
            corpus: Source of document identifiers and raw content
            parser: Turns raw content into records
        """
        self.corpus = corpus
        self.parser = parser
        self.state = IndexState.EMPTY
        self.generation = 0

        self._records: dict[str, DocumentRecord] = {}
        self._rebuild_task: Optional[asyncio.Task] = None

    async def rebuild(self) -> int:
        """Replace the store's contents with a fresh read of the corpus.

        Concurrent calls share a single in-flight rebuild.

        Returns:
            Number of indexed documents
        """
        if self._rebuild_task is None:
            self._rebuild_task = asyncio.ensure_future(self._rebuild())
        task = self._rebuild_task

        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._rebuild_task is task:
                self._rebuild_task = None

    async def _rebuild(self) -> int:
        previous = self.state
        self.state = IndexState.BUILDING
        logger.info("Indexing documents...")

        try:
            doc_ids = await self.corpus.list_documents()
        except Exception:
            self.state = previous
            raise

        records: dict[str, DocumentRecord] = {}
        for doc_id in doc_ids:
            try:
                raw = await self.corpus.read_document(doc_id)
                record = await self.parser.parse(raw, doc_id)
            except Exception as e:
                logger.warning(f"Failed to index document {doc_id}: {e}")
                continue
            if record.path in records:
                logger.warning(f"Duplicate document path {record.path} from {doc_id}, replacing")
            records[record.path] = record

        self._records = records
        self.generation += 1
        self.state = IndexState.READY
        logger.info(f"Indexed {len(records)} documents")
        return len(records)

    async def ensure_built(self) -> None:
        """Build the store if it has never been built; wait for a running rebuild."""
        if self._rebuild_task is not None or self.state is not IndexState.READY:
            await self.rebuild()

    async def lookup(self, path: str) -> Optional[DocumentRecord]:
        """Get a record by path, with or without its file extension."""
        await self.ensure_built()

        exact = normalize_path(path, strip_extension=False)
        record = self._records.get(exact)
        if record is None:
            record = self._records.get(normalize_path(path))
        return record

    async def all(self) -> list[DocumentRecord]:
        """Return every record."""
        await self.ensure_built()
        return list(self._records.values())

    async def by_section(self, section: str) -> list[DocumentRecord]:
        """Return the records of one section (case-insensitive)."""
        await self.ensure_built()
        section = section.lower()
        return [r for r in self._records.values() if r.section.lower() == section]

    async def sections(self) -> list[str]:
        """Return the distinct section names, sorted."""
        await self.ensure_built()
        return sorted({r.section for r in self._records.values()})

    async def size(self) -> int:
        """Return the number of records."""
        await self.ensure_built()
        return len(self._records)

    def dispose(self) -> None:
        """Drop all records and return to the empty state."""
        if self._rebuild_task is not None and not self._rebuild_task.done():
            self._rebuild_task.cancel()
        self._rebuild_task = None
        self._records = {}
        self.state = IndexState.EMPTY
