"""Tests for the document store."""

import asyncio

import pytest

from docrank import BaseCorpus, CorpusError, DocumentRecord, DocumentStore, IndexState


class SlowCorpus(BaseCorpus):
    """Corpus that yields to the event loop while listing."""

    def __init__(self, documents: dict[str, str]):
        self.documents = documents
        self.list_calls = 0

    async def list_documents(self) -> list[str]:
        self.list_calls += 1
        await asyncio.sleep(0.01)
        return list(self.documents)

    async def read_document(self, doc_id: str) -> str:
        await asyncio.sleep(0)
        return self.documents[doc_id]


class BrokenCorpus(BaseCorpus):
    """Corpus whose listing fails."""

    async def list_documents(self) -> list[str]:
        raise CorpusError("content directory missing")

    async def read_document(self, doc_id: str) -> str:
        raise AssertionError("not reached")


class TestDocumentStore:
    """Tests for DocumentStore."""

    @pytest.mark.asyncio
    async def test_empty_until_built(self, make_corpus, sample_records, json_parser):
        """Test the store starts empty and unbuilt."""
        corpus = make_corpus(sample_records)
        store = DocumentStore(corpus, json_parser)

        assert store.state is IndexState.EMPTY
        assert corpus.list_calls == 0

    @pytest.mark.asyncio
    async def test_rebuild_indexes_all_documents(self, make_corpus, sample_records, json_parser):
        """Test every document is read, parsed and keyed by path."""
        store = DocumentStore(make_corpus(sample_records), json_parser)

        count = await store.rebuild()

        assert count == 4
        assert store.state is IndexState.READY
        assert await store.size() == 4
        assert (await store.lookup("learn/hooks")).title == "Hooks Guide"

    @pytest.mark.asyncio
    async def test_rebuild_skips_unreadable_documents(self, make_corpus, sample_records, json_parser):
        """Test a failing document is skipped without aborting the rebuild."""
        corpus = make_corpus(sample_records, unreadable={"learn/routing.md"})
        store = DocumentStore(corpus, json_parser)

        count = await store.rebuild()

        assert count == 3
        assert await store.lookup("learn/routing") is None
        assert await store.lookup("learn/hooks") is not None

    @pytest.mark.asyncio
    async def test_rebuild_skips_unparsable_documents(self, make_corpus, sample_records, json_parser):
        """Test parser failures are skipped as well."""
        corpus = make_corpus(sample_records)
        corpus.documents["learn/broken.md"] = "{not json"
        store = DocumentStore(corpus, json_parser)

        assert await store.rebuild() == 4

    @pytest.mark.asyncio
    async def test_rebuild_replaces_contents(self, make_corpus, sample_records, json_parser):
        """Test a rebuild is a full replace, not a merge."""
        corpus = make_corpus(sample_records)
        store = DocumentStore(corpus, json_parser)
        await store.rebuild()

        del corpus.documents["learn/hooks.md"]
        await store.rebuild()

        assert await store.size() == 3
        assert await store.lookup("learn/hooks") is None
        assert store.generation == 2

    @pytest.mark.asyncio
    async def test_rebuild_is_idempotent(self, make_corpus, sample_records, json_parser):
        """Test rebuilding an unchanged corpus yields identical contents."""
        store = DocumentStore(make_corpus(sample_records), json_parser)

        await store.rebuild()
        first = [r.model_dump() for r in await store.all()]
        await store.rebuild()
        second = [r.model_dump() for r in await store.all()]

        assert first == second

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self, json_parser):
        """Test a corpus listing failure aborts the rebuild."""
        store = DocumentStore(BrokenCorpus(), json_parser)

        with pytest.raises(CorpusError, match="content directory missing"):
            await store.rebuild()

        assert store.state is IndexState.EMPTY

    @pytest.mark.asyncio
    async def test_read_triggers_implicit_build(self, make_corpus, sample_records, json_parser):
        """Test reading an unbuilt store builds it once."""
        corpus = make_corpus(sample_records)
        store = DocumentStore(corpus, json_parser)

        await store.all()
        await store.all()

        assert corpus.list_calls == 1
        assert store.state is IndexState.READY

    @pytest.mark.asyncio
    async def test_concurrent_reads_share_one_rebuild(self, sample_records, json_parser):
        """Test overlapping triggers await the same in-flight rebuild."""
        corpus = SlowCorpus({f"{r.path}.md": r.model_dump_json() for r in sample_records})
        store = DocumentStore(corpus, json_parser)

        sizes = await asyncio.gather(store.size(), store.rebuild(), store.all())

        assert corpus.list_calls == 1
        assert sizes[0] == 4
        assert sizes[1] == 4
        assert len(sizes[2]) == 4

    @pytest.mark.asyncio
    async def test_lookup_ignores_extension(self, make_corpus, sample_records, json_parser):
        """Test paths resolve with or without an extension."""
        store = DocumentStore(make_corpus(sample_records), json_parser)

        with_ext = await store.lookup("reference/react/useEffect.md")
        without_ext = await store.lookup("reference/react/useEffect")

        assert with_ext is not None
        assert with_ext is without_ext

    @pytest.mark.asyncio
    async def test_lookup_normalizes_slashes(self, make_corpus, sample_records, json_parser):
        """Test leading slashes and backslashes are normalized."""
        store = DocumentStore(make_corpus(sample_records), json_parser)

        assert await store.lookup("/learn/hooks.md") is not None
        assert await store.lookup("learn\\hooks") is not None

    @pytest.mark.asyncio
    async def test_lookup_miss_returns_none(self, make_corpus, sample_records, json_parser):
        """Test unknown paths are not an error."""
        store = DocumentStore(make_corpus(sample_records), json_parser)
        assert await store.lookup("learn/missing") is None

    @pytest.mark.asyncio
    async def test_by_section_is_case_insensitive(self, make_corpus, sample_records, json_parser):
        """Test section filtering ignores case."""
        store = DocumentStore(make_corpus(sample_records), json_parser)

        learn = await store.by_section("LEARN")

        assert {r.path for r in learn} == {"learn/hooks", "learn/routing"}
        assert await store.by_section("community") == []

    @pytest.mark.asyncio
    async def test_sections(self, make_corpus, sample_records, json_parser):
        """Test distinct sections are listed in sorted order."""
        store = DocumentStore(make_corpus(sample_records), json_parser)
        assert await store.sections() == ["blog", "learn", "reference"]

    @pytest.mark.asyncio
    async def test_dispose(self, make_corpus, sample_records, json_parser):
        """Test dispose empties the store."""
        corpus = make_corpus(sample_records)
        store = DocumentStore(corpus, json_parser)
        await store.rebuild()

        store.dispose()

        assert store.state is IndexState.EMPTY
        assert await store.size() == 4
        assert corpus.list_calls == 2


class TestDocumentRecord:
    """Tests for DocumentRecord."""

    def test_path_is_normalized(self):
        """Test paths lose leading slashes, backslashes and extensions."""
        record = DocumentRecord(path="\\learn\\hooks\\useState.md")
        assert record.path == "learn/hooks/useState"

    def test_section_derived_from_path(self):
        """Test the section is the first path segment."""
        record = DocumentRecord(path="reference/react/useEffect")
        assert record.section == "reference"
        assert record.model_dump()["section"] == "reference"

    def test_embedding_absent_by_default(self):
        """Test new records carry no embedding."""
        record = DocumentRecord(path="a/b")
        assert record.embedding is None
        assert record.description is None
