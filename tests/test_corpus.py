"""Tests for the filesystem corpus and git repository handle."""

import pytest

from docrank import (
    CorpusError,
    DummyEmbedding,
    FileSystemCorpus,
    GitRepository,
    MarkdownParser,
    SearchEngine,
    SearchOptions,
)


@pytest.fixture
def content_dir(tmp_path):
    """A small markdown tree on disk."""
    root = tmp_path / "content"
    (root / "learn" / "hooks").mkdir(parents=True)
    (root / "reference").mkdir()

    (root / "learn" / "index.md").write_text(
        "---\ntitle: Quick Start\n---\nWelcome to the docs.", encoding="utf-8"
    )
    (root / "learn" / "hooks" / "use-state.md").write_text(
        "---\ntitle: useState\ndescription: Add a state variable\n---\n"
        "# useState\n\nuseState lets you add **state** to a component.",
        encoding="utf-8",
    )
    (root / "reference" / "API.MD").write_text("API overview", encoding="utf-8")
    (root / "learn" / "notes.txt").write_text("not indexed", encoding="utf-8")
    return root


class TestFileSystemCorpus:
    """Tests for FileSystemCorpus."""

    @pytest.mark.asyncio
    async def test_list_documents(self, content_dir):
        """Test matching files are listed relative to the root, sorted."""
        corpus = FileSystemCorpus(content_dir)

        assert await corpus.list_documents() == [
            "learn/hooks/use-state.md",
            "learn/index.md",
            "reference/API.MD",
        ]

    @pytest.mark.asyncio
    async def test_list_section(self, content_dir):
        """Test listing one section."""
        corpus = FileSystemCorpus(content_dir)

        assert await corpus.list_section("learn") == [
            "learn/hooks/use-state.md",
            "learn/index.md",
        ]
        assert await corpus.list_section("community") == []

    @pytest.mark.asyncio
    async def test_missing_root(self, tmp_path):
        """Test a missing content directory lists nothing."""
        corpus = FileSystemCorpus(tmp_path / "nowhere")
        assert await corpus.list_documents() == []

    @pytest.mark.asyncio
    async def test_listing_is_cached(self, content_dir):
        """Test listings are cached until invalidated."""
        corpus = FileSystemCorpus(content_dir)
        await corpus.list_documents()

        (content_dir / "learn" / "new.md").write_text("New", encoding="utf-8")
        assert "learn/new.md" not in await corpus.list_documents()

        corpus.invalidate()
        assert "learn/new.md" in await corpus.list_documents()

    @pytest.mark.asyncio
    async def test_read_document(self, content_dir):
        """Test raw content is returned."""
        corpus = FileSystemCorpus(content_dir)
        assert await corpus.read_document("reference/API.MD") == "API overview"

    @pytest.mark.asyncio
    async def test_read_missing_document(self, content_dir):
        """Test unreadable documents raise CorpusError naming the path."""
        corpus = FileSystemCorpus(content_dir)

        with pytest.raises(CorpusError, match="Failed to read document at learn/missing.md") as exc_info:
            await corpus.read_document("learn/missing.md")

        assert exc_info.value.doc_id == "learn/missing.md"

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, content_dir):
        """Test paths outside the content root are refused."""
        (content_dir.parent / "secret.md").write_text("secret", encoding="utf-8")
        corpus = FileSystemCorpus(content_dir)

        with pytest.raises(CorpusError, match="escapes the content root"):
            await corpus.read_document("../secret.md")
        assert await corpus.exists("../secret.md") is False

    @pytest.mark.asyncio
    async def test_exists(self, content_dir):
        """Test existence checks."""
        corpus = FileSystemCorpus(content_dir)

        assert await corpus.exists("learn/index.md") is True
        assert await corpus.exists("learn/missing.md") is False

    @pytest.mark.asyncio
    async def test_engine_over_markdown_tree(self, content_dir):
        """Test the engine indexes and ranks a real markdown tree."""
        engine = SearchEngine(
            corpus=FileSystemCorpus(content_dir),
            parser=MarkdownParser(),
            embedding=DummyEmbedding(dimension=4),
        )

        results = await engine.search("state", SearchOptions(use_semantic_search=False))

        assert [r.record.path for r in results] == ["learn/hooks/use-state"]
        assert results[0].record.title == "useState"
        assert (await engine.lookup("reference/API")).body == "API overview"
        assert await engine.list_sections() == ["learn", "reference"]


class TestGitRepository:
    """Tests for GitRepository without network access."""

    def test_not_cloned(self, tmp_path):
        """Test a missing clone is detected."""
        repo = GitRepository("https://example.com/docs.git", tmp_path / "repo")
        assert repo.is_cloned() is False

    @pytest.mark.asyncio
    async def test_status_not_cloned(self, tmp_path):
        """Test status of a missing clone."""
        repo = GitRepository("https://example.com/docs.git", tmp_path / "repo")

        status = await repo.status()

        assert status.is_cloned is False
        assert status.current_commit is None
        assert status.last_updated is None

    @pytest.mark.asyncio
    async def test_pull_requires_clone(self, tmp_path):
        """Test pulling before cloning fails."""
        repo = GitRepository("https://example.com/docs.git", tmp_path / "repo")

        with pytest.raises(CorpusError, match="not cloned"):
            await repo.pull()

    @pytest.mark.asyncio
    async def test_ensure_cloned_keeps_existing_clone(self, tmp_path):
        """Test an existing clone is left alone."""
        (tmp_path / "repo" / ".git").mkdir(parents=True)
        repo = GitRepository("https://example.com/docs.git", tmp_path / "repo")

        await repo.ensure_cloned()

        assert repo.is_cloned() is True
