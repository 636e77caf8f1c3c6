"""
Document sources: a markdown tree on disk and the git repository it lives in.
"""

import asyncio
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Iterable

from .base import BaseCorpus
from .document import RepoStatus
from .exceptions import CorpusError
from .utils.logging import get_logger

logger = get_logger(__name__)


async def _run_blocking(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


class FileSystemCorpus(BaseCorpus):
    """
    Lists and reads documents below a content directory.

    Document identifiers are paths relative to the content root with forward
    slashes, e.g. ``learn/hooks/useState.md``. File listings are cached until
    :meth:`invalidate` is called.
    """

    def __init__(self, content_path: str | Path, extensions: Iterable[str] = (".md",)):
        """
        Initialize the corpus.

        Args:
            content_path: Root directory of the documents
            extensions: File extensions to include
        """
        self.content_path = Path(content_path).resolve()
        self.extensions = tuple(ext.lower() for ext in extensions)
        self._cache: dict[str, list[str]] = {}

    def _scan(self, root: Path) -> list[str]:
        if not root.is_dir():
            return []
        files = [
            p.relative_to(root).as_posix()
            for p in root.rglob("*")
            if p.is_file() and p.suffix.lower() in self.extensions
        ]
        files.sort()
        return files

    async def list_documents(self) -> list[str]:
        """Return every document below the content root."""
        cache_key = "all"

        if cache_key not in self._cache:
            self._cache[cache_key] = await _run_blocking(self._scan, self.content_path)

        return list(self._cache[cache_key])

    async def list_section(self, section: str) -> list[str]:
        """
        Return the documents of one section.

        Args:
            section: Top-level directory name (learn, reference, ...)

        Returns:
            Identifiers relative to the content root, empty if the section
            does not exist
        """
        cache_key = f"section:{section}"

        if cache_key not in self._cache:
            files = await _run_blocking(self._scan, self.content_path / section)
            self._cache[cache_key] = [f"{section}/{f}" for f in files]

        return list(self._cache[cache_key])

    def _resolve(self, doc_id: str) -> Path:
        path = (self.content_path / doc_id).resolve()
        if not path.is_relative_to(self.content_path):
            raise CorpusError("path escapes the content root", doc_id=doc_id)
        return path

    async def read_document(self, doc_id: str) -> str:
        """Read a document's raw content."""
        path = self._resolve(doc_id)

        try:
            return await _run_blocking(path.read_text, "utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CorpusError(str(e), doc_id=doc_id) from e

    async def exists(self, doc_id: str) -> bool:
        """Check whether a document exists."""
        try:
            path = self._resolve(doc_id)
        except CorpusError:
            return False
        return path.is_file()

    def invalidate(self) -> None:
        """Forget cached file listings."""
        self._cache.clear()


class GitRepository:
    """
    Keeps a local shallow clone of the documentation repository up to date.
    """

    def __init__(self, url: str, local_path: str | Path):
        """
        Initialize the repository handle.

        Args:
            url: Remote repository URL
            local_path: Directory of the local clone
        """
        self.url = url
        self.local_path = Path(local_path).resolve()

    def _git(self, *args: str, cwd: Path | None = None) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                cwd=str(cwd) if cwd else None,
            )
        except OSError as e:
            raise CorpusError(f"git {args[0]} failed: {e}") from e

        if result.returncode != 0:
            raise CorpusError(f"git {args[0]} failed: {result.stderr.strip()}")

        return result.stdout.strip()

    def is_cloned(self) -> bool:
        """Check whether the local clone exists."""
        return (self.local_path / ".git").exists()

    async def clone(self) -> None:
        """Shallow-clone the repository."""
        self.local_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {self.url}...")
        await _run_blocking(
            lambda: self._git("clone", "--depth", "1", self.url, str(self.local_path))
        )
        logger.info("Repository cloned successfully")

    async def ensure_cloned(self) -> None:
        """Clone the repository unless a local clone exists."""
        if self.is_cloned():
            logger.info("Repository already exists")
            return
        await self.clone()

    async def pull(self) -> bool:
        """
        Pull the latest changes.

        Returns:
            True if HEAD moved
        """
        if not self.is_cloned():
            raise CorpusError("Repository not cloned. Call ensure_cloned() first.")

        before = await _run_blocking(lambda: self._git("rev-parse", "HEAD", cwd=self.local_path))
        await _run_blocking(lambda: self._git("pull", cwd=self.local_path))
        after = await _run_blocking(lambda: self._git("rev-parse", "HEAD", cwd=self.local_path))

        updated = before != after
        if updated:
            logger.info("Repository updated successfully")
        else:
            logger.info("Repository already up to date")
        return updated

    async def status(self) -> RepoStatus:
        """Return the clone's current commit and its date."""
        if not self.is_cloned():
            return RepoStatus(is_cloned=False)

        try:
            output = await _run_blocking(
                lambda: self._git("log", "-1", "--format=%H %cI", cwd=self.local_path)
            )
        except CorpusError as e:
            logger.error(f"Failed to get repo status: {e}")
            return RepoStatus(is_cloned=True)

        commit, _, date = output.partition(" ")
        return RepoStatus(
            is_cloned=True,
            current_commit=commit or None,
            last_updated=datetime.fromisoformat(date) if date else None,
        )
