"""
Test configuration and fixtures.
"""

import asyncio

import pytest

from docrank import (
    BaseCorpus,
    BaseParser,
    CorpusError,
    DocumentRecord,
    FakeEmbedding,
    SearchConfig,
    SearchEngine,
)


class RecordCorpus(BaseCorpus):
    """In-memory corpus serving records as JSON."""

    def __init__(self, records: list[DocumentRecord], unreadable: set[str] | None = None):
        self.documents = {f"{r.path}.md": r.model_dump_json() for r in records}
        self.unreadable = unreadable or set()
        self.list_calls = 0
        self.read_calls = 0

    async def list_documents(self) -> list[str]:
        self.list_calls += 1
        return list(self.documents)

    async def read_document(self, doc_id: str) -> str:
        self.read_calls += 1
        if doc_id in self.unreadable:
            raise CorpusError("permission denied", doc_id=doc_id)
        return self.documents[doc_id]


class JsonParser(BaseParser):
    """Parses the JSON served by RecordCorpus."""

    async def parse(self, raw: str, doc_id: str) -> DocumentRecord:
        return DocumentRecord.model_validate_json(raw)


class FixedSimilarityEmbedding(FakeEmbedding):
    """Fake embedding whose similarity is a constant."""

    def __init__(self, value: float, dimension: int = 8, delay: float = 0.0):
        super().__init__(dimension=dimension)
        self.value = value
        self.delay = delay

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if self.delay:
            await asyncio.sleep(self.delay)
        return await super().embed_documents(texts)

    def similarity(self, a: list[float], b: list[float]) -> float:
        return self.value


class FailingEmbedding(FakeEmbedding):
    """Fake embedding that fails after a number of document batches."""

    def __init__(self, fail_after: int = 0, dimension: int = 8):
        super().__init__(dimension=dimension)
        self.fail_after = fail_after
        self.batches = 0

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if self.batches >= self.fail_after:
            raise RuntimeError("model unavailable")
        self.batches += 1
        return await super().embed_documents(texts)


@pytest.fixture
def sample_records():
    """A small corpus across three sections."""
    return [
        DocumentRecord(
            path="learn/hooks",
            title="Hooks Guide",
            description="Using hooks in components",
            body="useState stores state between renders of a component.",
        ),
        DocumentRecord(
            path="learn/routing",
            title="Routing",
            description="Navigating between pages",
            body="There is no state here, only links and pages.",
        ),
        DocumentRecord(
            path="reference/react/useEffect",
            title="useEffect",
            description="Synchronize a component with an external system",
            body="useEffect lets you run side effects after rendering.",
        ),
        DocumentRecord(
            path="blog/2024/react-19",
            title="React 19",
            body="React 19 is now stable. Actions and new hooks are available.",
        ),
    ]


@pytest.fixture
def make_corpus():
    """Factory for in-memory corpora."""
    return RecordCorpus


@pytest.fixture
def make_engine(sample_records):
    """Factory for engines over in-memory corpora."""

    def _make(records=None, embedding=None, config=None, unreadable=None):
        corpus = RecordCorpus(sample_records if records is None else records, unreadable)
        return SearchEngine(
            corpus=corpus,
            parser=JsonParser(),
            embedding=embedding or FakeEmbedding(dimension=64),
            config=config or SearchConfig(),
        )

    return _make


@pytest.fixture
def fixed_similarity():
    """Factory for embeddings with a constant similarity."""
    return FixedSimilarityEmbedding


@pytest.fixture
def failing_embedding():
    """Factory for embeddings that fail."""
    return FailingEmbedding


@pytest.fixture
def json_parser():
    return JsonParser()


@pytest.fixture
def sample_markdown():
    """Sample markdown document for parser tests."""
    return """---
title: Managing State
description: Learn how to structure state
author: react-team
tags:
  - state
  - hooks
---

# Managing State

As your application grows, it helps to be more intentional about how your **state** is organized.

## Reacting to input with state

With React, you won't modify the UI from code directly. Read [the guide](/learn/thinking) for more.

```js
const [count, setCount] = useState(0);
```

- First item
- Second item
"""
