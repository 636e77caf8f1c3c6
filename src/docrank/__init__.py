"""docrank - ranked-relevance search over a corpus of documents.

This package provides an in-memory ranking engine including:
- Document records and search results
- A document store rebuilt wholesale from a corpus
- Keyword scoring and embedding similarity ranking
- Hybrid score combination with section filters and limits
- Snippet extraction for matched documents
- Markdown corpus, parser and summarizer collaborators

Example:
    ```python
    from docrank import (
        FileSystemCorpus,
        LocalEmbedding,
        MarkdownParser,
        SearchEngine,
        SearchOptions,
    )

    engine = SearchEngine(
        corpus=FileSystemCorpus("data/react-dev-repo/src/content"),
        parser=MarkdownParser(),
        embedding=LocalEmbedding(),
    )

    results = await engine.search("useState", SearchOptions(limit=5))
    ```
"""

# Data structures
from .document import (
    DocumentRecord,
    RepoStatus,
    SearchOptions,
    SearchResult,
    normalize_path,
)

# Base classes
from .base import BaseCorpus, BaseEmbedding, BaseParser

# Configuration
from .config import (
    CorpusConfig,
    DocRankConfig,
    EmbeddingConfig,
    SearchConfig,
    load_config,
)

# Errors
from .exceptions import (
    ConfigError,
    CorpusError,
    DocRankError,
    EmbeddingError,
    ParseError,
    VectorDimensionError,
)

# Embedding providers
from .embeddings import (
    DummyEmbedding,
    FakeEmbedding,
    LocalEmbedding,
    OpenAIEmbedding,
    create_embedding,
)

# Ranking
from .keyword import keyword_score, tokenize_query
from .similarity import SimilarityRanker, cosine_similarity, embedding_text
from .snippet import extract_snippet
from .store import DocumentStore, IndexState
from .engine import EmbeddingState, SearchEngine

# Collaborators
from .corpus import FileSystemCorpus, GitRepository
from .markdown import MarkdownParser, markdown_to_plain_text, split_frontmatter
from .summarizer import extract_structure, summarize_content

__version__ = "0.1.0"
__all__ = [
    # Data structures
    "DocumentRecord",
    "RepoStatus",
    "SearchOptions",
    "SearchResult",
    "normalize_path",
    # Base classes
    "BaseCorpus",
    "BaseEmbedding",
    "BaseParser",
    # Configuration
    "CorpusConfig",
    "DocRankConfig",
    "EmbeddingConfig",
    "SearchConfig",
    "load_config",
    # Errors
    "ConfigError",
    "CorpusError",
    "DocRankError",
    "EmbeddingError",
    "ParseError",
    "VectorDimensionError",
    # Embeddings
    "DummyEmbedding",
    "FakeEmbedding",
    "LocalEmbedding",
    "OpenAIEmbedding",
    "create_embedding",
    # Ranking
    "keyword_score",
    "tokenize_query",
    "SimilarityRanker",
    "cosine_similarity",
    "embedding_text",
    "extract_snippet",
    "DocumentStore",
    "IndexState",
    "EmbeddingState",
    "SearchEngine",
    # Collaborators
    "FileSystemCorpus",
    "GitRepository",
    "MarkdownParser",
    "markdown_to_plain_text",
    "split_frontmatter",
    "extract_structure",
    "summarize_content",
]
