"""
Configuration for the ranking engine and its collaborators.
"""

import json
from pathlib import Path
from typing import Literal

import yaml

from pydantic import BaseModel, Field, model_validator

from .exceptions import ConfigError


class Config(BaseModel):
    """Base configuration class."""

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from file (YAML or JSON)."""
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        elif path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
            return cls(**data)
        else:
            raise ConfigError(f"Unsupported config file format: {path.suffix}")


class SearchConfig(BaseModel):
    """Scoring and result-shaping settings."""
    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=50, ge=1)
    min_score: float = 0.1

    semantic_search_enabled: bool = True
    semantic_min_similarity: float = 0.3
    hybrid_keyword_weight: float = Field(default=0.3, ge=0.0)
    hybrid_semantic_weight: float = Field(default=0.7, ge=0.0)
    # Brings raw keyword sums into roughly the same range as cosine similarity
    keyword_normalizer: float = Field(default=100.0, gt=0.0)

    embedding_max_chars: int = Field(default=2000, ge=1)
    embedding_body_chars: int = Field(default=1000, ge=0)
    embedding_batch_size: int = Field(default=32, ge=1)

    snippet_radius: int = Field(default=75, ge=0)
    snippet_fallback_chars: int = Field(default=150, ge=0)

    # None lists whatever sections the indexed corpus contains
    sections: list[str] | None = None

    @model_validator(mode="after")
    def _check_limits(self) -> "SearchConfig":
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"default_limit ({self.default_limit}) exceeds max_limit ({self.max_limit})"
            )
        return self


class EmbeddingConfig(BaseModel):
    """Embedding provider settings."""
    provider: Literal["local", "openai", "fake"] = "local"
    model: str | None = None
    device: str | None = None
    dimension: int = 384

    # OpenAI settings
    api_key: str | None = None
    base_url: str | None = None


class CorpusConfig(BaseModel):
    """Source corpus settings."""
    repo_url: str | None = "https://github.com/reactjs/react.dev.git"
    local_path: str = "./data/react-dev-repo"
    content_path: str = "src/content"
    extensions: list[str] = [".md"]
    sync_on_start: bool = False


class DocRankConfig(Config):
    """Top-level configuration."""
    search: SearchConfig = SearchConfig()
    embedding: EmbeddingConfig = EmbeddingConfig()
    corpus: CorpusConfig = CorpusConfig()


def load_config(path: str | Path = "docrank.yaml") -> DocRankConfig:
    """
    Load docrank configuration from file.

    Args:
        path: Path to config file

    Returns:
        DocRankConfig instance, with defaults when the file does not exist
    """
    path = Path(path)

    if not path.exists():
        return DocRankConfig()

    return DocRankConfig.from_file(path)
