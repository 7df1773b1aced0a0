"""Exceptions raised by the knowledge-base pipeline."""

from __future__ import annotations

from typing import Sequence


class KnowledgeBaseError(Exception):
    """Base class for knowledge-base failures."""


class FrontmatterError(KnowledgeBaseError):
    """The front matter block of a document could not be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class EmbeddingError(KnowledgeBaseError):
    """The embedding provider failed or returned an unexpected payload."""


class StorageError(KnowledgeBaseError):
    """Reading from or writing to the chunk store failed."""


class MissingConfigurationError(KnowledgeBaseError):
    """Required environment variables are not set."""

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        super().__init__("Missing required environment variables: " + ", ".join(self.names))
