"""Knowledge-base pipeline: parsing, chunking, validation and ingestion."""

from impostofacil.knowledge.chunker import ChunkingStats, chunk_content, get_chunking_stats
from impostofacil.knowledge.errors import (
    EmbeddingError,
    FrontmatterError,
    KnowledgeBaseError,
    MissingConfigurationError,
    StorageError,
)
from impostofacil.knowledge.frontmatter import parse_document
from impostofacil.knowledge.ingest import IngestionOptions, IngestionReport, Ingestor
from impostofacil.knowledge.models import (
    ChunkingOptions,
    ContentChunk,
    Frontmatter,
    ParsedDocument,
    ValidationResult,
)
from impostofacil.knowledge.validator import format_validation_results, validate_content

__all__ = [
    "ChunkingOptions",
    "ChunkingStats",
    "ContentChunk",
    "EmbeddingError",
    "Frontmatter",
    "FrontmatterError",
    "IngestionOptions",
    "IngestionReport",
    "Ingestor",
    "KnowledgeBaseError",
    "MissingConfigurationError",
    "ParsedDocument",
    "StorageError",
    "ValidationResult",
    "chunk_content",
    "format_validation_results",
    "get_chunking_stats",
    "parse_document",
    "validate_content",
]
