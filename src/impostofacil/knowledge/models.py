"""Schemas shared by the chunker, validator and ingestion run."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

Category = Literal["ibs", "cbs", "is", "transicao", "glossario", "setores", "regimes", "faq"]
ContentStatus = Literal["draft", "published", "outdated", "archived"]
Difficulty = Literal["basico", "intermediario", "avancado"]
IngestionStatus = Literal["created", "updated", "unchanged", "error"]

CATEGORIES: tuple[str, ...] = ("ibs", "cbs", "is", "transicao", "glossario", "setores", "regimes", "faq")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _coerce_date_string(value: Any) -> Any:
    """YAML turns bare ``2025-01-15`` into a date; keep the ISO string form."""

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and not _ISO_DATE.match(value):
        raise ValueError("expected a date in YYYY-MM-DD format")
    return value


class SourceCitation(BaseModel):
    name: str = Field(min_length=1)
    url: Optional[str] = None
    date_accessed: Optional[str] = Field(default=None, alias="dateAccessed")
    articles: Optional[List[str]] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://\S+$", value):
            raise ValueError("invalid url")
        return value

    @field_validator("date_accessed", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Any:
        return _coerce_date_string(value)


class Frontmatter(BaseModel):
    """Front matter schema for knowledge-base articles.

    Unknown keys are ignored so editors can carry extra presentation fields.
    """

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: Category

    tags: Optional[List[str]] = None
    published_at: Optional[str] = Field(default=None, alias="publishedAt")

    sources: Optional[List[SourceCitation]] = None
    last_verified: Optional[str] = Field(default=None, alias="lastVerified")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")
    status: ContentStatus = "draft"

    difficulty: Difficulty = "basico"
    search_keywords: Optional[List[str]] = Field(default=None, alias="searchKeywords")
    common_questions: Optional[List[str]] = Field(default=None, alias="commonQuestions")
    related_articles: Optional[List[str]] = Field(default=None, alias="relatedArticles")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _stringify_tags(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("published_at", "last_verified", "last_updated", mode="before")
    @classmethod
    def _normalize_dates(cls, value: Any) -> Any:
        return _coerce_date_string(value)

    @field_validator("status", "difficulty", mode="before")
    @classmethod
    def _default_when_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return "draft" if info.field_name == "status" else "basico"
        return value


class ChunkMetadata(BaseModel):
    """Front matter projection stored alongside every chunk."""

    tags: Optional[List[str]] = None
    sources: Optional[List[SourceCitation]] = None
    search_keywords: Optional[List[str]] = None
    common_questions: Optional[List[str]] = None
    related_articles: Optional[List[str]] = None
    last_verified: Optional[str] = None
    last_updated: Optional[str] = None
    status: ContentStatus = "draft"
    original_title: str

    model_config = ConfigDict(extra="forbid")


class ContentChunk(BaseModel):
    source_path: str
    title: str
    section_title: Optional[str] = None
    category: str
    content: str
    chunk_index: int = Field(ge=0)
    source_hash: str
    difficulty: Difficulty = "basico"
    metadata: ChunkMetadata
    embedding: Optional[List[float]] = None

    model_config = ConfigDict(extra="forbid")

    def embedding_text(self) -> str:
        """Text sent to the embedding provider for this chunk."""

        return f"{self.title}\n{self.section_title or ''}\n{self.content}"


@dataclass(frozen=True)
class ChunkingOptions:
    max_tokens: int = 500
    overlap_tokens: int = 50
    preserve_sections: bool = True

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if self.overlap_tokens < 0:
            raise ValueError("overlap_tokens must not be negative")


DEFAULT_CHUNKING_OPTIONS = ChunkingOptions()


@dataclass(frozen=True)
class ParsedDocument:
    """A document split into its raw front matter mapping and markdown body."""

    frontmatter: Dict[str, Any]
    body: str
    file_path: str
    content_hash: str


class ValidationError(BaseModel):
    field: str
    message: str
    value: Any = None

    model_config = ConfigDict(extra="forbid")


class ValidationWarning(BaseModel):
    field: str
    message: str
    suggestion: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class ValidationResult(BaseModel):
    file_path: str
    valid: bool
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationWarning] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class IngestionResult(BaseModel):
    file_path: str
    status: IngestionStatus = "unchanged"
    chunks_created: int = 0
    chunks_deleted: int = 0
    error: Optional[str] = None

    model_config = ConfigDict(extra="forbid")
