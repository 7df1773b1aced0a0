"""Knowledge-base ingestion run.

Walks the content tree, validates every article, skips articles whose
content hash is unchanged, and replaces the stored chunks of the rest with
freshly embedded ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from impostofacil import config
from impostofacil.knowledge.chunker import chunk_content, get_chunking_stats
from impostofacil.knowledge.embeddings import EmbeddingProvider, embed_in_batches
from impostofacil.knowledge.errors import FrontmatterError, KnowledgeBaseError, MissingConfigurationError
from impostofacil.knowledge.frontmatter import parse_document
from impostofacil.knowledge.models import (
    DEFAULT_CHUNKING_OPTIONS,
    ChunkingOptions,
    Frontmatter,
    IngestionResult,
    ParsedDocument,
    ValidationError,
    ValidationResult,
)
from impostofacil.knowledge.store import ChunkStore
from impostofacil.knowledge.validator import validate_content
from impostofacil.observability import bind_run_id, generate_run_id, log_event, reset_run_id

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".mdx"


@dataclass(frozen=True)
class IngestionOptions:
    dry_run: bool = False
    force: bool = False
    categories: Tuple[str, ...] = ()


@dataclass
class IngestionReport:
    run_id: str
    files: List[str] = field(default_factory=list)
    validation: List[ValidationResult] = field(default_factory=list)
    results: List[IngestionResult] = field(default_factory=list)
    blocked: bool = False
    dry_run_chunks: Optional[Dict[str, int]] = None

    @property
    def invalid_count(self) -> int:
        return sum(1 for result in self.validation if not result.valid)

    def count(self, status: str) -> int:
        return sum(1 for result in self.results if result.status == status)

    def chunk_total(self, status: str) -> int:
        return sum(result.chunks_created for result in self.results if result.status == status)

    @property
    def ok(self) -> bool:
        return not self.blocked and self.count("error") == 0


def find_documents(root: Path, categories: Sequence[str] = ()) -> List[Path]:
    """Every ``.mdx`` file under ``root``, sorted.

    With ``categories``, only the matching top-level category directories
    are walked; files directly under ``root`` are always included.
    """

    wanted = set(categories)
    found: List[Path] = []
    for path in sorted(root.rglob(f"*{DOCUMENT_SUFFIX}")):
        if not path.is_file():
            continue
        parts = path.relative_to(root).parts
        if wanted and len(parts) > 1 and parts[0] not in wanted:
            continue
        found.append(path)
    return found


class Ingestor:
    """Runs one ingestion pass over ``content_dir``.

    ``store`` may be ``None`` only for dry runs, which then report chunk
    counts without comparing hashes. ``provider`` is needed for real runs.
    """

    def __init__(
        self,
        content_dir: Optional[Path] = None,
        store: Optional[ChunkStore] = None,
        provider: Optional[EmbeddingProvider] = None,
        chunking: ChunkingOptions = DEFAULT_CHUNKING_OPTIONS,
        batch_size: Optional[int] = None,
    ):
        self.content_dir = Path(content_dir) if content_dir is not None else config.content_dir()
        self.store = store
        self.provider = provider
        self.chunking = chunking
        self.batch_size = batch_size

    def relative_path(self, path: Path) -> str:
        return path.relative_to(self.content_dir).as_posix()

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, options: IngestionOptions = IngestionOptions(), run_id: Optional[str] = None) -> IngestionReport:
        report = IngestionReport(run_id=run_id or generate_run_id())
        token = bind_run_id(report.run_id)
        try:
            self._run(options, report)
        finally:
            reset_run_id(token)
        return report

    def _run(self, options: IngestionOptions, report: IngestionReport) -> None:
        paths = find_documents(self.content_dir, options.categories)
        report.files = [self.relative_path(path) for path in paths]
        log_event(
            "ingestion started",
            content_dir=str(self.content_dir),
            files=len(paths),
            dry_run=options.dry_run,
            force=options.force,
        )
        if not paths:
            return

        documents: Dict[str, ParsedDocument] = {}
        for path, relative in zip(paths, report.files):
            try:
                documents[relative] = parse_document(path)
            except FrontmatterError as exc:
                report.validation.append(
                    ValidationResult(
                        file_path=relative,
                        valid=False,
                        errors=[ValidationError(field="frontmatter", message=exc.reason)],
                    )
                )

        for relative, document in documents.items():
            report.validation.append(
                validate_content(relative, document.frontmatter, document.body, report.files)
            )
        report.validation.sort(key=lambda result: report.files.index(result.file_path))

        if report.invalid_count:
            if not options.force:
                report.blocked = True
                log_event("ingestion blocked by validation", level=logging.WARNING, invalid=report.invalid_count)
                return
            logger.warning("Continuing despite %d validation failure(s) (forced)", report.invalid_count)

        if options.dry_run and self.store is None:
            report.dry_run_chunks = {
                relative: get_chunking_stats(document.body, self.chunking).final_chunks
                for relative, document in documents.items()
            }
            log_event("dry run statistics", chunks=sum(report.dry_run_chunks.values()))
            return

        if self.store is None:
            raise MissingConfigurationError(["DATABASE_URL"])
        if self.provider is None and not options.dry_run:
            raise MissingConfigurationError(["OPENAI_API_KEY"])

        existing = self.store.existing_hashes(report.files)
        logger.info("%d of %d file(s) already stored", len(existing), len(report.files))

        for relative in report.files:
            document = documents.get(relative)
            if document is None:
                result = IngestionResult(file_path=relative, status="error", error="unparseable front matter")
            else:
                result = self.ingest_document(relative, document, existing.get(relative), options)
            report.results.append(result)
            log_event(
                "document processed",
                file_path=relative,
                status=result.status,
                chunks=result.chunks_created,
                error=result.error,
            )

        log_event(
            "ingestion finished",
            created=report.count("created"),
            updated=report.count("updated"),
            unchanged=report.count("unchanged"),
            errors=report.count("error"),
        )

    def ingest_document(
        self,
        relative: str,
        document: ParsedDocument,
        existing_hash: Optional[str],
        options: IngestionOptions,
    ) -> IngestionResult:
        result = IngestionResult(file_path=relative)
        if not options.force and existing_hash == document.content_hash:
            logger.info("%s unchanged", relative)
            return result

        try:
            frontmatter = Frontmatter.model_validate(document.frontmatter)
        except PydanticValidationError as exc:
            result.status = "error"
            result.error = f"invalid front matter ({exc.error_count()} issue(s))"
            return result

        chunks = chunk_content(document.body, frontmatter, relative, document.content_hash, self.chunking)
        status = "updated" if existing_hash else "created"
        if options.dry_run:
            result.status = status
            result.chunks_created = len(chunks)
            return result

        try:
            vectors = embed_in_batches(
                self.provider,
                [chunk.embedding_text() for chunk in chunks],
                self.batch_size,
                on_batch=lambda first, last, total: logger.info(
                    "%s: embeddings %d-%d/%d", relative, first, last, total
                ),
            )
            embedded = [chunk.model_copy(update={"embedding": vector}) for chunk, vector in zip(chunks, vectors)]
            result.chunks_deleted = self.store.replace_chunks(relative, document.content_hash, embedded)
        except KnowledgeBaseError as exc:
            logger.error("%s: %s", relative, exc)
            result.status = "error"
            result.error = str(exc)
            return result

        result.status = status
        result.chunks_created = len(embedded)
        logger.info("%s: %d chunk(s) ingested (%s)", relative, len(embedded), status)
        return result


def format_ingestion_summary(report: IngestionReport) -> str:
    lines = [
        "Ingestion Summary",
        f"   Created: {report.count('created')} files ({report.chunk_total('created')} chunks)",
        f"   Updated: {report.count('updated')} files ({report.chunk_total('updated')} chunks)",
        f"   Unchanged: {report.count('unchanged')} files",
    ]
    errors = [result for result in report.results if result.status == "error"]
    if errors:
        lines.append(f"   Errors: {len(errors)} files")
        lines.extend(f"      - {result.file_path}: {result.error}" for result in errors)
    return "\n".join(lines)
