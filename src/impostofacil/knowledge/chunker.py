"""Section-aware chunking of markdown articles.

Pipeline, in order:

1. split the body into sections at markdown headings (text before the first
   heading is an untitled level-0 section);
2. when ``preserve_sections`` is set, fold sections under
   :data:`MIN_SECTION_TOKENS` into their predecessor in one linear pass;
3. split sections above ``max_tokens`` on blank-line paragraphs, seeding each
   continuation with the trailing ``overlap_tokens * 4`` characters of the
   previous piece.

Token counts are the ``ceil(len / 4)`` approximation, never a tokenizer.
:func:`get_chunking_stats` runs the same three steps, so dry-run figures
match a real run.
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from impostofacil.knowledge.models import (
    DEFAULT_CHUNKING_OPTIONS,
    ChunkingOptions,
    ChunkMetadata,
    ContentChunk,
    Frontmatter,
)

MIN_SECTION_TOKENS = 100
CHARS_PER_TOKEN = 4

_HEADING = re.compile(r"^(#{1,6})\s+([^\r\n]+)$")
_PARAGRAPH_BREAK = re.compile(r"\n\n+")


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass(frozen=True)
class Section:
    title: Optional[str]
    level: int
    content: str
    start_line: int


@dataclass(frozen=True)
class TokenStats:
    min: int
    max: int
    average: int
    total: int


@dataclass(frozen=True)
class ChunkingStats:
    original_sections: int
    merged_sections: int
    final_chunks: int
    token_stats: TokenStats

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def parse_sections(content: str) -> List[Section]:
    """Split ``content`` at headings; whitespace-only sections are dropped."""

    sections: List[Section] = []
    title: Optional[str] = None
    level = 0
    start = 0
    buffer: Optional[List[str]] = None

    def flush() -> None:
        if buffer is not None:
            text = "".join(buffer)
            if text.strip():
                sections.append(Section(title=title, level=level, content=text, start_line=start))

    for index, line in enumerate(content.split("\n")):
        match = _HEADING.match(line)
        if match:
            flush()
            title = match.group(2).strip()
            level = len(match.group(1))
            start = index
            buffer = [line + "\n"]
        elif buffer is not None:
            buffer.append(line + "\n")
        else:
            title, level, start = None, 0, index
            buffer = [line + "\n"]
    flush()
    return sections


def merge_sections(sections: List[Section], min_tokens: int = MIN_SECTION_TOKENS) -> List[Section]:
    """Fold small sections into the previous one.

    A small section joins its predecessor when it is not a promotion to a
    higher heading. Independently, anything following a predecessor that is
    itself still small joins it, taking over the title only when the
    predecessor had none. The pass is greedy and order-dependent; its output
    is part of the stored chunk layout.
    """

    merged: List[Section] = []
    for section in sections:
        if not merged:
            merged.append(section)
            continue

        last = merged[-1]
        joined = last.content + "\n" + section.content
        if estimate_tokens(section.content) < min_tokens and section.level >= last.level:
            merged[-1] = replace(last, content=joined)
        elif estimate_tokens(last.content) < min_tokens:
            title = section.title if section.title and not last.title else last.title
            merged[-1] = replace(last, content=joined, title=title)
        else:
            merged.append(section)
    return merged


def split_large_section(section: Section, max_tokens: int, overlap_tokens: int) -> List[Section]:
    if estimate_tokens(section.content) <= max_tokens:
        return [section]

    def part_title(number: int) -> Optional[str]:
        return f"{section.title} (parte {number})" if section.title else None

    pieces: List[Section] = []
    current = ""
    part = 0
    for paragraph in _PARAGRAPH_BREAK.split(section.content):
        candidate = f"{current}\n\n{paragraph}" if current else paragraph
        if estimate_tokens(candidate) > max_tokens and current:
            pieces.append(replace(section, title=part_title(part + 1), content=current.strip()))
            overlap_chars = overlap_tokens * CHARS_PER_TOKEN
            overlap = current[max(0, len(current) - overlap_chars) :]
            current = f"{overlap}\n\n{paragraph}"
            part += 1
        else:
            current = candidate

    if current.strip():
        title = part_title(part + 1) if pieces else section.title
        pieces.append(replace(section, title=title, content=current.strip()))
    return pieces


def _run_pipeline(content: str, options: ChunkingOptions) -> Tuple[List[Section], List[Section], List[Section]]:
    sections = parse_sections(content)
    merged = merge_sections(sections) if options.preserve_sections else list(sections)
    final: List[Section] = []
    for section in merged:
        final.extend(split_large_section(section, options.max_tokens, options.overlap_tokens))
    return sections, merged, final


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_chunk_metadata(frontmatter: Frontmatter) -> ChunkMetadata:
    return ChunkMetadata(
        tags=frontmatter.tags,
        sources=frontmatter.sources,
        search_keywords=frontmatter.search_keywords,
        common_questions=frontmatter.common_questions,
        related_articles=frontmatter.related_articles,
        last_verified=frontmatter.last_verified,
        last_updated=frontmatter.last_updated,
        status=frontmatter.status,
        original_title=frontmatter.title,
    )


def chunk_content(
    content: str,
    frontmatter: Frontmatter,
    file_path: str,
    content_hash: str,
    options: ChunkingOptions = DEFAULT_CHUNKING_OPTIONS,
) -> List[ContentChunk]:
    """Turn one article body into ordered, storage-ready chunks."""

    _, _, sections = _run_pipeline(content, options)
    metadata = build_chunk_metadata(frontmatter)
    return [
        ContentChunk(
            source_path=file_path,
            title=frontmatter.title,
            section_title=section.title,
            category=frontmatter.category,
            content=section.content.strip(),
            chunk_index=index,
            source_hash=content_hash,
            difficulty=frontmatter.difficulty,
            metadata=metadata,
        )
        for index, section in enumerate(sections)
    ]


def get_chunking_stats(content: str, options: ChunkingOptions = DEFAULT_CHUNKING_OPTIONS) -> ChunkingStats:
    sections, merged, final = _run_pipeline(content, options)
    counts = [estimate_tokens(section.content) for section in final]
    total = sum(counts)
    average = int(math.floor(total / len(counts) + 0.5)) if counts else 0
    return ChunkingStats(
        original_sections=len(sections),
        merged_sections=len(merged),
        final_chunks=len(final),
        token_stats=TokenStats(
            min=min(counts) if counts else 0,
            max=max(counts) if counts else 0,
            average=average,
            total=total,
        ),
    )
