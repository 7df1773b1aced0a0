"""Quality checks for knowledge-base articles.

Outcomes are returned as data: errors make a document invalid, warnings are
advisory. Nothing here raises for bad content.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from impostofacil.knowledge.models import (
    Frontmatter,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

MINIMUM_WORD_COUNT_DRAFT = 200
MINIMUM_WORD_COUNT_PUBLISHED = 500
REQUIRED_PUBLISHED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("sources", "sources"),
    ("lastVerified", "last_verified"),
    ("difficulty", "difficulty"),
)

_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]+`")
_WORD = re.compile(r"[^\W\d_]+")
_HEADING = re.compile(r"^(#{1,6})\s+([^\r\n]+)$")

CITATION_PATTERNS = (
    re.compile(r"art\.\s*\d+", re.IGNORECASE),
    re.compile(r"EC\s*\d+/\d+", re.IGNORECASE),
    re.compile(r"LC\s*\d+/\d+", re.IGNORECASE),
    re.compile(r"Lei\s*Complementar", re.IGNORECASE),
    re.compile(r"Emenda\s*Constitucional", re.IGNORECASE),
    re.compile(r"\[.*?\]\(https?://.*?\)"),
)


def count_words(content: str) -> int:
    """Count letter runs outside fenced and inline code."""

    text = _INLINE_CODE.sub("", _CODE_BLOCK.sub("", content))
    return len(_WORD.findall(text))


def has_citations(content: str) -> bool:
    return any(pattern.search(content) for pattern in CITATION_PATTERNS)


def check_heading_structure(content: str) -> List[ValidationWarning]:
    headings: List[Tuple[int, int]] = []
    for number, line in enumerate(content.split("\n"), start=1):
        match = _HEADING.match(line)
        if match:
            headings.append((len(match.group(1)), number))

    if not headings:
        return [
            ValidationWarning(
                field="content",
                message="Content has no headings",
                suggestion="Add H2 headings to structure the content",
            )
        ]

    warnings: List[ValidationWarning] = []
    first_level = headings[0][0]
    if first_level != 1:
        warnings.append(
            ValidationWarning(
                field="content",
                message=f"First heading should be H1, found H{first_level}",
                suggestion="Start with a single H1 heading that matches the title",
            )
        )

    h1_count = sum(1 for level, _ in headings if level == 1)
    if h1_count > 1:
        warnings.append(
            ValidationWarning(
                field="content",
                message=f"Multiple H1 headings found ({h1_count})",
                suggestion="Use only one H1 heading per document",
            )
        )

    for (previous, _), (current, line) in zip(headings, headings[1:]):
        if current > previous + 1:
            warnings.append(
                ValidationWarning(
                    field="content",
                    message=f"Heading level jump at line {line}: H{previous} to H{current}",
                    suggestion="Don't skip heading levels (e.g., H2 to H4)",
                )
            )
    return warnings


def check_related_articles(frontmatter: Frontmatter, existing_paths: Sequence[str]) -> List[ValidationWarning]:
    warnings: List[ValidationWarning] = []
    for related in frontmatter.related_articles or []:
        exists = any(related in path or path.endswith(f"{related}.mdx") for path in existing_paths)
        if not exists:
            warnings.append(
                ValidationWarning(
                    field="relatedArticles",
                    message=f"Related article not found: {related}",
                    suggestion="Verify the article path exists or remove the reference",
                )
            )
    return warnings


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def validate_frontmatter(data: Any) -> Tuple[Optional[Frontmatter], List[ValidationError]]:
    """Validate the raw front matter mapping against :class:`Frontmatter`."""

    try:
        return Frontmatter.model_validate(data), []
    except PydanticValidationError as exc:
        errors = [
            ValidationError(
                field=".".join(str(part) for part in issue["loc"]),
                message=issue["msg"],
                value=None if issue["type"] == "missing" else issue.get("input"),
            )
            for issue in exc.errors()
        ]
        return None, errors


def validate_content(
    file_path: str,
    frontmatter: Any,
    content: str,
    existing_paths: Sequence[str] = (),
) -> ValidationResult:
    fm, schema_errors = validate_frontmatter(frontmatter)
    if fm is None:
        return ValidationResult(file_path=file_path, valid=False, errors=schema_errors)

    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    published = fm.status == "published"

    word_count = count_words(content)
    minimum = MINIMUM_WORD_COUNT_PUBLISHED if published else MINIMUM_WORD_COUNT_DRAFT
    if word_count < minimum:
        if published:
            errors.append(
                ValidationError(
                    field="content",
                    message=f"Published content requires at least {minimum} words, found {word_count}",
                    value=word_count,
                )
            )
        else:
            warnings.append(
                ValidationWarning(
                    field="content",
                    message=f"Content has only {word_count} words (minimum {minimum} for drafts)",
                    suggestion="Consider adding more detailed content",
                )
            )

    if published:
        for label, attribute in REQUIRED_PUBLISHED_FIELDS:
            if getattr(fm, attribute) is None:
                errors.append(ValidationError(field=label, message=f"Published content requires {label}"))
        if not has_citations(content) and not fm.sources:
            warnings.append(
                ValidationWarning(
                    field="sources",
                    message="Published content should have citations to official sources",
                    suggestion="Add sources in frontmatter or inline citations",
                )
            )

    warnings.extend(check_heading_structure(content))
    warnings.extend(check_related_articles(fm, existing_paths))

    verified = _parse_date(fm.last_verified)
    updated = _parse_date(fm.last_updated)
    if verified and updated and verified < updated:
        warnings.append(
            ValidationWarning(
                field="lastVerified",
                message="lastVerified is older than lastUpdated",
                suggestion="Update lastVerified after making content changes",
            )
        )

    if fm.tags is not None:
        if not fm.tags:
            warnings.append(
                ValidationWarning(
                    field="tags",
                    message="Tags array is empty",
                    suggestion="Add relevant tags or remove the field",
                )
            )
        elif len(set(fm.tags)) != len(fm.tags):
            warnings.append(
                ValidationWarning(field="tags", message="Duplicate tags found", suggestion="Remove duplicate tags")
            )

    return ValidationResult(file_path=file_path, valid=not errors, errors=errors, warnings=warnings)


def summarize(results: Iterable[ValidationResult]) -> Dict[str, int]:
    results = list(results)
    return {
        "total": len(results),
        "valid": sum(1 for result in results if result.valid),
        "invalid": sum(1 for result in results if not result.valid),
        "warnings": sum(len(result.warnings) for result in results),
    }


def format_validation_results(results: Sequence[ValidationResult]) -> str:
    """Human-readable report, one block per document with issues."""

    counts = summarize(results)
    lines = [
        f"Validation Results: {counts['valid']}/{counts['total']} valid",
        f"   Warnings: {counts['warnings']}",
        "",
    ]
    for result in results:
        short_path = "/".join(result.file_path.replace("\\", "/").split("/")[-2:])
        lines.append(f"{'✅' if result.valid else '❌'} {short_path}")
        for error in result.errors:
            lines.append(f"   ❌ {error.field}: {error.message}")
        for warning in result.warnings:
            lines.append(f"   ⚠️  {warning.field}: {warning.message}")
            if warning.suggestion:
                lines.append(f"      💡 {warning.suggestion}")
        if result.errors or result.warnings:
            lines.append("")
    return "\n".join(lines)
