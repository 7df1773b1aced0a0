"""YAML front matter parsing and content hashing for ``.mdx`` articles."""

from __future__ import annotations

import hashlib
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from impostofacil.knowledge.errors import FrontmatterError
from impostofacil.knowledge.models import ParsedDocument

FENCE = "---"


def _json_default(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def content_hash(body: str, frontmatter: Dict[str, Any]) -> str:
    """Short SHA-256 over ``{content, frontmatter}``.

    Key order of the front matter is part of the hash: reordering keys in an
    article marks it as changed.
    """

    data = json.dumps(
        {"content": body, "frontmatter": frontmatter},
        ensure_ascii=False,
        separators=(",", ":"),
        default=_json_default,
    )
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:16]


def split_frontmatter(text: str, path: str = "<string>") -> Tuple[Dict[str, Any], str]:
    """Return ``(frontmatter, body)``; documents without a fence have ``{}``."""

    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != FENCE:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n").rstrip() == FENCE:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            break
    else:
        raise FrontmatterError(path, "front matter block is not closed")

    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as exc:
        raise FrontmatterError(path, f"invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(path, "front matter must be a mapping")
    return data, body


def parse_document(path: Union[str, Path]) -> ParsedDocument:
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    frontmatter, body = split_frontmatter(text, str(file_path))
    return ParsedDocument(
        frontmatter=frontmatter,
        body=body,
        file_path=str(file_path),
        content_hash=content_hash(body, frontmatter),
    )
