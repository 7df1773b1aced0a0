from __future__ import annotations

from datetime import date

import pytest

from impostofacil.knowledge.errors import FrontmatterError
from impostofacil.knowledge.frontmatter import content_hash, parse_document, split_frontmatter


ARTICLE = """---
title: O que é o IBS
description: Imposto sobre Bens e Serviços
category: ibs
lastVerified: 2025-06-01
---
# O que é o IBS

Texto.
"""


class TestSplit:
    def test_splits_yaml_and_body(self):
        data, body = split_frontmatter(ARTICLE)

        assert data["title"] == "O que é o IBS"
        assert data["lastVerified"] == date(2025, 6, 1)
        assert body.startswith("# O que é o IBS\n")

    def test_leading_bom_is_ignored(self):
        data, _ = split_frontmatter("\ufeff" + ARTICLE)

        assert data["category"] == "ibs"

    def test_document_without_fence(self):
        assert split_frontmatter("# Só corpo\n") == ({}, "# Só corpo\n")

    def test_empty_block(self):
        assert split_frontmatter("---\n---\ncorpo") == ({}, "corpo")

    def test_unclosed_block(self):
        with pytest.raises(FrontmatterError) as excinfo:
            split_frontmatter("---\ntitle: x\n", "ibs/aberto.mdx")

        assert excinfo.value.path == "ibs/aberto.mdx"
        assert "not closed" in excinfo.value.reason

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError, match="invalid YAML"):
            split_frontmatter("---\ntitle: [sem fim\n---\n")

    def test_non_mapping(self):
        with pytest.raises(FrontmatterError, match="mapping"):
            split_frontmatter("---\n- a\n- b\n---\n")


class TestHash:
    def test_hash_is_short_and_stable(self):
        first = content_hash("corpo", {"title": "A"})

        assert len(first) == 16
        assert first == content_hash("corpo", {"title": "A"})

    def test_hash_covers_body_and_frontmatter(self):
        base = content_hash("corpo", {"title": "A"})

        assert content_hash("corpo!", {"title": "A"}) != base
        assert content_hash("corpo", {"title": "B"}) != base

    def test_key_order_matters(self):
        assert content_hash("x", {"a": 1, "b": 2}) != content_hash("x", {"b": 2, "a": 1})

    def test_dates_are_hashable(self):
        assert content_hash("x", {"d": date(2025, 1, 15)}) == content_hash("x", {"d": "2025-01-15"})


class TestParseDocument:
    def test_parse_document(self, tmp_path):
        path = tmp_path / "ibs.mdx"
        path.write_text(ARTICLE, encoding="utf-8")

        document = parse_document(path)

        assert document.file_path == str(path)
        assert document.frontmatter["category"] == "ibs"
        assert document.content_hash == content_hash(document.body, document.frontmatter)
