"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from draftex.lexer import tokenize
from draftex.nodes import Document, Element, Tag
from draftex.parser import parse
from draftex.tokens import Token


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns the top-level tokens."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source).children

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns a Document."""

    def _parse(source: str, filename: str = "test.tex", **kwargs) -> Document:
        return parse(source, filename, **kwargs)

    return _parse


def assert_kinds(tokens: list[Token], expected: list[type]) -> None:
    """Assert that the token classes match the expected list."""
    actual = [type(t) for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_class(node: Document | Element, class_name: str) -> list[Element]:
    """Return every element with the given class name, depth-first."""
    root = node.root if isinstance(node, Document) else node
    return root.find_all(class_name)


def paragraphs(doc: Document) -> list[Element]:
    """Return the top-level paragraph elements."""
    return [c for c in doc.root.children if isinstance(c, Element) and c.tag is Tag.PARAGRAPH]


def error_messages(doc: Document) -> list[str]:
    """Return the messages of all structural errors, in order."""
    return [d.message for d in doc.diagnostics]
