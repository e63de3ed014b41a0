"""--debug dumps of the Token Tree and Output Tree to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from draftex.nodes import Document, Element, TextNode
from draftex.tokens import Command, Comment, Group, Parameter, Text, Token


def dump_tokens(group: Group, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable Token Tree to *file*."""
    _dump_token(group, 0, file)


def dump_tree(doc: Document, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable Output Tree to *file*."""
    _dump_node(doc.root, 0, file)
    if doc.diagnostics:
        file.write(f"{len(doc.diagnostics)} structural error(s)\n")


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_token(tok: Token, depth: int, f: TextIO) -> None:
    if isinstance(tok, Text):
        f.write(f"{_indent(depth)}Text({tok.content!r})\n")
    elif isinstance(tok, Command):
        f.write(f"{_indent(depth)}Command(\\{tok.name})\n")
    elif isinstance(tok, Comment):
        f.write(f"{_indent(depth)}Comment({tok.content!r})\n")
    elif isinstance(tok, Parameter):
        f.write(f"{_indent(depth)}Parameter(#{tok.index})\n")
    elif isinstance(tok, Group):
        f.write(f"{_indent(depth)}Group {tok.kind.name.lower()}\n")
        for child in tok.children:
            _dump_token(child, depth + 1, f)


def _dump_node(node: Element | TextNode, depth: int, f: TextIO) -> None:
    if isinstance(node, TextNode):
        f.write(f"{_indent(depth)}{node.content!r}\n")
        return
    attrs = "".join(f" {k}={v!r}" for k, v in node.attrs.items())
    f.write(f"{_indent(depth)}<{node.tag.value}.{node.class_name}{attrs}>\n")
    for child in node.children:
        _dump_node(child, depth + 1, f)
