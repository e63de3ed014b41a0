"""DrafTeX parser: source text to Output Tree in one call."""

from __future__ import annotations

from draftex.expand import DEFAULT_MAX_CALL_DEPTH, expand_document
from draftex.lexer import tokenize
from draftex.nodes import Document


def parse(
    source: str,
    filename: str = "input.tex",
    *,
    keep_comments: bool = True,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
) -> Document:
    """Tokenize and expand a complete document.

    Raises LexError when the grouping is broken. Structural errors do not
    raise; they are annotated in the tree and listed in `diagnostics`.
    """
    tree = tokenize(source, filename)
    return expand_document(
        tree,
        source,
        keep_comments=keep_comments,
        max_call_depth=max_call_depth,
    )
