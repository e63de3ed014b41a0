"""DrafTeX: LaTeX-like draft markup to document tree."""

from __future__ import annotations

from collections.abc import Sequence

__version__ = "0.1.0"


def compile(
    source: str,
    filename: str = "input.tex",
    *,
    keep_comments: bool = True,
    max_call_depth: int = 64,
    title: str | None = None,
    css_files: Sequence[str] = (),
) -> str:
    """Parse DrafTeX source and render it to a standalone HTML page."""
    from draftex.parser import parse
    from draftex.render import render

    doc = parse(source, filename, keep_comments=keep_comments, max_call_depth=max_call_depth)
    return render(doc, title=title, css_files=css_files)
