"""Error types with formatted source context."""

from __future__ import annotations

from draftex.tokens import Position, Span


def _excerpt(source: str, line: int, col: int, underline_len: int | None, filename: str) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = line - 1

    # Build the source line (strip trailing newline for display)
    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    if underline_len is None:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class LexError(Exception):
    """Raised on the first lexing error; the parse is abandoned."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        return self.format()

    def format(self, filename: str = "input.tex") -> str:
        return f"error: {self.message}\n" + _excerpt(
            self.source, self.position.line, self.position.column, 1, filename
        )


class StructuralError(Exception):
    """A local defect in an otherwise well-grouped document.

    Raised by command handlers and caught by the expander, which annotates the
    output tree at the current append point and carries on.
    """

    def __init__(
        self,
        message: str,
        span: Span,
        source: str = "",
        call_stack: list[str] | None = None,
    ) -> None:
        self.message = message
        self.span = span
        self.source = source
        self.call_stack = call_stack or []
        super().__init__(message)

    def __str__(self) -> str:
        return self.format()

    def format(self, filename: str = "input.tex") -> str:
        start, end = self.span.start, self.span.end
        # Underline the full span when on one line, otherwise to end of line
        underline_len = max(1, end.column - start.column) if end.line == start.line else None
        result = f"warning: {self.message}\n" + _excerpt(
            self.source, start.line, start.column, underline_len, filename
        )
        if self.call_stack:
            chain = " -> ".join(f"\\{name}" for name in self.call_stack)
            result += f"\n  in expansion chain: {chain}"
        return result
