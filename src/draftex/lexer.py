"""DrafTeX lexer: converts source text into a Token Tree."""

from __future__ import annotations

from enum import Enum, auto

from draftex.errors import LexError
from draftex.tokens import (
    Command,
    Comment,
    Group,
    GroupKind,
    Parameter,
    Position,
    Span,
    Text,
    Token,
    is_ignored,
    is_letter,
)

PAR = "par"

# Maximum nesting of curly groups
MAX_GROUP_DEPTH = 128


class _Spacing(Enum):
    AFTER_NEWLINE = auto()
    AFTER_SPACE = auto()
    IN_TEXT = auto()


class Lexer:
    """Tokenize DrafTeX source text into a tree of Token objects."""

    def __init__(self, source: str, filename: str = "input.tex") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._depth = 0

    def tokenize(self) -> Group:
        """Tokenize the full source and return the implicit top-level group."""
        start = self._current_pos()
        children = self._lex_sequence(_Spacing.AFTER_NEWLINE, None)
        return Group(GroupKind.CURLY, children, Span(start, self._current_pos()))

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self._current_pos()
        return LexError(message, pos, self._source)

    # ------------------------------------------------------------------
    # Emission helpers
    # ------------------------------------------------------------------

    def _emit_text(self, tokens: list[Token], ch: str, start: Position) -> None:
        end = self._current_pos()
        last = tokens[-1] if tokens else None
        if isinstance(last, Text):
            last.content += ch
            last.span = Span(last.span.start, end)
        else:
            tokens.append(Text(ch, Span(start, end)))

    def _emit_ignored(self, tokens: list[Token], ch: str, start: Position) -> None:
        end = self._current_pos()
        last = tokens[-1] if tokens else None
        if is_ignored(last):
            self._emit_text(last.children, ch, start)
            last.span = Span(last.span.start, end)
        else:
            tokens.append(Group(GroupKind.IGNORED, [Text(ch, Span(start, end))], Span(start, end)))

    def _emit_par(self, tokens: list[Token], start: Position) -> None:
        last = tokens[-1] if tokens else None
        if is_ignored(last) and len(tokens) > 1:
            last = tokens[-2]
        if isinstance(last, Command) and last.name == PAR:
            self._emit_ignored(tokens, "\n", start)
            return
        tokens.append(Command(PAR, Span(start, self._current_pos())))

    # ------------------------------------------------------------------
    # Sequence scanning
    # ------------------------------------------------------------------

    def _lex_sequence(self, spacing: _Spacing, opened_at: Position | None) -> list[Token]:
        """Scan one nesting level until its closing brace (or end of input)."""
        tokens: list[Token] = []

        while self._pos < len(self._source):
            ch = self._peek()
            start = self._current_pos()

            if ch == "%":
                self._lex_comment(tokens)
                spacing = _Spacing.AFTER_NEWLINE
                continue

            if ch == "\\":
                name = self._lex_command(tokens)
                spacing = _Spacing.AFTER_SPACE if is_letter(name[0]) else _Spacing.IN_TEXT
                continue

            if ch == "\r" and self._peek(1) == "\n":
                self._advance()
                continue

            if ch == "\n":
                self._advance()
                if spacing is _Spacing.IN_TEXT:
                    self._emit_text(tokens, ch, start)
                elif spacing is _Spacing.AFTER_NEWLINE:
                    self._emit_par(tokens, start)
                else:
                    self._emit_ignored(tokens, ch, start)
                spacing = _Spacing.AFTER_NEWLINE
                continue

            if ch == "#" and self._peek(1).isdigit():
                self._advance()
                digit = self._advance()
                tokens.append(Parameter(int(digit), Span(start, self._current_pos())))
                spacing = _Spacing.IN_TEXT
                continue

            if ch == "{":
                if self._depth >= MAX_GROUP_DEPTH:
                    raise self._error(f"groups nested too deeply (limit {MAX_GROUP_DEPTH})")
                self._advance()
                self._depth += 1
                children = self._lex_sequence(_Spacing.AFTER_SPACE, start)
                self._depth -= 1
                tokens.append(Group(GroupKind.CURLY, children, Span(start, self._current_pos())))
                spacing = _Spacing.IN_TEXT
                continue

            if ch == "}":
                if opened_at is None:
                    raise self._error("unmatched '}'")
                self._advance()
                return tokens

            if ch in " \t":
                self._advance()
                if spacing is _Spacing.IN_TEXT:
                    self._emit_text(tokens, ch, start)
                    spacing = _Spacing.AFTER_SPACE
                else:
                    self._emit_ignored(tokens, ch, start)
                continue

            # Anything else is literal text, including a lone '#'
            self._advance()
            self._emit_text(tokens, ch, start)
            spacing = _Spacing.IN_TEXT

        if opened_at is not None:
            raise self._error("unterminated group: '{' is never closed", opened_at)
        return tokens

    def _lex_comment(self, tokens: list[Token]) -> None:
        start = self._current_pos()
        self._advance()  # consume %
        chars = []
        while self._pos < len(self._source) and self._peek() not in "\r\n":
            chars.append(self._advance())
        tokens.append(Comment("".join(chars), Span(start, self._current_pos())))
        # The terminating newline belongs to the comment
        if self._peek() == "\r" and self._peek(1) == "\n":
            self._advance()
        if self._peek() == "\n":
            self._advance()

    def _lex_command(self, tokens: list[Token]) -> str:
        start = self._current_pos()
        self._advance()  # consume backslash

        if self._pos >= len(self._source):
            raise self._error("unexpected end of input after '\\'", start)

        if is_letter(self._peek()):
            chars = []
            while self._pos < len(self._source) and is_letter(self._peek()):
                chars.append(self._advance())
            name = "".join(chars)
        else:
            name = self._advance()

        tokens.append(Command(name, Span(start, self._current_pos())))
        return name


def tokenize(source: str, filename: str = "input.tex") -> Group:
    """Convenience function: tokenize source text and return the root group."""
    return Lexer(source, filename).tokenize()
