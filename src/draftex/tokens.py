"""Token Tree node types, source positions, and the token stream cursor."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


class GroupKind(Enum):
    CURLY = auto()  # { ... }
    IGNORED = auto()  # spacing with no semantic text


@dataclass(slots=True)
class Text:
    """Run of literal characters."""

    content: str
    span: Span


@dataclass(slots=True)
class Command:
    """A control word (\\section) or control symbol (\\{, \\\\)."""

    name: str
    span: Span


@dataclass(slots=True)
class Group:
    """Bracket-delimited child sequence."""

    kind: GroupKind
    children: list[Token]
    span: Span


@dataclass(slots=True)
class Comment:
    """Comment text, without the marker and the newline."""

    content: str
    span: Span


@dataclass(slots=True)
class Parameter:
    """Macro-body back-reference #1..#9."""

    index: int
    span: Span


Token = Text | Command | Group | Comment | Parameter


def is_letter(ch: str) -> bool:
    """Return True if ch may appear in a control word."""
    return ch.isascii() and ch.isalpha()


def is_ignored(token: Token | None) -> bool:
    """Return True if token is an ignored-whitespace group."""
    return isinstance(token, Group) and token.kind is GroupKind.IGNORED


def advance_position(pos: Position, text: str) -> Position:
    """Return the position reached after reading `text` from `pos`."""
    line, column = pos.line, pos.column
    for ch in text:
        if ch == "\n":
            line += 1
            column = 1
        else:
            column += 1
    return Position(line, column, pos.offset + len(text))


def split_text(token: Text, index: int) -> tuple[Text, Text]:
    """Split a Text token at `index`; either half may be empty."""
    middle = advance_position(token.span.start, token.content[:index])
    return (
        Text(token.content[:index], Span(token.span.start, middle)),
        Text(token.content[index:], Span(middle, token.span.end)),
    )


def coalesce(tokens: list[Token]) -> None:
    """Merge adjacent Text siblings in place."""
    i = 1
    while i < len(tokens):
        prev, cur = tokens[i - 1], tokens[i]
        if isinstance(prev, Text) and isinstance(cur, Text):
            prev.content += cur.content
            prev.span = Span(prev.span.start, cur.span.end)
            del tokens[i]
        else:
            i += 1


class TokenStream:
    """Forward-only cursor over one sibling sequence of the Token Tree.

    Consumed tokens are never revisited; handlers that look ahead and decide
    not to consume put tokens back at the front with push().
    """

    def __init__(self, tokens: Iterable[Token] = ()) -> None:
        self._items: deque[Token] = deque(tokens)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def peek(self) -> Token | None:
        return self._items[0] if self._items else None

    def pop(self) -> Token:
        return self._items.popleft()

    def push(self, token: Token) -> None:
        self._items.appendleft(token)

    def push_all(self, tokens: Iterable[Token]) -> None:
        self._items.extendleft(reversed(list(tokens)))

    def drain(self) -> list[Token]:
        rest = list(self._items)
        self._items.clear()
        return rest

    def skip_ignored(self) -> None:
        while self._items and is_ignored(self._items[0]):
            self._items.popleft()
