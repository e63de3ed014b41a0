"""Argument extraction: pull one argument off the front of a token stream."""

from __future__ import annotations

from draftex.errors import StructuralError
from draftex.tokens import (
    Command,
    Group,
    GroupKind,
    Span,
    Text,
    Token,
    TokenStream,
    split_text,
)

_BLANK = " \t\n"


def take_argument(tokens: TokenStream) -> Group | None:
    """Remove one argument from the front of `tokens`.

    A curly group is returned as is; a single command or the first character
    of a text run is wrapped in a synthetic curly group. Leading spacing is
    skipped. Returns None when no argument is available.
    """
    while True:
        tokens.skip_ignored()
        tok = tokens.peek()

        if isinstance(tok, Group):
            return tokens.pop()

        if isinstance(tok, Command):
            tokens.pop()
            return Group(GroupKind.CURLY, [tok], tok.span)

        if isinstance(tok, Text):
            tokens.pop()
            content = tok.content.lstrip(_BLANK)
            if not content:
                continue
            _, tok = split_text(tok, len(tok.content) - len(content))
            first, rest = split_text(tok, 1)
            if rest.content:
                tokens.push(rest)
            return Group(GroupKind.CURLY, [first], first.span)

        return None


def require_argument(tokens: TokenStream, command: Command) -> Group:
    """take_argument(), raising a StructuralError when nothing is there."""
    arg = take_argument(tokens)
    if arg is None:
        raise StructuralError(f"missing argument for \\{command.name}", command.span)
    return arg


def take_optional(tokens: TokenStream) -> Group | None:
    """Remove a square-bracket argument `[...]` if one comes next."""
    tokens.skip_ignored()
    tok = tokens.peek()
    if not isinstance(tok, Text) or not tok.content.startswith("["):
        return None
    tokens.pop()
    opener, pending = split_text(tok, 1)

    children: list[Token] = []
    while True:
        if pending is None:
            if not tokens:
                raise StructuralError("missing ']' after optional argument", opener.span)
            pending = tokens.pop()
        if isinstance(pending, Text) and "]" in pending.content:
            before, after = split_text(pending, pending.content.index("]"))
            if before.content:
                children.append(before)
            _, rest = split_text(after, 1)
            if rest.content:
                tokens.push(rest)
            return Group(GroupKind.CURLY, children, Span(opener.span.start, after.span.end))
        if not isinstance(pending, Text) or pending.content:
            children.append(pending)
        pending = None


def take_star(tokens: TokenStream) -> bool:
    """Consume the `*` of a starred variant, returning whether it was there."""
    tok = tokens.peek()
    if isinstance(tok, Text) and tok.content.startswith("*"):
        tokens.pop()
        _, rest = split_text(tok, 1)
        if rest.content:
            tokens.push(rest)
        return True
    return False


def consume_space(tokens: TokenStream) -> None:
    """Drop at most one space following a symbol."""
    tok = tokens.peek()
    if isinstance(tok, Group) and tok.kind is GroupKind.IGNORED:
        tokens.pop()
        first = tok.children[0] if tok.children else None
        if isinstance(first, Text) and len(first.content) > 1:
            _, rest = split_text(first, 1)
            span = Span(rest.span.start, tok.span.end)
            tokens.push(Group(GroupKind.IGNORED, [rest, *tok.children[1:]], span))
    elif isinstance(tok, Text) and tok.content.startswith(" "):
        tokens.pop()
        _, rest = split_text(tok, 1)
        if rest.content:
            tokens.push(rest)


def group_text(group: Group) -> str:
    """Plain text of a group, ignoring commands."""
    parts: list[str] = []
    for child in group.children:
        if isinstance(child, Text):
            parts.append(child.content)
        elif isinstance(child, Group) and child.kind is GroupKind.CURLY:
            parts.append(group_text(child))
    return "".join(parts)
