"""Built-in command handlers and active-character handlers.

Every handler has the signature

    handler(ex, command, out, tokens, scope) -> Signal

where `out` is the current append point and `tokens` the remaining siblings
of the command. Handlers raise StructuralError for local defects; the
expander turns those into inline annotations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import MappingProxyType
from typing import TYPE_CHECKING

from draftex.args import (
    group_text,
    require_argument,
    take_optional,
    take_star,
)
from draftex.builtins import (
    IGNORED_COMMANDS,
    LETTER_STYLES,
    STYLED_BLOCK,
    STYLED_INLINE,
    SYMBOLS,
    TEXT_MODE_COMMANDS,
    EnvKind,
    transform_letters,
)
from draftex.errors import StructuralError
from draftex.macros import define_command
from draftex.nodes import Element, Tag, TextNode
from draftex.signals import (
    CELL_SEPARATOR,
    DELIMITED,
    DISPLAY_MATH,
    DONE,
    INLINE_MATH,
    ITEM,
    PAR,
    ROW_SEPARATOR,
    ClosedBy,
    Scope,
    Signal,
)
from draftex.tokens import Command, Span, Text, TokenStream

if TYPE_CHECKING:
    from draftex.expand import Expander

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Environments
# ---------------------------------------------------------------------------


def begin(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    arg = require_argument(tokens, command)
    name = group_text(arg).strip()
    if not name:
        raise StructuralError("\\begin needs an environment name", arg.span)
    return ex.environment(name, out, tokens, scope, command.span)


def end(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    arg = require_argument(tokens, command)
    name = group_text(arg).strip()
    if not name:
        raise StructuralError("\\end needs an environment name", arg.span)
    return ClosedBy(name, Span(command.span.start, arg.span.end), environment=True)


def item(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    if scope.kind is EnvKind.ITEM:
        # Next item: hand the command back to the list level
        tokens.push(command)
        return ClosedBy(ITEM, command.span)

    if scope.kind is not EnvKind.LIST:
        raise StructuralError("\\item outside a list environment", command.span)

    li = out.append(Element(Tag.LIST_ITEM, ITEM))
    label = take_optional(tokens)
    if label is not None:
        li.attrs["label"] = group_text(label).strip()
    sig = ex.expand(li, tokens, scope.nested(ITEM, EnvKind.ITEM))
    li.trim()
    if isinstance(sig, ClosedBy) and sig.closes(ITEM):
        return DONE
    return sig


def par(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    if scope.kind is EnvKind.PARAGRAPHS:
        return ClosedBy(PAR, command.span)
    if scope.kind is not EnvKind.LIST:
        out.append_text(" ")
    return DONE


def row_separator(
    ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope
) -> Signal:
    take_star(tokens)
    take_optional(tokens)  # \\[2pt]
    if scope.kind is EnvKind.TABLE:
        return ClosedBy(ROW_SEPARATOR, command.span)
    out.append(Element(Tag.BREAK, "newline"))
    return DONE


def ignore(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    return DONE


# ---------------------------------------------------------------------------
# Styled spans and cross references
# ---------------------------------------------------------------------------


def styled(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    """Relabel the single argument with the command's name."""
    take_star(tokens)
    arg = require_argument(tokens, command)
    tag = Tag.BLOCK if command.name in STYLED_BLOCK else Tag.INLINE
    el = out.append(Element(tag, command.name))
    math = False if command.name in TEXT_MODE_COMMANDS else None
    ex.expand_group(el, arg, scope, math=math)
    return DONE


def label(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    ident = group_text(require_argument(tokens, command)).strip()
    el = out.append(Element(Tag.INLINE, "label", [TextNode(ident)], {"id": ident}))
    if ident in ex.labels:
        logger.debug("label %r redefined", ident)
    ex.labels[ident] = el
    return DONE


def ref(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    target = group_text(require_argument(tokens, command)).strip()
    out.append(Element(Tag.ANCHOR, command.name, [TextNode(target)], {"href": f"#{target}"}))
    return DONE


# ---------------------------------------------------------------------------
# Math constructs
# ---------------------------------------------------------------------------


def fraction(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    numerator_arg = require_argument(tokens, command)
    denominator_arg = require_argument(tokens, command)
    numerator = Element(Tag.INLINE, "numerator")
    denominator = Element(Tag.INLINE, "denominator")
    ex.expand_group(numerator, numerator_arg, scope)
    ex.expand_group(denominator, denominator_arg, scope)
    out.append(Element(Tag.BLOCK, command.name, [numerator, Element(Tag.RULE, "rule"), denominator]))
    return DONE


def letter_style(
    ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope
) -> Signal:
    text = group_text(require_argument(tokens, command))
    out.append(Element(Tag.INLINE, command.name, [TextNode(transform_letters(command.name, text))]))
    return DONE


def sqrt(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    index = take_optional(tokens)
    arg = require_argument(tokens, command)
    el = out.append(Element(Tag.INLINE, "sqrt"))
    if index is not None:
        el.attrs["index"] = group_text(index).strip()
    ex.expand_group(el, arg, scope)
    return DONE


def display_math(
    ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope
) -> Signal:
    el = out.append(Element(Tag.BLOCK, DISPLAY_MATH))
    sig = ex.expand(el, tokens, scope.nested(DISPLAY_MATH, EnvKind.GROUP, math=True))
    return ex.close(DISPLAY_MATH, sig, el, scope, command.span)


def end_display_math(
    ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope
) -> Signal:
    return ClosedBy(DISPLAY_MATH, command.span)


def _delimiter(tokens: TokenStream, command: Command) -> str:
    arg = require_argument(tokens, command)
    tok = arg.children[0] if len(arg.children) == 1 else None
    if isinstance(tok, Command):
        return SYMBOLS.get(tok.name, tok.name)
    if isinstance(tok, Text):
        return "" if tok.content == "." else tok.content
    raise StructuralError(f"\\{command.name} needs a delimiter", arg.span)


def left(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    if not scope.math:
        raise StructuralError("\\left outside math mode", command.span)
    delimiter = _delimiter(tokens, command)
    el = out.append(Element(Tag.INLINE, DELIMITED))
    el.append_text(delimiter)
    sig = ex.expand(el, tokens, scope.nested(DELIMITED, EnvKind.GROUP))
    return ex.close(DELIMITED, sig, el, scope, command.span)


def right(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    delimiter = _delimiter(tokens, command)
    if not scope.within(DELIMITED):
        raise StructuralError("\\right without matching \\left", command.span)
    out.append_text(delimiter)
    return ClosedBy(DELIMITED, command.span)


# ---------------------------------------------------------------------------
# Active characters
# ---------------------------------------------------------------------------


def inline_math(
    ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope
) -> Signal:
    if scope.math and scope.within(INLINE_MATH):
        return ClosedBy(INLINE_MATH, command.span)
    el = out.append(Element(Tag.INLINE, INLINE_MATH))
    sig = ex.expand(el, tokens, scope.nested(INLINE_MATH, EnvKind.GROUP, math=True))
    return ex.close(INLINE_MATH, sig, el, scope, command.span)


def cell_separator(
    ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope
) -> Signal:
    if scope.kind is not EnvKind.TABLE:
        raise StructuralError("unexpected & outside a table", command.span)
    return ClosedBy(CELL_SEPARATOR, command.span)


def script(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    """Subscript `_` and superscript `^`."""
    if not scope.math:
        raise StructuralError(f"unexpected {command.name} outside math mode", command.span)
    if command.name == "^":
        el = Element(Tag.SUPERSCRIPT, "superscript")
    else:
        el = Element(Tag.SUBSCRIPT, "subscript")

    tokens.skip_ignored()
    tok = tokens.peek()
    if isinstance(tok, Command):
        tokens.pop()
        out.append(el)
        return ex.dispatch(tok, el, tokens, scope)

    arg = require_argument(tokens, command)
    out.append(el)
    ex.expand_group(el, arg, scope)
    return DONE


def tie(ex: Expander, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
    out.append_text("\u00a0")
    return DONE


def _make_commands() -> dict[str, Callable[..., Signal]]:
    table: dict[str, Callable[..., Signal]] = {
        "begin": begin,
        "end": end,
        "item": item,
        "par": par,
        "\\": row_separator,
        "newline": row_separator,
        "newcommand": define_command,
        "renewcommand": define_command,
        "providecommand": define_command,
        "label": label,
        "ref": ref,
        "autoref": ref,
        "eqref": ref,
        "frac": fraction,
        "dfrac": fraction,
        "tfrac": fraction,
        "sqrt": sqrt,
        "[": display_math,
        "]": end_display_math,
        "left": left,
        "right": right,
    }
    for name in STYLED_BLOCK | STYLED_INLINE:
        table[name] = styled
    for name in LETTER_STYLES:
        table[name] = letter_style
    for name in IGNORED_COMMANDS:
        table[name] = ignore
    return table


BUILTIN_COMMANDS = MappingProxyType(_make_commands())

ACTIVE_CHARACTERS = MappingProxyType(
    {
        "$": inline_math,
        "&": cell_separator,
        "_": script,
        "^": script,
        "~": tie,
    }
)
