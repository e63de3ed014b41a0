"""Expander: walks a Token Tree against the command table to build the Output Tree."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeAlias

from draftex.args import consume_space, group_text, take_argument
from draftex.builtins import (
    COLUMN_SPEC_ENVIRONMENTS,
    MATH_ENVIRONMENTS,
    STYLED_BLOCK,
    SYMBOLS,
    EnvKind,
    destar,
    environment_kind,
    first_column_align,
)
from draftex.errors import StructuralError
from draftex.handlers import ACTIVE_CHARACTERS, BUILTIN_COMMANDS
from draftex.nodes import Document, Element, Tag, TextNode, comment_node, error_node
from draftex.signals import (
    CELL_SEPARATOR,
    CURLY,
    DONE,
    PAR,
    ROOT,
    ROW_SEPARATOR,
    ClosedBy,
    Done,
    Scope,
    Signal,
    describe_closer,
    describe_opener,
)
from draftex.tokens import (
    Command,
    Comment,
    Group,
    GroupKind,
    Parameter,
    Span,
    Text,
    TokenStream,
    is_letter,
    split_text,
)

logger = logging.getLogger(__name__)

Handler: TypeAlias = Callable[["Expander", Command, Element, TokenStream, Scope], Signal]

DEFAULT_MAX_CALL_DEPTH = 64


class Expander:
    """State of one full-document expansion.

    The command table starts as a copy of the built-ins and grows as
    \\newcommand definitions are met; it is never shared between parses.
    """

    def __init__(
        self,
        source: str = "",
        *,
        keep_comments: bool = True,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ) -> None:
        self.source = source
        self.keep_comments = keep_comments
        self.max_call_depth = max_call_depth
        self.commands: dict[str, Handler] = dict(BUILTIN_COMMANDS)
        self.call_stack: list[str] = []
        self.diagnostics: list[StructuralError] = []
        self.labels: dict[str, Element] = {}
        self._overflow_stack: list[str] | None = None

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def expand(self, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
        """Consume `tokens` into `out` until they run out or a close signal arrives."""
        while tokens:
            tok = tokens.pop()
            sig: Signal = DONE

            if isinstance(tok, Text):
                sig = self._text(tok, out, tokens, scope)
            elif isinstance(tok, Command):
                sig = self.dispatch(tok, out, tokens, scope)
            elif isinstance(tok, Group):
                if tok.kind is GroupKind.CURLY:
                    self.expand_group(out.append(Element(Tag.INLINE, CURLY)), tok, scope)
            elif isinstance(tok, Comment):
                if self.keep_comments:
                    out.append(comment_node(tok.content))
            elif isinstance(tok, Parameter):
                self.report(
                    StructuralError(f"argument #{tok.index} outside a macro body", tok.span), out
                )

            if isinstance(sig, ClosedBy):
                return sig
        return DONE

    def dispatch(self, command: Command, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
        """Run the handler for `command`: command table, then symbols, then passthrough."""
        handler = self.commands.get(command.name)
        if handler is not None:
            return self._invoke(handler, command, out, tokens, scope)

        symbol = SYMBOLS.get(command.name)
        if symbol is not None:
            out.append_text(symbol)
            if is_letter(command.name[0]):
                consume_space(tokens)
            return DONE

        logger.debug("unknown command \\%s passed through", command.name)
        out.append(Element(Tag.INLINE, "command", [TextNode(command.name)]))
        return DONE

    def _invoke(
        self,
        handler: Handler,
        command: Command,
        out: Element,
        tokens: TokenStream,
        scope: Scope,
    ) -> Signal:
        try:
            return handler(self, command, out, tokens, scope)
        except StructuralError as exc:
            self.report(exc, out)
            return DONE

    def _text(self, tok: Text, out: Element, tokens: TokenStream, scope: Scope) -> Signal:
        """Append literal text up to the first active character, then handle it."""
        index = next((i for i, ch in enumerate(tok.content) if ch in ACTIVE_CHARACTERS), -1)
        if index < 0:
            out.append_text(tok.content)
            return DONE

        head, tail = split_text(tok, index)
        out.append_text(head.content)
        char, rest = split_text(tail, 1)
        if rest.content:
            tokens.push(rest)
        active = Command(char.content, char.span)
        return self._invoke(ACTIVE_CHARACTERS[active.name], active, out, tokens, scope)

    def expand_group(
        self,
        out: Element,
        group: Group,
        scope: Scope,
        *,
        math: bool | None = None,
    ) -> None:
        """Expand a curly group's children into `out`; the group is a hard boundary."""
        inner = scope.nested(CURLY, EnvKind.GROUP, math=math)
        sig = self.expand(out, TokenStream(group.children), inner)
        if isinstance(sig, ClosedBy):
            closer = describe_closer(sig.name, sig.environment)
            self.report(StructuralError(f"unexpected {closer} inside a group", sig.span), out)

    def expand_macro(
        self,
        name: str,
        body: Group,
        out: Element,
        tokens: TokenStream,
        scope: Scope,
        span: Span,
    ) -> Signal:
        """Expand a substituted macro body in place of the call."""
        if len(self.call_stack) >= self.max_call_depth:
            raise StructuralError(
                f"macro call depth limit ({self.max_call_depth}) exceeded",
                span,
                call_stack=list(self.call_stack),
            )

        self.call_stack.append(name)
        body_tokens = TokenStream(body.children)
        try:
            sig = self.expand(out, body_tokens, scope)
        except RecursionError:
            # Unwind to the outermost call, where there is room to report
            if self._overflow_stack is None:
                self._overflow_stack = list(self.call_stack)
            if len(self.call_stack) > 1:
                raise
            chain, self._overflow_stack = self._overflow_stack, None
            raise StructuralError(
                f"macro call depth limit exceeded at depth {len(chain)}",
                span,
                call_stack=chain,
            ) from None
        finally:
            self.call_stack.pop()

        if isinstance(sig, ClosedBy):
            # The rest of the body continues after whatever just closed
            tokens.push_all(body_tokens.drain())
        return sig

    # ------------------------------------------------------------------
    # Structures
    # ------------------------------------------------------------------

    def environment(
        self,
        name: str,
        out: Element,
        tokens: TokenStream,
        scope: Scope,
        span: Span,
    ) -> Signal:
        """\\begin{name}: open the structure and expand until its \\end."""
        base = destar(name)
        kind = environment_kind(name)
        inner = scope.nested(
            name, kind, math=scope.math or base in MATH_ENVIRONMENTS, environment=True
        )

        if kind is EnvKind.TABLE:
            el = out.append(Element(Tag.TABLE, base))
            if base in COLUMN_SPEC_ENVIRONMENTS:
                columns = take_argument(tokens)
                if columns is not None:
                    el.attrs["columns"] = group_text(columns).strip()
            sig = self.table(el, tokens, inner, first_column_align(name))
        elif kind is EnvKind.LIST:
            el = out.append(Element(Tag.LIST, base))
            sig = self.expand(el, tokens, inner)
            el.children = [
                c for c in el.children if not (isinstance(c, TextNode) and c.content.isspace())
            ]
        elif kind is EnvKind.PARAGRAPHS:
            el = out.append(Element(Tag.BLOCK, base))
            sig = self.paragraphs(el, tokens, inner)
        else:
            el = out.append(Element(Tag.BLOCK, base))
            sig = self.expand(el, tokens, inner)

        return self.close(name, sig, el, scope, span, environment=True)

    def close(
        self,
        name: str,
        sig: Signal,
        out: Element,
        scope: Scope,
        span: Span,
        *,
        environment: bool = False,
    ) -> Signal:
        """Interpret the signal that ended the structure `name`.

        Returns DONE when the structure closed (normally or by recovery), or
        the signal itself when it belongs to an enclosing structure.
        """
        opener = describe_opener(name, environment)
        if isinstance(sig, Done):
            expected = describe_closer(name, environment)
            self.report(
                StructuralError(f"{opener} is never closed (expected {expected})", span), out
            )
            return DONE

        if sig.closes(name, environment):
            return DONE

        closer = describe_closer(sig.name, sig.environment)
        self.report(StructuralError(f"{opener} ended by {closer}", sig.span), out)
        if scope.within(sig.name, sig.environment):
            return sig
        return DONE

    def paragraphs(self, container: Element, tokens: TokenStream, scope: Scope) -> Signal:
        """Expand into successive paragraph nodes, one per paragraph break."""
        while True:
            para = Element(Tag.PARAGRAPH, PAR)
            sig = self.expand(para, tokens, scope)
            _split_paragraph(container, para)
            if isinstance(sig, ClosedBy) and sig.closes(PAR):
                continue
            return sig

    def table(self, table: Element, tokens: TokenStream, scope: Scope, align: str) -> Signal:
        """Expand cell by cell; & opens a cell, \\\\ opens a row."""
        row = table.append(Element(Tag.ROW, "row"))
        cell = row.append(Element(Tag.CELL, align))
        while True:
            sig = self.expand(cell, tokens, scope)
            cell.trim()
            if isinstance(sig, ClosedBy) and sig.closes(CELL_SEPARATOR):
                cell = row.append(Element(Tag.CELL, "left"))
                continue
            if isinstance(sig, ClosedBy) and sig.closes(ROW_SEPARATOR):
                row = table.append(Element(Tag.ROW, "row"))
                cell = row.append(Element(Tag.CELL, align))
                continue
            break

        # A final \\ leaves one empty row behind
        if len(table.children) > 1 and len(row.children) == 1 and not cell.children:
            table.children.pop()
        return sig

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def report(self, exc: StructuralError, out: Element) -> None:
        """Record a structural error and annotate the output at `out`."""
        if not exc.source:
            exc.source = self.source
        if not exc.call_stack and self.call_stack:
            exc.call_stack = list(self.call_stack)
        logger.info(
            "%s at line %d, column %d",
            exc.message,
            exc.span.start.line,
            exc.span.start.column,
        )
        out.append(error_node(exc.message))
        self.diagnostics.append(exc)


def _split_paragraph(container: Element, para: Element) -> None:
    """Append `para` to `container`, lifting headings out as siblings of the paragraphs."""
    segment = Element(Tag.PARAGRAPH, PAR)
    for child in para.children:
        heading = isinstance(child, Element) and child.tag is Tag.BLOCK
        if heading and child.class_name in STYLED_BLOCK:
            _append_paragraph(container, segment)
            container.append(child)
            segment = Element(Tag.PARAGRAPH, PAR)
        else:
            segment.children.append(child)
    _append_paragraph(container, segment)


def _append_paragraph(container: Element, para: Element) -> None:
    para.trim()
    if not para.is_blank():
        container.append(para)


def expand_document(
    root_group: Group,
    source: str = "",
    *,
    keep_comments: bool = True,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
) -> Document:
    """Expand a whole Token Tree into a Document."""
    ex = Expander(source, keep_comments=keep_comments, max_call_depth=max_call_depth)
    root = Element(Tag.BLOCK, ROOT)
    tokens = TokenStream(root_group.children)
    scope = Scope(ROOT, EnvKind.PARAGRAPHS)

    while True:
        try:
            sig = ex.paragraphs(root, tokens, scope)
        except RecursionError:
            ex.report(StructuralError("structures nested too deeply", root_group.span), root)
            break
        if isinstance(sig, Done):
            break
        closer = describe_closer(sig.name, sig.environment)
        opener = describe_opener(sig.name, sig.environment)
        ex.report(StructuralError(f"{closer} without matching {opener}", sig.span), root)

    return Document(root, ex.diagnostics, ex.labels)
