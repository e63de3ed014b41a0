"""User macros: \\newcommand registration and argument substitution."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from draftex.args import group_text, require_argument, take_argument, take_optional
from draftex.errors import StructuralError
from draftex.nodes import Element
from draftex.signals import DONE, Scope, Signal
from draftex.tokens import Command, Group, GroupKind, Parameter, Token, TokenStream, coalesce

if TYPE_CHECKING:
    from draftex.expand import Expander

logger = logging.getLogger(__name__)

MAX_ARITY = 9


@dataclass(frozen=True, slots=True)
class Macro:
    """Command-table entry for a user-defined command.

    `body` is the stored template; every call works on a deep copy. When
    `default` is set the first argument is optional and falls back to it.
    """

    name: str
    arity: int
    body: Group
    default: Group | None = None

    def __call__(
        self,
        ex: Expander,
        command: Command,
        out: Element,
        tokens: TokenStream,
        scope: Scope,
    ) -> Signal:
        body = copy.deepcopy(self.body)

        args: list[Group] = []
        if self.default is not None:
            given = take_optional(tokens)
            args.append(given if given is not None else copy.deepcopy(self.default))
        while len(args) < self.arity:
            arg = take_argument(tokens)
            if arg is None:
                raise StructuralError(
                    f"missing argument {len(args) + 1} of {self.arity} for \\{self.name}",
                    command.span,
                    call_stack=list(ex.call_stack),
                )
            args.append(arg)

        substitute(body.children, args, self.name)
        return ex.expand_macro(self.name, body, out, tokens, scope, command.span)


def substitute(children: list[Token], args: list[Group], name: str) -> None:
    """Replace every #i in `children` (recursively) with a copy of args[i-1]."""
    i = 0
    while i < len(children):
        tok = children[i]
        if isinstance(tok, Parameter):
            if not 1 <= tok.index <= len(args):
                raise StructuralError(
                    f"undefined argument #{tok.index} in \\{name} (takes {len(args)})",
                    tok.span,
                )
            replacement = copy.deepcopy(args[tok.index - 1].children)
            children[i : i + 1] = replacement
            i += len(replacement)
            continue
        if isinstance(tok, Group):
            substitute(tok.children, args, name)
        i += 1
    coalesce(children)


def _macro_name(target: Group, command: Command) -> str:
    names = [tok for tok in target.children if not _is_spacing(tok)]
    if len(names) != 1 or not isinstance(names[0], Command):
        raise StructuralError(
            f"first argument to \\{command.name} must be a single command", command.span
        )
    return names[0].name


def _is_spacing(tok: Token) -> bool:
    return isinstance(tok, Group) and tok.kind is GroupKind.IGNORED


def _arity(spec: Group | None, command: Command) -> int:
    if spec is None:
        return 0
    text = group_text(spec).strip()
    if not text.isdigit() or int(text) > MAX_ARITY:
        raise StructuralError(
            f"invalid argument count '{text}' for \\{command.name} (expected 0-{MAX_ARITY})",
            spec.span,
        )
    return int(text)


def define_command(
    ex: Expander,
    command: Command,
    out: Element,
    tokens: TokenStream,
    scope: Scope,
) -> Signal:
    """\\newcommand{\\name}[arity][default]{body} and its variants."""
    target = require_argument(tokens, command)
    name = _macro_name(target, command)
    arity = _arity(take_optional(tokens), command)
    default = take_optional(tokens) if arity > 0 else None
    body = require_argument(tokens, command)

    if command.name == "providecommand" and name in ex.commands:
        logger.debug("\\%s already defined, keeping existing definition", name)
        return DONE

    ex.commands[name] = Macro(name, arity, body, default)
    logger.debug("defined \\%s with %d argument(s)", name, arity)
    return DONE
