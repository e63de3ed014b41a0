"""Handler results and expansion scopes."""

from __future__ import annotations

from dataclasses import dataclass

from draftex.builtins import EnvKind
from draftex.tokens import Span

# Internal structure names used as close-signal names. They live apart from
# environment names, so \end{par} never closes a paragraph.
ROOT = "root"
CURLY = "curly"
PAR = "par"
ITEM = "item"
CELL_SEPARATOR = "&"
ROW_SEPARATOR = "\\\\"
INLINE_MATH = "short-math"
DISPLAY_MATH = "short-displaymath"
DELIMITED = "mathspan"


@dataclass(frozen=True, slots=True)
class Done:
    """The handler finished; expansion continues with the next token."""


@dataclass(frozen=True, slots=True)
class ClosedBy:
    """A structure named `name` was closed by the token at `span`.

    `environment` is set for signals raised by \\end{name}; those only close
    structures opened by \\begin{name}.
    """

    name: str
    span: Span
    environment: bool = False

    def closes(self, name: str, environment: bool = False) -> bool:
        return self.name == name and self.environment == environment


Signal = Done | ClosedBy

DONE = Done()


@dataclass(frozen=True, slots=True)
class Scope:
    """The structure a recursive expansion call is working inside."""

    name: str
    kind: EnvKind
    math: bool = False
    parent: Scope | None = None
    environment: bool = False

    def nested(
        self,
        name: str,
        kind: EnvKind,
        *,
        math: bool | None = None,
        environment: bool = False,
    ) -> Scope:
        return Scope(name, kind, self.math if math is None else math, self, environment)

    def within(self, name: str, environment: bool = False) -> bool:
        """Return True if this scope or an enclosing one is named `name`."""
        scope: Scope | None = self
        while scope is not None:
            if scope.name == name and scope.environment == environment:
                return True
            scope = scope.parent
        return False


def describe_opener(name: str, environment: bool = False) -> str:
    if environment:
        return f"\\begin{{{name}}}"
    match name:
        case "short-math":
            return "$"
        case "short-displaymath":
            return "\\["
        case "mathspan":
            return "\\left"
        case "curly":
            return "{"
        case _:
            return f"\\{name}"


def describe_closer(name: str, environment: bool = False) -> str:
    if environment:
        return f"\\end{{{name}}}"
    match name:
        case "short-math":
            return "$"
        case "short-displaymath":
            return "\\]"
        case "mathspan":
            return "\\right"
        case "curly":
            return "}"
        case "&" | "\\\\":
            return name
        case _:
            return f"\\{name}"
