"""Built-in tables: symbols, letter styles, styled commands, environments."""

from __future__ import annotations

from enum import Enum, auto
from types import MappingProxyType


class EnvKind(Enum):
    PARAGRAPHS = auto()  # content split into paragraph nodes
    BLOCK = auto()  # plain block, no paragraph splitting
    LIST = auto()  # between \item's of a list environment
    ITEM = auto()  # inside one list item
    TABLE = auto()  # inside one table cell
    GROUP = auto()  # inside a curly group or inline construct


# Environment name (without star) -> kind; anything else is BLOCK
ENVIRONMENTS: MappingProxyType[str, EnvKind] = MappingProxyType(
    {
        "document": EnvKind.PARAGRAPHS,
        "itemize": EnvKind.LIST,
        "enumerate": EnvKind.LIST,
        "description": EnvKind.LIST,
        "align": EnvKind.TABLE,
        "aligned": EnvKind.TABLE,
        "array": EnvKind.TABLE,
        "cases": EnvKind.TABLE,
        "tabular": EnvKind.TABLE,
    }
)

MATH_ENVIRONMENTS = frozenset(
    {"math", "displaymath", "equation", "align", "aligned", "array", "cases", "gather", "multline"}
)

# Table environments taking a column specification argument
COLUMN_SPEC_ENVIRONMENTS = frozenset({"array", "tabular"})


def destar(name: str) -> str:
    """Strip the star of a starred variant (align* -> align)."""
    return name.replace("*", "")


def environment_kind(name: str) -> EnvKind:
    return ENVIRONMENTS.get(destar(name), EnvKind.BLOCK)


def first_column_align(name: str) -> str:
    """Alignment of the first cell of each row."""
    return "right" if destar(name) == "align" else "left"


# Commands that relabel their single argument
STYLED_BLOCK = frozenset(
    {
        "title",
        "author",
        "date",
        "section",
        "subsection",
        "subsubsection",
        "paragraph",
        "caption",
    }
)

STYLED_INLINE = frozenset(
    {
        "boldsymbol",
        "ceil",
        "cite",
        "emph",
        "floor",
        "mathbf",
        "mathit",
        "mathrm",
        "mathsf",
        "mathtt",
        "mbox",
        "operatorname",
        "overline",
        "text",
        "textbf",
        "textit",
        "textrm",
        "textsf",
        "texttt",
        "underline",
    }
)

# Styled commands whose argument is set in text mode even inside math
TEXT_MODE_COMMANDS = frozenset({"mbox", "operatorname", "text", "textbf", "textit", "textrm", "textsf", "texttt"})

# Accepted and dropped; they only affect layout
IGNORED_COMMANDS = frozenset(
    {"centering", "displaystyle", "hline", "maketitle", "noindent", "tableofcontents"}
)

SYMBOLS: MappingProxyType[str, str] = MappingProxyType(
    {
        # Greek
        "alpha": "ɑ",
        "beta": "β",
        "gamma": "γ",
        "Gamma": "Γ",
        "delta": "δ",
        "Delta": "Δ",
        "epsilon": "ϵ",
        "varepsilon": "ε",
        "zeta": "ζ",
        "eta": "η",
        "theta": "θ",
        "Theta": "Θ",
        "iota": "ι",
        "kappa": "κ",
        "lambda": "λ",
        "Lambda": "Λ",
        "mu": "μ",
        "nu": "ν",
        "xi": "ξ",
        "Xi": "Ξ",
        "pi": "π",
        "Pi": "Π",
        "rho": "ρ",
        "sigma": "σ",
        "Sigma": "Σ",
        "tau": "τ",
        "upsilon": "υ",
        "phi": "ϕ",
        "varphi": "φ",
        "Phi": "Φ",
        "chi": "χ",
        "psi": "ψ",
        "Psi": "Ψ",
        "omega": "ω",
        "Omega": "Ω",
        # Operators and relations
        "sum": "Σ",
        "prod": "∏",
        "int": "∫",
        "infty": "∞",
        "partial": "∂",
        "nabla": "∇",
        "times": "×",
        "cdot": "⋅",
        "pm": "±",
        "in": "∈",
        "notin": "∉",
        "subset": "⊂",
        "subseteq": "⊆",
        "cup": "∪",
        "cap": "∩",
        "emptyset": "∅",
        "forall": "∀",
        "exists": "∃",
        "neg": "¬",
        "land": "∧",
        "lor": "∨",
        "leq": "≤",
        "geq": "≥",
        "neq": "≠",
        "approx": "≈",
        "equiv": "≡",
        "prec": "≺",
        "succ": "≻",
        "sim": "~",
        "rightarrow": "→",
        "leftarrow": "←",
        "Rightarrow": "⇒",
        "Leftarrow": "⇐",
        "leftrightarrow": "↔",
        "to": "→",
        "mapsto": "↦",
        "ldots": "…",
        "cdots": "⋯",
        "dots": "…",
        "lbrace": "{",
        "rbrace": "}",
        "langle": "⟨",
        "rangle": "⟩",
        # Spacing and escaped specials
        " ": " ",
        "\n": " ",
        ",": " ",
        ";": " ",
        "quad": " ",
        "qquad": "  ",
        "{": "{",
        "}": "}",
        "$": "$",
        "&": "&",
        "%": "%",
        "#": "#",
        "_": "_",
        "|": "‖",
    }
)

# Letter styles: per-letter exceptions, then an offset for A-Z
MATHBB_LOOKUP: MappingProxyType[str, str] = MappingProxyType(
    {
        "C": "ℂ",
        "H": "ℍ",
        "N": "ℕ",
        "P": "ℙ",
        "Q": "ℚ",
        "R": "ℝ",
        "Z": "ℤ",
    }
)
MATHBB_OFFSET = 0x1D538 - ord("A")

MATHCAL_LOOKUP: MappingProxyType[str, str] = MappingProxyType(
    {
        "B": "ℬ",
        "E": "ℰ",
        "F": "ℱ",
        "H": "ℋ",
        "I": "ℐ",
        "L": "ℒ",
        "M": "ℳ",
        "R": "ℛ",
        "e": "ℯ",
        "g": "ℊ",
        "o": "ℴ",
    }
)
MATHCAL_OFFSET = 0x1D49C - ord("A")

LETTER_STYLES: MappingProxyType[str, tuple[MappingProxyType[str, str], int]] = MappingProxyType(
    {
        "mathbb": (MATHBB_LOOKUP, MATHBB_OFFSET),
        "mathcal": (MATHCAL_LOOKUP, MATHCAL_OFFSET),
    }
)


def transform_letters(style: str, text: str) -> str:
    """Map ASCII letters through a letter style; other characters pass through."""
    lookup, offset = LETTER_STYLES[style]
    chars: list[str] = []
    for ch in text:
        mapped = lookup.get(ch)
        if mapped is not None:
            chars.append(mapped)
        elif "A" <= ch <= "Z":
            chars.append(chr(ord(ch) + offset))
        else:
            chars.append(ch)
    return "".join(chars)
