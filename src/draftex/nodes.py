"""Output Tree node types handed to the rendering surface."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from draftex.errors import StructuralError


class Tag(Enum):
    """Generic structural kind; values are the HTML tag names used by render."""

    BLOCK = "div"
    PARAGRAPH = "p"
    INLINE = "span"
    ANCHOR = "a"
    LIST = "ul"
    LIST_ITEM = "li"
    TABLE = "table"
    ROW = "tr"
    CELL = "td"
    RULE = "hr"
    BREAK = "br"
    SUBSCRIPT = "sub"
    SUPERSCRIPT = "sup"


@dataclass(slots=True)
class TextNode:
    """Literal text."""

    content: str


@dataclass(slots=True)
class Element:
    """Structural node; class_name carries the environment or command name."""

    tag: Tag
    class_name: str
    children: list[Node] = field(default_factory=list)
    attrs: dict[str, str] = field(default_factory=dict)

    def append(self, node: Node) -> Node:
        """Append a child, merging text into a trailing TextNode."""
        if isinstance(node, TextNode):
            self.append_text(node.content)
            return self.children[-1] if node.content else node
        self.children.append(node)
        return node

    def append_text(self, content: str) -> None:
        if not content:
            return
        if self.children and isinstance(self.children[-1], TextNode):
            self.children[-1].content += content
        else:
            self.children.append(TextNode(content))

    def text(self) -> str:
        """Concatenated text of this subtree."""
        return "".join(
            child.content if isinstance(child, TextNode) else child.text()
            for child in self.children
        )

    def is_blank(self) -> bool:
        return all(
            child.content.isspace() if isinstance(child, TextNode) else child.is_blank()
            for child in self.children
        ) and self.tag not in _CONTENT_TAGS

    def iter_elements(self) -> Iterator[Element]:
        """Yield this element and every descendant element, depth-first."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter_elements()

    def find_all(self, class_name: str) -> list[Element]:
        return [el for el in self.iter_elements() if el.class_name == class_name]

    def trim(self) -> None:
        """Strip leading/trailing whitespace from text at the boundaries."""
        # Trim leading
        while self.children and isinstance(self.children[0], TextNode):
            stripped = self.children[0].content.lstrip()
            if stripped:
                self.children[0].content = stripped
                break
            self.children.pop(0)
        # Trim trailing
        while self.children and isinstance(self.children[-1], TextNode):
            stripped = self.children[-1].content.rstrip()
            if stripped:
                self.children[-1].content = stripped
                break
            self.children.pop()


Node = Element | TextNode

# Elements that render as something even with no text inside
_CONTENT_TAGS = frozenset({Tag.RULE, Tag.BREAK})


@dataclass(slots=True)
class Document:
    """Result of one full-document parse."""

    root: Element
    diagnostics: list[StructuralError] = field(default_factory=list)
    labels: dict[str, Element] = field(default_factory=dict)


def error_node(message: str) -> Element:
    """Inline annotation marking a recoverable structural error."""
    return Element(Tag.INLINE, "error", [TextNode(message)], {"title": message})


def comment_node(content: str) -> Element:
    return Element(Tag.INLINE, "comment", [TextNode(content)])
