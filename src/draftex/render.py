"""HTML renderer: converts an Output Tree to HTML for the editing surface."""

from __future__ import annotations

from collections.abc import Sequence

from draftex.nodes import Document, Element, Tag, TextNode

_VOID_TAGS = frozenset({Tag.RULE, Tag.BREAK})


def render(
    doc: Document,
    *,
    title: str | None = None,
    css_files: Sequence[str] = (),
    standalone: bool = True,
) -> str:
    """Render a parsed document to HTML.

    With standalone=False only the root element is returned, ready to be
    mounted into an existing page.
    """
    body = render_node(doc.root)
    if not standalone:
        return body + "\n"

    parts: list[str] = ["<!DOCTYPE html>\n", "<html>\n", "<head>\n"]
    parts.append('<meta charset="utf-8">\n')
    if title:
        parts.append(f"<title>{_escape_html(title)}</title>\n")
    for path in css_files:
        parts.append(f'<link rel="stylesheet" href="{_escape_attr(path)}">\n')
    parts.append("</head>\n")
    parts.append("<body>\n")
    parts.append(body)
    parts.append("\n</body>\n")
    parts.append("</html>\n")
    return "".join(parts)


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------


def _escape_html(text: str) -> str:
    """Escape text for HTML body content. Also encodes non-ASCII as entities."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        elif ord(ch) > 0x7F:
            result.append(f"&#x{ord(ch):X};")
        else:
            result.append(ch)
    return "".join(result)


def _escape_attr(text: str) -> str:
    """Escape text for HTML attribute values."""
    return _escape_html(text).replace('"', "&quot;")


# ---------------------------------------------------------------------------
# Node rendering
# ---------------------------------------------------------------------------


def render_node(node: Element | TextNode) -> str:
    if isinstance(node, TextNode):
        return _escape_html(node.content)

    tag = node.tag.value
    attrs = [f'class="{_escape_attr(node.class_name)}"']
    attrs.extend(f'{name}="{_escape_attr(value)}"' for name, value in node.attrs.items())
    open_tag = f"<{tag} {' '.join(attrs)}>"

    if node.tag in _VOID_TAGS:
        return open_tag

    inner = "".join(render_node(child) for child in node.children)
    if node.tag in (Tag.LIST, Tag.TABLE, Tag.ROW):
        # One child per line for the container tags
        inner = "\n" + "\n".join(render_node(child) for child in node.children) + "\n"
    return f"{open_tag}{inner}</{tag}>"
