"""Renderer unit tests."""

from __future__ import annotations

import draftex
from draftex.nodes import Document, Element, Tag, TextNode
from draftex.parser import parse
from draftex.render import render, render_node


def _doc(*children: Element) -> Document:
    return Document(Element(Tag.BLOCK, "root", list(children)))


class TestDocumentStructure:
    def test_minimal_document(self) -> None:
        result = render(_doc())
        assert result.startswith("<!DOCTYPE html>\n<html>\n")
        assert '<head>\n<meta charset="utf-8">\n</head>\n' in result
        assert '<body>\n<div class="root"></div>\n</body>\n' in result
        assert result.endswith("</html>\n")

    def test_title(self) -> None:
        result = render(_doc(), title="Notes & Drafts")
        assert "<title>Notes &amp; Drafts</title>" in result

    def test_no_title_by_default(self) -> None:
        assert "<title>" not in render(_doc())

    def test_stylesheets(self) -> None:
        result = render(_doc(), css_files=["a.css", "b.css"])
        assert '<link rel="stylesheet" href="a.css">\n<link rel="stylesheet" href="b.css">' in result

    def test_fragment(self) -> None:
        result = render(parse("Hi"), standalone=False)
        assert result == '<div class="root"><p class="par">Hi</p></div>\n'


class TestElements:
    def test_class_attribute(self) -> None:
        el = Element(Tag.INLINE, "emph", [TextNode("x")])
        assert render_node(el) == '<span class="emph">x</span>'

    def test_extra_attributes(self) -> None:
        el = Element(Tag.ANCHOR, "ref", [TextNode("x")], {"href": "#x"})
        assert render_node(el) == '<a class="ref" href="#x">x</a>'

    def test_void_tags(self) -> None:
        assert render_node(Element(Tag.RULE, "rule")) == '<hr class="rule">'
        assert render_node(Element(Tag.BREAK, "newline")) == '<br class="newline">'

    def test_list_items_on_own_lines(self) -> None:
        doc = parse("\\begin{itemize}\\item A\\item B\\end{itemize}")
        result = render(doc, standalone=False)
        assert '<ul class="itemize">\n<li class="item">A</li>\n<li class="item">B</li>\n</ul>' in result

    def test_table(self) -> None:
        doc = parse("\\begin{tabular}{ll}a & b\\end{tabular}")
        result = render(doc, standalone=False)
        assert '<table class="tabular" columns="ll">' in result
        assert '<tr class="row">\n<td class="left">a</td>\n<td class="left">b</td>\n</tr>' in result

    def test_fraction(self) -> None:
        result = render(parse("$\\frac{1}{2}$"), standalone=False)
        assert (
            '<div class="frac"><span class="numerator">1</span><hr class="rule">'
            '<span class="denominator">2</span></div>'
        ) in result


class TestEscaping:
    def test_html_specials(self) -> None:
        assert render_node(TextNode("a<b>&c")) == "a&lt;b&gt;&amp;c"

    def test_non_ascii_as_reference(self) -> None:
        assert render_node(TextNode("ɑ")) == "&#x251;"

    def test_attribute_quotes(self) -> None:
        el = Element(Tag.INLINE, "error", [], {"title": 'say "hi"'})
        assert render_node(el) == '<span class="error" title="say &quot;hi&quot;"></span>'

    def test_escaped_ampersand_from_source(self) -> None:
        result = render(parse("R\\&D"), standalone=False)
        assert "R&amp;D" in result


class TestCompile:
    def test_compile_pipeline(self) -> None:
        html = draftex.compile("Hello \\emph{world}", title="T", css_files=["s.css"])
        assert "<title>T</title>" in html
        assert '<link rel="stylesheet" href="s.css">' in html
        assert '<p class="par">Hello <span class="emph">world</span></p>' in html

    def test_compile_drops_comments(self) -> None:
        html = draftex.compile("a % secret\nb", keep_comments=False)
        assert "secret" not in html


class TestHeadings:
    def test_section_is_sibling_of_paragraphs(self) -> None:
        result = render(parse("\\section{A}\ntext"), standalone=False)
        assert result == '<div class="root"><div class="section">A</div><p class="par">text</p></div>\n'
