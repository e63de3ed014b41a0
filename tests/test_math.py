"""Test math mode: toggles, scripts, delimiters, fractions, roots."""

import pytest

from draftex.nodes import Tag

from tests.conftest import error_messages, find_class


class TestInlineMath:
    def test_inline_math_span(self, parse_source):
        doc = parse_source("where $x$ is")
        (math,) = find_class(doc, "short-math")
        assert math.tag is Tag.INLINE
        assert math.text() == "x"
        assert doc.diagnostics == []

    def test_unclosed_inline_math(self, parse_source):
        doc = parse_source("cost $x")
        assert error_messages(doc) == ["$ is never closed (expected $)"]

    def test_math_environment(self, parse_source):
        doc = parse_source("\\begin{equation}x^2\\end{equation}")
        assert len(find_class(doc, "superscript")) == 1
        assert doc.diagnostics == []


class TestDisplayMath:
    def test_display_math_block(self, parse_source):
        doc = parse_source("\\[ E = mc^2 \\]")
        (display,) = find_class(doc, "short-displaymath")
        assert display.tag is Tag.BLOCK
        (sup,) = find_class(display, "superscript")
        assert sup.text() == "2"

    def test_stray_close(self, parse_source):
        doc = parse_source("x \\]")
        assert error_messages(doc) == ["\\] without matching \\["]


class TestScripts:
    def test_superscript_character(self, parse_source):
        doc = parse_source("$x^23$")
        (sup,) = find_class(doc, "superscript")
        assert sup.tag is Tag.SUPERSCRIPT
        assert sup.text() == "2"
        (math,) = find_class(doc, "short-math")
        assert math.text() == "x23"

    def test_subscript_group(self, parse_source):
        doc = parse_source("$a_{ij}$")
        (sub,) = find_class(doc, "subscript")
        assert sub.tag is Tag.SUBSCRIPT
        assert sub.text() == "ij"

    def test_script_command_dispatched_into_script(self, parse_source):
        doc = parse_source("$e^\\alpha$")
        (sup,) = find_class(doc, "superscript")
        assert sup.text() == "ɑ"

    def test_script_styled_command(self, parse_source):
        doc = parse_source("$x_\\mathrm{max}$")
        (sub,) = find_class(doc, "subscript")
        assert find_class(sub, "mathrm")[0].text() == "max"

    @pytest.mark.parametrize("char", ["^", "_"])
    def test_script_outside_math(self, parse_source, char):
        doc = parse_source(f"x{char}2")
        assert error_messages(doc) == [f"unexpected {char} outside math mode"]

    def test_text_mode_inside_math(self, parse_source):
        doc = parse_source("$\\text{a_b}$")
        assert error_messages(doc) == ["unexpected _ outside math mode"]

    def test_script_missing_argument(self, parse_source):
        doc = parse_source("$x^")
        assert "missing argument for \\^" in error_messages(doc)


class TestDelimiters:
    def test_left_right(self, parse_source):
        doc = parse_source("$\\left( x \\right)$")
        (span,) = find_class(doc, "mathspan")
        assert span.text() == "( x )"
        assert doc.diagnostics == []

    def test_invisible_delimiter(self, parse_source):
        doc = parse_source("$\\left. x \\right|$")
        (span,) = find_class(doc, "mathspan")
        assert span.text() == " x |"

    def test_left_outside_math(self, parse_source):
        doc = parse_source("\\left( x")
        assert error_messages(doc) == ["\\left outside math mode"]

    def test_right_without_left(self, parse_source):
        doc = parse_source("$x \\right)$")
        assert error_messages(doc) == ["\\right without matching \\left"]

    def test_left_never_closed(self, parse_source):
        doc = parse_source("$\\left( x$")
        messages = error_messages(doc)
        assert messages[0] == "\\left ended by $"


class TestConstructs:
    def test_fraction(self, parse_source):
        doc = parse_source("$\\frac{a}{b}$")
        (frac,) = find_class(doc, "frac")
        assert frac.tag is Tag.BLOCK
        numerator, rule, denominator = frac.children
        assert numerator.text() == "a"
        assert rule.tag is Tag.RULE
        assert denominator.text() == "b"

    @pytest.mark.parametrize("name", ["dfrac", "tfrac"])
    def test_fraction_variants(self, parse_source, name):
        doc = parse_source(f"$\\{name}12$")
        (frac,) = find_class(doc, name)
        assert frac.children[0].text() == "1"
        assert frac.children[2].text() == "2"

    def test_fraction_missing_denominator(self, parse_source):
        doc = parse_source("\\frac{a}")
        assert error_messages(doc) == ["missing argument for \\frac"]

    def test_sqrt(self, parse_source):
        doc = parse_source("$\\sqrt{x}$")
        (root,) = find_class(doc, "sqrt")
        assert root.text() == "x"
        assert "index" not in root.attrs

    def test_sqrt_index(self, parse_source):
        doc = parse_source("$\\sqrt[3]{x}$")
        (root,) = find_class(doc, "sqrt")
        assert root.attrs["index"] == "3"
