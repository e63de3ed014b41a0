"""Test error messages, position accuracy, and context snippets."""

import pytest

from draftex.errors import LexError, StructuralError
from draftex.lexer import tokenize
from draftex.parser import parse
from draftex.tokens import Position, Span


class TestLexErrorFormatting:
    def test_format_contains_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("some text } more text")
        formatted = exc_info.value.format()
        assert "some text } more text" in formatted

    def test_format_has_caret(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("abc}")
        formatted = exc_info.value.format()
        lines = formatted.split("\n")
        caret_line = lines[-1]
        assert caret_line.rstrip().endswith("^")
        assert caret_line.index("^") - caret_line.index("|") - 2 == 3

    def test_format_has_filename(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("}")
        formatted = exc_info.value.format("draft.tex")
        assert "--> draft.tex:1:1" in formatted

    def test_str_is_formatted(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("}")
        assert str(exc_info.value).startswith("error: unmatched")

    def test_lex_error_aborts_parse(self):
        with pytest.raises(LexError):
            parse("\\section{Intro")


class TestStructuralErrorFormatting:
    def _error(self, **kwargs) -> StructuralError:
        span = Span(Position(1, 3, 2), Position(1, 7, 6))
        return StructuralError("bad thing", span, source="x \\foo y", **kwargs)

    def test_is_warning(self):
        assert self._error().format().startswith("warning: bad thing")

    def test_underlines_span(self):
        formatted = self._error().format()
        assert formatted.split("\n")[-1].count("^") == 4

    def test_call_stack_appended(self):
        formatted = self._error(call_stack=["outer", "inner"]).format()
        assert "in expansion chain: \\outer -> \\inner" in formatted

    def test_multiline_span_underlines_to_end_of_line(self):
        span = Span(Position(1, 3, 2), Position(2, 2, 9))
        err = StructuralError("bad", span, source="ab cdef\nxyz")
        assert err.format().split("\n")[-1].count("^") == 5


class TestDiagnosticsCarrySource:
    def test_reported_error_has_source_and_span(self):
        doc = parse("ok\n\n\\item here", "d.tex")
        assert len(doc.diagnostics) == 1
        err = doc.diagnostics[0]
        assert err.source.startswith("ok")
        assert err.span.start.line == 3
        assert "\\item here" in err.format("d.tex")
