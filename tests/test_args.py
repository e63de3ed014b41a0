"""Test the argument extractor and the optional/star helpers."""

import pytest

from draftex.args import (
    consume_space,
    group_text,
    require_argument,
    take_argument,
    take_optional,
    take_star,
)
from draftex.errors import StructuralError
from draftex.lexer import tokenize
from draftex.tokens import Command, GroupKind, Text, TokenStream


def stream(source: str) -> TokenStream:
    return TokenStream(tokenize(source).children)


class TestTakeArgument:
    def test_curly_group_returned_as_is(self):
        tokens = stream("{abc}def")
        arg = take_argument(tokens)
        assert arg.kind is GroupKind.CURLY
        assert group_text(arg) == "abc"
        assert tokens.peek().content == "def"

    def test_single_command_wrapped(self):
        tokens = stream("\\alpha\\beta")
        arg = take_argument(tokens)
        assert len(arg.children) == 1
        assert isinstance(arg.children[0], Command)
        assert arg.children[0].name == "alpha"
        assert tokens.peek().name == "beta"

    def test_first_character_of_text(self):
        tokens = stream("xyz")
        arg = take_argument(tokens)
        assert group_text(arg) == "x"
        assert tokens.peek().content == "yz"

    def test_skips_ignored_whitespace(self):
        tokens = stream("\\foo {a}")
        tokens.pop()
        arg = take_argument(tokens)
        assert group_text(arg) == "a"

    def test_skips_leading_blank_text(self):
        tokens = stream("{x} {y}")
        take_argument(tokens)
        arg = take_argument(tokens)
        assert group_text(arg) == "y"

    def test_split_character_span(self):
        tokens = stream("ab")
        arg = take_argument(tokens)
        assert arg.span.start.column == 1
        assert arg.span.end.column == 2
        assert tokens.peek().span.start.column == 2

    def test_no_argument_at_end(self):
        assert take_argument(stream("")) is None

    def test_no_argument_before_comment(self):
        assert take_argument(stream("% c")) is None

    def test_successive_arguments(self):
        tokens = stream("{1}{2}3")
        assert [group_text(take_argument(tokens)) for _ in range(3)] == ["1", "2", "3"]
        assert take_argument(tokens) is None


class TestRequireArgument:
    def test_missing_raises(self):
        cmd = Command("frac", tokenize("x").span)
        with pytest.raises(StructuralError, match="missing argument for \\\\frac"):
            require_argument(stream(""), cmd)


class TestTakeOptional:
    def test_optional_present(self):
        tokens = stream("[3]{x}")
        opt = take_optional(tokens)
        assert group_text(opt) == "3"
        assert group_text(take_argument(tokens)) == "x"

    def test_optional_absent(self):
        tokens = stream("{x}")
        assert take_optional(tokens) is None
        assert len(tokens) == 1

    def test_optional_spanning_tokens(self):
        tokens = stream("[a \\b c]rest")
        opt = take_optional(tokens)
        assert any(isinstance(t, Command) and t.name == "b" for t in opt.children)
        assert tokens.peek().content == "rest"

    def test_unclosed_optional_raises(self):
        with pytest.raises(StructuralError, match="missing '\\]'"):
            take_optional(stream("[abc"))


class TestStarAndSpace:
    def test_star_consumed(self):
        tokens = stream("*{x}")
        assert take_star(tokens) is True
        assert group_text(take_argument(tokens)) == "x"

    def test_no_star(self):
        assert take_star(stream("{x}")) is False

    def test_consume_one_space(self):
        tokens = TokenStream([Text("  y", tokenize("").span)])
        consume_space(tokens)
        assert tokens.peek().content == " y"

    def test_consume_one_character_of_ignored_group(self):
        tokens = stream("\\a  x")
        tokens.pop()
        consume_space(tokens)
        spacing = tokens.pop()
        assert spacing.kind is GroupKind.IGNORED
        assert group_text(spacing) == " "
        assert tokens.peek().content == "x"

    def test_consume_ignored_group(self):
        tokens = stream("\\a x")
        tokens.pop()
        consume_space(tokens)
        assert tokens.peek().content == "x"
