"""tests/test_lexer.py: Unit tests for the command Lexer."""

import pytest
from botdb.lexer import tokenize, TokenType, LexError


def types(line):
    return [t.type for t in tokenize(line) if t.type != TokenType.EOF]

def values(line):
    return [t.value for t in tokenize(line) if t.type != TokenType.EOF]


class TestWords:
    def test_simple_word(self):
        toks = tokenize("pets")
        assert toks[0].type == TokenType.WORD
        assert toks[0].value == "pets"

    def test_word_with_underscore_dash_dot(self):
        assert values("invite_manager my-table v1.2") == ["invite_manager", "my-table", "v1.2"]

    def test_case_preserved(self):
        assert values("ADD Pets") == ["ADD", "Pets"]


class TestNumbers:
    def test_integer(self):
        toks = tokenize("42")
        assert toks[0].type == TokenType.NUMBER
        assert toks[0].value == "42"

    def test_float(self):
        assert values("3.14") == ["3.14"]

    def test_negative(self):
        assert types("-1 -2.5") == [TokenType.NUMBER, TokenType.NUMBER]
        assert values("-1 -2.5") == ["-1", "-2.5"]

    def test_trailing_dot_not_consumed(self):
        with pytest.raises(LexError):
            tokenize("3.")


class TestStrings:
    def test_simple_string(self):
        toks = tokenize("'hello world'")
        assert toks[0].type == TokenType.STRING
        assert toks[0].value == "hello world"

    def test_escaped_quote(self):
        assert values("'it''s ok'") == ["it's ok"]

    def test_empty_string(self):
        assert values("''") == [""]

    def test_unterminated_raises(self):
        with pytest.raises(LexError, match="Unterminated"):
            tokenize("'oops")


class TestMisc:
    def test_command_line(self):
        assert types("ADD pets 'Mr. Whiskers' 3;") == [
            TokenType.WORD, TokenType.WORD, TokenType.STRING,
            TokenType.NUMBER, TokenType.SYMBOL,
        ]

    def test_comment_skipped(self):
        assert values("SHOW pets # everything") == ["SHOW", "pets"]

    def test_eof_always_last(self):
        assert tokenize("")[-1].type == TokenType.EOF
        assert tokenize("FLUSH")[-1].type == TokenType.EOF

    def test_positions(self):
        toks = tokenize("GET pets 0")
        assert [t.pos for t in toks[:3]] == [0, 4, 9]

    def test_unexpected_character(self):
        with pytest.raises(LexError, match="Unexpected"):
            tokenize("ADD pets @")
