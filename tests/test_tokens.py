"""Tokenizer tests."""

import pytest

from smallc.tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_OP, TK_STRING, TokenizeError, tokenize


def _kinds(source: str) -> list[tuple[str, str]]:
    return [(t.type, t.value) for t in tokenize(source)]


def test_keywords_typed_by_spelling():
    assert _kinds("if x then end") == [
        ("if", "if"),
        (TK_IDENT, "x"),
        ("then", "then"),
        ("end", "end"),
        (TK_EOF, ""),
    ]


def test_hyphenated_unary_keywords():
    assert _kinds("to-int s$ to-string n")[:4] == [
        ("to-int", "to-int"),
        (TK_IDENT, "s$"),
        ("to-string", "to-string"),
        (TK_IDENT, "n"),
    ]


def test_to_followed_by_longer_word_is_subtraction():
    assert _kinds("to-integer")[:3] == [(TK_IDENT, "to"), (TK_OP, "-"), (TK_IDENT, "integer")]


def test_string_names_keep_dollar():
    assert _kinds("name$ = 1")[0] == (TK_IDENT, "name$")


def test_hex_number_text_kept():
    assert _kinds("#ff")[0] == (TK_NUMBER, "#ff")


def test_longest_operator_wins():
    ops = [v for t, v in _kinds("a >>> b >> c << d <= e ++ --") if t == TK_OP]
    assert ops == [">>>", ">>", "<<", "<=", "++", "--"]


def test_string_escapes():
    assert _kinds(r'"a\tb\n\"c\""')[0] == (TK_STRING, 'a\tb\n"c"')


def test_comment_and_positions():
    tokens = tokenize("// header\n  x = 1")
    assert (tokens[0].value, tokens[0].line, tokens[0].col) == ("x", 2, 3)
    assert tokens[-1].type == TK_EOF


@pytest.mark.parametrize(
    "source,message",
    [
        ('"abc', "unterminated string literal"),
        ('"a\nb"', "unterminated string literal"),
        (r'"\q"', "invalid escape"),
        ("#", "must be followed by hex digits"),
        ("12ab", "invalid number literal"),
        ("@", "unexpected character"),
    ],
)
def test_tokenize_errors(source: str, message: str):
    with pytest.raises(TokenizeError) as info:
        tokenize(source)
    assert message in str(info.value)
