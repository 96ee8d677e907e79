"""Small tokenizer — lexes source into a flat token list."""

from __future__ import annotations


# Token type constants
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "break",
    "case",
    "continue",
    "default",
    "do",
    "elif",
    "else",
    "end",
    "false",
    "for",
    "function",
    "halt",
    "if",
    "int",
    "length",
    "max",
    "min",
    "new",
    "print",
    "read",
    "string",
    "switch",
    "then",
    "true",
    "until",
    "while",
}

# "to-int" and "to-string" are single tokens; "int" and "string" are keywords,
# so "to - int" can never be an expression.
HYPHENATED: list[str] = ["to-string", "to-int"]

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    ">>>",
    "<<",
    ">>",
    "<=",
    ">=",
    "==",
    "!=",
    "++",
    "--",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "<",
    ">",
    "=",
    "?",
    ":",
    "(",
    ")",
    "[",
    "]",
    ",",
    ";",
}

ESCAPE_MAP: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
    "0": "\0",
}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

    def describe(self) -> str:
        """Human-readable form used in syntax error messages."""
        if self.type == TK_EOF:
            return "end of input"
        if self.type == TK_STRING:
            return "string " + repr(self.value)
        if self.type == TK_NUMBER:
            return "number " + self.value
        if self.type == TK_IDENT:
            return "identifier '" + self.value + "'"
        return "'" + self.value + "'"

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str) -> list[Token]:
    """Tokenize Small source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            col = 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Hex number: #ff (the parser rewrites it to decimal)
        if c == "#":
            pos += 1
            col += 1
            while pos < length and _is_hex(source[pos]):
                pos += 1
                col += 1
            if pos - start_pos == 1:
                raise TokenizeError("'#' must be followed by hex digits", start_line, start_col)
            tokens.append(Token(TK_NUMBER, source[start_pos:pos], start_line, start_col))
            continue

        # Decimal number
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
                col += 1
            if pos < length and _is_alpha(source[pos]):
                raise TokenizeError("invalid number literal", start_line, start_col)
            tokens.append(Token(TK_NUMBER, source[start_pos:pos], start_line, start_col))
            continue

        # String literal: "..."
        if c == '"':
            pos += 1
            col += 1
            chars: list[str] = []
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    raise TokenizeError("unterminated string literal", start_line, start_col)
                if source[pos] == "\\":
                    pos += 1
                    col += 1
                    if pos >= length:
                        raise TokenizeError("unterminated string literal", start_line, start_col)
                    esc = source[pos]
                    if esc not in ESCAPE_MAP:
                        raise TokenizeError("invalid escape: \\" + esc, line, col)
                    chars.append(ESCAPE_MAP[esc])
                else:
                    chars.append(source[pos])
                pos += 1
                col += 1
            if pos >= length:
                raise TokenizeError("unterminated string literal", start_line, start_col)
            pos += 1  # skip closing "
            col += 1
            tokens.append(Token(TK_STRING, "".join(chars), start_line, start_col))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            matched = False
            for word in HYPHENATED:
                end = pos + len(word)
                if source[pos:end] == word and (end >= length or not _is_alnum(source[end])):
                    tokens.append(Token(word, word, start_line, start_col))
                    pos = end
                    col += len(word)
                    matched = True
                    break
            if matched:
                continue
            while pos < length and _is_alnum(source[pos]):
                pos += 1
                col += 1
            if pos < length and source[pos] == "$":
                pos += 1
                col += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(word, word, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        # Multi-character operators
        matched = False
        for op in MULTI_OPS:
            op_len = len(op)
            if pos + op_len <= length and source[pos : pos + op_len] == op:
                tokens.append(Token(TK_OP, op, start_line, start_col))
                pos += op_len
                col += op_len
                matched = True
                break
        if matched:
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            tokens.append(Token(TK_OP, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("unexpected character: " + repr(c), line, col)

    tokens.append(Token(TK_EOF, "", line, col))
    return tokens
