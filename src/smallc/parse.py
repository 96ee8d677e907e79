"""Small parser — recursive descent, one method per grammar production.

Every decision is made on the current token alone. A violated expectation
raises ParseError; there is no recovery.
"""

from __future__ import annotations

from .ast import (
    Arm,
    ArrayStore,
    Assign,
    BinaryOp,
    Block,
    BreakStmt,
    ContinueStmt,
    Expr,
    HaltStmt,
    IfStmt,
    IncDec,
    Index,
    IntLit,
    NewArray,
    Pos,
    PrintStmt,
    Program,
    ReadStmt,
    Stmt,
    StringLit,
    SwitchStmt,
    Ternary,
    UnaryOp,
    UntilStmt,
    Var,
    WhileStmt,
)
from .tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_OP, TK_STRING, Token
from .types import INT_MAX

COMPARE_OPS: set[str] = {"<", "<=", "==", "!=", ">=", ">"}
ADD_OPS: set[str] = {"+", "-"}
SHIFT_OPS: set[str] = {">>", "<<", ">>>"}
MULT_OPS: set[str] = {"*", "/", "%"}
UNARY_KEYWORDS: set[str] = {"to-int", "to-string", "length"}

# Tokens that can start a term, for the error raised when none is found
TERM_START: list[str] = [
    TK_IDENT,
    TK_NUMBER,
    TK_STRING,
    "-",
    "(",
    "true",
    "false",
    "to-int",
    "to-string",
    "length",
    "new",
    "min",
    "max",
]


class ParseError(Exception):
    """Syntax error naming the expected tokens and the one found."""

    def __init__(self, msg: str, line: int, col: int, expected: list[str] | None = None, found: str = ""):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        self.expected: list[str] = expected if expected is not None else []
        self.found: str = found
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Parser:
    """Recursive descent parser for Small."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        """True if the current token is the keyword, operator or token type `value`."""
        tok = self.current()
        return tok.type == value or (tok.type == TK_OP and tok.value == value)

    def at_any(self, values: set[str] | list[str]) -> bool:
        for value in values:
            if self.at(value):
                return True
        return False

    def skip(self, value: str) -> bool:
        if self.at(value):
            self.advance()
            return True
        return False

    def must_be(self, *values: str) -> Token:
        if not self.at_any(values):
            raise self.expected(list(values))
        return self.advance()

    def expected(self, values: list[str]) -> ParseError:
        tok = self.current()
        if len(values) == 1:
            want = "'" + values[0] + "'"
        else:
            want = "one of " + ", ".join("'" + v + "'" for v in values)
        return ParseError(
            "expected " + want + ", got " + tok.describe(),
            tok.line,
            tok.col,
            expected=values,
            found=tok.value if tok.type != TK_EOF else TK_EOF,
        )

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    # ── Statements ───────────────────────────────────────────

    def parse_program(self) -> Program:
        body = self.parse_statement_list()
        self.must_be(TK_EOF)
        return Program(body)

    def parse_statement_list(self) -> list[Stmt]:
        """Statements up to the first token that starts none (end, elif, case, EOF...)."""
        stmts: list[Stmt] = []
        while True:
            while self.skip(";"):
                pass
            if self.at("if"):
                stmts.append(self.parse_if_stmt())
            elif self.at("while"):
                stmts.append(self.parse_while_stmt())
            elif self.at("do"):
                stmts.append(self.parse_do_stmt())
            elif self.at("for"):
                stmts.append(self.parse_for_stmt())
            elif self.at("switch"):
                stmts.append(self.parse_switch_stmt())
            elif self.at("print"):
                stmts.extend(self.parse_print_stmt())
            elif self.at("read"):
                stmts.extend(self.parse_read_stmt())
            elif self.at(TK_IDENT):
                stmts.append(self.parse_assignment())
            elif self.at("break") or self.at("continue") or self.at("halt"):
                stmts.append(self.parse_simple_stmt())
            elif self.at("function"):
                tok = self.current()
                raise ParseError("function definitions are not supported", tok.line, tok.col, found=tok.value)
            else:
                return stmts

    def parse_simple_stmt(self) -> Stmt:
        pos = self._pos()
        tok = self.advance()
        if tok.type == "break":
            return BreakStmt(pos)
        if tok.type == "continue":
            return ContinueStmt(pos)
        return HaltStmt(pos)

    def parse_if_stmt(self) -> IfStmt:
        """if expr (then stmts | break | continue) (elif ...)* [else stmts] [end]

        A bare break/continue arm needs no 'then' and lets the statement omit
        'end', but only when it is the last arm; an else arm always needs 'end'.
        """
        pos = self._pos()
        self.advance()  # 'if'
        arms: list[Arm] = []
        optional_end = self._parse_if_arm(arms)
        while self.skip("elif"):
            optional_end = self._parse_if_arm(arms)
        if self.skip("else"):
            arms.append(Arm(None, self.parse_statement_list()))
            optional_end = False
        if not optional_end:
            self.must_be("end")
        return IfStmt(pos, arms)

    def _parse_if_arm(self, arms: list[Arm]) -> bool:
        """Parse `test body` into arms. Returns True for a shorthand arm."""
        test = self.parse_expression()
        if self.at("break") or self.at("continue"):
            arms.append(Arm(test, [self.parse_simple_stmt()]))
            return True
        self.must_be("then")
        arms.append(Arm(test, self.parse_statement_list()))
        return False

    def parse_while_stmt(self) -> WhileStmt:
        """while expr do stmts end"""
        pos = self._pos()
        self.advance()  # 'while'
        test = self.parse_expression()
        self.must_be("do")
        body = self.parse_statement_list()
        self.must_be("end")
        return WhileStmt(pos, test, body)

    def parse_do_stmt(self) -> Stmt:
        """do stmts (end | until expr)"""
        pos = self._pos()
        self.advance()  # 'do'
        body = self.parse_statement_list()
        if self.skip("until"):
            return UntilStmt(pos, self.parse_expression(), body)
        self.must_be("end")
        return WhileStmt(pos, None, body)

    def parse_for_stmt(self) -> Block:
        """for assignments [while expr] [then assignments] do stmts end

        Lowered to `assignments; while expr do stmts; step end` in its own block.
        """
        pos = self._pos()
        self.advance()  # 'for'
        init = self.parse_assignment_list()
        test: Expr | None = None
        if self.skip("while"):
            test = self.parse_expression()
        step: list[Stmt] = []
        if self.skip("then"):
            step = self.parse_assignment_list()
        self.must_be("do")
        body = self.parse_statement_list()
        self.must_be("end")
        return Block(pos, init + [WhileStmt(pos, test, body + step)])

    def parse_assignment_list(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while True:
            while self.skip(";"):
                pass
            if not self.at(TK_IDENT):
                return stmts
            stmts.append(self.parse_assignment())

    def parse_switch_stmt(self) -> SwitchStmt:
        """switch expr do (case expr ':' stmts)* [default ':' stmts] end"""
        pos = self._pos()
        self.advance()  # 'switch'
        subject = self.parse_expression()
        self.must_be("do")
        cases: list[Arm] = []
        while self.at("case"):
            case_pos = self._pos()
            self.advance()
            value = self.parse_expression()
            self.must_be(":")
            cases.append(Arm(BinaryOp(case_pos, "==", subject, value), self.parse_statement_list()))
        if self.skip("default"):
            self.must_be(":")
            cases.append(Arm(None, self.parse_statement_list()))
        self.must_be("end")
        return SwitchStmt(pos, subject, cases)

    def parse_print_stmt(self) -> list[Stmt]:
        """print expr (',' expr)*"""
        pos = self._pos()
        self.advance()  # 'print'
        stmts: list[Stmt] = []
        while True:
            stmts.append(PrintStmt(pos, self.parse_expression()))
            if not self.skip(","):
                return stmts
            pos = self._pos()

    def parse_read_stmt(self) -> list[Stmt]:
        """read name (',' name)*"""
        pos = self._pos()
        self.advance()  # 'read'
        stmts: list[Stmt] = []
        while True:
            name = self.must_be(TK_IDENT).value
            stmts.append(ReadStmt(pos, name))
            if not self.skip(","):
                return stmts
            pos = self._pos()

    def parse_assignment(self) -> Stmt:
        """name '=' expr | name '++' | name '--' | name '[' expr ']' '=' expr"""
        pos = self._pos()
        name_tok = self.advance()
        if self.skip("++"):
            return IncDec(pos, name_tok.value, 1)
        if self.skip("--"):
            return IncDec(pos, name_tok.value, -1)
        if self.skip("["):
            index = self.parse_expression()
            self.must_be("]")
            self.must_be("=")
            value = self.parse_expression()
            array = Var(Pos(name_tok.line, name_tok.col), name_tok.value)
            return ArrayStore(pos, array, index, value)
        self.must_be("=", "++", "--", "[")
        return Assign(pos, name_tok.value, self.parse_expression())

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Expr:
        return self.parse_ternary()

    def parse_ternary(self) -> Expr:
        """relop ['?' expr ':' expr]"""
        cond = self.parse_relational()
        if not self.at("?"):
            return cond
        self.advance()
        then_expr = self.parse_expression()
        self.must_be(":")
        else_expr = self.parse_expression()
        return Ternary(cond.pos, cond, then_expr, else_expr)

    def parse_relational(self) -> Expr:
        """add [compare add] — at most one comparison."""
        left = self.parse_additive()
        if self.at_any(COMPARE_OPS):
            op = self.advance().value
            return BinaryOp(left.pos, op, left, self.parse_additive())
        return left

    def parse_additive(self) -> Expr:
        left = self.parse_shift()
        while self.at_any(ADD_OPS):
            op = self.advance().value
            left = BinaryOp(left.pos, op, left, self.parse_shift())
        return left

    def parse_shift(self) -> Expr:
        left = self.parse_multiplicative()
        while self.at_any(SHIFT_OPS):
            op = self.advance().value
            left = BinaryOp(left.pos, op, left, self.parse_multiplicative())
        return left

    def parse_multiplicative(self) -> Expr:
        left = self.parse_term()
        while self.at_any(MULT_OPS):
            op = self.advance().value
            left = BinaryOp(left.pos, op, left, self.parse_term())
        return left

    def hex_to_decimal(self, tok: Token) -> str:
        """#hex as a 32-bit int: up to eight digits, the top bit is the sign."""
        value = int(tok.value[1:], 16)
        if value > 0xFFFFFFFF:
            raise ParseError("hex literal out of range: " + tok.value, tok.line, tok.col, found=tok.value)
        if value > INT_MAX:
            value -= 2**32
        return str(value)

    def parse_term(self) -> Expr:
        pos = self._pos()
        tok = self.current()
        if self.skip("("):
            expr = self.parse_expression()
            self.must_be(")")
            return expr
        if tok.type == TK_IDENT:
            self.advance()
            var = Var(pos, tok.value)
            if self.skip("["):
                index = self.parse_expression()
                self.must_be("]")
                return Index(pos, var, index)
            return var
        if tok.type == TK_STRING:
            self.advance()
            return StringLit(pos, tok.value)
        if tok.type == TK_NUMBER:
            self.advance()
            text = tok.value
            if text.startswith("#"):
                text = self.hex_to_decimal(tok)
            return IntLit(pos, text)
        if self.skip("true"):
            return IntLit(pos, "1")
        if self.skip("false"):
            return IntLit(pos, "0")
        if self.skip("-"):
            return UnaryOp(pos, "-", self.parse_term())
        if self.at_any(UNARY_KEYWORDS):
            op = self.advance().value
            return UnaryOp(pos, op, self.parse_term())
        if self.skip("new"):
            element = self.must_be("int", "string").value
            self.must_be("[")
            size = self.parse_expression()
            self.must_be("]")
            return NewArray(pos, size, element)
        if self.at("min") or self.at("max"):
            op = self.advance().value
            self.must_be("(")
            left = self.parse_expression()
            self.must_be(",")
            right = self.parse_expression()
            self.must_be(")")
            return BinaryOp(pos, op, left, right)
        raise self.expected(TERM_START)


def parse(tokens: list[Token]) -> Program:
    """Parse a token list (ending in EOF) into a Program."""
    return Parser(tokens).parse_program()
