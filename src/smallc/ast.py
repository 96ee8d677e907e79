"""Small AST — parse-time node definitions."""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Expr:
    """Base for all expression nodes."""

    pos: Pos


@dataclass
class IntLit(Expr):
    """Decimal text; hex literals and true/false are already normalized."""

    value: str


@dataclass
class StringLit(Expr):
    value: str


@dataclass
class Var(Expr):
    name: str


@dataclass
class BinaryOp(Expr):
    """op is one of + - * / % << >> >>> < <= == != >= > min max."""

    op: str
    left: Expr
    right: Expr


@dataclass
class UnaryOp(Expr):
    """op is one of '-', 'to-int', 'to-string', 'length'."""

    op: str
    operand: Expr


@dataclass
class Ternary(Expr):
    cond: Expr
    then_expr: Expr
    else_expr: Expr


@dataclass
class Index(Expr):
    """Array element load: array[index]."""

    array: Var
    index: Expr


@dataclass
class NewArray(Expr):
    """new int[size] / new string[size]. element is 'int' or 'string'."""

    size: Expr
    element: str


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt:
    """Base for all statement nodes."""

    pos: Pos


@dataclass
class Assign(Stmt):
    name: str
    value: Expr


@dataclass
class ArrayStore(Stmt):
    """array[index] = value."""

    array: Var
    index: Expr
    value: Expr


@dataclass
class IncDec(Stmt):
    """name++ / name--. delta is +1 or -1."""

    name: str
    delta: int


@dataclass
class Arm:
    """One (test, body) pair of an if or switch. test None is the else/default arm."""

    test: Expr | None
    body: list[Stmt]


@dataclass
class IfStmt(Stmt):
    arms: list[Arm]


@dataclass
class SwitchStmt(Stmt):
    """Case tests are already rewritten to `subject == value` comparisons."""

    subject: Expr
    cases: list[Arm]


@dataclass
class WhileStmt(Stmt):
    """Pre-test loop. test None loops until a break (do ... end)."""

    test: Expr | None
    body: list[Stmt]


@dataclass
class UntilStmt(Stmt):
    """Post-test loop: do ... until test."""

    test: Expr | None
    body: list[Stmt]


@dataclass
class Block(Stmt):
    """A statement list compiled in its own scope (the desugared for loop)."""

    body: list[Stmt]


@dataclass
class BreakStmt(Stmt):
    pass


@dataclass
class ContinueStmt(Stmt):
    pass


@dataclass
class HaltStmt(Stmt):
    pass


@dataclass
class PrintStmt(Stmt):
    value: Expr


@dataclass
class ReadStmt(Stmt):
    name: str


# ============================================================
# PROGRAM
# ============================================================


@dataclass
class Program:
    body: list[Stmt] = field(default_factory=list)
