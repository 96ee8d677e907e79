"""Small AST renderer — compact s-expressions for diagnostics and tests.

Total over the node classes in `ast.py`: a new node type needs a case here.
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


def to_sexpr(node: Program | Stmt | Expr | None) -> str:
    """Render a Program, statement or expression as an s-expression."""
    if node is None:
        return "nil"
    if isinstance(node, Program):
        return _list("program", [to_sexpr(s) for s in node.body])
    if isinstance(node, Expr):
        return _expr(node)
    return _stmt(node)


def _list(head: str, items: list[str]) -> str:
    if not items:
        return "(" + head + ")"
    return "(" + head + " " + " ".join(items) + ")"


def _body(stmts: list[Stmt]) -> str:
    return _list("do", [_stmt(s) for s in stmts])


def _arm(arm: Arm) -> str:
    test = "else" if arm.test is None else _expr(arm.test)
    return "(" + test + " " + _body(arm.body) + ")"


def _stmt(stmt: Stmt) -> str:
    match stmt:
        case Assign(name=name, value=value):
            return _list("=", [name, _expr(value)])
        case ArrayStore(array=array, index=index, value=value):
            return _list("[]=", [array.name, _expr(index), _expr(value)])
        case IncDec(name=name, delta=delta):
            return _list("++" if delta > 0 else "--", [name])
        case IfStmt(arms=arms):
            return _list("if", [_arm(a) for a in arms])
        case SwitchStmt(cases=cases):
            return _list("switch", [_arm(a) for a in cases])
        case WhileStmt(test=test, body=body):
            return _list("while", [to_sexpr(test), _body(body)])
        case UntilStmt(test=test, body=body):
            return _list("until", [to_sexpr(test), _body(body)])
        case Block(body=body):
            return _list("block", [_stmt(s) for s in body])
        case BreakStmt():
            return "(break)"
        case ContinueStmt():
            return "(continue)"
        case HaltStmt():
            return "(halt)"
        case PrintStmt(value=value):
            return _list("print", [_expr(value)])
        case ReadStmt(name=name):
            return _list("read", [name])
    raise ValueError("cannot render " + type(stmt).__name__)


def _expr(expr: Expr) -> str:
    match expr:
        case IntLit(value=value):
            return value
        case StringLit(value=value):
            return '"' + value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'
        case Var(name=name):
            return name
        case BinaryOp(op=op, left=left, right=right):
            return _list(op, [_expr(left), _expr(right)])
        case UnaryOp(op=op, operand=operand):
            return _list(op, [_expr(operand)])
        case Ternary(cond=cond, then_expr=then_expr, else_expr=else_expr):
            return _list("?", [_expr(cond), _expr(then_expr), _expr(else_expr)])
        case Index(array=array, index=index):
            return _list("[]", [array.name, _expr(index)])
        case NewArray(size=size, element=element):
            return _list("new", [element, _expr(size)])
    raise ValueError("cannot render " + type(expr).__name__)
