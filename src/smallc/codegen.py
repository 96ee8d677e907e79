"""Small code generator — walks the AST and emits the body of main().

Expressions are compiled post-order and return the Type of the value they
leave on the stack. Statements leave the stack as they found it.

Type errors never stop generation: they are collected in the context and
the walk continues with whatever instructions fit the intended case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .ast import (
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
from .code import (
    COMPARE_BRANCH,
    INT_BINARY,
    INT_TO_STRING,
    PARSE_INT,
    STRING_COMPARE,
    STRING_CONCAT,
    STRING_LENGTH,
    Code,
)
from .scope import LabelKind, Scope, UnknownVariable
from .types import INT_MAX, Type, type_of_name as default_type_of_name

# Slot 0 holds main's String[] argument; the name cannot clash with an identifier.
ARGS_SLOT_NAME: str = "ARGS TO MAIN"


# ============================================================
# CODEGEN ERROR
# ============================================================


class CodegenError(Exception):
    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


# ============================================================
# CONTEXT
# ============================================================


@dataclass
class GeneratorContext:
    """Everything one compilation mutates: output, scopes, labels, errors."""

    code: Code
    scope: Scope
    type_of_name: Callable[[str], Type]
    errors: list[CodegenError] = field(default_factory=list)


def new_context(
    class_name: str = "Main",
    type_of_name: Callable[[str], Type] = default_type_of_name,
) -> GeneratorContext:
    code = Code(class_name)
    return GeneratorContext(code, Scope(code.new_label), type_of_name)


@dataclass
class Generated:
    body: str
    max_locals: int
    errors: list[CodegenError]


# ============================================================
# GENERATOR
# ============================================================


class CodeGen:
    def __init__(self, ctx: GeneratorContext) -> None:
        self.ctx = ctx
        self.code = ctx.code
        self.scope = ctx.scope

    def error(self, msg: str, pos: Pos) -> None:
        self.ctx.errors.append(CodegenError(msg, pos.line, pos.col))

    def mark(self) -> int:
        return len(self.ctx.errors)

    def type_error(self, msg: str, pos: Pos, mark: int) -> None:
        """Report a bad operand unless generating the operands already failed."""
        if len(self.ctx.errors) == mark:
            self.error(msg, pos)

    # ── Program ──────────────────────────────────────────────

    def gen_program(self, program: Program) -> None:
        self.scope.begin_scope()
        self.scope.new_local(ARGS_SLOT_NAME, Type.ARRAY_STRING)
        self.gen_stmts(program.body)
        self.scope.end_scope()

    # ── Statements ───────────────────────────────────────────

    def gen_stmts(self, stmts: list[Stmt]) -> None:
        for stmt in stmts:
            self.gen_stmt(stmt)

    def gen_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case Block(body=body):
                self.scope.begin_scope()
                self.gen_stmts(body)
                self.scope.end_scope()
            case IncDec():
                self.gen_inc_dec(stmt)
            case Assign(name=name, value=value):
                typ = self.gen_expr(value)
                self.store_var(name, typ)
            case ArrayStore():
                self.gen_array_store(stmt)
            case IfStmt():
                self.gen_if(stmt)
            case WhileStmt():
                self.gen_while(stmt)
            case UntilStmt():
                self.gen_until(stmt)
            case SwitchStmt():
                self.gen_switch(stmt)
            case BreakStmt():
                label = self.scope.get_label(LabelKind.LOOP_BREAK, LabelKind.SWITCH_BREAK)
                if label is None:
                    self.error("'break' used outside of loop or switch", stmt.pos)
                else:
                    self.code.jump(label)
            case ContinueStmt():
                label = self.scope.get_label(LabelKind.LOOP_CONTINUE)
                if label is None:
                    self.error("'continue' used outside a loop", stmt.pos)
                else:
                    self.code.jump(label)
            case HaltStmt():
                self.code.halt()
            case PrintStmt(value=value):
                mark = self.mark()
                typ = self.gen_expr(value)
                if typ.is_array():
                    self.type_error("cannot print a value of type " + str(typ), stmt.pos, mark)
                    self.code.emit("pop")
                else:
                    self.code.print_value(typ)
            case ReadStmt(name=name):
                typ = self.ctx.type_of_name(name)
                self.code.read_line()
                if typ.is_int():
                    self.code.emit(PARSE_INT)
                self.store_var(name, typ)
            case _:
                self.error("unexpected statement " + type(stmt).__name__, stmt.pos)

    def store_var(self, name: str, typ: Type) -> None:
        """Store the stack top in name, binding it on first use."""
        local = self.scope.find_var(name)
        if local is None:
            local = self.scope.new_local(name, typ)
        self.code.store(local.slot, typ)

    def gen_inc_dec(self, stmt: IncDec) -> None:
        op = "++" if stmt.delta > 0 else "--"
        local = self.scope.find_var(stmt.name)
        if local is None:
            self.error("unknown variable '" + stmt.name + "'", stmt.pos)
            return
        if not local.typ.is_int():
            self.error("cannot apply '" + op + "' to " + str(local.typ) + " variable '" + stmt.name + "'", stmt.pos)
            return
        self.code.increment(local.slot, stmt.delta)

    def gen_array_store(self, stmt: ArrayStore) -> None:
        mark = self.mark()
        array_type = self.gen_expr(stmt.array)
        self.gen_index(stmt.index)
        value_type = self.gen_expr(stmt.value)
        if array_type.element() is not None and array_type.element() == value_type:
            self.code.array_store(value_type)
        else:
            self.type_error("cannot store " + str(value_type) + " in array of type " + str(array_type), stmt.pos, mark)

    def gen_condition(self, expr: Expr) -> None:
        """Leave an int on the stack: nonzero is true. Strings test non-empty."""
        mark = self.mark()
        typ = self.gen_expr(expr)
        if typ.is_string():
            self.code.emit(STRING_LENGTH)
        elif typ.is_array():
            self.type_error("cannot use " + str(typ) + " as a condition", expr.pos, mark)

    def gen_if(self, stmt: IfStmt) -> None:
        self.scope.begin_scope()
        end_if = self.scope.new_label("END IF")
        for arm in stmt.arms:
            if arm.test is None:
                self.gen_stmts(arm.body)
                continue
            next_test = self.scope.new_label("NEXT TEST")
            self.gen_condition(arm.test)
            self.code.if_false(next_test)
            self.gen_stmts(arm.body)
            self.code.jump(end_if)
            self.code.set_label(next_test)
        self.code.set_label(end_if)
        self.scope.end_scope()

    def gen_while(self, stmt: WhileStmt) -> None:
        self.scope.begin_scope()
        next_loop = self.scope.new_label(LabelKind.LOOP_CONTINUE)
        exit_loop = self.scope.new_label(LabelKind.LOOP_BREAK)
        self.code.set_label(next_loop)
        if stmt.test is not None:
            self.gen_condition(stmt.test)
            self.code.if_false(exit_loop)
        self.gen_stmts(stmt.body)
        self.code.jump(next_loop)
        self.code.set_label(exit_loop)
        self.scope.end_scope()

    def gen_until(self, stmt: UntilStmt) -> None:
        self.scope.begin_scope()
        next_loop = self.scope.new_label(LabelKind.LOOP_CONTINUE)
        exit_loop = self.scope.new_label(LabelKind.LOOP_BREAK)
        start = self.scope.new_label("START LOOP")
        self.code.set_label(start)
        self.gen_stmts(stmt.body)
        # continue re-checks the exit condition
        self.code.set_label(next_loop)
        if stmt.test is not None:
            self.gen_condition(stmt.test)
            self.code.if_false(start)
        self.code.set_label(exit_loop)
        self.scope.end_scope()

    def gen_switch(self, stmt: SwitchStmt) -> None:
        """Cases fall through into the next body unless they break."""
        self.scope.begin_scope()
        exit_switch = self.scope.new_label(LabelKind.SWITCH_BREAK)
        after_case = self.scope.new_label("AFTER CASE")
        after_placed = False
        for arm in stmt.cases:
            if arm.test is None:
                self.code.set_label(after_case)
                after_placed = True
                self.gen_stmts(arm.body)
                continue
            next_case = self.scope.new_label("NEXT CASE")
            self.gen_condition(arm.test)
            self.code.if_false(next_case)
            self.code.set_label(after_case)
            after_case = self.scope.new_label("AFTER CASE")
            self.gen_stmts(arm.body)
            self.code.jump(after_case)
            self.code.set_label(next_case)
        if not after_placed:
            self.code.set_label(after_case)
        self.code.set_label(exit_switch)
        self.scope.end_scope()

    # ── Expressions ──────────────────────────────────────────

    def gen_expr(self, expr: Expr) -> Type:
        match expr:
            case IntLit(value=value):
                if int(value) > INT_MAX:
                    self.error("integer literal out of range: " + value, expr.pos)
                self.code.load_int(value)
                return Type.INT
            case StringLit(value=value):
                self.code.load_string(value)
                return Type.STRING
            case Var():
                return self.gen_var(expr)
            case Ternary():
                return self.gen_ternary(expr)
            case Index():
                return self.gen_array_load(expr)
            case UnaryOp():
                return self.gen_unary(expr)
            case NewArray():
                return self.gen_new_array(expr)
            case BinaryOp():
                return self.gen_binary(expr)
        self.error("unexpected expression " + type(expr).__name__ + " in code generation", expr.pos)
        return Type.INT

    def gen_var(self, expr: Var) -> Type:
        try:
            local = self.scope.get_var(expr.name)
        except UnknownVariable as e:
            # placeholder keeps the stack shape; the program is already in error
            self.error(str(e), expr.pos)
            self.code.emit("aconst_null")
            return Type.ARRAY_STRING
        self.code.load(local.slot, local.typ)
        return local.typ

    def gen_index(self, expr: Expr) -> None:
        mark = self.mark()
        typ = self.gen_expr(expr)
        if not typ.is_int():
            self.type_error("array index must be int, got " + str(typ), expr.pos, mark)

    def gen_ternary(self, expr: Ternary) -> Type:
        end_query = self.scope.new_label("END QUERY")
        false_label = self.scope.new_label("FALSE LABEL")
        mark = self.mark()
        self.gen_condition(expr.cond)
        self.code.if_false(false_label)
        then_type = self.gen_expr(expr.then_expr)
        self.code.jump(end_query)
        self.code.set_label(false_label)
        else_type = self.gen_expr(expr.else_expr)
        self.code.set_label(end_query)
        if then_type != else_type:
            self.type_error("ternary branches differ: " + str(then_type) + " and " + str(else_type), expr.pos, mark)
        return else_type

    def gen_array_load(self, expr: Index) -> Type:
        mark = self.mark()
        array_type = self.gen_expr(expr.array)
        self.gen_index(expr.index)
        element = array_type.element()
        if element is None:
            self.type_error("cannot index a value of type " + str(array_type), expr.pos, mark)
            return Type.INT
        self.code.array_load(element)
        return element

    def gen_new_array(self, expr: NewArray) -> Type:
        self.gen_index(expr.size)
        if expr.element == "int":
            self.code.new_array(Type.INT)
            return Type.ARRAY_INT
        if expr.element == "string":
            self.code.new_array(Type.STRING)
            return Type.ARRAY_STRING
        self.error("unknown array element type '" + expr.element + "'", expr.pos)
        return Type.INT

    def gen_unary(self, expr: UnaryOp) -> Type:
        op = expr.op
        if op == "-" and isinstance(expr.operand, IntLit) and int(expr.operand.value) == INT_MAX + 1:
            self.code.load_int("-" + expr.operand.value)
            return Type.INT
        mark = self.mark()
        operand = self.gen_expr(expr.operand)
        if op == "-":
            if not operand.is_int():
                self.type_error("cannot apply '-' to " + _describe(operand), expr.pos, mark)
            self.code.emit("ineg")
            return Type.INT
        if op == "to-int":
            if not operand.is_string():
                self.type_error("cannot apply to-int to " + str(operand), expr.pos, mark)
            self.code.emit(PARSE_INT)
            return Type.INT
        if op == "to-string":
            if not operand.is_int():
                self.type_error("cannot apply to-string to " + _describe(operand), expr.pos, mark)
            self.code.emit(INT_TO_STRING)
            return Type.STRING
        if op == "length":
            if not operand.is_string():
                self.type_error("cannot take length of " + str(operand), expr.pos, mark)
            self.code.emit(STRING_LENGTH)
            return Type.INT
        self.error("unexpected unary operator '" + op + "' in code generation", expr.pos)
        return Type.INT

    def gen_binary(self, expr: BinaryOp) -> Type:
        op = expr.op
        mark = self.mark()
        left = self.gen_expr(expr.left)
        right = self.gen_expr(expr.right)
        illegal = "<" + str(left) + "> " + op + " <" + str(right) + "> is illegal"
        if op in COMPARE_BRANCH:
            return self.gen_compare(expr, left, right, mark)
        if op == "+":
            if left.is_array() or right.is_array():
                self.type_error(illegal, expr.pos, mark)
            if not left.is_string() and not right.is_string():
                self.code.emit("iadd")
                return Type.INT
            if not left.is_string():
                self.code.emit("swap")
                self.code.emit(INT_TO_STRING)
                self.code.emit("swap")
            elif not right.is_string():
                self.code.emit(INT_TO_STRING)
            self.code.emit(STRING_CONCAT)
            return Type.STRING
        if op == "<<" or op == ">>":
            if not right.is_int():
                self.type_error("cannot shift by " + _describe(right), expr.pos, mark)
                return Type.INT
            if not left.is_string():
                if left.is_array():
                    self.type_error(illegal, expr.pos, mark)
                self.code.emit(INT_BINARY[op])
                return Type.INT
            if op == "<<":
                self.code.string_left()
            else:
                self.code.string_right()
            return Type.STRING
        if op in INT_BINARY:
            if not left.is_int() or not right.is_int():
                self.type_error(illegal, expr.pos, mark)
            self.code.emit(INT_BINARY[op])
            return Type.INT
        self.error("unexpected operator '" + op + "' in code generation", expr.pos)
        return Type.INT

    def gen_compare(self, expr: BinaryOp, left: Type, right: Type, mark: int) -> Type:
        """Materialize the comparison as 1 (true) or 0 (false).

        Arrays never compare; strings compare with compareTo against 0.
        """
        if left.is_array() or right.is_array() or left.is_string() != right.is_string():
            self.type_error("<" + str(left) + "> " + expr.op + " <" + str(right) + "> is illegal", expr.pos, mark)
        elif left.is_string():
            self.code.emit(STRING_COMPARE)
            self.code.load_bool(False)
        if_true = self.scope.new_label("TRUE VAL")
        end = self.scope.new_label("END COMPARE")
        self.code.jump_compare(expr.op, if_true)
        self.code.load_bool(False)
        self.code.jump(end)
        self.code.set_label(if_true)
        self.code.load_bool(True)
        self.code.set_label(end)
        return Type.INT


def _describe(typ: Type) -> str:
    return "a string" if typ.is_string() else str(typ)


# ============================================================
# PUBLIC API
# ============================================================


def generate(
    program: Program,
    class_name: str = "Main",
    type_of_name: Callable[[str], Type] = default_type_of_name,
) -> Generated:
    """Generate the body of main() for a parsed program."""
    ctx = new_context(class_name, type_of_name)
    CodeGen(ctx).gen_program(program)
    return Generated(ctx.code.output(), ctx.scope.max_locals, ctx.errors)
