"""Interpreter for generated main() bodies.

Runs the Jasmin subset the code generator emits, with Java int semantics,
so compiled programs can be executed and tested without a JVM.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .code import (
    INT_TO_STRING,
    PARSE_INT,
    PRINT_INT,
    PRINT_STRING,
    READ_LINE,
    STRING_COMPARE,
    STRING_CONCAT,
    STRING_LENGTH,
    SUBSTRING_FROM,
    SUBSTRING_RANGE,
    SYSTEM_OUT,
)

from .types import INT_MAX, INT_MIN

DEFAULT_STEP_LIMIT: int = 1_000_000

_INT_RE = re.compile(r"[+-]?[0-9]+")


class VMError(Exception):
    """Runtime fault: bad instruction, bad operand, or Java exception."""

    def __init__(self, msg: str, line: int = 0):
        self.msg: str = msg
        self.line: int = line
        if line > 0:
            super().__init__(msg + " at body line " + str(line))
        else:
            super().__init__(msg)


class _Stream:
    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return "<" + self.name + ">"


_OUT = _Stream("System.out")
_IN = _Stream("stdin")


@dataclass
class Instr:
    opcode: str
    operand: str
    line: int


@dataclass
class RunResult:
    stdout: str
    steps: int
    locals: list[object] = field(default_factory=list)


def wrap32(n: int) -> int:
    n &= 0xFFFFFFFF
    if n > INT_MAX:
        n -= 2**32
    return n


def _java_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return wrap32(q)


def _unquote(text: str) -> str:
    if len(text) < 2 or not text.startswith('"') or not text.endswith('"'):
        raise VMError("bad string constant " + text)
    out: list[str] = []
    i = 1
    end = len(text) - 1
    while i < end:
        ch = text[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        esc = text[i + 1]
        if esc == "n":
            out.append("\n")
        elif esc == "t":
            out.append("\t")
        elif esc == "r":
            out.append("\r")
        elif esc == "u":
            out.append(chr(int(text[i + 2 : i + 6], 16)))
            i += 4
        else:
            out.append(esc)
        i += 2
    return "".join(out)


def assemble(body: str) -> tuple[list[Instr], dict[str, int]]:
    """Split a body into instructions and a label -> instruction index map."""
    instrs: list[Instr] = []
    labels: dict[str, int] = {}
    for lineno, raw in enumerate(body.split("\n"), start=1):
        text = raw.strip()
        if text == "" or text.startswith(";"):
            continue
        if text.endswith(":") and not raw.startswith(" "):
            name = text[:-1]
            if name in labels:
                raise VMError("duplicate label " + name, lineno)
            labels[name] = len(instrs)
            continue
        parts = text.split(None, 1)
        operand = parts[1] if len(parts) > 1 else ""
        if parts[0] in ("invokestatic", "invokevirtual", "getstatic"):
            instrs.append(Instr(text, "", lineno))
        else:
            instrs.append(Instr(parts[0], operand, lineno))
    return instrs, labels


class Machine:
    def __init__(self, body: str, max_locals: int, stdin: str = "", step_limit: int = DEFAULT_STEP_LIMIT):
        self.instrs, self.labels = assemble(body)
        self.locals: list[object] = [None] * max_locals
        if max_locals > 0:
            self.locals[0] = []
        self.stack: list[object] = []
        self.input_lines: list[str] = stdin.splitlines()
        self.input_pos: int = 0
        self.out: list[str] = []
        self.step_limit = step_limit
        self.steps: int = 0
        self.pc: int = 0
        self.line: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def fault(self, msg: str) -> VMError:
        return VMError(msg, self.line)

    def pop(self) -> object:
        if not self.stack:
            raise self.fault("stack underflow")
        return self.stack.pop()

    def pop_int(self) -> int:
        value = self.pop()
        if not isinstance(value, int):
            raise self.fault("expected int on stack, got " + repr(value))
        return value

    def pop_str(self) -> str:
        value = self.pop()
        if value is None:
            raise self.fault("NullPointerException")
        if not isinstance(value, str):
            raise self.fault("expected string on stack, got " + repr(value))
        return value

    def pop_array(self) -> list[object]:
        value = self.pop()
        if value is None:
            raise self.fault("NullPointerException")
        if not isinstance(value, list):
            raise self.fault("expected array on stack, got " + repr(value))
        return value

    def slot(self, operand: str) -> int:
        n = int(operand)
        if n < 0 or n >= len(self.locals):
            raise self.fault("local slot " + operand + " outside .limit locals " + str(len(self.locals)))
        return n

    def target(self, operand: str) -> int:
        if operand not in self.labels:
            raise self.fault("undefined label " + operand)
        return self.labels[operand]

    def check_index(self, array: list[object], index: int) -> None:
        if index < 0 or index >= len(array):
            raise self.fault("ArrayIndexOutOfBoundsException: " + str(index))

    # ── Execution ────────────────────────────────────────────

    def run(self) -> RunResult:
        while self.pc < len(self.instrs):
            self.steps += 1
            if self.steps > self.step_limit:
                raise self.fault("step limit exceeded")
            instr = self.instrs[self.pc]
            self.line = instr.line
            self.pc += 1
            if not self.execute(instr):
                break
        return RunResult("".join(self.out), self.steps, self.locals)

    def execute(self, instr: Instr) -> bool:
        """Run one instruction. Returns False on return."""
        op = instr.opcode
        arg = instr.operand
        stack = self.stack
        if op == "ldc":
            stack.append(_unquote(arg) if arg.startswith('"') else wrap32(int(arg)))
        elif op == "iconst_0":
            stack.append(0)
        elif op == "iconst_1":
            stack.append(1)
        elif op == "aconst_null":
            stack.append(None)
        elif op == "iload" or op == "aload":
            stack.append(self.locals[self.slot(arg)])
        elif op == "istore" or op == "astore":
            self.locals[self.slot(arg)] = self.pop()
        elif op == "iinc":
            slot_text, delta = arg.split()
            n = self.slot(slot_text)
            value = self.locals[n]
            if not isinstance(value, int):
                raise self.fault("iinc on non-int slot " + slot_text)
            self.locals[n] = wrap32(value + int(delta))
        elif op in ("iadd", "isub", "imul", "idiv", "irem", "ishl", "ishr", "iushr"):
            b = self.pop_int()
            a = self.pop_int()
            stack.append(self.arith(op, a, b))
        elif op == "ineg":
            stack.append(wrap32(-self.pop_int()))
        elif op == "swap":
            b = self.pop()
            a = self.pop()
            stack.append(b)
            stack.append(a)
        elif op == "dup_x1":
            b = self.pop()
            a = self.pop()
            stack.extend([b, a, b])
        elif op == "pop":
            self.pop()
        elif op == "iaload" or op == "aaload":
            index = self.pop_int()
            array = self.pop_array()
            self.check_index(array, index)
            stack.append(array[index])
        elif op == "iastore" or op == "aastore":
            value = self.pop()
            index = self.pop_int()
            array = self.pop_array()
            self.check_index(array, index)
            array[index] = value
        elif op == "newarray" or op == "anewarray":
            size = self.pop_int()
            if size < 0:
                raise self.fault("NegativeArraySizeException: " + str(size))
            stack.append([0] * size if op == "newarray" else [None] * size)
        elif op == "goto":
            self.pc = self.target(arg)
        elif op == "ifeq":
            if self.pop_int() == 0:
                self.pc = self.target(arg)
        elif op.startswith("if_icmp"):
            b = self.pop_int()
            a = self.pop_int()
            if self.compare(op, a, b):
                self.pc = self.target(arg)
        elif op == "return":
            return False
        else:
            self.call(op)
        return True

    def arith(self, op: str, a: int, b: int) -> int:
        if op == "iadd":
            return wrap32(a + b)
        if op == "isub":
            return wrap32(a - b)
        if op == "imul":
            return wrap32(a * b)
        if op == "idiv" or op == "irem":
            if b == 0:
                raise self.fault("ArithmeticException: / by zero")
            q = _java_div(a, b)
            return q if op == "idiv" else wrap32(a - b * q)
        if op == "ishl":
            return wrap32(a << (b & 31))
        if op == "ishr":
            return a >> (b & 31)
        return wrap32((a & 0xFFFFFFFF) >> (b & 31))

    def compare(self, op: str, a: int, b: int) -> bool:
        cond = op[len("if_icmp") :]
        if cond == "lt":
            return a < b
        if cond == "le":
            return a <= b
        if cond == "gt":
            return a > b
        if cond == "ge":
            return a >= b
        if cond == "eq":
            return a == b
        if cond == "ne":
            return a != b
        raise self.fault("unknown instruction " + op)

    def call(self, text: str) -> None:
        """getstatic / invokestatic / invokevirtual, matched on the full line."""
        stack = self.stack
        if text == SYSTEM_OUT:
            stack.append(_OUT)
        elif text.startswith("getstatic") and text.endswith("/stdin Ljava/io/BufferedReader;"):
            stack.append(_IN)
        elif text == PRINT_INT or text == PRINT_STRING:
            value = self.pop()
            if self.pop() is not _OUT:
                raise self.fault("println without System.out")
            self.out.append(("null" if value is None else str(value)) + "\n")
        elif text == READ_LINE:
            if self.pop() is not _IN:
                raise self.fault("readLine without stdin")
            if self.input_pos < len(self.input_lines):
                stack.append(self.input_lines[self.input_pos])
                self.input_pos += 1
            else:
                stack.append(None)
        elif text == PARSE_INT:
            s = self.pop_str()
            if not _INT_RE.fullmatch(s):
                raise self.fault("NumberFormatException: " + repr(s))
            n = int(s)
            if n < INT_MIN or n > INT_MAX:
                raise self.fault("NumberFormatException: " + repr(s))
            stack.append(n)
        elif text == INT_TO_STRING:
            stack.append(str(self.pop_int()))
        elif text == STRING_LENGTH:
            stack.append(len(self.pop_str()))
        elif text == STRING_CONCAT:
            b = self.pop_str()
            a = self.pop_str()
            stack.append(a + b)
        elif text == STRING_COMPARE:
            b = self.pop_str()
            a = self.pop_str()
            stack.append((a > b) - (a < b))
        elif text == SUBSTRING_FROM:
            begin = self.pop_int()
            s = self.pop_str()
            if begin < 0 or begin > len(s):
                raise self.fault("StringIndexOutOfBoundsException: " + str(begin))
            stack.append(s[begin:])
        elif text == SUBSTRING_RANGE:
            end = self.pop_int()
            begin = self.pop_int()
            s = self.pop_str()
            if begin < 0 or end > len(s) or begin > end:
                raise self.fault("StringIndexOutOfBoundsException: " + str(begin) + ", " + str(end))
            stack.append(s[begin:end])
        elif text == "invokestatic java/lang/Math/min(II)I":
            b = self.pop_int()
            a = self.pop_int()
            stack.append(min(a, b))
        elif text == "invokestatic java/lang/Math/max(II)I":
            b = self.pop_int()
            a = self.pop_int()
            stack.append(max(a, b))
        else:
            raise self.fault("unknown instruction " + text)


def run(body: str, max_locals: int, stdin: str = "", step_limit: int = DEFAULT_STEP_LIMIT) -> RunResult:
    """Execute a generated main() body and return what it printed."""
    return Machine(body, max_locals, stdin, step_limit).run()
