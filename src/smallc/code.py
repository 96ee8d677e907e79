"""Instruction emitter for Jasmin assembly.

One call writes one line. Labels are symbolic: allocating one writes
nothing, and the assembler resolves the names later.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import Type

INDENT: str = "    "

# Comparison operator -> branch taken when the comparison holds
COMPARE_BRANCH: dict[str, str] = {
    "<": "if_icmplt",
    "<=": "if_icmple",
    ">": "if_icmpgt",
    ">=": "if_icmpge",
    "==": "if_icmpeq",
    "!=": "if_icmpne",
}

# Integer-only binary operators
INT_BINARY: dict[str, str] = {
    "+": "iadd",
    "-": "isub",
    "*": "imul",
    "/": "idiv",
    "%": "irem",
    "<<": "ishl",
    ">>": "ishr",
    ">>>": "iushr",
    "min": "invokestatic java/lang/Math/min(II)I",
    "max": "invokestatic java/lang/Math/max(II)I",
}

PARSE_INT: str = "invokestatic java/lang/Integer/parseInt(Ljava/lang/String;)I"
INT_TO_STRING: str = "invokestatic java/lang/String/valueOf(I)Ljava/lang/String;"
STRING_LENGTH: str = "invokevirtual java/lang/String/length()I"
STRING_CONCAT: str = "invokevirtual java/lang/String/concat(Ljava/lang/String;)Ljava/lang/String;"
STRING_COMPARE: str = "invokevirtual java/lang/String/compareTo(Ljava/lang/String;)I"
SUBSTRING_FROM: str = "invokevirtual java/lang/String/substring(I)Ljava/lang/String;"
SUBSTRING_RANGE: str = "invokevirtual java/lang/String/substring(II)Ljava/lang/String;"
SYSTEM_OUT: str = "getstatic java/lang/System/out Ljava/io/PrintStream;"
PRINT_INT: str = "invokevirtual java/io/PrintStream/println(I)V"
PRINT_STRING: str = "invokevirtual java/io/PrintStream/println(Ljava/lang/String;)V"
READ_LINE: str = "invokevirtual java/io/BufferedReader/readLine()Ljava/lang/String;"
STDIN_FIELD: str = "stdin Ljava/io/BufferedReader;"


@dataclass(frozen=True)
class Label:
    """A jump target. purpose is for diagnostics only."""

    name: str
    purpose: str

    def __str__(self) -> str:
        return self.name


def quote_string(s: str) -> str:
    out = ['"']
    for ch in s:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\0":
            out.append("\\u0000")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


class Code:
    """Accumulates the body of main() one line at a time."""

    def __init__(self, class_name: str = "Main") -> None:
        self.class_name: str = class_name
        self.lines: list[str] = []
        self.label_count: int = 0

    def output(self) -> str:
        """Return the accumulated body, newline terminated."""
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    # ── Labels and jumps ─────────────────────────────────────

    def new_label(self, purpose: str) -> Label:
        self.label_count += 1
        return Label("L" + str(self.label_count), purpose)

    def set_label(self, label: Label) -> None:
        self.lines.append(label.name + ":")

    def jump(self, label: Label) -> None:
        self.emit("goto", label.name)

    def if_false(self, label: Label) -> None:
        """Pop an int and jump when it is zero."""
        self.emit("ifeq", label.name)

    def jump_compare(self, op: str, label: Label) -> None:
        """Pop two ints and jump when `left op right` holds."""
        self.emit(COMPARE_BRANCH[op], label.name)

    # ── Instructions ─────────────────────────────────────────

    def emit(self, opcode: str, operand: str | int | None = None) -> None:
        if operand is None:
            self.lines.append(INDENT + opcode)
        else:
            self.lines.append(INDENT + opcode + " " + str(operand))

    def load_int(self, text: str) -> None:
        self.emit("ldc", text)

    def load_string(self, text: str) -> None:
        self.emit("ldc", quote_string(text))

    def load_bool(self, value: bool) -> None:
        self.emit("iconst_1" if value else "iconst_0")

    def load(self, slot: int, typ: Type) -> None:
        self.emit("aload" if typ.is_reference() else "iload", slot)

    def store(self, slot: int, typ: Type) -> None:
        self.emit("astore" if typ.is_reference() else "istore", slot)

    def increment(self, slot: int, delta: int) -> None:
        self.emit("iinc", str(slot) + " " + str(delta))

    def array_load(self, element: Type) -> None:
        self.emit("aaload" if element.is_string() else "iaload")

    def array_store(self, element: Type) -> None:
        self.emit("aastore" if element.is_string() else "iastore")

    def new_array(self, element: Type) -> None:
        if element.is_string():
            self.emit("anewarray", "java/lang/String")
        else:
            self.emit("newarray", "int")

    # ── Runtime calls ────────────────────────────────────────

    def print_value(self, typ: Type) -> None:
        """Print the value on top of the stack."""
        self.emit(SYSTEM_OUT)
        self.emit("swap")
        self.emit(PRINT_STRING if typ.is_string() else PRINT_INT)

    def read_line(self) -> None:
        self.emit("getstatic", self.class_name + "/" + STDIN_FIELD)
        self.emit(READ_LINE)

    def string_left(self) -> None:
        """[s, n] -> s without its first n characters."""
        self.emit(SUBSTRING_FROM)

    def string_right(self) -> None:
        """[s, n] -> s without its last n characters."""
        self.emit("swap")
        self.emit("dup_x1")
        self.emit(STRING_LENGTH)
        self.emit("swap")
        self.emit("isub")
        self.emit("iconst_0")
        self.emit("swap")
        self.emit(SUBSTRING_RANGE)

    def halt(self) -> None:
        self.emit("return")
