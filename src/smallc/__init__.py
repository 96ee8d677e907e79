"""Small compiler — public API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .ast import Program
from .codegen import CodegenError as CodegenError, Generated, generate as generate
from .emit import to_sexpr as to_sexpr
from .parse import ParseError as ParseError, Parser
from .tokens import TokenizeError as TokenizeError, tokenize
from .types import Type, type_of_name
from .vm import RunResult as RunResult, VMError as VMError, run as run_body
from .wrapper import wrap


@dataclass
class Compilation:
    """Result of compiling one source unit."""

    class_name: str
    generated: Generated

    @property
    def body(self) -> str:
        return self.generated.body

    @property
    def max_locals(self) -> int:
        return self.generated.max_locals

    @property
    def errors(self) -> list[CodegenError]:
        return self.generated.errors

    @property
    def text(self) -> str:
        """The complete Jasmin class."""
        return wrap(self.class_name, self.generated.body, self.generated.max_locals)


def parse(source: str) -> Program:
    """Parse Small source code into a Program AST."""
    return Parser(tokenize(source)).parse_program()


def compile_source(
    source: str,
    class_name: str = "Main",
    type_of_name: Callable[[str], Type] = type_of_name,
) -> Compilation:
    """Parse and generate. Syntax errors raise; type errors are in .errors."""
    program = parse(source)
    return Compilation(class_name, generate(program, class_name, type_of_name))


def run(source: str, stdin: str = "") -> RunResult:
    """Compile source and interpret the generated body."""
    compiled = compile_source(source)
    return run_body(compiled.body, compiled.max_locals, stdin)
