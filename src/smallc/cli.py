"""Small CLI — compile .sml files to Jasmin assembly."""

from __future__ import annotations

import sys
from pathlib import Path

from . import compile_source, parse, to_sexpr
from .parse import ParseError
from .tokens import TokenizeError
from .vm import VMError, run


USAGE: str = """\
smallc [OPTIONS] FILE

Compile a Small program to a Jasmin class.

Options:
  -o FILE        Write the class to FILE (default: <CLASS>.j beside FILE)
  --class NAME   Class name (default: the file name without extension)
  --ast          Print the parsed program as an s-expression and stop
  --run          Run the compiled program instead of writing it
  --help         Show this help message
"""


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    output: str = ""
    class_name: str = ""
    dump_ast = False
    run_program = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "-o" or arg == "--class":
            if i + 1 >= len(args):
                print("smallc: " + arg + " needs an argument", file=sys.stderr)
                return 2
            if arg == "-o":
                output = args[i + 1]
            else:
                class_name = args[i + 1]
            i += 2
        elif arg == "--ast":
            dump_ast = True
            i += 1
        elif arg == "--run":
            run_program = True
            i += 1
        elif arg.startswith("-"):
            print("smallc: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("smallc: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("smallc: missing file argument", file=sys.stderr)
        return 2

    path = Path(filepath)
    try:
        source = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        print("smallc: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print("smallc: " + filepath + ": " + str(e), file=sys.stderr)
        return 1

    if class_name == "":
        class_name = path.stem

    try:
        if dump_ast:
            print(to_sexpr(parse(source)))
            return 0
        compiled = compile_source(source, class_name)
    except (TokenizeError, ParseError) as e:
        print("smallc: parse error: " + str(e), file=sys.stderr)
        return 1

    for err in compiled.errors:
        print("smallc: error: " + str(err), file=sys.stderr)

    if run_program:
        try:
            result = run(
                compiled.body,
                compiled.max_locals,
                stdin=sys.stdin.read() if not sys.stdin.isatty() else "",
            )
        except VMError as e:
            print("smallc: runtime error: " + str(e), file=sys.stderr)
            return 1
        sys.stdout.write(result.stdout)
        return 1 if compiled.errors else 0

    out_path = Path(output) if output != "" else path.with_name(class_name + ".j")
    try:
        out_path.write_text(compiled.text, encoding="utf-8")
    except OSError as e:
        print("smallc: " + str(out_path) + ": " + str(e), file=sys.stderr)
        return 1
    return 1 if compiled.errors else 0


if __name__ == "__main__":
    sys.exit(main())
