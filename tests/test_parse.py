"""Pytest-based parser tests, driven by the .tests files in parser/.

A case is `=== name`, the Small source, `---`, then either the expected
s-expression or `error: <message fragment>`, closed by `---`.
"""

import re
import signal
from pathlib import Path

import pytest

from smallc import ParseError, TokenizeError, parse, to_sexpr

PARSE_TIMEOUT = 5

PARSE_DIR = Path(__file__).parent / "parser"

_CASE_HEADER = re.compile(r"^=== (.+)$", re.M)
_SEPARATOR = re.compile(r"^---$", re.M)


def _timeout_handler(signum, frame):
    raise TimeoutError("parse() timed out")


signal.signal(signal.SIGALRM, _timeout_handler)


def load_cases(path: Path) -> list[tuple[str, str, str]]:
    """(name, source, expected) for every case in one .tests file."""
    chunks = _CASE_HEADER.split(path.read_text())
    cases = []
    # chunks alternate: preamble, name, body, name, body...
    for name, body in zip(chunks[1::2], chunks[2::2]):
        source, expected = _SEPARATOR.split(body.lstrip("\n"))[:2]
        cases.append((name.strip(), source, expected.strip()))
    return cases


def pytest_generate_tests(metafunc):
    if "parse_input" in metafunc.fixturenames:
        params = [
            pytest.param(source, expected, id=path.stem + "/" + name)
            for path in sorted(PARSE_DIR.glob("*.tests"))
            for name, source, expected in load_cases(path)
        ]
        metafunc.parametrize("parse_input,parse_expected", params)


def test_parse(parse_input: str, parse_expected: str):
    """Verify parser produces the expected tree or error."""
    parse_error = None
    rendered = ""
    try:
        signal.alarm(PARSE_TIMEOUT)
        rendered = to_sexpr(parse(parse_input))
    except (ParseError, TokenizeError) as e:
        parse_error = e
    finally:
        signal.alarm(0)

    if parse_expected.startswith("error:"):
        expected_msg = parse_expected[6:].strip()
        if parse_error is None:
            pytest.fail(f"Expected error containing '{expected_msg}', got {rendered}")
        assert expected_msg in str(parse_error)
    else:
        if parse_error is not None:
            pytest.fail(f"Expected {parse_expected}, got parse error: {parse_error}")
        assert rendered == parse_expected


def test_parse_error_names_expected_and_found():
    with pytest.raises(ParseError) as info:
        parse("while x print 1 end")
    assert info.value.expected == ["do"]
    assert info.value.found == "print"
    assert info.value.line == 1
    assert info.value.col == 9


def test_parse_error_at_end_of_input():
    with pytest.raises(ParseError) as info:
        parse("while x do\n  print 1\n")
    assert info.value.expected == ["end"]
    assert info.value.found == "EOF"
    assert info.value.line == 3


def test_positions_recorded():
    program = parse("x = 1\n  print x")
    assert program.body[0].pos.line == 1
    assert program.body[1].pos.line == 2
    assert program.body[1].pos.col == 3


def test_switch_tests_share_subject():
    program = parse("switch n do case 1: halt case 2: halt end")
    switch = program.body[0]
    assert switch.cases[0].test.left is switch.subject
    assert switch.cases[1].test.left is switch.subject
