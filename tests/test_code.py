"""Tests for the instruction emitter."""

from smallc.code import Code, Label, quote_string
from smallc.types import Type


def test_new_label_emits_nothing():
    code = Code()
    label = code.new_label("END IF")
    assert label == Label("L1", "END IF")
    assert code.lines == []


def test_labels_and_jumps():
    code = Code()
    top = code.new_label("NEXT LOOP")
    out = code.new_label("EXIT LOOP")
    code.set_label(top)
    code.if_false(out)
    code.jump(top)
    code.jump_compare(">=", out)
    code.set_label(out)
    assert code.output() == "L1:\n    ifeq L2\n    goto L1\n    if_icmpge L2\nL2:\n"


def test_load_and_store_by_type():
    code = Code()
    code.load(1, Type.INT)
    code.load(2, Type.STRING)
    code.store(3, Type.ARRAY_INT)
    code.store(4, Type.INT)
    code.increment(4, -1)
    assert code.lines == ["    iload 1", "    aload 2", "    astore 3", "    istore 4", "    iinc 4 -1"]


def test_array_instructions():
    code = Code()
    code.array_load(Type.INT)
    code.array_load(Type.STRING)
    code.array_store(Type.STRING)
    code.new_array(Type.INT)
    assert code.lines == ["    iaload", "    aaload", "    aastore", "    newarray int"]


def test_read_line_uses_class_field():
    code = Code("Prog")
    code.read_line()
    assert code.lines[0] == "    getstatic Prog/stdin Ljava/io/BufferedReader;"


def test_quote_string():
    assert quote_string('say "hi"\n') == '"say \\"hi\\"\\n"'
    assert quote_string("a\\b") == '"a\\\\b"'


def test_empty_output():
    assert Code().output() == ""
