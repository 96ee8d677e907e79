"""Tests for the program wrapper."""

from smallc.wrapper import wrap


def test_wrap_interpolates_all_points():
    text = wrap("Hello", "    ldc 1\n", 4)
    assert text.startswith(".class public Hello\n.super java/lang/Object\n")
    assert "    putstatic Hello/stdin Ljava/io/BufferedReader;\n" in text
    assert ".limit stack 10\n    ldc 1\n    return\n.limit locals 4\n.end method\n" in text
    assert "(~" not in text


def test_wrap_terminates_body_line():
    assert "    ldc 1\n    return\n" in wrap("A", "    ldc 1", 1)


def test_wrap_empty_body():
    assert "main([Ljava/lang/String;)V\n.limit stack 10\n    return\n" in wrap("A", "", 1)
