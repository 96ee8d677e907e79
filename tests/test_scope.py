"""Tests for the symbol and label table."""

import pytest

from smallc.code import Code
from smallc.scope import LabelKind, Scope, UnknownVariable
from smallc.types import Type


def _scope() -> Scope:
    scope = Scope(Code().new_label)
    scope.begin_scope()
    return scope


def test_slots_allocated_in_order():
    scope = _scope()
    assert scope.new_local("a", Type.INT).slot == 0
    assert scope.new_local("b$", Type.STRING).slot == 1
    assert scope.get_var("b$").typ == Type.STRING
    assert scope.max_locals == 2


def test_inner_frame_shadows_outer():
    scope = _scope()
    scope.new_local("x", Type.INT)
    scope.begin_scope()
    scope.new_local("x", Type.STRING)
    assert scope.get_var("x").slot == 1
    scope.end_scope()
    assert scope.get_var("x").slot == 0


def test_ending_scope_hides_names_but_keeps_slots():
    scope = _scope()
    scope.begin_scope()
    scope.new_local("tmp", Type.INT)
    scope.end_scope()
    assert scope.find_var("tmp") is None
    assert scope.new_local("next", Type.INT).slot == 1
    assert scope.max_locals == 2


def test_unknown_variable_raises():
    scope = _scope()
    with pytest.raises(UnknownVariable) as info:
        scope.get_var("missing")
    assert info.value.name == "missing"


def test_labels_are_unique_and_carry_purpose():
    scope = _scope()
    a = scope.new_label("END IF")
    b = scope.new_label(LabelKind.LOOP_BREAK)
    assert a.name != b.name
    assert a.purpose == "END IF"
    assert b.purpose == "EXIT LOOP"


def test_plain_labels_are_not_targets():
    scope = _scope()
    scope.new_label("EXIT LOOP")
    assert scope.get_label(LabelKind.LOOP_BREAK) is None


def test_break_in_switch_inside_loop_finds_switch():
    scope = _scope()
    scope.begin_scope()
    loop_continue = scope.new_label(LabelKind.LOOP_CONTINUE)
    scope.new_label(LabelKind.LOOP_BREAK)
    scope.begin_scope()
    switch_exit = scope.new_label(LabelKind.SWITCH_BREAK)
    assert scope.get_label(LabelKind.LOOP_BREAK, LabelKind.SWITCH_BREAK) is switch_exit
    assert scope.get_label(LabelKind.LOOP_CONTINUE) is loop_continue


def test_break_in_loop_inside_switch_finds_loop():
    scope = _scope()
    scope.begin_scope()
    scope.new_label(LabelKind.SWITCH_BREAK)
    scope.begin_scope()
    loop_exit = scope.new_label(LabelKind.LOOP_BREAK)
    assert scope.get_label(LabelKind.LOOP_BREAK, LabelKind.SWITCH_BREAK) is loop_exit


def test_labels_leave_with_their_frame():
    scope = _scope()
    scope.begin_scope()
    scope.new_label(LabelKind.LOOP_CONTINUE)
    scope.end_scope()
    assert scope.get_label(LabelKind.LOOP_CONTINUE) is None


def test_continue_without_loop_not_found():
    scope = _scope()
    scope.begin_scope()
    scope.new_label(LabelKind.SWITCH_BREAK)
    assert scope.get_label(LabelKind.LOOP_CONTINUE) is None
