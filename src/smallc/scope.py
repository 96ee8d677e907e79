"""Symbol and label table.

A stack of lexical frames. Each frame binds variable names to local slots
and holds the break/continue targets of the construct that opened it.
Slots are never reclaimed: `max_locals` only grows, since the method has
one flat local-variable array. Leaving a frame only hides its names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .code import Label
from .types import Type


class LabelKind(Enum):
    """Jump targets that break/continue look up by kind."""

    LOOP_CONTINUE = "NEXT LOOP"
    LOOP_BREAK = "EXIT LOOP"
    SWITCH_BREAK = "EXIT SWITCH"


class UnknownVariable(Exception):
    """Raised when a name is not bound in any enclosing frame."""

    def __init__(self, name: str):
        self.name: str = name
        super().__init__("unknown variable '" + name + "'")


@dataclass
class Local:
    slot: int
    typ: Type


@dataclass
class Frame:
    locals: dict[str, Local] = field(default_factory=dict)
    labels: dict[LabelKind, Label] = field(default_factory=dict)


class Scope:
    def __init__(self, label_factory: Callable[[str], Label]) -> None:
        self.frames: list[Frame] = []
        self.next_slot: int = 0
        self.max_locals: int = 0
        self._label_factory = label_factory

    # ── Frames ───────────────────────────────────────────────

    def begin_scope(self) -> None:
        self.frames.append(Frame())

    def end_scope(self) -> None:
        self.frames.pop()

    # ── Variables ────────────────────────────────────────────

    def new_local(self, name: str, typ: Type) -> Local:
        """Bind name to the next free slot in the innermost frame."""
        local = Local(self.next_slot, typ)
        self.frames[-1].locals[name] = local
        self.next_slot += 1
        if self.next_slot > self.max_locals:
            self.max_locals = self.next_slot
        return local

    def find_var(self, name: str) -> Local | None:
        i = len(self.frames) - 1
        while i >= 0:
            if name in self.frames[i].locals:
                return self.frames[i].locals[name]
            i -= 1
        return None

    def get_var(self, name: str) -> Local:
        local = self.find_var(name)
        if local is None:
            raise UnknownVariable(name)
        return local

    # ── Labels ───────────────────────────────────────────────

    def new_label(self, purpose: str | LabelKind) -> Label:
        """Allocate a label. Kinded labels become targets in the innermost frame."""
        if isinstance(purpose, LabelKind):
            label = self._label_factory(purpose.value)
            self.frames[-1].labels[purpose] = label
            return label
        return self._label_factory(purpose)

    def get_label(self, *kinds: LabelKind) -> Label | None:
        """First label of any of `kinds`, searching frames innermost first.

        Within one frame the kinds are tried in the order given.
        """
        i = len(self.frames) - 1
        while i >= 0:
            labels = self.frames[i].labels
            for kind in kinds:
                if kind in labels:
                    return labels[kind]
            i -= 1
        return None
