"""Value types: two scalars and an array of each."""

from __future__ import annotations

from enum import Enum

INT_MIN: int = -(2**31)
INT_MAX: int = 2**31 - 1


class Type(Enum):
    """A value type, carrying its JVM descriptor."""

    INT = "I"
    STRING = "Ljava/lang/String;"
    ARRAY_INT = "[I"
    ARRAY_STRING = "[Ljava/lang/String;"

    def is_int(self) -> bool:
        return self is Type.INT

    def is_string(self) -> bool:
        return self is Type.STRING

    def is_array(self) -> bool:
        return self is Type.ARRAY_INT or self is Type.ARRAY_STRING

    def is_reference(self) -> bool:
        """Held in a slot with aload/astore rather than iload/istore."""
        return self is not Type.INT

    def element(self) -> Type | None:
        """Element type of an array type, None for scalars."""
        if self is Type.ARRAY_INT:
            return Type.INT
        if self is Type.ARRAY_STRING:
            return Type.STRING
        return None

    def __str__(self) -> str:
        return _NAMES[self]


_NAMES: dict[Type, str] = {
    Type.INT: "int",
    Type.STRING: "string",
    Type.ARRAY_INT: "int[]",
    Type.ARRAY_STRING: "string[]",
}


def is_string_name(name: str) -> bool:
    """Default naming convention: a trailing '$' marks a string variable."""
    return name.endswith("$")


def type_of_name(name: str) -> Type:
    """Scalar type implied by a variable's spelling."""
    return Type.STRING if is_string_name(name) else Type.INT
