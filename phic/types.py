"""Language types: primitive kinds and named (struct) types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PrimitiveKind(Enum):
    """Built-in types, valued by their source spelling."""

    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    STRING = "string"
    CHAR = "char"
    BOOL = "bool"
    RANGE = "range"
    NULL = "null"


_INTEGERS = frozenset(
    {
        PrimitiveKind.I8,
        PrimitiveKind.I16,
        PrimitiveKind.I32,
        PrimitiveKind.I64,
        PrimitiveKind.U8,
        PrimitiveKind.U16,
        PrimitiveKind.U32,
        PrimitiveKind.U64,
    }
)
_FLOATS = frozenset({PrimitiveKind.F32, PrimitiveKind.F64})


@dataclass(frozen=True)
class Type:
    """A primitive type or a custom type referred to by name."""

    spec: PrimitiveKind | str

    @property
    def primitive(self) -> PrimitiveKind | None:
        return self.spec if isinstance(self.spec, PrimitiveKind) else None

    @property
    def name(self) -> str:
        return self.spec.value if isinstance(self.spec, PrimitiveKind) else self.spec

    def is_primitive(self) -> bool:
        return isinstance(self.spec, PrimitiveKind)

    def is_integer(self) -> bool:
        return self.spec in _INTEGERS

    def is_float(self) -> bool:
        return self.spec in _FLOATS

    def is_numeric(self) -> bool:
        return self.is_integer() or self.is_float()

    def __str__(self) -> str:
        return self.name


def type_from_name(name: str) -> Type:
    """Map a type name to a primitive type, or a custom type otherwise."""
    try:
        return Type(PrimitiveKind(name))
    except ValueError:
        return Type(name)