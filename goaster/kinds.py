"""Kind taxonomy and the builtin classification table."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional


class Kind(IntEnum):
    """The specific kind of type a declaration represents.

    The zero Kind is not a valid kind. ``SUSPENSE`` marks a declaration
    whose referent has not been (or could never be) classified.
    """

    INVALID = 0
    SUSPENSE = 1
    BOOL = 2
    INT = 3
    INT8 = 4
    INT16 = 5
    INT32 = 6
    INT64 = 7
    UINT = 8
    UINT8 = 9
    UINT16 = 10
    UINT32 = 11
    UINT64 = 12
    UINTPTR = 13
    FLOAT32 = 14
    FLOAT64 = 15
    COMPLEX64 = 16
    COMPLEX128 = 17
    STRING = 18
    INTERFACE = 19
    CHAN = 20
    ARRAY = 21
    SLICE = 22
    MAP = 23
    FUNC = 24
    STRUCT = 25
    PTR = 26

    @property
    def label(self) -> str:
        """Display name, e.g. ``Struct`` or ``Complex128``."""
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: str) -> "Kind":
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown kind: {label!r}") from None

    def __str__(self) -> str:
        return self.label


BASIC_KINDS: Dict[str, Kind] = {
    "bool": Kind.BOOL,
    "int": Kind.INT,
    "int8": Kind.INT8,
    "int16": Kind.INT16,
    "int32": Kind.INT32,
    "int64": Kind.INT64,
    "uint": Kind.UINT,
    "uint8": Kind.UINT8,
    "uint16": Kind.UINT16,
    "uint32": Kind.UINT32,
    "uint64": Kind.UINT64,
    "uintptr": Kind.UINTPTR,
    "float32": Kind.FLOAT32,
    "float64": Kind.FLOAT64,
    "complex64": Kind.COMPLEX64,
    "complex128": Kind.COMPLEX128,
    "string": Kind.STRING,
}


def basic_kind(name: str) -> Optional[Kind]:
    """Return the Kind of a builtin primitive type name, or None."""
    return BASIC_KINDS.get(name)
