"""Struct field index and function signature reflection.

Type names are rendered from the syntax, not from a type checker: two
types are "the same" here when their canonical spellings are equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import RawField, Shape, TypeExpr


@dataclass(frozen=True)
class StructField:
    name: str
    type_name: str
    embedded: bool = False
    tag: str = ""


@dataclass(frozen=True)
class FuncField:
    """A function parameter, result or receiver.

    For receivers ``type_name`` is the bare base type (no ``*`` and no
    type arguments) and ``is_pointer`` tells whether it was declared
    as ``*T``.
    """

    name: str
    type_name: str
    is_pointer: bool = False


def type_name(expr: Optional[TypeExpr]) -> str:
    """Canonical spelling of a type expression."""
    if expr is None:
        return ""
    shape = expr.shape
    if shape == Shape.IDENT:
        return expr.name
    if shape == Shape.QUALIFIED:
        return f"{expr.package}.{expr.name}"
    if shape == Shape.GENERIC:
        base = f"{expr.package}.{expr.name}" if expr.package else expr.name
        return base + "[" + ", ".join(type_name(a) for a in expr.type_args) + "]"
    if shape == Shape.POINTER:
        return "*" + type_name(expr.elem)
    if shape == Shape.ARRAY:
        return f"[{expr.length}]{type_name(expr.elem)}"
    if shape == Shape.SLICE:
        return "[]" + type_name(expr.elem)
    if shape == Shape.MAP:
        return f"map[{type_name(expr.key)}]{type_name(expr.elem)}"
    if shape == Shape.CHAN:
        prefix = {"recv": "<-chan ", "send": "chan<- "}.get(expr.chan_dir, "chan ")
        return prefix + type_name(expr.elem)
    if shape == Shape.FUNC:
        return "func" + signature(expr.params, expr.results)
    return expr.text


def signature(params: Sequence[RawField], results: Sequence[RawField]) -> str:
    """Render ``(A, ...B) R`` for a parameter and result list."""
    ins = []
    for f in params:
        spelled = ("..." if f.variadic else "") + type_name(f.type)
        ins.extend([spelled] * max(len(f.names), 1))
    outs = [type_name(f.type) for f in results for _ in range(max(len(f.names), 1))]
    text = "(" + ", ".join(ins) + ")"
    if len(outs) == 1 and not results[0].names:
        return f"{text} {outs[0]}"
    if outs:
        return f"{text} (" + ", ".join(outs) + ")"
    return text


def struct_fields(expr: Optional[TypeExpr]) -> List[StructField]:
    """Direct fields of a struct type, in declaration order.

    ``a, b int`` yields two fields. An embedded field is named after its
    bare type (``*pkg.Conn`` is indexed as ``Conn``); fields of embedded
    structs are not promoted.
    """
    if expr is None or expr.shape != Shape.STRUCT:
        return []
    fields: List[StructField] = []
    for raw in expr.fields:
        spelled = type_name(raw.type)
        if raw.embedded:
            base, _ = base_type(raw.type)
            fields.append(StructField(base, spelled, embedded=True, tag=raw.tag))
            continue
        for name in raw.names:
            fields.append(StructField(name, spelled, tag=raw.tag))
    return fields


def func_fields(raw_fields: Sequence[RawField]) -> Tuple[List[FuncField], bool]:
    """Flatten a parameter or result list; report a trailing ``...T``.

    The variadic parameter is counted once and spelled ``[]T``.
    """
    fields: List[FuncField] = []
    variadic = False
    for raw in raw_fields:
        spelled = type_name(raw.type)
        if raw.variadic:
            spelled = "[]" + spelled
            variadic = True
        for name in raw.names or [""]:
            fields.append(FuncField(name, spelled))
    return fields, variadic


def receiver_field(raw: RawField) -> FuncField:
    base, is_pointer = base_type(raw.type)
    name = raw.names[0] if raw.names else ""
    return FuncField(name, base, is_pointer=is_pointer)


def base_type(expr: TypeExpr) -> Tuple[str, bool]:
    """Strip one pointer level and any type arguments: ``*List[T]`` -> ``List``."""
    is_pointer = False
    if expr.shape == Shape.POINTER and expr.elem is not None:
        expr = expr.elem
        is_pointer = True
    if expr.shape in (Shape.IDENT, Shape.QUALIFIED, Shape.GENERIC):
        return expr.name, is_pointer
    return type_name(expr), is_pointer
