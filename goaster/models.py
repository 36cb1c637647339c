"""Raw, unclassified syntax produced by the source loader.

These records are an immutable snapshot of one parsed Go file. The
semantic model (:mod:`goaster.nodes`, :mod:`goaster.builder`) is built on
top of them and never mutates them.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


class Shape:
    """Structural shape of a type expression."""

    IDENT = "ident"
    QUALIFIED = "qualified"
    GENERIC = "generic"
    POINTER = "pointer"
    ARRAY = "array"
    SLICE = "slice"
    MAP = "map"
    CHAN = "chan"
    FUNC = "func"
    STRUCT = "struct"
    INTERFACE = "interface"
    UNION = "union"
    UNKNOWN = "unknown"


@dataclass
class TypeExpr:
    shape: str
    text: str = ""
    name: str = ""                      # IDENT / QUALIFIED / GENERIC base
    package: str = ""                   # QUALIFIED
    elem: Optional["TypeExpr"] = None   # POINTER / ARRAY / SLICE / CHAN / MAP value
    key: Optional["TypeExpr"] = None    # MAP
    length: str = ""                    # ARRAY; "..." for [...]T
    chan_dir: str = ""                  # CHAN: "", "send" or "recv"
    params: List["RawField"] = field(default_factory=list)    # FUNC
    results: List["RawField"] = field(default_factory=list)   # FUNC
    fields: List["RawField"] = field(default_factory=list)    # STRUCT
    methods: List["RawMethodSpec"] = field(default_factory=list)  # INTERFACE
    embeds: List["TypeExpr"] = field(default_factory=list)    # INTERFACE
    type_args: List["TypeExpr"] = field(default_factory=list)  # GENERIC / UNION terms


@dataclass
class RawField:
    """A struct field, parameter, result or receiver declaration.

    ``names`` is empty for anonymous parameters and embedded struct fields.
    """

    names: List[str]
    type: TypeExpr
    variadic: bool = False
    embedded: bool = False
    tag: str = ""


@dataclass
class RawMethodSpec:
    name: str
    params: List[RawField]
    results: List[RawField]
    pos: int
    text: str
    doc: str = ""


@dataclass
class RawTypeDecl:
    name: str
    type: TypeExpr
    pos: int
    line: int
    text: str
    is_assign: bool = False
    grouped: bool = False
    type_params: str = ""
    doc: str = ""


@dataclass
class RawFuncDecl:
    name: str
    params: List[RawField]
    results: List[RawField]
    pos: int
    line: int
    text: str
    recv: Optional[RawField] = None
    type_params: str = ""
    doc: str = ""


RawDecl = Union[RawTypeDecl, RawFuncDecl]


@dataclass
class RawImport:
    path: str
    name: str = ""
    doc: str = ""

    @property
    def local_name(self) -> str:
        """Name the import is referred to by inside the file."""
        if self.name:
            return self.name
        return self.path.rsplit("/", 1)[-1]


@dataclass
class RawFile:
    filename: str
    pkg_name: str
    src: bytes
    imports: List[RawImport] = field(default_factory=list)
    decls: List[RawDecl] = field(default_factory=list)
    line_starts: List[int] = field(default_factory=lambda: [0])

    def position(self, offset: int) -> Tuple[int, int]:
        """Translate a byte offset into a 1-based (line, column) pair."""
        return offset_position(self.line_starts, offset)


def offset_position(line_starts: List[int], offset: int) -> Tuple[int, int]:
    idx = bisect_right(line_starts, offset) - 1
    return idx + 1, offset - line_starts[idx] + 1


def line_table(src: bytes) -> List[int]:
    """Byte offsets at which each line of *src* starts."""
    starts = [0]
    for i, b in enumerate(src):
        if b == 0x0A:
            starts.append(i + 1)
    return starts


def _ident(name: str) -> TypeExpr:
    return TypeExpr(Shape.IDENT, text=name, name=name)


# Predeclared identifiers outside the basic table, as the universe
# scope declares them.
UNIVERSE = {
    "byte": _ident("uint8"),
    "rune": _ident("int32"),
    "any": TypeExpr(Shape.INTERFACE, text="interface{}"),
    "comparable": TypeExpr(Shape.INTERFACE, text="interface{ comparable }"),
    "error": TypeExpr(
        Shape.INTERFACE,
        text="interface{ Error() string }",
        methods=[RawMethodSpec(
            name="Error",
            params=[],
            results=[RawField(names=[], type=_ident("string"))],
            pos=0,
            text="Error() string",
        )],
    ),
}
