"""Node facades over classified declarations.

A declaration is exposed either as a :class:`TypeNode` (any Kind except
Func) or as a :class:`FuncNode` (Kind Func: functions, methods, interface
methods and ``type F func(...)`` declarations). Both facades compose one
:class:`NodeCore` carrying the state they share.

Asking a node for an operation of the other facade, e.g. ``param(0)`` on a
struct, raises :class:`~goaster.errors.PreconditionError`. Index and name
lookups that miss return ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .errors import DuplicateMethodError, PreconditionError, ReceiverMismatchError
from .kinds import Kind
from .models import TypeExpr
from .reflect import FuncField, StructField

__all__ = [
    "FuncField",
    "FuncNode",
    "Node",
    "NodeCore",
    "StructField",
    "TypeNode",
    "is_func_node",
    "is_type_node",
]


@dataclass
class NodeCore:
    """State shared by both facades.

    ``pkg_name`` and ``filename`` identify the owning File inside its
    Module; the node holds no reference to the File itself.
    """

    kind: Kind
    name: str
    pkg_name: str
    filename: str
    pos: int = 0
    text: str = ""
    doc: str = ""


_TYPE_ONLY = frozenset({
    "is_assign", "num_method", "method", "method_by_name", "method_set",
    "implements", "attach_method", "declare_method", "num_field", "field",
    "field_by_name", "fields", "underlying",
})
_FUNC_ONLY = frozenset({
    "num_param", "param", "num_result", "result", "is_variadic", "recv",
    "is_method", "params", "results",
})


class TypeNode:
    """A named (or aliased) type declaration. Kind is never Func."""

    def __init__(
        self,
        core: NodeCore,
        is_assign: bool = False,
        fields: Optional[List[StructField]] = None,
        underlying: Optional[TypeExpr] = None,
    ) -> None:
        if core.kind is Kind.FUNC:
            raise PreconditionError("TypeNode cannot have Kind Func")
        self.core = core
        self.underlying = underlying
        self.unresolved_embeds: List[str] = []
        self._is_assign = is_assign
        self._fields: List[StructField] = list(fields or [])
        self._methods: Dict[str, FuncNode] = {}

    def __getattr__(self, attr: str):
        if attr in _FUNC_ONLY:
            raise PreconditionError(f"{attr}() requires Kind Func, {self.core.name} is {self.core.kind}")
        raise AttributeError(attr)

    def __repr__(self) -> str:
        return f"<TypeNode {self.name or '?'} {self.kind}>"

    # -- common ----------------------------------------------------------

    @property
    def kind(self) -> Kind:
        return self.core.kind

    @property
    def name(self) -> str:
        return self.core.name

    @property
    def pkg_name(self) -> str:
        return self.core.pkg_name

    @property
    def filename(self) -> str:
        return self.core.filename

    @property
    def doc(self) -> str:
        return self.core.doc

    @property
    def text(self) -> str:
        return self.core.text

    # -- type ------------------------------------------------------------

    @property
    def is_assign(self) -> bool:
        """True for ``type A = B`` aliases."""
        return self._is_assign

    def num_method(self) -> int:
        return len(self._methods)

    def method(self, i: int) -> Optional["FuncNode"]:
        """The i'th method, methods being sorted by name."""
        names = sorted(self._methods)
        if 0 <= i < len(names):
            return self._methods[names[i]]
        return None

    def method_by_name(self, name: str) -> Optional["FuncNode"]:
        return self._methods.get(name)

    def method_set(self, pointer: bool = False) -> Dict[str, "FuncNode"]:
        """Effective method set, keyed and ordered by name.

        For a value type only value-receiver methods count; ``pointer=True``
        gives the set of ``*T``, which includes both. Interface methods have
        no receiver and are always included.
        """
        out: Dict[str, FuncNode] = {}
        for name in sorted(self._methods):
            fn = self._methods[name]
            recv = fn.recv
            if pointer or recv is None or not recv.is_pointer:
                out[name] = fn
        return out

    def implements(self, u: "TypeNode", pointer: bool = False) -> bool:
        """Report whether this type (or ``*T`` with *pointer*) satisfies *u*."""
        from .checker import implements

        return implements(self, u, pointer=pointer)

    def attach_method(self, fn: "FuncNode") -> None:
        """Bind a method declaration to this type.

        Raises ReceiverMismatchError when *fn* is not a method of this type
        and DuplicateMethodError when the name is taken (the first
        declaration stays).
        """
        if not isinstance(fn, FuncNode) or fn.recv is None:
            raise ReceiverMismatchError(f"{getattr(fn, 'name', fn)} has no receiver")
        if fn.recv.type_name != self.name or fn.pkg_name != self.pkg_name:
            raise ReceiverMismatchError(
                f"method {fn.name} has receiver {fn.recv.type_name}, not {self.pkg_name}.{self.name}"
            )
        if self.kind in (Kind.INTERFACE, Kind.PTR):
            raise ReceiverMismatchError(
                f"invalid receiver {self.name} for {fn.name}: {self.kind} types cannot have methods"
            )
        self.declare_method(fn)

    def declare_method(self, fn: "FuncNode") -> None:
        """Add *fn* to the method set without receiver checks."""
        if fn.name in self._methods:
            raise DuplicateMethodError(self.name, fn.name)
        self._methods[fn.name] = fn

    # -- struct ----------------------------------------------------------

    def _require_struct(self, op: str) -> None:
        if self.kind is not Kind.STRUCT:
            raise PreconditionError(f"{op}() requires Kind Struct, {self.name} is {self.kind}")

    def num_field(self) -> int:
        self._require_struct("num_field")
        return len(self._fields)

    def field(self, i: int) -> Optional[StructField]:
        self._require_struct("field")
        if 0 <= i < len(self._fields):
            return self._fields[i]
        return None

    def field_by_name(self, name: str) -> Optional[StructField]:
        """Direct field lookup; embedded structs' fields are not promoted."""
        self._require_struct("field_by_name")
        for f in self._fields:
            if f.name == name:
                return f
        return None

    def fields(self) -> List[StructField]:
        self._require_struct("fields")
        return list(self._fields)


class FuncNode:
    """A function, a method, an interface method or a func type."""

    def __init__(
        self,
        core: NodeCore,
        params: Optional[List[FuncField]] = None,
        results: Optional[List[FuncField]] = None,
        is_variadic: bool = False,
        recv: Optional[FuncField] = None,
        type_params: str = "",
    ) -> None:
        if core.kind is not Kind.FUNC:
            raise PreconditionError(f"FuncNode requires Kind Func, got {core.kind}")
        self.core = core
        self.type_params = type_params
        self._params: List[FuncField] = list(params or [])
        self._results: List[FuncField] = list(results or [])
        self._is_variadic = is_variadic
        self._recv = recv

    def __getattr__(self, attr: str):
        if attr in _TYPE_ONLY:
            raise PreconditionError(f"{attr}() cannot be used with Kind Func ({self.core.name})")
        raise AttributeError(attr)

    def __repr__(self) -> str:
        if self._recv is not None:
            star = "*" if self._recv.is_pointer else ""
            return f"<FuncNode ({star}{self._recv.type_name}).{self.name}>"
        return f"<FuncNode {self.name}>"

    # -- common ----------------------------------------------------------

    @property
    def kind(self) -> Kind:
        return self.core.kind

    @property
    def name(self) -> str:
        return self.core.name

    @property
    def pkg_name(self) -> str:
        return self.core.pkg_name

    @property
    def filename(self) -> str:
        return self.core.filename

    @property
    def doc(self) -> str:
        return self.core.doc

    @property
    def text(self) -> str:
        return self.core.text

    # -- func ------------------------------------------------------------

    def num_param(self) -> int:
        return len(self._params)

    def param(self, i: int) -> Optional[FuncField]:
        if 0 <= i < len(self._params):
            return self._params[i]
        return None

    def num_result(self) -> int:
        return len(self._results)

    def result(self, i: int) -> Optional[FuncField]:
        if 0 <= i < len(self._results):
            return self._results[i]
        return None

    def params(self) -> List[FuncField]:
        return list(self._params)

    def results(self) -> List[FuncField]:
        return list(self._results)

    @property
    def is_variadic(self) -> bool:
        """True when the final parameter is ``...T`` (reported as ``[]T``)."""
        return self._is_variadic

    @property
    def recv(self) -> Optional[FuncField]:
        """The receiver for methods, None for functions."""
        return self._recv

    @property
    def is_method(self) -> bool:
        return self._recv is not None


Node = Union[TypeNode, FuncNode]


def is_func_node(node: object) -> bool:
    return isinstance(node, FuncNode)


def is_type_node(node: object) -> bool:
    return isinstance(node, TypeNode)
