"""goaster: semantic model and reflection over Go source declarations."""

from .builder import build_module, load_module
from .checker import implements
from .errors import (
    AsterError,
    DuplicateMethodError,
    FormatError,
    GoSyntaxError,
    KindMismatchError,
    PreconditionError,
    ReceiverMismatchError,
)
from .kinds import Kind, basic_kind
from .model import File, Import, Module, Package
from .nodes import FuncField, FuncNode, StructField, TypeNode, is_func_node, is_type_node

__version__ = "0.1.0"

__all__ = [
    "AsterError",
    "DuplicateMethodError",
    "File",
    "FormatError",
    "FuncField",
    "FuncNode",
    "GoSyntaxError",
    "Import",
    "Kind",
    "KindMismatchError",
    "Module",
    "Package",
    "PreconditionError",
    "ReceiverMismatchError",
    "StructField",
    "TypeNode",
    "basic_kind",
    "build_module",
    "implements",
    "is_func_node",
    "is_type_node",
    "load_module",
]
