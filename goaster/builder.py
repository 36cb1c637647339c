"""Semantic model builder.

Turns loader output into a :class:`~goaster.model.Module`:

1. classify every type declaration of a package, repeating worklist
   passes while references to other declarations get resolved;
2. create one TypeNode/FuncNode per declaration and register it in its
   File by source position;
3. merge embedded interfaces and attach methods to their receivers.

Declarations whose referent never shows up keep Kind ``SUSPENSE``.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import DuplicateMethodError
from .kinds import Kind, basic_kind
from .loader import FileFilter, GoSourceLoader
from .model import File, Module, Package
from .models import UNIVERSE, RawFile, RawFuncDecl, RawTypeDecl, Shape, TypeExpr
from .nodes import FuncNode, Node, NodeCore, TypeNode
from .reflect import func_fields, receiver_field, struct_fields
from .resolver import MethodSetResolver, interface_method, resolve_embedded_interfaces

logger = logging.getLogger(__name__)

# (Kind, underlying type expression)
Resolution = Tuple[Kind, TypeExpr]

_SHAPE_KINDS: Dict[str, Kind] = {
    Shape.POINTER: Kind.PTR,
    Shape.ARRAY: Kind.ARRAY,
    Shape.SLICE: Kind.SLICE,
    Shape.MAP: Kind.MAP,
    Shape.CHAN: Kind.CHAN,
    Shape.FUNC: Kind.FUNC,
    Shape.STRUCT: Kind.STRUCT,
    Shape.INTERFACE: Kind.INTERFACE,
}


# ===================================================================
# Kind classification
# ===================================================================

def classify(expr: TypeExpr, resolved: Mapping[str, Resolution]) -> Optional[Resolution]:
    """Classify one type expression.

    Returns None while *expr* names a declaration that is not resolved
    yet (or lives in another package).
    """
    if expr.shape in (Shape.IDENT, Shape.GENERIC) and not expr.package:
        kind = basic_kind(expr.name)
        if kind is not None:
            return kind, expr
        if expr.name in resolved:
            return resolved[expr.name]
        if expr.name in UNIVERSE:
            return classify(UNIVERSE[expr.name], resolved)
        return None
    if expr.shape in (Shape.QUALIFIED, Shape.GENERIC):
        return None
    kind = _SHAPE_KINDS.get(expr.shape)
    if kind is None:
        return Kind.INVALID, expr
    return kind, expr


def resolve_kinds(decls: Iterable[RawTypeDecl]) -> Dict[str, Resolution]:
    """Worklist fixpoint over a package's type declarations.

    Each pass classifies what it can; unresolved declarations go back on
    the list. Stops when a pass resolves nothing. Names missing from the
    result stay in Suspense.
    """
    resolved: Dict[str, Resolution] = {}
    pending: List[RawTypeDecl] = list(decls)
    passes = 0
    while pending:
        passes += 1
        still: List[RawTypeDecl] = []
        for decl in pending:
            res = classify(decl.type, resolved)
            if res is None:
                still.append(decl)
            else:
                resolved.setdefault(decl.name, res)
        logger.debug("Pass %d: %d resolved, %d pending", passes, len(pending) - len(still), len(still))
        if len(still) == len(pending):
            break
        pending = still

    for decl in pending:
        logger.debug("Type %s stays in Suspense (refers to %s)", decl.name, decl.type.text)
    return resolved


# ===================================================================
# Package / Module construction
# ===================================================================

class PackageBuilder:
    """Build one Package from the raw files that declare it."""

    def __init__(self, name: str, directory: Path, raw_files: List[RawFile]) -> None:
        self.name = name
        self.directory = directory
        self.raw_files = raw_files

    def build(self) -> Package:
        type_decls = [
            d for raw in self.raw_files for d in raw.decls if isinstance(d, RawTypeDecl)
        ]
        resolved = resolve_kinds(type_decls)

        package = Package(name=self.name, dir=self.directory)
        for raw in self.raw_files:
            file = File.from_raw(raw)
            for decl in raw.decls:
                node = self._make_node(package, file, decl, resolved)
                file.register(decl.pos, node)
            package.add_file(file)

        package.errors.extend(resolve_embedded_interfaces(package))
        package.errors.extend(MethodSetResolver(package).resolve())
        logger.debug("Built package %s: %d files", self.name, len(package.files))
        return package

    def _make_node(
        self,
        package: Package,
        file: File,
        decl: Union[RawTypeDecl, RawFuncDecl],
        resolved: Mapping[str, Resolution],
    ) -> Node:
        if isinstance(decl, RawFuncDecl):
            params, variadic = func_fields(decl.params)
            results, _ = func_fields(decl.results)
            core = NodeCore(Kind.FUNC, decl.name, file.pkg_name, file.filename, decl.pos, decl.text, decl.doc)
            recv = receiver_field(decl.recv) if decl.recv is not None else None
            return FuncNode(core, params, results, variadic, recv, decl.type_params)

        kind, underlying = resolved.get(decl.name, (Kind.SUSPENSE, None))
        core = NodeCore(kind, decl.name, file.pkg_name, file.filename, decl.pos, decl.text, decl.doc)
        if kind is Kind.FUNC:
            params, variadic = func_fields(underlying.params)
            results, _ = func_fields(underlying.results)
            return FuncNode(core, params, results, variadic, type_params=decl.type_params)

        node = TypeNode(
            core,
            is_assign=decl.is_assign,
            fields=struct_fields(underlying) if kind is Kind.STRUCT else None,
            underlying=underlying,
        )
        if kind is Kind.INTERFACE:
            for spec in underlying.methods:
                try:
                    node.declare_method(interface_method(spec, file.pkg_name, file.filename))
                except DuplicateMethodError as exc:
                    logger.warning("%s: %s", file.filename, exc)
                    package.errors.append(exc)
        return node


def build_module(
    directory: Union[str, Path],
    raw_files: List[RawFile],
    workers: int = 1,
) -> Module:
    """Group raw files by package name and build every package.

    Packages share nothing mutable, so with ``workers > 1`` they are
    built on a thread pool.
    """
    directory = Path(directory)
    groups: Dict[str, List[RawFile]] = {}
    for raw in raw_files:
        groups.setdefault(raw.pkg_name, []).append(raw)

    builders = [PackageBuilder(name, directory, files) for name, files in sorted(groups.items())]
    if workers > 1 and len(builders) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            packages = list(pool.map(lambda b: b.build(), builders))
    else:
        packages = [b.build() for b in builders]

    module = Module(dir=directory)
    for pkg in packages:
        module.packages[pkg.name] = pkg
    return module


def load_module(
    directory: Union[str, Path],
    file_filter: Optional[FileFilter] = None,
    include_tests: bool = True,
    workers: int = 1,
) -> Module:
    """Load and build every package found in *directory*."""
    directory = Path(directory)
    loader = GoSourceLoader(file_filter=file_filter, include_tests=include_tests)
    raw_files = loader.load_dir(directory)
    module = build_module(directory, raw_files, workers=workers)
    logger.info("Loaded %s: %d packages", directory, len(module.packages))
    return module
