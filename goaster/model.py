"""Module / Package / File containers of the semantic model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import AsterError
from .models import RawFile, RawImport, offset_position
from .nodes import FuncNode, Node, TypeNode

Import = RawImport


@dataclass
class File:
    """One Go source file and the nodes declared in it, by position."""

    filename: str
    pkg_name: str
    src: bytes
    imports: List[Import] = field(default_factory=list)
    nodes: Dict[int, Node] = field(default_factory=dict)
    line_starts: List[int] = field(default_factory=lambda: [0])

    @classmethod
    def from_raw(cls, raw: RawFile) -> "File":
        return cls(
            filename=raw.filename,
            pkg_name=raw.pkg_name,
            src=raw.src,
            imports=list(raw.imports),
            line_starts=list(raw.line_starts),
        )

    def register(self, pos: int, node: Node) -> None:
        """Add *node* at byte offset *pos*, keeping ``nodes`` in offset order.

        Declarations arrive in source order, so only an out-of-order
        insert pays for a re-sort.
        """
        last = next(reversed(self.nodes), None)
        self.nodes[pos] = node
        if last is not None and pos < last:
            self.nodes = dict(sorted(self.nodes.items()))

    def position(self, offset: int) -> Tuple[int, int]:
        """1-based (line, column) of a byte offset in this file."""
        return offset_position(self.line_starts, offset)

    def lookup(self, name: str) -> Optional[Node]:
        for node in self.nodes.values():
            if node.name == name:
                return node
        return None


@dataclass
class Package:
    """A set of files collectively building one Go package."""

    name: str
    dir: Path
    files: Dict[str, File] = field(default_factory=dict)
    imports: Dict[str, Import] = field(default_factory=dict)
    scope: Dict[str, Node] = field(default_factory=dict)
    errors: List[AsterError] = field(default_factory=list)

    def add_file(self, file: File) -> None:
        self.files[file.filename] = file
        for imp in file.imports:
            self.imports.setdefault(imp.path, imp)
        for node in file.nodes.values():
            if isinstance(node, FuncNode) and node.is_method:
                continue
            self.scope.setdefault(node.name, node)

    def nodes(self) -> Iterator[Node]:
        """Every declaration, in filename then position order."""
        for filename in sorted(self.files):
            yield from self.files[filename].nodes.values()

    def methods(self) -> Iterator[FuncNode]:
        for node in self.nodes():
            if isinstance(node, FuncNode) and node.is_method:
                yield node

    def type_node(self, name: str) -> Optional[TypeNode]:
        node = self.scope.get(name)
        return node if isinstance(node, TypeNode) else None

    def func_node(self, name: str) -> Optional[FuncNode]:
        node = self.scope.get(name)
        return node if isinstance(node, FuncNode) else None


@dataclass
class Module:
    """All packages found in one directory, keyed by package name."""

    dir: Path
    packages: Dict[str, Package] = field(default_factory=dict)

    def package(self, name: str) -> Optional[Package]:
        return self.packages.get(name)

    def file(self, pkg_name: str, filename: str) -> Optional[File]:
        pkg = self.packages.get(pkg_name)
        if pkg is None:
            return None
        return pkg.files.get(filename)

    def file_of(self, node: Node) -> Optional[File]:
        return self.file(node.pkg_name, node.filename)

    def lookup(self, pkg_name: str, name: str) -> Optional[Node]:
        pkg = self.packages.get(pkg_name)
        if pkg is None:
            return None
        return pkg.scope.get(name)

    def nodes(self) -> Iterator[Node]:
        for name in sorted(self.packages):
            yield from self.packages[name].nodes()
