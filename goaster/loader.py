"""Go source loader built on Tree-sitter.

Turns a directory of ``.go`` files into :class:`~goaster.models.RawFile`
snapshots: package clause, imports, positioned type and function
declarations with their doc comments. Nothing here classifies anything;
that is the job of :mod:`goaster.builder`.

Tree-sitter is error tolerant, but a file whose tree contains ``ERROR``
or missing nodes is rejected with :class:`~goaster.errors.GoSyntaxError`
so a half-parsed declaration never reaches the semantic model.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import tree_sitter_go
from tree_sitter import Language, Parser as TSParser

from .config import SUPPORTED_EXTENSIONS
from .errors import GoSyntaxError
from .models import (
    RawField,
    RawFile,
    RawFuncDecl,
    RawImport,
    RawMethodSpec,
    RawTypeDecl,
    Shape,
    TypeExpr,
    line_table,
)

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

FileFilter = Callable[[Path], bool]

# Comment lines go/ast drops from doc text (//go:generate, //line, ...)
_DIRECTIVE = re.compile(r"^//(line |extern |export |[a-z0-9]+:[a-z0-9])")


# ===================================================================
# Loader
# ===================================================================

class GoSourceLoader:
    """Parse the ``.go`` files of one directory.

    *file_filter* receives each candidate path and returns False to skip
    it. ``_test.go`` files are loaded unless *include_tests* is False.
    """

    def __init__(
        self,
        file_filter: Optional[FileFilter] = None,
        include_tests: bool = True,
    ) -> None:
        self.file_filter = file_filter
        self.include_tests = include_tests
        self._parser = TSParser(GO_LANGUAGE)

    def select(self, path: Path) -> bool:
        if path.suffix not in SUPPORTED_EXTENSIONS or not path.is_file():
            return False
        if not self.include_tests and path.name.endswith("_test.go"):
            return False
        if self.file_filter is not None and not self.file_filter(path):
            return False
        return True

    def load_dir(self, directory: Path) -> List[RawFile]:
        """Parse every selected file of *directory*, in filename order.

        The first unreadable or unparsable file aborts the load.
        """
        files: List[RawFile] = []
        for path in sorted(directory.iterdir()):
            if not self.select(path):
                continue
            files.append(self.parse_file(path))
        logger.debug("Loaded %d Go files from %s", len(files), directory)
        return files

    def parse_file(
        self,
        file_path: Path,
        source: Optional[Union[str, bytes]] = None,
    ) -> RawFile:
        if source is None:
            src = file_path.read_bytes()
        elif isinstance(source, str):
            src = source.encode("utf-8")
        else:
            src = source

        tree = self._parser.parse(src)
        root = tree.root_node
        filename = str(file_path)
        if root.has_error:
            raise GoSyntaxError(filename, _first_error_line(root))

        raw = _FileWalker(filename, src).walk(root)
        if not raw.pkg_name:
            raise GoSyntaxError(filename, 1, "missing package clause")
        return raw


# ===================================================================
# Syntax walker
# ===================================================================

class _FileWalker:
    """Extract raw declarations from one Tree-sitter ``source_file``."""

    def __init__(self, filename: str, src: bytes) -> None:
        self.filename = filename
        self.src = src

    def walk(self, root: Any) -> RawFile:
        raw = RawFile(
            filename=self.filename,
            pkg_name="",
            src=self.src,
            line_starts=line_table(self.src),
        )
        for child in root.named_children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type in ("package_identifier", "identifier"):
                        raw.pkg_name = self._text(sub)
            elif child.type == "import_declaration":
                raw.imports.extend(self._imports(child))
            elif child.type == "type_declaration":
                raw.decls.extend(self._type_decls(child))
            elif child.type in ("function_declaration", "method_declaration"):
                raw.decls.append(self._func_decl(child))
        return raw

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _imports(self, decl: Any) -> List[RawImport]:
        specs: List[Any] = []
        for child in decl.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(s for s in child.named_children if s.type == "import_spec")

        imports: List[RawImport] = []
        for spec in specs:
            name_node = spec.child_by_field_name("name")
            path_node = spec.child_by_field_name("path")
            grouped = spec.parent is not None and spec.parent.type == "import_spec_list"
            doc = self._leading_doc(spec if grouped else decl)
            imports.append(RawImport(
                path=self._text(path_node).strip("\"`"),
                name=self._text(name_node) if name_node is not None else "",
                doc=doc,
            ))
        return imports

    def _type_decls(self, decl: Any) -> List[RawTypeDecl]:
        specs = [c for c in decl.named_children if c.type in ("type_spec", "type_alias")]
        grouped = any(c.type == "(" for c in decl.children)
        decl_doc = self._leading_doc(decl)

        out: List[RawTypeDecl] = []
        for spec in specs:
            doc = self._leading_doc(spec) if grouped else ""
            if not doc and len(specs) == 1:
                doc = decl_doc
            tparams = spec.child_by_field_name("type_parameters")
            out.append(RawTypeDecl(
                name=self._text(spec.child_by_field_name("name")),
                type=self._type_expr(spec.child_by_field_name("type")),
                pos=spec.start_byte,
                line=spec.start_point[0] + 1,
                text="type " + self._text(spec),
                is_assign=spec.type == "type_alias" or any(c.type == "=" for c in spec.children),
                type_params=self._text(tparams) if tparams is not None else "",
                doc=doc,
            ))
        return out

    def _func_decl(self, node: Any) -> RawFuncDecl:
        recv: Optional[RawField] = None
        recv_node = node.child_by_field_name("receiver")
        if recv_node is not None:
            recv_fields = self._param_list(recv_node)
            if recv_fields:
                recv = recv_fields[0]
        tparams = node.child_by_field_name("type_parameters")
        return RawFuncDecl(
            name=self._text(node.child_by_field_name("name")),
            params=self._param_list(node.child_by_field_name("parameters")),
            results=self._results(node.child_by_field_name("result")),
            pos=node.start_byte,
            line=node.start_point[0] + 1,
            text=self._text(node),
            recv=recv,
            type_params=self._text(tparams) if tparams is not None else "",
            doc=self._leading_doc(node),
        )

    # ------------------------------------------------------------------
    # Fields and parameters
    # ------------------------------------------------------------------

    def _param_list(self, plist: Any) -> List[RawField]:
        if plist is None:
            return []
        fields: List[RawField] = []
        for child in plist.named_children:
            if child.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            names = [self._text(n) for n in child.children_by_field_name("name")]
            fields.append(RawField(
                names=names,
                type=self._type_expr(child.child_by_field_name("type")),
                variadic=child.type == "variadic_parameter_declaration",
            ))
        return fields

    def _results(self, node: Any) -> List[RawField]:
        if node is None:
            return []
        if node.type == "parameter_list":
            return self._param_list(node)
        return [RawField(names=[], type=self._type_expr(node))]

    def _struct_fields(self, list_node: Any) -> List[RawField]:
        fields: List[RawField] = []
        for decl in list_node.named_children:
            if decl.type != "field_declaration":
                continue
            names = [self._text(n) for n in decl.children_by_field_name("name")]
            ftype = self._type_expr(decl.child_by_field_name("type"))
            embedded = not names
            if embedded and any(c.type == "*" for c in decl.children):
                ftype = TypeExpr(Shape.POINTER, text="*" + ftype.text, elem=ftype)
            tag = decl.child_by_field_name("tag")
            fields.append(RawField(
                names=names,
                type=ftype,
                embedded=embedded,
                tag=self._text(tag) if tag is not None else "",
            ))
        return fields

    def _interface_body(self, node: Any, expr: TypeExpr) -> None:
        for child in node.named_children:
            if child.type in ("method_elem", "method_spec"):
                expr.methods.append(RawMethodSpec(
                    name=self._text(child.child_by_field_name("name")),
                    params=self._param_list(child.child_by_field_name("parameters")),
                    results=self._results(child.child_by_field_name("result")),
                    pos=child.start_byte,
                    text=self._text(child),
                    doc=self._leading_doc(child),
                ))
            elif child.type in ("type_elem", "constraint_elem", "interface_type_name"):
                terms = [t for t in child.named_children if t.type != "comment"]
                # Unions and ~T terms only constrain type parameters.
                if len(terms) == 1 and terms[0].type in (
                    "type_identifier", "qualified_type", "generic_type",
                ):
                    expr.embeds.append(self._type_expr(terms[0]))

    # ------------------------------------------------------------------
    # Type expressions
    # ------------------------------------------------------------------

    def _type_expr(self, node: Any) -> TypeExpr:
        if node is None:
            return TypeExpr(Shape.UNKNOWN)
        kind = node.type
        text = " ".join(self._text(node).split())

        if kind in ("parenthesized_type", "type_elem") and len(_named(node)) == 1:
            return self._type_expr(_named(node)[0])
        if kind in ("type_identifier", "identifier"):
            return TypeExpr(Shape.IDENT, text=text, name=text)
        if kind == "qualified_type":
            return TypeExpr(
                Shape.QUALIFIED,
                text=text,
                name=self._text(node.child_by_field_name("name")),
                package=self._text(node.child_by_field_name("package")),
            )
        if kind == "generic_type":
            base = self._type_expr(node.child_by_field_name("type"))
            args_node = node.child_by_field_name("type_arguments")
            args = [self._type_expr(a) for a in _named(args_node)] if args_node is not None else []
            return TypeExpr(
                Shape.GENERIC, text=text, name=base.name, package=base.package, type_args=args,
            )
        if kind == "pointer_type":
            return TypeExpr(Shape.POINTER, text=text, elem=self._type_expr(_named(node)[0]))
        if kind == "array_type":
            return TypeExpr(
                Shape.ARRAY,
                text=text,
                length=" ".join(self._text(node.child_by_field_name("length")).split()),
                elem=self._type_expr(node.child_by_field_name("element")),
            )
        if kind == "implicit_length_array_type":
            return TypeExpr(
                Shape.ARRAY, text=text, length="...",
                elem=self._type_expr(node.child_by_field_name("element")),
            )
        if kind == "slice_type":
            return TypeExpr(Shape.SLICE, text=text, elem=self._type_expr(node.child_by_field_name("element")))
        if kind == "map_type":
            return TypeExpr(
                Shape.MAP,
                text=text,
                key=self._type_expr(node.child_by_field_name("key")),
                elem=self._type_expr(node.child_by_field_name("value")),
            )
        if kind == "channel_type":
            tokens = [c.type for c in node.children if not c.is_named]
            direction = ""
            if tokens and tokens[0] == "<-":
                direction = "recv"
            elif "<-" in tokens:
                direction = "send"
            return TypeExpr(
                Shape.CHAN, text=text, chan_dir=direction,
                elem=self._type_expr(node.child_by_field_name("value")),
            )
        if kind == "function_type":
            return TypeExpr(
                Shape.FUNC,
                text=text,
                params=self._param_list(node.child_by_field_name("parameters")),
                results=self._results(node.child_by_field_name("result")),
            )
        if kind == "struct_type":
            expr = TypeExpr(Shape.STRUCT, text=text)
            for child in _named(node):
                if child.type == "field_declaration_list":
                    expr.fields = self._struct_fields(child)
            return expr
        if kind == "interface_type":
            expr = TypeExpr(Shape.INTERFACE, text=text)
            self._interface_body(node, expr)
            return expr
        if kind in ("union_type", "negated_type", "type_elem", "constraint_elem"):
            return TypeExpr(Shape.UNION, text=text)

        logger.debug("Unhandled type node %s in %s", kind, self.filename)
        return TypeExpr(Shape.UNKNOWN, text=text)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _leading_doc(self, node: Any) -> str:
        """Text of the comment group ending on the line right above *node*."""
        group: List[Any] = []
        row = node.start_point[0]
        prev = node.prev_named_sibling
        while prev is not None and prev.type == "comment" and prev.end_point[0] == row - 1:
            before = prev.prev_named_sibling
            if before is not None and before.end_point[0] == prev.start_point[0]:
                # trailing comment of the previous line's code
                break
            group.append(prev)
            row = prev.start_point[0]
            prev = before
        group.reverse()
        return comment_text([self._text(c) for c in group])

    def _text(self, node: Any) -> str:
        if node is None:
            return ""
        return self.src[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


# ===================================================================
# Shared Helpers
# ===================================================================

def comment_text(comments: List[str]) -> str:
    """Strip comment markers and directives, like go/ast CommentGroup.Text.

    Leading and trailing blank lines are removed and runs of blank lines
    collapse into one. The result carries no trailing newline.
    """
    lines: List[str] = []
    for raw in comments:
        if raw.startswith("//"):
            if _DIRECTIVE.match(raw):
                continue
            body = raw[2:]
            if body.startswith(" "):
                body = body[1:]
            lines.append(body)
        elif raw.startswith("/*"):
            lines.extend(raw[2:-2].splitlines())
        else:
            lines.append(raw)

    lines = [ln.rstrip() for ln in lines]
    out: List[str] = []
    for ln in lines:
        if not ln and (not out or not out[-1]):
            continue
        out.append(ln)
    while out and not out[-1]:
        out.pop()
    return "\n".join(out)


def _named(node: Any) -> List[Any]:
    return [c for c in node.named_children if c.type != "comment"]


def _first_error_line(root: Any) -> Optional[int]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return None
