"""Method set resolution.

Binds free-standing method declarations onto the TypeNode named by their
receiver, and merges embedded interfaces into the interfaces embedding
them. Both run once per package, before the package is handed out.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .checker import same_signature
from .errors import AsterError, DuplicateMethodError, ReceiverMismatchError
from .kinds import Kind
from .models import UNIVERSE, RawMethodSpec, Shape, TypeExpr
from .model import Package
from .nodes import FuncNode, NodeCore, TypeNode
from .reflect import func_fields

logger = logging.getLogger(__name__)


def interface_method(spec: RawMethodSpec, pkg_name: str, filename: str) -> FuncNode:
    """FuncNode for a method listed in an interface body (no receiver)."""
    params, variadic = func_fields(spec.params)
    results, _ = func_fields(spec.results)
    core = NodeCore(Kind.FUNC, spec.name, pkg_name, filename, spec.pos, spec.text, spec.doc)
    return FuncNode(core, params, results, is_variadic=variadic)


class MethodSetResolver:
    """Attach every method of a package to its receiver's base type.

    Failures (duplicate names, unknown or func-kind receivers) abort only
    the offending method; they are logged and collected in ``errors``.
    """

    def __init__(self, package: Package) -> None:
        self.package = package
        self.errors: List[AsterError] = []

    def resolve(self) -> List[AsterError]:
        attached = 0
        for fn in self.package.methods():
            try:
                self.bind(fn)
                attached += 1
            except (DuplicateMethodError, ReceiverMismatchError) as exc:
                logger.warning("%s: %s", fn.filename, exc)
                self.errors.append(exc)
        logger.debug("Package %s: %d methods attached", self.package.name, attached)
        return self.errors

    def bind(self, fn: FuncNode) -> TypeNode:
        base = fn.recv.type_name if fn.recv is not None else ""
        target = self.package.scope.get(base)
        if target is None:
            raise ReceiverMismatchError(
                f"receiver type {base!r} of {fn.name} is not declared in package {self.package.name}"
            )
        if isinstance(target, FuncNode):
            raise ReceiverMismatchError(f"cannot attach {fn.name} to {base}: Kind Func has no methods")
        target.attach_method(fn)
        return target


def resolve_embedded_interfaces(package: Package) -> List[AsterError]:
    """Merge the methods of embedded interfaces, to a fixpoint.

    An interface is merged only once everything it embeds is complete.
    Embeds that never resolve (other packages, cycles) are left listed in
    ``TypeNode.unresolved_embeds``.
    """
    errors: List[AsterError] = []
    pending: Dict[int, Tuple[TypeNode, List[TypeExpr]]] = {}
    for node in package.nodes():
        if isinstance(node, TypeNode) and node.kind is Kind.INTERFACE and node.underlying is not None:
            if node.underlying.embeds:
                pending[id(node)] = (node, list(node.underlying.embeds))

    while pending:
        progress = False
        for key, (node, embeds) in list(pending.items()):
            remaining: List[TypeExpr] = []
            for emb in embeds:
                methods = _embedded_methods(package, node, emb, pending)
                if methods is None:
                    remaining.append(emb)
                    continue
                for fn in methods:
                    existing = node.method_by_name(fn.name)
                    if existing is None:
                        node.declare_method(fn)
                    elif existing is not fn and not same_signature(existing, fn):
                        exc = DuplicateMethodError(node.name, fn.name)
                        logger.warning("%s: %s", node.filename, exc)
                        errors.append(exc)
                progress = True
            if remaining:
                pending[key] = (node, remaining)
            else:
                del pending[key]
        if not progress:
            break

    for node, embeds in pending.values():
        node.unresolved_embeds = [e.text for e in embeds]
        logger.debug("Interface %s: unresolved embeds %s", node.name, node.unresolved_embeds)
    return errors


def _embedded_methods(
    package: Package,
    node: TypeNode,
    emb: TypeExpr,
    pending: Dict[int, Tuple[TypeNode, List[TypeExpr]]],
) -> Optional[List[FuncNode]]:
    if emb.shape != Shape.IDENT:
        return None
    target = package.type_node(emb.name)
    if target is None:
        universe = UNIVERSE.get(emb.name)
        if universe is None or universe.shape != Shape.INTERFACE:
            return None
        return [interface_method(spec, node.pkg_name, node.filename) for spec in universe.methods]
    if target is node or target.kind is not Kind.INTERFACE or id(target) in pending:
        return None
    return list(target.method_set().values())
