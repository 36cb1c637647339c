"""Structural interface satisfaction."""

from __future__ import annotations

import logging

from .errors import KindMismatchError, PreconditionError
from .kinds import Kind
from .nodes import FuncNode, TypeNode, is_type_node

logger = logging.getLogger(__name__)


def implements(t: TypeNode, u: TypeNode, pointer: bool = False) -> bool:
    """Report whether *t* (``*t`` when *pointer*) satisfies interface *u*.

    Every method of *u* must be present in the effective method set of
    *t* with identical parameter and result type-name sequences and the
    same variadic flag. The first missing or mismatched method decides
    the answer.

    Only the methods *u* could resolve are checked. When
    ``u.unresolved_embeds`` is non-empty (e.g. an embedded ``io.Reader``)
    a True answer covers the known part of *u* only; callers must check
    that list, as they check for Kind Suspense.
    """
    if not is_type_node(u) or u.kind is not Kind.INTERFACE:
        raise KindMismatchError(f"{getattr(u, 'name', u)!s} is not an interface type")
    if not is_type_node(t):
        raise PreconditionError(f"implements() cannot be used with Kind Func ({t.name})")
    if u.unresolved_embeds:
        logger.debug(
            "%s has unresolved embeds %s; checking %s against its known methods only",
            u.name, ", ".join(u.unresolved_embeds), t.name,
        )

    have = t.method_set(pointer=pointer)
    for name, want in u.method_set().items():
        got = have.get(name)
        if got is None:
            logger.debug("%s does not implement %s: missing method %s", t.name, u.name, name)
            return False
        if not same_signature(got, want):
            logger.debug("%s does not implement %s: wrong signature for %s", t.name, u.name, name)
            return False
    return True


def same_signature(a: FuncNode, b: FuncNode) -> bool:
    """Compare parameter and result type names, ignoring names and receivers.

    ``f(xs ...int)`` and ``f(xs []int)`` differ even though both report
    the parameter as ``[]int``.
    """
    return (
        a.is_variadic == b.is_variadic
        and [p.type_name for p in a.params()] == [p.type_name for p in b.params()]
        and [r.type_name for r in a.results()] == [r.type_name for r in b.results()]
    )
