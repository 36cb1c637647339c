"""Exception taxonomy for model construction, reflection and rendering."""

from __future__ import annotations

from typing import Optional


class AsterError(Exception):
    """Base class for every error raised by goaster."""


class PreconditionError(AsterError, TypeError):
    """An operation was invoked on a node of the wrong Kind.

    This is programmer misuse and is never recovered internally.
    """


class DuplicateMethodError(AsterError):
    """A method with the same name is already attached to the type."""

    def __init__(self, type_name: str, method_name: str) -> None:
        super().__init__(f"method {type_name}.{method_name} already declared")
        self.type_name = type_name
        self.method_name = method_name


class ReceiverMismatchError(AsterError):
    """A method cannot be bound to the requested receiver type."""


class KindMismatchError(AsterError, TypeError):
    """An interface operation was given a non-interface type."""


class GoSyntaxError(AsterError):
    """A Go source file could not be parsed."""

    def __init__(self, filename: str, line: Optional[int] = None, detail: str = "") -> None:
        where = f"{filename}:{line}" if line is not None else filename
        msg = f"syntax error in {where}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.filename = filename
        self.line = line


class FormatError(AsterError):
    """Rendering a file or node back to source text failed."""
