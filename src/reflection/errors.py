"""Reflection errors.

All failures are local and deterministic: retrying without changing the
input never changes the outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reflection.symbol import SymbolReflection


class ReflectionError(Exception):
    """Base class for reflection failures."""


class ClassNotFound(ReflectionError, LookupError):
    """Raised when a referenced symbol cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Could not locate class-like symbol '{name}'")
        self.name = name


class NotAClassReflection(ReflectionError):
    """Raised when a class was expected but an interface or trait was found."""

    @classmethod
    def from_reflection(cls, reflection: SymbolReflection) -> NotAClassReflection:
        kind = reflection.declaration.kind.value
        msg = f"Provided node '{reflection.get_name()}' is not a class, but a {kind}"
        return cls(msg)


class NotAnInterfaceReflection(ReflectionError):
    """Raised when an interface-only operation meets a non-interface."""

    @classmethod
    def from_reflection(
        cls, reflection: SymbolReflection
    ) -> NotAnInterfaceReflection:
        kind = reflection.declaration.kind.value
        msg = (
            f"Provided node '{reflection.get_name()}' is not an interface, "
            f"but a {kind}"
        )
        return cls(msg)


class InvalidArgument(ReflectionError, TypeError):
    """Raised when an argument has the wrong shape (non-string name, etc.)."""

    @classmethod
    def not_a_string(cls, value: Any) -> InvalidArgument:
        return cls(f"Provided {type(value).__name__!r} is not a string")

    @classmethod
    def not_an_object(cls, value: Any) -> InvalidArgument:
        return cls(
            f"Provided {type(value).__name__!r} is not a reflected object type"
        )


class EvaluationError(ReflectionError):
    """Raised when an initializer cannot be evaluated statically."""


class CyclicInheritance(ReflectionError):
    """Raised when an extends chain revisits a symbol."""

    def __init__(self, path: Sequence[str]) -> None:
        super().__init__("Cyclic inheritance detected: " + " -> ".join(path))
        self.path = tuple(path)


class MemberNotFound(ReflectionError, LookupError):
    """Raised when a named member does not exist on a declaration."""


__all__ = [
    "ClassNotFound",
    "CyclicInheritance",
    "EvaluationError",
    "InvalidArgument",
    "MemberNotFound",
    "NotAClassReflection",
    "NotAnInterfaceReflection",
    "ReflectionError",
]
