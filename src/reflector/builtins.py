"""Declarations of PHP built-in class-like symbols.

Only the structure relevant to hierarchy questions is described: names,
kinds, extends/implements relations and a few well-known methods.
"""

from __future__ import annotations

from models.declarations import (
    Declaration,
    MethodDecl,
    Modifiers,
    SourceLocation,
    SymbolKind,
)

_INTERNAL = SourceLocation(is_internal=True)


def _interface(
    name: str, extends: tuple[str, ...] = (), methods: tuple[str, ...] = ()
) -> Declaration:
    return Declaration(
        kind=SymbolKind.INTERFACE,
        short_name=name,
        interfaces=extends,
        methods=tuple(MethodDecl(name=m, is_abstract=True) for m in methods),
        location=_INTERNAL,
    )


def _class(
    name: str,
    implements: tuple[str, ...] = (),
    methods: tuple[str, ...] = (),
    *,
    parent: str | None = None,
    is_final: bool = False,
) -> Declaration:
    return Declaration(
        kind=SymbolKind.CLASS,
        short_name=name,
        parent=parent,
        interfaces=implements,
        modifiers=Modifiers(is_final=is_final),
        methods=tuple(MethodDecl(name=m) for m in methods),
        location=_INTERNAL,
    )


BUILTIN_DECLARATIONS: tuple[Declaration, ...] = (
    _interface("Traversable"),
    _interface(
        "Iterator",
        ("Traversable",),
        ("current", "next", "key", "valid", "rewind"),
    ),
    _interface("IteratorAggregate", ("Traversable",), ("getIterator",)),
    _interface("SeekableIterator", ("Iterator",), ("seek",)),
    _interface("ArrayAccess", (), ("offsetExists", "offsetGet", "offsetSet", "offsetUnset")),
    _interface("Countable", (), ("count",)),
    _interface("Serializable", (), ("serialize", "unserialize")),
    _interface("Stringable", (), ("__toString",)),
    _interface("JsonSerializable", (), ("jsonSerialize",)),
    _interface(
        "Throwable",
        ("Stringable",),
        ("getMessage", "getCode", "getFile", "getLine", "getTrace", "getPrevious"),
    ),
    _interface("UnitEnum", (), ("cases",)),
    _interface("BackedEnum", ("UnitEnum",), ("from", "tryFrom")),
    _class("stdClass"),
    _class("Exception", ("Throwable",), ("__construct", "getMessage", "__toString")),
    _class("Error", ("Throwable",), ("__construct", "getMessage", "__toString")),
    _class("RuntimeException", parent="Exception"),
    _class("LogicException", parent="Exception"),
    _class("InvalidArgumentException", parent="LogicException"),
    _class("OutOfBoundsException", parent="RuntimeException"),
    _class(
        "ArrayIterator",
        ("SeekableIterator", "ArrayAccess", "Serializable", "Countable"),
        ("__construct", "current", "next", "key", "valid", "rewind", "seek", "count"),
    ),
    _class(
        "ArrayObject",
        ("IteratorAggregate", "ArrayAccess", "Serializable", "Countable"),
        ("__construct", "getIterator", "count"),
    ),
    _class("Closure", methods=("bind", "call"), is_final=True),
    _class(
        "Generator",
        ("Iterator",),
        ("current", "next", "key", "valid", "rewind", "send"),
        is_final=True,
    ),
)

__all__ = ["BUILTIN_DECLARATIONS"]
