"""Deterministic name resolution for class-like references."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

SEPARATOR = "\\"

# Reserved type names; no class, interface or trait can be declared with these.
NON_CLASS_NAMES: frozenset[str] = frozenset(
    {
        "array",
        "bool",
        "callable",
        "false",
        "float",
        "int",
        "iterable",
        "mixed",
        "never",
        "null",
        "object",
        "parent",
        "self",
        "static",
        "string",
        "true",
        "void",
    }
)

_RELATIVE_PREFIX = "namespace" + SEPARATOR


def name_key(name: str) -> str:
    """Return the comparison key for a class-like name.

    Class-like names are case-insensitive and a leading separator is not
    significant, so ``\\Foo\\Bar`` and ``foo\\bar`` share a key.
    """
    return name.lstrip(SEPARATOR).lower()


def same_name(left: str, right: str) -> bool:
    return name_key(left) == name_key(right)


def join_name(namespace: Sequence[str] | None, short_name: str) -> str:
    """Build a fully-qualified name from namespace parts and a short name."""
    if not namespace:
        return short_name
    return SEPARATOR.join([*namespace, short_name])


def split_name(name: str) -> tuple[tuple[str, ...], str]:
    """Split a fully-qualified name into (namespace parts, short name)."""
    parts = [part for part in name.lstrip(SEPARATOR).split(SEPARATOR) if part]
    if not parts:
        return (), ""
    return tuple(parts[:-1]), parts[-1]


def _lookup_import(alias: str, imports: Mapping[str, str]) -> str | None:
    direct = imports.get(alias)
    if direct is not None:
        return direct
    lowered = alias.lower()
    for candidate, target in imports.items():
        if candidate.lower() == lowered:
            return target
    return None


def resolve_name(
    name_ref: str,
    namespace: Sequence[str] | None,
    imports: Mapping[str, str] | None = None,
) -> str | None:
    """Resolve a name as written in source to a fully-qualified name.

    Returns None when the reference cannot denote a class-like symbol.
    """
    ref = name_ref.strip()
    if not ref:
        return None

    if ref.startswith(SEPARATOR):
        resolved = ref.lstrip(SEPARATOR)
        return resolved or None

    if ref.lower().startswith(_RELATIVE_PREFIX):
        return join_name(namespace, ref[len(_RELATIVE_PREFIX) :])

    if imports:
        head, sep, rest = ref.partition(SEPARATOR)
        target = _lookup_import(head, imports)
        if target is not None:
            target = target.lstrip(SEPARATOR)
            return f"{target}{SEPARATOR}{rest}" if sep else target

    if SEPARATOR not in ref and ref.lower() in NON_CLASS_NAMES:
        return None

    return join_name(namespace, ref)


__all__ = [
    "NON_CLASS_NAMES",
    "SEPARATOR",
    "join_name",
    "name_key",
    "resolve_name",
    "same_name",
    "split_name",
]
