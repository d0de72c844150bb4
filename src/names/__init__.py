"""Name resolution for class-like symbols."""

from names.resolution import (
    NON_CLASS_NAMES,
    SEPARATOR,
    join_name,
    name_key,
    resolve_name,
    same_name,
    split_name,
)

__all__ = [
    "NON_CLASS_NAMES",
    "SEPARATOR",
    "join_name",
    "name_key",
    "resolve_name",
    "same_name",
    "split_name",
]
