"""Lookup strategies that locate declarations by fully-qualified name."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

from names.resolution import name_key
from parse.treesitter_php import extract_declarations, extract_declarations_from_file
from reflector.builtins import BUILTIN_DECLARATIONS
from scan.files import find_php_files

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from models.declarations import Declaration

logger = logging.getLogger(__name__)

DeclarationIndex = dict[str, "Declaration"]


class LookupStrategy(Protocol):
    """Locates the declaration for a fully-qualified name, or returns None."""

    def locate(self, name: str) -> Declaration | None: ...


def build_declaration_index(declarations: Iterable[Declaration]) -> DeclarationIndex:
    """Index declarations by name key; the first declaration of a name wins."""
    index: DeclarationIndex = {}
    for declaration in declarations:
        key = name_key(declaration.name)
        if key in index:
            logger.debug(
                "Ignoring duplicate declaration of %s (%s)",
                declaration.name,
                declaration.location.file,
            )
            continue
        index[key] = declaration
    return index


class DeclarationIndexStrategy:
    """Look up declarations in an in-memory collection."""

    def __init__(self, declarations: Iterable[Declaration]) -> None:
        self._index = build_declaration_index(declarations)

    @property
    def names(self) -> list[str]:
        return sorted(decl.name for decl in self._index.values())

    def locate(self, name: str) -> Declaration | None:
        return self._index.get(name_key(name))


class BuiltinStrategy(DeclarationIndexStrategy):
    """Look up PHP built-in classes and interfaces."""

    def __init__(self) -> None:
        super().__init__(BUILTIN_DECLARATIONS)


class _LazyIndexStrategy:
    """Build an index on first lookup; safe to share between threads."""

    def __init__(self) -> None:
        self._index: DeclarationIndex | None = None
        self._lock = threading.Lock()

    def _build(self) -> DeclarationIndex:
        raise NotImplementedError

    def _get_index(self) -> DeclarationIndex:
        if self._index is None:
            with self._lock:
                if self._index is None:
                    self._index = self._build()
        return self._index

    def locate(self, name: str) -> Declaration | None:
        return self._get_index().get(name_key(name))


class SourceStrategy(_LazyIndexStrategy):
    """Look up declarations in a PHP source string."""

    def __init__(self, source: str | bytes, file: str | None = None) -> None:
        super().__init__()
        self._source = source
        self._file = file

    def _build(self) -> DeclarationIndex:
        return build_declaration_index(extract_declarations(self._source, self._file))


class DirectoryStrategy(_LazyIndexStrategy):
    """Look up declarations in the PHP files under a directory."""

    def __init__(
        self,
        root: Path,
        *,
        include_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
        nested_gitignore: bool = False,
    ) -> None:
        super().__init__()
        self._root = root
        self._include_patterns = include_patterns
        self._exclude_patterns = exclude_patterns
        self._nested_gitignore = nested_gitignore

    def _build(self) -> DeclarationIndex:
        declarations: list[Declaration] = []
        file_count = 0
        for file_path in find_php_files(
            self._root,
            include_patterns=self._include_patterns,
            exclude_patterns=self._exclude_patterns,
            nested_gitignore=self._nested_gitignore,
        ):
            file_count += 1
            declarations.extend(extract_declarations_from_file(file_path))
        logger.info(
            "Indexed %d declarations from %d files under %s",
            len(declarations),
            file_count,
            self._root,
        )
        return build_declaration_index(declarations)


__all__ = [
    "BuiltinStrategy",
    "DeclarationIndexStrategy",
    "DirectoryStrategy",
    "LookupStrategy",
    "SourceStrategy",
    "build_declaration_index",
]
