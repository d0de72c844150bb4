"""PHP source file discovery."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)

PHP_SUFFIXES = frozenset({".php", ".phtml"})

# Directories never descended into, whatever .gitignore says.
SKIPPED_DIRS = frozenset({".git", ".hg", ".svn", "node_modules"})


def _is_within_root(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return False
    return True


def _gitignore_files(root: Path, *, nested_gitignore: bool) -> list[Path]:
    if not nested_gitignore:
        candidates = [root / ".gitignore"]
    else:
        candidates = sorted(
            root.rglob(".gitignore"), key=lambda p: p.relative_to(root).as_posix()
        )
    return [
        path
        for path in candidates
        if path.is_file() and not path.is_symlink() and _is_within_root(path, root)
    ]


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    """Compose the .gitignore files under `root` into one predicate.

    Without `nested_gitignore` only the root .gitignore is consulted.
    Symlinked .gitignore files are never read.
    """
    matchers = [
        parse_gitignore(path)
        for path in _gitignore_files(root, nested_gitignore=nested_gitignore)
    ]
    if not matchers:
        return None

    def ignored(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Raised for paths outside the matcher's base directory.
                continue
        return False

    return ignored


@dataclass(frozen=True)
class _PathFilter:
    root: Path
    ignored: Callable[[str], bool] | None
    include_patterns: tuple[str, ...]
    exclude_patterns: tuple[str, ...]

    def accepts(self, path: Path) -> bool:
        if path.suffix.lower() not in PHP_SUFFIXES or path.is_symlink():
            return False
        if not path.is_file():
            return False
        if not _is_within_root(path, self.root):
            logger.debug("Skipping %s: resolves outside %s", path, self.root)
            return False
        if self.ignored is not None and self.ignored(str(path)):
            return False

        rel_path = path.relative_to(self.root).as_posix()
        if self.include_patterns and not any(
            fnmatch(rel_path, pattern) for pattern in self.include_patterns
        ):
            return False
        return not any(fnmatch(rel_path, pattern) for pattern in self.exclude_patterns)


def find_php_files(
    directory: Path,
    *,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find PHP files under a directory, respecting .gitignore.

    Args:
        directory: Directory to search
        include_patterns: Optional fnmatch patterns; if provided, files must
            match at least one pattern to be included
        exclude_patterns: Optional fnmatch patterns; files matching any
            pattern are excluded
        nested_gitignore: Compose every .gitignore under the directory
            instead of only the root one

    Yields:
        Paths sorted by relative path for deterministic ordering.
    """
    if not directory.is_dir():
        logger.warning("Source directory %s does not exist", directory)
        return

    path_filter = _PathFilter(
        root=directory,
        ignored=_build_gitignore_matcher(directory, nested_gitignore=nested_gitignore),
        include_patterns=tuple(include_patterns or ()),
        exclude_patterns=tuple(exclude_patterns or ()),
    )

    found: list[Path] = []
    # os.walk does not follow directory symlinks by default.
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = [name for name in dirnames if name not in SKIPPED_DIRS]
        current = Path(dirpath)
        found.extend(
            current / name for name in filenames if path_filter.accepts(current / name)
        )

    yield from sorted(found, key=lambda p: p.relative_to(directory).as_posix())


__all__ = ["PHP_SUFFIXES", "SKIPPED_DIRS", "find_php_files"]
