from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_php_files

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_php_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    project_root.mkdir()
    (project_root / "src").mkdir()
    (project_root / "src" / "Model.php").write_text(
        "<?php\nclass Model {}\n", encoding="utf-8"
    )

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "Leak.php").write_text("<?php\nclass Leak {}\n", encoding="utf-8")

    symlink_dir = project_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = [
        path.relative_to(project_root).as_posix()
        for path in find_php_files(project_root)
    ]

    assert "src/Model.php" in results
    assert "linked/Leak.php" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    project_root.mkdir()
    (project_root / "src").mkdir()
    (project_root / "src" / "Model.php").write_text(
        "<?php\nclass Model {}\n", encoding="utf-8"
    )
    (project_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / ".gitignore").write_text("Model.php\n", encoding="utf-8")

    (project_root / "src" / ".gitignore").symlink_to(external_root / ".gitignore")

    matcher = _build_gitignore_matcher(project_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(project_root / "src" / "Model.php")) is False


def test_find_php_files_respects_root_gitignore(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("generated/\n", encoding="utf-8")
    (tmp_path / "generated").mkdir()
    (tmp_path / "generated" / "Proxy.php").write_text("<?php\n", encoding="utf-8")
    (tmp_path / "Kept.php").write_text("<?php\n", encoding="utf-8")
    (tmp_path / "view.phtml").write_text("<?php\n", encoding="utf-8")
    (tmp_path / "readme.md").write_text("# readme\n", encoding="utf-8")

    results = [path.relative_to(tmp_path).as_posix() for path in find_php_files(tmp_path)]

    assert results == ["Kept.php", "view.phtml"]


def test_find_php_files_missing_directory_yields_nothing(tmp_path: Path) -> None:
    assert list(find_php_files(tmp_path / "absent")) == []
