from __future__ import annotations

import threading
from pathlib import Path

import pytest

from models.declarations import Declaration, SourceLocation, SymbolKind
from names.resolution import split_name
from reflection.errors import ClassNotFound, InvalidArgument
from reflector.reflector import ClassReflector
from reflector.strategies import (
    BuiltinStrategy,
    DeclarationIndexStrategy,
    DirectoryStrategy,
    SourceStrategy,
    build_declaration_index,
)


def _class(name: str, file: str | None = None) -> Declaration:
    namespace, short_name = split_name(name)
    return Declaration(
        kind=SymbolKind.CLASS,
        short_name=short_name,
        namespace=namespace or None,
        location=SourceLocation(file=file),
    )


def test_repeated_lookups_return_same_instance() -> None:
    reflector = ClassReflector([DeclarationIndexStrategy([_class("App\\User")])])

    first = reflector.resolve("App\\User")

    assert reflector.resolve("\\app\\user") is first
    assert reflector.resolve("App\\User") is first


def test_concurrent_lookups_share_one_instance() -> None:
    reflector = ClassReflector([DeclarationIndexStrategy([_class("App\\User")])])
    results: list[object] = []

    threads = [
        threading.Thread(target=lambda: results.append(reflector.resolve("App\\User")))
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_unknown_name_raises_class_not_found() -> None:
    reflector = ClassReflector([DeclarationIndexStrategy([])])

    with pytest.raises(ClassNotFound) as exc_info:
        reflector.resolve("\\App\\Missing")

    assert exc_info.value.name == "App\\Missing"
    assert isinstance(exc_info.value, LookupError)


def test_non_string_name_rejected() -> None:
    reflector = ClassReflector([BuiltinStrategy()])

    with pytest.raises(InvalidArgument):
        reflector.resolve(42)  # type: ignore[arg-type]


def test_first_strategy_wins() -> None:
    reflector = ClassReflector(
        [
            DeclarationIndexStrategy([_class("Shared", file="first.php")]),
            DeclarationIndexStrategy([_class("Shared", file="second.php")]),
        ]
    )

    assert reflector.resolve("Shared").get_file_name() == "first.php"


def test_first_declaration_wins_within_an_index() -> None:
    index = build_declaration_index(
        [_class("App\\Dup", file="a.php"), _class("app\\dup", file="b.php")]
    )

    assert list(index) == ["app\\dup"]
    assert index["app\\dup"].location.file == "a.php"


def test_builtin_strategy_knows_core_types() -> None:
    reflector = ClassReflector([BuiltinStrategy()])

    iterator = reflector.resolve("Iterator")
    exception = reflector.resolve("\\Exception")

    assert iterator.is_interface()
    assert iterator.is_internal()
    assert iterator.implements_interface("Traversable")
    assert exception.implements_interface("Throwable")
    assert not exception.is_user_defined()


def test_builtin_declarations_back_user_code() -> None:
    collection = Declaration(
        kind=SymbolKind.CLASS,
        short_name="Collection",
        namespace=("App",),
        interfaces=("\\IteratorAggregate", "\\Countable"),
    )
    reflector = ClassReflector(
        [BuiltinStrategy(), DeclarationIndexStrategy([collection])]
    )

    resolved = reflector.resolve("App\\Collection")

    assert resolved.is_iterateable()
    assert set(resolved.get_interface_names()) == {
        "IteratorAggregate",
        "Traversable",
        "Countable",
    }


def test_declaration_index_strategy_lists_names() -> None:
    strategy = DeclarationIndexStrategy([_class("B"), _class("A\\C")])

    assert strategy.names == ["A\\C", "B"]


def test_source_strategy_parses_lazily() -> None:
    source = """<?php
namespace App;

class Greeter
{
    const GREETING = 'hello';
}
"""
    reflector = ClassReflector([SourceStrategy(source, file="Greeter.php")])

    greeter = reflector.resolve("App\\Greeter")

    assert greeter.get_file_name() == "Greeter.php"
    assert greeter.get_constant("GREETING") == "hello"


def test_directory_strategy_indexes_php_files(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "Shape.php").write_text(
        "<?php\nnamespace Geo;\n\nabstract class Shape {}\n", encoding="utf-8"
    )
    (tmp_path / "src" / "Circle.php").write_text(
        "<?php\nnamespace Geo;\n\nfinal class Circle extends Shape {}\n",
        encoding="utf-8",
    )
    (tmp_path / "notes.txt").write_text("class NotPhp {}\n", encoding="utf-8")

    reflector = ClassReflector([DirectoryStrategy(tmp_path)])
    circle = reflector.resolve("Geo\\Circle")

    assert circle.is_final()
    assert circle.get_parent_class() is reflector.resolve("Geo\\Shape")
    with pytest.raises(ClassNotFound):
        reflector.resolve("NotPhp")


def test_directory_strategy_tolerates_non_utf8_sources(tmp_path: Path) -> None:
    (tmp_path / "Good.php").write_text("<?php\nclass Good {}\n", encoding="utf-8")
    (tmp_path / "Latin.php").write_bytes(
        b"<?php\nclass Latin\n{\n    const MARK = '\xff\xfe';\n}\n"
    )

    reflector = ClassReflector([DirectoryStrategy(tmp_path)])

    assert reflector.resolve("Good").get_short_name() == "Good"
    latin = reflector.resolve("Latin")
    assert latin.has_constant("MARK")
    assert "\ufffd" in latin.get_constant("MARK")


def test_directory_strategy_honours_exclude_patterns(tmp_path: Path) -> None:
    (tmp_path / "vendor").mkdir()
    (tmp_path / "vendor" / "Lib.php").write_text(
        "<?php\nclass Lib {}\n", encoding="utf-8"
    )
    (tmp_path / "App.php").write_text("<?php\nclass App {}\n", encoding="utf-8")

    reflector = ClassReflector(
        [DirectoryStrategy(tmp_path, exclude_patterns=["vendor/**"])]
    )

    assert reflector.resolve("App").get_short_name() == "App"
    with pytest.raises(ClassNotFound):
        reflector.resolve("Lib")
