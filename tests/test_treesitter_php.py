from __future__ import annotations

from typing import TYPE_CHECKING

from models.declarations import SymbolKind
from parse.treesitter_php import extract_declarations, extract_declarations_from_file

if TYPE_CHECKING:
    from pathlib import Path

    from models.declarations import Declaration

_SOURCE = """<?php
namespace App\\Models;

use Framework\\Model as BaseModel;
use Framework\\Contracts\\{Arrayable, Jsonable};

/** A registered user. */
final class User extends BaseModel implements Arrayable, \\Countable
{
    use HasNames, Greets {
        Greets::hello as protected greet;
        HasNames::name insteadof Greets;
    }

    const TABLE = 'users';
    const LIMIT = -10;
    const FLAGS = [1, 'two' => 2.5, true, null];
    const COPY = self::TABLE;

    private $name;
    public static $count = 0;

    public function __construct(private readonly string $email)
    {
    }

    /** Current name. */
    public function getName(): string
    {
        return $this->name;
    }

    abstract protected static function make();
}

interface Shape extends \\Stringable, HasArea
{
    public function area(): float;
}

trait Greets
{
    public function hello() {}
}
"""


def _by_name(declarations: list[Declaration]) -> dict[str, Declaration]:
    return {declaration.name: declaration for declaration in declarations}


def test_extracts_declarations_in_source_order() -> None:
    declarations = extract_declarations(_SOURCE, "User.php")

    assert [d.name for d in declarations] == [
        "App\\Models\\User",
        "App\\Models\\Shape",
        "App\\Models\\Greets",
    ]
    assert [d.kind for d in declarations] == [
        SymbolKind.CLASS,
        SymbolKind.INTERFACE,
        SymbolKind.TRAIT,
    ]
    assert all(d.location.file == "User.php" for d in declarations)


def test_class_header() -> None:
    user = _by_name(extract_declarations(_SOURCE))["App\\Models\\User"]

    assert user.modifiers.is_final
    assert not user.modifiers.is_abstract
    assert user.parent == "BaseModel"
    assert user.interfaces == ("Arrayable", "\\Countable")
    assert user.location.start_line == 8
    assert user.location.doc_comment == "/** A registered user. */"


def test_imports_are_recorded_per_declaration() -> None:
    user = _by_name(extract_declarations(_SOURCE))["App\\Models\\User"]

    assert user.imports == {
        "BaseModel": "Framework\\Model",
        "Arrayable": "Framework\\Contracts\\Arrayable",
        "Jsonable": "Framework\\Contracts\\Jsonable",
    }


def test_constants_are_kept_unevaluated() -> None:
    user = _by_name(extract_declarations(_SOURCE))["App\\Models\\User"]
    constants = {constant.name: constant.value for constant in user.constants}

    assert list(constants) == ["TABLE", "LIMIT", "FLAGS", "COPY"]
    assert constants["TABLE"].kind == "scalar"
    assert constants["TABLE"].value == "users"
    assert constants["LIMIT"].kind in {"negate", "scalar"}
    assert constants["FLAGS"].kind == "array"
    assert len(constants["FLAGS"].items) == 4
    assert constants["COPY"].kind == "class_constant"
    assert constants["COPY"].class_ref == "self"
    assert constants["COPY"].name == "TABLE"


def test_methods_and_properties() -> None:
    user = _by_name(extract_declarations(_SOURCE))["App\\Models\\User"]
    methods = {method.name: method for method in user.methods}
    properties = {prop.name: prop for prop in user.properties}

    assert list(methods) == ["__construct", "getName", "make"]
    assert methods["getName"].doc_comment == "/** Current name. */"
    assert methods["make"].visibility == "protected"
    assert methods["make"].is_static
    assert methods["make"].is_abstract

    assert properties["name"].visibility == "private"
    assert properties["name"].default is None
    assert properties["count"].is_static
    assert properties["count"].default is not None
    assert properties["count"].default.value == 0
    assert properties["email"].is_promoted
    assert properties["email"].is_readonly


def test_trait_use_with_adaptations() -> None:
    user = _by_name(extract_declarations(_SOURCE))["App\\Models\\User"]

    (statement,) = user.trait_uses
    assert statement.traits == ("HasNames", "Greets")

    alias, insteadof = statement.adaptations
    assert alias.from_trait == "Greets"
    assert alias.method == "hello"
    assert alias.alias == "greet"
    assert alias.visibility == "protected"
    assert insteadof.method == "name"
    assert insteadof.insteadof == ("Greets",)
    assert insteadof.alias is None


def test_interface_extends_and_abstract_methods() -> None:
    shape = _by_name(extract_declarations(_SOURCE))["App\\Models\\Shape"]

    assert shape.parent is None
    assert shape.interfaces == ("\\Stringable", "HasArea")
    assert shape.methods[0].is_abstract


def test_bracketed_namespaces_and_global_code() -> None:
    source = """<?php
namespace First {
    class A {}
}
namespace {
    class B {}
}
"""
    assert [d.name for d in extract_declarations(source)] == ["First\\A", "B"]


def test_anonymous_and_missing_sources(tmp_path: Path) -> None:
    assert extract_declarations("<?php\n$x = new class {};\n") == []
    assert extract_declarations_from_file(tmp_path / "Missing.php") == []
