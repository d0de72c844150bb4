from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError

from models.declarations import (
    ConstantDecl,
    Declaration,
    MethodDecl,
    Modifiers,
    PropertyDecl,
    SourceLocation,
    SymbolKind,
)
from models.expressions import ConstExpr
from reflection.errors import EvaluationError, MemberNotFound
from reflection.symbol import IS_EXPLICIT_ABSTRACT, IS_FINAL, SymbolReflection
from reflector.reflector import ClassReflector
from reflector.strategies import DeclarationIndexStrategy


def _reflect(declaration: Declaration) -> SymbolReflection:
    reflector = ClassReflector([DeclarationIndexStrategy([declaration])])
    return reflector.resolve(declaration.name)


def _user_declaration() -> Declaration:
    return Declaration(
        kind=SymbolKind.CLASS,
        short_name="User",
        namespace=("App", "Models"),
        methods=(
            MethodDecl(name="__construct"),
            MethodDecl(name="getName", start_line=10, end_line=12),
            MethodDecl(name="save", visibility="protected", is_final=True),
        ),
        properties=(
            PropertyDecl(name="name", visibility="private"),
            PropertyDecl(name="role", default=ConstExpr.scalar("member")),
            PropertyDecl(name="clock", default=ConstExpr.unsupported("new Clock()")),
        ),
        constants=(
            ConstantDecl(name="TABLE", value=ConstExpr.scalar("users")),
            ConstantDecl(name="LIMIT", value=ConstExpr.scalar(10)),
        ),
        location=SourceLocation(
            file="src/Models/User.php",
            start_line=5,
            end_line=40,
            doc_comment="/** A user. */",
        ),
    )


def test_names_follow_namespace_invariant() -> None:
    user = _reflect(_user_declaration())

    assert user.get_short_name() == "User"
    assert user.get_namespace_name() == "App\\Models"
    assert user.in_namespace() is True
    assert user.get_name() == user.get_namespace_name() + "\\" + user.get_short_name()


def test_global_namespace_names() -> None:
    plain = _reflect(Declaration(kind=SymbolKind.CLASS, short_name="Plain"))

    assert plain.in_namespace() is False
    assert plain.get_namespace_name() == ""
    assert plain.get_name() == plain.get_short_name() == "Plain"


def test_method_lookup() -> None:
    user = _reflect(_user_declaration())

    assert [m.get_name() for m in user.get_methods()] == [
        "__construct",
        "getName",
        "save",
    ]
    assert user.get_method("GETNAME").get_start_line() == 10
    assert user.has_method("save")
    assert not user.has_method("delete")
    assert user.get_constructor().is_constructor()
    assert user.get_method("save").is_protected()
    assert user.get_method("save").get_declaring_class() is user


def test_missing_method_raises() -> None:
    user = _reflect(_user_declaration())

    with pytest.raises(MemberNotFound, match="delete"):
        user.get_method("delete")


def test_duplicate_members_last_declaration_wins() -> None:
    duplicated = _reflect(
        Declaration(
            kind=SymbolKind.CLASS,
            short_name="Dup",
            methods=(
                MethodDecl(name="run", visibility="private"),
                MethodDecl(name="stop"),
                MethodDecl(name="Run", visibility="public"),
            ),
            constants=(
                ConstantDecl(name="A", value=ConstExpr.scalar(1)),
                ConstantDecl(name="B", value=ConstExpr.scalar(2)),
                ConstantDecl(name="A", value=ConstExpr.scalar(3)),
            ),
        )
    )

    assert [m.get_name() for m in duplicated.get_methods()] == ["Run", "stop"]
    assert duplicated.get_method("run").is_public()
    assert duplicated.get_constants() == {"A": 3, "B": 2}


def test_constants() -> None:
    user = _reflect(_user_declaration())

    assert user.get_constants() == {"TABLE": "users", "LIMIT": 10}
    assert user.get_constant("LIMIT") == 10
    assert user.has_constant("TABLE")
    assert not user.has_constant("table")
    assert user.get_constant("MISSING") is None


def test_constant_evaluation_failure_is_per_constant() -> None:
    mixed = _reflect(
        Declaration(
            kind=SymbolKind.CLASS,
            short_name="Mixed",
            constants=(
                ConstantDecl(name="OK", value=ConstExpr.scalar(1)),
                ConstantDecl(name="BAD", value=ConstExpr.unsupported("foo()")),
            ),
        )
    )

    assert mixed.get_constant("OK") == 1
    with pytest.raises(EvaluationError, match="foo\\(\\)"):
        mixed.get_constant("BAD")
    with pytest.raises(EvaluationError):
        mixed.get_constants()
    constants = mixed.get_reflection_constants()
    assert constants["OK"].get_value() == 1
    with pytest.raises(EvaluationError):
        constants["BAD"].get_value()


def test_constant_is_evaluated_once() -> None:
    calls: list[str] = []

    class CountingEvaluator:
        def evaluate(self, expr: ConstExpr, owner: SymbolReflection) -> object:
            calls.append(expr.text)
            return expr.value

    declaration = Declaration(
        kind=SymbolKind.CLASS,
        short_name="Counted",
        constants=(ConstantDecl(name="X", value=ConstExpr.scalar(7, "7")),),
    )
    reflector = ClassReflector(
        [DeclarationIndexStrategy([declaration])], evaluator=CountingEvaluator()
    )
    counted = reflector.resolve("Counted")

    results: list[object] = []
    threads = [
        threading.Thread(target=lambda: results.append(counted.get_constant("X")))
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == [7] * 8
    assert calls == ["7"]


def test_properties_and_defaults() -> None:
    user = _reflect(_user_declaration())

    assert list(user.get_properties()) == ["name", "role", "clock"]
    assert user.has_property("role")
    assert user.get_property("missing") is None
    assert user.get_property("name").is_private()
    assert user.get_property("role").get_default_value() == "member"
    assert user.get_property("name").get_default_value() is None
    assert list(user.get_default_properties()) == ["name", "role"]


def test_source_location_accessors() -> None:
    user = _reflect(_user_declaration())

    assert user.get_file_name() == "src/Models/User.php"
    assert user.get_start_line() == 5
    assert user.get_end_line() == 40
    assert user.get_doc_comment() == "/** A user. */"
    assert user.is_user_defined()
    assert not user.is_internal()


def test_missing_doc_comment_is_empty_string() -> None:
    plain = _reflect(Declaration(kind=SymbolKind.CLASS, short_name="Plain"))

    assert plain.get_doc_comment() == ""
    assert plain.get_file_name() is None


def test_modifiers() -> None:
    abstract = _reflect(
        Declaration(
            kind=SymbolKind.CLASS,
            short_name="Shape",
            modifiers=Modifiers(is_abstract=True),
        )
    )
    final = _reflect(
        Declaration(
            kind=SymbolKind.CLASS,
            short_name="Circle",
            modifiers=Modifiers(is_final=True),
        )
    )

    assert abstract.is_abstract() and not abstract.is_final()
    assert abstract.get_modifiers() == IS_EXPLICIT_ABSTRACT
    assert final.is_final() and final.get_modifiers() == IS_FINAL


def test_modifiers_only_apply_to_classes() -> None:
    interface = _reflect(
        Declaration(
            kind=SymbolKind.INTERFACE,
            short_name="Shape",
            modifiers=Modifiers(is_abstract=True, is_final=True),
        )
    )

    assert interface.is_interface()
    assert not interface.is_trait()
    assert not interface.is_abstract()
    assert not interface.is_final()
    assert interface.get_modifiers() == 0


def test_declaration_is_immutable() -> None:
    declaration = _user_declaration()

    with pytest.raises(ValidationError):
        declaration.short_name = "Other"  # type: ignore[misc]
