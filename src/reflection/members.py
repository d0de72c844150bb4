"""Member reflections: methods, properties and class constants."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from reflection.errors import EvaluationError

if TYPE_CHECKING:
    from models.declarations import ConstantDecl, MethodDecl, PropertyDecl
    from models.expressions import ConstExpr
    from reflection.symbol import SymbolReflection


class MethodReflection:
    """Reflection of one declared method."""

    def __init__(self, decl: MethodDecl, declaring_class: SymbolReflection) -> None:
        self._decl = decl
        self._declaring_class = declaring_class

    @property
    def declaration(self) -> MethodDecl:
        return self._decl

    def get_name(self) -> str:
        return self._decl.name

    def get_declaring_class(self) -> SymbolReflection:
        return self._declaring_class

    def is_public(self) -> bool:
        return self._decl.visibility == "public"

    def is_protected(self) -> bool:
        return self._decl.visibility == "protected"

    def is_private(self) -> bool:
        return self._decl.visibility == "private"

    def is_static(self) -> bool:
        return self._decl.is_static

    def is_abstract(self) -> bool:
        return self._decl.is_abstract

    def is_final(self) -> bool:
        return self._decl.is_final

    def is_constructor(self) -> bool:
        return self._decl.name.lower() == "__construct"

    def get_start_line(self) -> int:
        return self._decl.start_line

    def get_end_line(self) -> int:
        return self._decl.end_line

    def get_doc_comment(self) -> str:
        return self._decl.doc_comment or ""

    def __repr__(self) -> str:
        return f"<MethodReflection {self._declaring_class.get_name()}::{self._decl.name}>"


class _LazyValue:
    """Evaluate an initializer once; later calls return the memoized value.

    Evaluation runs under the owner's evaluation lock, shared by every
    reflection of one reflector. Re-entering an initializer that is still
    being evaluated means a reference cycle and raises EvaluationError.
    """

    _UNSET = object()

    def __init__(self, expr: ConstExpr, label: str) -> None:
        self._expr = expr
        self._label = label
        self._value: Any = self._UNSET
        self._evaluating = False

    def get(self, owner: SymbolReflection) -> Any:
        if self._value is not self._UNSET:
            return self._value
        with owner.evaluation_lock:
            if self._value is not self._UNSET:
                return self._value
            if self._evaluating:
                msg = f"Cyclic initializer reference in {self._label}"
                raise EvaluationError(msg)
            self._evaluating = True
            try:
                value = owner.evaluator.evaluate(self._expr, owner)
            finally:
                self._evaluating = False
            self._value = value
            return value


class ConstantReflection:
    """Reflection of one class constant with lazily evaluated value."""

    def __init__(self, decl: ConstantDecl, declaring_class: SymbolReflection) -> None:
        self._decl = decl
        self._declaring_class = declaring_class
        self._value = _LazyValue(
            decl.value, f"{declaring_class.get_name()}::{decl.name}"
        )

    @property
    def declaration(self) -> ConstantDecl:
        return self._decl

    def get_name(self) -> str:
        return self._decl.name

    def get_declaring_class(self) -> SymbolReflection:
        return self._declaring_class

    def get_value(self) -> Any:
        """Return the evaluated value, raising EvaluationError on failure."""
        return self._value.get(self._declaring_class)


class PropertyReflection:
    """Reflection of one declared property."""

    def __init__(self, decl: PropertyDecl, declaring_class: SymbolReflection) -> None:
        self._decl = decl
        self._declaring_class = declaring_class
        self._default = (
            _LazyValue(decl.default, f"{declaring_class.get_name()}::${decl.name}")
            if decl.default is not None
            else None
        )

    @property
    def declaration(self) -> PropertyDecl:
        return self._decl

    def get_name(self) -> str:
        return self._decl.name

    def get_declaring_class(self) -> SymbolReflection:
        return self._declaring_class

    def is_public(self) -> bool:
        return self._decl.visibility == "public"

    def is_protected(self) -> bool:
        return self._decl.visibility == "protected"

    def is_private(self) -> bool:
        return self._decl.visibility == "private"

    def is_static(self) -> bool:
        return self._decl.is_static

    def is_readonly(self) -> bool:
        return self._decl.is_readonly

    def is_promoted(self) -> bool:
        return self._decl.is_promoted

    def is_default(self) -> bool:
        """Whether the property has a compile-time default.

        An absent initializer counts as an implicit null default.
        """
        default = self._decl.default
        return default is None or default.kind != "unsupported"

    def has_default_value(self) -> bool:
        return self._decl.default is not None

    def get_default_value(self) -> Any:
        if self._default is None:
            return None
        return self._default.get(self._declaring_class)

    def get_doc_comment(self) -> str:
        return self._decl.doc_comment or ""


__all__ = ["ConstantReflection", "MethodReflection", "PropertyReflection"]
