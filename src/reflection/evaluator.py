"""Static evaluation of constant initializer expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from names.resolution import name_key, resolve_name
from reflection.errors import EvaluationError, ReflectionError

if TYPE_CHECKING:
    from models.expressions import ConstExpr
    from reflection.symbol import SymbolReflection


class ConstantEvaluator(Protocol):
    """Turns an initializer expression into a value."""

    def evaluate(self, expr: ConstExpr, owner: SymbolReflection) -> Any: ...


class LiteralEvaluator:
    """Evaluate literal initializers and class-constant references.

    Supported shapes are scalars, arrays of supported shapes, numeric
    negation, ``X::class`` and ``X::CONST`` where ``X`` is ``self``,
    ``static``, ``parent`` or a resolvable class name. Anything else raises
    EvaluationError.
    """

    def evaluate(self, expr: ConstExpr, owner: SymbolReflection) -> Any:
        if expr.kind == "scalar":
            return expr.value

        if expr.kind == "array":
            return self._evaluate_array(expr, owner)

        if expr.kind == "negate":
            if expr.operand is None:
                msg = f"Missing operand in '{expr.text}'"
                raise EvaluationError(msg)
            operand = self.evaluate(expr.operand, owner)
            if isinstance(operand, bool) or not isinstance(operand, int | float):
                msg = f"Cannot negate non-numeric value in '{expr.text}'"
                raise EvaluationError(msg)
            return -operand

        if expr.kind == "class_constant":
            return self._evaluate_class_constant(expr, owner)

        if expr.kind == "constant":
            msg = f"Global constant '{expr.name or expr.text}' cannot be evaluated statically"
            raise EvaluationError(msg)

        msg = f"Unsupported initializer expression '{expr.text}'"
        raise EvaluationError(msg)

    def _evaluate_array(self, expr: ConstExpr, owner: SymbolReflection) -> Any:
        if all(item.key is None for item in expr.items):
            return [self.evaluate(item.value, owner) for item in expr.items]

        result: dict[Any, Any] = {}
        next_index = 0
        for item in expr.items:
            if item.key is None:
                key: Any = next_index
            else:
                key = self.evaluate(item.key, owner)
                if not isinstance(key, int | str) or isinstance(key, bool):
                    msg = f"Illegal array key in '{expr.text}'"
                    raise EvaluationError(msg)
            result[key] = self.evaluate(item.value, owner)
            if isinstance(key, int) and key >= next_index:
                next_index = key + 1
        return result

    def _evaluate_class_constant(
        self, expr: ConstExpr, owner: SymbolReflection
    ) -> Any:
        class_ref = expr.class_ref or ""
        constant = expr.name or ""
        target = self._target_class(class_ref, owner, expr)

        if constant.lower() == "class":
            return target.get_name()

        if not target.has_constant(constant):
            msg = f"Undefined class constant '{target.get_name()}::{constant}'"
            raise EvaluationError(msg)
        return target.get_constant(constant)

    def _target_class(
        self, class_ref: str, owner: SymbolReflection, expr: ConstExpr
    ) -> SymbolReflection:
        ref_key = name_key(class_ref)
        if ref_key in {"self", "static"}:
            return owner

        try:
            if ref_key == "parent":
                parent = owner.get_parent_class()
                if parent is None:
                    msg = f"'{expr.text}' used in a class without a parent"
                    raise EvaluationError(msg)
                return parent

            declaration = owner.declaration
            resolved = resolve_name(
                class_ref, declaration.namespace, declaration.imports
            )
            if resolved is None:
                msg = f"Cannot resolve class reference in '{expr.text}'"
                raise EvaluationError(msg)
            return owner.reflector.resolve(resolved)
        except EvaluationError:
            raise
        except ReflectionError as exc:
            msg = f"Cannot evaluate '{expr.text}': {exc}"
            raise EvaluationError(msg) from exc


__all__ = ["ConstantEvaluator", "LiteralEvaluator"]
