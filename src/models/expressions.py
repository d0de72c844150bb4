"""Initializer expression models.

Constant and property initializers are stored unevaluated; a
ConstantEvaluator turns them into values on demand.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

ExprKind = Literal[
    "scalar",
    "array",
    "negate",
    "class_constant",
    "constant",
    "unsupported",
]

ScalarValue = int | float | str | bool | None


class ConstExpr(BaseModel):
    """A parser-independent initializer expression."""

    model_config = ConfigDict(frozen=True)

    kind: ExprKind
    text: str = ""
    value: ScalarValue = None
    items: tuple[ArrayItem, ...] = ()
    operand: ConstExpr | None = None
    class_ref: str | None = None
    name: str | None = None

    @classmethod
    def scalar(cls, value: ScalarValue, text: str = "") -> ConstExpr:
        return cls(kind="scalar", value=value, text=text or repr(value))

    @classmethod
    def unsupported(cls, text: str) -> ConstExpr:
        return cls(kind="unsupported", text=text)


class ArrayItem(BaseModel):
    """A single `key => value` (or keyless) entry of an array initializer."""

    model_config = ConfigDict(frozen=True)

    key: ConstExpr | None = None
    value: ConstExpr


ConstExpr.model_rebuild()

__all__ = ["ArrayItem", "ConstExpr", "ExprKind", "ScalarValue"]
