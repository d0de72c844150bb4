"""Reflectors resolve fully-qualified names to symbol reflections."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

from names.resolution import name_key
from reflection.errors import ClassNotFound, InvalidArgument
from reflection.evaluator import LiteralEvaluator
from reflection.hierarchy import DEFAULT_MAX_DEPTH, HierarchyResolver
from reflection.symbol import SymbolReflection

if TYPE_CHECKING:
    from collections.abc import Sequence

    from models.declarations import Declaration
    from reflection.evaluator import ConstantEvaluator
    from reflector.strategies import LookupStrategy

logger = logging.getLogger(__name__)


class Reflector(Protocol):
    """Resolve a fully-qualified name to its reflection.

    Implementations must be referentially consistent within a session and
    raise ClassNotFound for unknown names. They never check the kind of the
    symbol they return.
    """

    def resolve(self, name: str) -> SymbolReflection: ...


class ClassReflector:
    """Reflector backed by an ordered list of lookup strategies.

    The first strategy that locates a declaration wins. Reflections are
    memoized per case-insensitive name, so repeated lookups return the same
    instance. Concurrent first lookups of one name may each build a
    reflection; only the first stored one is ever returned.
    """

    def __init__(
        self,
        strategies: Sequence[LookupStrategy],
        *,
        evaluator: ConstantEvaluator | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._strategies = tuple(strategies)
        self._evaluator = evaluator or LiteralEvaluator()
        self._hierarchy = HierarchyResolver(self, max_depth=max_depth)
        self._cache: dict[str, SymbolReflection] = {}
        self._lock = threading.Lock()
        self._evaluation_lock = threading.RLock()

    @property
    def strategies(self) -> tuple[LookupStrategy, ...]:
        return self._strategies

    def resolve(self, name: str) -> SymbolReflection:
        if not isinstance(name, str):
            raise InvalidArgument.not_a_string(name)

        key = name_key(name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        reflection = SymbolReflection(
            self._locate(name),
            self,
            evaluator=self._evaluator,
            hierarchy=self._hierarchy,
            evaluation_lock=self._evaluation_lock,
        )
        with self._lock:
            return self._cache.setdefault(key, reflection)

    def _locate(self, name: str) -> Declaration:
        for strategy in self._strategies:
            declaration = strategy.locate(name)
            if declaration is not None:
                logger.debug(
                    "Located %s via %s", declaration.name, type(strategy).__name__
                )
                return declaration

        logger.debug("No strategy located %s", name)
        raise ClassNotFound(name.lstrip("\\"))


__all__ = ["ClassReflector", "Reflector"]
