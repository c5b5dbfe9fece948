"""Reusable key-binding table primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .views import View

T = TypeVar("T")


@dataclass(frozen=True)
class KeyBinding(Generic[T]):
    """Mapping from one or more key codes to a view-aware resolver."""

    codes: tuple[str, ...]
    resolve: Callable[[View], T | None]


class KeyTable(Generic[T]):
    """Exact-match key table with an optional fallback for unbound codes."""

    def __init__(self, fallback: Callable[[str, View], T | None] | None = None) -> None:
        self._fallback = fallback
        self._bindings: dict[str, Callable[[View], T | None]] = {}

    def bind(self, *bindings: KeyBinding[T]) -> KeyTable[T]:
        """Register bindings, overwriting earlier ones for the same code."""
        for binding in bindings:
            for code in binding.codes:
                self._bindings[code] = binding.resolve
        return self

    def resolve(self, code: str, view: View) -> T | None:
        resolver = self._bindings.get(code)
        if resolver is not None:
            return resolver(view)
        if self._fallback is not None:
            return self._fallback(code, view)
        return None


__all__ = ["KeyBinding", "KeyTable"]
