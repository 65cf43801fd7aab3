from __future__ import annotations

from typing import Any, Callable

PredicateFunc = Callable[[Any, Any], bool]


class PredicateRegistry:
    def __init__(self) -> None:
        self._name_to_predicate: dict[str, PredicateFunc] = {}
        self._name_to_description: dict[str, str] = {}

    @staticmethod
    def _normalize(name: str) -> str:
        return str(name).strip().lower()

    def register(self, name: str, func: PredicateFunc, description: str | None = None) -> None:
        normalized = self._normalize(name)
        if not normalized:
            raise ValueError("Predicate name cannot be empty")
        self._name_to_predicate[normalized] = func
        if description:
            self._name_to_description[normalized] = description

    def __contains__(self, name: object) -> bool:
        return self._normalize(str(name)) in self._name_to_predicate

    def get(self, name: str) -> PredicateFunc:
        normalized = self._normalize(name)
        try:
            return self._name_to_predicate[normalized]
        except KeyError as exc:
            available = ", ".join(sorted(self._name_to_predicate))
            raise KeyError(f"Predicate '{name}' not found. Available: {available}") from exc

    def describe(self, name: str) -> str | None:
        return self._name_to_description.get(self._normalize(name))

    def names(self) -> list[str]:
        return sorted(self._name_to_predicate.keys())

    def evaluate(self, name: str, target: Any, expected: Any) -> bool:
        predicate = self.get(name)
        return bool(predicate(target, expected))


# Default registry with built-in predicates populated in predicates.py
default_registry = PredicateRegistry()
