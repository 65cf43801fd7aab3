from __future__ import annotations

from numbers import Number
from typing import Any

from .registry import default_registry, PredicateRegistry


def _to_string(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Number):
        try:
            return float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _text_operands(target: Any, expected: Any) -> tuple[str, str] | None:
    text = _to_string(target)
    needle = _to_string(expected)
    # An empty needle never matches, same as a missing operand.
    if text is None or not needle:
        return None
    return text, needle


# Predicate functions take (target, expected) and return a bool

def pred_equals(target: Any, expected: Any) -> bool:
    """Loose equality: plain ``==``, then numeric comparison when exactly one side is text."""
    if target == expected:
        return True
    if isinstance(target, str) != isinstance(expected, str):
        lf = _safe_float(target)
        rf = _safe_float(expected)
        if lf is not None and rf is not None:
            return lf == rf
    return False


def pred_starts_with(target: Any, expected: Any) -> bool:
    operands = _text_operands(target, expected)
    if operands is None:
        return False
    text, prefix = operands
    return text.startswith(prefix)


def pred_ends_with(target: Any, expected: Any) -> bool:
    operands = _text_operands(target, expected)
    if operands is None:
        return False
    text, suffix = operands
    return text.endswith(suffix)


def pred_contains(target: Any, expected: Any) -> bool:
    operands = _text_operands(target, expected)
    if operands is None:
        return False
    text, substring = operands
    return substring in text


# Register default predicates

def register_default_predicates(registry: PredicateRegistry) -> None:
    registry.register("equals", pred_equals, "Loose equality with numeric-string coercion")
    registry.register("starts_with", pred_starts_with, "Text of the target starts with the value")
    registry.register("ends_with", pred_ends_with, "Text of the target ends with the value")
    registry.register("contains", pred_contains, "Text of the target contains the value")


register_default_predicates(default_registry)
