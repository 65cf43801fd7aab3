from __future__ import annotations

import pytest

from rulematch.predicates import pred_contains, pred_ends_with, pred_equals, pred_starts_with
from rulematch.registry import PredicateRegistry, default_registry


@pytest.mark.parametrize(
    "target, expected, result",
    [
        ("active", "active", True),
        ("5", 5, True),
        (5, "5.0", True),
        (5, 5.0, True),
        ("5", "5.0", False),
        ("abc", 0, False),
        (True, "1", False),
        (None, "", False),
    ],
)
def test_loose_equals(target, expected, result):
    assert pred_equals(target, expected) is result


def test_string_predicates_with_missing_operands():
    assert not pred_starts_with(None, "a")
    assert not pred_ends_with("abc", "")
    assert not pred_contains("abc", None)


def test_string_predicates_on_bytes():
    assert pred_contains(b"hello world", "lo w")


def test_default_registry_has_builtin_logic():
    assert default_registry.names() == ["contains", "ends_with", "equals", "starts_with"]
    assert "Contains" in default_registry
    assert default_registry.describe("equals")
    assert default_registry.evaluate("ends_with", "report.pdf", ".pdf")


def test_registry_errors():
    registry = PredicateRegistry()
    with pytest.raises(ValueError):
        registry.register("  ", lambda target, value: True)
    with pytest.raises(KeyError):
        registry.get("missing")
    assert "missing" not in registry
