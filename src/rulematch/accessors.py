"""Capability-checked lookups on candidate objects.

Rules never touch a candidate directly; they go through these helpers so
that a missing method or property is a plain ``False`` instead of an
``AttributeError``. Mappings are treated as property bags: their keys are
the properties, which lets records loaded from JSON or CSV be matched the
same way as regular objects.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Mapping
from numbers import Number
from typing import Any

from .errors import InvalidArgument

_SCALAR_TYPES = (str, bytes, bytearray, Number)
_COLLECTION_TYPES = (list, tuple, set, frozenset)


def is_object_like(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, _SCALAR_TYPES) or isinstance(value, _COLLECTION_TYPES):
        return False
    return True


def describe_type(value: Any) -> str:
    return "None" if value is None else type(value).__name__


def has_method(obj: Any, name: str) -> bool:
    # Mappings only expose data; dict.keys() and friends are not targets
    if isinstance(obj, Mapping):
        return False
    try:
        attr = inspect.getattr_static(obj, name)
    except AttributeError:
        attr = None
    if isinstance(attr, property):
        return False
    return callable(getattr(obj, name, None))


def invoke_method(obj: Any, name: str) -> Any:
    return getattr(obj, name)()


def find_property(obj: Any, name: str) -> Any:
    """Read a property once, returning ``None`` when it is absent.

    A ``None`` value and a method both count as absent.
    """
    if isinstance(obj, Mapping):
        return obj.get(name)
    value = getattr(obj, name, None)
    if value is None or inspect.isroutine(value):
        return None
    return value


def satisfies_type(obj: Any, required: Any) -> bool:
    """Check ``obj`` against a type, a tuple of types, or a class name.

    A class name matches either the simple ``__name__`` or the
    ``module.qualname`` form of any class in the candidate's MRO.
    """
    if isinstance(required, str):
        for klass in type(obj).__mro__:
            if required in (klass.__name__, f"{klass.__module__}.{klass.__qualname__}"):
                return True
        return False
    if isinstance(required, (list, tuple)):
        return any(satisfies_type(obj, item) for item in required)
    if isinstance(required, type):
        return isinstance(obj, required)
    return False


def as_names(value: Any, what: str) -> list[str]:
    """Normalize a tag or field list; a single string is one name."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, (bytes, Mapping)) or not isinstance(value, Iterable):
        raise InvalidArgument(f"{what} must be a list of strings, {describe_type(value)} given")
    return list(value)
