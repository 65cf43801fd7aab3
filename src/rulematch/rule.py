from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable

from . import accessors
from .errors import InvalidArgument, InvalidState
from .models import Logic
from .registry import PredicateRegistry, default_registry

logger = logging.getLogger(__name__)


class Rule:
    """A single condition checked against a candidate object.

    A rule selects a target on the candidate (a method to call or a
    property to read), compares it with one or more values using its
    logic, and provides a payload when the comparison succeeds::

        Rule().set_target_property("title").contains("Hi").provide({"foo": "bar"})

    Every setter returns the rule so calls can be chained.
    """

    def __init__(self, registry: PredicateRegistry | None = None) -> None:
        self.registry = registry or default_registry
        self._required_type: Any = None
        self._method: str | None = None
        self._property: str | None = None
        self._logic: Logic | str = Logic.EQUALS
        self._value: Any = None
        self._payload: Dict[str, Any] = {}
        self._tags: set[str] = set()

    def __repr__(self) -> str:
        if self._method:
            target = f"method={self._method!r}"
        elif self._property:
            target = f"property={self._property!r}"
        else:
            target = "no target"
        logic = self._logic.value if isinstance(self._logic, Logic) else self._logic
        return f"<Rule {target} {logic} {self._value!r}>"

    # Configuration

    def set_required_type(self, required: Any) -> "Rule":
        self._required_type = required
        return self

    def set_target_method(self, name: str) -> "Rule":
        self._method = name
        self._property = None
        return self

    def set_target_property(self, name: str) -> "Rule":
        self._property = name
        self._method = None
        return self

    def set_logic(self, kind: Logic | str, value: Any) -> "Rule":
        try:
            self._logic = Logic(kind)
        except ValueError:
            # Left as-is; only resolvable if registered as a custom predicate
            self._logic = str(kind)
        self._value = value
        return self

    def equals(self, value: Any) -> "Rule":
        return self.set_logic(Logic.EQUALS, value)

    def starts_with(self, value: Any) -> "Rule":
        return self.set_logic(Logic.STARTS_WITH, value)

    def ends_with(self, value: Any) -> "Rule":
        return self.set_logic(Logic.ENDS_WITH, value)

    def contains(self, value: Any) -> "Rule":
        return self.set_logic(Logic.CONTAINS, value)

    def set_tags(self, tags: Iterable[str]) -> "Rule":
        self._tags = set(accessors.as_names(tags, "Tags"))
        return self

    def add_tag(self, tag: str) -> "Rule":
        self._tags.add(tag)
        return self

    def set_payload(self, payload: Mapping[str, Any]) -> "Rule":
        if not isinstance(payload, Mapping):
            raise InvalidArgument(
                f"Payload must be a mapping, {accessors.describe_type(payload)} given"
            )
        self._payload = dict(payload)
        return self

    provide = set_payload

    # Accessors

    @property
    def payload(self) -> Dict[str, Any]:
        return dict(self._payload)

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    @property
    def logic(self) -> Logic | str:
        return self._logic

    @property
    def value(self) -> Any:
        return self._value

    @property
    def target_method(self) -> str | None:
        return self._method

    @property
    def target_property(self) -> str | None:
        return self._property

    @property
    def required_type(self) -> Any:
        return self._required_type

    # Evaluation

    def _has_value(self) -> bool:
        if self._value is None:
            return False
        if isinstance(self._value, (str, bytes, list, tuple)):
            return len(self._value) > 0
        return True

    def matches(self, obj: Any, tag: str | None = None) -> bool:
        if not accessors.is_object_like(obj):
            raise InvalidArgument(f"Candidate must be an object, {accessors.describe_type(obj)} given")

        if not self._has_value():
            raise InvalidState("There is no value to match against in this rule")

        if tag and self._tags and tag not in self._tags:
            logger.debug("%r skipped: tag %r not in %s", self, tag, sorted(self._tags))
            return False

        if self._required_type is not None and not accessors.satisfies_type(obj, self._required_type):
            logger.debug("%r skipped: %s does not satisfy required type", self, type(obj).__name__)
            return False

        found, target = self._resolve_target(obj)
        if not found:
            return False

        # Several values mean "any of them"
        values = self._value if isinstance(self._value, (list, tuple)) else (self._value,)
        return any(self._apply_logic(target, value) for value in values)

    def _resolve_target(self, obj: Any) -> tuple[bool, Any]:
        if self._method:
            if not accessors.has_method(obj, self._method):
                logger.debug("%r: candidate has no method %r", self, self._method)
                return False, None
            return True, accessors.invoke_method(obj, self._method)

        if self._property:
            target = accessors.find_property(obj, self._property)
            if target is None:
                logger.debug("%r: candidate has no property %r", self, self._property)
                return False, None
            return True, target

        return False, None

    def _apply_logic(self, target: Any, value: Any) -> bool:
        name = self._logic.value if isinstance(self._logic, Logic) else self._logic
        if name not in self.registry:
            logger.debug("%r: unknown logic %r", self, name)
            return False
        return self.registry.evaluate(name, target, value)
