from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, List

from . import accessors
from .errors import InvalidArgument
from .models import DefaultValue, MatcherConfig, as_default
from .rule import Rule

logger = logging.getLogger(__name__)

RuleFactory = Callable[[], Rule]

# Option names accepted in rule configs, mapped to the Rule setter they call
RULE_OPTIONS: Dict[str, str] = {
    "classname": "set_required_type",
    "class": "set_required_type",
    "method": "set_target_method",
    "property": "set_target_property",
    "equals": "equals",
    "starts_with": "starts_with",
    "startsWith": "starts_with",
    "ends_with": "ends_with",
    "endsWith": "ends_with",
    "contains": "contains",
    "tags": "set_tags",
    "tag": "add_tag",
    "provide": "set_payload",
}


class Matcher:
    """Matches objects against registered rules and collects their payloads.

    Rules are checked in registration order. Every matching rule provides
    a payload, merged on top of the matcher defaults. When unique fields
    are set, payloads sharing the same values for those fields are merged
    into one entry, later rules winning on conflicting keys::

        matcher = Matcher()
        matcher.when_property("status").equals("active").provide({"visible": True})
        matcher.match(obj)  # [{"visible": True}] when obj.status == "active"

    A matcher is meant to be configured once and matched many times.
    ``match`` keeps no state between calls.
    """

    key_delimiter = "-"

    def __init__(self, rule_factory: RuleFactory | None = None) -> None:
        self.rule_factory = rule_factory or Rule
        self._rules: List[Rule] = []
        self._defaults: Dict[str, DefaultValue] = {}
        self._tags: set[str] = set()
        self._unique_fields: List[str] = []

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any] | MatcherConfig, rule_factory: RuleFactory | None = None
    ) -> "Matcher":
        return cls(rule_factory).load_from_config(config)

    # Defaults

    def set_defaults(self, defaults: Mapping[str, Any]) -> "Matcher":
        """Replace the defaults.

        Functions and other callables are computed from the candidate at match
        time. Classes are attached as they are; wrap any other callable in
        ``Fixed`` to attach it without calling it.
        """
        if not isinstance(defaults, Mapping):
            raise InvalidArgument(f"Defaults must be a mapping, {accessors.describe_type(defaults)} given")
        self._defaults = {key: as_default(value) for key, value in defaults.items()}
        return self

    def set_default(self, key: str, value: Any) -> "Matcher":
        self._defaults[key] = as_default(value)
        return self

    def get_defaults(self) -> Dict[str, DefaultValue]:
        return dict(self._defaults)

    # Tags and uniqueness

    def set_tags(self, tags: Iterable[str]) -> "Matcher":
        self._tags = set(accessors.as_names(tags, "Tags"))
        return self

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    def set_unique_fields(self, fields: Iterable[str]) -> "Matcher":
        self._unique_fields = accessors.as_names(fields, "Unique fields")
        return self

    @property
    def unique_fields(self) -> tuple[str, ...]:
        return tuple(self._unique_fields)

    # Rules

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: Rule) -> Rule:
        self._rules.append(rule)
        return rule

    def _create_rule(self) -> Rule:
        return self.add_rule(self.rule_factory())

    def add_rules(self, rules: Iterable[Mapping[str, Any]]) -> "Matcher":
        if isinstance(rules, (str, bytes, Mapping)) or not isinstance(rules, Iterable):
            raise InvalidArgument(f"Rules must be a list of mappings, {accessors.describe_type(rules)} given")
        for options in rules:
            if not isinstance(options, Mapping):
                raise InvalidArgument(
                    f"Rule options must be a mapping, {accessors.describe_type(options)} given"
                )
            rule = self._create_rule()
            self._apply_options(rule, options)
        return self

    def _apply_options(self, rule: Rule, options: Mapping[str, Any]) -> None:
        for name, value in options.items():
            setter_name = RULE_OPTIONS.get(name)
            setter = getattr(rule, setter_name, None) if setter_name else None
            if setter is None:
                logger.debug("Ignoring unknown rule option %r", name)
                continue
            setter(value)

    def load_from_config(self, config: Mapping[str, Any] | MatcherConfig) -> "Matcher":
        if isinstance(config, MatcherConfig):
            config = config.to_mapping()
        if not isinstance(config, Mapping):
            raise InvalidArgument(f"Config must be a mapping, {accessors.describe_type(config)} given")
        if config.get("match") is None:
            raise InvalidArgument('Must provide a "match" option with a list of rules')

        self.add_rules(config["match"])

        if config.get("defaults") is not None:
            self.set_defaults(config["defaults"])

        if config.get("unique") is not None:
            self.set_unique_fields(config["unique"])

        if config.get("tags") is not None:
            self.set_tags(config["tags"])

        logger.info(
            "Loaded %d rule(s); unique fields=%s tags=%s",
            len(self._rules),
            self._unique_fields or "-",
            sorted(self._tags) or "-",
        )
        return self

    def when_property(self, name: str) -> Rule:
        return self._create_rule().set_target_property(name)

    def when_method(self, name: str) -> Rule:
        return self._create_rule().set_target_method(name)

    def when_class(self, required: Any) -> Rule:
        return self._create_rule().set_required_type(required)

    # Matching

    def _resolve_defaults(self, obj: Any) -> Dict[str, Any]:
        return {key: default.resolve(obj) for key, default in self._defaults.items()}

    def _make_key(self, data: Mapping[str, Any]) -> str:
        parts = []
        for field in self._unique_fields:
            value = data.get(field)
            parts.append("" if value is None else str(value))
        return self.key_delimiter.join(parts)

    def match(self, obj: Any, tag: str | None = None) -> List[Dict[str, Any]]:
        if not accessors.is_object_like(obj):
            raise InvalidArgument(f"Candidate must be an object, {accessors.describe_type(obj)} given")

        if tag and self._tags and tag not in self._tags:
            logger.debug("Tag %r not in matcher tags %s", tag, sorted(self._tags))
            return []

        defaults: Dict[str, Any] | None = None
        presets: List[Dict[str, Any]] = []
        by_key: Dict[str, Dict[str, Any]] = {}

        for rule in self._rules:
            if not rule.matches(obj, tag):
                continue

            # Defaults depend only on the candidate, resolve them once per call
            if defaults is None:
                defaults = self._resolve_defaults(obj)
            data = {**defaults, **rule.payload}

            if self._unique_fields:
                key = self._make_key(data)
                if key in by_key:
                    data = {**by_key[key], **data}
                by_key[key] = data
            else:
                presets.append(data)

        if self._unique_fields:
            return list(by_key.values())
        return presets

    def match_many(self, objects: Iterable[Any], tag: str | None = None) -> List[List[Dict[str, Any]]]:
        return [self.match(obj, tag) for obj in objects]
