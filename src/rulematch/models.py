from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Union

from pydantic import BaseModel, Field, ValidationError, field_validator
import yaml

from .errors import InvalidArgument


class Logic(str, Enum):
    EQUALS = "equals"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    CONTAINS = "contains"

    @classmethod
    def _missing_(cls, value: object) -> "Logic | None":
        # Accept camelCase and case variants such as "startsWith" or "ENDS_WITH"
        if not isinstance(value, str):
            return None
        key = value.strip().replace("_", "").lower()
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        return None


# Default values attached to every matched payload

@dataclass(frozen=True)
class Fixed:
    """A default that is attached as-is."""

    value: Any

    def resolve(self, _candidate: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class Computed:
    """A default produced from the candidate object at match time."""

    func: Callable[[Any], Any]

    def resolve(self, candidate: Any) -> Any:
        return self.func(candidate)


DefaultValue = Union[Fixed, Computed]


def as_default(value: Any) -> DefaultValue:
    if isinstance(value, (Fixed, Computed)):
        return value
    # Classes are attached as-is; only functions and other callables are deferred
    if callable(value) and not isinstance(value, type):
        return Computed(value)
    return Fixed(value)


class MatcherConfig(BaseModel):
    match: List[Dict[str, Any]] = Field(..., description="Rule option mappings, in evaluation order")
    defaults: Dict[str, Any] | None = Field(default=None, description="Values merged under every payload")
    unique: List[str] | None = Field(default=None, description="Fields that identify a unique payload")
    tags: List[str] | None = Field(default=None, description="Tags this matcher answers to")

    @field_validator("unique", "tags")
    @classmethod
    def _strip_names(cls, v: List[str] | None) -> List[str] | None:
        if v is None:
            return v
        names = [name.strip() for name in v]
        if any(not name for name in names):
            raise ValueError("names cannot be empty")
        return names

    def to_mapping(self) -> Dict[str, Any]:
        # Built by hand: model_dump would serialize Fixed/Computed defaults
        data: Dict[str, Any] = {"match": [dict(options) for options in self.match]}
        if self.defaults is not None:
            data["defaults"] = dict(self.defaults)
        if self.unique is not None:
            data["unique"] = list(self.unique)
        if self.tags is not None:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_mapping(cls, raw: Any) -> "MatcherConfig":
        if not isinstance(raw, dict) or raw.get("match") is None:
            raise InvalidArgument('Config must be a mapping with a "match" key holding a list of rules')
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise InvalidArgument(f"Invalid matcher config: {exc}") from exc

    @classmethod
    def from_yaml(cls, yaml_text: str) -> "MatcherConfig":
        try:
            raw = yaml.safe_load(yaml_text)
        except yaml.YAMLError as exc:
            raise InvalidArgument(f"Matcher config is not valid YAML: {exc}") from exc
        return cls.from_mapping(raw)

    @classmethod
    def from_yaml_file(cls, path: str) -> "MatcherConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())


# Output models for the command line

class RecordMatches(BaseModel):
    index: int
    matches: List[Dict[str, Any]] = Field(default_factory=list)


class BatchResult(BaseModel):
    tag: str | None = None
    records: List[RecordMatches] = Field(default_factory=list)
