from .engine import Matcher
from .errors import InvalidArgument, InvalidState, MatcherError
from .models import (
    BatchResult,
    Computed,
    Fixed,
    Logic,
    MatcherConfig,
    RecordMatches,
)
from .registry import PredicateRegistry, default_registry
from .rule import Rule

# Ensure built-in predicates are registered on package import
from . import predicates as _predicates  # noqa: F401

__all__ = [
    "Matcher",
    "Rule",
    "Logic",
    "Fixed",
    "Computed",
    "MatcherConfig",
    "RecordMatches",
    "BatchResult",
    "MatcherError",
    "InvalidArgument",
    "InvalidState",
    "PredicateRegistry",
    "default_registry",
]
