from __future__ import annotations


class MatcherError(Exception):
    """Base class for errors raised by rulematch."""


class InvalidArgument(MatcherError, ValueError):
    """A value of the wrong shape or type was passed at an API boundary."""


class InvalidState(MatcherError, RuntimeError):
    """A rule was evaluated before it was fully configured."""
