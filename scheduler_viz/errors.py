"""
Error types raised before a simulation starts.

All of them derive from ``ValueError`` so callers that only care about "bad
input" can keep catching that.
"""


class SchedulerError(ValueError):
    """Base class for input errors rejected before simulation."""


class MalformedInput(SchedulerError):
    """Unparseable body, missing ``processes`` field or bad process values."""


class InvalidIdentifier(SchedulerError):
    """Process id is not an integer, not integer-convertible, or duplicated."""


class UnsupportedAlgorithm(SchedulerError):
    """Algorithm selector is not one of the known names."""


class InvalidParameters(SchedulerError):
    """Non-positive quantum / queue count or negative aging threshold."""
