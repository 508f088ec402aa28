"""
Planning Errors
===============
All failures raised by the planning engine derive from `PlanningError`, so a
caller that only wants to report "the plan could not be updated" can catch one
type. Each error is raised synchronously at the call that caused it.
"""
from __future__ import annotations


class PlanningError(Exception):
    """Base class for all planning engine errors."""


class InvalidNameError(PlanningError, LookupError):
    """The landmark identifier is not one of the ten recognized names."""

    def __init__(self, name: object) -> None:
        super().__init__(f"Unknown landmark name: {name!r}")
        self.name = name


class DegenerateVectorError(PlanningError, ValueError):
    """A direction was requested from a zero-length vector (e.g. duplicate points)."""


class IncompletePlanError(PlanningError):
    """Derivation was attempted before its prerequisites exist."""

    def __init__(self, message: str, missing: list | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class MissingAxisError(PlanningError):
    """A rotation was requested before its rotation axis has been derived."""


class OutOfRangeError(PlanningError, ValueError):
    """An angle parameter lies outside the allowed range or step."""

    def __init__(self, value: object, minimum: int, maximum: int) -> None:
        super().__init__(
            f"Angle {value!r} must be a whole number of degrees in [{minimum}, {maximum}]."
        )
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
