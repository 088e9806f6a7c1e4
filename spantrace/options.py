"""Option flags, comparators and errors shared by the trace model."""

from __future__ import annotations

import abc
import enum
from typing import Any, TypeVar

__all__ = [
    "TraceError",
    "DependencyOption",
    "SuspendOption",
    "MarkOption",
    "DependencyEndpointOption",
    "Comparator",
    "NumericComparator",
    "assemble_options",
    "check_dependency_endpoint_options",
    "CALL",
    "RETURN",
    "FIRST_USER_DEFINED_DEPENDENCY_TYPE",
    "DEFAULT_DEPENDENCY_OPTIONS",
    "DEFAULT_SUSPEND_OPTIONS",
    "DEFAULT_MARK_OPTIONS",
    "DEFAULT_DEPENDENCY_ENDPOINT_OPTIONS",
    "DURATION_COMPARATOR",
]


class TraceError(Exception):
    """Raised when a trace operation cannot be carried out."""


# Built-in dependency types.  User-defined types start after these.
CALL = 0
RETURN = 1
FIRST_USER_DEFINED_DEPENDENCY_TYPE = 2


class DependencyOption(enum.IntFlag):
    """Options that govern how a dependency treats multiple origins."""

    NONE = 0
    MULTIPLE_ORIGINS_WITH_AND_SEMANTICS = 1
    MULTIPLE_ORIGINS_WITH_OR_SEMANTICS = 2
    MULTIPLE_ORIGINS = 3

    def includes(self, other: "DependencyOption") -> bool:
        """Return True if any bit of `other` is set in this option set."""
        return bool(self & other)


class SuspendOption(enum.IntFlag):
    """Options that govern how a suspend interval may be placed."""

    NONE = 0
    FISSIONS_AROUND_ELEMENTARY_SPAN_ENDPOINTS = 1
    FISSIONS_AROUND_MARKS = 2


class MarkOption(enum.IntFlag):
    """Options that govern how a mark may be placed."""

    NONE = 0
    CAN_FISSION_SUSPEND = 1


class DependencyEndpointOption(enum.IntFlag):
    """Options that govern where a dependency endpoint is placed."""

    NONE = 0
    CAN_FISSION_SUSPEND = 1
    PLACE_AS_EARLY_AS_POSSIBLE = 2
    PLACE_AS_LATE_AS_POSSIBLE = 4


DEFAULT_DEPENDENCY_OPTIONS = DependencyOption.NONE
DEFAULT_SUSPEND_OPTIONS = SuspendOption.NONE
DEFAULT_MARK_OPTIONS = MarkOption.NONE
DEFAULT_DEPENDENCY_ENDPOINT_OPTIONS = DependencyEndpointOption.NONE

_F = TypeVar("_F", bound=enum.IntFlag)


def assemble_options(default: _F, *args: _F) -> _F:
    """Combine a default option set with any number of extra options."""
    result = default
    for option in args:
        result = result | option
    return result


def check_dependency_endpoint_options(options: DependencyEndpointOption) -> None:
    """Raise TraceError if the endpoint options contradict each other."""
    both = (
        DependencyEndpointOption.PLACE_AS_EARLY_AS_POSSIBLE
        | DependencyEndpointOption.PLACE_AS_LATE_AS_POSSIBLE
    )
    if options & both == both:
        raise TraceError(
            "invalid options: cannot place a dependency edge both as early and as late as possible"
        )


class Comparator(abc.ABC):
    """Orders and measures moments in a trace."""

    @abc.abstractmethod
    def diff(self, a: Any, b: Any) -> Any:
        """Return a - b; its sign orders the two moments."""

    def equal(self, a: Any, b: Any) -> bool:
        return self.diff(a, b) == 0

    def less(self, a: Any, b: Any) -> bool:
        return self.diff(a, b) < 0

    def less_or_equal(self, a: Any, b: Any) -> bool:
        return self.diff(a, b) <= 0

    def greater(self, a: Any, b: Any) -> bool:
        return self.diff(a, b) > 0

    def greater_or_equal(self, a: Any, b: Any) -> bool:
        return self.diff(a, b) >= 0


class NumericComparator(Comparator):
    """Comparator for plain numeric moments, such as nanosecond counts."""

    def diff(self, a: Any, b: Any) -> Any:
        return a - b


DURATION_COMPARATOR = NumericComparator()