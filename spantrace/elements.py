"""Marks, elementary spans and dependencies: the building blocks of a trace."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from spantrace.options import (
    DEFAULT_DEPENDENCY_OPTIONS,
    Comparator,
    DependencyEndpointOption,
    DependencyOption,
    TraceError,
)

__all__ = ["Mark", "ElementarySpan", "Dependency"]


@dataclass(eq=False)
class Mark:
    """A labelled moment within an elementary span."""

    label: str = ""
    moment: Any = None

    def with_label(self, label: str) -> "Mark":
        """Set the label; returns self."""
        self.label = label
        return self

    def with_moment(self, moment: Any) -> "Mark":
        """Set the moment; returns self."""
        self.moment = moment
        return self


@dataclass(eq=False, repr=False)
class ElementarySpan:
    """An interval of uninterrupted execution within a span.

    It has at most one incoming dependency, at its start, and at most one
    outgoing dependency, at its end.
    """

    span: Any = None
    start: Any = None
    end: Any = None
    marks: List[Mark] = field(default_factory=list)
    predecessor: Optional["ElementarySpan"] = None
    successor: Optional["ElementarySpan"] = None
    incoming: Optional["Dependency"] = None
    outgoing: Optional["Dependency"] = None

    def __repr__(self) -> str:
        return f"ElementarySpan({self.start!r}-{self.end!r})"

    def contains(self, comparator: Comparator, at: Any) -> bool:
        """Return True if `at` lies within this span, inclusive at both ends."""
        return comparator.greater_or_equal(at, self.start) and comparator.less_or_equal(
            at, self.end
        )

    def with_marks(self, marks: List[Mark]) -> "ElementarySpan":
        """Replace the marks; returns self."""
        self.marks = list(marks)
        return self

    def with_start(self, start: Any) -> "ElementarySpan":
        """Set the start moment; returns self."""
        self.start = start
        return self

    def with_end(self, end: Any) -> "ElementarySpan":
        """Set the end moment; returns self."""
        self.end = end
        return self


@dataclass(eq=False, repr=False)
class Dependency:
    """A causal edge from one or more origin elementary spans to destinations."""

    dependency_type: int
    payload: Any = None
    options: DependencyOption = DEFAULT_DEPENDENCY_OPTIONS
    origins: List[ElementarySpan] = field(default_factory=list)
    destinations: List[ElementarySpan] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Dependency(type={self.dependency_type!r}, payload={self.payload!r})"

    def triggering_origin(self) -> Optional[ElementarySpan]:
        """Return the origin that triggers this dependency, or None."""
        return self.origins[0] if self.origins else None

    def set_origin_span(
        self,
        comparator: Comparator,
        span: Any,
        at: Any,
        *args: DependencyEndpointOption,
    ) -> None:
        """Place this dependency's origin in `span` at moment `at`."""
        try:
            span.add_outgoing_dependency(comparator, self, at, *args)
        except TraceError as err:
            raise TraceError(f"failed to set dependency origin span at {at}: {err}") from err

    def add_destination_span(
        self,
        comparator: Comparator,
        span: Any,
        at: Any,
        *args: DependencyEndpointOption,
    ) -> None:
        """Add a destination for this dependency in `span` at moment `at`."""
        try:
            span.add_incoming_dependency(comparator, self, at, *args)
        except TraceError as err:
            raise TraceError(
                f"failed to add dependency destination span at {at}: {err}"
            ) from err

    def add_destination_span_after_wait(
        self,
        comparator: Comparator,
        span: Any,
        wait_from: Any,
        at: Any,
        *args: DependencyEndpointOption,
    ) -> None:
        """Add a destination in `span` at `at`, preceded by a wait from `wait_from`."""
        try:
            span.add_incoming_dependency_with_wait(comparator, self, wait_from, at, *args)
        except TraceError as err:
            raise TraceError(
                f"failed to set dependency destination span at {at}, "
                f"waiting from {wait_from}: {err}"
            ) from err

    def with_origin_elementary_span(
        self, comparator: Comparator, es: ElementarySpan
    ) -> "Dependency":
        """Set `es` as an origin, replacing any single previous origin; returns self."""
        self.set_origin(comparator, es)
        return self

    def with_payload(self, payload: Any) -> "Dependency":
        """Set the payload; returns self."""
        self.payload = payload
        return self

    def set_origin_elementary_span(self, comparator: Comparator, es: ElementarySpan) -> None:
        """Set `es` as an origin, refusing to silently replace an existing one."""
        if self.options.includes(
            DependencyOption.MULTIPLE_ORIGINS_WITH_AND_SEMANTICS
        ) and self.options.includes(DependencyOption.MULTIPLE_ORIGINS_WITH_OR_SEMANTICS):
            raise TraceError(
                "cannot set dependency origin: dependency has both AND and OR semantics"
            )
        if self.origins and not self.options.includes(DependencyOption.MULTIPLE_ORIGINS):
            raise TraceError(
                "cannot set dependency origin: it already has an origin, "
                "and it does not support multiple origins"
            )
        if self.set_origin(comparator, es):
            raise TraceError(
                "adding an outgoing dependency invalidated a previous origin for that dependency"
            )

    def with_destination_elementary_span(self, es: ElementarySpan) -> "Dependency":
        """Add `es` as a destination; returns self."""
        es.incoming = self
        self.destinations.append(es)
        return self

    def replace_origin_elementary_span(
        self, original: ElementarySpan, new: ElementarySpan
    ) -> None:
        """Move this dependency's origin from `original` to `new`, if present."""
        for idx, origin in enumerate(self.origins):
            if origin is original:
                self.origins[idx] = new
                original.outgoing = None
                new.outgoing = self
                break

    def set_origin(self, comparator: Comparator, es: ElementarySpan) -> bool:
        """Set `es` as an origin of this dependency.

        With multiple-origin semantics the origin is added, and the triggering
        origin becomes the latest (AND) or earliest (OR) one; returns False.
        Otherwise `es` replaces any previous origin, whose outgoing link is
        cleared; returns True if a previous origin was removed.
        """
        es.outgoing = self
        if self.options.includes(DependencyOption.MULTIPLE_ORIGINS_WITH_AND_SEMANTICS):
            if self.origins and comparator.greater(es.end, self.origins[0].end):
                es, self.origins[0] = self.origins[0], es
            self.origins.append(es)
            return False
        if self.options.includes(DependencyOption.MULTIPLE_ORIGINS_WITH_OR_SEMANTICS):
            if self.origins and comparator.less(es.end, self.origins[0].end):
                es, self.origins[0] = self.origins[0], es
            self.origins.append(es)
            return False
        removed = False
        if self.origins:
            self.origins[0].outgoing = None
            removed = True
        self.origins = [es]
        return removed