"""Spans and categories: the hierarchical structure of a trace."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from spantrace.elements import Dependency, ElementarySpan
from spantrace.options import (
    CALL,
    DEFAULT_DEPENDENCY_ENDPOINT_OPTIONS,
    RETURN,
    Comparator,
    DependencyEndpointOption,
    TraceError,
    assemble_options,
    check_dependency_endpoint_options,
)
from spantrace.timeline import FissionPolicy, Timeline

__all__ = ["Span", "ChildSpan", "RootSpan", "Category"]


class Span(Timeline):
    """A traced interval of work, made of elementary spans, with child spans."""

    def __init__(
        self,
        start: Any = None,
        end: Any = None,
        payload: Any = None,
        elementary_spans: Optional[Iterable[ElementarySpan]] = None,
    ) -> None:
        super().__init__(start, end, elementary_spans)
        if elementary_spans is not None:
            for es in self.elementary_spans:
                es.span = self
        self.payload = payload
        self.child_spans: List[ChildSpan] = []
        self.parent_span: Optional[Span] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.payload!r}, {self.start!r}-{self.end!r})"

    def mark(
        self, comparator: Comparator, label: str, moment: Any, *args: Any
    ) -> None:
        """Add a labelled mark at `moment`."""
        super().mark(comparator, label, moment, *args)

    def suspend(self, comparator: Comparator, start: Any, end: Any, *args: Any) -> None:
        """Suspend this span between `start` and `end`."""
        super().suspend(comparator, start, end, *args)

    def simplify(self, comparator: Comparator) -> None:
        """Simplify this span's elementary spans, and those of all descendants."""
        super().simplify(comparator)
        for child in self.child_spans:
            child.simplify(comparator)

    def update_payload(self, payload: Any) -> None:
        """Replace this span's payload."""
        self.payload = payload

    def _endpoint_index(
        self, comparator: Comparator, at: Any, opts: DependencyEndpointOption, kind: str
    ) -> int:
        idx, contains = self.find_first_ending_at_or_after(comparator, at)
        if contains:
            return idx
        if not opts & DependencyEndpointOption.CAN_FISSION_SUSPEND:
            raise TraceError(
                f"no elementary span at {at} to which to add an {kind} dependency"
            )
        return self.create_instantaneous_within_suspend_at(comparator, at)

    def add_outgoing_dependency(
        self,
        comparator: Comparator,
        dependency: Dependency,
        at: Any,
        *args: DependencyEndpointOption,
    ) -> None:
        """Place `dependency`'s origin in this span at `at`.

        By default the origin goes in the last elementary span at that point.
        """
        opts = assemble_options(DEFAULT_DEPENDENCY_ENDPOINT_OPTIONS, *args)
        check_dependency_endpoint_options(opts)
        idx = self._endpoint_index(comparator, at, opts, "outgoing")
        es = self.elementary_spans[idx]
        if not comparator.equal(es.end, at) or es.outgoing is not None:
            policy = (
                FissionPolicy.EARLIEST
                if opts & DependencyEndpointOption.PLACE_AS_EARLY_AS_POSSIBLE
                else FissionPolicy.LATEST
            )
            fissioned = self.fission_at(comparator, at, policy)
            if fissioned is None:
                raise TraceError(
                    "failed to fission an elementary span that should have existed"
                )
            es = self.elementary_spans[fissioned[0]]
        if dependency.set_origin(comparator, es):
            raise TraceError(
                "adding an outgoing dependency invalidated a previous origin for that dependency"
            )

    def add_incoming_dependency(
        self,
        comparator: Comparator,
        dependency: Dependency,
        at: Any,
        *args: DependencyEndpointOption,
    ) -> None:
        """Place a destination of `dependency` in this span at `at`.

        By default the destination goes in the first elementary span at that
        point.
        """
        opts = assemble_options(DEFAULT_DEPENDENCY_ENDPOINT_OPTIONS, *args)
        check_dependency_endpoint_options(opts)
        idx = self._endpoint_index(comparator, at, opts, "incoming")
        es = self.elementary_spans[idx]
        if not comparator.equal(es.start, at) or es.incoming is not None:
            policy = (
                FissionPolicy.LATEST
                if opts & DependencyEndpointOption.PLACE_AS_LATE_AS_POSSIBLE
                else FissionPolicy.EARLIEST
            )
            fissioned = self.fission_at(comparator, at, policy)
            if fissioned is None:
                raise TraceError(
                    "failed to fission an elementary span that should have existed"
                )
            es = self.elementary_spans[fissioned[1]]
        es.incoming = dependency
        dependency.destinations.append(es)

    def add_incoming_dependency_with_wait(
        self,
        comparator: Comparator,
        dependency: Dependency,
        wait_from: Any,
        at: Any,
        *args: DependencyEndpointOption,
    ) -> None:
        """Suspend from `wait_from` to `at`, then place a destination at `at`."""
        self.suspend(comparator, wait_from, at)
        self.add_incoming_dependency(comparator, dependency, at, *args)

    def new_child_span(
        self, comparator: Comparator, start: Any, end: Any, payload: Any
    ) -> "ChildSpan":
        """Create a child span from `start` to `end`.

        This span is suspended while the child runs, and Call and Return
        dependencies connect the two.
        """
        child = ChildSpan(start, end, payload, parent=self)
        call = Dependency(CALL)
        self.add_outgoing_dependency(comparator, call, start)
        child.add_incoming_dependency(comparator, call, start)
        ret = Dependency(RETURN)
        child.add_outgoing_dependency(comparator, ret, end)
        # The parent's incoming return depends causally on its outgoing call,
        # so it is placed as late as possible.
        self.add_incoming_dependency_with_wait(
            comparator,
            ret,
            start,
            end,
            DependencyEndpointOption.PLACE_AS_LATE_AS_POSSIBLE,
        )
        self.child_spans.append(child)
        return child

    def new_mutable_child_span(
        self, elementary_spans: Iterable[ElementarySpan], payload: Any
    ) -> "ChildSpan":
        """Create a child span from prebuilt elementary spans."""
        child = ChildSpan(payload=payload, elementary_spans=elementary_spans, parent=self)
        self.child_spans.append(child)
        return child


class ChildSpan(Span):
    """A span nested within a parent span."""

    def __init__(
        self,
        start: Any = None,
        end: Any = None,
        payload: Any = None,
        elementary_spans: Optional[Iterable[ElementarySpan]] = None,
        parent: Optional[Span] = None,
    ) -> None:
        super().__init__(start, end, payload, elementary_spans)
        self.parent_span = parent

    def root_span(self) -> "RootSpan":
        """Return the root span at the top of this span's hierarchy."""
        if self.parent_span is None:
            raise TraceError("child span has no parent")
        return self.parent_span.root_span()


class RootSpan(Span):
    """A top-level span, which may belong to one category per hierarchy type."""

    def __init__(
        self,
        start: Any = None,
        end: Any = None,
        payload: Any = None,
        elementary_spans: Optional[Iterable[ElementarySpan]] = None,
    ) -> None:
        super().__init__(start, end, payload, elementary_spans)
        self._parent_categories: Dict[Any, Category] = {}

    def root_span(self) -> "RootSpan":
        """Return this span."""
        return self

    def parent_category(self, hierarchy_type: Any) -> Optional["Category"]:
        """Return this span's category under the given hierarchy type, or None."""
        return self._parent_categories.get(hierarchy_type)

    def _set_parent_category(self, category: "Category") -> None:
        if category.hierarchy_type in self._parent_categories:
            raise TraceError(
                "a root span may only have one parent category for each hierarchy type"
            )
        self._parent_categories[category.hierarchy_type] = category


@dataclass(eq=False)
class Category:
    """A node in a hierarchy grouping root spans."""

    hierarchy_type: Any
    payload: Any = None
    parent: Optional["Category"] = None
    child_categories: List["Category"] = field(default_factory=list)
    root_spans: List[RootSpan] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Category({self.hierarchy_type!r}, {self.payload!r})"

    def new_child_category(self, payload: Any) -> "Category":
        """Create and return a child category under this one."""
        child = Category(self.hierarchy_type, payload, parent=self)
        self.child_categories.append(child)
        return child

    def add_root_span(self, root_span: RootSpan) -> None:
        """Place `root_span` under this category."""
        if root_span.parent_category(self.hierarchy_type) is not None:
            raise TraceError(
                "can't add root span to category: "
                "the span already has a parent category under that hierarchy"
            )
        self.root_spans.append(root_span)
        root_span._set_parent_category(self)

    def update_payload(self, payload: Any) -> None:
        """Replace this category's payload."""
        self.payload = payload