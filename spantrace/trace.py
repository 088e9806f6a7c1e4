"""The trace: root spans, categories and the dependencies between spans."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set

from spantrace.elements import Dependency, ElementarySpan
from spantrace.options import (
    CALL,
    DEFAULT_DEPENDENCY_OPTIONS,
    RETURN,
    Comparator,
    DependencyOption,
    assemble_options,
)
from spantrace.spans import Category, RootSpan

__all__ = ["Trace"]


class Trace:
    """A collection of root spans, their categories and their dependencies.

    Hierarchy and dependency types are recorded in the order they are first
    used; the Call and Return dependency types are always present.
    """

    def __init__(self, comparator: Comparator, default_namer: Any = None) -> None:
        self.comparator = comparator
        self.default_namer = default_namer
        self.root_spans: List[RootSpan] = []
        self._hierarchy_types: List[Any] = []
        self._seen_hierarchy_types: Set[Any] = set()
        self._dependency_types: List[Any] = []
        self._seen_dependency_types: Set[Any] = set()
        self._root_categories: Dict[Any, List[Category]] = {}
        self._observe_dependency_type(CALL)
        self._observe_dependency_type(RETURN)

    def __repr__(self) -> str:
        return f"Trace({len(self.root_spans)} root spans)"

    def _observe_hierarchy_type(self, hierarchy_type: Any) -> None:
        if hierarchy_type not in self._seen_hierarchy_types:
            self._seen_hierarchy_types.add(hierarchy_type)
            self._hierarchy_types.append(hierarchy_type)

    def _observe_dependency_type(self, dependency_type: Any) -> None:
        if dependency_type not in self._seen_dependency_types:
            self._seen_dependency_types.add(dependency_type)
            self._dependency_types.append(dependency_type)

    @property
    def hierarchy_types(self) -> List[Any]:
        """Hierarchy types used in this trace, in order of first use."""
        return list(self._hierarchy_types)

    @property
    def dependency_types(self) -> List[Any]:
        """Dependency types used in this trace, in order of first use."""
        return list(self._dependency_types)

    def root_categories(self, hierarchy_type: Any) -> List[Category]:
        """Return the root categories under the given hierarchy type."""
        return list(self._root_categories.get(hierarchy_type, []))

    def new_root_category(self, hierarchy_type: Any, payload: Any) -> Category:
        """Create and return a new root category under the given hierarchy type."""
        self._observe_hierarchy_type(hierarchy_type)
        category = Category(hierarchy_type, payload)
        self._root_categories.setdefault(hierarchy_type, []).append(category)
        return category

    def new_root_span(self, start: Any, end: Any, payload: Any) -> RootSpan:
        """Create and return a new root span running from `start` to `end`."""
        span = RootSpan(start, end, payload)
        self.root_spans.append(span)
        return span

    def new_mutable_root_span(
        self, elementary_spans: Iterable[ElementarySpan], payload: Any
    ) -> RootSpan:
        """Create a root span from prebuilt elementary spans.

        Raises TraceError if no elementary spans are given.
        """
        span = RootSpan(payload=payload, elementary_spans=elementary_spans)
        self.root_spans.append(span)
        return span

    def new_dependency(
        self, dependency_type: Any, payload: Any, *args: DependencyOption
    ) -> Dependency:
        """Create and return a new, unconnected dependency."""
        self._observe_dependency_type(dependency_type)
        return Dependency(
            dependency_type,
            payload,
            assemble_options(DEFAULT_DEPENDENCY_OPTIONS, *args),
        )

    def new_mutable_dependency(
        self, dependency_type: Any, *args: DependencyOption
    ) -> Dependency:
        """Create and return a new dependency with no payload."""
        self._observe_dependency_type(dependency_type)
        return Dependency(
            dependency_type,
            None,
            assemble_options(DEFAULT_DEPENDENCY_OPTIONS, *args),
        )

    def simplify(self) -> None:
        """Simplify the elementary spans of every span in the trace."""
        for span in self.root_spans:
            span.simplify(self.comparator)

    def root_category_list(self, hierarchy_type: Any) -> Optional[List[Category]]:
        """Return the root categories for a hierarchy type, or None if unused."""
        categories = self._root_categories.get(hierarchy_type)
        return None if categories is None else list(categories)