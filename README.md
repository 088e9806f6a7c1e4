# spantrace

A small library for modelling execution traces. A trace holds root spans,
each of which may have child spans. Every span is divided into elementary
spans: intervals of uninterrupted execution, separated by suspensions, that
are joined to other spans by dependencies (the built-in Call and Return
types, and any integer types you define). Root spans can also be grouped
into hierarchies of categories.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Building a trace

```python
from spantrace.options import NumericComparator, SuspendOption
from spantrace.trace import Trace

comparator = NumericComparator()
trace = Trace(comparator)

parent = trace.new_root_span(0, 100, "parent")
# The parent is suspended while the child runs; Call and Return
# dependencies join the two.
child = parent.new_child_span(comparator, 30, 60, "child")

# A dependency from 45 in the child to 60 in the parent.
dep = trace.new_dependency(3, "signal")
dep.set_origin_span(comparator, child, 45)
dep.add_destination_span(comparator, parent, 60)

# Suspend part of the parent, splitting around elementary-span boundaries.
parent.suspend(comparator, 10, 20, SuspendOption.FISSIONS_AROUND_ELEMENTARY_SPAN_ENDPOINTS)

# Add a labelled mark.
parent.mark(comparator, "checkpoint", 5)

# Merge abutting elementary spans and drop empty interior ones.
trace.simplify()

for es in parent.elementary_spans:
    print(es.start, es.end, es.incoming, es.outgoing, [m.label for m in es.marks])
```

Moments can be any values the comparator can subtract; `NumericComparator`
(and the ready-made `DURATION_COMPARATOR`) works on plain numbers such as
nanosecond counts. Write a subclass of `Comparator` implementing `diff` for
other moment types.

Every operation that cannot be carried out (a moment outside the span, a
suspend that would cross a dependency or a mark without permission, a
second origin on a single-origin dependency, contradictory endpoint
options) raises `TraceError`.

## Main pieces

- `spantrace.options`: `Comparator`, `NumericComparator`,
  `DURATION_COMPARATOR`, the option flags (`DependencyOption`,
  `SuspendOption`, `MarkOption`, `DependencyEndpointOption`), the dependency
  type constants `CALL`, `RETURN` and `FIRST_USER_DEFINED_DEPENDENCY_TYPE`,
  `assemble_options`, `check_dependency_endpoint_options` and `TraceError`.
- `spantrace.enumeration`: `TypeEnumeration` and `TypeEnumerationData`, for
  naming hierarchy and dependency types, with lookup by name, or by
  description and case-insensitive description aliases.
- `spantrace.elements`: `Mark`, `ElementarySpan` and `Dependency`.
  Dependencies created with `MULTIPLE_ORIGINS_WITH_OR_SEMANTICS` are
  triggered by their earliest origin, those with
  `MULTIPLE_ORIGINS_WITH_AND_SEMANTICS` by their latest.
- `spantrace.timeline`: `Timeline` and `FissionPolicy`, the ordered
  elementary spans of a span, with fissioning, suspending, marking and
  simplification.
- `spantrace.spans`: `Span`, `RootSpan`, `ChildSpan` and `Category`.
- `spantrace.trace`: `Trace`, the container that creates root spans,
  categories and dependencies and records the hierarchy and dependency
  types in order of first use.

Traces can also be assembled directly from prebuilt elementary spans with
`Trace.new_mutable_root_span`, `Span.new_mutable_child_span`,
`Trace.new_mutable_dependency`, `Dependency.with_origin_elementary_span` and
`Dependency.with_destination_elementary_span`.

## What it does not do

This is only the in-memory model. It has no command-line tool, does not
read or write any trace file format, does not print traces, and has no
language for transforming traces (scaling spans or dependencies, adding or
removing dependencies, limiting concurrency); code using the model has to
do such work itself.