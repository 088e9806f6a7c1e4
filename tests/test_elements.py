import pytest

from spantrace.elements import Dependency, ElementarySpan, Mark
from spantrace.options import (
    DURATION_COMPARATOR,
    FIRST_USER_DEFINED_DEPENDENCY_TYPE,
    DependencyEndpointOption,
    DependencyOption,
    TraceError,
)

C = DURATION_COMPARATOR


class _RecordingSpan:
    """Stands in for a span, recording the dependency calls it receives."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def add_outgoing_dependency(self, comparator, dependency, at, *options):
        self._record("out", dependency, at, options)

    def add_incoming_dependency(self, comparator, dependency, at, *options):
        self._record("in", dependency, at, options)

    def add_incoming_dependency_with_wait(self, comparator, dependency, wait_from, at, *options):
        self._record("wait", dependency, wait_from, at, options)


def _es(name, start, end):
    return ElementarySpan(span=name, start=start, end=end)


def test_mark_builders_chain():
    m = Mark()
    assert m.with_label("a").with_moment(50) is m
    assert (m.label, m.moment) == ("a", 50)


def test_elementary_span_builders():
    es = ElementarySpan()
    marks = [Mark("x", 10)]
    assert es.with_start(0).with_end(100).with_marks(marks) is es
    assert (es.start, es.end) == (0, 100)
    assert [m.label for m in es.marks] == ["x"]


@pytest.mark.parametrize("at,expected", [(-1, False), (0, True), (50, True), (100, True), (101, False)])
def test_contains_is_inclusive(at, expected):
    assert _es("a", 0, 100).contains(C, at) is expected


def test_no_triggering_origin():
    dep = Dependency(FIRST_USER_DEFINED_DEPENDENCY_TYPE)
    dest = _es("b", 50, 100)
    dep.with_destination_elementary_span(dest)
    assert dep.triggering_origin() is None
    assert dep.origins == []
    assert dest.incoming is dep


def test_or_semantics_earliest_triggers():
    dep = Dependency(FIRST_USER_DEFINED_DEPENDENCY_TYPE, "", DependencyOption.MULTIPLE_ORIGINS_WITH_OR_SEMANTICS)
    dep.set_origin_elementary_span(C, _es("b", 0, 100))
    dep.set_origin_elementary_span(C, _es("a", 0, 50))
    assert dep.triggering_origin().span == "a"
    assert sorted(o.span for o in dep.origins) == ["a", "b"]


def test_and_semantics_latest_triggers():
    dep = Dependency(FIRST_USER_DEFINED_DEPENDENCY_TYPE, "", DependencyOption.MULTIPLE_ORIGINS_WITH_AND_SEMANTICS)
    dep.set_origin_elementary_span(C, _es("a", 0, 50))
    dep.set_origin_elementary_span(C, _es("b", 0, 100))
    assert dep.triggering_origin().span == "b"
    assert sorted(o.span for o in dep.origins) == ["a", "b"]


def test_error_on_multiple_origins():
    dep = Dependency(FIRST_USER_DEFINED_DEPENDENCY_TYPE, "")
    dep.set_origin_elementary_span(C, _es("a", 0, 50))
    with pytest.raises(TraceError, match="does not support multiple origins"):
        dep.set_origin_elementary_span(C, _es("b", 0, 100))


def test_error_on_both_semantics():
    dep = Dependency(FIRST_USER_DEFINED_DEPENDENCY_TYPE, "", DependencyOption.MULTIPLE_ORIGINS)
    with pytest.raises(TraceError, match="both AND and OR"):
        dep.set_origin_elementary_span(C, _es("a", 0, 50))


def test_set_origin_replaces_single_origin():
    dep = Dependency(0)
    first, second = _es("a", 0, 50), _es("b", 0, 100)
    assert dep.set_origin(C, first) is False
    assert dep.set_origin(C, second) is True
    assert dep.origins == [second]
    assert first.outgoing is None
    assert second.outgoing is dep


def test_with_origin_elementary_span_replaces_silently():
    dep = Dependency(0)
    first, second = _es("a", 0, 50), _es("b", 0, 100)
    assert dep.with_origin_elementary_span(C, first).with_origin_elementary_span(C, second) is dep
    assert dep.triggering_origin() is second
    assert first.outgoing is None


def test_with_payload():
    dep = Dependency(FIRST_USER_DEFINED_DEPENDENCY_TYPE).with_payload("dep1")
    assert dep.payload == "dep1"


def test_replace_origin_elementary_span():
    dep = Dependency(0)
    original, new = _es("a", 0, 50), _es("a", 50, 100)
    dep.set_origin(C, original)
    dep.replace_origin_elementary_span(original, new)
    assert dep.origins == [new]
    assert original.outgoing is None
    assert new.outgoing is dep


def test_replace_origin_ignores_unknown_span():
    dep = Dependency(0)
    origin = _es("a", 0, 50)
    dep.set_origin(C, origin)
    other, new = _es("x", 0, 1), _es("y", 1, 2)
    dep.replace_origin_elementary_span(other, new)
    assert dep.origins == [origin]
    assert new.outgoing is None


def test_set_origin_span_forwards_to_span():
    span = _RecordingSpan()
    dep = Dependency(0)
    dep.set_origin_span(C, span, 30, DependencyEndpointOption.CAN_FISSION_SUSPEND)
    assert span.calls == [("out", dep, 30, (DependencyEndpointOption.CAN_FISSION_SUSPEND,))]


def test_set_origin_span_wraps_errors():
    cause = TraceError("no elementary span")
    dep = Dependency(0)
    with pytest.raises(TraceError, match="failed to set dependency origin span at 150") as info:
        dep.set_origin_span(C, _RecordingSpan(cause), 150)
    assert info.value.__cause__ is cause


def test_add_destination_span_forwards_and_wraps():
    span = _RecordingSpan()
    dep = Dependency(0)
    dep.add_destination_span(C, span, 10)
    assert span.calls == [("in", dep, 10, ())]
    with pytest.raises(TraceError, match="failed to add dependency destination span at 150"):
        dep.add_destination_span(C, _RecordingSpan(TraceError("x")), 150)


def test_add_destination_span_after_wait_forwards_and_wraps():
    span = _RecordingSpan()
    dep = Dependency(0)
    dep.add_destination_span_after_wait(C, span, 40, 60)
    assert span.calls == [("wait", dep, 40, 60, ())]
    with pytest.raises(TraceError, match="at 60, waiting from 40"):
        dep.add_destination_span_after_wait(C, _RecordingSpan(TraceError("x")), 40, 60)