import pytest

from spantrace.enumeration import TypeEnumeration, TypeEnumerationData
from spantrace.options import TraceError


@pytest.fixture
def hierarchies():
    return (
        TypeEnumeration()
        .with_type(0, "h0", "hierarchy 0")
        .with_type(1, "h1", "hierarchy 1")
    )


def test_empty_enumeration_has_no_default():
    te = TypeEnumeration()
    assert te.default() is None
    assert te.ordered_type_data() == []


def test_first_defined_is_default(hierarchies):
    assert hierarchies.default().type == 0
    assert hierarchies.default().name == "h0"


def test_ordered_type_data_keeps_definition_order(hierarchies):
    assert [td.name for td in hierarchies.ordered_type_data()] == ["h0", "h1"]


def test_type_data_lookup(hierarchies):
    data = hierarchies.type_data(1)
    assert data == TypeEnumerationData(1, "h1", "hierarchy 1")
    assert hierarchies.type_data(7) is None


def test_by_name_round_trip(hierarchies):
    for td in hierarchies.ordered_type_data():
        assert hierarchies.by_name(td.name) is td


def test_by_name_unknown_raises_listing_names(hierarchies):
    with pytest.raises(TraceError, match=r"no types match name 'zz'.*\[h0, h1\]"):
        hierarchies.by_name("zz")


def test_by_name_ambiguous_raises():
    te = TypeEnumeration().with_type(0, "dup", "first").with_type(1, "dup", "second")
    with pytest.raises(TraceError, match="multiple types match name 'dup'"):
        te.by_name("dup")
    assert te.by_description("second").type == 1


def test_by_description_round_trip(hierarchies):
    for td in hierarchies.ordered_type_data():
        assert hierarchies.by_description(td.description) is td


def test_by_description_unknown_returns_none(hierarchies):
    assert hierarchies.by_description("nothing like it") is None


def test_by_description_ambiguous_raises():
    te = TypeEnumeration().with_type(0, "a", "same").with_type(1, "b", "same")
    with pytest.raises(TraceError, match="multiple types match description 'same'"):
        te.by_description("same")
    assert te.by_name("b").type == 1


def test_description_aliases_are_case_insensitive(hierarchies):
    hierarchies.with_description_aliases("hierarchy 1", "second", "other")
    assert hierarchies.by_description("SECOND").type == 1
    assert hierarchies.by_description("Other").type == 1
    assert hierarchies.by_description("hierarchy 0").type == 0


def test_later_alias_overwrites_earlier(hierarchies):
    hierarchies.with_description_aliases("hierarchy 0", "alias")
    hierarchies.with_description_aliases("hierarchy 1", "alias")
    assert hierarchies.by_description("alias").type == 1


def test_with_type_data_defines_type():
    data = TypeEnumerationData("x", "ex", "the x type")
    te = TypeEnumeration().with_type_data(data)
    assert te.type_data("x") is data
    assert te.by_name("ex") is data
    assert te.default() is data


def test_builders_return_same_enumeration():
    te = TypeEnumeration()
    assert te.with_type(0, "a", "b") is te
    assert te.with_description_aliases("b", "c") is te
    assert te.with_type_data(TypeEnumerationData(1, "d", "e")) is te