"""Tests for the Kind taxonomy and builtin table."""

import pytest

from goaster.kinds import BASIC_KINDS, Kind, basic_kind


@pytest.mark.parametrize("name", sorted(BASIC_KINDS))
def test_every_builtin_is_found(name: str):
    kind = basic_kind(name)
    assert kind is not None
    assert kind.label.lower() == name


def test_table_has_seventeen_entries():
    assert len(BASIC_KINDS) == 17


@pytest.mark.parametrize("name", ["byte", "rune", "error", "Int", "", "string ", "MyType"])
def test_other_names_are_not_found(name: str):
    assert basic_kind(name) is None


def test_zero_kind_is_invalid():
    assert Kind(0) is Kind.INVALID
    assert Kind.SUSPENSE == 1


def test_labels_round_trip():
    assert Kind.COMPLEX128.label == "Complex128"
    assert Kind.from_label("struct") is Kind.STRUCT
    assert str(Kind.PTR) == "Ptr"
    with pytest.raises(ValueError):
        Kind.from_label("tuple")
