from __future__ import annotations

import pytest

from yaml_source.domain.selector import parse_selector, resolve_path
from yaml_source.errors import SelectorLookupError


def test_parse_selector_trims_and_drops_empty_segments():
    assert parse_selector("/a/b/") == ("a", "b")
    assert parse_selector("a//b") == ("a", "b")
    assert parse_selector("/a//b/") == ("a", "b")
    assert parse_selector("") == ()
    assert parse_selector("/") == ()


def test_parse_selector_keeps_zero_segment():
    assert parse_selector("items/0/name") == ("items", "0", "name")


def test_resolve_path_walks_mappings_and_sequences():
    document = {"items": {"x": [{"id": 1}, {"id": 2}]}}

    result = resolve_path(document, ("items", "x", "1", "id"))

    assert result.ok is True
    assert result.value == 2


def test_resolve_path_empty_selector_returns_root():
    document = {"a": 1}
    assert resolve_path(document, ()).unwrap() is document


def test_resolve_path_falls_back_to_integer_mapping_key():
    document = {"years": {2024: "leap", 2025: "common"}}
    assert resolve_path(document, ("years", "2024")).unwrap() == "leap"


@pytest.mark.parametrize(
    "selector",
    [
        ("missing",),
        ("items", "5"),
        ("items", "-1"),
        ("items", "first"),
        ("name", "length"),
    ],
)
def test_resolve_path_reports_unresolved_segment(selector):
    document = {"items": [1, 2], "name": "scalar"}

    result = resolve_path(document, selector)

    assert result.ok is False
    assert isinstance(result.error, LookupError)
    assert result.error.segment == selector[-1]
    with pytest.raises(SelectorLookupError):
        result.unwrap()


def test_lookup_error_carries_code_and_selector():
    result = resolve_path({"a": {}}, ("a", "b"))

    data = result.error.to_dict()
    assert data["category"] == "lookup"
    assert data["code"] == "ITEM_SELECTOR_NOT_FOUND"
    assert data["details"]["selector"] == "a/b"
    assert data["details"]["segment"] == "b"
