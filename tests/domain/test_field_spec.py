from __future__ import annotations

import pytest

from yaml_source.domain.field_spec import (
    BareField,
    ExplicitField,
    build_field_selectors,
    parse_field_specs,
)
from yaml_source.errors import ConfigurationError


def test_list_config_accepts_bare_names_and_explicit_entries():
    specs = parse_field_specs(
        [
            "id",
            {"name": "title", "label": "Title", "selector": "meta/title"},
            {"name": "body"},
        ]
    )

    assert specs == [BareField("id"), ExplicitField("title", "meta/title"), BareField("body")]


def test_mapping_config_accepts_strings_none_and_nested_entries():
    specs = parse_field_specs(
        {
            "id": None,
            "title": "meta/title",
            "author": {"selector": "meta/author/name"},
        }
    )

    assert specs == [
        BareField("id"),
        ExplicitField("title", "meta/title"),
        ExplicitField("author", "meta/author/name"),
    ]


def test_field_selectors_preserve_configured_order():
    selectors = build_field_selectors(parse_field_specs(["zeta", {"name": "alpha", "selector": "/a/b/"}, "mid"]))

    assert list(selectors) == ["zeta", "alpha", "mid"]
    assert selectors["alpha"] == ("a", "b")
    assert selectors["zeta"] == ("zeta",)


def test_missing_fields_means_no_fields():
    assert build_field_selectors(parse_field_specs(None)) == {}


@pytest.mark.parametrize(
    "fields",
    [
        "id",
        [42],
        [{"selector": "a"}],
        [{"name": "a", "selector": ["x"]}],
        {"a": 5},
    ],
)
def test_malformed_field_config_is_rejected(fields):
    with pytest.raises(ConfigurationError):
        parse_field_specs(fields)


def test_duplicate_field_names_are_rejected():
    with pytest.raises(ConfigurationError):
        build_field_selectors([BareField("id"), ExplicitField("id", "other")])
