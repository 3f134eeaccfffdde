from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from jfk_mcp.filters import DateCompareFilter, FieldKind, KeywordEqFilter, TextContainsFilter
from jfk_mcp.metadata import (
    BASE_FIELDS,
    FIELD_SPECS,
    JFK_FILTER_FIELDS,
    VECTOR_FILTER_FIELDS,
    JFKMetadataFilter,
    VectorMetadataFilter,
    compose_metadata_filter,
    compose_vector_metadata_filter,
)


def test_vector_fields_are_full_fields_minus_comments() -> None:
    assert set(VECTOR_FILTER_FIELDS) == set(JFK_FILTER_FIELDS) - {"comments"}
    assert set(VectorMetadataFilter.model_fields) == set(JFKMetadataFilter.model_fields) - {"comments"}


def test_every_declared_field_has_a_kind() -> None:
    assert set(JFK_FILTER_FIELDS) == set(FIELD_SPECS)
    assert set(BASE_FIELDS) == {"link", "link_id", "page_id"}
    assert all(spec.kind is FieldKind.KEYWORD for spec in BASE_FIELDS.values())


@pytest.mark.parametrize(
    "name, kind",
    [
        ("comments", FieldKind.TEXT),
        ("document_date", FieldKind.DATE),
        ("nara_release_date", FieldKind.DATE),
        ("review_date", FieldKind.DATE),
        ("record_number", FieldKind.KEYWORD),
        ("formerly_withheld", FieldKind.KEYWORD),
        ("pages_released", FieldKind.NUMBER),
        ("page_count", FieldKind.NUMBER),
    ],
)
def test_field_kinds(name: str, kind: FieldKind) -> None:
    assert FIELD_SPECS[name].kind is kind


def test_compose_full_filter() -> None:
    result = compose_metadata_filter(
        {
            "comments": {"operator": "contains", "value": "Mexico City"},
            "document_date": {"operator": "gte", "value": "1963-01-01"},
            "originator": {"operator": "eq", "value": "CIA"},
            "page_count": {"operator": "between", "value": [1, 5]},
        }
    )

    assert result.ok
    metadata = result.value
    assert isinstance(metadata.comments, TextContainsFilter)
    assert isinstance(metadata.document_date, DateCompareFilter)
    assert metadata.document_date.value == date(1963, 1, 1)
    assert isinstance(metadata.originator, KeywordEqFilter)
    assert metadata.link is None
    assert set(metadata.active_fields()) == {
        "comments",
        "document_date",
        "originator",
        "page_count",
    }


def test_empty_filter_is_valid() -> None:
    result = compose_metadata_filter({})

    assert result.ok
    assert result.value.active_fields() == {}
    assert result.value.to_payload() == {}


def test_vector_filter_rejects_comments() -> None:
    result = compose_vector_metadata_filter(
        {"comments": {"operator": "contains", "value": "Oswald"}}
    )

    assert not result.ok
    assert any(err.startswith("comments") for err in result.errors)


def test_vector_filter_accepts_other_fields() -> None:
    result = compose_vector_metadata_filter(
        {"nara_release_date": {"operator": "between", "value": ["2017-01-01", "2025-12-31"]}}
    )

    assert result.ok
    assert result.value.nara_release_date.value == (date(2017, 1, 1), date(2025, 12, 31))


@pytest.mark.parametrize(
    "raw",
    [
        {"author": {"operator": "eq", "value": "x"}},
        {"document_date": {"operator": "contains", "value": "1963"}},
        {"comments": {"operator": "eq", "value": "x"}},
        {"page_count": {"operator": "eq", "value": "5"}},
        {"link": None},
        {"record_number": {"operator": "eq", "value": "104-10004-10143"}, "page_count": {"operator": "isNull"}},
        "document_date",
        ["link"],
        None,
    ],
)
def test_full_filter_rejects(raw: Any) -> None:
    result = compose_metadata_filter(raw)

    assert not result.ok
    assert result.value is None


def test_to_payload_includes_only_present_fields() -> None:
    result = compose_metadata_filter(
        {
            "review_date": {"operator": "eq", "value": "1998-06-15"},
            "to_name": {"operator": "isNull"},
        }
    )

    assert result.value.to_payload() == {
        "review_date": {"operator": "eq", "value": "1998-06-15"},
        "to_name": {"operator": "isNull"},
    }
