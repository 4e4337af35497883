from __future__ import annotations

import pytest

from app.services.employee_query import QueryFilter, build_query, by_first_name, by_kind


def test_by_first_name_builds_case_insensitive_regex():
    query_filter = by_first_name("^jo")

    assert query_filter.clause == 'RegexMatch(c.firstName, @firstName, "i")'
    assert query_filter.parameters == [{"name": "@firstName", "value": "^jo"}]


def test_by_first_name_rejects_invalid_pattern():
    with pytest.raises(ValueError, match="Invalid first name pattern"):
        by_first_name("[unclosed")


def test_build_query_without_filters_selects_all():
    query, parameters = build_query()

    assert query == "SELECT * FROM c"
    assert parameters == []


def test_build_query_ands_filters():
    query, parameters = build_query(by_kind(), by_first_name("jo"))

    assert query == 'SELECT * FROM c WHERE (c.kind = @kind) AND (RegexMatch(c.firstName, @firstName, "i"))'
    assert parameters == [
        {"name": "@kind", "value": "employee"},
        {"name": "@firstName", "value": "jo"},
    ]


def test_build_query_composes_external_filters():
    city = QueryFilter(clause="c.city = @city", parameters=[{"name": "@city", "value": "Ottawa"}])

    query, parameters = build_query(by_first_name("jo"), city)

    assert query.endswith("AND (c.city = @city)")
    assert parameters[-1] == {"name": "@city", "value": "Ottawa"}


def test_build_query_rejects_duplicate_parameters():
    with pytest.raises(ValueError, match="Duplicate query parameter"):
        build_query(by_first_name("jo"), by_first_name("an"))
