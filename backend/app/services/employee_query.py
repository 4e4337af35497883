"""Composable Cosmos DB SQL filters for employee queries."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from app.models.employee import EMPLOYEE_KIND
from app.services.employee_validator import compile_name_pattern


class QueryFilter(BaseModel):
    """A WHERE-clause fragment plus the parameters it binds."""

    clause: str
    parameters: list[dict[str, Any]] = []


def by_kind(kind: str = EMPLOYEE_KIND) -> QueryFilter:
    return QueryFilter(clause="c.kind = @kind", parameters=[{"name": "@kind", "value": kind}])


def by_first_name(pattern: str) -> QueryFilter:
    # Rejects patterns the database would fail on later.
    compile_name_pattern(pattern)
    return QueryFilter(
        clause='RegexMatch(c.firstName, @firstName, "i")',
        parameters=[{"name": "@firstName", "value": pattern}],
    )


def build_query(*filters: QueryFilter) -> tuple[str, list[dict[str, Any]]]:
    """AND the given filters into a single parameterised SELECT."""
    parameters: list[dict[str, Any]] = []
    seen: set[str] = set()
    for query_filter in filters:
        for param in query_filter.parameters:
            if param["name"] in seen:
                raise ValueError(f"Duplicate query parameter: {param['name']}")
            seen.add(param["name"])
            parameters.append(param)

    query = "SELECT * FROM c"
    if filters:
        query += " WHERE " + " AND ".join(f"({f.clause})" for f in filters)
    return query, parameters
