"""
Fluent query builder.

Sugar over QueryOptions:

    query().type("person").search("john").sort_by("name", "desc").limit(10).build()
"""

from typing import Any

from overcontext.core.types import QueryOptions, SortDirection, SortOption


class QueryBuilder:
    """Accumulates query options; ``build`` returns a fresh QueryOptions."""

    def __init__(self):
        self._options: dict[str, Any] = {}

    def type(self, entity_type: str | list[str]) -> "QueryBuilder":
        self._options["type"] = entity_type
        return self

    def namespace(self, namespace: str | list[str]) -> "QueryBuilder":
        self._options["namespace"] = namespace
        return self

    def ids(self, ids: list[str]) -> "QueryBuilder":
        self._options["ids"] = list(ids)
        return self

    def search(self, text: str, fields: list[str] | None = None) -> "QueryBuilder":
        """Add text search, optionally over extra fields besides ``name``."""
        self._options["search"] = text
        if fields is not None:
            self._options["search_fields"] = list(fields)
        return self

    def case_sensitive(self, enabled: bool = True) -> "QueryBuilder":
        self._options["case_sensitive"] = enabled
        return self

    def sort_by(self, field: str, direction: SortDirection = "asc") -> "QueryBuilder":
        """Append a sort key; earlier keys take precedence."""
        sort = self._options.setdefault("sort", [])
        sort.append(SortOption(field=field, direction=direction))
        return self

    def limit(self, n: int) -> "QueryBuilder":
        self._options["limit"] = n
        return self

    def offset(self, n: int) -> "QueryBuilder":
        self._options["offset"] = n
        return self

    def page(self, page_number: int, page_size: int) -> "QueryBuilder":
        """Set limit and offset for a 1-based page."""
        self._options["limit"] = page_size
        self._options["offset"] = (page_number - 1) * page_size
        return self

    def build(self) -> QueryOptions:
        options = dict(self._options)
        if "sort" in options:
            options["sort"] = list(options["sort"])
        return QueryOptions(**options)


def query() -> QueryBuilder:
    """Start building a query."""
    return QueryBuilder()
