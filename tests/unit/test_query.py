"""Tests for the fluent query builder."""

from overcontext.api.query import QueryBuilder, query
from overcontext.core.types import QueryOptions, SortOption


class TestQueryBuilder:
    def test_empty_build(self):
        assert query().build() == QueryOptions()

    def test_chained_options(self):
        options = (
            query()
            .type("person")
            .namespace(["work", "shared"])
            .search("john", fields=["company"])
            .case_sensitive()
            .limit(10)
            .offset(5)
            .build()
        )

        assert options.type == "person"
        assert options.namespace == ["work", "shared"]
        assert options.search == "john"
        assert options.search_fields == ["company"]
        assert options.case_sensitive is True
        assert options.limit == 10
        assert options.offset == 5

    def test_sort_keys_accumulate_in_order(self):
        options = query().sort_by("company").sort_by("name", "desc").build()

        assert options.sort == [
            SortOption(field="company", direction="asc"),
            SortOption(field="name", direction="desc"),
        ]

    def test_page(self):
        options = query().page(3, 25).build()

        assert options.limit == 25
        assert options.offset == 50

    def test_ids(self):
        ids = ["a", "b"]
        options = query().ids(ids).build()
        ids.append("c")

        assert options.ids == ["a", "b"]

    def test_builds_are_independent(self):
        builder = QueryBuilder().sort_by("name")
        first = builder.build()
        builder.sort_by("company")
        second = builder.build()

        assert len(first.sort) == 1
        assert len(second.sort) == 2
