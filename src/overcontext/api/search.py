"""
Search Engine - generic filter, sort and paginate over any provider.

Search Pipeline:
1. Full-scan every (type, namespace) pair with ``get_all``
2. Refuse candidate sets larger than ``max_entities``
3. Filter by ids, then by text (``name`` plus any requested fields)
4. Sort by each key in turn; missing values sort last ascending
5. Paginate (offset, then limit)

``total`` is always the filtered count before pagination.
"""

from collections.abc import Sequence
from datetime import datetime
from functools import cmp_to_key
from typing import Any

from overcontext.core.config import settings, get_logger
from overcontext.core.errors import SearchLimitError
from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import BaseEntity, QueryOptions, QueryResult, SortOption
from overcontext.storage.base import StorageProvider

logger = get_logger("api.search")

DEFAULT_SORT = [SortOption(field="name", direction="asc")]


def _as_list(value: str | Sequence[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _field_value(entity: BaseEntity, field: str) -> Any:
    # Declared fields by attribute; open fields by key so names like "copy" or
    # "schema" never resolve to model methods
    if field in type(entity).model_fields:
        return getattr(entity, field)
    return (entity.model_extra or {}).get(field)


def _text_match(text: Any, needle: str, case_sensitive: bool) -> bool:
    if not isinstance(text, str) or not text:
        return False
    if case_sensitive:
        return needle in text
    return needle.lower() in text.lower()


def matches_search(entity: BaseEntity, search: str, search_fields: list[str], case_sensitive: bool) -> bool:
    """Match ``name`` always, then string fields or string items of list fields."""
    if _text_match(entity.name, search, case_sensitive):
        return True

    for field in search_fields:
        value = _field_value(entity, field)
        if isinstance(value, str) and _text_match(value, search, case_sensitive):
            return True
        if isinstance(value, (list, tuple)):
            if any(_text_match(item, search, case_sensitive) for item in value):
                return True

    return False


def _compare_values(a: Any, b: Any) -> int:
    """Compare two present values: strings by collation, dates by instant."""
    if isinstance(a, str) and isinstance(b, str):
        left, right = (a.casefold(), a), (b.casefold(), b)
    elif isinstance(a, datetime) and isinstance(b, datetime):
        left, right = a.timestamp(), b.timestamp()
    else:
        left, right = a, b

    try:
        if left < right:
            return -1
        return 1 if left > right else 0
    except TypeError:
        # Mixed types order by type name, then by text form
        left, right = (type(a).__name__, str(a)), (type(b).__name__, str(b))
        if left < right:
            return -1
        return 1 if left > right else 0


def sort_entities(entities: list[BaseEntity], sort: list[SortOption]) -> list[BaseEntity]:
    """Stable multi-key sort; None sorts last ascending and first descending."""

    def compare(a: BaseEntity, b: BaseEntity) -> int:
        for option in sort:
            a_value = _field_value(a, option.field)
            b_value = _field_value(b, option.field)
            ascending = option.direction == "asc"

            if a_value is None and b_value is None:
                continue
            if a_value is None:
                return 1 if ascending else -1
            if b_value is None:
                return -1 if ascending else 1

            result = _compare_values(a_value, b_value)
            if result:
                return result if ascending else -result
        return 0

    return sorted(entities, key=cmp_to_key(compare))


class SearchEngine:
    """Runs QueryOptions against a StorageProvider."""

    def __init__(
        self,
        provider: StorageProvider,
        registry: SchemaRegistry,
        default_namespace: str | None = None,
        max_entities: int | None = None,
    ):
        self.provider = provider
        self.registry = registry
        self.default_namespace = default_namespace
        self.max_entities = max_entities if max_entities is not None else settings.max_search_entities

    def _collect(self, options: QueryOptions) -> list[BaseEntity]:
        types = _as_list(options.type) or self.registry.types()
        namespaces: list[str | None] = _as_list(options.namespace) or [self.default_namespace]

        candidates: list[BaseEntity] = []
        for entity_type in types:
            for namespace in namespaces:
                candidates.extend(self.provider.get_all(entity_type, namespace))

        if len(candidates) > self.max_entities:
            raise SearchLimitError(len(candidates), self.max_entities)

        return candidates

    def search(self, options: QueryOptions | None = None, **kwargs: Any) -> QueryResult:
        """Run a query given as QueryOptions or as keyword arguments."""
        if options is None:
            options = QueryOptions(**kwargs)

        entities = self._collect(options)

        if options.ids:
            wanted = set(options.ids)
            entities = [e for e in entities if e.id in wanted]

        if options.search:
            entities = [
                e for e in entities
                if matches_search(e, options.search, options.search_fields, options.case_sensitive)
            ]

        entities = sort_entities(entities, options.sort or DEFAULT_SORT)

        total = len(entities)
        start = options.offset
        end = start + options.limit if options.limit is not None else None
        items = entities[start:end]

        logger.debug(f"Search matched {total} entities, returning {len(items)}")
        return QueryResult(
            items=items,
            total=total,
            has_more=start + options.limit < total if options.limit is not None else False,
            query=options,
        )

    def quick_search(
        self,
        text: str,
        entity_type: str | list[str] | None = None,
        namespace: str | list[str] | None = None,
        limit: int | None = None,
    ) -> list[BaseEntity]:
        """Search by name and return the matching entities only."""
        options = QueryOptions(type=entity_type, namespace=namespace, limit=limit, search=text)
        return self.search(options).items
