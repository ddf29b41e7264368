"""
API Layer - the caller-facing entity API.

ContextAPI → CRUD with a default namespace and id generation
SearchEngine → filter, sort and paginate over any provider
QueryBuilder → fluent construction of QueryOptions
"""

from overcontext.api.context import ContextAPI, create_typed_api
from overcontext.api.query import QueryBuilder, query
from overcontext.api.search import SearchEngine
from overcontext.api.slug import generate_unique_id, slugify

__all__ = [
    "ContextAPI",
    "create_typed_api",
    "QueryBuilder",
    "query",
    "SearchEngine",
    "generate_unique_id",
    "slugify",
]
