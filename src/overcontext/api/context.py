"""
Context API - the main entry point for entity operations.

Wraps a StorageProvider and its SchemaRegistry with:
- a default namespace applied when a call names none
- id generation for ``create``
- read-modify-write ``update`` and ``upsert``
- search via the SearchEngine
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from overcontext.core.config import get_logger
from overcontext.core.errors import EntityNotFoundError, EntityValidationError
from overcontext.core.schema import SchemaRegistry, Validator
from overcontext.core.types import (
    BaseEntity,
    EntityLike,
    QueryOptions,
    QueryResult,
    ValidationIssue,
    entity_to_dict,
)
from overcontext.api.search import SearchEngine
from overcontext.api.slug import generate_unique_id as unique_slug, slugify
from overcontext.storage.base import StorageProvider

logger = get_logger("api.context")

# Fields an update can never change
IMMUTABLE_FIELDS = ("id", "type", "created_at")


class ContextAPI:
    """Typed-by-registry access to entities in a storage provider."""

    def __init__(
        self,
        provider: StorageProvider,
        registry: SchemaRegistry | None = None,
        default_namespace: str | None = None,
    ):
        self.provider = provider
        self.registry = registry or provider.registry
        self.default_namespace = default_namespace
        self.search_engine = SearchEngine(provider, self.registry, default_namespace=default_namespace)

    def _namespace(self, namespace: str | None) -> str | None:
        return namespace if namespace is not None else self.default_namespace

    # ============================================
    # Reads
    # ============================================

    def get(self, entity_type: str, entity_id: str, namespace: str | None = None) -> BaseEntity | None:
        return self.provider.get(entity_type, entity_id, self._namespace(namespace))

    def get_all(self, entity_type: str, namespace: str | None = None) -> list[BaseEntity]:
        return self.provider.get_all(entity_type, self._namespace(namespace))

    def exists(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        return self.provider.exists(entity_type, entity_id, self._namespace(namespace))

    # ============================================
    # Writes
    # ============================================

    def create(
        self,
        entity_type: str,
        data: Mapping[str, Any],
        id: str | None = None,
        namespace: str | None = None,
        generate_unique_id: bool = True,
    ) -> BaseEntity:
        """
        Create a new entity of ``entity_type`` from ``data``.

        Without an explicit ``id`` the id is the slug of ``data["name"]``;
        with ``generate_unique_id`` a numeric suffix avoids collisions.
        """
        ns = self._namespace(namespace)
        name = str(data.get("name", ""))

        if id:
            entity_id = id
        elif not slugify(name):
            raise EntityValidationError(
                "Cannot derive an id from the entity name",
                [ValidationIssue("name", f"{name!r} has no usable characters")],
            )
        elif generate_unique_id:
            entity_id = unique_slug(name, lambda candidate: self.provider.exists(entity_type, candidate, ns))
        else:
            entity_id = slugify(name)

        now = datetime.now()
        entity = {
            **data,
            "id": entity_id,
            "type": entity_type,
            "created_at": now,
            "updated_at": now,
        }

        saved = self.provider.save(entity, ns)
        logger.debug(f"Created {entity_type}/{entity_id}")
        return saved

    def update(
        self,
        entity_type: str,
        entity_id: str,
        updates: Mapping[str, Any],
        namespace: str | None = None,
    ) -> BaseEntity:
        """Merge ``updates`` into an existing entity. Raises EntityNotFoundError if absent."""
        ns = self._namespace(namespace)
        existing = self.provider.get(entity_type, entity_id, ns)
        if existing is None:
            raise EntityNotFoundError(entity_type, entity_id, ns)

        changes = {key: value for key, value in updates.items() if key not in IMMUTABLE_FIELDS}
        updated = {
            **entity_to_dict(existing),
            **changes,
            "id": entity_id,
            "type": entity_type,
            "updated_at": datetime.now(),
        }

        return self.provider.save(updated, ns)

    def upsert(self, entity_type: str, entity: EntityLike, namespace: str | None = None) -> BaseEntity:
        """Create or fully replace an entity, keeping ``created_at`` of an existing one."""
        ns = self._namespace(namespace)
        data = entity_to_dict(entity)
        if not data.get("id"):
            raise EntityValidationError(
                "Cannot upsert an entity without an id",
                [ValidationIssue("id", "Entity id is required")],
            )
        existing = self.provider.get(entity_type, data["id"], ns)

        now = datetime.now()
        merged = {
            **(entity_to_dict(existing) if existing else {}),
            **data,
            "type": entity_type,
            "created_at": existing.created_at if existing and existing.created_at else now,
            "updated_at": now,
        }

        return self.provider.save(merged, ns)

    def delete(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        return self.provider.delete(entity_type, entity_id, self._namespace(namespace))

    # ============================================
    # Registry and Namespaces
    # ============================================

    def types(self) -> list[str]:
        """All registered entity types."""
        return self.registry.types()

    def with_namespace(self, namespace: str) -> "ContextAPI":
        """A context sharing this provider with a different default namespace."""
        return ContextAPI(self.provider, self.registry, default_namespace=namespace)

    # ============================================
    # Search
    # ============================================

    def search(self, options: QueryOptions | None = None, **kwargs: Any) -> QueryResult:
        return self.search_engine.search(options, **kwargs)

    def quick_search(
        self,
        text: str,
        entity_type: str | list[str] | None = None,
        namespace: str | list[str] | None = None,
        limit: int | None = None,
    ) -> list[BaseEntity]:
        return self.search_engine.quick_search(text, entity_type=entity_type, namespace=namespace, limit=limit)


def create_typed_api(
    schemas: Mapping[str, type[BaseModel] | Validator],
    provider: StorageProvider,
    default_namespace: str | None = None,
    plural_names: Mapping[str, str] | None = None,
) -> ContextAPI:
    """Register ``schemas`` on the provider's registry and return a ContextAPI over it."""
    provider.registry.register_all(schemas, plural_names)
    return ContextAPI(provider, provider.registry, default_namespace=default_namespace)
