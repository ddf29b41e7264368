"""
Storage Provider contract.

Every backend implements this interface; higher layers (namespace resolver,
search engine, context API) only ever touch storage through it.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import BaseEntity, EntityFilter, EntityLike, EntityRef


def next_timestamp(previous: datetime | None = None) -> datetime:
    """Current time, strictly later than ``previous``."""
    if previous is None:
        return datetime.now()
    now = datetime.now(previous.tzinfo)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def filter_types(entity_filter: EntityFilter, registry: SchemaRegistry) -> list[str]:
    """Types named by a filter, or every registered type."""
    if entity_filter.type is None:
        return registry.types()
    if isinstance(entity_filter.type, str):
        return [entity_filter.type]
    return list(entity_filter.type)


def paginate(entities: list[BaseEntity], offset: int = 0, limit: int | None = None) -> list[BaseEntity]:
    """Apply offset, then limit."""
    if offset:
        entities = entities[offset:]
    if limit is not None:
        entities = entities[:limit]
    return entities


def apply_filter(entities: list[BaseEntity], entity_filter: EntityFilter) -> list[BaseEntity]:
    """
    Apply the in-memory part of a filter.

    Order: ids, name search (case-insensitive substring), offset, limit.
    """
    results = entities

    if entity_filter.ids:
        wanted = set(entity_filter.ids)
        results = [e for e in results if e.id in wanted]

    if entity_filter.search:
        needle = entity_filter.search.lower()
        results = [e for e in results if needle in e.name.lower()]

    return paginate(results, entity_filter.offset, entity_filter.limit)


class StorageProvider(ABC):
    """
    Generic storage provider.

    Implementations work with any entity type via the schema registry.
    ``save`` validates before persisting; a readonly provider rejects every
    write with ReadonlyStorageError before attempting any I/O.
    """

    name: str
    """Provider name (e.g. 'filesystem', 'memory')."""

    registry: SchemaRegistry

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable storage location."""

    # ==========================================
    # Lifecycle
    # ==========================================

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the backend for use."""

    @abstractmethod
    def dispose(self) -> None:
        """Release resources."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the storage is accessible."""

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ==========================================
    # Read Operations
    # ==========================================

    @abstractmethod
    def get(self, entity_type: str, entity_id: str, namespace: str | None = None) -> BaseEntity | None:
        """Get a single entity, or None if it does not exist."""

    @abstractmethod
    def get_all(self, entity_type: str, namespace: str | None = None) -> list[BaseEntity]:
        """Get every entity of a type. Unregistered types yield an empty list."""

    @abstractmethod
    def find(self, entity_filter: EntityFilter) -> list[BaseEntity]:
        """Find entities matching a filter."""

    @abstractmethod
    def exists(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        """Check whether an entity exists."""

    def count(self, entity_filter: EntityFilter) -> int:
        """Count entities matching a filter."""
        return len(self.find(entity_filter))

    # ==========================================
    # Write Operations
    # ==========================================

    @abstractmethod
    def save(self, entity: EntityLike, namespace: str | None = None) -> BaseEntity:
        """Create or update an entity. Returns the saved entity with fresh metadata."""

    @abstractmethod
    def delete(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        """Delete an entity. Returns True if it existed."""

    def save_batch(self, entities: Iterable[EntityLike], namespace: str | None = None) -> list[BaseEntity]:
        """Save several entities; all complete before this returns."""
        return [self.save(entity, namespace) for entity in entities]

    def delete_batch(self, refs: Sequence[EntityRef], namespace: str | None = None) -> int:
        """Delete several entities. Returns how many existed."""
        deleted = 0
        for ref in refs:
            if self.delete(ref.type, ref.id, namespace):
                deleted += 1
        return deleted

    # ==========================================
    # Namespace Operations
    # ==========================================

    @abstractmethod
    def list_namespaces(self) -> list[str]:
        """List namespaces holding data."""

    @abstractmethod
    def namespace_exists(self, namespace: str) -> bool:
        """Check whether a namespace exists."""

    @abstractmethod
    def list_types(self, namespace: str | None = None) -> list[str]:
        """List entity types that have data in a namespace."""
