"""
Observable storage - wrap any provider and publish change events.

Handlers receive a StorageEvent after each successful write. A failing
handler is logged and never affects the write or the other handlers.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from overcontext.core.config import get_logger
from overcontext.core.types import BaseEntity, EntityFilter, EntityLike, EntityRef, entity_to_dict
from overcontext.storage.base import StorageProvider

logger = get_logger("storage.observable")


StorageEventType = Literal[
    "entity:created",
    "entity:updated",
    "entity:deleted",
    "batch:saved",
    "batch:deleted",
    "storage:initialized",
    "storage:disposed",
]


@dataclass
class StorageEvent:
    """A change published by an ObservableProvider."""

    type: StorageEventType
    timestamp: datetime = field(default_factory=datetime.now)
    namespace: str | None = None

    entity_type: str | None = None
    entity_id: str | None = None
    entity: BaseEntity | None = None
    previous_entity: BaseEntity | None = None
    """Prior state, for entity:updated."""

    entities: list[BaseEntity] = field(default_factory=list)
    """Saved entities, for batch:saved."""

    refs: list[EntityRef] = field(default_factory=list)
    deleted_count: int = 0


StorageEventHandler = Callable[[StorageEvent], None]


class ObservableProvider(StorageProvider):
    """Decorates a provider with event subscription. Reads pass straight through."""

    def __init__(self, provider: StorageProvider):
        self.provider = provider
        self.registry = provider.registry
        self.name = provider.name
        self._handlers: list[StorageEventHandler] = []

    @property
    def location(self) -> str:
        return self.provider.location

    def subscribe(self, handler: StorageEventHandler) -> Callable[[], None]:
        """Register a handler. Returns a function that unsubscribes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def _emit(self, event: StorageEvent) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Storage event handler failed for {event.type}")

    # ============================================
    # Lifecycle
    # ============================================

    def initialize(self) -> None:
        self.provider.initialize()
        self._emit(StorageEvent(type="storage:initialized"))

    def dispose(self) -> None:
        self._emit(StorageEvent(type="storage:disposed"))
        self.provider.dispose()

    def is_available(self) -> bool:
        return self.provider.is_available()

    # ============================================
    # Reads
    # ============================================

    def get(self, entity_type: str, entity_id: str, namespace: str | None = None) -> BaseEntity | None:
        return self.provider.get(entity_type, entity_id, namespace)

    def get_all(self, entity_type: str, namespace: str | None = None) -> list[BaseEntity]:
        return self.provider.get_all(entity_type, namespace)

    def find(self, entity_filter: EntityFilter) -> list[BaseEntity]:
        return self.provider.find(entity_filter)

    def exists(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        return self.provider.exists(entity_type, entity_id, namespace)

    def count(self, entity_filter: EntityFilter) -> int:
        return self.provider.count(entity_filter)

    # ============================================
    # Writes
    # ============================================

    def save(self, entity: EntityLike, namespace: str | None = None) -> BaseEntity:
        data = entity_to_dict(entity)
        previous = None
        if data.get("type") and data.get("id"):
            previous = self.provider.get(data["type"], data["id"], namespace)

        saved = self.provider.save(entity, namespace)

        self._emit(StorageEvent(
            type="entity:updated" if previous else "entity:created",
            namespace=namespace,
            entity_type=saved.type,
            entity_id=saved.id,
            entity=saved,
            previous_entity=previous,
        ))
        return saved

    def delete(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        deleted = self.provider.delete(entity_type, entity_id, namespace)

        if deleted:
            self._emit(StorageEvent(
                type="entity:deleted",
                namespace=namespace,
                entity_type=entity_type,
                entity_id=entity_id,
            ))
        return deleted

    def save_batch(self, entities: Iterable[EntityLike], namespace: str | None = None) -> list[BaseEntity]:
        saved = self.provider.save_batch(entities, namespace)
        self._emit(StorageEvent(type="batch:saved", namespace=namespace, entities=saved))
        return saved

    def delete_batch(self, refs: Sequence[EntityRef], namespace: str | None = None) -> int:
        count = self.provider.delete_batch(refs, namespace)
        self._emit(StorageEvent(
            type="batch:deleted",
            namespace=namespace,
            refs=list(refs),
            deleted_count=count,
        ))
        return count

    # ============================================
    # Namespaces
    # ============================================

    def list_namespaces(self) -> list[str]:
        return self.provider.list_namespaces()

    def namespace_exists(self, namespace: str) -> bool:
        return self.provider.namespace_exists(namespace)

    def list_types(self, namespace: str | None = None) -> list[str]:
        return self.provider.list_types(namespace)
