"""
Memory Provider - in-process storage keyed namespace → type → id.

Every value crossing the provider boundary is deep-copied, so neither the
caller's object nor a returned object ever aliases stored state.
"""

from collections.abc import Iterable

from overcontext.core.config import get_logger
from overcontext.core.errors import (
    EntityValidationError,
    ReadonlyStorageError,
    SchemaNotRegisteredError,
)
from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import DEFAULT_NAMESPACE, BaseEntity, EntityFilter, EntityLike
from overcontext.storage.base import StorageProvider, apply_filter, filter_types, next_timestamp

logger = get_logger("storage.memory")


class MemoryProvider(StorageProvider):
    """In-memory storage, mostly for tests and ephemeral contexts."""

    name = "memory"

    def __init__(
        self,
        registry: SchemaRegistry,
        readonly: bool = False,
        default_namespace: str | None = None,
        initial_data: Iterable[BaseEntity] = (),
    ):
        """Initialize the memory provider, optionally seeded with entities."""
        self.registry = registry
        self.readonly = readonly
        self.default_namespace = default_namespace
        self._store: dict[str, dict[str, dict[str, BaseEntity]]] = {}

        for entity in initial_data:
            ns = self._resolve_namespace(entity.namespace)
            self._type_store(ns, entity.type)[entity.id] = entity.model_copy(deep=True)

    @property
    def location(self) -> str:
        return "in-memory"

    def _resolve_namespace(self, namespace: str | None) -> str:
        return namespace or self.default_namespace or DEFAULT_NAMESPACE

    def _type_store(self, namespace: str, entity_type: str) -> dict[str, BaseEntity]:
        """Type store for writes, created on demand."""
        return self._store.setdefault(namespace, {}).setdefault(entity_type, {})

    def _peek(self, namespace: str, entity_type: str) -> dict[str, BaseEntity]:
        """Type store for reads; never creates anything."""
        return self._store.get(namespace, {}).get(entity_type, {})

    def _require_type(self, entity_type: str) -> None:
        if not self.registry.has(entity_type):
            raise SchemaNotRegisteredError(entity_type)

    # ============================================
    # Lifecycle
    # ============================================

    def initialize(self) -> None:
        pass

    def dispose(self) -> None:
        self._store.clear()

    def is_available(self) -> bool:
        return True

    # ============================================
    # Reads
    # ============================================

    def get(self, entity_type: str, entity_id: str, namespace: str | None = None) -> BaseEntity | None:
        self._require_type(entity_type)
        entity = self._peek(self._resolve_namespace(namespace), entity_type).get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    def get_all(self, entity_type: str, namespace: str | None = None) -> list[BaseEntity]:
        if not self.registry.has(entity_type):
            return []
        store = self._peek(self._resolve_namespace(namespace), entity_type)
        return [entity.model_copy(deep=True) for entity in store.values()]

    def find(self, entity_filter: EntityFilter) -> list[BaseEntity]:
        results: list[BaseEntity] = []
        for entity_type in filter_types(entity_filter, self.registry):
            results.extend(self.get_all(entity_type, entity_filter.namespace))
        return apply_filter(results, entity_filter)

    def exists(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        self._require_type(entity_type)
        return entity_id in self._peek(self._resolve_namespace(namespace), entity_type)

    # ============================================
    # Writes
    # ============================================

    def save(self, entity: EntityLike, namespace: str | None = None) -> BaseEntity:
        if self.readonly:
            raise ReadonlyStorageError(self.location)

        result = self.registry.validate(entity)
        if not result.success or result.data is None:
            raise EntityValidationError("Entity validation failed", result.errors)
        validated = result.data

        ns = self._resolve_namespace(namespace)
        store = self._type_store(ns, validated.type)
        existing = store.get(validated.id)

        now = next_timestamp(existing.updated_at if existing else validated.updated_at)
        saved = validated.model_copy(
            update={
                "namespace": ns,
                "created_at": (existing.created_at if existing else None) or validated.created_at or now,
                "updated_at": now,
            },
            deep=True,
        )

        store[validated.id] = saved
        logger.debug(f"Saved {validated.type}/{validated.id} in {ns}")
        return saved.model_copy(deep=True)

    def delete(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        if self.readonly:
            raise ReadonlyStorageError(self.location)

        self._require_type(entity_type)
        store = self._peek(self._resolve_namespace(namespace), entity_type)
        return store.pop(entity_id, None) is not None

    # ============================================
    # Namespaces
    # ============================================

    def list_namespaces(self) -> list[str]:
        return [ns for ns, types in self._store.items() if ns != DEFAULT_NAMESPACE and any(types.values())]

    def namespace_exists(self, namespace: str) -> bool:
        return namespace in self._store

    def list_types(self, namespace: str | None = None) -> list[str]:
        types = self._store.get(self._resolve_namespace(namespace), {})
        return [entity_type for entity_type, entities in types.items() if entities]
