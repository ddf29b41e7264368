"""
Hierarchical Provider - read across a chain of context directories, write to one.

Read Strategy:
1. Point reads ask each directory closest-first and stop at the first hit
2. Scans merge every directory farthest-first into a map keyed by
   (type, id), so closer copies overwrite distant ones
3. Pagination is applied only after the merge

Write Strategy:
- Every write goes to the primary (level 0) directory; distant
  directories are never modified
"""

from collections.abc import Iterable, Sequence

from overcontext.core.config import get_logger
from overcontext.core.errors import NoContextError
from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import BaseEntity, EntityFilter, EntityLike, EntityRef
from overcontext.discovery.context_root import ContextRoot
from overcontext.storage.base import StorageProvider, paginate
from overcontext.storage.filesystem import FileSystemProvider

logger = get_logger("discovery.hierarchical")


def merge_closest_wins(layers: Iterable[list[BaseEntity]]) -> list[BaseEntity]:
    """
    Merge per-directory results given farthest first.

    Later layers overwrite earlier ones on (type, id) collision; first-seen
    order of keys is kept.
    """
    by_key: dict[tuple[str, str], BaseEntity] = {}
    for layer in layers:
        for entity in layer:
            by_key[(entity.type, entity.id)] = entity
    return list(by_key.values())


class HierarchicalProvider(StorageProvider):
    """Storage over a ContextRoot: many readonly directories, one writable primary."""

    name = "hierarchical"

    def __init__(self, context_root: ContextRoot, registry: SchemaRegistry, readonly: bool = False):
        """Initialize one reader per context directory plus the primary writer."""
        if not context_root.context_paths:
            raise NoContextError()

        self.context_root = context_root
        self.registry = registry
        self.readonly = readonly

        self.read_providers: list[FileSystemProvider] = []
        for path in context_root.context_paths:
            provider = FileSystemProvider(path, registry, create_if_missing=False, readonly=True)
            provider.initialize()
            self.read_providers.append(provider)

        self.primary_provider = FileSystemProvider(
            context_root.primary,
            registry,
            create_if_missing=True,
            readonly=readonly,
        )
        self.primary_provider.initialize()

        logger.debug(f"Hierarchical provider over {len(self.read_providers)} directories, primary {context_root.primary}")

    @property
    def location(self) -> str:
        return str(self.context_root.primary)

    # ============================================
    # Lifecycle
    # ============================================

    def initialize(self) -> None:
        pass

    def dispose(self) -> None:
        for provider in self.read_providers:
            provider.dispose()
        self.primary_provider.dispose()

    def is_available(self) -> bool:
        return self.primary_provider.is_available()

    # ============================================
    # Reads
    # ============================================

    def get(self, entity_type: str, entity_id: str, namespace: str | None = None) -> BaseEntity | None:
        for provider in self.read_providers:
            entity = provider.get(entity_type, entity_id, namespace)
            if entity is not None:
                return entity
        return None

    def get_all(self, entity_type: str, namespace: str | None = None) -> list[BaseEntity]:
        return merge_closest_wins(
            provider.get_all(entity_type, namespace)
            for provider in reversed(self.read_providers)
        )

    def find(self, entity_filter: EntityFilter) -> list[BaseEntity]:
        unpaged = entity_filter.model_copy(update={"offset": 0, "limit": None})
        merged = merge_closest_wins(
            provider.find(unpaged)
            for provider in reversed(self.read_providers)
        )
        return paginate(merged, entity_filter.offset, entity_filter.limit)

    def exists(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        return any(provider.exists(entity_type, entity_id, namespace) for provider in self.read_providers)

    # ============================================
    # Writes (primary only)
    # ============================================

    def save(self, entity: EntityLike, namespace: str | None = None) -> BaseEntity:
        return self.primary_provider.save(entity, namespace)

    def delete(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        return self.primary_provider.delete(entity_type, entity_id, namespace)

    def save_batch(self, entities: Iterable[EntityLike], namespace: str | None = None) -> list[BaseEntity]:
        return self.primary_provider.save_batch(entities, namespace)

    def delete_batch(self, refs: Sequence[EntityRef], namespace: str | None = None) -> int:
        return self.primary_provider.delete_batch(refs, namespace)

    # ============================================
    # Namespaces
    # ============================================

    def list_namespaces(self) -> list[str]:
        return list(self.context_root.all_namespaces)

    def namespace_exists(self, namespace: str) -> bool:
        return namespace in self.context_root.all_namespaces

    def list_types(self, namespace: str | None = None) -> list[str]:
        if namespace is None:
            return list(self.context_root.all_types)

        types: list[str] = []
        for provider in self.read_providers:
            types.extend(t for t in provider.list_types(namespace) if t not in types)
        return types
