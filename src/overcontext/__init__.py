"""
Overcontext

Schema-driven entity storage: register typed schemas, then read and write
entities through pluggable backends (memory, one-file-per-entity YAML, and a
hierarchical merge of context directories discovered up the directory tree).
"""

__version__ = "0.1.0"

from overcontext.api import ContextAPI, QueryBuilder, SearchEngine, create_typed_api, generate_unique_id, query, slugify
from overcontext.core import (
    DEFAULT_NAMESPACE,
    BaseEntity,
    EntityFilter,
    EntityNotFoundError,
    EntityRef,
    EntityValidationError,
    NamespaceConfig,
    NamespaceNotFoundError,
    NamespaceResolution,
    NoContextError,
    QueryOptions,
    QueryResult,
    ReadonlyStorageError,
    SchemaNotRegisteredError,
    SchemaRegistry,
    SearchLimitError,
    SortOption,
    StorageAccessError,
    StorageError,
    UnsafePathError,
    ValidationIssue,
    ValidationResult,
    create_entity_schema,
    settings,
)
from overcontext.discovery import (
    ContextRoot,
    DirectoryWalker,
    HierarchicalProvider,
    discover,
    discover_context_root,
    ensure_context_root,
)
from overcontext.namespace import LocatedEntity, MultiNamespaceContext, NamespaceResolver
from overcontext.storage import FileSystemProvider, MemoryProvider, ObservableProvider, StorageEvent, StorageProvider

__all__ = [
    "settings",
    # Entities and schemas
    "BaseEntity",
    "DEFAULT_NAMESPACE",
    "SchemaRegistry",
    "create_entity_schema",
    "ValidationIssue",
    "ValidationResult",
    # Queries
    "EntityFilter",
    "EntityRef",
    "QueryOptions",
    "QueryResult",
    "SortOption",
    "QueryBuilder",
    "query",
    # Storage
    "StorageProvider",
    "FileSystemProvider",
    "MemoryProvider",
    "ObservableProvider",
    "StorageEvent",
    # Discovery
    "ContextRoot",
    "DirectoryWalker",
    "HierarchicalProvider",
    "discover",
    "discover_context_root",
    "ensure_context_root",
    # Namespaces
    "NamespaceConfig",
    "NamespaceResolution",
    "NamespaceResolver",
    "MultiNamespaceContext",
    "LocatedEntity",
    # API
    "ContextAPI",
    "SearchEngine",
    "create_typed_api",
    "generate_unique_id",
    "slugify",
    # Errors
    "StorageError",
    "EntityNotFoundError",
    "EntityValidationError",
    "NamespaceNotFoundError",
    "NoContextError",
    "ReadonlyStorageError",
    "SchemaNotRegisteredError",
    "SearchLimitError",
    "StorageAccessError",
    "UnsafePathError",
]
