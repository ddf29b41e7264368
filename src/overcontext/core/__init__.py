"""
Core module - Configuration, types, errors, and the schema registry.
"""

from overcontext.core.config import settings, get_logger, setup_logging
from overcontext.core.errors import (
    EntityNotFoundError,
    EntityValidationError,
    NamespaceNotFoundError,
    NoContextError,
    ReadonlyStorageError,
    SchemaNotRegisteredError,
    SearchLimitError,
    StorageAccessError,
    StorageError,
    UnsafePathError,
)
from overcontext.core.schema import (
    ModelValidator,
    RegisteredSchema,
    SchemaRegistry,
    Validator,
    create_entity_schema,
    derive_plural_name,
)
from overcontext.core.types import (
    DEFAULT_NAMESPACE,
    BaseEntity,
    EntityFilter,
    EntityRef,
    NamespaceConfig,
    NamespaceReference,
    NamespaceResolution,
    QueryOptions,
    QueryResult,
    SortOption,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
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
    "ModelValidator",
    "RegisteredSchema",
    "SchemaRegistry",
    "Validator",
    "create_entity_schema",
    "derive_plural_name",
    "DEFAULT_NAMESPACE",
    "BaseEntity",
    "EntityFilter",
    "EntityRef",
    "NamespaceConfig",
    "NamespaceReference",
    "NamespaceResolution",
    "QueryOptions",
    "QueryResult",
    "SortOption",
    "ValidationIssue",
    "ValidationResult",
]
