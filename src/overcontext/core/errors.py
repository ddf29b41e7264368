"""
Storage errors.

Every error raised by providers, the namespace layer and the search engine
derives from StorageError and carries a stable ``code`` so CLI and API
layers can render precise messages.
"""

from overcontext.core.types import ValidationIssue


class StorageError(Exception):
    """Base class for all storage errors."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class EntityNotFoundError(StorageError):
    """A mutation required an entity that does not exist."""

    code = "ENTITY_NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str, namespace: str | None = None):
        where = f" in {namespace}" if namespace else ""
        super().__init__(f"Entity not found: {entity_type}/{entity_id}{where}")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.namespace = namespace


class SchemaNotRegisteredError(StorageError):
    """An operation referenced a type with no registered schema."""

    code = "SCHEMA_NOT_REGISTERED"

    def __init__(self, entity_type: str):
        super().__init__(f"Schema not registered for type: {entity_type}")
        self.entity_type = entity_type


class EntityValidationError(StorageError):
    """An entity failed schema or custom validation on write."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, issues: list[ValidationIssue]):
        details = "; ".join(f"{i.path or '<root>'}: {i.message}" for i in issues)
        super().__init__(f"{message}: {details}" if details else message)
        self.issues = issues


class StorageAccessError(StorageError):
    """Underlying I/O failed, a root is missing, or access was denied."""

    code = "STORAGE_ACCESS_ERROR"


class UnsafePathError(StorageAccessError):
    """A caller-supplied path component would escape the storage root."""

    code = "UNSAFE_PATH"

    def __init__(self, component: str, value: str, reason: str):
        super().__init__(f"Invalid {component} {value!r}: {reason}")
        self.component = component
        self.value = value


class ReadonlyStorageError(StorageError):
    """A write was attempted against a readonly provider."""

    code = "READONLY_STORAGE"

    def __init__(self, location: str | None = None):
        where = f": {location}" if location else ""
        super().__init__(f"Storage is readonly{where}")
        self.location = location


class NamespaceNotFoundError(StorageError):
    """A namespace required by the caller does not exist."""

    code = "NAMESPACE_NOT_FOUND"

    def __init__(self, namespace: str):
        super().__init__(f"Namespace not found: {namespace}")
        self.namespace = namespace


class NoContextError(StorageError):
    """No context directory was discovered; nothing can be read or written."""

    code = "NO_CONTEXT"

    def __init__(self, start_dir: str | None = None):
        where = f" from {start_dir}" if start_dir else ""
        super().__init__(f"No context directories found{where}")
        self.start_dir = start_dir


class SearchLimitError(StorageError):
    """A search loaded more candidates than allowed."""

    code = "SEARCH_LIMIT_EXCEEDED"

    def __init__(self, count: int, limit: int):
        super().__init__(
            f"Search returned too many results ({count}). "
            "Please narrow your query by specifying types, namespaces, or search terms. "
            f"Maximum allowed: {limit} entities."
        )
        self.count = count
        self.limit = limit
