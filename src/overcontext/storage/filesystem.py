"""
Filesystem Provider - one YAML file per entity.

Entities are organized by namespace and type:

<base_path>/[<namespace>/]<plural_name>/<id>.yaml

- The default namespace lives directly under base_path
- ``type``, ``source`` and ``namespace`` are derived from the file location
  and are never written to the file
- The filename stem is the authoritative entity id
- Corrupt, malicious or invalid files are skipped with a warning so that a
  single bad file never breaks a listing

File Format:
id: john-doe
name: John Doe
created_at: ISO timestamp
updated_at: ISO timestamp
<any extra fields>
"""

from pathlib import Path
from typing import Literal

import yaml

from overcontext.core.config import settings, get_logger
from overcontext.core.errors import (
    EntityValidationError,
    ReadonlyStorageError,
    SchemaNotRegisteredError,
    StorageAccessError,
    UnsafePathError,
)
from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import DEFAULT_NAMESPACE, BaseEntity, EntityFilter, EntityLike
from overcontext.storage.base import StorageProvider, apply_filter, filter_types, next_timestamp

logger = get_logger("storage.filesystem")

ENTITY_EXTENSIONS = (".yaml", ".yml")

# Derived from the file location, never persisted
DERIVED_FIELDS = {"type", "source", "namespace"}


def _is_reserved_key(key: str) -> bool:
    # __proto__ and other dunder keys have no business in an entity record
    return key.startswith("__") and key.endswith("__")


class FileSystemProvider(StorageProvider):
    """
    Single-directory, file-per-entity storage.

    Every path component derived from caller input is sanitized, and every
    composed path is checked to resolve under ``base_path``.
    """

    name = "filesystem"

    def __init__(
        self,
        base_path: Path | str,
        registry: SchemaRegistry,
        create_if_missing: bool = True,
        extension: Literal[".yaml", ".yml"] | None = None,
        readonly: bool = False,
        default_namespace: str | None = None,
    ):
        """Initialize the filesystem provider."""
        self.base_path = Path(base_path)
        self.registry = registry
        self.create_if_missing = create_if_missing
        self.extension = extension or settings.file_extension
        self.readonly = readonly
        self.default_namespace = default_namespace

        if self.extension not in ENTITY_EXTENSIONS:
            raise ValueError(f"Unsupported extension: {self.extension}")

    @property
    def location(self) -> str:
        return str(self.base_path)

    # ============================================
    # Path safety
    # ============================================

    def _sanitize(self, value: str, component: str) -> str:
        """Reject anything that could change which directory a path points to."""
        if not value:
            raise UnsafePathError(component, value, "cannot be empty")
        if "/" in value or "\\" in value or ".." in value:
            raise UnsafePathError(component, value, 'cannot contain path separators or ".."')
        if "\0" in value:
            raise UnsafePathError(component, value, "cannot contain null bytes")
        if any(ord(char) < 0x20 or ord(char) == 0x7F for char in value):
            raise UnsafePathError(component, value, "cannot contain control characters")
        return value

    def _verify_within_base(self, path: Path) -> Path:
        """Ensure a composed path resolves under base_path, following symlinks."""
        base = self.base_path.resolve()
        target = path.resolve()
        if target != base and base not in target.parents:
            logger.warning(f"Path traversal attempt detected: {path} resolves to {target}")
            raise UnsafePathError("path", str(path), "resolves outside the storage root")
        return path

    def _resolve_namespace(self, namespace: str | None) -> str | None:
        return namespace if namespace is not None else self.default_namespace

    def _namespace_root(self, namespace: str | None) -> Path:
        if namespace is None or namespace == DEFAULT_NAMESPACE:
            return self.base_path
        root = self.base_path / self._sanitize(namespace, "namespace")
        return self._verify_within_base(root)

    def _entity_dir(self, entity_type: str, namespace: str | None) -> Path:
        dir_name = self.registry.get_directory_name(entity_type)
        if not dir_name:
            raise SchemaNotRegisteredError(entity_type)

        root = self._namespace_root(namespace)
        directory = root / self._sanitize(dir_name, "directory name")
        return self._verify_within_base(directory)

    def _entity_path(self, entity_type: str, entity_id: str, namespace: str | None) -> Path:
        """
        Path of an entity's file.

        An existing file with either extension is preferred; otherwise the
        configured extension is used.
        """
        safe_id = self._sanitize(entity_id, "id")
        directory = self._entity_dir(entity_type, namespace)

        preferred = directory / f"{safe_id}{self.extension}"
        if not preferred.exists():
            for ext in ENTITY_EXTENSIONS:
                candidate = directory / f"{safe_id}{ext}"
                if candidate.exists():
                    preferred = candidate
                    break

        return self._verify_within_base(preferred)

    def _ensure_dir(self, directory: Path) -> None:
        if directory.is_dir():
            return
        if not self.create_if_missing:
            raise StorageAccessError(f"Directory does not exist: {directory}")
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageAccessError(f"Failed to create {directory}", e) from e

    # ============================================
    # Record I/O
    # ============================================

    def _read_entity(self, path: Path, entity_type: str, namespace: str | None) -> BaseEntity | None:
        """
        Read and validate one entity file.

        Returns None when the file is missing, unparseable, not a mapping,
        carries reserved keys, or fails schema validation.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageAccessError(f"Failed to read {path}", e) from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            logger.warning(f"Invalid YAML at {path}: {e}")
            return None

        if not isinstance(data, dict) or not all(isinstance(key, str) for key in data):
            logger.warning(f"Skipping {path}: content is not a record")
            return None

        if any(_is_reserved_key(key) for key in data):
            logger.warning(f"Skipping {path}: reserved key detected")
            return None

        data["id"] = path.stem
        data["source"] = str(path)
        data["namespace"] = namespace or DEFAULT_NAMESPACE

        result = self.registry.validate_as(entity_type, data)
        if not result.success:
            logger.warning(f"Invalid entity at {path}: {result.errors}")
            return None

        return result.data

    # ============================================
    # Lifecycle
    # ============================================

    def initialize(self) -> None:
        if self.create_if_missing and not self.readonly:
            self._ensure_dir(self.base_path)

        if not self.base_path.is_dir():
            raise StorageAccessError(f"Context path does not exist: {self.base_path}")

    def dispose(self) -> None:
        pass

    def is_available(self) -> bool:
        return self.base_path.is_dir()

    # ============================================
    # Reads
    # ============================================

    def get(self, entity_type: str, entity_id: str, namespace: str | None = None) -> BaseEntity | None:
        ns = self._resolve_namespace(namespace)
        path = self._entity_path(entity_type, entity_id, ns)
        return self._read_entity(path, entity_type, ns)

    def get_all(self, entity_type: str, namespace: str | None = None) -> list[BaseEntity]:
        ns = self._resolve_namespace(namespace)

        try:
            directory = self._entity_dir(entity_type, ns)
        except SchemaNotRegisteredError:
            return []

        if not directory.is_dir():
            return []

        entities = []
        for path in sorted(directory.iterdir()):
            if path.suffix not in ENTITY_EXTENSIONS or not path.is_file():
                continue
            entity = self._read_entity(path, entity_type, ns)
            if entity is not None:
                entities.append(entity)

        return entities

    def find(self, entity_filter: EntityFilter) -> list[BaseEntity]:
        ns = self._resolve_namespace(entity_filter.namespace)

        results: list[BaseEntity] = []
        for entity_type in filter_types(entity_filter, self.registry):
            results.extend(self.get_all(entity_type, ns))

        return apply_filter(results, entity_filter)

    def exists(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        ns = self._resolve_namespace(namespace)
        return self._entity_path(entity_type, entity_id, ns).is_file()

    # ============================================
    # Writes
    # ============================================

    def save(self, entity: EntityLike, namespace: str | None = None) -> BaseEntity:
        """
        Validate and write an entity.

        ``created_at`` of an existing file is preserved; ``updated_at``
        always advances.
        """
        if self.readonly:
            raise ReadonlyStorageError(self.location)

        result = self.registry.validate(entity)
        if not result.success or result.data is None:
            raise EntityValidationError("Entity validation failed", result.errors)
        validated = result.data

        ns = self._resolve_namespace(namespace)
        directory = self._entity_dir(validated.type, ns)
        path = self._entity_path(validated.type, validated.id, ns)

        existing = self._read_entity(path, validated.type, ns) if path.exists() else None
        now = next_timestamp(existing.updated_at if existing else validated.updated_at)
        created_at = (existing.created_at if existing else None) or validated.created_at or now

        record = validated.model_dump(mode="json", exclude=DERIVED_FIELDS, exclude_none=True)
        record["created_at"] = created_at.isoformat()
        record["updated_at"] = now.isoformat()

        self._ensure_dir(directory)
        try:
            path.write_text(
                yaml.safe_dump(record, sort_keys=False, allow_unicode=True),
                encoding="utf-8",
            )
        except OSError as e:
            raise StorageAccessError(f"Failed to write {path}", e) from e

        logger.info(f"Wrote {validated.type}/{validated.id} to {path}")
        return validated.model_copy(update={
            "created_at": created_at,
            "updated_at": now,
            "source": str(path),
            "namespace": ns or DEFAULT_NAMESPACE,
        })

    def delete(self, entity_type: str, entity_id: str, namespace: str | None = None) -> bool:
        if self.readonly:
            raise ReadonlyStorageError(self.location)

        ns = self._resolve_namespace(namespace)
        path = self._entity_path(entity_type, entity_id, ns)

        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageAccessError(f"Failed to delete {path}", e) from e

        logger.info(f"Deleted {entity_type}/{entity_id} at {path}")
        return True

    # ============================================
    # Namespaces
    # ============================================

    def _list_directory_types(self, directory: Path) -> list[str]:
        """Registered types whose directories exist under ``directory``."""
        if not directory.is_dir():
            return []

        types = []
        for child in sorted(directory.iterdir()):
            if not child.is_dir():
                continue
            entity_type = self.registry.get_type_from_directory(child.name)
            if entity_type:
                types.append(entity_type)
        return types

    def list_namespaces(self) -> list[str]:
        """Top-level directories holding at least one entity-type directory."""
        if not self.base_path.is_dir():
            return []

        namespaces = []
        for child in sorted(self.base_path.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            # Type directories at the root belong to the default namespace
            if self.registry.get_type_from_directory(child.name):
                continue
            if self._list_directory_types(child):
                namespaces.append(child.name)

        return namespaces

    def namespace_exists(self, namespace: str) -> bool:
        return self._namespace_root(namespace).is_dir()

    def list_types(self, namespace: str | None = None) -> list[str]:
        root = self._namespace_root(self._resolve_namespace(namespace))
        return self._list_directory_types(root)
