"""
Core type definitions for Overcontext.

These types describe the shared data model:
- BaseEntity, the open record every entity type extends
- Validation results produced by schema validators
- Filters and query options consumed by providers and the search engine
- Namespace configuration and resolution
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_NAMESPACE = "_default"
"""Namespace key used when none is given. Filesystem storage maps it to the base directory."""

ENTITY_ID_PATTERN = r"^[a-zA-Z0-9][-a-zA-Z0-9_.]*$"


# ============================================
# Base Models
# ============================================

class BaseEntity(BaseModel):
    """
    The minimal contract every entity satisfies.

    Entity types extend this with their own fields and pin ``type`` to a
    literal. Unknown fields are always kept.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1, max_length=255, pattern=ENTITY_ID_PATTERN)
    """Unique identifier within the entity type (used as filename)."""

    name: str = Field(min_length=1)
    """Human-readable name (used for display and search)."""

    type: str = Field(min_length=1)
    """Entity type discriminator."""

    notes: str | None = None

    # Managed metadata
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    """Tool that created this entity."""

    namespace: str | None = None
    """Namespace the entity was stored in (set by the backend)."""

    source: str | None = None
    """Backend locator such as a file path (set by the backend, never persisted)."""


EntityLike = BaseEntity | Mapping[str, Any]


def entity_to_dict(entity: EntityLike) -> dict[str, Any]:
    """Return a plain dict copy of an entity or mapping, extras included."""
    if isinstance(entity, BaseModel):
        return entity.model_dump()
    return dict(entity)


# ============================================
# Validation
# ============================================

@dataclass
class ValidationIssue:
    """A single validation failure."""

    path: str
    """Dotted path of the offending field ('' for the record itself)."""

    message: str


@dataclass
class ValidationResult:
    """Outcome of validating raw data against an entity schema."""

    success: bool
    data: BaseEntity | None = None
    errors: list[ValidationIssue] = field(default_factory=list)

    @classmethod
    def ok(cls, data: BaseEntity) -> "ValidationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, errors: list[ValidationIssue]) -> "ValidationResult":
        return cls(success=False, errors=errors)


# ============================================
# Filters and Queries
# ============================================

@dataclass(frozen=True)
class EntityRef:
    """Reference to an entity by type and id (used by batch deletes)."""

    type: str
    id: str


class EntityFilter(BaseModel):
    """Filter accepted by ``StorageProvider.find`` and ``count``."""

    type: str | list[str] | None = None
    namespace: str | None = None
    ids: list[str] | None = None
    search: str | None = None
    """Case-insensitive substring matched against ``name``."""

    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)


SortDirection = Literal["asc", "desc"]


class SortOption(BaseModel):
    """One sort key; later keys break ties of earlier ones."""

    field: str
    direction: SortDirection = "asc"


class QueryOptions(BaseModel):
    """Structured query consumed by the search engine."""

    type: str | list[str] | None = None
    namespace: str | list[str] | None = None
    ids: list[str] | None = None
    search: str | None = None
    search_fields: list[str] = Field(default_factory=list)
    """Extra fields matched by ``search`` besides ``name``."""

    case_sensitive: bool = False
    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    sort: list[SortOption] | None = None
    """Defaults to name ascending when not given."""


@dataclass
class QueryResult:
    """Page of search results."""

    items: list[BaseEntity]
    total: int
    """Number of matches before pagination."""

    has_more: bool
    query: QueryOptions


# ============================================
# Namespaces
# ============================================

class NamespaceConfig(BaseModel):
    """Configuration for a namespace."""

    id: str
    name: str
    description: str | None = None
    parent: str | None = None
    consumers: list[str] = Field(default_factory=list)
    """Tools or projects that use this namespace."""

    active: bool = True


class NamespaceReference(BaseModel):
    """A namespace with resolution metadata."""

    namespace: str
    priority: int
    """Priority for merging (higher wins)."""

    searchable: bool
    writable: bool


class NamespaceResolution(BaseModel):
    """Result of resolving a namespace request."""

    primary: str
    """The single namespace writes go to."""

    readable: list[str]
    """Namespaces to read from, highest priority first."""

    references: list[NamespaceReference]

    @property
    def searchable(self) -> list[str]:
        """Readable namespaces that take part in merged scans."""
        return [ref.namespace for ref in self.references if ref.searchable]
