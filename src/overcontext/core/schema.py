"""
Schema Registry - maps entity types to validators and directory names.

Each registered type has:
- a validator (a pydantic model class or any object with ``validate(data)``)
- exactly one plural name, used as its directory/collection name
- an optional custom validator run after the schema succeeds

The plural-name → type mapping is the inverse of type → plural name and is
what discovery uses to recognise collection directories.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError, create_model

from overcontext.core.config import get_logger
from overcontext.core.errors import SchemaNotRegisteredError
from overcontext.core.types import (
    BaseEntity,
    EntityLike,
    ValidationIssue,
    ValidationResult,
    entity_to_dict,
)

logger = get_logger("core.schema")


@runtime_checkable
class Validator(Protocol):
    """Anything that can turn raw data into a typed entity."""

    def validate(self, data: Any) -> ValidationResult: ...


CustomValidator = Callable[[BaseEntity], ValidationResult]


class ModelValidator:
    """Validator backed by a pydantic model class."""

    def __init__(self, model: type[BaseEntity]):
        self.model = model

    def validate(self, data: Any) -> ValidationResult:
        try:
            return ValidationResult.ok(self.model.model_validate(data))
        except ValidationError as e:
            return ValidationResult.fail([
                ValidationIssue(
                    path=".".join(str(part) for part in err["loc"]),
                    message=err["msg"],
                )
                for err in e.errors()
            ])


@dataclass
class RegisteredSchema:
    """A registered entity type."""

    type: str
    validator: Validator
    plural_name: str
    custom_validator: CustomValidator | None = None


def derive_plural_name(type_name: str) -> str:
    """Pluralize a type name for use as a directory name."""
    if type_name.endswith("y"):
        return type_name[:-1] + "ies"
    if type_name.endswith(("s", "x", "ch", "sh")):
        return type_name + "es"
    return type_name + "s"


def create_entity_schema(type_name: str, **fields: Any) -> type[BaseEntity]:
    """
    Build a BaseEntity subclass whose ``type`` is pinned to ``type_name``.

    Fields use ``pydantic.create_model`` syntax, e.g.
    ``create_entity_schema("person", company=(str | None, None))``.
    """
    model_name = "".join(part.capitalize() for part in type_name.replace("_", "-").split("-"))
    return create_model(
        model_name or "Entity",
        __base__=BaseEntity,
        type=(Literal[type_name], type_name),  # type: ignore[valid-type]
        **fields,
    )


class SchemaRegistry:
    """
    Registry of entity schemas.

    The registry never invents types: every lookup for an unregistered type
    either returns None or raises SchemaNotRegisteredError.
    """

    def __init__(self):
        self._schemas: dict[str, RegisteredSchema] = {}
        self._directory_to_type: dict[str, str] = {}

    def register(
        self,
        entity_type: str,
        schema: type[BaseModel] | Validator,
        plural_name: str | None = None,
        custom_validator: CustomValidator | None = None,
    ) -> RegisteredSchema:
        """Register (or replace) the schema for an entity type."""
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            validator: Validator = ModelValidator(schema)
        elif isinstance(schema, Validator):
            validator = schema
        else:
            raise TypeError(f"Schema for {entity_type!r} must be a pydantic model or a Validator")

        plural = plural_name or derive_plural_name(entity_type)

        previous = self._schemas.get(entity_type)
        if previous and previous.plural_name != plural:
            self._directory_to_type.pop(previous.plural_name, None)

        registered = RegisteredSchema(
            type=entity_type,
            validator=validator,
            plural_name=plural,
            custom_validator=custom_validator,
        )
        self._schemas[entity_type] = registered
        self._directory_to_type[plural] = entity_type
        logger.debug(f"Registered schema {entity_type} -> {plural}/")
        return registered

    def register_all(
        self,
        schemas: Mapping[str, type[BaseModel] | Validator],
        plural_names: Mapping[str, str] | None = None,
    ) -> None:
        """Register several schemas, with optional plural-name overrides."""
        plural_names = plural_names or {}
        for entity_type, schema in schemas.items():
            self.register(entity_type, schema, plural_name=plural_names.get(entity_type))

    def get(self, entity_type: str) -> RegisteredSchema | None:
        return self._schemas.get(entity_type)

    def has(self, entity_type: str) -> bool:
        return entity_type in self._schemas

    def types(self) -> list[str]:
        """All registered type names, in registration order."""
        return list(self._schemas)

    def get_directory_name(self, entity_type: str) -> str | None:
        registered = self._schemas.get(entity_type)
        return registered.plural_name if registered else None

    def get_type_from_directory(self, directory: str) -> str | None:
        return self._directory_to_type.get(directory)

    def _require(self, entity_type: str) -> RegisteredSchema:
        registered = self._schemas.get(entity_type)
        if registered is None:
            raise SchemaNotRegisteredError(entity_type)
        return registered

    def validate(self, entity: EntityLike) -> ValidationResult:
        """
        Validate an entity against the schema of its own ``type``.

        Raises SchemaNotRegisteredError when the type is unknown; schema and
        custom validation failures are returned as an unsuccessful result.
        """
        data = entity_to_dict(entity)
        entity_type = data.get("type")
        if not isinstance(entity_type, str) or not entity_type:
            return ValidationResult.fail([ValidationIssue("type", "Entity type is required")])

        registered = self._require(entity_type)
        result = registered.validator.validate(data)
        if not result.success:
            return result

        if registered.custom_validator and result.data is not None:
            return registered.custom_validator(result.data)

        return result

    def validate_as(self, entity_type: str, data: Any) -> ValidationResult:
        """Validate raw data as ``entity_type``, injecting the type into the data."""
        registered = self._require(entity_type)

        if isinstance(data, Mapping):
            data = {**data, "type": entity_type}

        return registered.validator.validate(data)
