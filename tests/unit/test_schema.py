"""Tests for the schema registry."""

from typing import Literal

import pytest

from overcontext.core.errors import SchemaNotRegisteredError
from overcontext.core.schema import SchemaRegistry, create_entity_schema, derive_plural_name
from overcontext.core.types import BaseEntity, ValidationIssue, ValidationResult


class Person(BaseEntity):
    type: Literal["person"] = "person"
    company: str | None = None


class TestPluralNames:
    """Tests for default pluralization."""

    @pytest.mark.parametrize(
        "type_name, plural",
        [
            ("term", "terms"),
            ("category", "categories"),
            ("box", "boxes"),
            ("match", "matches"),
            ("wish", "wishes"),
            ("status", "statuses"),
        ],
    )
    def test_derive_plural_name(self, type_name, plural):
        assert derive_plural_name(type_name) == plural


class TestSchemaRegistry:
    """Tests for SchemaRegistry."""

    def test_register_and_lookup(self):
        registry = SchemaRegistry()
        registry.register("person", Person, plural_name="people")

        assert registry.has("person")
        assert registry.types() == ["person"]
        assert registry.get_directory_name("person") == "people"
        assert registry.get_type_from_directory("people") == "person"
        assert registry.get_type_from_directory("persons") is None

    def test_reregister_replaces_directory_mapping(self):
        registry = SchemaRegistry()
        registry.register("person", Person)
        registry.register("person", Person, plural_name="people")

        assert registry.get_type_from_directory("persons") is None
        assert registry.get_type_from_directory("people") == "person"

    def test_register_all_with_plural_overrides(self):
        registry = SchemaRegistry()
        registry.register_all({"person": Person, "term": BaseEntity}, {"person": "people"})

        assert registry.get_directory_name("person") == "people"
        assert registry.get_directory_name("term") == "terms"

    def test_rejects_non_schema(self):
        with pytest.raises(TypeError):
            SchemaRegistry().register("person", object())

    def test_validate_success(self):
        registry = SchemaRegistry()
        registry.register("person", Person)

        result = registry.validate({"id": "john", "name": "John", "type": "person", "company": "Acme"})

        assert result.success
        assert isinstance(result.data, Person)
        assert result.data.company == "Acme"

    def test_validate_reports_field_paths(self):
        registry = SchemaRegistry()
        registry.register("person", Person)

        result = registry.validate({"id": "john", "type": "person"})

        assert not result.success
        assert any(issue.path == "name" for issue in result.errors)

    def test_validate_unknown_type_raises(self):
        with pytest.raises(SchemaNotRegisteredError) as exc:
            SchemaRegistry().validate({"id": "x", "name": "X", "type": "ghost"})

        assert exc.value.entity_type == "ghost"
        assert exc.value.code == "SCHEMA_NOT_REGISTERED"

    def test_validate_missing_type_fails(self):
        result = SchemaRegistry().validate({"id": "x", "name": "X"})

        assert not result.success
        assert result.errors[0].path == "type"

    def test_validate_as_injects_type(self):
        registry = SchemaRegistry()
        registry.register("person", Person)

        result = registry.validate_as("person", {"id": "john", "name": "John"})

        assert result.success
        assert result.data.type == "person"

    def test_custom_validator_runs_after_schema(self):
        def require_company(entity):
            if not entity.company:
                return ValidationResult.fail([ValidationIssue("company", "Company is required")])
            return ValidationResult.ok(entity)

        registry = SchemaRegistry()
        registry.register("person", Person, custom_validator=require_company)

        assert not registry.validate({"id": "a", "name": "A", "type": "person"}).success
        assert registry.validate({"id": "a", "name": "A", "type": "person", "company": "Acme"}).success

    def test_custom_validator_object(self):
        class AlwaysFails:
            def validate(self, data):
                return ValidationResult.fail([ValidationIssue("", "nope")])

        registry = SchemaRegistry()
        registry.register("widget", AlwaysFails())

        assert not registry.validate({"id": "w", "name": "W", "type": "widget"}).success


class TestCreateEntitySchema:
    def test_pins_type(self):
        Project = create_entity_schema("project", status=(str, "active"))

        project = Project(id="p1", name="P1")
        assert project.type == "project"
        assert project.status == "active"
        assert issubclass(Project, BaseEntity)

    def test_validate_as_overrides_stored_type(self):
        registry = SchemaRegistry()
        registry.register("project", create_entity_schema("project"))

        result = registry.validate_as("project", {"id": "p", "name": "P", "type": "goal"})
        assert result.success
        assert result.data.type == "project"
