"""Tests for CLI output formatting."""

import json

import yaml

from overcontext.core.types import BaseEntity
from overcontext.interface.formatters import EMPTY_MESSAGE, format_entities, format_entity


def sample_entities() -> list[BaseEntity]:
    return [
        BaseEntity(id="john-doe", name="John Doe", type="person", company="Acme"),
        BaseEntity(id="jane", name="Jane [bold]", type="person", tags=["a", "b"]),
    ]


class TestFormatEntities:
    def test_table_headers_and_rows(self):
        lines = format_entities(sample_entities()).splitlines()

        assert lines[0].split() == ["ID", "NAME", "TYPE"]
        assert lines[1].split() == ["john-doe", "John", "Doe", "person"]
        assert "Jane [bold]" in lines[2]

    def test_table_custom_fields_and_missing_values(self):
        lines = format_entities(sample_entities(), fields=["id", "company", "tags"]).splitlines()

        assert lines[0].split() == ["ID", "COMPANY", "TAGS"]
        assert lines[1].split() == ["john-doe", "Acme", "-"]
        assert lines[2].split()[:2] == ["jane", "-"]
        assert '["a", "b"]' in lines[2]

    def test_table_without_headers(self):
        lines = format_entities(sample_entities(), no_headers=True).splitlines()

        assert len(lines) == 2
        assert lines[0].startswith("john-doe")

    def test_empty_table(self):
        assert format_entities([]) == EMPTY_MESSAGE

    def test_json(self):
        records = json.loads(format_entities(sample_entities(), "json"))

        assert records[0]["id"] == "john-doe"
        assert records[0]["company"] == "Acme"
        assert "notes" not in records[0]
        assert json.loads(format_entities([], "json")) == []

    def test_yaml(self):
        records = yaml.safe_load(format_entities(sample_entities(), "yaml"))

        assert [r["id"] for r in records] == ["john-doe", "jane"]
        assert records[1]["tags"] == ["a", "b"]


class TestFormatEntity:
    def test_yaml_default(self):
        entity = BaseEntity(id="john-doe", name="John Doe", type="person", company="Acme")

        record = yaml.safe_load(format_entity(entity))

        assert record == {"id": "john-doe", "name": "John Doe", "type": "person", "company": "Acme"}

    def test_json(self):
        entity = BaseEntity(id="john-doe", name="John Doe", type="person")

        assert json.loads(format_entity(entity, "json"))["name"] == "John Doe"

    def test_table_falls_back_to_yaml(self):
        entity = BaseEntity(id="john-doe", name="John Doe", type="person")

        assert yaml.safe_load(format_entity(entity, "table"))["id"] == "john-doe"
