"""Tests for filesystem storage."""

import pytest
import yaml

from overcontext.core.errors import (
    EntityValidationError,
    ReadonlyStorageError,
    SchemaNotRegisteredError,
    StorageAccessError,
    UnsafePathError,
)
from overcontext.core.types import DEFAULT_NAMESPACE, EntityFilter, EntityRef
from overcontext.storage.filesystem import FileSystemProvider


def person(entity_id: str, name: str, **extra) -> dict:
    return {"id": entity_id, "name": name, "type": "person", **extra}


class TestFileSystemReadWrite:
    """Tests for saving and reading entities."""

    def test_save_and_get(self, fs_provider, context_dir):
        saved = fs_provider.save(person("john-doe", "John Doe", company="Acme"))

        path = context_dir / "people" / "john-doe.yaml"
        assert path.exists()
        assert saved.source == str(path)
        assert saved.type == "person"

        loaded = fs_provider.get("person", "john-doe")
        assert loaded is not None
        assert loaded.name == "John Doe"
        assert loaded.company == "Acme"
        assert loaded.namespace == DEFAULT_NAMESPACE

    def test_derived_fields_not_persisted(self, fs_provider, context_dir):
        fs_provider.save(person("john-doe", "John Doe"))

        record = yaml.safe_load((context_dir / "people" / "john-doe.yaml").read_text())
        assert record["name"] == "John Doe"
        assert "type" not in record
        assert "source" not in record
        assert "namespace" not in record
        assert "created_at" in record
        assert "updated_at" in record

    def test_created_at_stable_updated_at_increases(self, fs_provider):
        first = fs_provider.save(person("john-doe", "John Doe"))
        second = fs_provider.save(person("john-doe", "John D."))

        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        assert fs_provider.get("person", "john-doe").name == "John D."

    def test_get_missing_returns_none(self, fs_provider):
        assert fs_provider.get("person", "nobody") is None
        assert not fs_provider.exists("person", "nobody")

    def test_filename_is_authoritative_id(self, fs_provider, context_dir, write_entity_file):
        write_entity_file(context_dir, "people", "real-id", "id: other-id\nname: Someone\n")

        entity = fs_provider.get("person", "real-id")
        assert entity.id == "real-id"

    def test_reads_yml_extension(self, fs_provider, context_dir, write_entity_file):
        write_entity_file(context_dir, "people", "jane", "name: Jane\n", extension=".yml")

        assert fs_provider.get("person", "jane").name == "Jane"
        assert [e.id for e in fs_provider.get_all("person")] == ["jane"]

    def test_configured_extension(self, context_dir, registry):
        provider = FileSystemProvider(context_dir, registry, extension=".yml")
        provider.save(person("jane", "Jane"))

        assert (context_dir / "people" / "jane.yml").exists()

    def test_unsupported_extension(self, context_dir, registry):
        with pytest.raises(ValueError):
            FileSystemProvider(context_dir, registry, extension=".json")

    def test_validation_failure_writes_nothing(self, fs_provider, context_dir):
        with pytest.raises(EntityValidationError):
            fs_provider.save({"id": "bad", "type": "person", "company": 42})

        assert not (context_dir / "people").exists()

    def test_delete(self, fs_provider, context_dir):
        fs_provider.save(person("john-doe", "John Doe"))

        assert fs_provider.delete("person", "john-doe")
        assert not (context_dir / "people" / "john-doe.yaml").exists()
        assert not fs_provider.delete("person", "john-doe")

    def test_batch_operations(self, fs_provider):
        saved = fs_provider.save_batch([person("a", "A"), person("b", "B")])
        assert len(saved) == 2

        deleted = fs_provider.delete_batch([EntityRef("person", "a"), EntityRef("person", "missing")])
        assert deleted == 1
        assert [e.id for e in fs_provider.get_all("person")] == ["b"]


class TestFileSystemScans:
    """Tests for get_all, find and count."""

    def test_unknown_type_returns_empty(self, fs_provider):
        assert fs_provider.get_all("nonexistent-type") == []

    def test_point_operations_on_unknown_type_raise(self, fs_provider):
        with pytest.raises(SchemaNotRegisteredError):
            fs_provider.get("nonexistent-type", "x")
        with pytest.raises(SchemaNotRegisteredError):
            fs_provider.exists("nonexistent-type", "x")

    def test_corrupt_files_are_skipped(self, fs_provider, context_dir, write_entity_file):
        write_entity_file(context_dir, "people", "good", "name: Good Person\n")
        write_entity_file(context_dir, "people", "broken", "name: [unclosed\n")
        write_entity_file(context_dir, "people", "list", "- one\n- two\n")
        write_entity_file(context_dir, "people", "invalid", "company: Acme\n")
        write_entity_file(context_dir, "people", "evil", "__proto__:\n  admin: true\nname: Evil\n")

        entities = fs_provider.get_all("person")

        assert [e.id for e in entities] == ["good"]
        assert fs_provider.get("person", "evil") is None

    def test_non_entity_files_ignored(self, fs_provider, context_dir, write_entity_file):
        write_entity_file(context_dir, "people", "john", "name: John\n")
        (context_dir / "people" / "README.md").write_text("# people")

        assert len(fs_provider.get_all("person")) == 1

    def test_find_filters_then_paginates(self, fs_provider):
        for entity_id, name in [("a", "Alice"), ("b", "Bob"), ("c", "Alicia"), ("d", "Dave")]:
            fs_provider.save(person(entity_id, name))
        fs_provider.save({"id": "ali", "name": "ALI", "type": "term"})

        by_name = fs_provider.find(EntityFilter(type="person", search="ali"))
        assert sorted(e.id for e in by_name) == ["a", "c"]

        by_ids = fs_provider.find(EntityFilter(type="person", ids=["b", "d", "zzz"]))
        assert sorted(e.id for e in by_ids) == ["b", "d"]

        page = fs_provider.find(EntityFilter(type="person", offset=1, limit=2))
        assert [e.id for e in page] == ["b", "c"]

        assert fs_provider.count(EntityFilter(search="ali")) == 3


class TestPathSafety:
    """Tests for traversal and unsafe path rejection."""

    @pytest.mark.parametrize("entity_id", ["../../etc/passwd", "..", "a/b", "a\\b", "nul\0byte", "tab\there"])
    def test_unsafe_ids_rejected(self, fs_provider, entity_id):
        with pytest.raises(StorageAccessError):
            fs_provider.get("person", entity_id)

    def test_unsafe_namespace_rejected(self, fs_provider):
        with pytest.raises(UnsafePathError):
            fs_provider.get_all("person", namespace="..")
        with pytest.raises(UnsafePathError):
            fs_provider.save(person("x", "X"), namespace="../outside")

    def test_save_with_traversal_id_writes_nothing(self, fs_provider, tmp_path):
        with pytest.raises((StorageAccessError, EntityValidationError)):
            fs_provider.save(person("../../escape", "Escape"))

        assert not (tmp_path / "escape.yaml").exists()

    def test_symlinked_type_directory_outside_base(self, fs_provider, context_dir, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (context_dir / "people").symlink_to(outside, target_is_directory=True)

        with pytest.raises(UnsafePathError):
            fs_provider.get("person", "john")


class TestReadonlyAndLifecycle:
    def test_readonly_rejects_writes(self, context_dir, registry):
        provider = FileSystemProvider(context_dir, registry, readonly=True)

        with pytest.raises(ReadonlyStorageError):
            provider.save(person("john", "John"))
        with pytest.raises(ReadonlyStorageError):
            provider.delete("person", "john")

        assert not (context_dir / "people").exists()

    def test_initialize_creates_missing_root(self, tmp_path, registry):
        provider = FileSystemProvider(tmp_path / "new" / "context", registry)
        provider.initialize()

        assert provider.is_available()

    def test_initialize_missing_root_without_create(self, tmp_path, registry):
        provider = FileSystemProvider(tmp_path / "missing", registry, create_if_missing=False)

        with pytest.raises(StorageAccessError):
            provider.initialize()

    def test_context_manager(self, context_dir, registry):
        with FileSystemProvider(context_dir, registry) as provider:
            provider.save(person("john", "John"))
            assert provider.exists("person", "john")


class TestNamespaces:
    """Tests for namespace layout and discovery."""

    def test_namespaced_layout(self, fs_provider, context_dir):
        fs_provider.save(person("john", "Work John"), namespace="work")

        assert (context_dir / "work" / "people" / "john.yaml").exists()
        assert fs_provider.get("person", "john") is None
        assert fs_provider.get("person", "john", namespace="work").namespace == "work"

    def test_default_namespace_is_base_directory(self, fs_provider, context_dir):
        fs_provider.save(person("john", "John"), namespace=DEFAULT_NAMESPACE)

        assert (context_dir / "people" / "john.yaml").exists()
        assert fs_provider.get("person", "john") is not None

    def test_list_namespaces(self, fs_provider, context_dir):
        fs_provider.save(person("john", "John"))
        fs_provider.save(person("jane", "Jane"), namespace="work")
        fs_provider.save({"id": "api", "name": "API", "type": "term"}, namespace="personal")
        (context_dir / "random").mkdir()
        (context_dir / ".hidden" / "people").mkdir(parents=True)

        assert fs_provider.list_namespaces() == ["personal", "work"]
        assert fs_provider.namespace_exists("work")
        assert not fs_provider.namespace_exists("missing")

    def test_list_types(self, fs_provider):
        fs_provider.save(person("john", "John"))
        fs_provider.save({"id": "api", "name": "API", "type": "term"}, namespace="work")

        assert fs_provider.list_types() == ["person"]
        assert fs_provider.list_types("work") == ["term"]

    def test_default_namespace_option(self, context_dir, registry):
        provider = FileSystemProvider(context_dir, registry, default_namespace="work")
        provider.save(person("john", "John"))

        assert (context_dir / "work" / "people" / "john.yaml").exists()
