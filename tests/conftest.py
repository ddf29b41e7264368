"""
Pytest configuration and fixtures for Overcontext tests.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Literal

import pytest

from overcontext.api.context import ContextAPI, create_typed_api
from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import BaseEntity
from overcontext.storage.filesystem import FileSystemProvider
from overcontext.storage.memory import MemoryProvider


class Person(BaseEntity):
    type: Literal["person"] = "person"
    company: str | None = None
    sounds_like: list[str] | None = None


class Term(BaseEntity):
    type: Literal["term"] = "term"
    expansion: str | None = None


@pytest.fixture
def person_schema() -> type[BaseEntity]:
    return Person


@pytest.fixture
def registry() -> SchemaRegistry:
    """Registry with person (stored under people/) and term."""
    registry = SchemaRegistry()
    registry.register("person", Person, plural_name="people")
    registry.register("term", Term)
    return registry


@pytest.fixture
def memory_provider(registry) -> MemoryProvider:
    provider = MemoryProvider(registry)
    provider.initialize()
    return provider


@pytest.fixture
def context_dir(tmp_path) -> Path:
    """Empty context directory inside a temporary project."""
    path = tmp_path / "project" / "context"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def fs_provider(context_dir, registry) -> FileSystemProvider:
    provider = FileSystemProvider(context_dir, registry)
    provider.initialize()
    return provider


@pytest.fixture
def api() -> ContextAPI:
    """Context API over a fresh memory provider."""
    provider = MemoryProvider(SchemaRegistry())
    return create_typed_api(
        {"person": Person, "term": Term},
        provider,
        plural_names={"person": "people"},
    )


@pytest.fixture
def seeded_api(api) -> ContextAPI:
    """Three people and two terms in the default namespace."""
    api.create("person", {"name": "John Smith", "company": "Acme", "sounds_like": ["jon smith"]})
    api.create("person", {"name": "Jane Doe", "company": "TechCorp"})
    api.create("person", {"name": "Bob Johnson", "company": "Acme"})
    api.create("term", {"name": "API", "expansion": "Application Programming Interface"})
    api.create("term", {"name": "REST", "expansion": "Representational State Transfer"})
    return api


@pytest.fixture
def write_entity_file() -> Callable[..., Path]:
    """Factory writing raw YAML into ``<context>/[<namespace>/]<dir>/<id>.yaml``."""

    def _write(context: Path, directory: str, entity_id: str, content: str, namespace: str | None = None,
               extension: str = ".yaml") -> Path:
        base = context / namespace if namespace else context
        path = base / directory / f"{entity_id}{extension}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
