"""
Multi-namespace context.

A ContextAPI bound to a NamespaceResolution: single-namespace calls default
to the resolution's primary, while the ``*_from_any``/``*_merged`` calls
read across every readable namespace in priority order.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from overcontext.api.context import ContextAPI
from overcontext.core.types import BaseEntity, NamespaceResolution
from overcontext.namespace.resolver import NamespaceResolver


@dataclass
class LocatedEntity:
    """An entity together with the namespace it was found in."""

    entity: BaseEntity
    namespace: str


class MultiNamespaceContext(ContextAPI):
    """Context API over an ordered set of namespaces."""

    def __init__(self, api: ContextAPI, resolver: NamespaceResolver, namespaces: str | Sequence[str] | None = None):
        self.api = api
        self.resolver = resolver
        self._resolution = resolver.resolve(namespaces)
        super().__init__(api.provider, api.registry, default_namespace=self._resolution.primary)

    @property
    def resolution(self) -> NamespaceResolution:
        return self._resolution

    def get_from_any(self, entity_type: str, entity_id: str) -> LocatedEntity | None:
        """First copy of an entity in readable-priority order."""
        for namespace in self._resolution.readable:
            entity = self.provider.get(entity_type, entity_id, namespace)
            if entity is not None:
                return LocatedEntity(entity=entity, namespace=namespace)
        return None

    def get_all_merged(self, entity_type: str) -> list[BaseEntity]:
        """
        All entities of a type across searchable namespaces.

        Lowest priority is read first so higher-priority copies overwrite
        on id collision.
        """
        by_id: dict[str, BaseEntity] = {}
        for namespace in reversed(self._resolution.searchable):
            for entity in self.provider.get_all(entity_type, namespace):
                by_id[entity.id] = entity
        return list(by_id.values())

    def locate_entity(self, entity_type: str, entity_id: str) -> str | None:
        """Namespace holding the highest-priority copy of an entity."""
        for namespace in self._resolution.readable:
            if self.provider.exists(entity_type, entity_id, namespace):
                return namespace
        return None

    def with_namespaces(self, namespaces: str | Sequence[str]) -> "MultiNamespaceContext":
        return MultiNamespaceContext(self.api, self.resolver, namespaces)
