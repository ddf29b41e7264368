"""
Namespace Resolver - turn a namespace request into a read/write plan.

Resolution Rules:
1. Nothing requested → the default namespace alone
2. A single name → a one-element list
3. A list → de-duplicated, first occurrence kept

Priority is ``len(list) - index`` (earlier = higher). Only the first entry
is writable. A namespace is searchable unless its configuration marks it
inactive.
"""

from collections.abc import Iterable, Sequence

from overcontext.core.config import settings, get_logger
from overcontext.core.errors import NamespaceNotFoundError
from overcontext.core.types import NamespaceConfig, NamespaceReference, NamespaceResolution
from overcontext.storage.base import StorageProvider

logger = get_logger("namespace.resolver")


class NamespaceResolver:
    """Resolves namespace requests against configured and discovered namespaces."""

    def __init__(
        self,
        provider: StorageProvider,
        default_namespace: str | None = None,
        namespaces: Iterable[NamespaceConfig] | None = None,
    ):
        self.provider = provider
        self.default_namespace = default_namespace or settings.default_namespace
        self._configured: dict[str, NamespaceConfig] = {}

        for config in namespaces or ():
            self.register(config)

    def resolve(self, requested: str | Sequence[str] | None = None) -> NamespaceResolution:
        """Resolve a request into primary, readable and per-namespace references."""
        if not requested:
            namespace_ids = [self.default_namespace]
        elif isinstance(requested, str):
            namespace_ids = [requested]
        else:
            namespace_ids = list(dict.fromkeys(requested))

        references = []
        for index, namespace in enumerate(namespace_ids):
            config = self._configured.get(namespace)
            references.append(NamespaceReference(
                namespace=namespace,
                priority=len(namespace_ids) - index,
                searchable=config.active if config else True,
                writable=index == 0,
            ))

        return NamespaceResolution(
            primary=namespace_ids[0],
            readable=namespace_ids,
            references=references,
        )

    def list_all(self) -> list[NamespaceConfig]:
        """Configured namespaces, followed by ones discovered in storage."""
        all_namespaces = dict(self._configured)

        for namespace in self.provider.list_namespaces():
            if namespace not in all_namespaces:
                all_namespaces[namespace] = NamespaceConfig(id=namespace, name=namespace)

        return list(all_namespaces.values())

    def register(self, config: NamespaceConfig) -> None:
        """Add or replace a namespace configuration."""
        self._configured[config.id] = config
        logger.debug(f"Registered namespace {config.id} (active={config.active})")

    @property
    def primary(self) -> str:
        """Namespace used when a request names none."""
        return self.default_namespace

    def exists(self, namespace: str) -> bool:
        return namespace in self._configured or self.provider.namespace_exists(namespace)

    def describe(self, namespace: str) -> NamespaceConfig:
        """Configuration of a namespace; discovered ones get a default config."""
        config = self._configured.get(namespace)
        if config is not None:
            return config
        if self.provider.namespace_exists(namespace):
            return NamespaceConfig(id=namespace, name=namespace)
        raise NamespaceNotFoundError(namespace)
