"""
Discovery Layer - find context directories and read across them.

DirectoryWalker → ordered chain of context directories (closest first)
ContextRoot → the chain plus its primary (write) directory
HierarchicalProvider → closest-wins reads, primary-only writes
discover() → all of the above wired into a ContextAPI
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from overcontext.api.context import ContextAPI
from overcontext.core.config import get_logger
from overcontext.core.errors import NoContextError
from overcontext.core.schema import SchemaRegistry, Validator
from overcontext.discovery.context_root import ContextRoot, discover_context_root, ensure_context_root
from overcontext.discovery.hierarchical import HierarchicalProvider, merge_closest_wins
from overcontext.discovery.walker import DirectoryWalker, DiscoveredContextDir

logger = get_logger("discovery")


def discover(
    schemas: Mapping[str, type[BaseModel] | Validator],
    plural_names: Mapping[str, str] | None = None,
    readonly: bool = False,
    **root_options: Any,
) -> ContextAPI:
    """
    Register ``schemas``, discover the context chain and return an API over it.

    ``root_options`` are passed to discover_context_root (start_dir,
    context_dir_name, max_levels, project_markers, stop_at).

    Raises NoContextError when no context directory is found.
    """
    registry = SchemaRegistry()
    registry.register_all(schemas, plural_names)

    context_root = discover_context_root(registry=registry, **root_options)
    if context_root.primary is None:
        start_dir = root_options.get("start_dir")
        raise NoContextError(str(start_dir) if start_dir else None)

    logger.info(f"Using context {context_root.primary} ({len(context_root.directories)} levels)")
    provider = HierarchicalProvider(context_root, registry, readonly=readonly)
    return ContextAPI(provider, registry)


__all__ = [
    "ContextRoot",
    "DirectoryWalker",
    "DiscoveredContextDir",
    "HierarchicalProvider",
    "discover",
    "discover_context_root",
    "ensure_context_root",
    "merge_closest_wins",
]
