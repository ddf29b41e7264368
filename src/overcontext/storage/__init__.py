"""
Storage Layer - pluggable entity backends.

Backends:
1. FileSystemProvider → one YAML file per entity under a base directory
2. MemoryProvider → in-process store, copy-on-read and copy-on-write
3. ObservableProvider → wraps any provider and publishes change events

The hierarchical (multi-directory) provider lives in overcontext.discovery.
All higher layers touch storage only through StorageProvider.
"""

from overcontext.storage.base import StorageProvider, apply_filter
from overcontext.storage.filesystem import FileSystemProvider
from overcontext.storage.memory import MemoryProvider
from overcontext.storage.observable import ObservableProvider, StorageEvent

__all__ = [
    "StorageProvider",
    "apply_filter",
    "FileSystemProvider",
    "MemoryProvider",
    "ObservableProvider",
    "StorageEvent",
]
