"""
Directory Walker - find context directories by walking up from a start point.

At each level the walker looks for a ``<context_dir_name>/`` child. It stops
when it reaches ``stop_at``, a directory holding a project marker, the
filesystem root, or ``max_levels``. Real paths are tracked so symlink
cycles terminate.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from overcontext.core.config import settings, get_logger
from overcontext.core.schema import SchemaRegistry
from overcontext.storage.filesystem import ENTITY_EXTENSIONS

logger = get_logger("discovery.walker")


@dataclass(frozen=True)
class DiscoveredContextDir:
    """One directory in the context chain."""

    path: Path
    """Absolute (real) path of the context directory."""

    level: int
    """Distance from the start directory (0 = closest, highest priority)."""

    namespaces: tuple[str, ...] = ()
    types: tuple[str, ...] = ()


def subdirectories(directory: Path) -> list[Path]:
    """Visible child directories, sorted; unreadable directories yield nothing."""
    try:
        children = sorted(directory.iterdir())
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return []
    return [child for child in children if child.is_dir() and not child.name.startswith(".")]


def has_entity_files(directory: Path) -> bool:
    try:
        return any(
            child.is_file() and child.suffix in ENTITY_EXTENSIONS
            for child in directory.iterdir()
        )
    except OSError:
        return False


class DirectoryWalker:
    """Discovers the ordered chain of context directories above a start directory."""

    def __init__(
        self,
        start_dir: Path | str,
        context_dir_name: str | None = None,
        max_levels: int | None = None,
        stop_at: Path | str | None = None,
        stop_markers: list[str] | None = None,
        registry: SchemaRegistry | None = None,
    ):
        self.start_dir = Path(start_dir)
        self.context_dir_name = context_dir_name or settings.context_dir_name
        self.max_levels = max_levels if max_levels is not None else settings.max_levels
        self.stop_at = Path(stop_at).resolve() if stop_at else None
        self.stop_markers = stop_markers if stop_markers is not None else []
        self.registry = registry

    def _is_type_dir(self, directory: Path) -> bool:
        if self.registry:
            return self.registry.get_type_from_directory(directory.name) is not None
        return has_entity_files(directory)

    def _type_name(self, directory: Path) -> str:
        if self.registry:
            return self.registry.get_type_from_directory(directory.name) or directory.name
        return directory.name

    def _classify(self, context_dir: Path) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Split a context directory's children into namespaces and types."""
        namespaces: list[str] = []
        types: list[str] = []

        for child in subdirectories(context_dir):
            if self._is_type_dir(child):
                type_name = self._type_name(child)
                if type_name not in types:
                    types.append(type_name)
            elif any(self._is_type_dir(sub) for sub in subdirectories(child)):
                namespaces.append(child.name)

        return tuple(namespaces), tuple(types)

    def _should_stop(self, directory: Path) -> bool:
        if self.stop_at and directory.resolve() == self.stop_at:
            return True

        for marker in self.stop_markers:
            if (directory / marker).exists():
                return True

        return directory.parent == directory

    def discover(self) -> list[DiscoveredContextDir]:
        """Find all context directories walking up from start_dir, closest first."""
        discovered: list[DiscoveredContextDir] = []
        visited: set[str] = set()
        current = Path(os.path.abspath(self.start_dir))
        level = 0

        while level < self.max_levels:
            real_path = os.path.realpath(current)
            if real_path in visited:
                logger.debug(f"Symlink cycle detected at {current}")
                break
            visited.add(real_path)

            context_dir = current / self.context_dir_name
            if context_dir.is_dir():
                namespaces, types = self._classify(context_dir)
                discovered.append(DiscoveredContextDir(
                    path=Path(os.path.realpath(context_dir)),
                    level=len(discovered),
                    namespaces=namespaces,
                    types=types,
                ))
                logger.debug(f"Found context at {context_dir} (level {len(discovered) - 1})")

            if self._should_stop(current):
                break

            current = current.parent
            level += 1

        return discovered

    def has_context(self, directory: Path | str) -> bool:
        """Check whether a directory holds a context directory."""
        return (Path(directory) / self.context_dir_name).is_dir()
