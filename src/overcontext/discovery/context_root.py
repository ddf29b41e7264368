"""
Context Root - the ordered chain of discovered context directories.

``primary`` (level 0) receives every write; ``context_paths`` is the read
fan-out order, closest first.
"""

from dataclasses import dataclass, field
from pathlib import Path

from overcontext.core.config import settings, get_logger
from overcontext.core.schema import SchemaRegistry
from overcontext.discovery.walker import DirectoryWalker, DiscoveredContextDir

logger = get_logger("discovery.context_root")


@dataclass(frozen=True)
class ContextRoot:
    """Result of a discovery walk. Immutable once built."""

    directories: tuple[DiscoveredContextDir, ...] = ()
    """All discovered context directories, closest first."""

    all_namespaces: tuple[str, ...] = field(default=())
    all_types: tuple[str, ...] = field(default=())

    @property
    def primary(self) -> Path | None:
        """Level-0 directory, the only write target."""
        return self.directories[0].path if self.directories else None

    @property
    def context_paths(self) -> list[Path]:
        """Every directory to read from, in priority order."""
        return [d.path for d in self.directories]

    @classmethod
    def from_directories(cls, directories: list[DiscoveredContextDir]) -> "ContextRoot":
        """Build a root, collecting namespaces and types in discovery order."""
        namespaces: list[str] = []
        types: list[str] = []
        for directory in directories:
            namespaces.extend(ns for ns in directory.namespaces if ns not in namespaces)
            types.extend(t for t in directory.types if t not in types)

        return cls(
            directories=tuple(directories),
            all_namespaces=tuple(namespaces),
            all_types=tuple(types),
        )


def discover_context_root(
    start_dir: Path | str | None = None,
    context_dir_name: str | None = None,
    max_levels: int | None = None,
    project_markers: list[str] | None = None,
    stop_at: Path | str | None = None,
    registry: SchemaRegistry | None = None,
) -> ContextRoot:
    """Walk up from ``start_dir`` (default: cwd) and collect the context chain."""
    walker = DirectoryWalker(
        start_dir=start_dir or Path.cwd(),
        context_dir_name=context_dir_name,
        max_levels=max_levels,
        stop_at=stop_at,
        stop_markers=project_markers if project_markers is not None else settings.project_markers,
        registry=registry,
    )

    root = ContextRoot.from_directories(walker.discover())
    logger.debug(f"Discovered {len(root.directories)} context directories from {walker.start_dir}")
    return root


def ensure_context_root(project_dir: Path | str, context_dir_name: str | None = None) -> Path:
    """Create (if needed) and return the context directory of a project."""
    context_path = Path(project_dir) / (context_dir_name or settings.context_dir_name)
    context_path.mkdir(parents=True, exist_ok=True)
    return context_path
