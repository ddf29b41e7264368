"""
Overcontext CLI - Command-line interface.

Commands:
- overcontext list TYPE → List entities of a type
- overcontext get TYPE ID → Show one entity
- overcontext create TYPE NAME → Create an entity
- overcontext update TYPE ID --data JSON → Update fields of an entity
- overcontext delete TYPE ID → Delete an entity
- overcontext types → List entity types
- overcontext namespaces → List namespaces

``create_app`` builds the same application over any ContextAPI factory;
the bundled ``app`` discovers context from the working directory.
"""

import json
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from overcontext.api.context import ContextAPI
from overcontext.core.config import settings, setup_logging
from overcontext.core.errors import NoContextError, StorageError
from overcontext.core.schema import SchemaRegistry
from overcontext.core.types import BaseEntity
from overcontext.discovery.context_root import ContextRoot, discover_context_root
from overcontext.discovery.hierarchical import HierarchicalProvider
from overcontext.discovery.walker import has_entity_files, subdirectories
from overcontext.interface import commands
from overcontext.interface.commands import CommandContext

console = Console(soft_wrap=True)

ApiFactory = Callable[[], ContextAPI]


class OutputFormatChoice(str, Enum):
    table = "table"
    json = "json"
    yaml = "yaml"


def _parse_data(data: str | None) -> dict[str, Any]:
    if not data:
        return {}
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Invalid JSON: {e}", param_hint="--data") from e
    if not isinstance(parsed, dict):
        raise typer.BadParameter("Must be a JSON object", param_hint="--data")
    return parsed


def create_app(api_factory: ApiFactory, name: str = "overcontext") -> typer.Typer:
    """Build a typer application whose commands run against ``api_factory()``."""
    app = typer.Typer(
        name=name,
        help="Overcontext - schema-driven entity context",
        no_args_is_help=True,
    )

    def run(
        handler: Callable[..., str],
        output_format: OutputFormatChoice | None,
        namespace: str | None,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        fmt = output_format.value if output_format else settings.default_output_format
        try:
            ctx = CommandContext(api=api_factory(), output_format=fmt, namespace=namespace)
            output = handler(ctx, *args, **kwargs)
        except StorageError as e:
            console.print(f"[red]Error: {escape(e.message)}[/red]")
            raise typer.Exit(code=1)

        if output:
            typer.echo(output)

    @app.callback()
    def main(
        log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
    ):
        """Overcontext - schema-driven entity context."""
        setup_logging(log_level)

    @app.command("list")
    def list_entities(
        entity_type: str = typer.Argument(..., help="Entity type to list"),
        search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by name"),
        limit: int = typer.Option(commands.DEFAULT_LIST_LIMIT, "--limit", "-l", help="Maximum results"),
        fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated table columns"),
        output_format: Optional[OutputFormatChoice] = typer.Option(None, "--format", "-f"),
        namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    ):
        """List entities of a type."""
        field_list = [f.strip() for f in fields.split(",") if f.strip()] if fields else None
        run(commands.list_command, output_format, namespace, entity_type, search=search, limit=limit, fields=field_list)

    @app.command()
    def get(
        entity_type: str = typer.Argument(..., help="Entity type"),
        entity_id: str = typer.Argument(..., help="Entity id"),
        output_format: Optional[OutputFormatChoice] = typer.Option(None, "--format", "-f"),
        namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    ):
        """Show a single entity."""
        run(commands.get_command, output_format, namespace, entity_type, entity_id)

    @app.command()
    def create(
        entity_type: str = typer.Argument(..., help="Entity type"),
        name: str = typer.Argument(..., help="Display name (the id is derived from it)"),
        data: Optional[str] = typer.Option(None, "--data", "-d", help="Extra fields as a JSON object"),
        entity_id: Optional[str] = typer.Option(None, "--id", help="Explicit id"),
        namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    ):
        """Create an entity."""
        run(commands.create_command, None, namespace, entity_type, name, data=_parse_data(data), entity_id=entity_id)

    @app.command()
    def update(
        entity_type: str = typer.Argument(..., help="Entity type"),
        entity_id: str = typer.Argument(..., help="Entity id"),
        data: str = typer.Option(..., "--data", "-d", help="Fields to change as a JSON object"),
        namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    ):
        """Update fields of an existing entity."""
        run(commands.update_command, None, namespace, entity_type, entity_id, _parse_data(data))

    @app.command()
    def delete(
        entity_type: str = typer.Argument(..., help="Entity type"),
        entity_id: str = typer.Argument(..., help="Entity id"),
        namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    ):
        """Delete an entity."""
        run(commands.delete_command, None, namespace, entity_type, entity_id)

    @app.command()
    def types():
        """List registered entity types."""
        run(commands.types_command, None, None)

    @app.command()
    def namespaces():
        """List namespaces holding data."""
        run(commands.namespaces_command, None, None)

    return app


# ============================================
# Default application
# ============================================

def _type_directories(context_root: ContextRoot) -> list[str]:
    """Type directory names at the root of each context dir and inside its namespaces."""
    names = list(context_root.all_types)
    for directory in context_root.directories:
        for namespace in directory.namespaces:
            for child in subdirectories(directory.path / namespace):
                if child.name not in names and has_entity_files(child):
                    names.append(child.name)
    return names


def discover_api(start_dir: Path | None = None) -> ContextAPI:
    """
    Discover context from ``start_dir`` (default: cwd).

    Every discovered type directory is registered with the permissive
    BaseEntity schema, named after the directory itself.
    """
    context_root = discover_context_root(start_dir=start_dir)
    if context_root.primary is None:
        raise NoContextError(str(start_dir or Path.cwd()))

    registry = SchemaRegistry()
    for dir_name in _type_directories(context_root):
        registry.register(dir_name, BaseEntity, plural_name=dir_name)

    return ContextAPI(HierarchicalProvider(context_root, registry), registry)


app = create_app(discover_api)


if __name__ == "__main__":
    app()
