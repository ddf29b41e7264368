"""
CLI command handlers.

Each handler takes a CommandContext and returns the text to print, so the
same handlers back the typer application and any consumer-built CLI.
"""

from dataclasses import dataclass
from typing import Any

from overcontext.api.context import ContextAPI
from overcontext.core.errors import EntityNotFoundError
from overcontext.interface.formatters import OutputFormat, format_entities, format_entity

DEFAULT_LIST_LIMIT = 20


@dataclass
class CommandContext:
    """What every command needs: the API, output format and namespace."""

    api: ContextAPI
    output_format: OutputFormat = "table"
    namespace: str | None = None


def list_command(
    ctx: CommandContext,
    entity_type: str,
    search: str | None = None,
    limit: int | None = None,
    fields: list[str] | None = None,
) -> str:
    result = ctx.api.search(
        type=entity_type,
        namespace=ctx.namespace,
        search=search,
        limit=DEFAULT_LIST_LIMIT if limit is None else limit,
    )
    return format_entities(result.items, ctx.output_format, fields=fields)


def get_command(ctx: CommandContext, entity_type: str, entity_id: str) -> str:
    entity = ctx.api.get(entity_type, entity_id, ctx.namespace)
    if entity is None:
        raise EntityNotFoundError(entity_type, entity_id, ctx.namespace)
    return format_entity(entity, ctx.output_format)


def create_command(
    ctx: CommandContext,
    entity_type: str,
    name: str,
    data: dict[str, Any] | None = None,
    entity_id: str | None = None,
) -> str:
    entity = ctx.api.create(
        entity_type,
        {"name": name, **(data or {})},
        id=entity_id,
        namespace=ctx.namespace,
    )
    return f"Created {entity_type}: {entity.id}"


def update_command(ctx: CommandContext, entity_type: str, entity_id: str, data: dict[str, Any]) -> str:
    ctx.api.update(entity_type, entity_id, data, ctx.namespace)
    return f"Updated {entity_type}: {entity_id}"


def delete_command(ctx: CommandContext, entity_type: str, entity_id: str) -> str:
    if not ctx.api.delete(entity_type, entity_id, ctx.namespace):
        raise EntityNotFoundError(entity_type, entity_id, ctx.namespace)
    return f"Deleted {entity_type}: {entity_id}"


def types_command(ctx: CommandContext) -> str:
    return "\n".join(ctx.api.types())


def namespaces_command(ctx: CommandContext) -> str:
    return "\n".join(ctx.api.provider.list_namespaces())
