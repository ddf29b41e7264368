"""
Output formatters for the CLI.

- table → rich Table rendered to plain text (uppercase headers, "-" for missing values)
- json → indented JSON
- yaml → block-style YAML
"""

import json
from io import StringIO
from typing import Any, Literal

import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from overcontext.core.types import BaseEntity

OutputFormat = Literal["table", "json", "yaml"]

DEFAULT_FIELDS = ["id", "name", "type"]
EMPTY_MESSAGE = "No entities found."


def entity_to_record(entity: BaseEntity) -> dict[str, Any]:
    """JSON-safe dict of an entity, without unset fields."""
    return entity.model_dump(mode="json", exclude_none=True)


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def render_table(entities: list[BaseEntity], fields: list[str], show_header: bool = True) -> str:
    table = Table(box=None, show_header=show_header, pad_edge=False)
    for field in fields:
        table.add_column(field.upper(), no_wrap=True)

    for entity in entities:
        record = entity_to_record(entity)
        table.add_row(*(Text(_cell(record.get(field))) for field in fields))

    # Wide enough that rows are never wrapped or truncated
    buffer = StringIO()
    console = Console(file=buffer, width=10_000, color_system=None, highlight=False)
    console.print(table)
    lines = buffer.getvalue().splitlines()
    return "\n".join(line.rstrip() for line in lines)


def format_entities(
    entities: list[BaseEntity],
    output_format: OutputFormat = "table",
    fields: list[str] | None = None,
    no_headers: bool = False,
) -> str:
    """Format a list of entities."""
    if output_format == "json":
        return json.dumps([entity_to_record(e) for e in entities], indent=2)

    if output_format == "yaml":
        return yaml.safe_dump([entity_to_record(e) for e in entities], sort_keys=False, allow_unicode=True)

    if not entities:
        return EMPTY_MESSAGE

    return render_table(entities, fields or DEFAULT_FIELDS, show_header=not no_headers)


def format_entity(entity: BaseEntity, output_format: OutputFormat = "yaml") -> str:
    """Format a single entity. Anything but json renders as YAML."""
    record = entity_to_record(entity)
    if output_format == "json":
        return json.dumps(record, indent=2)
    return yaml.safe_dump(record, sort_keys=False, allow_unicode=True)
