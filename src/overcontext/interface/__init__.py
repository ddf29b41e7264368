"""
Interface Layer - command-line access to a ContextAPI.
"""

from overcontext.interface.cli import app, create_app, discover_api
from overcontext.interface.commands import CommandContext
from overcontext.interface.formatters import format_entities, format_entity

__all__ = [
    "app",
    "create_app",
    "discover_api",
    "CommandContext",
    "format_entities",
    "format_entity",
]
