"""Command module for parsing, registering and running chat commands.

This module provides:
- ParsedCommand / parse_command: Prefix-based command parsing
- CommandDefinition / CommandContext: Registry entries and handler context
- CommandRegistry: Name-keyed command catalogue
- create_command_registry: Registry populated with the built-in commands
"""

from roombot.core.commands.handlers import create_command_registry
from roombot.core.commands.models import (
    CommandContext,
    CommandDefinition,
    CommandHandler,
)
from roombot.core.commands.parser import ParsedCommand, parse_command
from roombot.core.commands.registry import CommandRegistry

__all__ = [
    "ParsedCommand",
    "parse_command",
    "CommandContext",
    "CommandDefinition",
    "CommandHandler",
    "CommandRegistry",
    "create_command_registry",
]
