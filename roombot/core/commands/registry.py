"""Name-keyed catalogue of command definitions."""

import logging

from roombot.core.commands.models import CommandDefinition

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Registry mapping command names to their definitions.

    Registering a name that already exists replaces the previous
    definition. Lookups are exact-match; names are stored lowercase by
    convention because the parser lowercases what users type.

    Example:
        >>> registry = CommandRegistry()
        >>> registry.register(CommandDefinition("ping", "Pong", handler))
        >>> registry.get("ping").summary
        'Pong'
    """

    def __init__(self) -> None:
        self._commands: dict[str, CommandDefinition] = {}

    def register(self, definition: CommandDefinition) -> None:
        """Add or replace a command definition.

        Args:
            definition: Definition keyed by its ``name``.
        """
        if definition.name in self._commands:
            logger.debug("Replacing command definition: %s", definition.name)
        self._commands[definition.name] = definition

    def get(self, name: str) -> CommandDefinition | None:
        """Look up a command by exact name.

        Args:
            name: Command name (expected lowercase).

        Returns:
            The definition, or None if no command has that name.
        """
        return self._commands.get(name)

    def list(self) -> list[CommandDefinition]:
        """Return all definitions sorted by name, ascending."""
        return sorted(self._commands.values(), key=lambda d: d.name)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)
