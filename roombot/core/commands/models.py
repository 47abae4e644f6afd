# roombot/core/commands/models.py
"""Command data models shared by the registry, handlers and dispatcher.

This module defines the CommandDefinition registered at startup and the
CommandContext built fresh for every dispatched command.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from roombot.config import Settings
from roombot.core.storage.base import Storage
from roombot.interfaces.matrix.client import MatrixClientLike

if TYPE_CHECKING:
    from roombot.core.commands.registry import CommandRegistry


@dataclass
class CommandContext:
    """Everything a handler may consult while running one command.

    Attributes:
        room_id: Room the command was sent in; replies go here.
        event: Raw inbound event (Matrix client-server JSON).
        sender: Matrix user ID of the invoking user.
        args: Whitespace-split argument tokens.
        raw_args: Argument text with internal spacing preserved.
        config: Settings snapshot the bot was created with.
        client: Chat client capability (send text, read room state).
        storage: Key-value persistence handle.
        now: Time the command was dispatched (UTC).
        start_time: Time the bot started (UTC).
        registry: Registry the command was resolved from.
    """

    room_id: str
    event: dict[str, Any]
    sender: str
    args: list[str]
    raw_args: str
    config: Settings
    client: MatrixClientLike
    storage: Storage
    now: datetime
    start_time: datetime
    registry: "CommandRegistry"

    async def reply(self, text: str) -> str:
        """Send text to the originating room.

        Returns:
            Event ID of the sent message.
        """
        return await self.client.send_text(self.room_id, text)


CommandHandler = Callable[[CommandContext], Awaitable[None]]


@dataclass(frozen=True)
class CommandDefinition:
    """A named command as it appears in the registry and in help output.

    Attributes:
        name: Unique lowercase command name.
        summary: One-line description shown by help.
        handler: Coroutine function invoked with a CommandContext.
        usage: Optional usage hint without the prefix, e.g. ``"roll [NdM]"``.
    """

    name: str
    summary: str
    handler: CommandHandler = field(repr=False)
    usage: str | None = None
