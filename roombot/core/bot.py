# roombot/core/bot.py
"""Command dispatcher for inbound room messages.

The Bot turns one inbound Matrix event into zero or more replies:
filter, parse, look up, count, then run the handler inside an error
boundary so a failing command never escapes to the caller.
"""

import logging
from datetime import datetime
from typing import Any

from roombot.config import Settings
from roombot.core.commands.handlers import create_command_registry, unknown_command_text
from roombot.core.commands.models import CommandContext
from roombot.core.commands.parser import parse_command
from roombot.core.commands.registry import CommandRegistry
from roombot.core.services.format import utcnow
from roombot.core.services.stats import record_command
from roombot.core.storage.base import Storage
from roombot.interfaces.matrix.client import MatrixClientLike
from roombot.utils.logging import set_request_id

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "Something went wrong while running that command."


def _text_body(event: dict[str, Any]) -> str | None:
    """Return the body of an m.text message event, else None."""
    content = event.get("content")
    if not isinstance(content, dict):
        return None
    if content.get("msgtype") != "m.text":
        return None
    body = content.get("body")
    return body if isinstance(body, str) else None


class Bot:
    """Dispatcher owning the command registry.

    Attributes:
        client: Chat client used for replies and room state.
        storage: Storage for stats and command state.
        config: Settings snapshot handed to every handler.
        registry: Registry commands are resolved from.
        start_time: When the bot started (for uptime).

    Example:
        >>> bot = Bot(client, storage, settings)
        >>> await bot.handle_message("!room:example.org", event)
    """

    def __init__(
        self,
        client: MatrixClientLike,
        storage: Storage,
        config: Settings,
        start_time: datetime | None = None,
        registry: CommandRegistry | None = None,
    ) -> None:
        self.client = client
        self.storage = storage
        self.config = config
        self.registry = registry if registry is not None else create_command_registry()
        self.start_time = start_time or utcnow()

    async def handle_message(self, room_id: str, event: dict[str, Any]) -> None:
        """Dispatch one inbound room event.

        Ignored events (non-text, own messages, no prefix) produce no
        reply. Unknown commands get a hint. Handler failures are logged
        and answered with a generic message; they are never re-raised.

        Args:
            room_id: Room the event arrived in.
            event: Raw event dict (Matrix client-server format).
        """
        sender = event.get("sender")
        if not isinstance(sender, str) or not sender:
            return
        if sender == self.config.matrix_user_id:
            return

        body = _text_body(event)
        if body is None:
            return

        parsed = parse_command(body, self.config.bot_prefix)
        if parsed is None:
            return

        set_request_id(str(event.get("event_id", "")))
        try:
            definition = self.registry.get(parsed.name)
            if definition is None:
                logger.warning(
                    "Unknown command %s from %s in %s", parsed.name, sender, room_id
                )
                await self._send_safely(
                    room_id, unknown_command_text(parsed.name, self.config.bot_prefix)
                )
                return

            now = utcnow()
            await record_command(self.storage, parsed.name, now)
            logger.info("Running command %s for %s in %s", parsed.name, sender, room_id)

            ctx = CommandContext(
                room_id=room_id,
                event=event,
                sender=sender,
                args=parsed.args,
                raw_args=parsed.raw_args,
                config=self.config,
                client=self.client,
                storage=self.storage,
                now=now,
                start_time=self.start_time,
                registry=self.registry,
            )

            try:
                await definition.handler(ctx)
            except Exception as e:
                logger.exception("Error running command %s: %s", parsed.name, e)
                await self._send_safely(room_id, GENERIC_ERROR_TEXT)
        finally:
            set_request_id("")

    async def _send_safely(self, room_id: str, text: str) -> None:
        """Send a dispatcher-generated reply, logging instead of raising on failure."""
        try:
            await self.client.send_text(room_id, text)
        except Exception:
            logger.exception("Failed to send reply to %s", room_id)
