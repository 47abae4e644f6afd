# roombot/interfaces/matrix/bot.py
"""Matrix bot process built on matrix-nio's AsyncClient.

Provides event callbacks for:
- Room messages (dispatched to the command Bot)
- Invites (auto-join)
- Undecryptable Megolm events (logged)

An initial sync runs before callbacks are attached so messages already in
the room history are not answered again after a restart.
"""

import asyncio
import logging
import os
from typing import Any

from dotenv import load_dotenv
from nio import (
    AsyncClient,
    AsyncClientConfig,
    InviteMemberEvent,
    JoinError,
    MatrixRoom,
    MegolmEvent,
    RoomMessage,
    WhoamiResponse,
)

# Load environment variables from .env file
load_dotenv()

from roombot.config import Settings, settings
from roombot.core.bot import Bot
from roombot.core.lifecycle import get_lifecycle_manager
from roombot.core.storage.json_file import JsonFileStorage
from roombot.interfaces.matrix.client import NioMatrixClient
from roombot.utils.logging import configure_structured_logging
from roombot.utils.observability import setup_logfire

logger = logging.getLogger(__name__)

SYNC_TIMEOUT_MS = 30000


# ============================================================================
# Event Callbacks
# ============================================================================


def _event_dict(event: Any) -> dict[str, Any]:
    """Raw event dict for the dispatcher, with the fields nio parsed out."""
    source = dict(getattr(event, "source", None) or {})
    source.setdefault("sender", event.sender)
    source.setdefault("event_id", event.event_id)
    return source


def make_message_callback(bot: Bot):
    """Build the RoomMessage callback that feeds the dispatcher."""

    async def on_message(room: MatrixRoom, event: RoomMessage) -> None:
        await bot.handle_message(room.room_id, _event_dict(event))

    return on_message


def make_invite_callback(client: AsyncClient, user_id: str):
    """Build the invite callback that joins rooms the bot is invited to."""

    async def on_invite(room: MatrixRoom, event: InviteMemberEvent) -> None:
        if event.state_key != user_id or event.membership != "invite":
            return
        response = await client.join(room.room_id)
        if isinstance(response, JoinError):
            logger.warning("Failed to join %s: %s", room.room_id, response.message)
        else:
            logger.info("Joined %s after invite from %s", room.room_id, event.sender)

    return on_invite


async def on_undecryptable(room: MatrixRoom, event: MegolmEvent) -> None:
    """Log encrypted events the client could not decrypt."""
    logger.warning(
        "Failed to decrypt event %s in %s (session %s)",
        event.event_id,
        room.room_id,
        event.session_id,
    )


# ============================================================================
# Bot Factory and Startup Functions
# ============================================================================


def create_client(config: Settings) -> AsyncClient:
    """Create the nio client with on-disk sync and crypto state.

    Args:
        config: Settings providing homeserver, account and store path.

    Returns:
        Unauthenticated AsyncClient.
    """
    store_path = config.resolved_matrix_store_path
    os.makedirs(store_path, exist_ok=True)

    client_config = AsyncClientConfig(
        store_sync_tokens=True,
        encryption_enabled=config.matrix_encryption,
    )
    return AsyncClient(
        config.matrix_homeserver_url,
        config.matrix_user_id,
        device_id=config.matrix_device_id or None,
        store_path=store_path,
        config=client_config,
    )


async def restore_login(client: AsyncClient, config: Settings) -> None:
    """Authenticate with the configured access token.

    When no device ID is configured it is looked up with /whoami.

    Raises:
        RuntimeError: If the access token is rejected.
    """
    device_id = config.matrix_device_id
    if not device_id:
        client.access_token = config.matrix_access_token
        response = await client.whoami()
        if not isinstance(response, WhoamiResponse):
            raise RuntimeError(f"Access token rejected: {response}")
        device_id = response.device_id or ""

    client.restore_login(
        user_id=config.matrix_user_id,
        device_id=device_id,
        access_token=config.matrix_access_token,
    )
    logger.info("Logged in as %s (device %s)", config.matrix_user_id, device_id)


def create_bot(config: Settings) -> tuple[Bot, AsyncClient, JsonFileStorage]:
    """Create the dispatcher and its collaborators.

    Args:
        config: Validated settings.

    Returns:
        Tuple of (Bot, nio AsyncClient, JsonFileStorage).

    Raises:
        ValueError: If required settings are missing.
    """
    missing = config.missing_required()
    if missing:
        raise ValueError(f"Missing required env var(s): {', '.join(missing)}")

    os.makedirs(config.bot_data_dir, exist_ok=True)
    storage = JsonFileStorage.open(config.resolved_store_path)
    client = create_client(config)
    bot = Bot(NioMatrixClient(client), storage, config)
    return bot, client, storage


async def start_bot(config: Settings | None = None) -> None:
    """Start the bot and sync until cancelled."""
    config = config or settings
    bot, client, storage = create_bot(config)

    logger.info(
        "Starting Matrix bot: homeserver=%s user=%s prefix=%s data_dir=%s",
        config.matrix_homeserver_url,
        config.matrix_user_id,
        config.bot_prefix,
        config.bot_data_dir,
    )

    lifecycle = get_lifecycle_manager()
    lifecycle.register("storage", storage)
    lifecycle.register("matrix_client", bot.client)
    await lifecycle.startup()

    try:
        await restore_login(client, config)

        await client.sync(timeout=SYNC_TIMEOUT_MS, full_state=True)
        if client.should_upload_keys:
            await client.keys_upload()

        client.add_event_callback(make_message_callback(bot), RoomMessage)
        client.add_event_callback(
            make_invite_callback(client, config.matrix_user_id), InviteMemberEvent
        )
        client.add_event_callback(on_undecryptable, MegolmEvent)

        logger.info("Bot started and syncing")
        await client.sync_forever(timeout=SYNC_TIMEOUT_MS, full_state=True)
    except asyncio.CancelledError:
        logger.info("Received shutdown signal")
    finally:
        await lifecycle.shutdown()
        logger.info("Matrix bot stopped")


def main() -> None:
    """Entry point with graceful shutdown handling."""
    configure_structured_logging(settings.log_level, json_output=settings.bot_log_json)
    setup_logfire(settings)

    try:
        asyncio.run(start_bot())
    except KeyboardInterrupt:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
