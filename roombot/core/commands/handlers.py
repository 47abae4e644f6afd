# roombot/core/commands/handlers.py
"""Built-in command handlers and the registry factory.

Each handler takes a CommandContext and replies to the originating room.
Handlers that read room state tolerate failed lookups and fall back to a
placeholder instead of raising.
"""

import logging
import platform
import random
import re
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version

from roombot import __version__
from roombot.core.commands.models import CommandContext, CommandDefinition
from roombot.core.commands.registry import CommandRegistry
from roombot.core.services.format import format_duration_ms, format_timestamp
from roombot.core.services.stats import get_stats
from roombot.core.services.suggestions import add_suggestion, get_suggestions

logger = logging.getLogger(__name__)

MAX_DICE = 100
MAX_SIDES = 1000
TOP_COMMANDS_LIMIT = 5

DICE_PATTERN = re.compile(r"^(\d+)d(\d+)$", re.IGNORECASE | re.ASCII)

# Longer digit runs are out of range; reject them before int()
MAX_DIGITS = len(str(MAX_SIDES))


@dataclass(frozen=True)
class DiceSpec:
    count: int
    sides: int


def parse_dice_spec(text: str | None) -> DiceSpec | None:
    """Parse an ``NdM`` dice spec.

    Args:
        text: Spec such as ``"3d6"``; empty or None means one six-sided die.

    Returns:
        DiceSpec, or None if the text is malformed or out of range.
    """
    if not text:
        return DiceSpec(count=1, sides=6)

    match = DICE_PATTERN.match(text)
    if not match:
        return None
    if len(match.group(1)) > MAX_DIGITS or len(match.group(2)) > MAX_DIGITS:
        return None

    count, sides = int(match.group(1)), int(match.group(2))
    if count < 1 or sides < 2:
        return None
    if count > MAX_DICE or sides > MAX_SIDES:
        return None
    return DiceSpec(count=count, sides=sides)


def unknown_command_text(name: str, prefix: str) -> str:
    return f"Unknown command: {name}. Try {prefix}help"


async def is_room_encrypted(ctx: CommandContext) -> bool:
    """Check the room's m.room.encryption state; lookup failures mean no."""
    try:
        content = await ctx.client.get_room_state_event(
            ctx.room_id, "m.room.encryption", ""
        )
    except Exception as e:
        logger.debug("Encryption state unavailable for %s: %s", ctx.room_id, e)
        return False
    return bool(content.get("algorithm"))


# ============================================================================
# Handlers
# ============================================================================


async def handle_help(ctx: CommandContext) -> None:
    prefix = ctx.config.bot_prefix
    query = ctx.args[0].lower() if ctx.args else ""

    if query:
        definition = ctx.registry.get(query)
        if definition is None:
            await ctx.reply(unknown_command_text(query, prefix))
            return
        usage = f"{prefix}{definition.usage or definition.name}"
        await ctx.reply(f"{definition.summary}\nUsage: {usage}")
        return

    lines = [f"{prefix}{d.name} - {d.summary}" for d in ctx.registry.list()]
    await ctx.reply("Commands:\n" + "\n".join(lines))


async def handle_ping(ctx: CommandContext) -> None:
    await ctx.reply("Pong!")


async def handle_echo(ctx: CommandContext) -> None:
    if not ctx.raw_args:
        await ctx.reply(f"Usage: {ctx.config.bot_prefix}echo <text>")
        return
    await ctx.reply(ctx.raw_args)


async def handle_time(ctx: CommandContext) -> None:
    await ctx.reply(f"Server time: {format_timestamp(ctx.now)}")


async def handle_uptime(ctx: CommandContext) -> None:
    elapsed_ms = (ctx.now - ctx.start_time).total_seconds() * 1000
    await ctx.reply(f"Uptime: {format_duration_ms(elapsed_ms)}")


async def handle_roll(ctx: CommandContext) -> None:
    spec = parse_dice_spec(ctx.args[0] if ctx.args else None)
    if spec is None:
        await ctx.reply(
            f"Usage: {ctx.config.bot_prefix}roll [NdM] (max {MAX_DICE}d{MAX_SIDES})"
        )
        return

    rolls = [random.randint(1, spec.sides) for _ in range(spec.count)]
    rolled = ", ".join(str(r) for r in rolls)
    await ctx.reply(
        f"Rolled {spec.count}d{spec.sides}: {rolled} (total {sum(rolls)})"
    )


async def handle_whoami(ctx: CommandContext) -> None:
    # Never include the bot's own user ID or device ID
    await ctx.reply(
        f"You are {ctx.sender}\n"
        f"Bot version: {__version__}\n"
        f"More info: {ctx.config.bot_info_url}"
    )


async def handle_roominfo(ctx: CommandContext) -> None:
    room_name = "(unknown)"
    try:
        content = await ctx.client.get_room_state_event(ctx.room_id, "m.room.name", "")
        if isinstance(content.get("name"), str):
            room_name = content["name"]
    except Exception as e:
        logger.debug("Room name unavailable for %s: %s", ctx.room_id, e)
        room_name = "(unavailable)"

    member_count: int | None
    try:
        state = await ctx.client.get_room_state(ctx.room_id)
        member_count = sum(
            1
            for event in state
            if event.get("type") == "m.room.member"
            and (event.get("content") or {}).get("membership") == "join"
        )
    except Exception as e:
        logger.debug("Room state unavailable for %s: %s", ctx.room_id, e)
        member_count = None

    encrypted = await is_room_encrypted(ctx)
    members = "(unavailable)" if member_count is None else str(member_count)
    await ctx.reply(
        f"Room: {room_name}\n"
        f"Room ID: {ctx.room_id}\n"
        f"Members: {members}\n"
        f"Encrypted: {'yes' if encrypted else 'no'}"
    )


async def handle_encryptstatus(ctx: CommandContext) -> None:
    encrypted = await is_room_encrypted(ctx)
    await ctx.reply(f"Encryption: {'enabled' if encrypted else 'disabled'}")


async def handle_stats(ctx: CommandContext) -> None:
    stats = await get_stats(ctx.storage)
    top = ", ".join(
        f"{name}: {count}" for name, count in stats.top_commands(TOP_COMMANDS_LIMIT)
    )
    await ctx.reply(
        f"Commands run: {stats.total_commands}\n"
        f"Last command: {stats.last_command_at or 'n/a'}\n"
        f"Top: {top or 'n/a'}"
    )


async def handle_suggest(ctx: CommandContext) -> None:
    if not ctx.raw_args:
        await ctx.reply(f"Usage: {ctx.config.bot_prefix}suggest <text>")
        return

    suggestion = await add_suggestion(
        ctx.storage, ctx.raw_args, ctx.sender, ctx.room_id, ctx.now
    )
    logger.info("Saved suggestion #%d from %s", suggestion.id, ctx.sender)
    await ctx.reply(f"Thanks! Saved suggestion #{suggestion.id}.")


async def handle_suggestions(ctx: CommandContext) -> None:
    suggestions = await get_suggestions(ctx.storage)
    if not suggestions:
        await ctx.reply("No suggestions yet.")
        return

    lines = [f"#{s.id} {s.text} (from {s.sender})" for s in suggestions]
    await ctx.reply("Suggestions:\n" + "\n".join(lines))


async def handle_version(ctx: CommandContext) -> None:
    try:
        nio_version = version("matrix-nio")
    except PackageNotFoundError:
        nio_version = "unknown"

    await ctx.reply(
        f"roombot: {__version__}\n"
        f"Python: {platform.python_version()}\n"
        f"matrix-nio: {nio_version}"
    )


# ============================================================================
# Registry Factory
# ============================================================================

BUILTIN_COMMANDS: tuple[CommandDefinition, ...] = (
    CommandDefinition(
        "help", "List commands or get help for one", handle_help, "help [command]"
    ),
    CommandDefinition("ping", "Check bot responsiveness", handle_ping),
    CommandDefinition("echo", "Echo back text", handle_echo, "echo <text>"),
    CommandDefinition("time", "Show server time", handle_time),
    CommandDefinition("uptime", "Show bot uptime", handle_uptime),
    CommandDefinition("roll", "Roll dice (NdM)", handle_roll, "roll [NdM]"),
    CommandDefinition("whoami", "Show your Matrix user ID", handle_whoami),
    CommandDefinition("roominfo", "Show room name and member count", handle_roominfo),
    CommandDefinition(
        "encryptstatus", "Check if room encryption is enabled", handle_encryptstatus
    ),
    CommandDefinition("stats", "Show command usage stats", handle_stats),
    CommandDefinition(
        "suggest", "Leave a suggestion for the bot", handle_suggest, "suggest <text>"
    ),
    CommandDefinition("suggestions", "List saved suggestions", handle_suggestions),
    CommandDefinition("version", "Show runtime versions", handle_version),
)


def create_command_registry() -> CommandRegistry:
    """Create a registry populated with the built-in commands."""
    registry = CommandRegistry()
    for definition in BUILTIN_COMMANDS:
        registry.register(definition)
    return registry
