"""Pure function-based command parser for extracting commands from text."""

from dataclasses import dataclass, field


@dataclass
class ParsedCommand:
    """Represents a parsed command invocation.

    Attributes:
        name: The command name (lowercase normalized, never empty).
        args: Whitespace-separated tokens following the name.
        raw_args: Text after the name with surrounding whitespace stripped
            and internal spacing preserved.
    """

    name: str
    args: list[str] = field(default_factory=list)
    raw_args: str = ""


def parse_command(body: str, prefix: str) -> ParsedCommand | None:
    """Parse a command from a message body.

    The body must start with ``prefix`` exactly (no case folding, no
    leading whitespace allowance). The command name is lowercased; the
    argument text keeps its original casing and spacing in ``raw_args``.

    Args:
        body: The message text to parse.
        prefix: Configured command prefix, e.g. ``"!"``.

    Returns:
        ParsedCommand if the body is a command invocation, otherwise None.

    Examples:
        >>> parse_command("!PING", "!")
        ParsedCommand(name='ping', args=[], raw_args='')

        >>> parse_command("!echo   hello   world  ", "!")
        ParsedCommand(name='echo', args=['hello', 'world'], raw_args='hello   world')

        >>> parse_command("hello !ping", "!")
        None

        >>> parse_command("!   ", "!")
        None
    """
    if not body.startswith(prefix):
        return None

    remainder = body[len(prefix) :].strip()
    if not remainder:
        return None

    parts = remainder.split()
    name = parts[0].lower()
    if not name:
        return None

    # Slice by the token length so argument spacing survives untouched
    raw_args = remainder[len(parts[0]) :].strip()

    return ParsedCommand(name=name, args=parts[1:], raw_args=raw_args)
