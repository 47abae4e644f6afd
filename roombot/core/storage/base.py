"""Storage protocol for the bot's persisted key-value document.

Provides an abstraction layer over where command state lives, allowing
different backends (JSON file, in-memory) behind one interface.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class Storage(Protocol):
    """Protocol for key-value persistence used by stateful commands.

    Keys are strings; values are JSON-serializable. Every mutation is
    written through before the call returns.
    """

    async def get(self, key: str) -> Any | None:
        """Return the stored value for ``key``, or None if never set."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Replace the value for ``key`` and persist before returning."""
        ...

    async def update(self, key: str, updater: Callable[[T], T], default: T) -> T:
        """Read-modify-write the value for ``key``.

        Args:
            key: Document key.
            updater: Pure function computing the next value from the
                current one. It must not mutate its argument.
            default: Value passed to ``updater`` when ``key`` is unset.

        Returns:
            The value that was stored.
        """
        ...

    async def flush(self) -> None:
        """Persist pending changes; a no-op when nothing changed."""
        ...
