"""Ordered startup and shutdown of the bot's long-lived resources.

The Matrix entry point registers the JSON store and the client adapter.
On exit they are stopped in reverse registration order, so the client
session closes after the store has flushed.

Example:
    >>> lm = get_lifecycle_manager()
    >>> lm.register("storage", storage)
    >>> await lm.startup()
    >>> # ... sync loop runs ...
    >>> await lm.shutdown()
"""

import inspect
import logging
from typing import Any

logger = logging.getLogger(__name__)


async def _invoke(component: Any, hook: str) -> None:
    """Call ``component.<hook>()`` if it exists, awaiting async hooks."""
    method = getattr(component, hook, None)
    if method is None:
        return
    result = method()
    if inspect.isawaitable(result):
        await result


class LifecycleManager:
    """Starts registered components in order and stops them in reverse.

    Components may define ``start()`` and ``shutdown()``, sync or async;
    either hook is optional.
    """

    def __init__(self) -> None:
        self._components: list[tuple[str, Any]] = []
        self._started = False

    def register(self, name: str, component: Any) -> None:
        self._components.append((name, component))
        logger.debug("Registered %s for lifecycle management", name)

    async def startup(self) -> None:
        """Run each component's ``start()``. Repeated calls are no-ops."""
        if self._started:
            return

        for name, component in self._components:
            await _invoke(component, "start")
            logger.debug("Started %s", name)

        self._started = True
        logger.info("Lifecycle started with %d component(s)", len(self._components))

    async def shutdown(self) -> None:
        """Run each component's ``shutdown()`` in reverse order.

        A component that fails to stop is logged and the rest still stop.
        Does nothing unless ``startup()`` has run.
        """
        if not self._started:
            return

        for name, component in reversed(self._components):
            try:
                await _invoke(component, "shutdown")
            except Exception:
                logger.exception("Error stopping %s", name)
            else:
                logger.info("Stopped %s", name)

        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def component_count(self) -> int:
        return len(self._components)


_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Return the process-wide LifecycleManager, creating it on first use."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


def reset_lifecycle_manager() -> None:
    """Drop the shared manager so the next lookup builds a fresh one (tests)."""
    global _lifecycle_manager
    _lifecycle_manager = None
