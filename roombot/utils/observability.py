"""Observability configuration with Pydantic Logfire."""

import logging

from roombot.config import Settings

logger = logging.getLogger(__name__)


def setup_logfire(settings: Settings) -> None:
    """Configure Logfire for observability.

    Only activates if LOGFIRE_TOKEN is set. Call this at application
    startup before the Matrix client is created.
    """
    if not settings.logfire_token:
        return

    try:
        import logfire

        logfire.configure(
            token=settings.logfire_token,
            service_name="roombot",
            send_to_logfire="if-token-present",
        )
        logfire.instrument_aiohttp_client()
    except Exception as e:
        # Log but don't fail - observability is optional
        logger.warning("Failed to configure Logfire: %s", str(e))
