# roombot/utils/__init__.py
"""Utility functions for the command bot."""

from roombot.utils.logging import (
    configure_structured_logging,
    get_request_id,
    set_request_id,
)
from roombot.utils.observability import setup_logfire

__all__ = [
    "setup_logfire",
    "set_request_id",
    "get_request_id",
    "configure_structured_logging",
]
