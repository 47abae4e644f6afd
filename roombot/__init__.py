"""Matrix chat-room command bot."""

__version__ = "0.1.0"
