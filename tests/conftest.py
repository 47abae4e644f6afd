# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- A recording Matrix client double
- In-memory storage
- Test settings and message events
- Temporary data directories
- Lifecycle singleton reset
"""

import tempfile
import time
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

import pytest

from roombot.config import Settings
from roombot.core.storage.memory import MemoryStorage
from roombot.interfaces.matrix.client import MatrixClientError

BOT_USER_ID = "@bot:matrix.test"
ALICE = "@alice:matrix.test"
BOB = "@bob:matrix.test"
ROOM_ID = "!room:matrix.test"


@dataclass
class SentMessage:
    room_id: str
    text: str


class MockMatrixClient:
    """MatrixClientLike double that records sent messages.

    State events are looked up by ``(room_id, event_type)``; a missing
    entry raises MatrixClientError like a 404 from the homeserver.
    """

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self.state_events: dict[tuple[str, str], dict[str, Any]] = {}
        self.room_state: dict[str, list[dict[str, Any]]] = {}
        self.fail_room_state = False

    async def send_text(self, room_id: str, text: str) -> str:
        self.sent.append(SentMessage(room_id, text))
        return f"$fake_event_{len(self.sent)}"

    async def get_room_state_event(
        self, room_id: str, event_type: str, state_key: str = ""
    ) -> dict[str, Any]:
        content = self.state_events.get((room_id, event_type))
        if content is None:
            raise MatrixClientError(
                f"State event not found: {room_id} {event_type}", "M_NOT_FOUND"
            )
        return content

    async def get_room_state(self, room_id: str) -> list[dict[str, Any]]:
        if self.fail_room_state:
            raise MatrixClientError("Forbidden", "M_FORBIDDEN")
        return self.room_state.get(room_id, [])

    @property
    def last_text(self) -> str | None:
        return self.sent[-1].text if self.sent else None


def make_settings(**overrides: Any) -> Settings:
    """Build Settings without reading the process environment or .env."""
    values: dict[str, Any] = {
        "matrix_homeserver_url": "https://matrix.test",
        "matrix_access_token": "test_token",
        "matrix_user_id": BOT_USER_ID,
        "matrix_device_id": "TESTDEVICE",
        "bot_prefix": "!",
        "bot_data_dir": "./test-data",
        "bot_info_url": "https://matrix.org",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_text_event(sender: str, body: str, **extras: Any) -> dict[str, Any]:
    """Build an m.room.message / m.text event dict."""
    event: dict[str, Any] = {
        "type": "m.room.message",
        "sender": sender,
        "event_id": f"$test_{time.monotonic_ns()}",
        "origin_server_ts": int(time.time() * 1000),
        "content": {"msgtype": "m.text", "body": body},
    }
    event.update(extras)
    return event


@pytest.fixture
def mock_client() -> MockMatrixClient:
    return MockMatrixClient()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def temp_data_dir() -> Generator[str, None, None]:
    """Create a temporary data directory.

    Yields:
        Path to temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def reset_lifecycle() -> Generator[None, None, None]:
    """Give each test a fresh lifecycle manager singleton."""
    from roombot.core.lifecycle import reset_lifecycle_manager

    reset_lifecycle_manager()
    yield
    reset_lifecycle_manager()
