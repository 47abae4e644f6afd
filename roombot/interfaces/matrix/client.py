# roombot/interfaces/matrix/client.py
"""Matrix client capability used by the dispatcher and handlers.

MatrixClientLike is the narrow interface the command core depends on.
NioMatrixClient implements it on top of matrix-nio's AsyncClient,
turning nio error responses into MatrixClientError.
"""

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import tenacity
from aiohttp import ClientConnectionError
from nio import (
    AsyncClient,
    RoomGetStateEventResponse,
    RoomGetStateResponse,
    RoomSendResponse,
)

logger = logging.getLogger(__name__)

SEND_ATTEMPTS = 3


class MatrixClientError(RuntimeError):
    """A Matrix API call returned an error response.

    Attributes:
        status_code: Matrix error code (e.g. ``M_NOT_FOUND``) when known.
    """

    def __init__(self, message: str, status_code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class MatrixClientLike(Protocol):
    """Protocol for the chat operations the command core needs."""

    async def send_text(self, room_id: str, text: str) -> str:
        """Send a plain-text message.

        Returns:
            Event ID of the sent message.
        """
        ...

    async def get_room_state_event(
        self, room_id: str, event_type: str, state_key: str = ""
    ) -> dict[str, Any]:
        """Fetch the content of one state event.

        Raises:
            MatrixClientError: If the event does not exist or the request fails.
        """
        ...

    async def get_room_state(self, room_id: str) -> list[dict[str, Any]]:
        """Fetch all current state events of a room."""
        ...


class NioMatrixClient:
    """MatrixClientLike backed by a matrix-nio AsyncClient.

    Attributes:
        client: The wrapped nio AsyncClient.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    @tenacity.retry(
        stop=tenacity.stop_after_attempt(SEND_ATTEMPTS),
        wait=tenacity.wait_exponential(multiplier=1, min=1, max=4),
        retry=tenacity.retry_if_exception_type(
            (asyncio.TimeoutError, ClientConnectionError)
        ),
        reraise=True,
    )
    async def send_text(self, room_id: str, text: str) -> str:
        response = await self.client.room_send(
            room_id=room_id,
            message_type="m.room.message",
            content={"msgtype": "m.text", "body": text},
            ignore_unverified_devices=True,
        )
        if not isinstance(response, RoomSendResponse):
            raise _to_error(f"Failed to send message to {room_id}", response)

        logger.debug("Sent message %s to %s", response.event_id, room_id)
        return response.event_id

    async def get_room_state_event(
        self, room_id: str, event_type: str, state_key: str = ""
    ) -> dict[str, Any]:
        response = await self.client.room_get_state_event(
            room_id, event_type, state_key
        )
        if not isinstance(response, RoomGetStateEventResponse):
            raise _to_error(f"No {event_type} state in {room_id}", response)
        return response.content

    async def get_room_state(self, room_id: str) -> list[dict[str, Any]]:
        response = await self.client.room_get_state(room_id)
        if not isinstance(response, RoomGetStateResponse):
            raise _to_error(f"Failed to read state of {room_id}", response)
        return list(response.events)

    async def shutdown(self) -> None:
        """Close the underlying HTTP session (lifecycle hook)."""
        await self.client.close()


def _to_error(context: str, response: Any) -> MatrixClientError:
    """Build a MatrixClientError from a nio ErrorResponse."""
    message = getattr(response, "message", None) or str(response)
    status_code = getattr(response, "status_code", None)
    return MatrixClientError(f"{context}: {message}", status_code=status_code)
