# roombot/core/services/suggestions.py
"""User suggestions persisted under the ``"suggestions"`` storage key.

Suggestions are append-only. Ids come from a counter stored alongside the
items so they are never reused.
"""

from dataclasses import dataclass
from datetime import datetime

from roombot.core.services.format import format_timestamp
from roombot.core.storage.base import Storage

STORAGE_KEY = "suggestions"


@dataclass
class Suggestion:
    """A single suggestion submitted from a room.

    Attributes:
        id: Sequential identifier starting at 1.
        text: Suggestion text as typed.
        sender: Matrix user ID of the submitter.
        room_id: Room the suggestion was made in.
        created_at: ISO-8601 submission timestamp.
    """

    id: int
    text: str
    sender: str
    room_id: str
    created_at: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "sender": self.sender,
            "roomId": self.room_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Suggestion":
        return cls(
            id=int(data["id"]),
            text=data["text"],
            sender=data["sender"],
            room_id=data["roomId"],
            created_at=data["createdAt"],
        )


def _empty_store() -> dict:
    return {"nextId": 1, "items": []}


async def add_suggestion(
    storage: Storage, text: str, sender: str, room_id: str, now: datetime
) -> Suggestion:
    """Append a suggestion with the next free id.

    Args:
        storage: Storage holding the suggestions document.
        text: Suggestion text.
        sender: Submitting user.
        room_id: Originating room.
        now: Submission time.

    Returns:
        The created Suggestion, including its assigned id.
    """
    created: list[Suggestion] = []

    def _append(current: dict) -> dict:
        suggestion = Suggestion(
            id=current["nextId"],
            text=text,
            sender=sender,
            room_id=room_id,
            created_at=format_timestamp(now),
        )
        created.append(suggestion)
        return {
            "nextId": current["nextId"] + 1,
            "items": [*current["items"], suggestion.to_dict()],
        }

    await storage.update(STORAGE_KEY, _append, _empty_store())
    return created[0]


async def get_suggestions(storage: Storage) -> list[Suggestion]:
    """Return all suggestions in submission order."""
    stored = await storage.get(STORAGE_KEY)
    if stored is None:
        return []
    return [Suggestion.from_dict(item) for item in stored.get("items", [])]
