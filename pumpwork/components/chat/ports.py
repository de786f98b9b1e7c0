"""
Chat component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from pumpwork.domain.entities import Conversation, Message, Profile


class ConversationRepoPort(Protocol):
    def save(self, conversation: Conversation) -> Conversation: ...
    def get_by_id(self, conversation_id: UUID | str) -> Conversation | None: ...

    def get_by_participants(
        self, participant_1_id: UUID | str, participant_2_id: UUID | str
    ) -> Conversation | None: ...

    def list_for_user(self, user_id: UUID | str) -> list[Conversation]:
        """Most recent activity first; conversations without messages last."""
        ...

    def touch(self, conversation_id: UUID | str, at: datetime) -> Conversation | None: ...


class MessageRepoPort(Protocol):
    def save(self, message: Message) -> Message: ...
    def get_by_id(self, message_id: UUID | str) -> Message | None: ...

    def list_by_conversation(
        self, conversation_id: UUID | str, limit: int = 100, before: datetime | None = None
    ) -> list[Message]: ...

    def mark_read(self, conversation_id: UUID | str, reader_id: UUID | str) -> int: ...
    def count_unread(self, user_id: UUID | str) -> int: ...


class ProfileLookupPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...


class ChangeFeedPort(Protocol):
    """Realtime hub handing out push channels."""

    def channel(self, name: str) -> Any: ...
    def remove_channel(self, channel: Any) -> None: ...
