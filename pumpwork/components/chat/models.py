"""
Chat component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Conversation, Message
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class ListConversationsInput:
    actor: Identity | None
    force_refresh: bool = False


@dataclass(frozen=True)
class GetOrCreateConversationInput:
    """Open the conversation between the actor and ``other_user_id``."""

    actor: Identity | None
    other_user_id: UUID | str


@dataclass(frozen=True)
class ListMessagesInput:
    actor: Identity | None
    conversation_id: UUID | str
    limit: int | None = None
    before: datetime | None = None


@dataclass(frozen=True)
class SendMessageInput:
    actor: Identity | None
    conversation_id: UUID | str
    content: str


@dataclass(frozen=True)
class MarkReadInput:
    actor: Identity | None
    conversation_id: UUID | str


@dataclass(frozen=True)
class UnreadCountInput:
    actor: Identity | None


@dataclass(frozen=True)
class ConversationOutput:
    conversation: Conversation | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ConversationListOutput:
    conversations: list[Conversation]
    total: int
    success: bool = True
    error: OperationError | None = None


@dataclass(frozen=True)
class MessageOutput:
    message: Message | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class MessageListOutput:
    messages: list[Message]
    total: int
    success: bool = True
    error: OperationError | None = None


@dataclass(frozen=True)
class CountOutput:
    """Unread count, or number of messages marked read."""

    count: int
    success: bool = True
    error: OperationError | None = None
