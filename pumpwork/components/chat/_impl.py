"""
ChatService - one-to-one conversations between marketplace users.

Keeps a short per-user cache of conversation lists so that screens polling
the inbox do not hit the database on every render. Conversations always
store the lower participant id first, which keeps one row per pair.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from pumpwork.adapters.realtime import POSTGRES_CHANGES, ChangeFilter
from pumpwork.domain.entities import ChangeEvent, Conversation, Message, attach_summaries

from .ports import (
    ChangeFeedPort,
    ConversationRepoPort,
    MessageRepoPort,
    ProfileLookupPort,
    TimePort,
)

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "Message content cannot be empty"

_channel_seq = itertools.count(1)


class MessageRejected(ValueError):
    """Raised when a message cannot be sent as written."""


def ordered_participants(user_a: UUID | str, user_b: UUID | str) -> tuple[str, str]:
    a, b = str(user_a), str(user_b)
    return (a, b) if a < b else (b, a)


@dataclass
class _CachedList:
    conversations: list[Conversation]
    fetched_at: datetime


class ChatService:
    """
    Chat service.

    Conversation lists are cached per user for ``cache_seconds`` unless a
    refresh is forced. Sending a message drops the cached lists of both
    participants so the new ordering shows up immediately.
    """

    def __init__(
        self,
        conversations: ConversationRepoPort,
        messages: MessageRepoPort,
        profiles: ProfileLookupPort,
        time: TimePort,
        feed: ChangeFeedPort | None = None,
        cache_seconds: float = 5.0,
        max_message_length: int = 5000,
        page_limit: int = 100,
    ) -> None:
        self._conversations = conversations
        self._messages = messages
        self._profiles = profiles
        self._time = time
        self._feed = feed
        self.cache_seconds = cache_seconds
        self.max_message_length = max_message_length
        self.page_limit = page_limit
        self._lists: dict[str, _CachedList] = {}
        self._by_id: dict[str, Conversation] = {}

    # --- conversations ---

    def _with_participants(self, conversations: list[Conversation]) -> list[Conversation]:
        return attach_summaries(
            conversations,
            self._profiles.get_many,
            participant_1="participant_1_id",
            participant_2="participant_2_id",
        )

    def _remember(self, conversation: Conversation) -> None:
        self._by_id[str(conversation.id)] = conversation

    def _forget_lists(self, *user_ids: UUID | str) -> None:
        for user_id in user_ids:
            self._lists.pop(str(user_id), None)

    def conversations_for(
        self, user_id: UUID | str, force_refresh: bool = False
    ) -> list[Conversation]:
        key = str(user_id)
        now = self._time.now_utc()
        cached = self._lists.get(key)
        if (
            not force_refresh
            and cached is not None
            and (now - cached.fetched_at).total_seconds() < self.cache_seconds
        ):
            return list(cached.conversations)

        conversations = self._with_participants(self._conversations.list_for_user(key))
        for conversation in conversations:
            self._remember(conversation)
        self._lists[key] = _CachedList(conversations, now)
        return list(conversations)

    def get(self, conversation_id: UUID | str) -> Conversation | None:
        return self._conversations.get_by_id(conversation_id)

    def get_or_create(self, user_a: UUID | str, user_b: UUID | str) -> Conversation:
        first, second = ordered_participants(user_a, user_b)

        for conversation in self._by_id.values():
            if (str(conversation.participant_1_id), str(conversation.participant_2_id)) == (
                first,
                second,
            ):
                return conversation

        existing = self._conversations.get_by_participants(first, second)
        if existing is not None:
            conversation = self._with_participants([existing])[0]
            self._remember(conversation)
            return conversation

        created = self._conversations.save(
            Conversation(
                participant_1_id=UUID(first),
                participant_2_id=UUID(second),
                created_at=self._time.now_utc(),
            )
        )
        logger.info("Conversation %s opened between %s and %s", created.id, first, second)
        conversation = self._with_participants([created])[0]
        self._remember(conversation)
        self._forget_lists(first, second)
        return conversation

    # --- messages ---

    def _with_sender(self, messages: list[Message]) -> list[Message]:
        return attach_summaries(messages, self._profiles.get_many, sender="sender_id")

    def messages(
        self,
        conversation_id: UUID | str,
        limit: int | None = None,
        before: datetime | None = None,
    ) -> list[Message]:
        """Oldest first, at most ``limit``; ``before`` pages back in time."""
        rows = self._messages.list_by_conversation(
            conversation_id, limit=limit or self.page_limit, before=before
        )
        return self._with_sender(rows)

    def send(self, conversation: Conversation, sender_id: UUID | str, content: str) -> Message:
        text = content.strip()
        if not text:
            raise MessageRejected(EMPTY_MESSAGE)
        if len(text) > self.max_message_length:
            raise MessageRejected(
                f"Message must be {self.max_message_length} characters or less"
            )

        now = self._time.now_utc()
        message = self._messages.save(
            Message(
                conversation_id=conversation.id,
                sender_id=UUID(str(sender_id)),
                content=text,
                created_at=now,
            )
        )
        touched = self._conversations.touch(conversation.id, now)
        if touched is not None:
            self._by_id.pop(str(touched.id), None)
        self._forget_lists(conversation.participant_1_id, conversation.participant_2_id)
        return self._with_sender([message])[0]

    def mark_read(self, conversation_id: UUID | str, reader_id: UUID | str) -> int:
        return self._messages.mark_read(conversation_id, reader_id)

    def unread_count(self, user_id: UUID | str) -> int:
        return self._messages.count_unread(user_id)

    # --- realtime ---

    def _open(
        self, prefix: str, change_filter: ChangeFilter, handler: Callable[[ChangeEvent], Any]
    ) -> Callable[[], None]:
        if self._feed is None:
            raise RuntimeError("Realtime is not configured for chat")
        feed = self._feed
        channel = feed.channel(f"{prefix}:{next(_channel_seq)}")
        channel.on(POSTGRES_CHANGES, change_filter, handler).subscribe()

        def unsubscribe() -> None:
            feed.remove_channel(channel)

        return unsubscribe

    def subscribe_to_messages(
        self, conversation_id: UUID | str, callback: Callable[[Message], Any]
    ) -> Callable[[], None]:
        """
        Push new messages of one conversation, with the sender embedded.

        Returns a function that closes the channel.
        """

        def on_insert(change: ChangeEvent) -> Any:
            message = Message.model_validate(change.new)
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                return callback(self._with_sender([message])[0])
            return deliver(message)

        async def deliver(message: Message) -> None:
            # Sender lookup reads sqlite; keep it off the event loop
            enriched = await asyncio.to_thread(self._with_sender, [message])
            result = callback(enriched[0])
            if inspect.isawaitable(result):
                await result

        return self._open(
            f"messages:{conversation_id}",
            ChangeFilter(
                event="INSERT",
                table="messages",
                filter=f"conversation_id=eq.{conversation_id}",
            ),
            on_insert,
        )

    def subscribe_to_conversations(
        self, user_id: UUID | str, callback: Callable[[ChangeEvent], Any]
    ) -> Callable[[], None]:
        """Push any change to a conversation the user takes part in."""
        key = str(user_id)

        def on_change(change: ChangeEvent) -> None:
            row = change.new or change.old
            if key in (str(row.get("participant_1_id")), str(row.get("participant_2_id"))):
                callback(change)

        return self._open(
            f"conversations:{key}", ChangeFilter(event="*", table="conversations"), on_change
        )
