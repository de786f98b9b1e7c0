"""
Chat component unit tests.
"""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from pumpwork.adapters.sqlite.repos import SQLiteConversationRepo, SQLiteMessageRepo
from pumpwork.components.chat import (
    EMPTY_MESSAGE,
    ChatService,
    GetOrCreateConversationInput,
    ListConversationsInput,
    ListMessagesInput,
    MarkReadInput,
    SendMessageInput,
    UnreadCountInput,
    ordered_participants,
    run_get_or_create_conversation,
    run_list_conversations,
    run_list_messages,
    run_mark_read,
    run_send_message,
    run_unread_count,
)
from pumpwork.domain.entities import Conversation
from pumpwork.domain.errors import FORBIDDEN, INVALID, NOT_FOUND


@pytest.fixture
def conversations(db_path, hub) -> SQLiteConversationRepo:
    return SQLiteConversationRepo(db_path, feed=hub)


@pytest.fixture
def messages(db_path, hub) -> SQLiteMessageRepo:
    return SQLiteMessageRepo(db_path, feed=hub)


@pytest.fixture
def chat(conversations, messages, profile_repo, clock, hub, market_rules) -> ChatService:
    return ChatService(
        conversations,
        messages,
        profile_repo,
        clock,
        feed=hub,
        cache_seconds=market_rules.chat.conversation_cache_seconds,
        max_message_length=market_rules.chat.max_message_length,
    )


@pytest.fixture
def people(make_profile, identity_of):
    return {
        "alice": identity_of(make_profile("alice")),
        "bob": identity_of(make_profile("bob", user_type="freelancer")),
        "carol": identity_of(make_profile("carol")),
    }


@pytest.fixture
def open_chat(chat, profile_repo, people):
    def _open(who: str = "alice", other: str = "bob") -> Conversation:
        result = run_get_or_create_conversation(
            GetOrCreateConversationInput(actor=people[who], other_user_id=people[other].profile_id),
            chat,
            profile_repo,
        )
        assert result.success
        return result.conversation

    return _open


@pytest.fixture
def send(chat, clock, people):
    def _send(conversation: Conversation, who: str, content: str):
        clock.advance(seconds=1)
        return run_send_message(
            SendMessageInput(actor=people[who], conversation_id=conversation.id, content=content),
            chat,
        )

    return _send


class TestConversations:
    def test_participants_are_ordered(self, open_chat, people) -> None:
        conversation = open_chat()
        first, second = ordered_participants(people["alice"].profile_id, people["bob"].profile_id)
        assert str(conversation.participant_1_id) == first
        assert str(conversation.participant_2_id) == second
        assert {conversation.participant_1.nickname, conversation.participant_2.nickname} == {
            "alice",
            "bob",
        }

    def test_same_pair_same_conversation(self, open_chat, conversations) -> None:
        first = open_chat("alice", "bob")
        second = open_chat("bob", "alice")
        assert first.id == second.id
        assert len(conversations.list_all()) == 1

    def test_existing_row_is_reused_by_a_fresh_service(
        self, open_chat, conversations, messages, profile_repo, clock
    ) -> None:
        conversation = open_chat()
        fresh = ChatService(conversations, messages, profile_repo, clock)
        again = fresh.get_or_create(conversation.participant_2_id, conversation.participant_1_id)
        assert again.id == conversation.id

    def test_cannot_message_self(self, chat, profile_repo, people) -> None:
        result = run_get_or_create_conversation(
            GetOrCreateConversationInput(
                actor=people["alice"], other_user_id=people["alice"].profile_id
            ),
            chat,
            profile_repo,
        )
        assert result.error.code == INVALID

    def test_unknown_recipient(self, chat, profile_repo, people) -> None:
        result = run_get_or_create_conversation(
            GetOrCreateConversationInput(actor=people["alice"], other_user_id=uuid4()),
            chat,
            profile_repo,
        )
        assert result.error.code == NOT_FOUND

    def test_anonymous(self, chat) -> None:
        result = run_list_conversations(ListConversationsInput(actor=None), chat)
        assert result.error.code == FORBIDDEN

    def test_list_is_cached_briefly(self, chat, open_chat, conversations, clock, people) -> None:
        open_chat("alice", "bob")
        listed = run_list_conversations(ListConversationsInput(actor=people["alice"]), chat)
        assert listed.total == 1

        # written behind the service's back
        first, second = ordered_participants(
            people["alice"].profile_id, people["carol"].profile_id
        )
        conversations.save(Conversation(participant_1_id=first, participant_2_id=second))

        cached = run_list_conversations(ListConversationsInput(actor=people["alice"]), chat)
        assert cached.total == 1

        forced = run_list_conversations(
            ListConversationsInput(actor=people["alice"], force_refresh=True), chat
        )
        assert forced.total == 2

    def test_cache_expires(self, chat, open_chat, conversations, clock, people) -> None:
        run_list_conversations(ListConversationsInput(actor=people["carol"]), chat)
        first, second = ordered_participants(
            people["alice"].profile_id, people["carol"].profile_id
        )
        conversations.save(Conversation(participant_1_id=first, participant_2_id=second))

        clock.advance(seconds=4)
        assert run_list_conversations(ListConversationsInput(people["carol"]), chat).total == 0
        clock.advance(seconds=2)
        assert run_list_conversations(ListConversationsInput(people["carol"]), chat).total == 1

    def test_latest_activity_first(self, chat, open_chat, send, people) -> None:
        with_bob = open_chat("alice", "bob")
        with_carol = open_chat("alice", "carol")
        send(with_bob, "alice", "hi bob")
        send(with_carol, "alice", "hi carol")

        listed = run_list_conversations(ListConversationsInput(actor=people["alice"]), chat)
        assert [c.id for c in listed.conversations] == [with_carol.id, with_bob.id]


class TestMessages:
    def test_send_trims_and_embeds_sender(self, open_chat, send, conversations, clock) -> None:
        conversation = open_chat()
        result = send(conversation, "alice", "  gm  ")
        assert result.success
        assert result.message.content == "gm"
        assert result.message.sender.nickname == "alice"
        assert conversations.get_by_id(conversation.id).last_message_at == clock.now_utc()

    def test_empty_message(self, open_chat, send) -> None:
        result = send(open_chat(), "alice", "   ")
        assert result.error.code == INVALID
        assert result.error.message == EMPTY_MESSAGE

    def test_too_long(self, open_chat, send, market_rules) -> None:
        result = send(open_chat(), "alice", "x" * (market_rules.chat.max_message_length + 1))
        assert result.error.field == "content"

    def test_outsiders_cannot_send_or_read(self, chat, open_chat, send, people) -> None:
        conversation = open_chat()
        assert send(conversation, "carol", "hello?").error.code == FORBIDDEN
        listed = run_list_messages(
            ListMessagesInput(actor=people["carol"], conversation_id=conversation.id), chat
        )
        assert listed.error.code == FORBIDDEN

    def test_history_paging(self, chat, open_chat, send, people) -> None:
        conversation = open_chat()
        sent = [send(conversation, "alice" if i % 2 else "bob", f"m{i}").message for i in range(5)]

        everything = run_list_messages(
            ListMessagesInput(actor=people["alice"], conversation_id=conversation.id), chat
        )
        assert [m.content for m in everything.messages] == ["m0", "m1", "m2", "m3", "m4"]

        older = run_list_messages(
            ListMessagesInput(
                actor=people["alice"],
                conversation_id=conversation.id,
                limit=2,
                before=sent[3].created_at,
            ),
            chat,
        )
        assert [m.content for m in older.messages] == ["m0", "m1"]

    def test_unread_and_mark_read(self, chat, open_chat, send, people) -> None:
        conversation = open_chat()
        send(conversation, "alice", "one")
        send(conversation, "alice", "two")
        send(conversation, "bob", "three")

        assert run_unread_count(UnreadCountInput(actor=people["bob"]), chat).count == 2
        assert run_unread_count(UnreadCountInput(actor=people["alice"]), chat).count == 1

        marked = run_mark_read(
            MarkReadInput(actor=people["bob"], conversation_id=conversation.id), chat
        )
        assert marked.count == 2
        assert run_unread_count(UnreadCountInput(actor=people["bob"]), chat).count == 0
        assert run_unread_count(UnreadCountInput(actor=people["alice"]), chat).count == 1


class TestRealtime:
    def test_message_subscription(self, chat, open_chat, send, hub) -> None:
        conversation = open_chat()
        other = open_chat("alice", "carol")
        received = []
        unsubscribe = chat.subscribe_to_messages(conversation.id, received.append)

        send(conversation, "bob", "ping")
        send(other, "carol", "elsewhere")
        assert [m.content for m in received] == ["ping"]
        assert received[0].sender.nickname == "bob"

        channel_names = [c.name for c in hub.get_channels()]
        assert channel_names[0].startswith(f"messages:{conversation.id}:")

        unsubscribe()
        send(conversation, "bob", "pong")
        assert len(received) == 1
        assert hub.get_channels() == []

    def test_message_subscription_inside_event_loop(
        self, chat, open_chat, send, hub
    ) -> None:
        conversation = open_chat()
        received = []

        async def flow():
            unsubscribe = chat.subscribe_to_messages(conversation.id, received.append)
            send(conversation, "bob", "ping")
            assert received == []
            for _ in range(50):
                if received:
                    break
                await asyncio.sleep(0.01)
            unsubscribe()

        asyncio.run(flow())
        assert [m.content for m in received] == ["ping"]
        assert received[0].sender.nickname == "bob"
        assert hub.get_channels() == []

    def test_conversation_subscription(self, chat, open_chat, send, people) -> None:
        with_bob = open_chat("alice", "bob")
        events = []
        unsubscribe = chat.subscribe_to_conversations(people["bob"].profile_id, events.append)

        send(with_bob, "alice", "hi")
        open_chat("alice", "carol")
        unsubscribe()

        assert [e.event for e in events] == ["UPDATE"]
        assert events[0].new["id"] == str(with_bob.id)
