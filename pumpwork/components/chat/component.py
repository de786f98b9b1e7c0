"""
Chat component - conversations and messages.

Shell layer over ``ChatService``: resolves the acting profile, checks that
it takes part in the conversation and turns rejected messages into output
errors.
"""

from __future__ import annotations

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Conversation
from pumpwork.domain.errors import OperationError, forbidden, invalid, not_found

from ._impl import ChatService, MessageRejected
from .models import (
    ConversationListOutput,
    ConversationOutput,
    CountOutput,
    GetOrCreateConversationInput,
    ListConversationsInput,
    ListMessagesInput,
    MarkReadInput,
    MessageListOutput,
    MessageOutput,
    SendMessageInput,
    UnreadCountInput,
)
from .ports import ProfileLookupPort

SIGN_IN_REQUIRED = "Sign in to use messages"


def _signed_in(actor: Identity | None) -> str | None:
    if actor is None or not actor.is_authenticated:
        return None
    return actor.profile_id


def _open_conversation(
    actor: Identity | None, conversation_id: object, service: ChatService
) -> tuple[Conversation | None, OperationError | None]:
    me = _signed_in(actor)
    if me is None:
        return None, forbidden(SIGN_IN_REQUIRED)
    conversation = service.get(str(conversation_id))
    if conversation is None:
        return None, not_found("Conversation", conversation_id)
    if me not in (str(conversation.participant_1_id), str(conversation.participant_2_id)):
        return None, forbidden()
    return conversation, None


def run_list_conversations(
    inp: ListConversationsInput, service: ChatService
) -> ConversationListOutput:
    me = _signed_in(inp.actor)
    if me is None:
        return ConversationListOutput(
            conversations=[], total=0, success=False, error=forbidden(SIGN_IN_REQUIRED)
        )
    conversations = service.conversations_for(me, force_refresh=inp.force_refresh)
    return ConversationListOutput(conversations=conversations, total=len(conversations))


def run_get_or_create_conversation(
    inp: GetOrCreateConversationInput, service: ChatService, profiles: ProfileLookupPort
) -> ConversationOutput:
    me = _signed_in(inp.actor)
    if me is None:
        return ConversationOutput(
            conversation=None, success=False, error=forbidden(SIGN_IN_REQUIRED)
        )
    other = str(inp.other_user_id)
    if other == me:
        return ConversationOutput(
            conversation=None,
            success=False,
            error=invalid("You cannot message yourself", field="other_user_id"),
        )
    if other not in profiles.get_many([other]):
        return ConversationOutput(
            conversation=None, success=False, error=not_found("Profile", other)
        )
    return ConversationOutput(conversation=service.get_or_create(me, other), success=True)


def run_list_messages(inp: ListMessagesInput, service: ChatService) -> MessageListOutput:
    _, error = _open_conversation(inp.actor, inp.conversation_id, service)
    if error:
        return MessageListOutput(messages=[], total=0, success=False, error=error)
    if inp.limit is not None and inp.limit < 1:
        return MessageListOutput(
            messages=[], total=0, success=False, error=invalid("Limit must be positive", "limit")
        )
    messages = service.messages(inp.conversation_id, limit=inp.limit, before=inp.before)
    return MessageListOutput(messages=messages, total=len(messages))


def run_send_message(inp: SendMessageInput, service: ChatService) -> MessageOutput:
    conversation, error = _open_conversation(inp.actor, inp.conversation_id, service)
    if error or conversation is None:
        return MessageOutput(message=None, success=False, error=error)
    sender = _signed_in(inp.actor)
    try:
        message = service.send(conversation, str(sender), inp.content)
    except MessageRejected as e:
        return MessageOutput(message=None, success=False, error=invalid(str(e), field="content"))
    return MessageOutput(message=message, success=True)


def run_mark_read(inp: MarkReadInput, service: ChatService) -> CountOutput:
    conversation, error = _open_conversation(inp.actor, inp.conversation_id, service)
    if error or conversation is None:
        return CountOutput(count=0, success=False, error=error)
    reader = _signed_in(inp.actor)
    return CountOutput(count=service.mark_read(conversation.id, str(reader)))


def run_unread_count(inp: UnreadCountInput, service: ChatService) -> CountOutput:
    me = _signed_in(inp.actor)
    if me is None:
        return CountOutput(count=0, success=False, error=forbidden(SIGN_IN_REQUIRED))
    return CountOutput(count=service.unread_count(me))
