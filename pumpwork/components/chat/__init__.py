"""
Chat component - direct messages between marketplace users.
"""

from ._impl import EMPTY_MESSAGE, ChatService, MessageRejected, ordered_participants
from .component import (
    run_get_or_create_conversation,
    run_list_conversations,
    run_list_messages,
    run_mark_read,
    run_send_message,
    run_unread_count,
)
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
from .ports import (
    ChangeFeedPort,
    ConversationRepoPort,
    MessageRepoPort,
    ProfileLookupPort,
    TimePort,
)

__all__ = [
    # Entry points
    "run_get_or_create_conversation",
    "run_list_conversations",
    "run_list_messages",
    "run_mark_read",
    "run_send_message",
    "run_unread_count",
    # Service
    "ChatService",
    "MessageRejected",
    "EMPTY_MESSAGE",
    "ordered_participants",
    # Models
    "ConversationListOutput",
    "ConversationOutput",
    "CountOutput",
    "GetOrCreateConversationInput",
    "ListConversationsInput",
    "ListMessagesInput",
    "MarkReadInput",
    "MessageListOutput",
    "MessageOutput",
    "SendMessageInput",
    "UnreadCountInput",
    # Ports
    "ChangeFeedPort",
    "ConversationRepoPort",
    "MessageRepoPort",
    "ProfileLookupPort",
    "TimePort",
]
