"""Conversation and message routes, plus a websocket push of new messages."""

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from pumpwork.adapters.sqlite.repos import SQLiteAuthUserRepo, SQLiteProfileRepo
from pumpwork.api.deps import (
    get_auth_user_repo,
    get_chat_service,
    get_current_identity,
    get_profile_repo,
    get_thresholds,
    resolve_identity,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import (
    ConversationCreateRequest,
    ConversationListResponse,
    CountResponse,
    MessageCreateRequest,
    MessageListResponse,
)
from pumpwork.components.chat import (
    ChatService,
    GetOrCreateConversationInput,
    ListConversationsInput,
    ListMessagesInput,
    MarkReadInput,
    SendMessageInput,
    UnreadCountInput,
    run_get_or_create_conversation,
    run_list_conversations,
    run_list_messages,
    run_mark_read,
    run_send_message,
    run_unread_count,
)
from pumpwork.domain.access import Identity, TokenThresholds
from pumpwork.domain.entities import Conversation, Message

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/conversations", response_model=ConversationListResponse)
def list_conversations(
    refresh: bool = False,
    identity: Identity = Depends(get_current_identity),
    service: ChatService = Depends(get_chat_service),
) -> ConversationListResponse:
    """Conversations of the caller, latest activity first. Cached briefly per user."""
    result = run_list_conversations(
        ListConversationsInput(actor=identity, force_refresh=refresh), service
    )
    if not result.success:
        raise_for_error(result.error)
    return ConversationListResponse(items=result.conversations, total=result.total)


@router.post("/conversations", response_model=Conversation)
def get_or_create_conversation(
    req: ConversationCreateRequest,
    identity: Identity = Depends(get_current_identity),
    service: ChatService = Depends(get_chat_service),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> Conversation:
    result = run_get_or_create_conversation(
        GetOrCreateConversationInput(actor=identity, other_user_id=req.other_user_id),
        service,
        profiles,
    )
    if not result.success or result.conversation is None:
        raise_for_error(result.error)
    return result.conversation


@router.get("/conversations/{conversation_id}/messages", response_model=MessageListResponse)
def list_messages(
    conversation_id: str,
    limit: int | None = None,
    before: datetime | None = None,
    identity: Identity = Depends(get_current_identity),
    service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
    result = run_list_messages(
        ListMessagesInput(
            actor=identity, conversation_id=conversation_id, limit=limit, before=before
        ),
        service,
    )
    if not result.success:
        raise_for_error(result.error)
    return MessageListResponse(items=result.messages, total=result.total)


@router.post(
    "/conversations/{conversation_id}/messages", response_model=Message, status_code=201
)
def send_message(
    conversation_id: str,
    req: MessageCreateRequest,
    identity: Identity = Depends(get_current_identity),
    service: ChatService = Depends(get_chat_service),
) -> Message:
    result = run_send_message(
        SendMessageInput(actor=identity, conversation_id=conversation_id, content=req.content),
        service,
    )
    if not result.success or result.message is None:
        raise_for_error(result.error)
    return result.message


@router.post("/conversations/{conversation_id}/read", response_model=CountResponse)
def mark_read(
    conversation_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ChatService = Depends(get_chat_service),
) -> CountResponse:
    """Mark messages from the other participant as read."""
    result = run_mark_read(
        MarkReadInput(actor=identity, conversation_id=conversation_id), service
    )
    if not result.success:
        raise_for_error(result.error)
    return CountResponse(count=result.count)


@router.get("/unread-count", response_model=CountResponse)
def unread_count(
    identity: Identity = Depends(get_current_identity),
    service: ChatService = Depends(get_chat_service),
) -> CountResponse:
    result = run_unread_count(UnreadCountInput(actor=identity), service)
    if not result.success:
        raise_for_error(result.error)
    return CountResponse(count=result.count)


@router.websocket("/conversations/{conversation_id}/ws")
async def conversation_socket(
    websocket: WebSocket,
    conversation_id: str,
    user_repo: SQLiteAuthUserRepo = Depends(get_auth_user_repo),
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
    thresholds: TokenThresholds = Depends(get_thresholds),
    service: ChatService = Depends(get_chat_service),
) -> None:
    """
    Push each new message of a conversation as JSON.

    The access token comes from the ``token`` query parameter or the
    ``access_token`` cookie. Only participants may listen.
    """
    token = websocket.query_params.get("token")
    cookie = websocket.cookies.get("access_token")
    if not token and cookie and cookie.startswith("Bearer "):
        token = cookie.split(" ", 1)[1]
    if not token:
        await websocket.close(code=1008)
        return

    try:
        identity = resolve_identity(token, user_repo, profile_repo, thresholds)
    except HTTPException:
        await websocket.close(code=1008)
        return

    conversation = service.get(conversation_id)
    participants = (
        {str(conversation.participant_1_id), str(conversation.participant_2_id)}
        if conversation
        else set()
    )
    if identity.profile_id not in participants:
        await websocket.close(code=1008)
        return

    await websocket.accept()
    queue: asyncio.Queue[Message] = asyncio.Queue()
    # The channel joins from this loop, so deliveries arrive on it.
    unsubscribe = service.subscribe_to_messages(conversation_id, queue.put_nowait)
    receiver = asyncio.create_task(websocket.receive_text())
    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {getter, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            if receiver in done:
                getter.cancel()
                receiver.result()
                receiver = asyncio.create_task(websocket.receive_text())
                continue
            await websocket.send_text(getter.result().model_dump_json())
    except WebSocketDisconnect:
        logger.info("Chat socket for %s closed", conversation_id)
    finally:
        receiver.cancel()
        unsubscribe()
