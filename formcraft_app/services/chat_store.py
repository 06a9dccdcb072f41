"""
Persistence gateway for conversations and chat messages.
"""
import logging
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from chat.models import ChatMessage, Conversation
from chat.types import ChatMessageRole
from formcraft_app.exceptions import ConversationNotFound
from formcraft_app.services.form_store import wrap_storage_errors

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class ChatStore:
    """Conversation and message rows for the hosted store."""

    @staticmethod
    @wrap_storage_errors
    def create_conversation(user_id, title: str = DEFAULT_CONVERSATION_TITLE) -> Conversation:
        return Conversation.objects.create(user_id=user_id, title=title or DEFAULT_CONVERSATION_TITLE)

    @staticmethod
    @wrap_storage_errors
    def get_user_conversations(user_id) -> List[Conversation]:
        """Newest first."""
        return list(Conversation.objects.filter(user_id=user_id).order_by("-created_at"))

    @staticmethod
    @wrap_storage_errors
    def get_conversation(conversation_id, user_id=None) -> Conversation:
        conversations = Conversation.objects.all()
        if user_id is not None:
            conversations = conversations.filter(user_id=user_id)
        try:
            return conversations.get(id=conversation_id)
        except (Conversation.DoesNotExist, ValueError, DjangoValidationError):
            raise ConversationNotFound(conversation_id)

    @staticmethod
    @wrap_storage_errors
    def update_conversation_title(conversation_id, title: str, user_id=None) -> Conversation:
        conversation = ChatStore.get_conversation(conversation_id, user_id)
        conversation.title = title
        conversation.save(update_fields=["title", "updated_at"])
        return conversation

    @staticmethod
    @wrap_storage_errors
    def save_chat_message(
        conversation_id,
        user_id,
        role: ChatMessageRole,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ChatMessage:
        return ChatMessage.objects.create(
            conversation_id=conversation_id,
            user_id=user_id,
            role=role,
            content=content,
            metadata=metadata,
        )

    @staticmethod
    @wrap_storage_errors
    def get_chat_history(conversation_id) -> List[ChatMessage]:
        """Oldest first."""
        return list(ChatMessage.objects.filter(conversation_id=conversation_id).order_by("created_at"))
