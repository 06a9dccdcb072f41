"""
Chat-driven form generation.

A user message is recorded, two candidate forms are generated and saved as
drafts, and an assistant reply pointing at them is recorded.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from chat.models import ChatMessage, Conversation
from chat.types import ChatMessageRole
from formcraft_app.exceptions import StorageError
from formcraft_app.services.ai_service import AIService, get_ai_service
from formcraft_app.services.chat_store import DEFAULT_CONVERSATION_TITLE, ChatStore
from formcraft_app.services.form_store import FormStore
from formcraft_app.types import DEFAULT_LANGUAGE, GeneratedForm

logger = logging.getLogger(__name__)

FORMS_CREATED_REPLY = "I've created two new form drafts for you! Pick one to refine, or describe what to change."
FORMS_FAILED_REPLY = "I'm sorry, I encountered an error while generating your forms. Please try again."

CONVERSATION_TITLE_LENGTH = 60


@dataclass
class ChatTurn:
    user_message: ChatMessage
    assistant_message: ChatMessage
    forms: List[GeneratedForm]


def _title_from_prompt(prompt: str) -> str:
    title = " ".join(prompt.split())
    if len(title) > CONVERSATION_TITLE_LENGTH:
        title = title[: CONVERSATION_TITLE_LENGTH - 3].rstrip() + "..."
    return title or DEFAULT_CONVERSATION_TITLE


class ChatFormService:
    def __init__(self, ai_service: Optional[AIService] = None):
        self.ai_service = ai_service or get_ai_service()

    def handle_user_message(
        self,
        conversation: Conversation,
        user,
        content: str,
        language: str = DEFAULT_LANGUAGE,
    ) -> ChatTurn:
        user_message = ChatStore.save_chat_message(conversation.id, user.id, ChatMessageRole.USER, content)

        if conversation.title == DEFAULT_CONVERSATION_TITLE:
            ChatStore.update_conversation_title(conversation.id, _title_from_prompt(content))

        forms = self.ai_service.generate_forms(content, language)
        try:
            saved = [FormStore.save_form(user.id, form) for form in forms]
        except StorageError:
            logger.error(f"Error saving generated forms for conversation {conversation.id}")
            ChatStore.save_chat_message(conversation.id, user.id, ChatMessageRole.ASSISTANT, FORMS_FAILED_REPLY)
            raise

        assistant_message = ChatStore.save_chat_message(
            conversation.id,
            user.id,
            ChatMessageRole.ASSISTANT,
            FORMS_CREATED_REPLY,
            metadata={"form_ids": [form.id for form in saved]},
        )
        return ChatTurn(user_message=user_message, assistant_message=assistant_message, forms=saved)
