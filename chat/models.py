"""
Chat app models - form-building conversations and their messages.
"""
from django.conf import settings
from django.db import models

from formcraft.utils.base_model import DjangoBaseModel
from formcraft.utils.enum import choices

from chat.types import ChatMessageRole


class Conversation(DjangoBaseModel):
    """
    A chat-driven form building session.
    A user can keep several conversations (one per form idea).
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="conversations")
    title = models.CharField(max_length=255, default="New Conversation")

    class Meta:
        db_table = "conversations"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="conversations_user_idx"),
        ]

    def __str__(self):
        return self.title


class ChatMessage(DjangoBaseModel):
    """
    Individual message in a conversation.
    Assistant messages that produced forms carry their ids in ``metadata``.
    """

    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name="messages")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="chat_messages")
    role = models.CharField(max_length=20, choices=choices(ChatMessageRole))
    content = models.TextField()
    metadata = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "chat_messages"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["conversation", "created_at"], name="chat_messages_conv_idx"),
        ]

    def __str__(self):
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"{self.role}: {preview}"
