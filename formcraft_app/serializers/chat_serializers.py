"""
Serializers for conversations and chat messages.
"""
from rest_framework import serializers

from chat.models import ChatMessage, Conversation
from formcraft_app.types import DEFAULT_LANGUAGE


class ConversationSerializer(serializers.ModelSerializer):
    """Serializer for Conversation model."""
    message_count = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = ["id", "title", "created_at", "updated_at", "message_count"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_message_count(self, obj):
        return obj.messages.count()


class ChatMessageSerializer(serializers.ModelSerializer):
    """Serializer for ChatMessage model."""

    class Meta:
        model = ChatMessage
        fields = ["id", "conversation", "role", "content", "metadata", "created_at"]
        read_only_fields = fields


class ConversationCreateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ConversationUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(required=True, min_length=1, max_length=255)


class ChatMessageCreateSerializer(serializers.Serializer):
    """Serializer for posting a user message."""
    content = serializers.CharField(required=True, min_length=1, max_length=5000)
    language = serializers.CharField(required=False, default=DEFAULT_LANGUAGE, max_length=100)
