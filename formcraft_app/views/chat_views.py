"""
Conversation views for chat-driven form building.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from formcraft_app.exceptions import StorageError
from formcraft_app.serializers.chat_serializers import (
    ChatMessageCreateSerializer,
    ChatMessageSerializer,
    ConversationCreateSerializer,
    ConversationSerializer,
    ConversationUpdateSerializer,
)
from formcraft_app.services.chat_service import ChatFormService
from formcraft_app.services.chat_store import ChatStore
from formcraft_app.views.form_views import AIServiceMixin, storage_error_response

logger = logging.getLogger(__name__)


class ConversationListCreateView(APIView):
    """
    GET /conversations/   newest first
    POST /conversations/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            conversations = ChatStore.get_user_conversations(request.user.id)
            return Response({"conversations": ConversationSerializer(conversations, many=True).data})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in ConversationListCreateView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def post(self, request):
        try:
            serializer = ConversationCreateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            conversation = ChatStore.create_conversation(request.user.id, serializer.validated_data.get("title", ""))
            return Response(
                {"conversation": ConversationSerializer(conversation).data},
                status=status.HTTP_201_CREATED,
            )

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in ConversationListCreateView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ConversationDetailView(APIView):
    """
    GET /conversations/<id>/    conversation with its messages, oldest first
    PATCH /conversations/<id>/  rename
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, conversation_id):
        try:
            conversation = ChatStore.get_conversation(conversation_id, user_id=request.user.id)
            messages = ChatStore.get_chat_history(conversation.id)
            return Response(
                {
                    "conversation": ConversationSerializer(conversation).data,
                    "messages": ChatMessageSerializer(messages, many=True).data,
                }
            )

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in ConversationDetailView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def patch(self, request, conversation_id):
        try:
            serializer = ConversationUpdateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            conversation = ChatStore.update_conversation_title(
                conversation_id, serializer.validated_data["title"], user_id=request.user.id
            )
            return Response({"conversation": ConversationSerializer(conversation).data})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in ConversationDetailView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ConversationMessagesView(AIServiceMixin, APIView):
    """
    GET /conversations/<id>/messages/
    POST /conversations/<id>/messages/
    Posting a user message generates two forms, saves them as drafts and
    records an assistant reply carrying their ids.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, conversation_id):
        try:
            conversation = ChatStore.get_conversation(conversation_id, user_id=request.user.id)
            messages = ChatStore.get_chat_history(conversation.id)
            return Response({"messages": ChatMessageSerializer(messages, many=True).data})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in ConversationMessagesView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def post(self, request, conversation_id):
        try:
            serializer = ChatMessageCreateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            conversation = ChatStore.get_conversation(conversation_id, user_id=request.user.id)
            turn = ChatFormService(self.ai).handle_user_message(
                conversation,
                request.user,
                serializer.validated_data["content"],
                serializer.validated_data["language"],
            )
            return Response(
                {
                    "user_message": ChatMessageSerializer(turn.user_message).data,
                    "assistant_message": ChatMessageSerializer(turn.assistant_message).data,
                    "forms": [form.to_json_dict() for form in turn.forms],
                },
                status=status.HTTP_201_CREATED,
            )

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in ConversationMessagesView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
