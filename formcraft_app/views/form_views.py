"""
Form views: the dashboard CRUD surface, publishing, and the AI form operations.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from formcraft_app.exceptions import ConversationNotFound, FormNotFound, RefinementFailed, StorageError
from formcraft_app.serializers.form_serializers import (
    FormRowSerializer,
    FormSaveSerializer,
    FormSubmissionSerializer,
    GenerateFormsSerializer,
    RefineFormSerializer,
    TranslateFormSerializer,
)
from formcraft_app.services.ai_service import AIService, get_ai_service
from formcraft_app.services.form_store import FormStore

logger = logging.getLogger(__name__)


def storage_error_response(error: StorageError) -> Response:
    if isinstance(error, FormNotFound):
        return Response({"error": "Form not found"}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, ConversationNotFound):
        return Response({"error": "Conversation not found"}, status=status.HTTP_404_NOT_FOUND)
    return Response({"error": "Storage error. Please try again."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class AIServiceMixin:
    """Views get the process AIService unless one is passed to ``as_view``."""

    ai_service: AIService = None

    @property
    def ai(self) -> AIService:
        return self.ai_service or get_ai_service()


class FormListCreateView(APIView):
    """
    GET /forms/
    The user's saved forms, newest first. Rows without a readable document are skipped.

    POST /forms/
    Save a form as a new draft (or published, when it carries publishedAt).
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            rows = [row for row, _ in FormStore.get_user_form_documents(request.user.id)]
            return Response({"forms": FormRowSerializer(rows, many=True).data})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormListCreateView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def post(self, request):
        try:
            serializer = FormSaveSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            form = FormStore.save_form(request.user.id, serializer.validated_data["form"])
            return Response({"form": form.to_json_dict()}, status=status.HTTP_201_CREATED)

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormListCreateView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class FormDetailView(APIView):
    """
    GET /forms/<id>/
    PUT /forms/<id>/     full overwrite of the document
    DELETE /forms/<id>/  hard delete with submissions and cached analytics
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, form_id):
        try:
            form = FormStore.get_form_by_id(form_id, user_id=request.user.id)
            return Response({"form": form.to_json_dict()})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormDetailView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def put(self, request, form_id):
        try:
            serializer = FormSaveSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            form = FormStore.update_form(form_id, serializer.validated_data["form"], user_id=request.user.id)
            return Response({"form": form.to_json_dict()})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormDetailView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def delete(self, request, form_id):
        try:
            FormStore.delete_form(form_id, user_id=request.user.id)
            return Response(status=status.HTTP_204_NO_CONTENT)

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormDetailView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class FormPublishView(APIView):
    """
    POST /forms/<id>/publish/    set publishedAt
    POST /forms/<id>/unpublish/  clear publishedAt
    """

    permission_classes = [IsAuthenticated]
    published = True

    def post(self, request, form_id):
        try:
            form = FormStore.set_published(form_id, self.published, user_id=request.user.id)
            return Response({"form": form.to_json_dict()})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormPublishView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class FormSubmissionsView(APIView):
    """
    GET /forms/<id>/submissions/
    Submissions of one of the user's forms, newest first.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, form_id):
        try:
            FormStore.get_form_by_id(form_id, user_id=request.user.id)
            submissions = FormStore.get_form_submissions(form_id)
            return Response({"submissions": FormSubmissionSerializer(submissions, many=True).data})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormSubmissionsView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================================================
# AI Form Operations
# ============================================================================


class GenerateFormsView(AIServiceMixin, APIView):
    """
    POST /forms/generate/
    Two candidate forms for a description. Falls back to sample forms.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        try:
            serializer = GenerateFormsSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            forms = self.ai.generate_forms(
                serializer.validated_data["prompt"],
                serializer.validated_data["language"],
            )
            return Response(
                {
                    "forms": [form.to_json_dict() for form in forms],
                    "ai_enabled": self.ai.is_configured,
                }
            )

        except Exception as e:
            logger.error(f"Error in GenerateFormsView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class RefineFormView(AIServiceMixin, APIView):
    """
    POST /forms/refine/
    Apply a natural language edit to a form document.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        try:
            serializer = RefineFormSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            form = self.ai.refine_form(
                serializer.validated_data["form"],
                serializer.validated_data["instruction"],
            )
            return Response({"form": form.to_json_dict()})

        except RefinementFailed as e:
            return Response({"error": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        except Exception as e:
            logger.error(f"Error in RefineFormView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class TranslateFormView(AIServiceMixin, APIView):
    """
    POST /forms/translate/
    Translate a form document into another language.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        try:
            serializer = TranslateFormSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            form = self.ai.translate_form(
                serializer.validated_data["form"],
                serializer.validated_data["target_language"],
            )
            return Response({"form": form.to_json_dict()})

        except Exception as e:
            logger.error(f"Error in TranslateFormView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
