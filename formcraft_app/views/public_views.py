"""
Public form views: serve a published form and accept its submissions.
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from formcraft_app.exceptions import FormNotFound, StorageError
from formcraft_app.serializers.form_serializers import SubmissionCreateSerializer
from formcraft_app.services.form_store import FormStore
from formcraft_app.services.submission_validator import validate_submission
from formcraft_app.types import GeneratedForm
from formcraft_app.views.form_views import storage_error_response

logger = logging.getLogger(__name__)


def get_published_form(form_id) -> GeneratedForm:
    """The form when it is published. Unpublished forms are reported as missing."""
    form = FormStore.get_form_by_id(form_id)
    if not form.is_published:
        raise FormNotFound(form_id)
    return form


class PublicFormView(APIView):
    """
    GET /form/<id>/
    The form document when published, 404 otherwise.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, form_id):
        try:
            return Response({"form": get_published_form(form_id).to_json_dict()})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in PublicFormView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class PublicFormSubmitView(APIView):
    """
    POST /form/<id>/submit/
    Validate answers against the form's fields and store the submission.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, form_id):
        try:
            form = get_published_form(form_id)

            serializer = SubmissionCreateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            data = serializer.validated_data["data"]
            errors = validate_submission(form, data)
            if errors:
                return Response({"errors": errors}, status=status.HTTP_400_BAD_REQUEST)

            submission = FormStore.save_submission(
                form_id,
                data,
                completion_time=serializer.validated_data.get("completion_time"),
            )
            logger.info(f"Stored submission {submission.id} for form {form_id}")
            return Response(
                {"id": str(submission.id), "message": "Thank you! Your response has been recorded."},
                status=status.HTTP_201_CREATED,
            )

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in PublicFormSubmitView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
