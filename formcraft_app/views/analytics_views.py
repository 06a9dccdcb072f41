"""
Analytics views: per-form analytics, questions about a form's data, and the
dashboard overview.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from formcraft_app.exceptions import StorageError
from formcraft_app.serializers.form_serializers import AskAnalyticsSerializer
from formcraft_app.services.analytics_cache import build_form_dataset, load_form_analytics
from formcraft_app.services.form_store import FormStore
from formcraft_app.views.form_views import AIServiceMixin, storage_error_response

logger = logging.getLogger(__name__)


class FormAnalyticsView(AIServiceMixin, APIView):
    """
    GET /forms/<id>/analytics/
    Cached analytics when fresh, otherwise recomputed. ``?refresh=true`` forces recomputation.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, form_id):
        try:
            force_refresh = request.query_params.get("refresh", "").lower() in ("1", "true", "yes")
            analytics, cached = load_form_analytics(
                form_id,
                user_id=request.user.id,
                ai_service=self.ai,
                force_refresh=force_refresh,
            )
            return Response({"analytics": analytics.to_json_dict(), "cached": cached})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormAnalyticsView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class FormAnalyticsAskView(AIServiceMixin, APIView):
    """
    POST /forms/<id>/analytics/ask/
    Answer a free-form question about a form's submissions.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, form_id):
        try:
            serializer = AskAnalyticsSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            form = FormStore.get_form_by_id(form_id, user_id=request.user.id)
            dataset = build_form_dataset(form, FormStore.get_form_submissions(form_id))
            answer = self.ai.get_ai_insights(serializer.validated_data["question"], dataset)
            return Response({"answer": answer})

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in FormAnalyticsAskView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class AnalyticsOverviewView(APIView):
    """
    GET /analytics/overview/
    Totals across all of the user's forms.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            return Response(FormStore.get_aggregated_form_stats(request.user.id))

        except StorageError as e:
            return storage_error_response(e)
        except Exception as e:
            logger.error(f"Error in AnalyticsOverviewView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
