"""
Cache policy for form analytics.

A cached analysis is served while it is younger than
``ANALYTICS_CACHE_TTL_SECONDS``; otherwise it is recomputed and stored again.
"""
import logging
from datetime import timedelta
from typing import Iterable, Optional, Tuple

from django.conf import settings
from django.utils import timezone
from pydantic import ValidationError

from builder.models import AnalyticsCache, FormSubmission
from formcraft_app.services.ai_service import AIService, get_ai_service
from formcraft_app.services.form_store import FormStore, submission_to_record
from formcraft_app.types import FormAnalytics, FormDataset, GeneratedForm

logger = logging.getLogger(__name__)


def build_form_dataset(form: GeneratedForm, submissions: Iterable[FormSubmission]) -> FormDataset:
    return FormDataset(form=form, submissions=[submission_to_record(row) for row in submissions])


def is_fresh(cache: AnalyticsCache, now=None) -> bool:
    now = now or timezone.now()
    ttl = timedelta(seconds=getattr(settings, "ANALYTICS_CACHE_TTL_SECONDS", 60 * 60))
    return now - cache.generated_at < ttl


def _cached_analytics(form_id) -> Optional[FormAnalytics]:
    cache = FormStore.get_cached_analysis(form_id)
    if cache is None or not is_fresh(cache):
        return None
    try:
        return FormAnalytics.model_validate(cache.analysis)
    except ValidationError:
        logger.warning(f"Discarding unreadable cached analysis for form {form_id}")
        return None


def load_form_analytics(
    form_id,
    user_id=None,
    *,
    ai_service: Optional[AIService] = None,
    force_refresh: bool = False,
) -> Tuple[FormAnalytics, bool]:
    """
    Return the analytics for a form and whether they came from the cache.

    Raises FormNotFound when the form does not exist or is not owned by ``user_id``.
    """
    form = FormStore.get_form_by_id(form_id, user_id)

    if not force_refresh:
        cached = _cached_analytics(form_id)
        if cached is not None:
            return cached, True

    dataset = build_form_dataset(form, FormStore.get_form_submissions(form_id))
    analytics = (ai_service or get_ai_service()).analyze_form_data(dataset)
    FormStore.cache_analysis(form_id, analytics)
    return analytics, False
