"""
Persistence gateway for forms, submissions and cached analytics.

The row is authoritative: every read overwrites the document ``id`` with the
row id and ``publishedAt`` with the row's ``published_at``.
"""
import functools
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.db.models import Count
from django.utils import timezone
from pydantic import ValidationError

from builder.models import AnalyticsCache, Form, FormSubmission
from formcraft_app.exceptions import FormNotFound, StorageError
from formcraft_app.services.analytics import calculate_average_time, calculate_completion_rate
from formcraft_app.types import FormAnalytics, GeneratedForm, SubmissionData, SubmissionRecord

logger = logging.getLogger(__name__)


def wrap_storage_errors(func):
    """Re-raise database failures as StorageError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            logger.error(f"Storage error in {func.__name__}: {str(e)}")
            raise StorageError(str(e)) from e

    return wrapper


def row_to_form(row: Form) -> Optional[GeneratedForm]:
    """Rebuild the form document from a row. None when the document is missing or unreadable."""
    if not row.content:
        return None
    try:
        form = GeneratedForm.model_validate(row.content)
    except ValidationError as e:
        logger.warning(f"Form {row.id} has an unreadable document: {e.error_count()} errors")
        return None
    return form.model_copy(update={"id": str(row.id), "published_at": row.published_at})


def submission_to_record(row: FormSubmission) -> SubmissionRecord:
    return SubmissionRecord(
        id=str(row.id),
        data=row.data or {},
        completion_time=row.completion_time,
        created_at=row.created_at,
    )


class FormStore:
    """Form, submission and analytics cache rows for the hosted store."""

    @staticmethod
    def _form_rows(user_id=None):
        rows = Form.objects.all()
        if user_id is not None:
            rows = rows.filter(user_id=user_id)
        return rows

    @staticmethod
    def _get_row(form_id, user_id=None) -> Form:
        try:
            return FormStore._form_rows(user_id).get(id=form_id)
        except (Form.DoesNotExist, ValueError, DjangoValidationError):
            raise FormNotFound(form_id)

    @staticmethod
    def _apply_document(row: Form, form: GeneratedForm) -> None:
        document = form.model_copy(update={"id": str(row.id)}).to_json_dict()
        row.title = form.title
        row.description = form.description
        row.content = document
        row.published = form.published_at is not None
        row.published_at = form.published_at

    @staticmethod
    @wrap_storage_errors
    def save_form(user_id, form: GeneratedForm) -> GeneratedForm:
        """Insert a new row for ``form`` and return the stored document."""
        row = Form(id=uuid.uuid4(), user_id=user_id)
        FormStore._apply_document(row, form)
        row.save(force_insert=True)
        logger.info(f"Saved form {row.id} for user {user_id}")
        return row_to_form(row)

    @staticmethod
    @wrap_storage_errors
    def get_user_forms(user_id) -> List[Form]:
        """All rows owned by the user, newest first."""
        return list(FormStore._form_rows(user_id).order_by("-created_at"))

    @staticmethod
    @wrap_storage_errors
    def get_user_form_documents(user_id) -> List[Tuple[Form, GeneratedForm]]:
        """Rows paired with their documents, skipping rows without a readable document."""
        pairs = []
        for row in FormStore.get_user_forms(user_id):
            form = row_to_form(row)
            if form is not None:
                pairs.append((row, form))
        return pairs

    @staticmethod
    @wrap_storage_errors
    def get_form_by_id(form_id, user_id=None) -> GeneratedForm:
        """
        Load one form document.

        ``user_id`` restricts the lookup to the owner's rows. Raises FormNotFound
        when there is no such row or its document cannot be read.
        """
        form = row_to_form(FormStore._get_row(form_id, user_id))
        if form is None:
            raise FormNotFound(form_id)
        return form

    @staticmethod
    @wrap_storage_errors
    def update_form(form_id, form: GeneratedForm, user_id=None) -> GeneratedForm:
        """Overwrite the stored document. The publish state follows ``form.published_at``."""
        row = FormStore._get_row(form_id, user_id)
        FormStore._apply_document(row, form)
        row.save()
        return row_to_form(row)

    @staticmethod
    def set_published(form_id, published: bool, user_id=None) -> GeneratedForm:
        form = FormStore.get_form_by_id(form_id, user_id)
        if published == form.is_published:
            return form
        published_at = timezone.now() if published else None
        return FormStore.update_form(form_id, form.model_copy(update={"published_at": published_at}), user_id)

    @staticmethod
    @wrap_storage_errors
    def delete_form(form_id, user_id=None) -> None:
        """Hard delete. Submissions and the analytics cache go with the row."""
        row = FormStore._get_row(form_id, user_id)
        row.delete()
        logger.info(f"Deleted form {form_id}")

    @staticmethod
    @wrap_storage_errors
    def save_submission(form_id, data: SubmissionData, completion_time: Optional[float] = None) -> FormSubmission:
        """Append a submission. The data is stored as given."""
        row = FormStore._get_row(form_id)
        return FormSubmission.objects.create(form=row, data=data, completion_time=completion_time)

    @staticmethod
    @wrap_storage_errors
    def get_form_submissions(form_id) -> List[FormSubmission]:
        """Submissions for a form, newest first."""
        return list(FormSubmission.objects.filter(form_id=form_id).order_by("-created_at"))

    @staticmethod
    @wrap_storage_errors
    def get_cached_analysis(form_id) -> Optional[AnalyticsCache]:
        return AnalyticsCache.objects.filter(form_id=form_id).first()

    @staticmethod
    def cache_analysis(form_id, analysis: FormAnalytics) -> Optional[AnalyticsCache]:
        """Upsert the cached analysis. Failures are logged, not raised."""
        try:
            cache, _ = AnalyticsCache.objects.update_or_create(
                form_id=form_id,
                defaults={"analysis": analysis.to_json_dict(), "generated_at": timezone.now()},
            )
            return cache
        except DatabaseError as e:
            logger.error(f"Error caching analysis for form {form_id}: {str(e)}")
            return None

    @staticmethod
    @wrap_storage_errors
    def get_aggregated_form_stats(user_id) -> Dict[str, Any]:
        """Totals across all of a user's forms."""
        rows = list(
            FormStore._form_rows(user_id)
            .annotate(submission_count=Count("submissions"))
            .order_by("-submission_count", "-created_at")
        )
        submissions = [
            submission_to_record(row)
            for row in FormSubmission.objects.filter(form__user_id=user_id)
        ]

        def summary(row: Form) -> Dict[str, Any]:
            return {"id": str(row.id), "title": row.title, "submissions": row.submission_count}

        return {
            "total_forms": len(rows),
            "published_forms": sum(1 for row in rows if row.published_at is not None),
            "total_submissions": len(submissions),
            "completion_rate": calculate_completion_rate(submissions),
            "average_completion_time": calculate_average_time(submissions),
            "most_active_form": summary(rows[0]) if rows else None,
            "least_active_form": summary(rows[-1]) if rows else None,
        }
