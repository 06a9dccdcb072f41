"""
Builder app models - stored forms, their submissions and cached analytics.
"""
from django.conf import settings
from django.db import models

from formcraft.utils.base_model import DjangoBaseModel


class Form(DjangoBaseModel):
    """
    A saved form owned by a user.

    The whole form definition is embedded in ``content``; ``title`` and
    ``description`` are denormalized copies for listing. The row id is the
    authoritative identity of the form.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="forms")
    title = models.CharField(max_length=500)
    description = models.TextField(blank=True)
    content = models.JSONField(null=True, blank=True, help_text="Embedded form definition document")
    published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "forms"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="forms_user_created_idx"),
        ]

    def __str__(self):
        return self.title


class FormSubmission(DjangoBaseModel):
    """Append-only submission of a published form."""

    form = models.ForeignKey(Form, on_delete=models.CASCADE, related_name="submissions")
    data = models.JSONField(default=dict, help_text="Field id to submitted value")
    completion_time = models.FloatField(
        null=True, blank=True, help_text="Seconds the respondent spent filling the form"
    )

    class Meta:
        db_table = "form_submissions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["form", "-created_at"], name="submissions_form_created_idx"),
        ]

    def __str__(self):
        return f"Submission {self.id} for {self.form_id}"


class AnalyticsCache(models.Model):
    """Single cached analysis blob per form."""

    form = models.OneToOneField(Form, on_delete=models.CASCADE, primary_key=True, related_name="analytics_cache")
    analysis = models.JSONField()
    generated_at = models.DateTimeField()

    class Meta:
        db_table = "analytics_cache"

    def __str__(self):
        return f"Analytics for {self.form_id} ({self.generated_at})"
