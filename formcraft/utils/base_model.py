"""
Abstract base models shared by every app.
"""
import uuid

from django.db import models


class BaseModel(models.Model):
    """Adds creation and modification timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class DjangoBaseModel(BaseModel):
    """Timestamped model keyed by an opaque UUID."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True
