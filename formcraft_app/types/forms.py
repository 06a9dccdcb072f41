"""
Form document types.

A GeneratedForm is stored as a JSON document and exchanged with the LLM and
the frontend with camelCase keys.
"""
import re
import uuid
from datetime import datetime
from typing import List, Optional, Set, Union

from pydantic import Field, field_validator, model_validator

from builder.types import CHOICE_FIELD_TYPES, FieldType, FormTheme
from formcraft_app.utils.pydantic_utils import CamelModel

Number = Union[int, float]

RATING_MAX_LOWER = 3
RATING_MAX_UPPER = 10
DEFAULT_RATING_MAX = 5

DEFAULT_LANGUAGE = "English"


def new_id() -> str:
    """Mint an opaque identifier for a form or field."""
    return str(uuid.uuid4())


class FieldValidation(CamelModel):
    min: Optional[Number] = None
    max: Optional[Number] = None
    step: Optional[Number] = None
    pattern: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, pattern: Optional[str]) -> Optional[str]:
        if pattern:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regular expression: {e}") from e
        return pattern


class FormField(CamelModel):
    id: str
    type: FieldType
    label: str = Field(min_length=1)
    placeholder: Optional[str] = None
    required: bool = False
    options: Optional[List[str]] = None
    validation: Optional[FieldValidation] = None

    @model_validator(mode="after")
    def _check_type_invariants(self) -> "FormField":
        if self.type in CHOICE_FIELD_TYPES:
            if not self.options:
                raise ValueError(f"{self.type} field requires at least one option")
        else:
            self.options = None

        if self.type == FieldType.RATING:
            rating_max = self.validation.max if self.validation else None
            if rating_max is None or not RATING_MAX_LOWER <= rating_max <= RATING_MAX_UPPER:
                raise ValueError(
                    f"rating field requires validation.max between {RATING_MAX_LOWER} and {RATING_MAX_UPPER}"
                )

        if self.type == FieldType.SLIDER:
            validation = self.validation
            if validation is None or None in (validation.min, validation.max, validation.step):
                raise ValueError("slider field requires validation.min, validation.max and validation.step")

        return self


class GeneratedForm(CamelModel):
    id: str
    title: str
    description: str = ""
    fields: List[FormField] = Field(default_factory=list)
    theme: FormTheme = FormTheme.MODERN
    language: str = DEFAULT_LANGUAGE
    published_at: Optional[datetime] = None

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    def field_ids(self) -> Set[str]:
        return {field.id for field in self.fields}

    def with_fresh_ids(self) -> "GeneratedForm":
        """Copy with a new form id and a new id for every field."""
        return self.model_copy(
            update={
                "id": new_id(),
                "fields": [field.model_copy(update={"id": new_id()}) for field in self.fields],
            }
        )

    def with_field_ids_from(self, original: "GeneratedForm") -> "GeneratedForm":
        """
        Copy keeping field ids that exist in ``original`` and minting the rest.

        An id that repeats within this form is only kept for its first field.
        """
        known = original.field_ids()
        seen: Set[str] = set()
        fields = []
        for field in self.fields:
            if field.id in known and field.id not in seen:
                fields.append(field)
            else:
                fields.append(field.model_copy(update={"id": new_id()}))
            seen.add(fields[-1].id)
        return self.model_copy(update={"fields": fields})
