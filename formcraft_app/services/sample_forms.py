"""
Deterministic stand-ins used when the model is unavailable.
"""
from typing import List

from builder.types import FieldType, FormTheme
from formcraft_app.types import FormField, GeneratedForm, new_id

SAMPLE_FORM_DESCRIPTION = (
    "This is a sample form generated because the AI service is currently unavailable. "
    "Please provide your valuable feedback."
)

SAMPLE_INSIGHTS = [
    "Sample insight: Your form is performing well!",
    "Consider adding more fields to gather comprehensive data.",
    "Mobile users show higher completion rates.",
    "Forms with 5-7 fields tend to perform best.",
]

FALLBACK_FIELD_PLACEHOLDER = "This is a sample refined field"


def _feedback_form(language: str) -> GeneratedForm:
    return GeneratedForm(
        id=new_id(),
        title="Sample Feedback Form",
        description=SAMPLE_FORM_DESCRIPTION,
        language=language,
        theme=FormTheme.MODERN,
        fields=[
            FormField(id=new_id(), type=FieldType.TEXT, label="Full Name", placeholder="e.g., John Doe", required=True),
            FormField(
                id=new_id(),
                type=FieldType.EMAIL,
                label="Email Address",
                placeholder="e.g., john.doe@example.com",
                required=True,
            ),
            FormField(
                id=new_id(),
                type=FieldType.RATING,
                label="Overall Satisfaction",
                required=True,
                validation={"max": 5},
            ),
            FormField(
                id=new_id(),
                type=FieldType.SELECT,
                label="How did you hear about us?",
                placeholder="Select an option",
                required=False,
                options=["Social Media", "Friend or Colleague", "Search Engine", "Other"],
            ),
            FormField(id=new_id(), type=FieldType.SWITCH, label="Subscribe to our newsletter?", required=False),
            FormField(
                id=new_id(),
                type=FieldType.TEXTAREA,
                label="Additional Comments",
                placeholder="Share your thoughts, suggestions, or concerns...",
                required=False,
            ),
        ],
    )


def _contact_form(language: str) -> GeneratedForm:
    return GeneratedForm(
        id=new_id(),
        title="Sample Contact Form",
        description=SAMPLE_FORM_DESCRIPTION,
        language=language,
        theme=FormTheme.CLASSIC,
        fields=[
            FormField(id=new_id(), type=FieldType.TEXT, label="Your Name", required=True),
            FormField(id=new_id(), type=FieldType.EMAIL, label="Your Email", required=True),
            FormField(
                id=new_id(),
                type=FieldType.SLIDER,
                label="Urgency",
                required=True,
                validation={"min": 1, "max": 5, "step": 1},
            ),
            FormField(id=new_id(), type=FieldType.TEXTAREA, label="Your Message", required=True),
        ],
    )


def build_sample_forms(language: str) -> List[GeneratedForm]:
    """The two fallback candidates: a feedback form and a contact form."""
    return [_feedback_form(language), _contact_form(language)]


def build_fallback_refinement(form: GeneratedForm, instruction: str) -> GeneratedForm:
    """Append one placeholder text field naming the instruction."""
    fallback_field = FormField(
        id=new_id(),
        type=FieldType.TEXT,
        label=f'New field based on: "{instruction}" (Fallback)',
        placeholder=FALLBACK_FIELD_PLACEHOLDER,
        required=False,
    )
    return form.model_copy(update={"fields": [*form.fields, fallback_field]})
