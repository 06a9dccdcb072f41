"""
AI Service for generating, refining, translating and analyzing forms.

Every operation works without a model credential: generation, translation and
analysis degrade to deterministic output, refinement appends a placeholder
field. With a credential, refinement failures surface as RefinementFailed.
"""
import json
import logging
from typing import List, Optional

from formcraft_app.ai import TextGenerationProvider, get_text_provider
from formcraft_app.exceptions import RefinementFailed
from formcraft_app.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    INSIGHTS_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_generate_system_prompt,
    build_generate_user_prompt,
    build_insights_prompt,
    build_refine_system_prompt,
    build_refine_user_prompt,
    build_translate_system_prompt,
    build_translate_user_prompt,
)
from formcraft_app.services.analytics import build_form_analytics, parse_insights
from formcraft_app.services.form_parser import ParseError, PayloadShape, parse_form_payload
from formcraft_app.services.sample_forms import SAMPLE_INSIGHTS, build_fallback_refinement, build_sample_forms
from formcraft_app.types import DEFAULT_LANGUAGE, FormAnalytics, FormDataset, GeneratedForm

logger = logging.getLogger(__name__)

CANDIDATE_COUNT = 2

INSIGHTS_UNAVAILABLE = (
    "AI insights are not available. Please set up your GEMINI_API_KEY or OPENAI_API_KEY "
    "to enable this feature."
)
INSIGHTS_FAILED = "Sorry, I encountered an error while analyzing your data."


class AIService:
    """Service for AI-powered form design and analysis."""

    def __init__(self, provider: Optional[TextGenerationProvider]):
        self.provider = provider

    @property
    def is_configured(self) -> bool:
        return self.provider is not None

    def generate_forms(self, prompt: str, language: str = DEFAULT_LANGUAGE) -> List[GeneratedForm]:
        """
        Generate two candidate forms for a natural language description.

        Always returns exactly two forms with fresh ids, stamped with ``language``.
        Falls back to the sample forms on any failure.
        """
        forms = None
        if self.provider is not None:
            try:
                payload = self.provider.complete_json(
                    build_generate_system_prompt(language),
                    build_generate_user_prompt(prompt),
                )
                result = parse_form_payload(
                    payload,
                    accept=(PayloadShape.FORM_ARRAY, PayloadShape.FORMS_WRAPPER),
                )
                if isinstance(result, ParseError):
                    logger.warning(f"Unusable form payload from model: {result.reason}")
                elif len(result.forms) < CANDIDATE_COUNT:
                    logger.warning(f"Model returned {len(result.forms)} valid forms, expected {CANDIDATE_COUNT}")
                else:
                    forms = result.forms[:CANDIDATE_COUNT]
            except Exception as e:
                logger.error(f"Error generating forms: {e}")

        if forms is None:
            forms = build_sample_forms(language)

        return [form.with_fresh_ids().model_copy(update={"language": language}) for form in forms]

    def refine_form(self, existing_form: GeneratedForm, instruction: str) -> GeneratedForm:
        """
        Apply a natural language edit to a form.

        The form id and ``publishedAt`` are kept, field ids are kept for fields
        that already existed. The language is the one the model reports, so an
        instruction asking for another language relabels the form.
        """
        if self.provider is None:
            return build_fallback_refinement(existing_form, instruction)

        try:
            payload = self.provider.complete_json(
                build_refine_system_prompt(existing_form.language),
                build_refine_user_prompt(existing_form.to_json_dict(), instruction),
            )
            result = parse_form_payload(payload, accept=(PayloadShape.SINGLE_FORM,))
        except Exception as e:
            logger.error(f"Error refining form: {e}")
            raise RefinementFailed("Failed to refine form with AI.") from e

        if isinstance(result, ParseError):
            logger.error(f"Error refining form: {result.reason}")
            raise RefinementFailed("Failed to refine form with AI.")

        refined = result.forms[0].with_field_ids_from(existing_form)
        return refined.model_copy(
            update={
                "id": existing_form.id,
                "language": _reported_language(payload) or existing_form.language,
                "published_at": existing_form.published_at,
            }
        )

    def translate_form(self, form: GeneratedForm, target_language: str) -> GeneratedForm:
        """Translate every human-readable string. Falls back to relabelling the language only."""
        fallback = form.model_copy(update={"language": target_language})
        if self.provider is None:
            return fallback

        try:
            payload = self.provider.complete_json(
                build_translate_system_prompt(target_language),
                build_translate_user_prompt(form.to_json_dict(), target_language),
            )
            result = parse_form_payload(payload, accept=(PayloadShape.SINGLE_FORM,))
        except Exception as e:
            logger.error(f"Error translating form: {e}")
            return fallback

        if isinstance(result, ParseError):
            logger.error(f"Error translating form: {result.reason}")
            return fallback

        translated = result.forms[0].with_field_ids_from(form)
        return translated.model_copy(
            update={
                "id": form.id,
                "language": target_language,
                "published_at": form.published_at,
            }
        )

    def analyze_form_data(self, form_data: FormDataset) -> FormAnalytics:
        """Compute analytics locally and ask the model for insights."""
        insights = SAMPLE_INSIGHTS
        if self.provider is not None:
            try:
                text = self.provider.complete_text(
                    ANALYSIS_SYSTEM_PROMPT,
                    build_analysis_prompt(_dataset_json(form_data)),
                )
                insights = parse_insights(text) or SAMPLE_INSIGHTS
            except Exception as e:
                logger.error(f"Error analyzing form data: {e}")

        return build_form_analytics(form_data, insights)

    def get_ai_insights(self, question: str, form_data: FormDataset) -> str:
        """Answer a free-form question about the form data. Never raises."""
        if self.provider is None:
            return INSIGHTS_UNAVAILABLE

        try:
            return self.provider.complete_text(
                INSIGHTS_SYSTEM_PROMPT,
                build_insights_prompt(question, _dataset_json(form_data)),
            )
        except Exception as e:
            logger.error(f"Error getting AI insights: {e}")
            return INSIGHTS_FAILED


def _dataset_json(form_data: FormDataset) -> str:
    return json.dumps(form_data.to_json_dict(), indent=2)


def _reported_language(payload) -> Optional[str]:
    """The ``language`` a single-form payload declares, if any."""
    language = payload.get("language") if isinstance(payload, dict) else None
    if isinstance(language, str) and language.strip():
        return language.strip()
    return None


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Get the singleton AIService instance."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService(get_text_provider())
    return _ai_service
