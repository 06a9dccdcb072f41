"""
Tests for the AI Service

Providers are replaced by an in-memory double that replays canned model output.
"""
import json
from datetime import datetime, timezone

import pytest

from builder.types import FieldType
from formcraft_app.ai import APIError, AIProvider, ChatResult, TextGenerationProvider
from formcraft_app.exceptions import RefinementFailed
from formcraft_app.services.ai_service import INSIGHTS_FAILED, INSIGHTS_UNAVAILABLE, AIService
from formcraft_app.services.sample_forms import SAMPLE_INSIGHTS
from formcraft_app.types import (
    RATING_MAX_LOWER,
    RATING_MAX_UPPER,
    FormDataset,
    FormField,
    GeneratedForm,
    SubmissionRecord,
)


class ReplayProvider(TextGenerationProvider):
    """Returns queued responses; exceptions in the queue are raised."""

    provider = AIProvider.OPENAI

    def __init__(self, *responses):
        super().__init__(api_key="test-key", model="test-model")
        self.responses = list(responses)
        self.calls = []

    def run(self, *, system_prompt, user_prompt, llm_settings=None, json_mode=False):
        self.calls.append({"system": system_prompt, "user": user_prompt, "json_mode": json_mode})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        content = response if isinstance(response, str) else json.dumps(response)
        return ChatResult(content=content, model=self.model)


def model_form(title, field_ids=("a", "b")):
    return {
        "id": "model-id",
        "title": title,
        "description": f"{title} description",
        "theme": "colorful",
        "fields": [
            {"id": field_id, "type": "text", "label": f"Question {field_id}", "required": True}
            for field_id in field_ids
        ],
    }


@pytest.fixture
def existing_form():
    return GeneratedForm(
        id="form-1",
        title="Customer Survey",
        description="Tell us about your visit",
        language="French",
        published_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        fields=[
            FormField(id="name", type=FieldType.TEXT, label="Nom", required=True),
            FormField(id="score", type=FieldType.RATING, label="Note", validation={"max": 5}),
        ],
    )


def all_ids(forms):
    ids = []
    for form in forms:
        ids.append(form.id)
        ids.extend(field.id for field in form.fields)
    return ids


def without_ids(form):
    document = form.to_json_dict()
    document.pop("id")
    for field in document["fields"]:
        field.pop("id")
    return document


class TestGenerateForms:
    def test_fallback_without_provider(self):
        forms = AIService(None).generate_forms("customer feedback", language="Spanish")

        assert [form.title for form in forms] == ["Sample Feedback Form", "Sample Contact Form"]
        assert all(form.language == "Spanish" for form in forms)
        ids = all_ids(forms)
        assert len(ids) == len(set(ids))

    def test_fallback_is_deterministic_apart_from_ids(self):
        first = AIService(None).generate_forms("x")
        second = AIService(None).generate_forms("y")
        assert [without_ids(form) for form in first] == [without_ids(form) for form in second]
        assert set(all_ids(first)).isdisjoint(all_ids(second))

    def test_fallback_rating_is_bounded(self):
        for form in AIService(None).generate_forms("x"):
            for field in form.fields:
                if field.type == FieldType.RATING:
                    assert RATING_MAX_LOWER <= field.validation.max <= RATING_MAX_UPPER

    def test_wrapper_payload_gets_fresh_ids_and_language(self):
        provider = ReplayProvider({"forms": [model_form("One"), model_form("Two")]})
        forms = AIService(provider).generate_forms("an event signup", language="German")

        assert [form.title for form in forms] == ["One", "Two"]
        assert all(form.language == "German" for form in forms)
        ids = all_ids(forms)
        assert len(ids) == len(set(ids)) == 6
        assert not {"model-id", "a", "b"} & set(ids)
        assert provider.calls[0]["json_mode"] is True
        assert "German" in provider.calls[0]["system"]

    def test_bare_array_payload(self):
        provider = ReplayProvider([model_form("One"), model_form("Two"), model_form("Three")])
        forms = AIService(provider).generate_forms("x")
        assert [form.title for form in forms] == ["One", "Two"]

    def test_one_form_falls_back(self):
        provider = ReplayProvider({"forms": [model_form("Only")]})
        forms = AIService(provider).generate_forms("x")
        assert forms[0].title == "Sample Feedback Form"

    @pytest.mark.parametrize(
        "response",
        [
            APIError("boom", status_code=500),
            "definitely not json",
            {"title": "single form", "fields": []},
            {"forms": "nope"},
        ],
    )
    def test_failures_fall_back(self, response):
        forms = AIService(ReplayProvider(response)).generate_forms("x", language="Italian")
        assert len(forms) == 2
        assert forms[1].title == "Sample Contact Form"
        assert all(form.language == "Italian" for form in forms)


class TestRefineForm:
    def test_fallback_appends_field(self, existing_form):
        refined = AIService(None).refine_form(existing_form, "add a phone number")

        assert refined.id == existing_form.id
        assert refined.published_at == existing_form.published_at
        assert [field.id for field in refined.fields[:2]] == ["name", "score"]
        added = refined.fields[-1]
        assert added.label == 'New field based on: "add a phone number" (Fallback)'
        assert added.type == FieldType.TEXT
        assert added.placeholder == "This is a sample refined field"
        assert added.required is False
        assert len(existing_form.fields) == 2

    def test_ids_are_preserved(self, existing_form):
        payload = {
            "id": "something-else",
            "title": "Customer Survey",
            "fields": [
                {"id": "name", "type": "text", "label": "Nom complet", "required": True},
                {"id": "made-up", "type": "email", "label": "Courriel"},
                {"id": "name", "type": "text", "label": "Doublon"},
            ],
        }
        refined = AIService(ReplayProvider(payload)).refine_form(existing_form, "add email")

        assert refined.id == "form-1"
        assert refined.language == "French"
        assert refined.published_at == existing_form.published_at
        ids = [field.id for field in refined.fields]
        assert ids[0] == "name"
        assert ids[1] not in {"made-up", "name", "score"}
        assert ids[2] != "name"
        assert len(set(ids)) == 3

    def test_language_change_follows_model(self, existing_form):
        payload = {
            "title": "सर्वेक्षण",
            "language": "Hindi",
            "fields": [{"id": "name", "type": "text", "label": "नाम", "required": True}],
        }
        refined = AIService(ReplayProvider(payload)).refine_form(existing_form, "translate everything to Hindi")

        assert refined.language == "Hindi"
        assert refined.id == "form-1"

    @pytest.mark.parametrize("rating_max", ["1e400", "Infinity", "NaN"])
    def test_non_finite_rating_max_is_repaired(self, existing_form, rating_max):
        response = (
            '{"title": "X", "fields": [{"id": "score", "type": "rating", "label": "Note", '
            '"validation": {"max": ' + rating_max + '}}]}'
        )
        refined = AIService(ReplayProvider(response)).refine_form(existing_form, "keep the rating")

        assert refined.fields[0].validation.max == 5

    @pytest.mark.parametrize(
        "response",
        [APIError("down", status_code=503), "not json", [model_form("array")], {"title": "x", "fields": []}],
    )
    def test_failures_raise(self, existing_form, response):
        with pytest.raises(RefinementFailed):
            AIService(ReplayProvider(response)).refine_form(existing_form, "anything")


class TestTranslateForm:
    def test_translation(self, existing_form):
        payload = {
            "id": "other",
            "title": "Encuesta",
            "description": "Cuéntanos",
            "fields": [
                {"id": "name", "type": "text", "label": "Nombre", "required": True},
                {"id": "score", "type": "rating", "label": "Puntuación", "validation": {"max": 5}},
            ],
        }
        translated = AIService(ReplayProvider(payload)).translate_form(existing_form, "Spanish")

        assert translated.id == "form-1"
        assert translated.language == "Spanish"
        assert translated.title == "Encuesta"
        assert [field.id for field in translated.fields] == ["name", "score"]

    @pytest.mark.parametrize(
        "service",
        [
            AIService(None),
            AIService(ReplayProvider(APIError("x"))),
            AIService(ReplayProvider("not json")),
            AIService(ReplayProvider([model_form("array")])),
        ],
    )
    def test_failure_swaps_language_only(self, existing_form, service):
        translated = service.translate_form(existing_form, "Japanese")
        assert translated.language == "Japanese"
        assert translated.model_copy(update={"language": "French"}) == existing_form

    def test_non_finite_numbers_do_not_break_translation(self, existing_form):
        response = (
            '{"title": "Encuesta", "fields": [{"id": "score", "type": "rating", "label": "Nota", '
            '"validation": {"max": 1e400}}]}'
        )
        translated = AIService(ReplayProvider(response)).translate_form(existing_form, "Spanish")

        assert translated.language == "Spanish"
        assert translated.title == "Encuesta"
        assert translated.fields[0].validation.max == 5


class TestAnalyzeFormData:
    @pytest.fixture
    def dataset(self, existing_form):
        return FormDataset(
            form=existing_form,
            submissions=[
                SubmissionRecord(data={"name": "Ana", "score": 4}, completion_time=30),
                SubmissionRecord(data={"name": "", "score": 5}, completion_time=50),
            ],
        )

    def test_insights_from_model(self, dataset):
        provider = ReplayProvider("1. Most people rate 4 or higher.\n\n2.  Names are often skipped.\n")
        analytics = AIService(provider).analyze_form_data(dataset)

        assert analytics.insights == ["Most people rate 4 or higher.", "Names are often skipped."]
        assert analytics.total_submissions == 2
        assert analytics.completion_rate == 50
        assert analytics.average_time_to_complete == 40

    @pytest.mark.parametrize("service", [AIService(None), AIService(ReplayProvider(APIError("x")))])
    def test_canned_insights(self, dataset, service):
        analytics = service.analyze_form_data(dataset)
        assert analytics.insights == SAMPLE_INSIGHTS
        assert analytics.completion_rate == 50

    def test_numbers_do_not_depend_on_provider(self, dataset):
        with_model = AIService(ReplayProvider("insight")).analyze_form_data(dataset)
        without_model = AIService(None).analyze_form_data(dataset)
        assert with_model.model_copy(update={"insights": []}) == without_model.model_copy(update={"insights": []})


class TestGetAIInsights:
    def test_without_provider(self):
        assert AIService(None).get_ai_insights("why?", FormDataset()) == INSIGHTS_UNAVAILABLE

    def test_on_error(self):
        assert AIService(ReplayProvider(APIError("x"))).get_ai_insights("why?", FormDataset()) == INSIGHTS_FAILED

    def test_answer_is_trimmed(self):
        provider = ReplayProvider("  Most answers arrive in the morning.  \n")
        answer = AIService(provider).get_ai_insights("when?", FormDataset())
        assert answer == "Most answers arrive in the morning."
        assert "when?" in provider.calls[0]["user"]
