"""
Tests for the deterministic analytics calculator.
"""
import pytest

from builder.types import FieldType
from formcraft_app.services.analytics import (
    build_form_analytics,
    calculate_average_time,
    calculate_completion_rate,
    calculate_user_retention,
    get_top_performing_questions,
    is_complete_submission,
    parse_insights,
)
from formcraft_app.types import FormDataset, FormField, GeneratedForm, SubmissionRecord


@pytest.fixture
def form():
    return GeneratedForm(
        id="f",
        title="Feedback",
        fields=[
            FormField(id="q1", type=FieldType.TEXT, label="Name"),
            FormField(id="q2", type=FieldType.EMAIL, label="Email"),
            FormField(id="q3", type=FieldType.CHECKBOX, label="Topics", options=["a", "b"]),
            FormField(id="q4", type=FieldType.TEXTAREA, label="Comments"),
        ],
    )


@pytest.fixture
def submissions():
    return [
        SubmissionRecord(data={"q1": "Ana", "q2": "ana@example.com", "q3": ["a"], "q4": "Great"}, completion_time=20),
        SubmissionRecord(data={"q1": "Ben", "q2": "", "q3": [], "q4": "Ok"}, completion_time=0),
        SubmissionRecord(data={"q1": "Cy", "q2": "cy@example.com", "q3": None, "q4": ""}, completion_time=None),
        SubmissionRecord(data={"q1": "Di", "q2": "di@example.com", "q3": ["b"], "q4": "Nice"}, completion_time=40),
    ]


class TestCompletion:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ({"a": "x", "b": ["y"], "c": 0, "d": False}, True),
            ({"a": "x", "b": ""}, False),
            ({"a": None}, False),
            ({"a": []}, False),
            ({}, True),
        ],
    )
    def test_is_complete_submission(self, data, expected):
        assert is_complete_submission(data) is expected

    def test_completion_rate(self, submissions):
        assert calculate_completion_rate(submissions) == 50

    def test_completion_rate_without_submissions(self):
        assert calculate_completion_rate([]) == 0


class TestAverageTime:
    def test_ignores_missing_and_zero_times(self, submissions):
        assert calculate_average_time(submissions) == 30

    def test_no_times(self):
        assert calculate_average_time([SubmissionRecord(data={})]) == 0


class TestTopPerformingQuestions:
    def test_ranked_by_answer_share_with_ties_in_field_order(self, form, submissions):
        top = get_top_performing_questions(form, submissions)
        assert [(q.question, q.completion_rate) for q in top] == [
            ("Name", 100),
            ("Email", 75),
            ("Comments", 75),
        ]

    def test_uses_field_ids_without_form(self, submissions):
        top = get_top_performing_questions(None, submissions, limit=2)
        assert [q.question for q in top] == ["q1", "q2"]

    def test_empty_without_submissions(self, form):
        assert get_top_performing_questions(form, []) == []


class TestRetentionAndInsights:
    def test_retention_baseline(self, submissions):
        retention = calculate_user_retention(submissions)
        assert (retention.day1, retention.day7, retention.day30) == (85, 65, 45)

    def test_retention_without_submissions(self):
        retention = calculate_user_retention([])
        assert (retention.day1, retention.day7, retention.day30) == (0, 0, 0)

    def test_parse_insights(self):
        text = "1. First point\n  2.Second point  \n\n10. Tenth\nNo number"
        assert parse_insights(text) == ["First point", "Second point", "Tenth", "No number"]


class TestBuildFormAnalytics:
    def test_is_deterministic(self, form, submissions):
        dataset = FormDataset(form=form, submissions=submissions)
        first = build_form_analytics(dataset, ["x"])
        second = build_form_analytics(dataset, ["x"])
        assert first.to_json_dict() == second.to_json_dict()

    def test_json_uses_camel_case(self, form, submissions):
        document = build_form_analytics(FormDataset(form=form, submissions=submissions), []).to_json_dict()
        assert document["totalSubmissions"] == 4
        assert document["completionRate"] == 50
        assert document["averageTimeToComplete"] == 30
        assert document["topPerformingQuestions"][0] == {"question": "Name", "completionRate": 100}
        assert document["userRetention"] == {"day1": 85, "day7": 65, "day30": 45}
        assert document["insights"] == []

    def test_empty_dataset(self):
        analytics = build_form_analytics(FormDataset(), [])
        assert analytics.total_submissions == 0
        assert analytics.completion_rate == 0
        assert analytics.top_performing_questions == []
