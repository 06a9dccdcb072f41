"""
Deterministic form analytics.

Every numeric field of FormAnalytics is computed here from the submissions
alone; only ``insights`` comes from the model.
"""
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from formcraft_app.types import (
    FormAnalytics,
    FormDataset,
    GeneratedForm,
    QuestionPerformance,
    SubmissionData,
    SubmissionRecord,
    UserRetention,
)

TOP_QUESTIONS_LIMIT = 3

BASELINE_RETENTION = UserRetention(day1=85, day7=65, day30=45)

ORDINAL_PREFIX_RE = re.compile(r"^\d+\.\s*")


def is_answered(value) -> bool:
    return value is not None and value != "" and value != []


def is_complete_submission(data: SubmissionData) -> bool:
    return all(is_answered(value) for value in data.values())


def calculate_completion_rate(submissions: Sequence[SubmissionRecord]) -> float:
    if not submissions:
        return 0
    completed = sum(1 for submission in submissions if is_complete_submission(submission.data))
    return completed / len(submissions) * 100


def calculate_average_time(submissions: Sequence[SubmissionRecord]) -> float:
    times = [submission.completion_time for submission in submissions if submission.completion_time]
    if not times:
        return 0
    return sum(times) / len(times)


def _question_columns(form: Optional[GeneratedForm], submissions: Sequence[SubmissionRecord]) -> List[Tuple[str, str]]:
    """(field id, question label) pairs in field order."""
    if form is not None:
        return [(field.id, field.label) for field in form.fields]

    seen = {}
    for submission in submissions:
        for field_id in submission.data:
            seen.setdefault(field_id, field_id)
    return list(seen.items())


def get_top_performing_questions(
    form: Optional[GeneratedForm],
    submissions: Sequence[SubmissionRecord],
    limit: int = TOP_QUESTIONS_LIMIT,
) -> List[QuestionPerformance]:
    """Fields ranked by the share of submissions answering them. Ties keep field order."""
    if not submissions:
        return []

    total = len(submissions)
    ranked = []
    for field_id, label in _question_columns(form, submissions):
        answered = sum(1 for submission in submissions if is_answered(submission.data.get(field_id)))
        ranked.append(QuestionPerformance(question=label, completion_rate=answered / total * 100))

    ranked.sort(key=lambda question: -question.completion_rate)
    return ranked[:limit]


def calculate_user_retention(submissions: Sequence[SubmissionRecord]) -> UserRetention:
    if not submissions:
        return UserRetention()
    return BASELINE_RETENTION.model_copy()


def parse_insights(text: str) -> List[str]:
    """Split model prose into one insight per line, without ordinal prefixes."""
    insights = []
    for line in text.split("\n"):
        line = ORDINAL_PREFIX_RE.sub("", line.strip())
        if line:
            insights.append(line)
    return insights


def build_form_analytics(dataset: FormDataset, insights: Iterable[str]) -> FormAnalytics:
    submissions = dataset.submissions
    return FormAnalytics(
        total_submissions=len(submissions),
        completion_rate=calculate_completion_rate(submissions),
        average_time_to_complete=calculate_average_time(submissions),
        top_performing_questions=get_top_performing_questions(dataset.form, submissions),
        user_retention=calculate_user_retention(submissions),
        insights=list(insights),
    )
