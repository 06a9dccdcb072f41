from .forms import (
    DEFAULT_LANGUAGE,
    DEFAULT_RATING_MAX,
    RATING_MAX_LOWER,
    RATING_MAX_UPPER,
    FieldValidation,
    FormField,
    GeneratedForm,
    new_id,
)
from .analytics import (
    FormAnalytics,
    FormDataset,
    QuestionPerformance,
    SubmissionData,
    SubmissionRecord,
    SubmissionValue,
    UserRetention,
    submission_data_adapter,
)

__all__ = [
    "DEFAULT_LANGUAGE",
    "DEFAULT_RATING_MAX",
    "RATING_MAX_LOWER",
    "RATING_MAX_UPPER",
    "FieldValidation",
    "FormField",
    "GeneratedForm",
    "new_id",
    "FormAnalytics",
    "FormDataset",
    "QuestionPerformance",
    "SubmissionData",
    "SubmissionRecord",
    "SubmissionValue",
    "UserRetention",
    "submission_data_adapter",
]
