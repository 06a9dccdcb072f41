"""
Analytics and submission types.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr, TypeAdapter

from formcraft_app.types.forms import GeneratedForm
from formcraft_app.utils.pydantic_utils import CamelModel

# A single answer. None marks an unanswered field.
SubmissionValue = Optional[Union[StrictBool, StrictInt, StrictFloat, StrictStr, List[StrictStr]]]

# field id -> answer
SubmissionData = Dict[str, SubmissionValue]

submission_data_adapter = TypeAdapter(SubmissionData)


class QuestionPerformance(CamelModel):
    question: str
    completion_rate: float


class UserRetention(CamelModel):
    day1: float = 0
    day7: float = 0
    day30: float = 0


class FormAnalytics(CamelModel):
    total_submissions: int = 0
    completion_rate: float = 0
    average_time_to_complete: float = 0
    top_performing_questions: List[QuestionPerformance] = Field(default_factory=list)
    user_retention: UserRetention = Field(default_factory=UserRetention)
    insights: List[str] = Field(default_factory=list)


class SubmissionRecord(CamelModel):
    id: Optional[str] = None
    # Stored rows hold whatever was submitted
    data: Dict[str, Any] = Field(default_factory=dict)
    completion_time: Optional[float] = None
    created_at: Optional[datetime] = None


class FormDataset(CamelModel):
    """A form together with its submissions, as handed to analytics."""
    form: Optional[GeneratedForm] = None
    submissions: List[SubmissionRecord] = Field(default_factory=list)
