"""Pydantic schemas for assessments, questions, answers and attempt results."""
import json
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator


def parse_json_list(value):
    # JSON column may arrive as a string from some drivers
    if isinstance(value, str):
        value = json.loads(value)
    if not isinstance(value, list):
        raise ValueError("options must be a list of strings")
    return [str(v) for v in value]


class QuestionSchema(BaseModel):
    id: int
    assessment_id: int
    question_text: str
    options: list[str]
    correct_option: int
    explanation: str | None = None
    sort_order: int = 0

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("options", mode="before")
    @classmethod
    def parse_options(cls, value):
        return parse_json_list(value)

    @model_validator(mode="after")
    def check_correct_option(self):
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        if not 0 <= self.correct_option < len(self.options):
            raise ValueError("correct_option out of range")
        return self


class AssessmentSchema(BaseModel):
    id: int
    title: str
    pass_threshold: int = Field(ge=0, le=100)
    question_count: int = 0
    module_id: int | None = None

    class Config:
        from_attributes = True


class QuestionOutSchema(BaseModel):
    """Question as shown to a learner: no answer key."""

    id: int
    question_text: str
    options: list[str]
    sort_order: int = 0


class AssessmentOutSchema(AssessmentSchema):
    questions: list[QuestionOutSchema] = Field(default_factory=list)


class AnswerSchema(BaseModel):
    question_id: int
    selected_index: int = Field(ge=0)


class SubmitSchema(BaseModel):
    answers: list[AnswerSchema]


class CheckResultSchema(BaseModel):
    question_id: int
    selected_index: int
    is_correct: bool
    correct_option: int
    explanation: str | None = None
    feedback_seconds: float


class ReviewItemSchema(BaseModel):
    question_id: int
    question_text: str
    selected_index: int
    is_correct: bool
    chosen_text: str
    correct_text: str
    explanation: str | None = None


class AttemptRecordSchema(BaseModel):
    """Immutable outcome of scoring one submission."""

    assessment_id: int
    score: int
    total: int
    percentage: int
    passed: bool
    answers: list[AnswerSchema]

    class Config:
        frozen = True


class AttemptResultSchema(BaseModel):
    attempt_id: int
    score: int
    total: int
    percentage: int
    passed: bool
    certificate_number: str | None = None
    completed_at: datetime | None = None
    review: list[ReviewItemSchema] = Field(default_factory=list)


class QuestionInSchema(BaseModel):
    question_text: str = Field(min_length=1)
    options: list[str] = Field(min_length=2)
    correct_option: int = Field(ge=0)
    explanation: str | None = None

    @model_validator(mode="after")
    def check_correct_option(self):
        if self.correct_option >= len(self.options):
            raise ValueError("correct_option out of range")
        return self


class AssessmentCreateSchema(BaseModel):
    title: str = Field(min_length=1)
    pass_threshold: int | None = Field(default=None, ge=0, le=100)
    module_id: int | None = None
    questions: list[QuestionInSchema] = Field(default_factory=list)
