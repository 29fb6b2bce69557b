"""Quiz schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class QuizModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizQuestion(QuizModel):
    """A multiple choice question with exactly one correct option."""

    question: str
    options: list[str]
    correct_index: int = Field(ge=0)
    explanation: str = ""


class QuizGenerateRequest(QuizModel):
    """Ask the generation service for a quiz on a roadmap step."""

    topic: str = Field(min_length=1)
    description: str | None = None


class QuizGenerateResponse(QuizModel):
    questions: list[QuizQuestion]


class QuizSubmitRequest(QuizModel):
    """Submit answers for a node's quiz."""

    roadmap_id: str = Field(min_length=1)
    node_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    answers: list[int]
    questions: list[QuizQuestion] = Field(min_length=1)

    @model_validator(mode="after")
    def check_correct_index(self) -> "QuizSubmitRequest":
        for i, q in enumerate(self.questions):
            if q.correct_index >= len(q.options):
                raise ValueError(f"Invalid correctIndex at question {i}")
        return self


class QuizScore(QuizModel):
    """Outcome of grading a set of answers."""

    score: int
    total_questions: int
    percentage: int
    passed: bool
    message: str


class QuizSubmitResponse(QuizScore):
    id: int


class QuizResultResponse(QuizModel):
    """Stored quiz result."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    roadmap_id: str
    node_id: str
    user_id: str
    score: int
    total_questions: int
    passed: bool
    answers: list[int]
    questions: list[QuizQuestion]
    created_at: datetime
    updated_at: datetime
