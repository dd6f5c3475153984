from __future__ import annotations

import enum
import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def now_ms() -> int:
    return int(time.time() * 1000)


class QuestionType(str, enum.Enum):
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    FILL_IN_THE_BLANK = "FILL_IN_THE_BLANK"
    TRUE_FALSE = "TRUE_FALSE"
    SUBJECTIVE = "SUBJECTIVE"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE)


class _CamelModel(BaseModel):
    # Field names are snake_case in Python and camelCase on the wire.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Option(_CamelModel):
    id: str = ""
    text: str = ""


class Question(_CamelModel):
    id: str = Field(default_factory=new_id)
    type: QuestionType
    text: str = ""
    points: NonNegativeInt | NonNegativeFloat = 0
    options: list[Option] | None = None
    correct_answers: list[str] = Field(default_factory=list)
    subjective_reference: str | None = None
    explanation: str | None = None


class QuizSet(_CamelModel):
    id: str = Field(default_factory=new_id)
    title: str = ""
    description: str = ""
    created_at: int = Field(default_factory=now_ms)
    questions: list[Question] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        """Canonical camelCase document, absent optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GradeResult(_CamelModel):
    question_id: str
    is_correct: bool
    score: int | float
    max_score: int | float
    feedback: str | None = None
