from __future__ import annotations

from pydantic import BaseModel

from quizkey.schemas.quiz import GradeResult, QuizSet


class ShareKeyResponse(BaseModel):
    key: str


class ShareKeyRequest(BaseModel):
    key: str


class DecodeResponse(BaseModel):
    version: int
    quiz: QuizSet


class DocumentRequest(BaseModel):
    text: str


class GradeRequest(BaseModel):
    answers: dict[str, str | list[str]]


class GradeResponse(BaseModel):
    quiz_id: str
    score: int | float
    max_score: int | float
    results: list[GradeResult]
