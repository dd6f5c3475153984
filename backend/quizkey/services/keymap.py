from __future__ import annotations

from types import MappingProxyType

from quizkey.schemas.quiz import QuestionType

KEY_MAP = MappingProxyType(
    {
        "id": "i",
        "title": "t",
        "description": "d",
        "createdAt": "c",
        "questions": "q",
        "type": "ty",
        "text": "tx",
        "options": "o",
        "correctAnswers": "ca",
        "subjectiveReference": "sr",
        "explanation": "ex",
        "points": "p",
    }
)

REV_KEY_MAP = MappingProxyType({v: k for k, v in KEY_MAP.items()})

TYPE_MAP = MappingProxyType(
    {
        QuestionType.SINGLE_CHOICE: 0,
        QuestionType.MULTIPLE_CHOICE: 1,
        QuestionType.FILL_IN_THE_BLANK: 2,
        QuestionType.TRUE_FALSE: 3,
        QuestionType.SUBJECTIVE: 4,
    }
)

REV_TYPE_MAP = MappingProxyType({v: k for k, v in TYPE_MAP.items()})


class UnknownTypeCodeError(ValueError):
    pass


def type_code(qtype: QuestionType) -> int:
    return TYPE_MAP[QuestionType(qtype)]


def type_from_code(code) -> QuestionType:
    # bool is an int subclass; True must not read as MULTIPLE_CHOICE.
    if isinstance(code, bool) or not isinstance(code, int) or code not in REV_TYPE_MAP:
        raise UnknownTypeCodeError(f"unknown question type code: {code!r}")
    return REV_TYPE_MAP[code]
