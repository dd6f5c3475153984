"""Compact keyed representation used inside V2 share keys.

Field names shrink to the short codes in :mod:`quizkey.services.keymap` and
question types become integers. Choice questions go one step further:
options travel as bare strings (position is the id) and answers as 0-based
positions. Older V2 payloads carried explicit ``{"i", "tx"}`` option
records for choice questions too, so :func:`unminify` accepts both.
"""

from __future__ import annotations

import logging
from typing import Any

from quizkey.schemas.quiz import Question, QuizSet
from quizkey.services.keymap import KEY_MAP, type_code, type_from_code

log = logging.getLogger(__name__)

_ID = KEY_MAP["id"]
_TITLE = KEY_MAP["title"]
_DESCRIPTION = KEY_MAP["description"]
_CREATED_AT = KEY_MAP["createdAt"]
_QUESTIONS = KEY_MAP["questions"]
_TYPE = KEY_MAP["type"]
_TEXT = KEY_MAP["text"]
_OPTIONS = KEY_MAP["options"]
_ANSWERS = KEY_MAP["correctAnswers"]
_SUBJECTIVE_REF = KEY_MAP["subjectiveReference"]
_EXPLANATION = KEY_MAP["explanation"]
_POINTS = KEY_MAP["points"]


class PayloadError(ValueError):
    pass


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _minify_question(q: Question) -> dict[str, Any]:
    is_choice = q.type.is_choice
    out: dict[str, Any] = {
        _ID: q.id,
        _TYPE: type_code(q.type),
        _TEXT: q.text,
        _POINTS: q.points,
    }

    if q.options is not None:
        if is_choice:
            out[_OPTIONS] = [o.text for o in q.options]
        else:
            out[_OPTIONS] = [{_ID: o.id, _TEXT: o.text} for o in q.options]

    if is_choice:
        positions: dict[str, int] = {}
        for idx, o in enumerate(q.options or []):
            positions.setdefault(o.id, idx)
        resolved = [positions[a] for a in q.correct_answers if a in positions]
        if len(resolved) != len(q.correct_answers):
            log.debug("minify: dropped %s dangling answer(s) question=%s", len(q.correct_answers) - len(resolved), q.id)
        out[_ANSWERS] = resolved
    else:
        out[_ANSWERS] = list(q.correct_answers)

    if q.subjective_reference is not None:
        out[_SUBJECTIVE_REF] = q.subjective_reference
    if q.explanation is not None:
        out[_EXPLANATION] = q.explanation
    return out


def minify(quiz: QuizSet) -> dict[str, Any]:
    return {
        _ID: quiz.id,
        _TITLE: quiz.title,
        _DESCRIPTION: quiz.description,
        _CREATED_AT: quiz.created_at,
        _QUESTIONS: [_minify_question(q) for q in quiz.questions],
    }


def _explicit_option(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise PayloadError("option record must be an object")
    return {"id": str(raw.get(_ID) or ""), "text": str(raw.get(_TEXT) or "")}


def _unminify_question(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise PayloadError("question must be an object")

    qtype = type_from_code(raw.get(_TYPE))
    raw_options = raw.get(_OPTIONS)
    raw_answers = raw.get(_ANSWERS)
    if raw_answers is not None and not isinstance(raw_answers, list):
        raise PayloadError("correct answers must be a list")
    raw_answers = raw_answers or []
    if raw_options is not None and not isinstance(raw_options, list):
        raise PayloadError("options must be a list")

    options: list[dict[str, str]] | None = None
    answers = [str(a) for a in raw_answers]

    if qtype.is_choice and raw_options is not None:
        if raw_options and isinstance(raw_options[0], str):
            options = [{"id": str(idx + 1), "text": str(text)} for idx, text in enumerate(raw_options)]
            answers = [str(a + 1) for a in raw_answers if _is_index(a)]
        else:
            options = [_explicit_option(o) for o in raw_options]
    elif raw_options is not None:
        options = [_explicit_option(o) for o in raw_options]

    q: dict[str, Any] = {
        "type": qtype,
        "text": raw.get(_TEXT) or "",
        "options": options,
        "correctAnswers": answers,
    }
    if raw.get(_ID) is not None:
        q["id"] = str(raw[_ID])
    if raw.get(_POINTS) is not None:
        q["points"] = raw[_POINTS]
    if raw.get(_SUBJECTIVE_REF) is not None:
        q["subjectiveReference"] = raw[_SUBJECTIVE_REF]
    if raw.get(_EXPLANATION) is not None:
        q["explanation"] = raw[_EXPLANATION]
    return q


def unminify(data: Any) -> QuizSet:
    if not isinstance(data, dict):
        raise PayloadError("payload must be an object")

    raw_questions = data.get(_QUESTIONS)
    if raw_questions is None:
        raw_questions = []
    if not isinstance(raw_questions, list):
        raise PayloadError("questions must be a list")

    doc: dict[str, Any] = {"questions": [_unminify_question(q) for q in raw_questions]}
    for name, short in (("id", _ID), ("title", _TITLE), ("description", _DESCRIPTION), ("createdAt", _CREATED_AT)):
        if data.get(short) is not None:
            doc[name] = data[short]
    return QuizSet.model_validate(doc)
