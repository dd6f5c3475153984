"""Tolerant reshaping of externally authored quiz data.

Hand-written files, AI tool output and old exports disagree on how options
and answers are spelled. Everything here funnels into one canonical
:class:`QuizSet`, so code downstream only ever sees ``Option`` records and
string answer ids.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from quizkey.schemas.quiz import QuestionType, QuizSet, new_id
from quizkey.services.keymap import UnknownTypeCodeError, type_from_code

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n?|\n?\s*```$")
_BLOCK_RE = re.compile(r"[\{\[][\s\S]*[\}\]]")

_OPTIONAL_TEXT_FIELDS = ("title", "description", "text", "explanation", "subjectiveReference")


class QuizValidationError(ValueError):
    pass


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _answer_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _coerce_type(value: Any, *, where: str) -> QuestionType:
    if isinstance(value, QuestionType):
        return value
    if _is_index(value):
        try:
            return type_from_code(value)
        except UnknownTypeCodeError as e:
            raise QuizValidationError(f"{where}: {e}") from e
    if isinstance(value, str) and value.strip():
        key = re.sub(r"[\s\-]+", "_", value.strip()).upper()
        try:
            return QuestionType(key)
        except ValueError:
            pass
    if value is None:
        raise QuizValidationError(f"{where}: missing type")
    raise QuizValidationError(f"{where}: unknown question type {value!r}")


def _normalize_options(raw: Any, *, where: str) -> list[dict[str, str]] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise QuizValidationError(f"{where}: options must be a list")

    out: list[dict[str, str]] = []
    for idx, item in enumerate(raw):
        if isinstance(item, dict):
            oid = item.get("id")
            text = item.get("text")
            out.append(
                {
                    "id": str(oid) if oid not in (None, "") else str(idx + 1),
                    "text": "" if text is None else str(text),
                }
            )
        elif item is None or isinstance(item, (list, bool)):
            raise QuizValidationError(f"{where}: option {idx + 1} is not text or an option record")
        else:
            # Plain string options: the 1-based position becomes the id.
            out.append({"id": str(idx + 1), "text": str(item)})
    return out


def _normalize_answers(raw: Any, *, is_choice: bool) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raw = [raw]
    if is_choice and raw and all(_is_index(a) for a in raw):
        # 0-based option indexes -> 1-based string ids.
        return [str(a + 1) for a in raw]
    return [_answer_str(a) for a in raw]


def _drop_none_text(src: dict[str, Any]) -> dict[str, Any]:
    out = dict(src)
    for name in _OPTIONAL_TEXT_FIELDS:
        if name in out and out[name] is None:
            out.pop(name)
    return out


def _normalize_question(raw: Any, *, index: int) -> dict[str, Any]:
    where = f"question {index + 1}"
    if not isinstance(raw, dict):
        raise QuizValidationError(f"{where}: must be an object")

    q = _drop_none_text(raw)
    if q.get("points") is None:
        q.pop("points", None)
    qtype = _coerce_type(q.get("type"), where=where)

    answers = q.pop("correct_answers", None)
    answers = q.get("correctAnswers", answers)
    sref = q.pop("subjective_reference", None)
    if sref is not None and "subjectiveReference" not in q:
        q["subjectiveReference"] = sref

    qid = q.get("id")
    q["id"] = str(qid) if qid not in (None, "") else new_id()
    q["type"] = qtype
    q["options"] = _normalize_options(q.get("options"), where=where)
    q["correctAnswers"] = _normalize_answers(answers, is_choice=qtype.is_choice)
    return q


def normalize_quiz(raw: Any) -> QuizSet:
    """Build a canonical :class:`QuizSet` from loosely typed input.

    ``raw`` may be a quiz object or a bare list of questions. The input is
    never modified. Raises :class:`QuizValidationError` on anything that
    cannot be read as a quiz.
    """
    if isinstance(raw, list):
        log.debug("normalize_quiz: wrapping bare question list len=%s", len(raw))
        raw = {"questions": raw}
    if not isinstance(raw, dict):
        raise QuizValidationError("quiz must be a JSON object")

    doc = _drop_none_text(raw)
    created = doc.pop("created_at", None)
    if created is not None and "createdAt" not in doc:
        doc["createdAt"] = created
    if doc.get("createdAt") is None:
        doc.pop("createdAt", None)

    questions = doc.get("questions")
    if questions is None:
        questions = []
    if not isinstance(questions, list):
        raise QuizValidationError("questions must be a list")

    qid = doc.get("id")
    doc["id"] = str(qid) if qid not in (None, "") else new_id()
    doc["questions"] = [_normalize_question(q, index=i) for i, q in enumerate(questions)]

    try:
        return QuizSet.model_validate(doc)
    except ValidationError as e:
        err = e.errors()[0] if e.errors() else {}
        loc = ".".join(str(x) for x in err.get("loc", ()))
        msg = err.get("msg") or "invalid value"
        raise QuizValidationError(f"{loc}: {msg}" if loc else msg) from e


def _load_json(text: str) -> Any:
    s = (text or "").strip()
    if not s:
        raise QuizValidationError("document is empty")

    s = _FENCE_RE.sub("", s).strip()
    try:
        return json.loads(s)
    except ValueError:
        pass

    # AI tools like to wrap the JSON in prose; take the outermost block.
    m = _BLOCK_RE.search(s)
    if m:
        try:
            return json.loads(m.group(0))
        except ValueError:
            pass
    raise QuizValidationError("document is not valid JSON")


def parse_quiz_document(text: str) -> QuizSet:
    return normalize_quiz(_load_json(text))
