from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import redis

from quizkey.core.config import settings
from quizkey.schemas.quiz import QuizSet
from quizkey.services import share_key
from quizkey.services.normalizer import QuizValidationError, normalize_quiz, parse_quiz_document
from quizkey.services.share_key import DecodeOutcome

log = logging.getLogger(__name__)


class LibraryError(Exception):
    code = "library_error"


class DuplicateQuizError(LibraryError):
    code = "duplicate_quiz"


class QuizNotFoundError(LibraryError):
    code = "not_found"


class InvalidShareKeyError(LibraryError):
    code = "invalid_key"

    def __init__(self, outcome: DecodeOutcome):
        self.outcome = outcome
        super().__init__(outcome.detail or "invalid share key")


@dataclass
class _Slot:
    # (stored document, parsed quiz or None when the entry can't be read)
    entries: list[tuple[Any, QuizSet | None]]
    unreadable: str | None = None

    def quizzes(self) -> list[QuizSet]:
        return [q for _, q in self.entries if q is not None]


class QuizLibrary:
    """A user's quiz collection kept as one JSON array in a redis key, newest first.

    Entries that no longer validate are skipped on read but written back
    untouched, and a slot that is not a JSON array is copied aside before the
    first write replaces it.
    """

    def __init__(self, r: redis.Redis, *, key: str | None = None):
        self._r = r
        self._key = key or settings.library_key

    @property
    def backup_key(self) -> str:
        return f"{self._key}:unreadable"

    def _parse_entry(self, doc: Any, *, index: int) -> QuizSet | None:
        try:
            return normalize_quiz(doc)
        except QuizValidationError as e:
            log.warning("library: skipping unreadable entry key=%s index=%s err=%s", self._key, index, e)
            return None

    def _load(self) -> _Slot:
        raw = self._r.get(self._key)
        if not raw:
            return _Slot(entries=[])
        try:
            docs = json.loads(raw)
        except ValueError:
            docs = None
        if not isinstance(docs, list):
            log.warning("library: ignoring unreadable slot key=%s", self._key)
            return _Slot(entries=[], unreadable=raw)
        return _Slot(entries=[(doc, self._parse_entry(doc, index=i)) for i, doc in enumerate(docs)])

    def _store(self, slot: _Slot) -> None:
        if slot.unreadable is not None:
            self._r.set(self.backup_key, slot.unreadable)
            log.warning("library: moved unreadable slot key=%s to %s", self._key, self.backup_key)
        docs = [q.to_document() if q is not None else doc for doc, q in slot.entries]
        self._r.set(self._key, json.dumps(docs, ensure_ascii=False))

    def list_quizzes(self) -> list[QuizSet]:
        return self._load().quizzes()

    def get(self, quiz_id: str) -> QuizSet:
        for q in self._load().quizzes():
            if q.id == quiz_id:
                return q
        raise QuizNotFoundError(f"quiz {quiz_id} not found")

    def save(self, quiz: QuizSet) -> QuizSet:
        slot = self._load()
        for i, (_, q) in enumerate(slot.entries):
            if q is not None and q.id == quiz.id:
                slot.entries[i] = (None, quiz)
                break
        else:
            slot.entries.insert(0, (None, quiz))
        self._store(slot)
        return quiz

    def delete(self, quiz_id: str) -> bool:
        slot = self._load()
        kept = [(doc, q) for doc, q in slot.entries if q is None or q.id != quiz_id]
        if len(kept) == len(slot.entries):
            return False
        slot.entries = kept
        self._store(slot)
        return True

    def add(self, quiz: QuizSet) -> QuizSet:
        slot = self._load()
        if any(q.id == quiz.id for q in slot.quizzes()):
            raise DuplicateQuizError(f"quiz {quiz.id} is already in the library")
        slot.entries.insert(0, (None, quiz))
        self._store(slot)
        log.info("library: added quiz id=%s title=%s", quiz.id, quiz.title)
        return quiz

    async def import_share_key(self, key: str) -> QuizSet:
        outcome = await share_key.decode_outcome(key)
        if not outcome.ok:
            raise InvalidShareKeyError(outcome)
        return self.add(outcome.quiz)

    def import_document(self, text: str) -> QuizSet:
        return self.add(parse_quiz_document(text))

    async def export_share_key(self, quiz_id: str) -> str:
        return await share_key.encode(self.get(quiz_id))
