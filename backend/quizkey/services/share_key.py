"""Share keys: the versioned envelope around a quiz.

Two wire formats exist side by side::

    V2 (current)  "v2." + b64(zlib(utf8(json(minified quiz))))
    V1 (legacy)          b64(zlib(utf8(json(quiz with full names))))

Only V2 is ever produced. Decoding detects the format from the prefix and
dispatches to the matching handler. ``.`` is not a Base64 character, so a
legacy key can never be mistaken for a prefixed one.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType

from quizkey.schemas.quiz import QuizSet
from quizkey.services.byte_codec import ByteCodecError, pack_text, unpack_text
from quizkey.services.minifier import minify, unminify
from quizkey.services.normalizer import normalize_quiz

log = logging.getLogger(__name__)

_PREFIX_RE = re.compile(r"^v(\d+)\.")


class UnsupportedVersionError(Exception):
    code = "unsupported_version"


@dataclass(frozen=True)
class DecodeOutcome:
    quiz: QuizSet | None = None
    version: int | None = None
    error: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.quiz is not None


class ShareKeyFormat:
    version: int = 0
    prefix: str = ""

    async def dump(self, quiz: QuizSet) -> str:
        raise UnsupportedVersionError(f"share key v{self.version} is decode-only")

    async def load(self, body: str) -> QuizSet:
        raise NotImplementedError


class V1Format(ShareKeyFormat):
    version = 1
    prefix = ""

    async def load(self, body: str) -> QuizSet:
        # Old exports kept option records exactly as authored (numeric ids
        # and all), so they go through the same tolerant path as imports.
        return normalize_quiz(json.loads(await unpack_text(body)))


class V2Format(ShareKeyFormat):
    version = 2
    prefix = "v2."

    async def dump(self, quiz: QuizSet) -> str:
        text = json.dumps(minify(quiz), ensure_ascii=False, separators=(",", ":"))
        return self.prefix + await pack_text(text)

    async def load(self, body: str) -> QuizSet:
        return unminify(json.loads(await unpack_text(body)))


LEGACY_FORMAT = V1Format()
CURRENT_FORMAT = V2Format()
FORMATS: tuple[ShareKeyFormat, ...] = (LEGACY_FORMAT, CURRENT_FORMAT)

_PREFIXED = MappingProxyType({f.prefix: f for f in FORMATS if f.prefix})


def detect_format(key: str) -> tuple[ShareKeyFormat, str]:
    """Return the handler for ``key`` and the key body without its prefix."""
    m = _PREFIX_RE.match(key)
    if not m:
        return LEGACY_FORMAT, key
    # Exact prefix match: "v02." is not "v2."
    fmt = _PREFIXED.get(m.group(0))
    if fmt is None:
        raise UnsupportedVersionError(f"unsupported share key version v{m.group(1)}")
    return fmt, key[m.end() :]


async def encode(quiz: QuizSet) -> str:
    """Encode ``quiz`` as a V2 share key; ``""`` if that is not possible."""
    try:
        return await CURRENT_FORMAT.dump(quiz)
    except Exception:
        log.exception("share_key: encode failed quiz_id=%s", getattr(quiz, "id", None))
        return ""


def _failed(error: str, detail: str, *, version: int | None = None) -> DecodeOutcome:
    log.warning("share_key: decode failed error=%s version=%s", error, version)
    return DecodeOutcome(version=version, error=error, detail=detail)


async def decode_outcome(key: str) -> DecodeOutcome:
    s = key.strip() if isinstance(key, str) else ""
    if not s:
        return _failed("empty_key", "share key is empty")

    try:
        fmt, body = detect_format(s)
    except UnsupportedVersionError as e:
        return _failed(e.code, str(e))

    try:
        quiz = await fmt.load(body)
    except ByteCodecError as e:
        return _failed(e.code, str(e), version=fmt.version)
    except json.JSONDecodeError as e:
        return _failed("invalid_json", str(e), version=fmt.version)
    except ValueError as e:
        return _failed("invalid_payload", str(e), version=fmt.version)
    except Exception as e:
        log.exception("share_key: unexpected decode error")
        return _failed("decode_failed", f"{type(e).__name__}: {e}", version=fmt.version)

    return DecodeOutcome(quiz=quiz, version=fmt.version)


async def decode(key: str) -> QuizSet | None:
    """Decode a V1 or V2 share key; ``None`` on any failure."""
    return (await decode_outcome(key)).quiz
