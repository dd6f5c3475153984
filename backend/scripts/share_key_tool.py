from __future__ import annotations

import argparse
import asyncio
import json
import pathlib
import sys

# Ensure imports work when running from any CWD without an installed package
_HERE = pathlib.Path(__file__).resolve()
_BACKEND_ROOT = _HERE.parents[1]
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from quizkey.services import share_key
from quizkey.services.byte_codec import ByteCodecError, base64_to_bytes, decompress
from quizkey.services.normalizer import QuizValidationError, parse_quiz_document


def _read_arg(value: str) -> str:
    if value == "-":
        return sys.stdin.read()
    try:
        p = pathlib.Path(value)
        if p.is_file():
            return p.read_text(encoding="utf-8")
    except OSError:
        pass
    return value


def cmd_encode(args: argparse.Namespace) -> int:
    try:
        quiz = parse_quiz_document(_read_arg(args.source))
    except QuizValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    key = asyncio.run(share_key.encode(quiz))
    if not key:
        print("error: could not produce a share key", file=sys.stderr)
        return 1
    print(key)
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    outcome = asyncio.run(share_key.decode_outcome(_read_arg(args.key)))
    if not outcome.ok:
        print(f"error: {outcome.error}", file=sys.stderr)
        return 1
    print(json.dumps(outcome.quiz.to_document(), ensure_ascii=False, indent=2))
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    key = _read_arg(args.key).strip()
    outcome = asyncio.run(share_key.decode_outcome(key))

    info: dict[str, object] = {
        "version": outcome.version,
        "ok": outcome.ok,
        "error": outcome.error,
        "key_chars": len(key),
    }
    if outcome.version is not None:
        _, body = share_key.detect_format(key)
        try:
            raw = base64_to_bytes(body)
            info["compressed_bytes"] = len(raw)
            info["json_bytes"] = len(asyncio.run(decompress(raw)))
        except ByteCodecError:
            pass
    if outcome.ok:
        info["title"] = outcome.quiz.title
        info["questions"] = len(outcome.quiz.questions)
    print(json.dumps(info, ensure_ascii=False, indent=2))
    return 0 if outcome.ok else 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Encode, decode and inspect quiz share keys")
    sub = p.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Encode a quiz JSON document as a share key")
    enc.add_argument("source", help="Path to a JSON file, '-' for stdin")
    enc.set_defaults(func=cmd_encode)

    dec = sub.add_parser("decode", help="Decode a share key to quiz JSON")
    dec.add_argument("key", help="Share key, a file holding one, or '-' for stdin")
    dec.set_defaults(func=cmd_decode)

    ins = sub.add_parser("inspect", help="Show version and sizes of a share key")
    ins.add_argument("key", help="Share key, a file holding one, or '-' for stdin")
    ins.set_defaults(func=cmd_inspect)

    args = p.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
