"""Schema-agnostic byte transforms behind every share key.

The fixed pipeline is UTF-8 -> zlib DEFLATE (RFC 1950 framing, the same
stream browsers emit for ``CompressionStream('deflate')``) -> standard
Base64 with padding, and the exact reverse on the way back.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import re
import zlib

from quizkey.core.config import settings

_B64_ALPHABET_RE = re.compile(r"[A-Za-z0-9+/]*")
_ASCII_WS_RE = re.compile(r"[\t\n\f\r ]+")
_SURROGATE_RE = re.compile("[\ud800-\udfff]")


class ByteCodecError(Exception):
    code = "codec_error"


class MalformedBase64Error(ByteCodecError):
    code = "malformed_base64"


class CorruptStreamError(ByteCodecError):
    code = "corrupt_stream"


def text_to_bytes(text: str) -> bytes:
    if _SURROGATE_RE.search(text):
        # Pair surrogates up, lone ones become U+FFFD (TextEncoder behaviour).
        text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
    return text.encode("utf-8")


def bytes_to_text(data: bytes) -> str:
    # Malformed sequences become U+FFFD, like a default TextDecoder.
    return bytes(data).decode("utf-8", errors="replace")


def bytes_to_base64(data: bytes) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def base64_to_bytes(text: str) -> bytes:
    """Decode Base64 with the forgiving rules of ``atob``.

    ASCII whitespace is ignored and padding is optional, but a stray
    character or an impossible length is rejected.
    """
    s = _ASCII_WS_RE.sub("", text or "")
    if len(s) % 4 == 0 and s.endswith("="):
        s = s[:-2] if s.endswith("==") else s[:-1]
    if len(s) % 4 == 1 or not _B64_ALPHABET_RE.fullmatch(s):
        raise MalformedBase64Error("invalid base64 input")
    try:
        return base64.b64decode(s + "=" * (-len(s) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedBase64Error(str(e)) from e


def _chunks(data: bytes, size: int):
    view = memoryview(data)
    for start in range(0, len(view), size):
        yield view[start : start + size]


async def compress(data: bytes, *, level: int | None = None, chunk_size: int | None = None) -> bytes:
    use_level = settings.share_key_compression_level if level is None else int(level)
    size = int(chunk_size or settings.share_key_chunk_size)

    c = zlib.compressobj(use_level)
    out = bytearray()
    for chunk in _chunks(data, size):
        out += c.compress(chunk)
        await asyncio.sleep(0)
    out += c.flush()
    return bytes(out)


async def decompress(data: bytes, *, chunk_size: int | None = None) -> bytes:
    if not data:
        return b""

    size = int(chunk_size or settings.share_key_chunk_size)
    d = zlib.decompressobj()
    out = bytearray()
    try:
        for chunk in _chunks(data, size):
            out += d.decompress(chunk)
            await asyncio.sleep(0)
        out += d.flush()
    except zlib.error as e:
        raise CorruptStreamError(str(e)) from e

    if not d.eof:
        raise CorruptStreamError("truncated deflate stream")
    if d.unused_data:
        raise CorruptStreamError("unexpected data after deflate stream")
    return bytes(out)


async def pack_text(text: str) -> str:
    return bytes_to_base64(await compress(text_to_bytes(text)))


async def unpack_text(b64: str) -> str:
    return bytes_to_text(await decompress(base64_to_bytes(b64)))
