"""Image Encoding — uploaded bytes <-> data URLs, one independent task per file.

Invariants:
    - encode_uploads yields in COMPLETION order, not input order
    - Each file is encoded in its own worker thread; one failure does not stop the others
    - decode_data_url(encode_data_url(b, t)) returns (b, t)

Design Decisions:
    - asyncio.as_completed over gather: each finished image is handed to the caller
      (and persisted) as soon as it is ready, like a per-file completion callback
    - Base64 data URLs: archive rows stay self-contained JSON text
"""

import asyncio
import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from typing import AsyncIterator

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"


@dataclass(frozen=True)
class PendingUpload:
    """A file received from the client, not yet encoded."""
    filename: str
    content_type: str | None
    content: bytes


@dataclass(frozen=True)
class EncodedUpload:
    filename: str
    data_url: str


def guess_mime(filename: str, content_type: str | None) -> str:
    if content_type and "/" in content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME


def encode_data_url(content: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


def decode_data_url(url: str) -> tuple[bytes, str]:
    """Split a base64 data URL into (bytes, mime). Raises ValueError if malformed."""
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("not a base64 data URL")
    mime = header[len("data:"):-len(";base64")] or DEFAULT_MIME
    try:
        return base64.b64decode(payload, validate=True), mime
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


def _encode(upload: PendingUpload) -> EncodedUpload:
    mime = guess_mime(upload.filename, upload.content_type)
    return EncodedUpload(upload.filename, encode_data_url(upload.content, mime))


async def encode_uploads(
    uploads: list[PendingUpload],
) -> AsyncIterator[EncodedUpload]:
    """Encode every upload concurrently, yielding each as it finishes."""
    tasks = [asyncio.create_task(asyncio.to_thread(_encode, u)) for u in uploads]
    for next_done in asyncio.as_completed(tasks):
        try:
            yield await next_done
        except (ValueError, UnicodeError) as e:
            logger.warning(f"Skipping upload that failed to encode: {e}")
