"""Helpers that derive safe file names for generated assets."""

from __future__ import annotations

import hashlib
import re
import time
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile(r"[^a-zA-Z0-9_-]")
_UNDERSCORES = re.compile(r"_+")
MAX_FILENAME_LENGTH = 200
MAX_AUDIO_PREFIX_LENGTH = 100
AUDIO_DIGEST_LENGTH = 12


def _to_ascii(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def _unnamed() -> str:
    return f"unnamed_{int(time.time() * 1000)}"


def sanitize_filename(
    value: str | None, extension: str = "", *, default: str | None = None
) -> str:
    """Return ``value`` reduced to ``[a-z0-9_-]`` with ``extension`` appended.

    Values with nothing left after cleaning become ``default``, or an
    ``unnamed_<millis>`` stem when no default is given.
    """

    suffix = f".{extension}" if extension else ""
    raw = (value or "").strip()
    if not raw:
        return f"{default or _unnamed()}{suffix}"
    cleaned = _WHITESPACE.sub("_", _to_ascii(raw).lower())
    cleaned = _UNDERSCORES.sub("_", _INVALID.sub("", cleaned)).strip("_")
    if len(cleaned) > MAX_FILENAME_LENGTH:
        cleaned = cleaned[:MAX_FILENAME_LENGTH].rstrip("_")
    if not cleaned:
        cleaned = default or _unnamed()
    return f"{cleaned}{suffix}"


def unique_filename(value: str | None, extension: str) -> str:
    """Return a sanitized name for ``value`` suffixed with a millisecond stamp."""

    return f"{sanitize_filename(value)}_{int(time.time() * 1000)}.{extension}"


def simple_stem(value: str) -> str:
    """Replace every character outside ``[a-zA-Z0-9_-]`` with an underscore."""

    return _INVALID.sub("_", value)


def audio_file_stem(text: str) -> str:
    """Return a readable stem for spoken ``text``, unique per full text.

    The readable prefix is an ASCII rendering of the text (``audio`` for
    scripts without one); the suffix is a SHA-1 digest of the whole text.
    """

    prefix = _UNDERSCORES.sub("_", _INVALID.sub("_", _to_ascii(text).lower()))
    prefix = prefix[:MAX_AUDIO_PREFIX_LENGTH].strip("_")
    if len(prefix) < 3:
        prefix = "audio"
    digest = hashlib.sha1(text.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:AUDIO_DIGEST_LENGTH]}"


__all__ = ["audio_file_stem", "sanitize_filename", "simple_stem", "unique_filename"]
