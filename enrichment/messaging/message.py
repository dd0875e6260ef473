"""Identity-only message exchanged between enrichment stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@dataclass(frozen=True)
class StreamMessage:
    """Reference to a word; consumers re-fetch the authoritative record."""

    word_id: int
    word: str
    source_language: str
    target_language: str

    def to_fields(self) -> Dict[str, str]:
        """Return the wire representation (all values are strings)."""

        return {
            "wordId": str(self.word_id),
            "word": self.word,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
        }

    @classmethod
    def from_fields(cls, fields: Mapping[Any, Any]) -> "StreamMessage":
        """Decode a stream entry, raising :class:`ValueError` when malformed."""

        decoded = {_text(key): _text(value) for key, value in fields.items()}
        missing = [
            name
            for name in ("wordId", "word", "sourceLanguage", "targetLanguage")
            if not decoded.get(name)
        ]
        if missing:
            raise ValueError(f"Stream entry is missing fields: {', '.join(missing)}")
        try:
            word_id = int(decoded["wordId"])
        except ValueError as exc:
            raise ValueError(f"Invalid wordId {decoded['wordId']!r}") from exc
        return cls(
            word_id=word_id,
            word=decoded["word"],
            source_language=decoded["sourceLanguage"],
            target_language=decoded["targetLanguage"],
        )

    @classmethod
    def for_record(cls, record: Any) -> "StreamMessage":
        """Build a message referencing ``record`` (any object with word fields)."""

        return cls(
            word_id=int(record.id),
            word=record.word,
            source_language=record.source_language,
            target_language=record.target_language,
        )


__all__ = ["StreamMessage"]
