"""SQLAlchemy models; import all to register with Base.metadata."""

from .session import TranslationSessionModel
from .word import WordModel, WordVariantModel

__all__ = [
    "TranslationSessionModel",
    "WordModel",
    "WordVariantModel",
]
