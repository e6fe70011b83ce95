# Path: anki_lang/models/card.py
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["LanguageMode", "GenerationRequest", "HindiCard", "EnglishClozeCard", "Card"]


class LanguageMode(str, Enum):
    HINDI = "hindi"
    ENGLISH_CLOZE = "english"

    @property
    def label(self) -> str:
        return "Hindi" if self is LanguageMode.HINDI else "English cloze"


class GenerationRequest(BaseModel):
    """One request per word: everything the generator needs to call the LLM."""

    model_config = ConfigDict(frozen=True)

    mode: LanguageMode
    word: str = Field(..., min_length=1)
    temperature: float
    model: str


class HindiCard(BaseModel):
    """Hindi sentence using the word, with its English translation."""

    model_config = ConfigDict(frozen=True)

    word: str
    hindi_sentence: str = Field(..., min_length=1)
    english_translation: str = Field(..., min_length=1)

    @property
    def mode(self) -> LanguageMode:
        return LanguageMode.HINDI


class EnglishClozeCard(BaseModel):
    """English sentence with exactly one {{c1::...}} deletion around the word."""

    model_config = ConfigDict(frozen=True)

    word: str
    cloze_text: str = Field(..., min_length=1)
    explanation: str = Field(..., min_length=1)
    hint: Optional[str] = None

    @property
    def mode(self) -> LanguageMode:
        return LanguageMode.ENGLISH_CLOZE


Card = Union[HindiCard, EnglishClozeCard]
