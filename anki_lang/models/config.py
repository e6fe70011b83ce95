# Path: anki_lang/models/config.py
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from anki_lang.models.card import LanguageMode
from anki_lang.utils.text_utils import clean_tags

__all__ = ["AppConfig"]


class AppConfig(BaseModel):
    """
    Effective configuration for a single run.
    Built once by the resolver and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    llm_api_key: str = Field(..., repr=False, description="OpenAI-compatible API key")
    llm_model: str = Field(..., min_length=1, description="Chat model used for generation")
    llm_base_url: str = Field(..., description="Base URL of the chat completions API")
    backend_url: str = Field(..., description="AnkiConnect endpoint")
    hindi_deck_name: str = Field(..., min_length=1)
    english_deck_name: str = Field(..., min_length=1)
    temperature: float = Field(..., ge=0.0, le=2.0)
    extra_tags: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("llm_api_key")
    @classmethod
    def check_api_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("missing OpenAI API key; set OPENAI_API_KEY or add openai_api_key to the config file")
        return v.strip()

    @field_validator("llm_base_url", "backend_url")
    @classmethod
    def check_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"not an http(s) URL: {v!r}")
        return v

    @field_validator("extra_tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple, set)):
            raise ValueError("tags must be a list of strings or a comma separated string")
        return tuple(clean_tags(str(tag) for tag in v))

    def deck_for(self, mode: LanguageMode) -> str:
        if mode is LanguageMode.HINDI:
            return self.hindi_deck_name
        return self.english_deck_name

    def masked_api_key(self) -> str:
        key = self.llm_api_key
        if len(key) <= 8:
            return "****"
        return f"{key[:4]}...{key[-4:]}"
