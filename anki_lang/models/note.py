# Path: anki_lang/models/note.py
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["AnkiNote"]


class AnkiNote(BaseModel):
    """
    A single note ready to be sent to AnkiConnect.
    Immutable once built; it lives only until its submission attempt is done.
    """

    model_config = ConfigDict(frozen=True)

    deck: str = Field(
        ...,
        min_length=1,
        description="Target Deck name in Anki (e.g. 'Hindi Sentence Practice')"
    )

    model_name: str = Field(
        ...,
        min_length=1,
        description="Anki Note Type, 'Basic' or 'Cloze'"
    )

    # Fields are dynamic: {"Front": "...", "Back": "..."} or {"Text": "...", "Back Extra": "..."}
    fields: Dict[str, str] = Field(
        ...,
        description="Key-value pairs matching the Note Type fields"
    )

    tags: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Tags attached to the note"
    )

    @field_validator('fields')
    @classmethod
    def check_fields_not_empty(cls, v: Dict[str, str]) -> Dict[str, str]:
        if not v:
            raise ValueError('Fields dictionary cannot be empty')
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Payload for the AnkiConnect `addNote` action."""
        return {
            "deckName": self.deck,
            "modelName": self.model_name,
            "fields": dict(self.fields),
            "tags": list(self.tags),
            "options": {
                "allowDuplicate": False,
                "duplicateScope": "deck",
            },
        }
