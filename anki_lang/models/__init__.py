# Path: anki_lang/models/__init__.py
from .card import Card, EnglishClozeCard, GenerationRequest, HindiCard, LanguageMode
from .config import AppConfig
from .note import AnkiNote
from .results import (
    TERMINAL_STATES,
    WordState,
    ApprovalDecision,
    DeckUpdates,
    NoteOutcome,
    RunSummary,
    SubmissionResult,
    SubmissionStatus,
    WordReport,
)

__all__ = [
    "AnkiNote",
    "AppConfig",
    "ApprovalDecision",
    "Card",
    "DeckUpdates",
    "EnglishClozeCard",
    "GenerationRequest",
    "HindiCard",
    "LanguageMode",
    "NoteOutcome",
    "RunSummary",
    "SubmissionResult",
    "SubmissionStatus",
    "WordReport",
    "WordState",
    "TERMINAL_STATES",
]
