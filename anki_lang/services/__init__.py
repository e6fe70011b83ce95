# Path: anki_lang/services/__init__.py
from .card_generator import CardGenerator, ParsedCard, parse_card
from .persist_service import ConfigPersister, pending_deck_updates
from .pipeline_service import BatchPipeline, RunOptions, render_summary
from .review_service import ConsolePrompter, ReviewEvent, ReviewPrompter, ReviewWorkflow, WordStateMachine
from .submit_service import NoteSubmitter, build_notes

__all__ = [
    "BatchPipeline",
    "CardGenerator",
    "ConfigPersister",
    "ConsolePrompter",
    "NoteSubmitter",
    "ParsedCard",
    "ReviewEvent",
    "ReviewPrompter",
    "ReviewWorkflow",
    "RunOptions",
    "WordStateMachine",
    "build_notes",
    "parse_card",
    "pending_deck_updates",
    "render_summary",
]
