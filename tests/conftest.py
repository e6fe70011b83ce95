"""Shared fakes: scripted LLM, in-memory AnkiConnect, scripted reviewer."""

import json
from io import StringIO
from typing import Dict, List, Optional

import pytest
from rich.console import Console

from anki_lang.core.config_resolver import DEFAULTS, resolve_config
from anki_lang.core.config_store import ConfigFileStore
from anki_lang.models import AppConfig
from anki_lang.services.card_generator import CardGenerator
from anki_lang.services.persist_service import ConfigPersister
from anki_lang.services.pipeline_service import BatchPipeline, RunOptions
from anki_lang.services.review_service import ReviewPrompter, ReviewWorkflow
from anki_lang.services.submit_service import NoteSubmitter


def hindi_payload(
    word: str = "नमस्ते",
    hindi_sentence: str = "सुबह मैंने अपने दादाजी को नमस्ते कहा।",
    english_sentence: str = "In the morning I said namaste to my grandfather.",
) -> str:
    return json.dumps(
        {"word": word, "hindi_sentence": hindi_sentence, "english_sentence": english_sentence},
        ensure_ascii=False,
    )


def cloze_payload(
    word: str = "serendipity",
    cloze_sentence: str = "Meeting my best friend on that train was pure {{c1::serendipity}}.",
    translation: str = "A lucky accident that led to something good.",
    hint: Optional[str] = None,
) -> str:
    return json.dumps(
        {"word": word, "cloze_sentence": cloze_sentence, "translation": translation, "hint": hint}
    )


class FakeLLM:
    """Returns scripted responses in order; exceptions in the script are raised."""

    def __init__(self, responses=None, default: Optional[str] = None):
        self.responses = list(responses or [])
        self.default = default
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        if self.responses:
            item = self.responses.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError("unexpected LLM call")
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def words(self) -> List[str]:
        """Target word of each request, read back from the user message."""
        return [r.messages[-1]["content"].rsplit("Target word: ", 1)[-1] for r in self.requests]


class FakeAnki:
    """In-memory AnkiConnect. `errors` maps the n-th add_note call to an exception."""

    def __init__(
        self,
        errors: Optional[Dict[int, BaseException]] = None,
        deck_error: Optional[Exception] = None,
        decks: Optional[List[str]] = None,
    ):
        self.errors = errors or {}
        self.deck_error = deck_error
        self.decks = list(decks or ["Default"])
        self.notes: List[dict] = []
        self.created_decks: List[str] = []
        self._next_id = 1_700_000_000_000

    def create_deck(self, deck_name: str) -> int:
        self.created_decks.append(deck_name)
        if self.deck_error:
            raise self.deck_error
        return 1

    def add_note(self, note: dict) -> int:
        index = len(self.notes)
        self.notes.append(note)
        if index in self.errors:
            raise self.errors[index]
        self._next_id += 1
        return self._next_id

    def ping(self) -> str:
        return "AnkiConnect v6"

    def get_deck_names(self) -> List[str]:
        return list(self.decks)

    @property
    def calls(self) -> int:
        return len(self.notes) + len(self.created_decks)


class ScriptedPrompter(ReviewPrompter):
    def __init__(self, decisions):
        self.decisions = list(decisions)
        self.seen = []

    def ask(self, card, deck):
        self.seen.append(card)
        if not self.decisions:
            raise AssertionError("unexpected review prompt")
        item = self.decisions.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def config() -> AppConfig:
    return resolve_config(cli_args={}, env={"OPENAI_API_KEY": "test-key"}, file_contents={}, defaults=DEFAULTS)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.toml"


def make_pipeline(
    config: AppConfig,
    llm: FakeLLM,
    anki: Optional[FakeAnki] = None,
    prompter: Optional[ReviewPrompter] = None,
    store: Optional[ConfigFileStore] = None,
    file_contents: Optional[dict] = None,
    options: Optional[RunOptions] = None,
    persister=None,
    max_retries: int = 2,
) -> BatchPipeline:
    options = options or RunOptions()
    if persister is None and store is not None:
        persister = ConfigPersister(store)
    return BatchPipeline(
        config=config,
        generator=CardGenerator(llm, max_retries=max_retries, retry_delay=0),
        review=ReviewWorkflow(prompter or ScriptedPrompter([])),
        submitter=NoteSubmitter(anki) if anki is not None else None,
        persister=persister,
        file_contents=file_contents,
        options=options,
        console=Console(file=StringIO()),
    )
