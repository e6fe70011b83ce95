# Path: anki_lang/services/submit_service.py
import logging
from typing import Iterable, List, Optional, Set

from anki_lang.adapters.anki_connect import AnkiConnectAdapter, AnkiConnectError
from anki_lang.core.errors import CancellationSignal, SubmissionError
from anki_lang.models.card import Card, EnglishClozeCard, HindiCard
from anki_lang.models.note import AnkiNote
from anki_lang.models.results import NoteOutcome, SubmissionResult, SubmissionStatus
from anki_lang.utils.text_utils import clean_tags

__all__ = ["GENERATED_TAG", "build_tags", "build_notes", "NoteSubmitter"]

logger = logging.getLogger(__name__)

GENERATED_TAG = "generated"
BASIC_MODEL = "Basic"
CLOZE_MODEL = "Cloze"


def build_tags(extra_tags: Iterable[str]) -> List[str]:
    """extra_tags plus 'generated', without case-insensitive duplicates."""
    return clean_tags([*extra_tags, GENERATED_TAG])


def _hindi_notes(card: HindiCard, deck: str, tags: List[str]) -> List[AnkiNote]:
    forward = {"Front": card.hindi_sentence, "Back": card.english_translation}
    reverse = {"Front": card.english_translation, "Back": card.hindi_sentence}
    return [
        AnkiNote(deck=deck, model_name=BASIC_MODEL, fields=forward, tags=tuple(tags)),
        AnkiNote(deck=deck, model_name=BASIC_MODEL, fields=reverse, tags=tuple(tags)),
    ]


def _english_note(card: EnglishClozeCard, deck: str, tags: List[str]) -> AnkiNote:
    back_extra = f"Explanation: {card.explanation.strip()}"
    if card.hint and card.hint.strip():
        back_extra += f"\nHint: {card.hint.strip()}"
    fields = {"Text": card.cloze_text, "Back Extra": back_extra}
    return AnkiNote(deck=deck, model_name=CLOZE_MODEL, fields=fields, tags=tuple(tags))


def build_notes(card: Card, deck: str, extra_tags: Iterable[str]) -> List[AnkiNote]:
    """
    Hindi cards give two notes (Hindi -> English and English -> Hindi),
    English cloze cards give one.
    """
    tags = build_tags(extra_tags)
    if isinstance(card, HindiCard):
        return _hindi_notes(card, deck, tags)
    return [_english_note(card, deck, tags)]


def _is_duplicate(message: str) -> bool:
    return "duplicate" in message.lower()


class NoteSubmitter:
    """
    Sends notes to AnkiConnect one at a time. A failing note never stops
    its siblings; every note gets its own outcome.
    """

    def __init__(self, adapter: AnkiConnectAdapter):
        self.adapter = adapter
        self._ready_decks: Set[str] = set()

    def ensure_deck(self, deck: str) -> bool:
        """Create the deck once per run. Failures are logged, not raised."""
        if deck in self._ready_decks:
            return True
        try:
            self.adapter.create_deck(deck)
        except AnkiConnectError as e:
            if "exists" not in str(e).lower():
                logger.warning(f"Could not create deck '{deck}': {e}")
                return False
        except ConnectionError as e:
            logger.warning(f"Could not create deck '{deck}': {e}")
            return False
        logger.debug(f"Deck '{deck}' is ready")
        self._ready_decks.add(deck)
        return True

    def _send(self, note: AnkiNote) -> int:
        """Send one note, translating adapter failures into SubmissionError."""
        try:
            return self.adapter.add_note(note.to_payload())
        except AnkiConnectError as e:
            raise SubmissionError(str(e), duplicate=_is_duplicate(str(e))) from e
        except ConnectionError as e:
            raise SubmissionError(f"unreachable: {e}") from e

    def submit_note(self, note: AnkiNote) -> NoteOutcome:
        try:
            note_id = self._send(note)
        except SubmissionError as e:
            if e.duplicate:
                logger.warning(f"Anki reported a duplicate in deck '{note.deck}'")
                return NoteOutcome(note=note, status=SubmissionStatus.DUPLICATE, reason=str(e))
            logger.error(f"Note for deck '{note.deck}' failed: {e}")
            return NoteOutcome(note=note, status=SubmissionStatus.FAILED, reason=str(e))

        logger.info(f"Added note {note_id} to deck '{note.deck}'")
        return NoteOutcome(note=note, status=SubmissionStatus.CREATED, note_id=note_id)

    def _resend_after_interrupt(self, note: AnkiNote) -> NoteOutcome:
        # The interrupted call may or may not have reached Anki; a second
        # copy is refused as a duplicate in the same deck.
        try:
            return self.submit_note(note)
        except KeyboardInterrupt:
            logger.error(f"Note for deck '{note.deck}' interrupted twice, giving up on it")
            return NoteOutcome(note=note, status=SubmissionStatus.FAILED, reason="interrupted")

    def submit(self, notes: List[AnkiNote]) -> SubmissionResult:
        """
        Send every note of one card. An interrupt once notes are going out
        does not leave the card half sent: the remaining notes are still
        sent, then CancellationSignal carries the finished result.
        """
        result = SubmissionResult()
        for deck in dict.fromkeys(n.deck for n in notes):
            self.ensure_deck(deck)

        interrupted = False
        for note in notes:
            try:
                outcome = self.submit_note(note)
            except KeyboardInterrupt:
                interrupted = True
                logger.warning(f"Interrupted while adding a note to '{note.deck}', finishing this card first")
                outcome = self._resend_after_interrupt(note)
            result.outcomes.append(outcome)

        if interrupted:
            raise CancellationSignal("interrupted while submitting notes", submission=result)
        return result

    def submit_card(self, card: Card, deck: str, extra_tags: Optional[Iterable[str]] = None) -> SubmissionResult:
        notes = build_notes(card, deck, extra_tags or ())
        result = self.submit(notes)
        logger.info(
            f"'{card.word}': {result.created} created, {result.duplicates} duplicate, {result.failed} failed"
        )
        return result
