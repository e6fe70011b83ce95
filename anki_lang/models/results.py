# Path: anki_lang/models/results.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from anki_lang.models.note import AnkiNote

__all__ = [
    "WordState",
    "TERMINAL_STATES",
    "ApprovalDecision",
    "SubmissionStatus",
    "NoteOutcome",
    "SubmissionResult",
    "DeckUpdates",
    "WordReport",
    "RunSummary",
]


class WordState(str, Enum):
    PENDING = "pending"
    GENERATED = "generated"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    SUBMITTED = "submitted"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    FAILED = "failed"
    PREVIEWED = "previewed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    WordState.SUBMITTED,
    WordState.REJECTED,
    WordState.SKIPPED,
    WordState.FAILED,
    WordState.PREVIEWED,
    WordState.CANCELLED,
})


class ApprovalDecision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    # Not final: the word goes back to the generator
    REGENERATE = "regenerate"


class SubmissionStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class NoteOutcome:
    note: AnkiNote
    status: SubmissionStatus
    note_id: Optional[int] = None
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        """The backend took the note or already had it."""
        return self.status in (SubmissionStatus.CREATED, SubmissionStatus.DUPLICATE)


@dataclass
class SubmissionResult:
    outcomes: List[NoteOutcome] = field(default_factory=list)

    def count(self, status: SubmissionStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def created(self) -> int:
        return self.count(SubmissionStatus.CREATED)

    @property
    def duplicates(self) -> int:
        return self.count(SubmissionStatus.DUPLICATE)

    @property
    def failed(self) -> int:
        return self.count(SubmissionStatus.FAILED)

    @property
    def any_accepted(self) -> bool:
        return any(o.accepted for o in self.outcomes)


@dataclass(frozen=True)
class DeckUpdates:
    """Deck names used during the run that differ from the config file."""

    hindi_deck: Optional[str] = None
    english_deck: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        values = {"hindi_deck": self.hindi_deck, "english_deck": self.english_deck}
        return {k: v for k, v in values.items() if v is not None}

    def __bool__(self) -> bool:
        return bool(self.as_dict())


@dataclass
class WordReport:
    word: str
    state: WordState = WordState.PENDING
    llm_calls: int = 0
    cards_generated: int = 0
    regenerations: int = 0
    error: Optional[str] = None
    submission: Optional[SubmissionResult] = None


@dataclass
class RunSummary:
    words: List[WordReport] = field(default_factory=list)
    cancelled: bool = False
    persisted: bool = False
    persistence_error: Optional[str] = None

    def _count_state(self, state: WordState) -> int:
        return sum(1 for w in self.words if w.state is state)

    @property
    def generated(self) -> int:
        return sum(1 for w in self.words if w.cards_generated > 0)

    @property
    def approved(self) -> int:
        return self._count_state(WordState.SUBMITTED)

    @property
    def rejected(self) -> int:
        return self._count_state(WordState.REJECTED)

    @property
    def skipped(self) -> int:
        return self._count_state(WordState.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count_state(WordState.FAILED)

    @property
    def previewed(self) -> int:
        return self._count_state(WordState.PREVIEWED)

    def _submissions(self) -> List[SubmissionResult]:
        return [w.submission for w in self.words if w.submission is not None]

    @property
    def notes_created(self) -> int:
        return sum(s.created for s in self._submissions())

    @property
    def notes_duplicate(self) -> int:
        return sum(s.duplicates for s in self._submissions())

    @property
    def notes_failed(self) -> int:
        return sum(s.failed for s in self._submissions())

    @property
    def any_accepted(self) -> bool:
        return any(s.any_accepted for s in self._submissions())
