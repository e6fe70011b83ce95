# Path: anki_lang/services/review_service.py
"""Operator review of generated cards.

The per-word lifecycle is an explicit state machine fed by discrete events,
so the whole approve / reject / regenerate loop can be driven without a
terminal. `ConsolePrompter` is the interactive event source.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from anki_lang.core.errors import CancellationSignal
from anki_lang.models.card import Card, HindiCard
from anki_lang.models.results import ApprovalDecision, WordState

__all__ = [
    "ReviewEvent",
    "InvalidTransition",
    "WordStateMachine",
    "ReviewPrompter",
    "ConsolePrompter",
    "ReviewWorkflow",
    "render_card",
]

logger = logging.getLogger(__name__)


class ReviewEvent(str, Enum):
    GENERATED = "generated"
    GENERATION_FAILED = "generation_failed"
    PRESENTED = "presented"
    APPROVE = "approve"
    REJECT = "reject"
    REGENERATE = "regenerate"
    SKIP = "skip"
    PREVIEW = "preview"
    SUBMITTED = "submitted"
    CANCEL = "cancel"


class InvalidTransition(Exception):
    pass


_TRANSITIONS: Dict[Tuple[WordState, ReviewEvent], WordState] = {
    (WordState.PENDING, ReviewEvent.GENERATED): WordState.GENERATED,
    (WordState.PENDING, ReviewEvent.GENERATION_FAILED): WordState.FAILED,
    (WordState.GENERATED, ReviewEvent.PRESENTED): WordState.UNDER_REVIEW,
    (WordState.GENERATED, ReviewEvent.PREVIEW): WordState.PREVIEWED,
    (WordState.UNDER_REVIEW, ReviewEvent.APPROVE): WordState.APPROVED,
    (WordState.UNDER_REVIEW, ReviewEvent.REJECT): WordState.REJECTED,
    (WordState.UNDER_REVIEW, ReviewEvent.SKIP): WordState.SKIPPED,
    (WordState.UNDER_REVIEW, ReviewEvent.REGENERATE): WordState.PENDING,
    (WordState.APPROVED, ReviewEvent.SUBMITTED): WordState.SUBMITTED,
}

# Cancelling is allowed from any state that is not terminal yet
_CANCELLABLE = (
    WordState.PENDING,
    WordState.GENERATED,
    WordState.UNDER_REVIEW,
    WordState.APPROVED,
)

_DECISION_EVENTS = {
    ApprovalDecision.APPROVED: ReviewEvent.APPROVE,
    ApprovalDecision.REJECTED: ReviewEvent.REJECT,
    ApprovalDecision.SKIPPED: ReviewEvent.SKIP,
    ApprovalDecision.REGENERATE: ReviewEvent.REGENERATE,
}


class WordStateMachine:
    """Lifecycle of one word: Pending -> Generated -> UnderReview -> Approved -> Submitted."""

    def __init__(self, word: str):
        self.word = word
        self.state = WordState.PENDING
        self.history = [WordState.PENDING]

    @property
    def done(self) -> bool:
        return self.state.terminal

    def fire(self, event: ReviewEvent) -> WordState:
        if event is ReviewEvent.CANCEL and self.state in _CANCELLABLE:
            new_state = WordState.CANCELLED
        else:
            new_state = _TRANSITIONS.get((self.state, event))
        if new_state is None:
            raise InvalidTransition(f"'{self.word}': cannot {event.value} while {self.state.value}")
        logger.debug(f"'{self.word}': {self.state.value} --{event.value}--> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)
        return new_state

    def decide(self, decision: ApprovalDecision) -> WordState:
        return self.fire(_DECISION_EVENTS[decision])


def render_card(card: Card, deck: str, label: str) -> Panel:
    """Human-readable preview of a card."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    if isinstance(card, HindiCard):
        table.add_row("Hindi", card.hindi_sentence)
        table.add_row("English", card.english_translation)
    else:
        table.add_row("Cloze", card.cloze_text)
        table.add_row("Explanation", card.explanation)
        if card.hint:
            table.add_row("Hint", card.hint)
    return Panel(table, title=f"[{label}][{deck}] {card.word}", title_align="left")


class ReviewPrompter:
    """Source of operator decisions. Subclasses decide how to ask."""

    def ask(self, card: Card, deck: str) -> ApprovalDecision:
        raise NotImplementedError


_CHOICES = {
    "a": ApprovalDecision.APPROVED,
    "approve": ApprovalDecision.APPROVED,
    "y": ApprovalDecision.APPROVED,
    "r": ApprovalDecision.REJECTED,
    "reject": ApprovalDecision.REJECTED,
    "n": ApprovalDecision.REJECTED,
    "g": ApprovalDecision.REGENERATE,
    "regenerate": ApprovalDecision.REGENERATE,
    "s": ApprovalDecision.SKIPPED,
    "skip": ApprovalDecision.SKIPPED,
}
_QUIT = ("q", "quit")


class ConsolePrompter(ReviewPrompter):
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def ask(self, card: Card, deck: str) -> ApprovalDecision:
        self.console.print(render_card(card, deck, "REVIEW"))
        while True:
            try:
                answer = typer.prompt(
                    "Send to Anki? [a]pprove / [r]eject / [g] regenerate / [s]kip / [q]uit",
                    default="a",
                )
            except (typer.Abort, KeyboardInterrupt, EOFError):
                raise CancellationSignal("review interrupted")

            answer = answer.strip().lower()
            if answer in _QUIT:
                raise CancellationSignal("operator quit")
            if answer in _CHOICES:
                return _CHOICES[answer]
            self.console.print(f"[yellow]Unknown choice '{answer}'[/yellow]")


class ReviewWorkflow:
    """Gate between generation and submission."""

    def __init__(self, prompter: Optional[ReviewPrompter] = None):
        self.prompter = prompter or ConsolePrompter()

    def review(self, card: Card, deck: str, auto_approve: bool = False) -> ApprovalDecision:
        """
        Approve immediately when `auto_approve` is set, otherwise ask the operator.
        Raises CancellationSignal if the operator stops the run.
        """
        if auto_approve:
            logger.debug(f"Auto-approved card for '{card.word}'")
            return ApprovalDecision.APPROVED

        decision = self.prompter.ask(card, deck)
        logger.info(f"Review decision for '{card.word}': {decision.value}")
        return decision
