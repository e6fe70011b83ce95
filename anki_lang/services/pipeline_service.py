# Path: anki_lang/services/pipeline_service.py
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

from rich.console import Console
from rich.table import Table

from anki_lang.core.errors import CancellationSignal, GenerationError
from anki_lang.models.card import LanguageMode
from anki_lang.models.config import AppConfig
from anki_lang.models.results import ApprovalDecision, RunSummary, WordReport, WordState
from anki_lang.services.card_generator import CardGenerator
from anki_lang.services.persist_service import ConfigPersister, pending_deck_updates
from anki_lang.services.review_service import ReviewEvent, ReviewWorkflow, WordStateMachine, render_card
from anki_lang.services.submit_service import NoteSubmitter
from anki_lang.utils.text_utils import normalize_words

__all__ = ["RunOptions", "BatchPipeline", "render_summary"]

logger = logging.getLogger(__name__)


def _never() -> bool:
    return False


@dataclass
class RunOptions:
    dry_run: bool = False
    auto_approve: bool = False
    should_cancel: Callable[[], bool] = field(default=_never)


class BatchPipeline:
    """
    Processes words strictly in input order:
    generate -> review (possibly regenerate) -> submit, then persists deck names once.
    """

    def __init__(
        self,
        config: AppConfig,
        generator: CardGenerator,
        review: ReviewWorkflow,
        submitter: Optional[NoteSubmitter],
        persister: Optional[ConfigPersister],
        file_contents: Optional[Mapping[str, Any]] = None,
        options: Optional[RunOptions] = None,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.generator = generator
        self.review = review
        self.submitter = submitter
        self.persister = persister
        self.file_contents = file_contents or {}
        self.options = options or RunOptions()
        self.console = console or Console()

    def _cancel_requested(self) -> bool:
        return bool(self.options.should_cancel())

    def _process_word(self, word: str, mode: LanguageMode, deck: str, report: WordReport) -> None:
        machine = WordStateMachine(word)
        try:
            while not machine.done:
                if self._cancel_requested():
                    raise CancellationSignal(f"cancelled while processing '{word}'")

                calls_before = self.generator.calls
                try:
                    card = self.generator.generate(word, mode, self.config)
                except GenerationError as e:
                    logger.error(str(e))
                    report.error = str(e)
                    machine.fire(ReviewEvent.GENERATION_FAILED)
                    break
                finally:
                    report.llm_calls += self.generator.calls - calls_before

                report.cards_generated += 1
                machine.fire(ReviewEvent.GENERATED)

                if self.options.dry_run:
                    self.console.print(render_card(card, deck, "DRY RUN"))
                    machine.fire(ReviewEvent.PREVIEW)
                    break

                machine.fire(ReviewEvent.PRESENTED)
                decision = self.review.review(card, deck, auto_approve=self.options.auto_approve)
                machine.decide(decision)

                if decision is ApprovalDecision.REGENERATE:
                    report.regenerations += 1
                    logger.info(f"Regenerating card for '{word}'")
                    continue

                if machine.state is WordState.APPROVED:
                    if self._cancel_requested():
                        raise CancellationSignal(f"cancelled before submitting '{word}'")
                    try:
                        report.submission = self.submitter.submit_card(card, deck, self.config.extra_tags)
                    except CancellationSignal as e:
                        if e.submission is None:
                            raise
                        # The card went out in full before the batch stops
                        report.submission = e.submission
                        machine.fire(ReviewEvent.SUBMITTED)
                        raise
                    machine.fire(ReviewEvent.SUBMITTED)
                elif machine.state in (WordState.REJECTED, WordState.SKIPPED):
                    logger.info(f"Skipping notes for '{word}' ({machine.state.value})")
        except (CancellationSignal, KeyboardInterrupt):
            if not machine.done:
                machine.fire(ReviewEvent.CANCEL)
            report.state = machine.state
            raise CancellationSignal(f"cancelled while processing '{word}'")
        report.state = machine.state

    def run(self, words: Iterable[str], mode: LanguageMode, deck: Optional[str] = None) -> RunSummary:
        deck = deck or self.config.deck_for(mode)
        summary = RunSummary()

        for word in normalize_words(words):
            if self._cancel_requested():
                summary.cancelled = True
                break
            report = WordReport(word=word)
            summary.words.append(report)
            try:
                self._process_word(word, mode, deck, report)
            except CancellationSignal as e:
                logger.warning(str(e))
                summary.cancelled = True
                break

        if self.options.dry_run or self.persister is None:
            return summary

        updates = pending_deck_updates(mode, deck, self.file_contents)
        summary.persisted = self.persister.persist(updates, self.options.dry_run, summary.any_accepted)
        summary.persistence_error = self.persister.last_error
        return summary


def render_summary(summary: RunSummary, dry_run: bool = False) -> Table:
    title = "Run summary (dry run)" if dry_run else "Run summary"
    table = Table(title=title, show_header=False)
    table.add_column(style="bold")
    table.add_column(justify="right")

    table.add_row("Words", str(len(summary.words)))
    table.add_row("Generated", str(summary.generated))
    if dry_run:
        table.add_row("Previewed", str(summary.previewed))
    else:
        table.add_row("Approved", str(summary.approved))
        table.add_row("Rejected", str(summary.rejected))
        table.add_row("Skipped", str(summary.skipped))
        table.add_row("Notes created", str(summary.notes_created))
        table.add_row("Duplicates", str(summary.notes_duplicate))
        table.add_row("Notes failed", str(summary.notes_failed))
    table.add_row("Failed words", str(summary.failed))
    if summary.cancelled:
        table.add_row("Cancelled", "yes")
    if summary.persisted:
        table.add_row("Deck saved to config", "yes")
    if summary.persistence_error:
        table.add_row("Config save error", summary.persistence_error)
    return table
