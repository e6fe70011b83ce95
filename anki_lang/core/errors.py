# Path: anki_lang/core/errors.py
from typing import Any, Optional

__all__ = [
    "AnkiLangError",
    "ConfigError",
    "GenerationError",
    "CardValidationError",
    "LLMTransportError",
    "SubmissionError",
    "PersistenceError",
    "CancellationSignal",
]


class AnkiLangError(Exception):
    """Base class for every error raised by the pipeline."""
    pass


class ConfigError(AnkiLangError):
    """Fatal: the effective configuration could not be built."""
    pass


class CardValidationError(AnkiLangError):
    """The LLM answered, but the text does not describe a usable card."""
    pass


class LLMTransportError(AnkiLangError):
    """
    The LLM service could not be reached or refused the request.
    `transient` errors (timeouts, rate limits, 5xx) are worth retrying.
    """

    def __init__(self, message: str, transient: bool = True):
        super().__init__(message)
        self.transient = transient


class GenerationError(AnkiLangError):
    """A word could not be turned into a card within the retry budget."""

    def __init__(self, word: str, attempts: int, cause: Optional[Exception] = None):
        self.word = word
        self.attempts = attempts
        self.cause = cause
        reason = f": {cause}" if cause else ""
        super().__init__(f"failed to generate card for '{word}' after {attempts} attempt(s){reason}")


class SubmissionError(AnkiLangError):
    """A single note was not added. Duplicates are flagged, they are not failures."""

    def __init__(self, message: str, duplicate: bool = False):
        super().__init__(message)
        self.duplicate = duplicate


class PersistenceError(AnkiLangError):
    """Writing learned values back to the config file failed."""
    pass


class CancellationSignal(AnkiLangError):
    """
    The operator asked to stop. The current word is abandoned, unless its
    notes were already going out: then `submission` holds their outcomes.
    """

    def __init__(self, message: str = "cancelled", submission: Optional[Any] = None):
        super().__init__(message)
        self.submission = submission
