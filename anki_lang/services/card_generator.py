# Path: anki_lang/services/card_generator.py
"""Turn a word into a validated card by asking the LLM.

Text-shape validation lives in `parse_card`, a pure function returning a
tagged result. `CardGenerator` only adds the request building and the retry
loop around it.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from anki_lang.adapters.openai_client import CompletionRequest
from anki_lang.core.errors import CardValidationError, ConfigError, GenerationError, LLMTransportError
from anki_lang.models.card import Card, EnglishClozeCard, GenerationRequest, HindiCard, LanguageMode
from anki_lang.models.config import AppConfig
from anki_lang.services.prompts import build_messages
from anki_lang.utils.cloze import (
    answer_matches_word,
    cloze_answer,
    count_cloze_markers,
    inject_hint,
    normalize_cloze,
)

__all__ = ["LLMClient", "ParsedCard", "parse_card", "CardGenerator", "DEFAULT_MAX_RETRIES"]

logger = logging.getLogger(__name__)

# Extra attempts after the first call: at most 3 LLM calls per generation
DEFAULT_MAX_RETRIES = 2


class LLMClient(Protocol):
    def complete(self, request: CompletionRequest) -> str:
        ...


@dataclass(frozen=True)
class ParsedCard:
    """Either a card or the reason the text was not one."""

    card: Optional[Card] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.card is not None


def _strip_code_fence(raw: str) -> str:
    content = raw.strip()
    if content.startswith("```"):
        lines = content.splitlines()[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        content = "\n".join(lines).strip()
    return content


def _text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def _parse_hindi(payload: Dict[str, Any], word: str) -> ParsedCard:
    hindi = _text(payload, "hindi_sentence")
    english = _text(payload, "english_sentence")
    if not hindi:
        return ParsedCard(error="missing hindi_sentence")
    if not english:
        return ParsedCard(error="missing english_sentence")
    if word not in hindi:
        logger.warning(f"Hindi sentence may not contain original word: {word}")
    return ParsedCard(card=HindiCard(word=word, hindi_sentence=hindi, english_translation=english))


def _parse_english(payload: Dict[str, Any], word: str) -> ParsedCard:
    sentence = _text(payload, "cloze_sentence")
    explanation = _text(payload, "translation")
    hint = _text(payload, "hint") or None
    if not sentence:
        return ParsedCard(error="missing cloze_sentence")
    if not explanation:
        return ParsedCard(error="missing translation")

    markers = count_cloze_markers(sentence)
    if markers != 1:
        return ParsedCard(error=f"expected exactly one cloze marker, found {markers}")

    cloze_text = normalize_cloze(sentence)
    answer = cloze_answer(cloze_text) or ""
    if not answer_matches_word(answer, word):
        logger.warning(f"Cloze marker hides '{answer}', which may not be a form of: {word}")

    cloze_text = inject_hint(cloze_text, hint)
    return ParsedCard(card=EnglishClozeCard(word=word, cloze_text=cloze_text, explanation=explanation, hint=hint))


def parse_card(raw: str, mode: LanguageMode, word: str) -> ParsedCard:
    """
    Validate free-form LLM output against the card shape for `mode`.
    Never raises for bad input; the error is carried in the result.
    """
    content = _strip_code_fence(raw or "")
    if not content:
        return ParsedCard(error="empty response")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        return ParsedCard(error=f"invalid JSON: {e}")
    if not isinstance(payload, dict):
        return ParsedCard(error="expected a JSON object")

    if mode is LanguageMode.HINDI:
        return _parse_hindi(payload, word.strip())
    return _parse_english(payload, word.strip())


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, CardValidationError):
        return True
    return isinstance(exc, LLMTransportError) and exc.transient


class CardGenerator:
    """
    Generates one card per call, retrying malformed output and transient
    transport failures with the same inputs.
    """

    def __init__(self, llm: LLMClient, max_retries: int = DEFAULT_MAX_RETRIES, retry_delay: float = 1.0):
        self.llm = llm
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.calls = 0

    def build_request(self, word: str, mode: LanguageMode, config: AppConfig) -> GenerationRequest:
        return GenerationRequest(mode=mode, word=word.strip(), temperature=config.temperature, model=config.llm_model)

    def _attempt(self, request: GenerationRequest) -> Card:
        completion = CompletionRequest(
            model=request.model,
            messages=build_messages(request),
            temperature=request.temperature,
        )
        self.calls += 1
        raw = self.llm.complete(completion)
        parsed = parse_card(raw, request.mode, request.word)
        if not parsed.ok:
            logger.warning(f"Malformed {request.mode.label} card for '{request.word}': {parsed.error}")
            raise CardValidationError(parsed.error)
        return parsed.card

    def generate(self, word: str, mode: LanguageMode, config: AppConfig) -> Card:
        """
        Returns a well-formed card for `word`.

        Raises:
            ConfigError: no API key, nothing can be generated in this run.
            GenerationError: retries exhausted or a non-retryable LLM failure.
        """
        if not config.llm_api_key:
            raise ConfigError("OpenAI API key is required before generating cards")

        request = self.build_request(word, mode, config)
        logger.info(f"Generating {mode.label} card for word: {request.word}")

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_delay, max=10),
            retry=retry_if_exception(_is_retryable),
            before_sleep=lambda state: logger.info(
                f"Retrying '{request.word}' (attempt {state.attempt_number + 1}/{self.max_retries + 1})"
            ),
        )

        attempts = 0
        try:
            for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    return self._attempt(request)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise GenerationError(request.word, attempts, cause) from cause
        except LLMTransportError as e:
            raise GenerationError(request.word, attempts, e) from e

        # Unreachable: Retrying either returns, raises RetryError or re-raises
        raise GenerationError(request.word, attempts)
