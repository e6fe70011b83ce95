# Path: anki_lang/utils/cloze.py
import re
from typing import List, Optional, Tuple

__all__ = [
    "CLOZE_PATTERN",
    "find_cloze_markers",
    "count_cloze_markers",
    "normalize_cloze",
    "cloze_answer",
    "inject_hint",
    "answer_matches_word",
]

# {{c1::answer}} or {{c1::answer::hint}}; the number is any cloze ordinal
CLOZE_PATTERN = re.compile(r"\{\{[cC](\d+)::(.+?)(?:::(.*?))?\}\}", re.DOTALL)


def find_cloze_markers(text: str) -> List[re.Match]:
    return list(CLOZE_PATTERN.finditer(text))


def count_cloze_markers(text: str) -> int:
    return len(find_cloze_markers(text))


def cloze_answer(text: str) -> Optional[str]:
    """Answer of the first cloze marker, or None."""
    match = CLOZE_PATTERN.search(text)
    return match.group(2).strip() if match else None


def _split_marker(match: re.Match) -> Tuple[str, Optional[str]]:
    answer = match.group(2).strip()
    hint = match.group(3)
    if hint is not None:
        hint = hint.strip() or None
    return answer, hint


def normalize_cloze(text: str) -> str:
    """
    Rewrite the single cloze marker as c1, trimming the answer and hint.
    Text without exactly one marker is returned unchanged.
    """
    markers = find_cloze_markers(text)
    if len(markers) != 1:
        return text
    match = markers[0]
    answer, hint = _split_marker(match)
    marker = f"{{{{c1::{answer}::{hint}}}}}" if hint else f"{{{{c1::{answer}}}}}"
    return text[:match.start()] + marker + text[match.end():]


def inject_hint(text: str, hint: Optional[str]) -> str:
    """
    Add `hint` to the first cloze marker so Anki shows a hint link.
    A marker that already carries a hint is left alone.
    """
    if not hint or not hint.strip():
        return text
    match = CLOZE_PATTERN.search(text)
    if match is None:
        return text
    answer, existing = _split_marker(match)
    if existing:
        return text
    marker = f"{{{{c{match.group(1)}::{answer}::{hint.strip()}}}}}"
    return text[:match.start()] + marker + text[match.end():]


def answer_matches_word(answer: str, word: str) -> bool:
    """
    True if the hidden answer is the word, contains it, or shares its stem.
    The stem allows simple inflections: "study" matches "studies".
    """
    answer_cf = answer.casefold()
    word_cf = word.strip().casefold()
    if not word_cf:
        return False
    if word_cf in answer_cf:
        return True
    stem = word_cf[:max(3, len(word_cf) - 2)]
    return stem in answer_cf
