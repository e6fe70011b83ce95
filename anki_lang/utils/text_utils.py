# Path: anki_lang/utils/text_utils.py
import re
from pathlib import Path
from typing import Iterable, List

_FILE_SEPARATORS = re.compile(r"[,;]")
_PROMPT_SEPARATORS = re.compile(r"[,;\r\n]")


def normalize_words(words: Iterable[str]) -> List[str]:
    """Trim every word and drop blanks. Order and duplicates are kept."""
    return [w.strip() for w in words if w and w.strip()]


def split_input(text: str) -> List[str]:
    """
    Split free-form operator input into words.
    Example: "नमस्ते, धन्यवाद\\nपानी" -> ["नमस्ते", "धन्यवाद", "पानी"]
    """
    return normalize_words(_PROMPT_SEPARATORS.split(text))


def read_words_from_file(path: Path) -> List[str]:
    """
    Read a word list: one or more words per line, separated by ',' or ';'.
    Blank lines and lines starting with '#' are ignored.
    """
    raw = Path(path).read_text(encoding="utf-8")
    words: List[str] = []
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        words.extend(normalize_words(_FILE_SEPARATORS.split(line)))
    return words


def sanitize_tag(name: str) -> str:
    """
    Anki tags cannot contain whitespace.
    Example: "Hindi vocab" -> "Hindi_vocab"
    """
    s = re.sub(r"[\s:;,]+", "_", name.strip())
    s = re.sub(r"_+", "_", s)
    return s.strip("_")


def clean_tags(tags: Iterable[str]) -> List[str]:
    """Sanitize, drop blanks and case-insensitive duplicates, keep order."""
    result: List[str] = []
    seen = set()
    for tag in tags:
        cleaned = sanitize_tag(tag)
        if not cleaned or cleaned.lower() in seen:
            continue
        seen.add(cleaned.lower())
        result.append(cleaned)
    return result
