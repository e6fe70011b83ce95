# Path: anki_lang/services/prompts.py
from typing import Dict, List

from anki_lang.models.card import GenerationRequest, LanguageMode

HINDI_SYSTEM = (
    "You are creating language learning flashcards. Generate a natural, short Hindi sentence "
    "that uses the target word exactly once and is easy for learners to understand. "
    "Provide a natural-sounding English translation."
)

HINDI_USER = (
    "Return STRICT JSON with keys word, hindi_sentence, english_sentence. Requirements:\n"
    "- sentence length 5-12 words\n"
    "- include the word exactly once, unmodified unless grammatical inflection is required\n"
    "- keep language learner-friendly\n"
    "- use Devanagari for Hindi.\n"
    "Target word: {word}"
)

ENGLISH_SYSTEM = (
    "You create English cloze deletions for learners who want to improve their English vocabulary."
)

ENGLISH_USER = (
    "Return STRICT JSON with keys word, cloze_sentence, translation, hint.\n"
    "Rules:\n"
    "- Use Anki cloze syntax {{{{c1::...}}}} exactly once around the target word or phrase.\n"
    "- Sentence length 8-16 words.\n"
    "- For the translation field, provide a concise English paraphrase or definition "
    "that clarifies the meaning of the sentence.\n"
    "- Optional hint should help recall the word and can be null.\n"
    "Target word: {word}"
)


def build_messages(request: GenerationRequest) -> List[Dict[str, str]]:
    if request.mode is LanguageMode.HINDI:
        system, user = HINDI_SYSTEM, HINDI_USER
    else:
        system, user = ENGLISH_SYSTEM, ENGLISH_USER
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user.format(word=request.word)},
    ]
