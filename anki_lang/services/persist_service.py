# Path: anki_lang/services/persist_service.py
import logging
from typing import Any, Mapping, Optional

from anki_lang.core.config_store import ConfigFileStore
from anki_lang.core.errors import PersistenceError
from anki_lang.models.card import LanguageMode
from anki_lang.models.results import DeckUpdates

__all__ = ["pending_deck_updates", "ConfigPersister"]

logger = logging.getLogger(__name__)

_DECK_KEYS = {
    LanguageMode.HINDI: "hindi_deck",
    LanguageMode.ENGLISH_CLOZE: "english_deck",
}


def pending_deck_updates(mode: LanguageMode, deck: str, file_contents: Optional[Mapping[str, Any]]) -> DeckUpdates:
    """The deck used for `mode`, if it is not what the config file already says."""
    key = _DECK_KEYS[mode]
    if (file_contents or {}).get(key) == deck:
        return DeckUpdates()
    return DeckUpdates(**{key: deck})


class ConfigPersister:
    """Writes learned deck names back to the config file."""

    def __init__(self, store: ConfigFileStore):
        self.store = store
        self.last_error: Optional[str] = None

    def persist(self, updates: DeckUpdates, was_dry_run: bool, had_success: bool) -> bool:
        """
        Returns True if the file was written.
        Skipped for dry runs, for batches without any accepted note, and when
        nothing changed. Write failures are logged and do not raise.
        """
        self.last_error = None
        if was_dry_run:
            logger.debug("Dry run: config file left untouched")
            return False
        if not had_success:
            logger.debug("No note reached Anki: config file left untouched")
            return False
        if not updates:
            return False

        try:
            self.store.update(updates.as_dict())
        except PersistenceError as e:
            self.last_error = str(e)
            logger.warning(f"Failed to save deck names to config: {e}")
            return False

        logger.info(f"Saved {', '.join(updates.as_dict())} to {self.store.path}")
        return True
