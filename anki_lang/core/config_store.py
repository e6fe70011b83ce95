# Path: anki_lang/core/config_store.py
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping

import tomlkit
from tomlkit.exceptions import TOMLKitError

from anki_lang.core.errors import ConfigError, PersistenceError

__all__ = ["ConfigFileStore", "PERSISTABLE_KEYS"]

logger = logging.getLogger(__name__)

# The only keys the tool ever writes back
PERSISTABLE_KEYS = ("hindi_deck", "english_deck")


class ConfigFileStore:
    """
    The TOML config file: read as a plain dict, updated in place on write.

    `explicit` marks a path given with --config: it must exist.
    """

    def __init__(self, path: Path, explicit: bool = False):
        self.path = Path(path).expanduser()
        self.explicit = explicit

    def load(self) -> Dict[str, Any]:
        """Read the file layer. A missing default file is an empty layer."""
        if not self.path.exists():
            if self.explicit:
                raise ConfigError(f"config path {self.path} does not exist")
            logger.debug(f"No config file at {self.path}, using other layers only")
            return {}

        try:
            with open(self.path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"failed to parse config file at {self.path}: {e}")
        except OSError as e:
            raise ConfigError(f"failed to read config file at {self.path}: {e}")

        logger.debug(f"Loaded config file {self.path} ({len(data)} keys)")
        return data

    def update(self, values: Mapping[str, str]) -> None:
        """
        Write `values` into the file, leaving every other key, comment and
        table untouched. Creates the file and its directory if needed.

        Raises:
            PersistenceError: the file could not be parsed or written.
        """
        unknown = set(values) - set(PERSISTABLE_KEYS)
        if unknown:
            raise PersistenceError(f"refusing to write non-persistable keys: {sorted(unknown)}")

        try:
            if self.path.exists():
                document = tomlkit.parse(self.path.read_text(encoding="utf-8"))
            else:
                document = tomlkit.document()

            for key, value in values.items():
                document[key] = value

            text = tomlkit.dumps(document)
            self._write_atomic(text)
        except (OSError, TOMLKitError) as e:
            raise PersistenceError(f"failed to write config file {self.path}: {e}") from e

        for key, value in values.items():
            logger.debug(f"Saved {key} = {value!r} to {self.path}")

    def _write_atomic(self, text: str) -> None:
        """Temp file + rename, so a failed write leaves the old file intact."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except OSError:
            if tmp.exists():
                try:
                    tmp.unlink()
                except OSError:
                    logger.debug(f"Could not remove temporary file {tmp}")
            raise
