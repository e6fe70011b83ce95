# Path: anki_lang/core/logging_config.py
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from anki_lang.core.config import APP_NAME, settings

# HTTP and SDK chatter drowns the per-word progress lines
NOISY_LOGGERS = ("urllib3", "requests", "httpx", "openai")

LOG_FILE_NAME = f"{APP_NAME.replace('-', '_')}.log"


def _file_handler(log_dir: Path) -> Optional[RotatingFileHandler]:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Configure logging for one CLI run.

    - Console: RichHandler at `log_level`. With DEBUG the logger name is shown,
      so retries and AnkiConnect calls can be told apart.
    - File: every record at DEBUG, rotated at 5MB, under the app log dir.
      A log dir that cannot be written only costs the file, never the run.

    Returns the log file path, or None when logging to the console only.
    """
    log_dir = Path(log_dir or settings.LOG_DIR)
    verbose = log_level.upper() == "DEBUG"

    console_handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=verbose,
    )
    console_handler.setFormatter(logging.Formatter("[%(name)s] %(message)s" if verbose else "%(message)s"))
    console_handler.setLevel(log_level.upper())

    handlers = [console_handler]
    file_handler = _file_handler(log_dir)
    if file_handler is not None:
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if file_handler is None:
        logging.getLogger(__name__).warning(f"Cannot write logs to {log_dir}, logging to the console only")
        return None
    return log_dir / LOG_FILE_NAME
