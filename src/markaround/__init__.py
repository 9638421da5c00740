"""Markaround - review markdown with CriticMarkup tracked changes.

Render additions, deletions, substitutions, comments and highlights as
resolvable spans, and turn ordinary typing into suggestions.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


def _setup_logging() -> None:
    """Configure logging to both console and rotating file."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"markaround.{os.getpid()}.log"

    # Root logger config
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the Markaround editor application."""
    from nicegui import ui

    from markaround.config import get_settings

    _setup_logging()

    import markaround.pages  # noqa: F401 - registers routes

    settings = get_settings()
    port = settings.app.port
    storage_secret = settings.app.storage_secret.get_secret_value()

    print(f"Markaround v{__version__}")
    print(f"Starting application on http://0.0.0.0:{port}")

    reload = os.environ.get("MARKAROUND_RELOAD", "1" if settings.app.reload else "0")
    ui.run(
        host="0.0.0.0",  # nosec B104
        port=port,
        title="Markaround",
        reload=reload != "0",
        storage_secret=storage_secret,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
