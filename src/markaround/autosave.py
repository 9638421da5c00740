"""Periodic local autosave of the document under review.

Every ``interval_seconds`` the manager writes ``{source, timestamp}`` for
the open document to a key-value store, but only if the document changed
since the last write. On load the host calls ``check()`` to offer a restore,
and ``clear()`` once the user has downloaded the file.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from markaround.config import AutosaveConfig

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "document.md"


class AutosaveRecord(BaseModel):
    """A saved snapshot of one document."""

    source: str
    timestamp: datetime


class KeyValueStore(Protocol):
    """String key-value persistence (get/set/remove by key)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store; nothing survives a restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class JsonFileStore:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class AutosaveManager:
    """Writes the current document to a store on a fixed interval when dirty.

    Attributes:
        interval_seconds: Delay between save attempts (override in tests).
        prefix: Prepended to the file name to form the store key.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        interval_seconds: float = 3.0,
        prefix: str = "markaround-autosave-",
    ) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self.prefix = prefix
        self._task: asyncio.Task[None] | None = None
        self._dirty = False
        self._key: str | None = None
        self._source_fn: Callable[[], str] | None = None

    @classmethod
    def from_config(cls, config: AutosaveConfig) -> AutosaveManager:
        """Build a file-backed manager from ``AutosaveConfig``."""
        return cls(
            JsonFileStore(config.directory),
            interval_seconds=config.interval_seconds,
            prefix=config.key_prefix,
        )

    def key_for(self, file_name: str | None) -> str:
        """Store key for a document name."""
        return self.prefix + (file_name or DEFAULT_FILE_NAME)

    @property
    def dirty(self) -> bool:
        """True if the document changed since the last save."""
        return self._dirty

    @property
    def running(self) -> bool:
        """True while the periodic save task is alive."""
        return self._task is not None and not self._task.done()

    def start(self, file_name: str | None, source_fn: Callable[[], str]) -> None:
        """Begin periodic saving of ``source_fn()`` under ``file_name``.

        Must be called from a running event loop. Restarts cleanly if already
        running for another document.
        """
        self.stop()
        self._key = self.key_for(file_name)
        self._source_fn = source_fn
        self._dirty = False
        self._task = asyncio.create_task(self._run())

    def mark_dirty(self) -> None:
        """Flag the document as changed since the last save."""
        self._dirty = True

    def stop(self) -> None:
        """Cancel periodic saving and forget the current document."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._dirty = False
        self._key = None
        self._source_fn = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.flush()

    def flush(self) -> bool:
        """Save now if dirty. Returns True if a snapshot was written."""
        if not self._dirty or self._source_fn is None or self._key is None:
            return False
        written = False
        source = self._source_fn()
        if source:
            record = AutosaveRecord(source=source, timestamp=datetime.now(UTC))
            try:
                self.store.set(self._key, record.model_dump_json())
                written = True
            except OSError:
                logger.exception("Autosave to %s failed", self._key)
        self._dirty = False
        return written

    def check(self, file_name: str | None) -> AutosaveRecord | None:
        """Return the saved snapshot for ``file_name``, if a usable one exists."""
        raw = self.store.get(self.key_for(file_name))
        if not raw:
            return None
        try:
            record = AutosaveRecord.model_validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable autosave for %s", file_name)
            return None
        return record if record.source else None

    def clear(self, file_name: str | None) -> None:
        """Drop the saved snapshot for ``file_name``."""
        self.store.remove(self.key_for(file_name))
