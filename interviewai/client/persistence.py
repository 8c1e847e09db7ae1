"""
Write-through cache for the in-progress session view, keyed by a fixed slot
so a restarted client can pick up a trial where it left off.
"""
from __future__ import annotations

from pathlib import Path
from typing import Protocol

from interviewai.app.core.config import SESSION_CACHE_SLOT, settings
from interviewai.app.core.logging_config import get_logger
from interviewai.client.models import SessionView

logger = get_logger("client.persistence")


class SessionCache(Protocol):
    def save(self, view: SessionView) -> None: ...

    def load(self) -> SessionView | None: ...

    def clear(self) -> None: ...


class MemorySessionCache:
    """Process-local cache; holds the serialized form so loads never alias the live view."""

    def __init__(self, slot: str = SESSION_CACHE_SLOT):
        self.slot = slot
        self._store: dict[str, str] = {}

    def save(self, view: SessionView) -> None:
        self._store[self.slot] = view.model_dump_json()

    def load(self) -> SessionView | None:
        raw = self._store.get(self.slot)
        return SessionView.model_validate_json(raw) if raw else None

    def clear(self) -> None:
        self._store.pop(self.slot, None)


class JsonFileSessionCache:
    """One JSON file per slot under `settings.session_cache_dir`."""

    def __init__(self, directory: str | Path | None = None, slot: str = SESSION_CACHE_SLOT):
        self.directory = Path(directory or settings.session_cache_dir)
        self.slot = slot

    @property
    def path(self) -> Path:
        return self.directory / f"{self.slot}.json"

    def save(self, view: SessionView) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(view.model_dump_json(), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            logger.error("Failed to save session state: %s", e)

    def load(self) -> SessionView | None:
        if not self.path.exists():
            return None
        try:
            return SessionView.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:  # includes ValidationError and UnicodeDecodeError
            logger.warning("Discarding unreadable session state %s: %s", self.path, e)
            return None

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to clear session state: %s", e)
