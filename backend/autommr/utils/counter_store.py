"""
Persisted usage counters.
Tracks documents processed and the estimated minutes of typing saved.
"""
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from autommr.config import Config

logger = logging.getLogger(__name__)

PROCESSED_COUNT_KEY = 'totalProcessedMmrsAutoMMR'
MINUTES_SAVED_KEY = 'totalMinutesSavedAutoMMR'


class KeyValueStore:
    """Minimal get/set-by-key persistence."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store, lost on restart."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data = dict(initial or {})
        self.lock = Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self.lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self.lock:
            self._data[key] = value


class JsonFileStore(KeyValueStore):
    """Store backed by a small JSON file, rewritten on every set."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or Config.COUNTERS_FILE)
        self.lock = Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read counters file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        with self.lock:
            return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self.lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(self.path)


def _as_int(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


class UsageCounters:
    """
    Documents processed and minutes saved.

    Values are read from the store at startup and written back on every
    update.
    """

    def __init__(self, store: KeyValueStore, minutes_per_page: Optional[int] = None):
        self.store = store
        self.minutes_per_page = minutes_per_page if minutes_per_page is not None else Config.MINUTES_SAVED_PER_PAGE
        self.lock = Lock()
        self.documents_processed = _as_int(store.get(PROCESSED_COUNT_KEY, 0))
        self.minutes_saved = _as_int(store.get(MINUTES_SAVED_KEY, 0))
        logger.info(
            f"Usage counters loaded: {self.documents_processed} document(s), "
            f"{self.minutes_saved} minute(s) saved"
        )

    def record_extraction(self, pages: int = 1) -> None:
        """Count one processed document of the given number of pages."""
        with self.lock:
            self.documents_processed += 1
            self.minutes_saved += self.minutes_per_page * max(1, pages)
            self.store.set(PROCESSED_COUNT_KEY, self.documents_processed)
            self.store.set(MINUTES_SAVED_KEY, self.minutes_saved)

    def get_stats(self) -> Dict[str, int]:
        with self.lock:
            return {
                'documents_processed': self.documents_processed,
                'minutes_saved': self.minutes_saved,
            }
