import logging
from pathlib import Path

from config import CACHE_FILE, CACHE_TTL_MS
from models import CacheEntry, UsageSnapshot

log = logging.getLogger(__name__)


class SnapshotCache:
    """Single-slot JSON file holding the last live snapshot.

    Purely an optimization: read failures count as a miss and write failures
    are logged and skipped. Concurrent writers are last-writer-wins.
    """

    def __init__(self, path: Path = CACHE_FILE, ttl_ms: int = CACHE_TTL_MS):
        self.path = path
        self.ttl_ms = ttl_ms

    def load(self) -> CacheEntry | None:
        try:
            return CacheEntry.model_validate_json(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            log.debug("Ignoring unreadable cache %s: %s", self.path, exc)
            return None

    def save(self, snapshot: UsageSnapshot) -> bool:
        entry = CacheEntry(data=snapshot, timestamp=snapshot.timestamp)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(entry.model_dump_json(), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            log.debug("Cache write to %s skipped: %s", self.path, exc)
            return False
        return True

    def is_valid(self, entry: CacheEntry | None, now_ms: int) -> bool:
        if entry is None or not entry.timestamp:
            return False
        return 0 <= now_ms - entry.timestamp < self.ttl_ms
