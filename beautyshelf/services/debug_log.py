import json
import logging
import threading
from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

MAX_ENTRIES_PER_OWNER = 200


@dataclass
class DebugEntry:
    step: str
    timestamp: str
    data: Any
    success: bool = True
    error: Optional[str] = None


def _snapshot(data: Any) -> Any:
    # copy through JSON so later mutation of `data` doesn't rewrite history
    try:
        return json.loads(json.dumps(data, default=str))
    except (TypeError, ValueError):
        return str(data)


class PhotoDebugLog:
    """
    Trace of photo pipeline steps, kept separately per owner and capped at
    `max_entries` per owner (oldest dropped first). Development aid; no-op
    when disabled.
    """

    def __init__(self, enabled: bool = False, max_entries: int = MAX_ENTRIES_PER_OWNER):
        self.enabled = enabled
        self.max_entries = max_entries
        self._entries: Dict[str, Deque[DebugEntry]] = {}
        self._lock = threading.Lock()

    def log(self, owner_id: str, step: str, data: Any = None, success: bool = True,
            error: Optional[str] = None) -> None:
        if not self.enabled or not owner_id:
            return
        entry = DebugEntry(
            step=step,
            timestamp=datetime.now(timezone.utc).isoformat(),
            data=_snapshot(data),
            success=success,
            error=error,
        )
        with self._lock:
            trail = self._entries.setdefault(owner_id, deque(maxlen=self.max_entries))
            trail.append(entry)
        logger.debug("[PhotoDebug] %s %s: %s", owner_id, step, entry)

    def entries(self, owner_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [asdict(e) for e in self._entries.get(owner_id, ())]

    def clear(self, owner_id: str) -> None:
        with self._lock:
            self._entries.pop(owner_id, None)

    def export(self, owner_id: str) -> str:
        return json.dumps(self.entries(owner_id), indent=2)
