"""Linear undo/redo history over whole-document snapshots."""

import time
from typing import Callable, List, Optional, Tuple

from tei_workbench.shared import HistoryConfig, get_logger


class HistoryLog:
    """Branch-discarding undo/redo log.

    Holds at least one snapshot at all times and a cursor pointing at the
    snapshot the document should currently display. Recording a new snapshot
    drops everything after the cursor first.

    With ``coalesce_window_ms`` set, a record arriving within the window of
    the previous one replaces that snapshot instead of adding a new entry, as
    long as nothing was undone or redone in between. With ``max_entries`` set,
    the oldest snapshots are dropped once the log grows past the limit.
    """

    def __init__(
        self,
        initial: str,
        config: Optional[HistoryConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or HistoryConfig()
        self._clock = clock
        self._snapshots: List[str] = [initial]
        self._cursor = 0
        self._last_record_at: Optional[float] = None
        self.logger = get_logger(__name__, correlation_id, "history")

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> str:
        """Snapshot the document should display."""
        return self._snapshots[self._cursor]

    @property
    def snapshots(self) -> Tuple[str, ...]:
        return tuple(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def record(self, text: str, coalesce: bool = True) -> None:
        """Append ``text`` as the newest snapshot.

        Args:
            text: Whole document after the change
            coalesce: Whether this record may merge into the previous one
        """
        now = self._clock()
        if coalesce and self._within_coalesce_window(now):
            self._snapshots[self._cursor] = text
            self._last_record_at = now
            return

        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(text)
        self._cursor = len(self._snapshots) - 1
        self._enforce_limit()
        self._last_record_at = now if coalesce else None

        self.logger.debug(
            "Snapshot recorded",
            extra={"cursor": self._cursor, "entries": len(self._snapshots)}
        )

    def undo(self) -> Optional[str]:
        """Step back one snapshot; ``None`` when already at the oldest."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        self._last_record_at = None
        return self._snapshots[self._cursor]

    def redo(self) -> Optional[str]:
        """Step forward one snapshot; ``None`` when already at the newest."""
        if not self.can_redo:
            return None
        self._cursor += 1
        self._last_record_at = None
        return self._snapshots[self._cursor]

    def reset(self, initial: str) -> None:
        """Discard all history and start over from ``initial``."""
        self._snapshots = [initial]
        self._cursor = 0
        self._last_record_at = None

    def _within_coalesce_window(self, now: float) -> bool:
        window_ms = self.config.coalesce_window_ms
        if window_ms <= 0 or self._last_record_at is None:
            return False
        # The seed snapshot is never overwritten
        if self._cursor == 0 or self.can_redo:
            return False
        return (now - self._last_record_at) * 1000 <= window_ms

    def _enforce_limit(self) -> None:
        limit = self.config.max_entries
        if limit is None or len(self._snapshots) <= limit:
            return
        overflow = len(self._snapshots) - limit
        del self._snapshots[:overflow]
        self._cursor -= overflow

    def __len__(self) -> int:
        return len(self._snapshots)
