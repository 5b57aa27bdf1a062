from typing import Any, Dict, List, Optional, Tuple

from srg_reports.engine.errors import ConfigurationError
from srg_reports.utils.filters import RowFilter
from srg_reports.utils.time_format import parse_timestamp

Row = Dict[str, Any]


class DedicationTracker:
    """
    Session segmentation over time-ascending rows.

    States: no active group, or a group (start, last, key).
    A row stays in the current group while the gap to the previous event
    is below max_time and, when grouping by a column, its key is unchanged.
    A closed group yields max(min_time, last - start), attached to the row
    that opened it.
    """

    def __init__(self, min_time: int, max_time: int, time_column: str = "timecreated", group_by: Optional[str] = None):
        self.min_time = min_time
        self.max_time = max_time
        self.time_column = time_column
        self.group_by = group_by

        self._first: Optional[Row] = None
        self._start = 0
        self._last = 0
        self._key: Optional[str] = None

    @property
    def active(self) -> bool:
        return self._first is not None

    def timestamp_of(self, row: Row) -> int:
        ts = parse_timestamp(row.get(self.time_column))
        if ts is None:
            raise ConfigurationError(
                f"Dedication needs a numeric '{self.time_column}', got {row.get(self.time_column)!r}"
            )
        return ts

    def _open(self, row: Row, ts: int):
        self._first = row
        self._start = self._last = ts
        self._key = RowFilter.normalize(row.get(self.group_by)) if self.group_by else None

    def close(self) -> Optional[Tuple[Row, int]]:
        """Closes the open group, if any, and returns (first_row, dedication)."""
        if self._first is None:
            return None
        closed = (self._first, max(self.min_time, self._last - self._start))
        self._first = None
        return closed

    def feed(self, row: Row) -> Optional[Tuple[Row, int]]:
        """Consumes one row. Returns the group it closed, if any."""
        ts = self.timestamp_of(row)
        if self._first is None:
            self._open(row, ts)
            return None

        same_key = not self.group_by or RowFilter.normalize(row.get(self.group_by)) == self._key
        if ts - self._last < self.max_time and same_key:
            self._last = ts
            return None

        closed = self.close()
        self._open(row, ts)
        return closed


def compute_dedication(
    rows: List[Row],
    min_time: int,
    max_time: int,
    time_column: str = "timecreated",
    group_by: Optional[str] = None,
) -> List[Tuple[Row, int]]:
    """
    Groups rows into sessions and returns one (representative_row, seconds) per session.

    Rows are stably sorted by their timestamp first and scanned in a single
    pass. The table already holds every row in memory, so the batch_size
    setting does not apply here; it only sizes join lookups.
    """
    tracker = DedicationTracker(min_time, max_time, time_column, group_by)
    ordered = sorted(rows, key=tracker.timestamp_of)

    sessions = []
    for row in ordered:
        closed = tracker.feed(row)
        if closed:
            sessions.append(closed)

    closed = tracker.close()
    if closed:
        sessions.append(closed)
    return sessions
