"""
User timeline construction.

Records are grouped by resolved user id and sorted by timestamp. The sort is
stable, so records with equal timestamps keep the order they were logged in.
Records whose time could not be parsed are moved to the end of the timeline.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from validation.records import RawRecord


@dataclass(frozen=True)
class TimelineEntry:
    event_name: Optional[str]
    timestamp: float
    record: RawRecord


@dataclass(frozen=True)
class UserTimeline:
    user_id: str
    entries: Tuple[TimelineEntry, ...]  # sorted
    arrival: Tuple[TimelineEntry, ...]  # as logged

    @property
    def event_names(self) -> List[Optional[str]]:
        return [e.event_name for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


def _sort_key(entry: TimelineEntry) -> Tuple[int, float]:
    if math.isnan(entry.timestamp):
        return (1, 0.0)
    return (0, entry.timestamp)


def build_timelines(records: Iterable[RawRecord]) -> Dict[str, UserTimeline]:
    """
    Group records by user, preserving the order in which users first appear.

    Records without a user id are left out.
    """
    grouped: Dict[str, List[TimelineEntry]] = {}
    for record in records:
        if record.user_id is None:
            continue
        entry = TimelineEntry(record.event_name, record.timestamp, record)
        grouped.setdefault(record.user_id, []).append(entry)

    return {
        user_id: UserTimeline(
            user_id=user_id,
            entries=tuple(sorted(entries, key=_sort_key)),
            arrival=tuple(entries),
        )
        for user_id, entries in grouped.items()
    }
