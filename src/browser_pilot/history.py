# history.py
# Append-only step transcript, replayed into every prompt.
#
# Compaction is pluggable. The default policy keeps everything, so the log
# grows without bound until a real policy is supplied.

from typing import Iterator, Protocol, Sequence

from browser_pilot.models import HistoryRecord


class CompactionPolicy(Protocol):
    def compact(self, records: Sequence[HistoryRecord]) -> Sequence[HistoryRecord]:
        """Return the surviving records, oldest first."""
        ...


class NoCompaction:
    def compact(self, records: Sequence[HistoryRecord]) -> Sequence[HistoryRecord]:
        return records


class KeepLatest:
    """Evict the oldest records beyond `limit`."""

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError("limit must be non-negative.")
        self._limit = limit

    def compact(self, records: Sequence[HistoryRecord]) -> Sequence[HistoryRecord]:
        if len(records) <= self._limit:
            return records
        return records[len(records) - self._limit:]


class HistoryLog:
    def __init__(self, policy: CompactionPolicy | None = None) -> None:
        self._records: list[HistoryRecord] = []
        self._policy: CompactionPolicy = policy or NoCompaction()

    def append(self, record: HistoryRecord) -> None:
        self._records.append(record)

    def purge(self) -> int:
        """Apply the compaction policy. Returns the number of records evicted."""
        before = len(self._records)
        self._records = list(self._policy.compact(list(self._records)))
        return before - len(self._records)

    @property
    def records(self) -> tuple[HistoryRecord, ...]:
        return tuple(self._records)

    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
