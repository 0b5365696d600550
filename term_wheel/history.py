import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    sequence: int
    label: str

    def __str__(self) -> str:
        return f"{self.sequence}. {self.label}"


@dataclass
class History:
    """Append-only log of winners.

    Sequence numbers start at 1 and are never reused, not even after `clear()`.
    """

    entries: list[HistoryEntry] = field(default_factory=list)
    next_sequence: int = 1

    def peek(self, label: str) -> HistoryEntry:
        """The entry `record(label)` would append, without appending it."""
        return HistoryEntry(self.next_sequence, label)

    def record(self, label: str) -> HistoryEntry:
        entry: HistoryEntry = self.peek(label)
        self.entries.append(entry)
        self.next_sequence += 1
        logger.info("History: %s", entry)
        return entry

    def clear(self) -> None:
        self.entries.clear()
        logger.debug("History cleared, next sequence stays %d", self.next_sequence)

    def latest(self, count: int) -> list[HistoryEntry]:
        if count <= 0:
            return []
        return self.entries[-count:]
