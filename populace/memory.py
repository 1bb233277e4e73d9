"""
Per-agent memory store.

Every agent owns one MemoryStore holding its memory stream: episodic
(what happened), semantic (what it has learned, including reflection
insights) and procedural (how to do things) records.

Key responsibilities:
- Append immutable records stamped with the virtual clock
- Rank records by a recency/importance blend for prompt context
- Hand out copies so readers (prompts, analytics) never alias internal state

Retention is unbounded: records are never evicted.
"""

from __future__ import annotations

import heapq
from typing import Any, Dict, List, Optional

from .clock import Clock, MS_PER_DAY
from .errors import InvalidArgument
from .ids import IdFactory, SequentialIds
from .schemas import MEMORY_KINDS, MemoryRecord, clamp_score


DEFAULT_RETRIEVAL_LIMIT = 10
DEFAULT_RECENT_LIMIT = 20


def relevance_score(record: MemoryRecord, now: int) -> float:
    """Score a record as ``importance / (1 + age_in_days)``.

    A highly important but old memory can still outrank a trivial fresh one,
    while stale trivia decays toward zero.
    """

    age_in_days = max(now - record.created_at, 0) / MS_PER_DAY
    return record.importance / (1.0 + age_in_days)


class MemoryStore:
    """Typed memory records for a single agent.

    Records are kept in insertion order in one list; kind filters are
    computed on read.
    """

    def __init__(self, clock: Clock, *, id_factory: Optional[IdFactory] = None) -> None:
        """
        Args:
            clock: Shared virtual clock used for ``created_at`` and ages
            id_factory: Optional id generator (defaults to ``mem-N`` counters)
        """
        self.clock = clock
        self._id_factory = id_factory or SequentialIds("mem")
        self._records: List[MemoryRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def record(self, kind: str, content: str, importance: float) -> MemoryRecord:
        """
        Append a new memory.

        Args:
            kind: episodic, semantic or procedural
            content: Memory content (natural language)
            importance: Importance 0-10; out-of-range values are clamped

        Returns:
            The created MemoryRecord

        Raises:
            InvalidArgument: If kind is unknown or importance is NaN
        """
        if kind not in MEMORY_KINDS:
            raise InvalidArgument(
                f"Unknown memory kind '{kind}' (expected one of {', '.join(MEMORY_KINDS)})"
            )

        memory = MemoryRecord(
            id=self._id_factory(),
            kind=kind,
            content=content,
            created_at=self.clock.now(),
            importance=clamp_score(importance),
            sequence=len(self._records),
        )
        self._records.append(memory)
        return memory

    def retrieve_relevant(self, query_context: Any = None, k: int = DEFAULT_RETRIEVAL_LIMIT) -> List[MemoryRecord]:
        """
        Return the top-``k`` memories by recency/importance score.

        Ordering is score descending, then newer ``created_at``, then earlier
        insertion. ``query_context`` is accepted for interface parity with
        semantic retrievers but does not influence ranking; semantic matching
        belongs to the oracle.

        Args:
            query_context: Conversation/query text (unused for ranking)
            k: Maximum number of records

        Returns:
            Ranked list of MemoryRecord
        """
        if k <= 0 or not self._records:
            return []

        now = self.clock.now()
        return heapq.nsmallest(
            k,
            self._records,
            key=lambda record: (-relevance_score(record, now), -record.created_at, record.sequence),
        )

    def recent(self, kind: Optional[str] = None, limit: int = DEFAULT_RECENT_LIMIT) -> List[MemoryRecord]:
        """Newest-first slice of the stream, optionally restricted to one kind."""
        if limit <= 0:
            return []
        source = self._records if kind is None else self.by_kind(kind)
        newest_first = sorted(
            source, key=lambda record: (record.created_at, record.sequence), reverse=True
        )
        return newest_first[:limit]

    def all(self) -> List[MemoryRecord]:
        """All records in insertion order (copy)."""
        return list(self._records)

    def by_kind(self, kind: str) -> List[MemoryRecord]:
        """Records of one kind in insertion order (copy).

        Raises:
            InvalidArgument: If kind is unknown
        """
        if kind not in MEMORY_KINDS:
            raise InvalidArgument(f"Unknown memory kind '{kind}'")
        return [record for record in self._records if record.kind == kind]

    def counts(self) -> Dict[str, int]:
        """Number of stored records per kind."""
        totals = {kind: 0 for kind in MEMORY_KINDS}
        for record in self._records:
            totals[record.kind] += 1
        return totals


__all__ = ["MemoryStore", "relevance_score", "DEFAULT_RETRIEVAL_LIMIT", "DEFAULT_RECENT_LIMIT"]
