"""Cross-station lot transition tracking.

The tracker remembers, per lot, when the lot last completed at each
station. When the lot shows up at the next station in the line, the gap
between leaving the upstream station and starting downstream is the
transition delta.

Thread Safety:
    Updates are serialized per lot id. Different lots use independent
    locks and never contend.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from bakeline.core.records.models import (
    COMPLETION_KEYS,
    ProcessRecord,
    Transition,
    previous_panel,
)
from bakeline.core.timing.clock import format_duration, iso_to_ms

logger = structlog.get_logger(__name__)


class LotTransitionTracker:
    """Keyed store of per-panel completion timestamps for each lot.

    Entries are never evicted here; the owning service decides their
    lifetime.

    Example:
        >>> tracker = LotTransitionTracker()
        >>> record = tracker.attach(mixing_record)    # no transition yet
        >>> record = tracker.attach(bench_record)     # transition from mixers
        >>> record.transition.delta_ms
        300000
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, str]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _get_lock(self, lot_id: str) -> threading.Lock:
        with self._registry_lock:
            if lot_id not in self._locks:
                self._locks[lot_id] = threading.Lock()
            return self._locks[lot_id]

    @contextmanager
    def locked(self, lot_id: str) -> Iterator[None]:
        """Hold the lock for one lot."""
        lock = self._get_lock(lot_id)
        with lock:
            yield

    def entry(self, lot_id: str) -> dict[str, str]:
        """Snapshot of the completion timestamps known for a lot."""
        with self.locked(lot_id):
            return dict(self._entries.get(lot_id, {}))

    def __contains__(self, lot_id: object) -> bool:
        return lot_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve_transition(self, record: ProcessRecord) -> Transition | None:
        """Compute the transition for a record without recording it.

        Returns None when the record has no lot, its panel has no upstream
        station, the lot was never seen upstream, or the record has no start.
        """
        if not record.lot_id:
            return None
        with self.locked(record.lot_id):
            return self._resolve(record)

    def record_completion(self, record: ProcessRecord) -> None:
        """Store the record's end as its panel's completion for the lot."""
        if not record.lot_id:
            return
        with self.locked(record.lot_id):
            self._store(record)

    def attach(self, record: ProcessRecord) -> ProcessRecord:
        """Resolve the transition and record the completion atomically.

        Returns:
            The record, with ``transition`` set when one applies. Records
            without a lot id are returned unchanged and leave the tracker
            untouched.
        """
        if not record.lot_id:
            return record
        with self.locked(record.lot_id):
            transition = self._resolve(record)
            self._store(record)
        if transition is None:
            return record
        return record.with_transition(transition)

    def _resolve(self, record: ProcessRecord) -> Transition | None:
        upstream = previous_panel(record.panel)
        if upstream is None:
            return None
        entry = self._entries.get(record.lot_id, {})
        from_end = entry.get(COMPLETION_KEYS[upstream])
        start_ms = iso_to_ms(record.timing.start)
        from_end_ms = iso_to_ms(from_end)
        if from_end_ms is None or start_ms is None:
            return None
        delta_ms = start_ms - from_end_ms
        if delta_ms < 0:
            logger.warning(
                "negative_lot_transition",
                lot_id=record.lot_id,
                from_panel=upstream.value,
                to_panel=record.panel.value,
                delta_ms=delta_ms,
            )
        return Transition(
            from_panel=upstream,
            to_panel=record.panel,
            from_end=from_end,
            delta_ms=delta_ms,
            delta=format_duration(max(0, delta_ms)),
            lot_id=record.lot_id,
        )

    def _store(self, record: ProcessRecord) -> None:
        if not record.timing.end:
            return
        entry = self._entries.setdefault(record.lot_id, {})
        entry[COMPLETION_KEYS[record.panel]] = record.timing.end
        logger.debug(
            "lot_completion_recorded",
            lot_id=record.lot_id,
            panel=record.panel.value,
            end=record.timing.end,
        )
