"""Submission flow: build, correlate, persist, then commit.

The service owns the lot tracker for its lifetime. The tracker is only
updated once the persistence collaborator has accepted the record.
Submissions for the same lot are serialized end to end, and a submission
holds its unit's lock until the unit has been reset.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from bakeline.core.events import EventBus, LotTransitionRecordedEvent, RecordSubmittedEvent
from bakeline.core.exceptions import NothingToSubmitError
from bakeline.core.records.builder import RecordBuilder
from bakeline.core.records.lot_tracker import LotTransitionTracker
from bakeline.core.records.models import ProcessRecord
from bakeline.core.records.units import UnitOfWork
from bakeline.core.timing.clock import Clock

logger = structlog.get_logger(__name__)

# Stores a record payload and returns the id it was assigned
RecordPersister = Callable[[dict[str, Any]], Awaitable[int]]


@dataclass(frozen=True)
class SubmissionResult:
    record_id: int
    record: ProcessRecord


class SubmissionService:
    """Turns a finished unit-of-work into a persisted, lot-correlated record.

    Example:
        >>> service = SubmissionService(LotTransitionTracker(), RecordBuilder())
        >>> result = await service.submit(unit, shift, form, env, persist=repo_persist)
        >>> result.record.transition
    """

    def __init__(
        self,
        tracker: LotTransitionTracker,
        builder: RecordBuilder,
        event_bus: EventBus | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.tracker = tracker
        self.builder = builder
        self.clock = clock or builder.clock
        self._event_bus = event_bus
        self._lot_locks: dict[str, asyncio.Lock] = {}

    def _lot_lock(self, lot_id: str) -> asyncio.Lock:
        if lot_id not in self._lot_locks:
            self._lot_locks[lot_id] = asyncio.Lock()
        return self._lot_locks[lot_id]

    def build(
        self,
        unit: UnitOfWork,
        shift: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
        env: Mapping[str, Any] | None = None,
        submitted_at: int | None = None,
    ) -> ProcessRecord:
        """Build the record for a unit without touching the tracker."""
        if unit.coordinator is not None:
            return self.builder.build_staged(
                unit.panel, unit.coordinator, shift, form, env, submitted_at=submitted_at
            )
        return self.builder.build_single(
            unit.panel, unit.unit_id, unit.timer, shift, form, env, submitted_at=submitted_at
        )

    async def submit(
        self,
        unit: UnitOfWork,
        shift: Mapping[str, Any] | None,
        form: Mapping[str, Any] | None,
        env: Mapping[str, Any] | None,
        persist: RecordPersister,
    ) -> SubmissionResult:
        """Submit a unit-of-work.

        On success the tracker records the completion, the unit is reset
        for its next cycle and events are published. If ``persist`` raises,
        the tracker and the unit are left as they were and the error
        propagates.

        Raises:
            NothingToSubmitError: If the unit has not been started since
                its last submission
        """
        async with unit.lock:
            if not unit.has_started:
                raise NothingToSubmitError(f"Unit {unit.unit_id!r} has nothing to submit")
            record = self.build(unit, shift, form, env, submitted_at=self.clock())
            if record.lot_id is None:
                record_id = await persist(record.to_dict())
            else:
                async with self._lot_lock(record.lot_id):
                    record = record.with_transition(self.tracker.resolve_transition(record))
                    record_id = await persist(record.to_dict())
                    self.tracker.record_completion(record)
            unit.complete()

        logger.info(
            "record_submitted",
            record_id=record_id,
            panel=record.panel.value,
            unit=record.unit,
            lot_id=record.lot_id,
            duration_ms=record.timing.duration_ms,
        )
        await self._publish(record_id, record)
        return SubmissionResult(record_id=record_id, record=record)

    async def _publish(self, record_id: int, record: ProcessRecord) -> None:
        if self._event_bus is None:
            return
        overall = record.totals.overall_ms if record.totals else record.timing.duration_ms
        await self._event_bus.publish(
            RecordSubmittedEvent(
                record_id=record_id,
                panel=record.panel.value,
                unit=record.unit,
                lot_id=record.lot_id,
                duration_ms=record.timing.duration_ms,
                overall_ms=overall,
            )
        )
        if record.transition is not None:
            await self._event_bus.publish(
                LotTransitionRecordedEvent(
                    lot_id=record.transition.lot_id,
                    from_panel=record.transition.from_panel.value,
                    to_panel=record.transition.to_panel.value,
                    delta_ms=record.transition.delta_ms,
                )
            )
