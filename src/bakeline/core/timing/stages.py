"""Coordination of the ordered stages of one multi-stage unit.

A multi-stage unit (a mixer with several kneading stages, for example)
models one physical machine: only one of its stages may run at a time.
The coordinator enforces that rule and keeps the derived dead-time series
and totals current after every transition.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from bakeline.core.exceptions import UnknownStageError
from bakeline.core.timing.clock import Clock, system_clock
from bakeline.core.timing.timer import Timer

logger = structlog.get_logger(__name__)


class GroupStatus(str, Enum):
    """Aggregate status of a stage group."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


@dataclass
class Stage:
    """A timer with a fixed identity and position within its group."""

    stage_id: str
    ordinal: int
    timer: Timer


@dataclass(frozen=True)
class StageTotals:
    """Aggregate times for a stage group, in milliseconds.

    Attributes:
        machine_total_ms: Sum of stage durations (live or final)
        dead_total_ms: Sum of inter-stage dead times
        overall_ms: machine_total_ms + dead_total_ms
    """

    machine_total_ms: int
    dead_total_ms: int
    overall_ms: int


class StageCoordinator:
    """Orchestrates the ordered stages of one unit-of-work.

    Example:
        >>> coordinator = StageCoordinator("mixer-1", ["kneading-1", "kneading-2"])
        >>> coordinator.activate("kneading-1")
        []
        >>> finished = coordinator.activate("kneading-2")
        >>> [stage.stage_id for stage in finished]
        ['kneading-1']
    """

    def __init__(
        self,
        unit_id: str,
        stage_ids: list[str],
        clock: Clock = system_clock,
    ) -> None:
        self.unit_id = unit_id
        self._clock = clock
        self.stages: list[Stage] = [
            Stage(stage_id=stage_id, ordinal=index, timer=Timer(clock=clock))
            for index, stage_id in enumerate(stage_ids)
        ]
        self.dead_times_ms: list[int] = [0] * max(len(self.stages) - 1, 0)
        self.totals = StageTotals(0, 0, 0)
        self._recalculate()

    def get_stage(self, stage_id: str) -> Stage:
        for stage in self.stages:
            if stage.stage_id == stage_id:
                return stage
        raise UnknownStageError(f"Unit {self.unit_id} has no stage {stage_id!r}")

    def activate(self, stage_id: str) -> list[Stage]:
        """Start a stage, finishing any other running stage first.

        Postcondition: ``stage_id`` is running and every other stage of the
        group that was running is now complete.

        Args:
            stage_id: Stage to start or resume

        Returns:
            The stages that were force-finished, in group order

        Raises:
            UnknownStageError: If the group has no such stage
        """
        target = self.get_stage(stage_id)
        finished: list[Stage] = []
        for stage in self.stages:
            if stage is not target and stage.timer.running:
                stage.timer.finish()
                finished.append(stage)
                logger.info(
                    "stage_force_finished",
                    unit=self.unit_id,
                    stage=stage.stage_id,
                    activated=stage_id,
                )
        target.timer.start()
        self._recalculate()
        return finished

    def pause(self, stage_id: str) -> None:
        self.get_stage(stage_id).timer.pause()
        self._recalculate()

    def finish(self, stage_id: str) -> None:
        self.get_stage(stage_id).timer.finish()
        self._recalculate()

    def reset_stage(self, stage_id: str) -> None:
        self.get_stage(stage_id).timer.reset()
        self._recalculate()

    def reset(self) -> None:
        """Reset every stage to idle and zero the dead-time series."""
        for stage in self.stages:
            stage.timer.reset()
        self._recalculate()

    @property
    def status(self) -> GroupStatus:
        if any(stage.timer.running for stage in self.stages):
            return GroupStatus.RUNNING
        if self.stages and all(stage.timer.end_at is not None for stage in self.stages):
            return GroupStatus.COMPLETE
        return GroupStatus.IDLE

    def current_totals(self) -> StageTotals:
        """Totals with live durations for any running stage."""
        machine_total = sum(stage.timer.duration_ms() for stage in self.stages)
        dead_total = sum(self.dead_times_ms)
        return StageTotals(machine_total, dead_total, machine_total + dead_total)

    def _recalculate(self) -> None:
        # Full recompute so out-of-order resets leave no stale gaps
        dead_times: list[int] = []
        for previous, current in zip(self.stages, self.stages[1:]):
            start_at = current.timer.start_at
            end_at = previous.timer.end_at
            if start_at is not None and end_at is not None:
                dead_times.append(max(0, start_at - end_at))
            else:
                dead_times.append(0)
        self.dead_times_ms = dead_times
        self.totals = self.current_totals()
