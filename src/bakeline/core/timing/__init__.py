"""Stage timers and multi-stage coordination."""

from bakeline.core.timing.clock import (
    Clock,
    format_duration,
    iso_to_ms,
    ms_to_iso,
    system_clock,
)
from bakeline.core.timing.stages import GroupStatus, Stage, StageCoordinator, StageTotals
from bakeline.core.timing.timer import Timer, TimerState

__all__ = [
    "Clock",
    "GroupStatus",
    "Stage",
    "StageCoordinator",
    "StageTotals",
    "Timer",
    "TimerState",
    "format_duration",
    "iso_to_ms",
    "ms_to_iso",
    "system_clock",
]
