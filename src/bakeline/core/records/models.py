"""Immutable submission records produced by the record builder.

Records serialize to JSON-ready dicts with the camelCase keys the
persistence collaborator and the front end exchange.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Panel(str, Enum):
    """Production stations, in line order."""

    MIXING = "mixers"
    BENCH_REST = "mesa"
    FERMENTATION = "fermenter"
    BAKING = "ovens"

    @classmethod
    def parse(cls, value: str | Panel | None) -> Panel | None:
        """Return the matching panel, or None for unknown values."""
        if isinstance(value, Panel):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


PANEL_SEQUENCE: tuple[Panel, ...] = (
    Panel.MIXING,
    Panel.BENCH_REST,
    Panel.FERMENTATION,
    Panel.BAKING,
)

# Lot tracker key holding each panel's last completion time
COMPLETION_KEYS: dict[Panel, str] = {
    Panel.MIXING: "mixerEnd",
    Panel.BENCH_REST: "mesaEnd",
    Panel.FERMENTATION: "fermentEnd",
    Panel.BAKING: "ovenEnd",
}


def previous_panel(panel: Panel) -> Panel | None:
    """The station that feeds ``panel``; None for the first station."""
    index = PANEL_SEQUENCE.index(panel)
    return PANEL_SEQUENCE[index - 1] if index > 0 else None


@dataclass(frozen=True)
class Timing:
    """Overall start/end (ISO strings, empty when unknown) and machine time."""

    start: str
    end: str
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "durationMs": self.duration_ms}


@dataclass(frozen=True)
class StageTiming:
    stage_id: str
    start: str
    end: str
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.stage_id,
            "start": self.start,
            "end": self.end,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class Totals:
    machine_total_ms: int
    dead_total_ms: int
    overall_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "machineTotalMs": self.machine_total_ms,
            "deadTotalMs": self.dead_total_ms,
            "overallMs": self.overall_ms,
        }


@dataclass(frozen=True)
class Transition:
    """Queue time of a lot between two consecutive stations.

    Attributes:
        from_panel: Upstream station
        to_panel: Station the lot started at
        from_end: ISO timestamp the lot left the upstream station
        delta_ms: Start at ``to_panel`` minus ``from_end``; may be negative
        delta: ``HH:MM:SS`` rendering of the delta floored at zero
        lot_id: The lot being tracked
    """

    from_panel: Panel
    to_panel: Panel
    from_end: str
    delta_ms: int
    delta: str
    lot_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_panel.value,
            "to": self.to_panel.value,
            "fromEnd": self.from_end,
            "deltaMs": self.delta_ms,
            "delta": self.delta,
            "lotId": self.lot_id,
        }


@dataclass(frozen=True)
class ProcessRecord:
    """One completed unit-of-work, ready for persistence.

    ``stages``, ``dead_times_ms`` and ``totals`` are only present for
    multi-stage units.
    """

    panel: Panel
    unit: str
    timestamp: str
    timing: Timing
    lot_id: str | None = None
    shift: dict[str, Any] = field(default_factory=dict)
    form: dict[str, Any] = field(default_factory=dict)
    env: dict[str, Any] = field(default_factory=dict)
    stages: tuple[StageTiming, ...] | None = None
    dead_times_ms: tuple[int, ...] | None = None
    totals: Totals | None = None
    transition: Transition | None = None

    @property
    def is_staged(self) -> bool:
        return self.stages is not None

    def with_transition(self, transition: Transition | None) -> ProcessRecord:
        return replace(self, transition=transition)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the outbound JSON shape."""
        payload: dict[str, Any] = {
            "panel": self.panel.value,
            "unit": self.unit,
            "timestamp": self.timestamp,
            "shift": dict(self.shift),
            "form": dict(self.form),
            "env": dict(self.env),
        }
        if self.stages is not None:
            payload["stages"] = [stage.to_dict() for stage in self.stages]
            payload["deadTimesMs"] = list(self.dead_times_ms or ())
            if self.totals is not None:
                payload["totals"] = self.totals.to_dict()
        payload["timing"] = self.timing.to_dict()
        if self.transition is not None:
            payload["transition"] = self.transition.to_dict()
        return payload
