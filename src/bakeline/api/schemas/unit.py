"""Pydantic schemas for the live unit timing endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from bakeline.api.schemas.common import CamelModel
from bakeline.core.records import UnitOfWork
from bakeline.core.timing import Stage, ms_to_iso


class StageResponse(CamelModel):
    stage_id: str
    ordinal: int
    status: str
    start_at: str
    end_at: str
    duration_ms: int

    @classmethod
    def from_stage(cls, stage: Stage) -> "StageResponse":
        return cls(
            stage_id=stage.stage_id,
            ordinal=stage.ordinal,
            status=stage.timer.state.value,
            start_at=ms_to_iso(stage.timer.start_at),
            end_at=ms_to_iso(stage.timer.end_at),
            duration_ms=stage.timer.duration_ms(),
        )


class TotalsResponse(CamelModel):
    machine_total_ms: int
    dead_total_ms: int
    overall_ms: int


class UnitResponse(CamelModel):
    """Live state of a unit; stage fields are only set for staged units."""

    unit_id: str
    panel: str
    status: str
    start_at: str = ""
    end_at: str = ""
    duration_ms: int
    stages: list[StageResponse] | None = None
    dead_times_ms: list[int] | None = None
    totals: TotalsResponse | None = None

    @classmethod
    def from_unit(cls, unit: UnitOfWork) -> "UnitResponse":
        if unit.coordinator is not None:
            totals = unit.coordinator.current_totals()
            return cls(
                unit_id=unit.unit_id,
                panel=unit.panel.value,
                status=unit.status,
                duration_ms=totals.machine_total_ms,
                stages=[StageResponse.from_stage(s) for s in unit.coordinator.stages],
                dead_times_ms=list(unit.coordinator.dead_times_ms),
                totals=TotalsResponse(
                    machine_total_ms=totals.machine_total_ms,
                    dead_total_ms=totals.dead_total_ms,
                    overall_ms=totals.overall_ms,
                ),
            )
        return cls(
            unit_id=unit.unit_id,
            panel=unit.panel.value,
            status=unit.status,
            start_at=ms_to_iso(unit.timer.start_at),
            end_at=ms_to_iso(unit.timer.end_at),
            duration_ms=unit.timer.duration_ms(),
        )


class StageActionResponse(CamelModel):
    """Unit state after a stage action, plus any stages finished by it."""

    unit: UnitResponse
    force_finished: list[str] = Field(default_factory=list)


class SubmitRequest(BaseModel):
    """Shift, form and environment context sent with a submission."""

    shift: dict[str, Any] = Field(default_factory=dict)
    form: dict[str, Any] = Field(default_factory=dict)
    env: dict[str, Any] = Field(default_factory=dict)


class SubmitResponse(CamelModel):
    record_id: int
    record: dict[str, Any]
    history: str
