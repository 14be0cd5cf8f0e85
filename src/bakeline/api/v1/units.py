"""Live unit timing endpoints.

Operators drive each unit's timer (or, for mixers, each stage) through
these endpoints and submit the finished unit-of-work, which is persisted
through the record repository.
"""

from enum import Enum

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from bakeline.api.deps import get_record_repo, get_submission_service, get_unit_registry
from bakeline.api.schemas.unit import (
    StageActionResponse,
    SubmitRequest,
    SubmitResponse,
    UnitResponse,
)
from bakeline.core.exceptions import NothingToSubmitError, UnknownStageError, UnknownUnitError
from bakeline.core.records import (
    Panel,
    SubmissionService,
    UnitOfWork,
    UnitRegistry,
    format_history_entry,
)
from bakeline.db.repositories import RecordRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/units", tags=["units"])


class TimerAction(str, Enum):
    START = "start"
    PAUSE = "pause"
    FINISH = "finish"
    RESET = "reset"


def _get_unit(registry: UnitRegistry, unit_id: str) -> UnitOfWork:
    try:
        return registry.get(unit_id)
    except UnknownUnitError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unit {unit_id} not found",
        )


@router.get("/", response_model=list[UnitResponse])
async def list_units(
    panel: Panel | None = Query(None, description="Filter by panel"),
    registry: UnitRegistry = Depends(get_unit_registry),
) -> list[UnitResponse]:
    return [UnitResponse.from_unit(unit) for unit in registry.all(panel)]


@router.post("/fermenter", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
async def add_fermenter(
    registry: UnitRegistry = Depends(get_unit_registry),
) -> UnitResponse:
    """Register another fermentation unit."""
    unit = registry.add_fermenter()
    logger.info("fermenter_added", unit=unit.unit_id)
    return UnitResponse.from_unit(unit)


@router.get("/{unit_id}", response_model=UnitResponse)
async def get_unit(
    unit_id: str,
    registry: UnitRegistry = Depends(get_unit_registry),
) -> UnitResponse:
    return UnitResponse.from_unit(_get_unit(registry, unit_id))


@router.post("/{unit_id}/submit", response_model=SubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_unit(
    unit_id: str,
    data: SubmitRequest,
    registry: UnitRegistry = Depends(get_unit_registry),
    service: SubmissionService = Depends(get_submission_service),
    repo: RecordRepository = Depends(get_record_repo),
) -> SubmitResponse:
    """Submit a unit's finished work as a production record.

    The unit is reset for its next cycle once the record is stored.

    Raises:
        HTTPException: 404 if unit not found, 409 if it was never started
    """
    unit = _get_unit(registry, unit_id)

    async def persist(payload: dict) -> int:
        stored = await repo.create_from_payload(payload)
        await repo.session.commit()
        return stored.id

    try:
        result = await service.submit(unit, data.shift, data.form, data.env, persist=persist)
    except NothingToSubmitError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return SubmitResponse(
        record_id=result.record_id,
        record=result.record.to_dict(),
        history=format_history_entry(result.record),
    )


@router.post("/{unit_id}/{action}", response_model=UnitResponse)
async def timer_action(
    unit_id: str,
    action: TimerAction,
    registry: UnitRegistry = Depends(get_unit_registry),
) -> UnitResponse:
    """Drive a single-timer unit.

    Raises:
        HTTPException: 404 if unit not found, 409 for a staged unit
    """
    unit = _get_unit(registry, unit_id)
    if unit.timer is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Unit {unit_id} is timed per stage",
        )
    async with unit.lock:
        match action:
            case TimerAction.START:
                unit.timer.start()
            case TimerAction.PAUSE:
                unit.timer.pause()
            case TimerAction.FINISH:
                unit.timer.finish()
            case TimerAction.RESET:
                unit.timer.reset()
    return UnitResponse.from_unit(unit)


@router.post("/{unit_id}/stages/{stage_id}/{action}", response_model=StageActionResponse)
async def stage_action(
    unit_id: str,
    stage_id: str,
    action: TimerAction,
    registry: UnitRegistry = Depends(get_unit_registry),
) -> StageActionResponse:
    """Drive one stage of a staged unit.

    Starting a stage finishes whichever other stage of the unit is running;
    those stages are listed in ``forceFinished``.
    """
    unit = _get_unit(registry, unit_id)
    if unit.coordinator is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Unit {unit_id} has no stages",
        )
    coordinator = unit.coordinator
    finished: list[str] = []
    try:
        async with unit.lock:
            match action:
                case TimerAction.START:
                    finished = [s.stage_id for s in coordinator.activate(stage_id)]
                case TimerAction.PAUSE:
                    coordinator.pause(stage_id)
                case TimerAction.FINISH:
                    coordinator.finish(stage_id)
                case TimerAction.RESET:
                    coordinator.reset_stage(stage_id)
    except UnknownStageError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Stage {stage_id} not found on unit {unit_id}",
        )
    return StageActionResponse(unit=UnitResponse.from_unit(unit), force_finished=finished)
