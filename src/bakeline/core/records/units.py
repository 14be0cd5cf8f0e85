"""Registry of the timed units on the production line.

Mixers are multi-stage units driven by a StageCoordinator; every other
panel times each unit with a single Timer.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import structlog

from bakeline.core.config import Settings
from bakeline.core.exceptions import InvalidArgumentError, UnknownUnitError
from bakeline.core.records.models import Panel
from bakeline.core.timing.clock import Clock, system_clock
from bakeline.core.timing.stages import StageCoordinator
from bakeline.core.timing.timer import Timer

logger = structlog.get_logger(__name__)

FERMENTER_PREFIX = "fermento"


@dataclass
class UnitOfWork:
    """One timed unit: exactly one of ``timer`` or ``coordinator`` is set.

    Timer and stage actions hold ``lock`` while they run, as does a
    submission from build until the unit is reset, so an operator action
    never lands between a record being stored and its unit being reset.
    """

    panel: Panel
    unit_id: str
    timer: Timer | None = None
    coordinator: StageCoordinator | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def is_staged(self) -> bool:
        return self.coordinator is not None

    @property
    def status(self) -> str:
        if self.coordinator is not None:
            return self.coordinator.status.value
        return self.timer.state.value

    @property
    def has_started(self) -> bool:
        """True once any timer of the unit has been started this cycle."""
        if self.coordinator is not None:
            return any(stage.timer.start_at is not None for stage in self.coordinator.stages)
        return self.timer.start_at is not None

    def duration_ms(self) -> int:
        if self.coordinator is not None:
            return self.coordinator.current_totals().machine_total_ms
        return self.timer.duration_ms()

    def complete(self) -> None:
        """Prepare the unit for its next cycle after a successful submission."""
        if self.coordinator is not None:
            self.coordinator.reset()
        else:
            self.timer.finish()
            self.timer.reset()


class UnitRegistry:
    """Holds every unit's live timing state for the process lifetime."""

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        self._units: dict[str, UnitOfWork] = {}

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = system_clock) -> UnitRegistry:
        registry = cls(clock=clock)
        for unit_id in settings.mixer_unit_list:
            registry.add_staged(Panel.MIXING, unit_id, settings.mixer_stage_list)
        for unit_id in settings.bench_unit_list:
            registry.add_single(Panel.BENCH_REST, unit_id)
        for unit_id in settings.fermenter_unit_list:
            registry.add_single(Panel.FERMENTATION, unit_id)
        for unit_id in settings.oven_unit_list:
            registry.add_single(Panel.BAKING, unit_id)
        return registry

    def _register(self, unit: UnitOfWork) -> UnitOfWork:
        if unit.unit_id in self._units:
            raise InvalidArgumentError(f"Unit {unit.unit_id!r} already registered")
        self._units[unit.unit_id] = unit
        logger.debug("unit_registered", unit=unit.unit_id, panel=unit.panel.value)
        return unit

    def add_single(self, panel: Panel, unit_id: str) -> UnitOfWork:
        return self._register(
            UnitOfWork(panel=panel, unit_id=unit_id, timer=Timer(clock=self._clock))
        )

    def add_staged(self, panel: Panel, unit_id: str, stage_ids: list[str]) -> UnitOfWork:
        if not stage_ids:
            raise InvalidArgumentError("A staged unit needs at least one stage")
        coordinator = StageCoordinator(unit_id, stage_ids, clock=self._clock)
        return self._register(
            UnitOfWork(panel=panel, unit_id=unit_id, coordinator=coordinator)
        )

    def add_fermenter(self) -> UnitOfWork:
        """Register the next ``fermento-N`` unit."""
        count = sum(1 for unit in self._units.values() if unit.panel == Panel.FERMENTATION)
        unit_id = f"{FERMENTER_PREFIX}-{count + 1}"
        while unit_id in self._units:
            count += 1
            unit_id = f"{FERMENTER_PREFIX}-{count + 1}"
        return self.add_single(Panel.FERMENTATION, unit_id)

    def get(self, unit_id: str) -> UnitOfWork:
        try:
            return self._units[unit_id]
        except KeyError:
            raise UnknownUnitError(f"Unit {unit_id!r} not found") from None

    def all(self, panel: Panel | None = None) -> list[UnitOfWork]:
        units = list(self._units.values())
        if panel is not None:
            units = [unit for unit in units if unit.panel == panel]
        return units
