"""Assembly of finished units-of-work into ProcessRecords.

The builder reads timer state but never mutates it: finishing or resetting
a unit after a successful submission is the caller's job.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from bakeline.core.records.models import (
    Panel,
    ProcessRecord,
    StageTiming,
    Timing,
    Totals,
)
from bakeline.core.timing.clock import Clock, format_duration, ms_to_iso, system_clock
from bakeline.core.timing.stages import StageCoordinator
from bakeline.core.timing.timer import Timer

LOT_FORM_FIELDS = ("lote", "lote1", "lote2", "lote3")
LOT_SHIFT_FIELD = "dailyLot"


def _first_text(values: list[Any]) -> str | None:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def resolve_lot_id(
    form: Mapping[str, Any] | None, shift: Mapping[str, Any] | None
) -> str | None:
    """Resolve the lot a submission belongs to.

    Tries form fields ``lote``, ``lote1``, ``lote2``, ``lote3`` and then the
    shift's ``dailyLot``; the first non-blank value wins.

    Returns:
        The trimmed lot id, or None when the record is untracked
    """
    form = form or {}
    shift = shift or {}
    candidates = [form.get(name) for name in LOT_FORM_FIELDS]
    candidates.append(shift.get(LOT_SHIFT_FIELD))
    return _first_text(candidates)


def default_daily_lot(shift_date: date) -> str:
    """Daily lot code proposed for a shift, e.g. ``LD-20260118``."""
    return f"LD-{shift_date:%Y%m%d}"


class RecordBuilder:
    """Builds ProcessRecords from timer output plus shift/form context."""

    def __init__(self, clock: Clock = system_clock) -> None:
        self.clock = clock

    def _context(
        self,
        shift: Mapping[str, Any] | None,
        form: Mapping[str, Any] | None,
        env: Mapping[str, Any] | None,
        copy_product_to_slot: bool,
    ) -> tuple[dict[str, Any], dict[str, Any], dict[str, Any]]:
        shift_data = dict(shift or {})
        form_data = dict(form or {})
        product = shift_data.get("producto")
        if product:
            if not form_data.get("producto"):
                form_data["producto"] = product
            if copy_product_to_slot and not form_data.get("producto1"):
                form_data["producto1"] = product
        return shift_data, form_data, dict(env or {})

    def build_single(
        self,
        panel: Panel,
        unit: str,
        timer: Timer,
        shift: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
        env: Mapping[str, Any] | None = None,
        submitted_at: int | None = None,
    ) -> ProcessRecord:
        """Build a record for a single-timer unit.

        A timer still running is reported as if finished now; its own state
        is left untouched. ``submitted_at`` (epoch ms) becomes the record's
        ``timestamp``; without it the timestamp is empty.
        """
        now = self.clock()
        shift_data, form_data, env_data = self._context(shift, form, env, True)
        end_at = timer.end_at if timer.end_at is not None else now
        timing = Timing(
            start=ms_to_iso(timer.start_at),
            end=ms_to_iso(end_at),
            duration_ms=timer.duration_ms(),
        )
        return ProcessRecord(
            panel=panel,
            unit=unit,
            timestamp=ms_to_iso(submitted_at),
            timing=timing,
            lot_id=resolve_lot_id(form_data, shift_data),
            shift=shift_data,
            form=form_data,
            env=env_data,
        )

    def build_staged(
        self,
        panel: Panel,
        coordinator: StageCoordinator,
        shift: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
        env: Mapping[str, Any] | None = None,
        submitted_at: int | None = None,
    ) -> ProcessRecord:
        """Build a record for a multi-stage unit from its coordinator."""
        shift_data, form_data, env_data = self._context(shift, form, env, False)
        stages = tuple(
            StageTiming(
                stage_id=stage.stage_id,
                start=ms_to_iso(stage.timer.start_at),
                end=ms_to_iso(stage.timer.end_at),
                duration_ms=stage.timer.duration_ms(),
            )
            for stage in coordinator.stages
        )
        start = next((stage.start for stage in stages if stage.start), "")
        end = next((stage.end for stage in reversed(stages) if stage.end), "")
        machine_total = sum(stage.duration_ms for stage in stages)
        dead_times = tuple(coordinator.dead_times_ms)
        dead_total = sum(dead_times)
        return ProcessRecord(
            panel=panel,
            unit=coordinator.unit_id,
            timestamp=ms_to_iso(submitted_at),
            timing=Timing(start=start, end=end, duration_ms=machine_total),
            lot_id=resolve_lot_id(form_data, shift_data),
            shift=shift_data,
            form=form_data,
            env=env_data,
            stages=stages,
            dead_times_ms=dead_times,
            totals=Totals(machine_total, dead_total, machine_total + dead_total),
        )


def format_history_entry(record: ProcessRecord) -> str:
    """One-line operator history summary of a submitted record.

    Example output:
        ``MIXERS · mixer-1 · Canilla · 06:00:00 - 06:20:00 (00:20:00) · Δ 00:05:00``
    """
    timing = record.timing
    start = timing.start[11:19] if timing.start else "sin inicio"
    end = timing.end[11:19] if timing.end else "sin fin"
    duration = format_duration(timing.duration_ms)
    form = record.form
    oven_label = " / ".join(
        str(form[key]) for key in ("producto1", "producto2", "producto3") if form.get(key)
    )
    label = (
        form.get("producto")
        or record.shift.get("producto")
        or oven_label
        or form.get("tipoMasa")
        or next((form[key] for key in LOT_FORM_FIELDS if form.get(key)), None)
        or "Sin etiqueta"
    )
    line = f"{record.panel.value.upper()} · {record.unit} · {label} · {start} - {end} ({duration})"
    if record.transition is not None:
        line = f"{line} · Δ {record.transition.delta}"
    return line
